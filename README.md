# cookshelf

A library for working with folders of cooklang recipes:

- **Indexing** a recipe folder (`cookshelf.index`) so that a recipe can be
  found from its name or a partial path such as `"pancakes"` or
  `"breakfast/pancakes.cook"`. The index is either built eagerly or filled
  lazily, walking only as far as a lookup needs.
- **Recipe images** (`cookshelf.images`): finding `Recipe.jpg`,
  `Recipe.3.png` (step 3 of the first section) or `Recipe.1.2.webp`
  (section 1, step 2) next to a recipe file, and checking that the steps
  they point at exist.
- **Rendering** a recipe model (`cookshelf.model`) as cooklang text
  (`cookshelf.cooklang_format`) or as Markdown with a YAML front matter
  (`cookshelf.markdown`).

## Installation

```
pip install cookshelf
```

## Finding recipes

```python
from cookshelf.index import new_index, all_recipes, walk_dir

index = new_index("recipes", 5).config_dir(".cooklang").ignore("drafts").lazy()
entry = index.get("pancakes")
print(entry.path, entry.name(), entry.file_name())
print(entry.read().text())

for image in entry.images():
    print(image.path, image.indexes)

full = index.index_all()
for recipe in full.get_all():
    print(recipe.relative_name())

for recipe in all_recipes("recipes", 5):
    print(recipe.file_name(), recipe.images())
```

The walk (`cookshelf.walker.Walker`) is breadth-first, sorts each directory
by file name (files before sub-directories), skips names starting with `.`
and any name passed to `ignore`, and yields only directories, `.cook` files
and images (`jpeg`, `jpg`, `png`, `heic`, `gif`, `webp`). Sub-directories
deeper than `max_depth` are not entered. A config dir is ignored, and a
warning is logged when it is found below the top level.

Because of that order, when several recipes share a name the outermost one
wins, and among equally deep ones the first alphabetically. Lookups ignore
case and the `.cook` extension, and match the end of the path.

`resolve(recipe, relative_to=None)` first tries the query as a file path:
a path starting with `/` is taken from the base directory, otherwise it is
joined to `relative_to` when given. `..` is resolved lexically and a path
outside the base directory is refused. If that fails, it falls back to
`get`. Errors are subclasses of `FsError`: `RecipeNotFound`, `InvalidName`,
`NotRecipe` and `OutsideBase`.

A complete `FsIndex` can also be updated by hand with `insert(path)` and
`remove(path)`; the path must lie under the base path, otherwise
`ValueError` is raised.

`walk_dir(path)` lists a single directory: its sub-directories as
`DirEntry` objects and its recipes as `RecipeEntry` objects with the images
that sit next to them. It raises `FileNotFoundError` if the directory does
not exist.

## Checking images

```python
from cookshelf.images import recipe_images, check_recipe_images, RecipeImagesError

images = recipe_images("recipes/pancakes.cook")
try:
    check_recipe_images(images, recipe)
except RecipeImagesError as error:
    for problem in error.errors:  # MissingSection or MissingStep
        print(problem)
```

## Rendering

Recipes are built from the classes in `cookshelf.model`:

```python
import sys
from cookshelf.model import (
    Cookware, CookwareItem, Ingredient, IngredientItem, Quantity,
    Recipe, Section, Step, TextItem,
)
from cookshelf.cooklang_format import format_recipe, print_cooklang
from cookshelf.markdown import Options, format_md, print_md, print_md_with_options

recipe = Recipe(
    metadata={"servings": 2, "tags": "breakfast, sweet"},
    sections=[
        Section(content=[
            Step(items=[
                TextItem("Mix "),
                IngredientItem(0),
                TextItem(" in a "),
                CookwareItem(0),
                TextItem("."),
            ], number=1),
        ]),
    ],
    ingredients=[Ingredient("flour", quantity=Quantity(200, "g"))],
    cookware=[Cookware("bowl")],
)

print_cooklang(recipe, sys.stdout)
print_md(recipe, "Pancakes", sys.stdout)

options = Options.from_dict({"tags": False, "description": "heading"})
print_md_with_options(recipe, "Pancakes", options, sys.stdout)
```

`format_recipe` and `format_md` return the text instead of writing it.
Lines are wrapped to the terminal width, at most 80 columns; in cooklang
output a component is never split across lines.

Markdown options: `tags`, `description` (`"hidden"`, `"blockquote"`,
`"heading"`, or a bool), `escape_step_numbers`, `italic_amounts`,
`front_matter_name` (the front matter key for the recipe name, a bool, or
`None`), `heading` (texts for `section`, `ingredients`, `cookware`, `steps`
and `description`; `%n` in `section` becomes the section number) and
`optional_marker`. `Options.from_dict` and `Options.to_dict` load and save
them as plain dictionaries. Writing failures raise `MarkdownError`.

## What it does not do

- It does not parse cooklang text. `RecipeEntry.read()` returns the file's
  text; a `Recipe` to render has to be built with `cookshelf.model`.
- There is no command-line program; everything is used as a library.
- There is no coloured terminal output for recipes, only cooklang and
  Markdown.