import io

import pytest

from cookshelf.cooklang_format import (
    IntermediateData,
    RefMode,
    TargetKind,
    component_words,
    format_recipe,
    print_cooklang,
)
from cookshelf.model import (
    Cookware,
    CookwareItem,
    Ingredient,
    IngredientItem,
    InlineQuantityItem,
    Modifiers,
    Quantity,
    Recipe,
    ReferenceTarget,
    Section,
    Step,
    TextItem,
    Timer,
    TimerItem,
)


def _single_step(recipe: Recipe, *items) -> str:
    recipe.sections = [Section(content=[Step(list(items))])]
    return format_recipe(recipe).splitlines()[1]


def test_ingredient_with_quantity_and_unit():
    recipe = Recipe(ingredients=[Ingredient("salt", quantity=Quantity(2, "g"))])
    assert _single_step(recipe, TextItem("Add "), IngredientItem(0)) == "Add @salt{2%g}"


def test_multi_word_ingredient_gets_braces():
    recipe = Recipe(ingredients=[Ingredient("olive oil")])
    assert _single_step(recipe, IngredientItem(0)) == "@olive oil{}"


def test_alias_and_note_and_modifiers():
    recipe = Recipe(
        ingredients=[
            Ingredient("flour", alias="f", note="sifted", modifiers=Modifiers.OPT | Modifiers.HIDDEN)
        ]
    )
    assert _single_step(recipe, IngredientItem(0)) == "@-?flour|f{}(sifted)"


@pytest.mark.parametrize(
    "target, expected",
    [
        (ReferenceTarget.STEP, "@&(1)dough"),
        (ReferenceTarget.SECTION, "@&(=1)dough"),
        (ReferenceTarget.INGREDIENT, "@&dough"),
    ],
)
def test_intermediate_references(target, expected):
    recipe = Recipe(
        ingredients=[Ingredient("dough", modifiers=Modifiers.REF, reference=(1, target))]
    )
    assert _single_step(recipe, IngredientItem(0)) == expected


def test_intermediate_data_text():
    assert str(IntermediateData(RefMode.RELATIVE, TargetKind.STEP, 2)) == "~2"
    assert str(IntermediateData(RefMode.RELATIVE, TargetKind.SECTION, 2)) == "=~2"


def test_cookware_timer_and_inline_quantity():
    recipe = Recipe(
        cookware=[Cookware("pan", quantity=2)],
        timers=[Timer(quantity=Quantity(10, "minutes"))],
        inline_quantities=[Quantity(200, "C")],
    )
    line = _single_step(
        recipe,
        CookwareItem(0),
        TextItem(" "),
        TimerItem(0),
        TextItem(" at "),
        InlineQuantityItem(0),
    )
    assert line == "#pan{2} ~{10%minutes} at 200C"


def test_named_timer_without_quantity():
    recipe = Recipe(timers=[Timer(name="rest")])
    assert _single_step(recipe, TimerItem(0)) == "~rest"


def test_metadata_sections_and_text_blocks():
    recipe = Recipe(
        metadata={"servings": 2, "title": "Bread", "tags": ["a", "b"]},
        sections=[
            Section(content=[Step([TextItem("Mix.")]), "Be patient."]),
            Section(content=[Step([TextItem("Bake.")])]),
            Section(name="Serve", content=[Step([TextItem("Eat.")])]),
        ],
    )
    assert format_recipe(recipe).splitlines() == [
        ">> servings: 2",
        ">> title: Bread",
        "",
        "Mix.",
        "",
        "> Be patient.",
        "",
        "====",
        "Bake.",
        "",
        "== Serve ==",
        "Eat.",
        "",
    ]


def test_print_cooklang_matches_format_recipe():
    recipe = Recipe(
        metadata={"source": "home"},
        ingredients=[Ingredient("egg", quantity=Quantity(3))],
        sections=[Section(content=[Step([TextItem("Beat "), IngredientItem(0)])])],
    )
    out = io.StringIO()
    print_cooklang(recipe, out)
    assert out.getvalue() == format_recipe(recipe)
    assert "Beat @egg{3}" in out.getvalue().splitlines()


def test_component_words_keep_components_whole():
    line = "add @olive oil{2%tbsp} to #big pan{} now"
    words = component_words(line)
    assert "".join(words) == line
    assert "@olive oil{2%tbsp}" in words
    assert "#big pan{}" in words


def test_long_step_wraps_without_splitting_components():
    names = [f"olive oil {n}" for n in range(12)]
    recipe = Recipe(ingredients=[Ingredient(name) for name in names])
    items = []
    for index in range(len(names)):
        items.extend([IngredientItem(index), TextItem(" ")])
    recipe.sections = [Section(content=[Step(items)])]
    lines = format_recipe(recipe).splitlines()[1:-1]
    assert len(lines) > 1
    assert all(len(line) <= 80 for line in lines)
    joined = " ".join(lines)
    for name in names:
        assert f"@{name}{{}}" in joined