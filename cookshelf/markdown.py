"""Write a recipe as Markdown.

The metadata goes to a YAML front matter. The body has the title, the tags,
the description, the ingredient and cookware lists and the steps.
"""

from __future__ import annotations

import enum
import shutil
import textwrap
from dataclasses import dataclass, field, fields
from io import StringIO
from typing import Any, Mapping, Optional, TextIO

import yaml

from cookshelf.model import (
    CookwareItem,
    IngredientItem,
    InlineQuantityItem,
    Recipe,
    Section,
    Step,
    TextItem,
    TimerItem,
)

_FRONTMATTER_FENCE = "---"


class MarkdownError(Exception):
    """Writing the Markdown or serialising its front matter failed."""


class DescriptionStyle(enum.Enum):
    """Where the description goes in the Markdown body."""

    HIDDEN = "hidden"
    BLOCKQUOTE = "blockquote"
    HEADING = "heading"

    @classmethod
    def parse(cls, value: Any) -> "DescriptionStyle":
        """Accept a style, its name, ``"default"`` or a bool."""
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            return cls.BLOCKQUOTE if value else cls.HIDDEN
        if value == "default":
            return cls.BLOCKQUOTE
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f"invalid description style: {value!r}") from None


@dataclass
class Headings:
    """Texts of the headings; ``%n`` in ``section`` becomes the section number."""

    section: str = "Section %n"
    ingredients: str = "Ingredients"
    cookware: str = "Cookware"
    steps: str = "Steps"
    description: str = "Description"


def _expect_bool(key: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise ValueError(f"option {key!r} must be a bool, got {value!r}")
    return value


def _expect_str(key: str, value: Any) -> str:
    if not isinstance(value, str):
        raise ValueError(f"option {key!r} must be a string, got {value!r}")
    return value


def _front_matter_name(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, bool):
        return "name" if value else None
    return _expect_str("front_matter_name", value)


def _headings_from_dict(data: Any) -> Headings:
    if not isinstance(data, Mapping):
        raise ValueError(f"option 'heading' must be a mapping, got {data!r}")
    names = {f.name for f in fields(Headings)}
    return Headings(
        **{key: _expect_str(f"heading.{key}", value) for key, value in data.items() if key in names}
    )


@dataclass
class Options:
    """Options of the Markdown output.

    ``front_matter_name`` is the front matter key that receives the recipe
    name, or None to leave it out.
    """

    tags: bool = True
    description: DescriptionStyle = DescriptionStyle.BLOCKQUOTE
    escape_step_numbers: bool = False
    italic_amounts: bool = True
    front_matter_name: Optional[str] = "name"
    heading: Headings = field(default_factory=Headings)
    optional_marker: str = "(optional)"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Options":
        """Build options from configuration; missing keys keep their defaults.

        ``description`` and ``front_matter_name`` also accept a bool.
        Unknown keys are ignored.
        """
        options = cls()
        for key, value in data.items():
            if key in ("tags", "escape_step_numbers", "italic_amounts"):
                setattr(options, key, _expect_bool(key, value))
            elif key == "description":
                options.description = DescriptionStyle.parse(value)
            elif key == "front_matter_name":
                options.front_matter_name = _front_matter_name(value)
            elif key == "heading":
                options.heading = _headings_from_dict(value)
            elif key == "optional_marker":
                options.optional_marker = _expect_str(key, value)
        return options

    def to_dict(self) -> dict[str, Any]:
        return {
            "tags": self.tags,
            "description": self.description.value,
            "escape_step_numbers": self.escape_step_numbers,
            "italic_amounts": self.italic_amounts,
            "front_matter_name": self.front_matter_name,
            "heading": {f.name: getattr(self.heading, f.name) for f in fields(Headings)},
            "optional_marker": self.optional_marker,
        }


def _line_width() -> int:
    return min(shutil.get_terminal_size((80, 24)).columns, 80)


def _wrapped(text: str, initial_indent: str = "", subsequent_indent: str = "") -> str:
    width = _line_width()
    lines: list[str] = []
    for paragraph in text.split("\n"):
        wrapped = textwrap.wrap(
            paragraph,
            width,
            initial_indent=initial_indent,
            subsequent_indent=subsequent_indent,
        )
        lines.extend(wrapped or [initial_indent.rstrip()])
    return "".join(line + "\n" for line in lines)


def _frontmatter(recipe: Recipe, name: str, options: Options) -> str:
    if not recipe.metadata:
        return ""
    data = dict(recipe.metadata)
    if options.front_matter_name is not None:
        data[options.front_matter_name] = name
    try:
        body = yaml.safe_dump(
            data, sort_keys=False, allow_unicode=True, default_flow_style=False
        )
    except yaml.YAMLError as error:
        raise MarkdownError("Error serializing YAML frontmatter") from error
    return f"{_FRONTMATTER_FENCE}\n{body}{_FRONTMATTER_FENCE}\n\n"


def _tags(recipe: Recipe) -> str:
    tags = recipe.tags()
    if tags is None:
        return ""
    return " ".join(f"#{tag}" for tag in tags) + "\n\n"


def _description(recipe: Recipe, options: Options) -> str:
    description = recipe.description()
    if description is None or options.description is DescriptionStyle.HIDDEN:
        return ""
    if options.description is DescriptionStyle.BLOCKQUOTE:
        return _wrapped(description, "> ", "> ") + "\n"
    return f"## {options.heading.description}\n\n" + _wrapped(description) + "\n"


def _amount(text: str, options: Options, italic_format: str) -> str:
    if options.italic_amounts:
        return italic_format.format(text)
    return f"{text} "


def _ingredients(recipe: Recipe, options: Options) -> str:
    if not recipe.ingredients:
        return ""
    out = [f"## {options.heading.ingredients}\n\n"]
    for ingredient, quantities in recipe.group_ingredients():
        if not ingredient.modifiers.should_be_listed():
            continue
        line = "- "
        if quantities:
            line += _amount(", ".join(str(q) for q in quantities), options, "*{}* ")
        line += ingredient.display_name()
        if ingredient.modifiers.is_optional():
            line += f" {options.optional_marker}"
        if ingredient.note is not None:
            line += f" ({ingredient.note})"
        out.append(line + "\n")
    out.append("\n")
    return "".join(out)


def _cookware(recipe: Recipe, options: Options) -> str:
    if not recipe.cookware:
        return ""
    out = [f"## {options.heading.cookware}\n\n"]
    for item, amounts in recipe.group_cookware():
        line = "- "
        if amounts:
            line += _amount(", ".join(str(a) for a in amounts), options, "*{} * ")
        line += item.display_name()
        if item.modifiers.is_optional():
            line += f" {options.optional_marker}"
        if item.note is not None:
            line += f" ({item.note})"
        out.append(line + "\n")
    out.append("\n")
    return "".join(out)


def _step(step: Step, recipe: Recipe, options: Options) -> str:
    pieces = [str(step.number), "\\. " if options.escape_step_numbers else ". "]
    for item in step.items:
        if isinstance(item, TextItem):
            pieces.append(item.value)
        elif isinstance(item, IngredientItem):
            pieces.append(recipe.ingredients[item.index].display_name())
        elif isinstance(item, CookwareItem):
            pieces.append(recipe.cookware[item.index].name)
        elif isinstance(item, TimerItem):
            timer = recipe.timers[item.index]
            if timer.name is not None:
                pieces.append(f"({timer.name})")
            if timer.quantity is not None:
                pieces.append(str(timer.quantity))
        elif isinstance(item, InlineQuantityItem):
            quantity = str(recipe.inline_quantities[item.index])
            pieces.append(f"*{quantity}*" if options.italic_amounts else quantity)
    return _wrapped("".join(pieces))


def _section(section: Section, recipe: Recipe, number: int, options: Options) -> str:
    out: list[str] = []
    if section.name is not None:
        out.append(f"### {section.name}\n\n")
    elif len(recipe.sections) > 1:
        title = options.heading.section.replace("%n", str(number))
        out.append(f"### {title}\n\n")
    for content in section.content:
        if isinstance(content, Step):
            out.append(_step(content, recipe, options))
        else:
            out.append(_wrapped(content))
        out.append("\n")
    return "".join(out)


def _sections(recipe: Recipe, options: Options) -> str:
    out = [f"## {options.heading.steps}\n\n"]
    for number, section in enumerate(recipe.sections, start=1):
        out.append(_section(section, recipe, number, options))
    return "".join(out)


def format_md(recipe: Recipe, name: str, options: Optional[Options] = None) -> str:
    """Return the recipe as Markdown text."""
    options = options if options is not None else Options()
    parts = [_frontmatter(recipe, name, options), f"# {name}\n\n"]
    if options.tags:
        parts.append(_tags(recipe))
    parts.append(_description(recipe, options))
    parts.append(_ingredients(recipe, options))
    parts.append(_cookware(recipe, options))
    parts.append(_sections(recipe, options))
    return "".join(parts)


def print_md_with_options(
    recipe: Recipe, name: str, options: Options, writer: TextIO
) -> None:
    """Write the recipe as Markdown to ``writer`` with the given options."""
    text = format_md(recipe, name, options)
    try:
        writer.write(text)
    except OSError as error:
        raise MarkdownError(str(error)) from error


def print_md(recipe: Recipe, name: str, writer: TextIO) -> None:
    """Write the recipe as Markdown to ``writer`` with default options."""
    print_md_with_options(recipe, name, Options(), writer)


__all__ = [
    "DescriptionStyle",
    "Headings",
    "MarkdownError",
    "Options",
    "StringIO",
    "format_md",
    "print_md",
    "print_md_with_options",
]