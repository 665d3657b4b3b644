"""Write a recipe back as cooklang text."""

from __future__ import annotations

import enum
import re
import shutil
from dataclasses import dataclass
from io import StringIO
from typing import Iterable, Optional, TextIO

from cookshelf.model import (
    CookwareItem,
    IngredientItem,
    InlineQuantityItem,
    Modifiers,
    Quantity,
    Recipe,
    ReferenceTarget,
    Section,
    Step,
    TextItem,
    TimerItem,
)

_COMPONENT = re.compile(r"[@#~][^@#~]*\{[^\}]*\}")
_WORD = re.compile(r"[^ ]+ *| +")

_MODIFIER_CHARS = {
    Modifiers.RECIPE: "@",
    Modifiers.HIDDEN: "-",
    Modifiers.OPT: "?",
    Modifiers.REF: "&",
    Modifiers.NEW: "+",
}


class RefMode(enum.Enum):
    """How an intermediate reference counts: absolute number or relative."""

    NUMBER = "number"
    RELATIVE = "relative"


class TargetKind(enum.Enum):
    """What an intermediate reference points to."""

    STEP = "step"
    SECTION = "section"


@dataclass(frozen=True)
class IntermediateData:
    """Reference from an ingredient to the output of a step or section."""

    ref_mode: RefMode
    target_kind: TargetKind
    val: int

    def __str__(self) -> str:
        prefix = {
            (TargetKind.STEP, RefMode.NUMBER): "",
            (TargetKind.STEP, RefMode.RELATIVE): "~",
            (TargetKind.SECTION, RefMode.NUMBER): "=",
            (TargetKind.SECTION, RefMode.RELATIVE): "=~",
        }[(self.target_kind, self.ref_mode)]
        return f"{prefix}{self.val}"


def _line_width() -> int:
    return min(shutil.get_terminal_size((80, 24)).columns, 80)


def _default_words(text: str) -> list[str]:
    return _WORD.findall(text)


def component_words(line: str) -> list[str]:
    """Split a line into words, keeping each component in a single word.

    Words carry their trailing spaces, so joining them gives the line back.
    """
    words: list[str] = []
    last = 0
    for match in _COMPONENT.finditer(line):
        if last < match.start():
            words.extend(_default_words(line[last : match.start()]))
        words.append(match.group())
        last = match.end()
    if last < len(line):
        words.extend(_default_words(line[last:]))
    return words


def _wrap(
    words: Iterable[str], width: int, initial_indent: str = "", subsequent_indent: str = ""
) -> list[str]:
    """Fill words greedily into lines no wider than ``width`` where possible."""
    merged: list[list[str]] = []
    for word in words:
        text = word.rstrip(" ")
        spaces = word[len(text) :]
        if not text:
            if merged:
                merged[-1][1] += spaces
            continue
        merged.append([text, spaces])

    lines: list[str] = []
    current = initial_indent
    filled = False
    pending = ""
    for text, spaces in merged:
        if filled and len(current) + len(pending) + len(text) > width:
            lines.append(current)
            current = subsequent_indent
            filled = False
            pending = ""
        current += (pending if filled else "") + text
        filled = True
        pending = spaces
    lines.append(current)
    return lines


def _wrap_text(text: str, width: int, indent: str = "", component_aware: bool = False) -> list[str]:
    splitter = component_words if component_aware else _default_words
    lines: list[str] = []
    for paragraph in text.split("\n"):
        lines.extend(_wrap(splitter(paragraph), width, indent, indent))
    return lines


def _intermediate_data(reference: Optional[tuple[int, ReferenceTarget]]) -> Optional[IntermediateData]:
    if reference is None:
        return None
    index, target = reference
    if target is ReferenceTarget.STEP:
        return IntermediateData(RefMode.NUMBER, TargetKind.STEP, index)
    if target is ReferenceTarget.SECTION:
        return IntermediateData(RefMode.NUMBER, TargetKind.SECTION, index)
    return None


def _component(
    marker: str,
    modifiers: Modifiers,
    name: Optional[str],
    alias: Optional[str] = None,
    quantity: Optional[Quantity] = None,
    note: Optional[str] = None,
    intermediate: Optional[IntermediateData] = None,
) -> str:
    parts = [marker]
    for modifier in Modifiers:
        if modifier not in modifiers:
            continue
        parts.append(_MODIFIER_CHARS[modifier])
        if modifier is Modifiers.REF and intermediate is not None:
            parts.append(f"({intermediate})")
    multi_word = False
    if name is not None:
        if any(not c.isalnum() for c in name):
            multi_word = True
        parts.append(name)
        if alias is not None:
            multi_word = True
            parts.append(f"|{alias}")
    if quantity is not None:
        parts.append("{" + str(Quantity(quantity.value)))
        if quantity.unit is not None:
            parts.append(f"%{quantity.unit}")
        parts.append("}")
    elif multi_word:
        parts.append("{}")
    if note is not None:
        parts.append(f"({note})")
    return "".join(parts)


def _step_text(step: Step, recipe: Recipe) -> str:
    pieces: list[str] = []
    for item in step.items:
        if isinstance(item, TextItem):
            pieces.append(item.value)
        elif isinstance(item, IngredientItem):
            igr = recipe.ingredients[item.index]
            pieces.append(
                _component(
                    "@",
                    igr.modifiers,
                    igr.name,
                    igr.alias,
                    igr.quantity,
                    igr.note,
                    _intermediate_data(igr.reference),
                )
            )
        elif isinstance(item, CookwareItem):
            cw = recipe.cookware[item.index]
            quantity = None if cw.quantity is None else Quantity(cw.quantity)
            pieces.append(_component("#", cw.modifiers, cw.name, cw.alias, quantity))
        elif isinstance(item, TimerItem):
            timer = recipe.timers[item.index]
            pieces.append(_component("~", Modifiers(0), timer.name, quantity=timer.quantity))
        elif isinstance(item, InlineQuantityItem):
            q = recipe.inline_quantities[item.index]
            pieces.append(str(Quantity(q.value)) + (q.unit or ""))
    return "".join(pieces)


def _str_like(value: object) -> Optional[str]:
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, (str, int, float)):
        return str(value)
    return None


def _metadata_lines(recipe: Recipe) -> list[str]:
    lines = []
    for key, value in recipe.metadata.items():
        if not isinstance(key, str):
            continue
        text = _str_like(value)
        if text is not None:
            lines.append(f">> {key}: {text}")
    return lines


def _section_lines(section: Section, recipe: Recipe, index: int, width: int) -> list[str]:
    lines: list[str] = []
    if section.name is not None:
        lines.append(f"== {section.name} ==")
    elif index > 0:
        lines.append("====")
    for content in section.content:
        if isinstance(content, Step):
            text = _step_text(content, recipe).strip()
            lines.extend(_wrap_text(text, width, component_aware=True))
        else:
            lines.extend(_wrap_text(content.strip(), width, indent="> "))
        lines.append("")
    return lines


def format_recipe(recipe: Recipe) -> str:
    """Return the recipe as cooklang text."""
    width = _line_width()
    lines = _metadata_lines(recipe)
    lines.append("")
    for index, section in enumerate(recipe.sections):
        lines.extend(_section_lines(section, recipe, index, width))
    return "".join(line + "\n" for line in lines)


def print_cooklang(recipe: Recipe, writer: TextIO) -> None:
    """Write the recipe as cooklang text to ``writer``."""
    writer.write(format_recipe(recipe))


__all__ = [
    "IntermediateData",
    "RefMode",
    "StringIO",
    "TargetKind",
    "component_words",
    "format_recipe",
    "print_cooklang",
]