"""In-memory model of a parsed recipe, as used by the formatters.

A recipe holds its metadata, the ingredients, cookware, timers and inline
quantities it mentions, and sections of steps. Steps refer to components by
their index in the recipe's lists.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Optional, Union

Number = Union[int, float]
QuantityValue = Union[int, float, str, tuple]
"""A number, a free text value, or a ``(start, end)`` range."""


class Modifiers(enum.Flag):
    """Modifiers of an ingredient or cookware item, in their written order."""

    RECIPE = enum.auto()
    REF = enum.auto()
    HIDDEN = enum.auto()
    OPT = enum.auto()
    NEW = enum.auto()

    def should_be_listed(self) -> bool:
        """Whether the component belongs in an ingredient or cookware list."""
        return not (self & (Modifiers.HIDDEN | Modifiers.REF))

    def is_optional(self) -> bool:
        return bool(self & Modifiers.OPT)


class ReferenceTarget(enum.Enum):
    """What an ingredient reference points to."""

    INGREDIENT = "ingredient"
    STEP = "step"
    SECTION = "section"


def _format_number(number: Number) -> str:
    if isinstance(number, float):
        rounded = round(number, 3)
        if rounded.is_integer():
            return str(int(rounded))
        return f"{rounded:.3f}".rstrip("0").rstrip(".")
    return str(number)


def _format_value(value: QuantityValue) -> str:
    if isinstance(value, tuple):
        start, end = value
        return f"{_format_value(start)}-{_format_value(end)}"
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, (int, float)):
        return _format_number(value)
    return str(value)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


@dataclass(frozen=True)
class Quantity:
    """A value with an optional unit."""

    value: QuantityValue
    unit: Optional[str] = None

    def __str__(self) -> str:
        text = _format_value(self.value)
        if self.unit:
            return f"{text} {self.unit}"
        return text


def _add_quantity(quantities: list[Quantity], quantity: Quantity) -> None:
    """Add to an existing quantity with the same unit, or append."""
    for position, existing in enumerate(quantities):
        if (
            existing.unit == quantity.unit
            and _is_number(existing.value)
            and _is_number(quantity.value)
        ):
            quantities[position] = Quantity(existing.value + quantity.value, existing.unit)
            return
    quantities.append(quantity)


@dataclass
class Ingredient:
    """An ingredient as mentioned in a step.

    ``reference`` is ``(index, target)`` when this mention refers to an earlier
    ingredient, step or section, else None.
    """

    name: str
    alias: Optional[str] = None
    quantity: Optional[Quantity] = None
    note: Optional[str] = None
    modifiers: Modifiers = Modifiers(0)
    reference: Optional[tuple[int, ReferenceTarget]] = None

    def display_name(self) -> str:
        return self.alias if self.alias is not None else self.name


@dataclass
class Cookware:
    """A cookware item; its quantity is a bare value without unit."""

    name: str
    alias: Optional[str] = None
    quantity: Optional[QuantityValue] = None
    note: Optional[str] = None
    modifiers: Modifiers = Modifiers(0)

    def display_name(self) -> str:
        return self.alias if self.alias is not None else self.name


@dataclass
class Timer:
    """A timer; at least one of name and quantity is set."""

    name: Optional[str] = None
    quantity: Optional[Quantity] = None


@dataclass(frozen=True)
class TextItem:
    value: str


@dataclass(frozen=True)
class IngredientItem:
    index: int


@dataclass(frozen=True)
class CookwareItem:
    index: int


@dataclass(frozen=True)
class TimerItem:
    index: int


@dataclass(frozen=True)
class InlineQuantityItem:
    index: int


Item = Union[TextItem, IngredientItem, CookwareItem, TimerItem, InlineQuantityItem]


@dataclass
class Step:
    """A numbered step made of text and component references."""

    items: list[Item] = field(default_factory=list)
    number: int = 1


@dataclass
class Section:
    """A named or unnamed section; its content is steps and text blocks."""

    name: Optional[str] = None
    content: list[Union[Step, str]] = field(default_factory=list)


@dataclass
class Recipe:
    """A parsed recipe."""

    metadata: dict[str, Any] = field(default_factory=dict)
    sections: list[Section] = field(default_factory=list)
    ingredients: list[Ingredient] = field(default_factory=list)
    cookware: list[Cookware] = field(default_factory=list)
    timers: list[Timer] = field(default_factory=list)
    inline_quantities: list[Quantity] = field(default_factory=list)

    def tags(self) -> Optional[list[str]]:
        """Tags from a list or a comma separated string, or None."""
        value = self.metadata.get("tags")
        if isinstance(value, str):
            return [tag.strip() for tag in value.split(",") if tag.strip()]
        if isinstance(value, (list, tuple)):
            return [str(tag) for tag in value]
        return None

    def description(self) -> Optional[str]:
        value = self.metadata.get("description")
        return value if isinstance(value, str) else None

    def group_ingredients(self) -> list[tuple[Ingredient, list[Quantity]]]:
        """Each defined ingredient with the quantities of all its mentions.

        Mentions that refer to another ingredient add their quantity to it.
        Quantities with the same unit are added up when both are numbers.
        """
        groups: dict[int, list[Quantity]] = {}
        for index, ingredient in enumerate(self.ingredients):
            ref = ingredient.reference
            if ref is None or ref[1] is not ReferenceTarget.INGREDIENT:
                groups[index] = []
        for index, ingredient in enumerate(self.ingredients):
            ref = ingredient.reference
            target = ref[0] if ref and ref[1] is ReferenceTarget.INGREDIENT else index
            if ingredient.quantity is not None and target in groups:
                _add_quantity(groups[target], ingredient.quantity)
        return [(self.ingredients[index], quantities) for index, quantities in groups.items()]

    def group_cookware(self) -> list[tuple[Cookware, list[Quantity]]]:
        """Cookware that should be listed, grouped by name with their amounts."""
        groups: dict[str, tuple[Cookware, list[Quantity]]] = {}
        for item in self.cookware:
            if not item.modifiers.should_be_listed() and item.name in groups:
                continue
            if item.name not in groups:
                if not item.modifiers.should_be_listed():
                    continue
                groups[item.name] = (item, [])
            if item.quantity is not None:
                _add_quantity(groups[item.name][1], Quantity(item.quantity))
        for item in self.cookware:
            if item.modifiers & Modifiers.REF and item.name in groups and item.quantity is not None:
                _add_quantity(groups[item.name][1], Quantity(item.quantity))
        return list(groups.values())