"""Images that belong to a recipe, found next to its file.

An image named ``Recipe.jpg`` belongs to the whole recipe, ``Recipe.3.jpg``
to step 3 of the first section and ``Recipe.1.3.jpg`` to step 3 of
section 1.
"""

from __future__ import annotations

import functools
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Optional

from cookshelf.walker import IMAGE_EXTENSIONS, DirEntry

_U16_MAX = 0xFFFF
_UNSIGNED = re.compile(r"\+?[0-9]+")


def _parse_u16(text: str) -> Optional[int]:
    if not _UNSIGNED.fullmatch(text):
        return None
    value = int(text)
    return value if value <= _U16_MAX else None


@dataclass(frozen=True, order=True)
class ImageIndexes:
    """Section and step an image refers to."""

    section: int
    step: int


@functools.total_ordering
@dataclass(frozen=True)
class Image:
    """An image of a recipe, optionally tied to one step."""

    indexes: Optional[ImageIndexes]
    path: Path

    def _key(self) -> tuple:
        if self.indexes is None:
            return (0, 0, 0, self.path)
        return (1, self.indexes.section, self.indexes.step, self.path)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Image):
            return NotImplemented
        return self._key() < other._key()

    @classmethod
    def from_entry(cls, recipe_name: str, entry: DirEntry) -> Optional["Image"]:
        """Return the image if ``entry`` is an image of ``recipe_name``, else None."""
        parts = entry.file_name().rsplit(".", 3)
        if len(parts) == 1:
            return None

        name, *middle, ext = parts
        if name != recipe_name or ext not in IMAGE_EXTENSIONS:
            return None

        indexes: Optional[ImageIndexes]
        if len(middle) == 2:
            section = _parse_u16(middle[0])
            step = _parse_u16(middle[1])
            if section is None or step is None:
                return None
            indexes = ImageIndexes(section=section, step=step)
        elif len(middle) == 1:
            step = _parse_u16(middle[0])
            if step is None:
                return None
            indexes = ImageIndexes(section=0, step=step)
        else:
            indexes = None

        return cls(indexes=indexes, path=entry.path)


class RecipeImageError(Exception):
    """An image refers to a part of the recipe that does not exist."""


class MissingSection(RecipeImageError):
    def __init__(self, section: int, image: os.PathLike | str) -> None:
        self.section = section
        self.image = Path(image)
        super().__init__(f"No section {section} in recipe, referenced from {self.image}")


class MissingStep(RecipeImageError):
    def __init__(self, section: int, step: int, image: os.PathLike | str) -> None:
        self.section = section
        self.step = step
        self.image = Path(image)
        super().__init__(
            f"No step {step} in section {section}, referenced from {self.image}"
        )


class RecipeImagesError(Exception):
    """One or more images do not match the recipe."""

    def __init__(self, errors: Iterable[RecipeImageError]) -> None:
        self.errors = list(errors)
        super().__init__("; ".join(str(e) for e in self.errors))


def recipe_images(path: os.PathLike | str) -> list[Image]:
    """List the images of the recipe at ``path``, sorted, read fresh each call."""
    path_str = os.fspath(path)
    if not os.path.basename(path_str):
        return []
    recipe_name = DirEntry(Path(path_str)).file_stem()
    parent = os.path.dirname(path_str)

    try:
        with os.scandir(parent) as listing:
            files = [item.name for item in listing if item.is_file(follow_symlinks=False)]
    except OSError:
        return []

    images = []
    for file_name in files:
        try:
            entry = DirEntry.from_path(os.path.join(parent, file_name))
        except OSError:
            continue
        image = Image.from_entry(recipe_name, entry)
        if image is not None:
            images.append(image)
    images.sort()
    return images


def check_recipe_images(images: Iterable[Image], recipe: Any) -> None:
    """Raise ``RecipeImagesError`` if an image refers to a missing section or step.

    ``recipe`` needs ``sections``, each with a ``content`` sequence.
    """
    errors: list[RecipeImageError] = []
    sections = recipe.sections
    for image in images:
        if image.indexes is None:
            continue
        section, step = image.indexes.section, image.indexes.step
        if section >= len(sections):
            errors.append(MissingSection(section=section, image=image.path))
            continue
        if step >= len(sections[section].content):
            errors.append(MissingStep(section=section, step=step, image=image.path))
    if errors:
        raise RecipeImagesError(errors)