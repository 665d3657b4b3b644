"""Index of a recipe directory to resolve recipes from partial paths.

A recipe can be referenced by its name (``pasta``), by a partial path
(``italian/pasta``) or by a path from the base directory (``/italian/pasta``).
When several recipes share a name, the outermost one wins, and among equally
deep ones the first in alphabetical order.
"""

from __future__ import annotations

import bisect
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, Optional, Union

from cookshelf.images import Image, recipe_images
from cookshelf.walker import DirEntry, Walker

logger = logging.getLogger(__name__)

RECIPE_SUFFIX = ".cook"


class FsError(Exception):
    """Base error of the recipe index."""


class RecipeNotFound(FsError):
    def __init__(self, recipe: str) -> None:
        self.recipe = recipe
        super().__init__(f"Recipe not found: '{recipe}'")


class InvalidName(FsError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Invalid name: '{name}'")


class NotRecipe(FsError):
    def __init__(self, path: os.PathLike | str) -> None:
        self.path = Path(path)
        super().__init__(f"The entry is not a recipe: {self.path}")


class OutsideBase(FsError):
    def __init__(self, recipe: str) -> None:
        self.recipe = recipe
        super().__init__(f"Path points outside the base dir: '{recipe}'")


def _split_name(name: str) -> tuple[str, Optional[str]]:
    """Split a file name into stem and extension; dot files have no extension."""
    if name == "..":
        return name, None
    dot = name.rfind(".")
    if dot <= 0:
        return name, None
    return name[:dot], name[dot + 1 :]


def _has_file_name(path: Path) -> bool:
    return path.name not in ("", "..")


def _stem(path: Path) -> Optional[str]:
    if not _has_file_name(path):
        return None
    return _split_name(path.name)[0]


def _with_extension(path: Path, extension: str) -> Path:
    stem = _stem(path)
    if stem is None:
        return path
    new_name = f"{stem}.{extension}" if extension else stem
    return path.with_name(new_name)


def _starts_with(path: Path, base: Path) -> bool:
    base_parts = base.parts
    return path.parts[: len(base_parts)] == base_parts


def _ends_with(path: Path, suffix: Path) -> bool:
    suffix_parts = suffix.parts
    if not suffix_parts:
        return True
    return path.parts[-len(suffix_parts) :] == suffix_parts


def _compare_key(path: Path) -> Path:
    return _with_extension(Path(str(path).lower()), "")


def _compare_path(full: Path, suffix: Path) -> bool:
    """True if ``suffix`` names the end of ``full``, ignoring case and extension."""
    return _ends_with(_compare_key(full), _compare_key(suffix))


def _into_name_path(recipe: str) -> tuple[str, Path]:
    path = Path(recipe)
    name = _stem(path)
    if name is None:
        raise InvalidName(recipe)
    return name, path


def _order_key(path: Path) -> tuple[int, str]:
    # fewer components first, then alphabetically
    return len(path.parts), str(path)


def _norm_path(path: Path) -> Path:
    """Resolve ``..`` lexically without touching the file system."""
    parts = list(path.parts)
    anchor = path.anchor
    result: list[str] = []
    if anchor and parts and parts[0] == anchor:
        result.append(anchor)
        parts = parts[1:]
    for part in parts:
        if part == "..":
            if not result:
                result.append(part)
            elif anchor and result == [anchor]:
                continue
            else:
                result.pop()
        else:
            result.append(part)
    return Path(*result) if result else Path()


class _Cache:
    """Recipe paths grouped by lower-cased name, outermost first."""

    def __init__(self) -> None:
        self.recipes: dict[str, list[Path]] = {}

    def get(self, name: str, path: Path) -> Optional[Path]:
        for candidate in self.recipes.get(name.lower(), ()):
            if _compare_path(candidate, path):
                return candidate
        return None

    def insert(self, name: str, path: Path) -> None:
        logger.debug("adding %s:%s to index cache", name, path)
        recipes = self.recipes.setdefault(name.lower(), [])
        position = bisect.bisect_left(recipes, _order_key(path), key=_order_key)
        recipes.insert(position, path)

    def remove(self, name: str, path: Path) -> None:
        logger.debug("removing %s:%s from index cache", name, path)
        recipes = self.recipes.get(name.lower())
        if recipes and path in recipes:
            recipes.remove(path)

    def __iter__(self) -> Iterator[Path]:
        for paths in self.recipes.values():
            yield from paths


def _process_entry(entry: DirEntry) -> Optional[tuple[str, Path]]:
    if not entry.is_cooklang_file():
        return None
    return entry.file_stem(), entry.path


def _index_all(cache: _Cache, walker: Walker) -> None:
    for entry in walker:
        processed = _process_entry(entry)
        if processed is not None:
            cache.insert(*processed)


@dataclass(frozen=True)
class RecipeContent:
    """The text of a recipe file."""

    content: str

    def text(self) -> str:
        return self.content


class RecipeEntry:
    """A recipe file on disk, with its images found lazily."""

    def __init__(
        self, path: os.PathLike | str, images: Optional[Iterable[Image]] = None
    ) -> None:
        self.path = Path(path)
        self._images: Optional[list[Image]] = None if images is None else list(images)

    @classmethod
    def from_dir_entry(cls, entry: DirEntry) -> "RecipeEntry":
        """Build from a walked entry; raises ``NotRecipe`` if it is not a recipe file."""
        if not entry.is_cooklang_file():
            raise NotRecipe(entry.path)
        return cls(entry.path)

    def __repr__(self) -> str:
        return f"RecipeEntry(path={str(self.path)!r})"

    def file_name(self) -> str:
        return self.path.name

    def name(self) -> str:
        return _split_name(self.path.name)[0]

    def relative_name(self) -> str:
        text = str(self.path)
        while text.endswith(RECIPE_SUFFIX):
            text = text[: -len(RECIPE_SUFFIX)]
        return text

    def read(self) -> RecipeContent:
        """Read the recipe file."""
        return RecipeContent(self.path.read_text(encoding="utf-8"))

    def images(self) -> list[Image]:
        """Images of the recipe; looked up once and then cached."""
        if self._images is None:
            self._images = recipe_images(self.path)
        return self._images


def _try_path(
    recipe: str, relative_to: Optional[os.PathLike | str], base_path: Path
) -> RecipeEntry:
    path = _with_extension(Path(recipe), "cook")
    if path.drive:
        raise InvalidName(recipe)

    if path.root:
        path = base_path / str(path).lstrip("/\\")
    elif relative_to is not None:
        path = Path(relative_to) / path
    path = _norm_path(path)

    if not _starts_with(path, base_path):
        raise OutsideBase(recipe)

    return RecipeEntry.from_dir_entry(DirEntry.from_path(path))


class FsIndex:
    """Complete index of every recipe in a directory."""

    def __init__(self, base_path: os.PathLike | str, cache: Optional[_Cache] = None) -> None:
        self.base_path = Path(base_path)
        self._cache = cache if cache is not None else _Cache()

    def __repr__(self) -> str:
        return f"FsIndex(base_path={str(self.base_path)!r})"

    def contains(self, recipe: str) -> bool:
        try:
            name, path = _into_name_path(recipe)
        except InvalidName:
            return False
        return self._cache.get(name, path) is not None

    def resolve(
        self, recipe: str, relative_to: Optional[os.PathLike | str] = None
    ) -> RecipeEntry:
        """Try ``recipe`` as a path first, then look it up in the index.

        A path cannot point outside the base directory.
        """
        try:
            return _try_path(recipe, relative_to, self.base_path)
        except (FsError, OSError):
            return self.get(recipe)

    def get(self, recipe: str) -> RecipeEntry:
        name, path = _into_name_path(recipe)
        found = self._cache.get(name, path)
        if found is None:
            raise RecipeNotFound(recipe)
        return RecipeEntry(found)

    def get_all(self) -> Iterator[RecipeEntry]:
        for path in self._cache:
            yield RecipeEntry(path)

    def remove(self, path: os.PathLike | str) -> None:
        """Remove a recipe given by its path on disk, under the base path."""
        path = Path(path)
        logger.debug("manually removing %s", path)
        if not _starts_with(path, self.base_path):
            raise ValueError("path does not start with the base path")
        name, path = _into_name_path(str(path))
        self._cache.remove(name, path)

    def insert(self, path: os.PathLike | str) -> None:
        """Add an existing recipe file under the base path to the index."""
        path = Path(path)
        logger.debug("manually adding %s", path)
        if not _starts_with(path, self.base_path):
            raise ValueError("path does not start with the base path")
        if not path.is_file():
            raise ValueError("path does not exist or is not a file")
        if self.contains(str(path)):
            return
        name, path = _into_name_path(str(path))
        self._cache.insert(name, path)


class LazyFsIndex:
    """Index that walks the directory only as far as a lookup needs.

    Not safe to share between threads without a lock.
    """

    def __init__(self, base_path: os.PathLike | str, walker: Walker) -> None:
        self.base_path = Path(base_path)
        self._walker = walker
        self._cache = _Cache()

    def __repr__(self) -> str:
        return f"LazyFsIndex(base_path={str(self.base_path)!r})"

    def contains(self, recipe: str) -> bool:
        try:
            self.get(recipe)
        except (FsError, OSError):
            return False
        return True

    def index_all(self) -> FsIndex:
        """Finish walking and return a complete index."""
        _index_all(self._cache, self._walker)
        return FsIndex(self.base_path, self._cache)

    def resolve(
        self, recipe: str, relative_to: Optional[os.PathLike | str] = None
    ) -> RecipeEntry:
        """Try ``recipe`` as a path first, then look it up in the index."""
        try:
            return _try_path(recipe, relative_to, self.base_path)
        except (FsError, OSError):
            return self.get(recipe)

    def get(self, recipe: str) -> RecipeEntry:
        """Find a recipe by partial path, with or without the .cook extension."""
        name, path = _into_name_path(recipe)

        cached = self._cache.get(name, path)
        if cached is not None:
            return RecipeEntry(cached)

        # the walk is breadth-first and sorted, so the first match is the
        # outermost one, alphabetically
        for entry in self._walker:
            processed = _process_entry(entry)
            if processed is None:
                continue
            entry_name, entry_path = processed
            self._cache.insert(entry_name, entry_path)
            if _compare_path(entry_path, path):
                return RecipeEntry(entry_path)
        raise RecipeNotFound(recipe)


class FsIndexBuilder:
    """Configures the walk and builds a lazy or a complete index."""

    def __init__(self, base_path: os.PathLike | str, max_depth: int) -> None:
        self.base_path = Path(base_path)
        self._walker = Walker(self.base_path, max_depth)

    def config_dir(self, directory: str) -> "FsIndexBuilder":
        """Set the config dir; it is also ignored."""
        self._walker.set_config_dir(directory)
        return self

    def ignore(self, name: str) -> "FsIndexBuilder":
        """Skip every file or directory with this name."""
        self._walker.ignore(name)
        return self

    def lazy(self) -> LazyFsIndex:
        return LazyFsIndex(self.base_path, self._walker)

    def indexed(self) -> FsIndex:
        cache = _Cache()
        _index_all(cache, self._walker)
        return FsIndex(self.base_path, cache)


def new_index(base_path: os.PathLike | str, max_depth: int) -> FsIndexBuilder:
    return FsIndexBuilder(base_path, max_depth)


def _skip_errors(walker: Walker) -> Iterator[DirEntry]:
    while True:
        try:
            yield next(walker)
        except StopIteration:
            return
        except OSError as error:
            logger.debug("skipping unreadable entry: %s", error)


def _group_images(entries: Iterable[DirEntry]) -> Iterator[Union[DirEntry, RecipeEntry]]:
    """Attach images to the recipe they sit next to in the sorted walk."""
    iterator = iter(entries)
    lookahead: Optional[DirEntry] = None
    past_images: list[DirEntry] = []
    while True:
        if lookahead is not None:
            entry, lookahead = lookahead, None
        else:
            entry = next(iterator, None)
            if entry is None:
                return

        if entry.is_dir:
            past_images = []
            yield entry
        elif entry.is_cooklang_file():
            recipe_name = entry.file_stem()
            images = [
                image
                for image in (Image.from_entry(recipe_name, e) for e in past_images)
                if image is not None
            ]
            for following in iterator:
                if not following.is_image():
                    lookahead = following
                    break
                image = Image.from_entry(recipe_name, following)
                if image is not None:
                    images.append(image)
            past_images = []
            yield RecipeEntry(entry.path, images)
        elif entry.is_image():
            past_images.append(entry)


def all_recipes(base_path: os.PathLike | str, max_depth: int) -> Iterator[RecipeEntry]:
    """All recipes under ``base_path`` down to ``max_depth``, with their images."""
    walker = Walker(base_path, max_depth)
    for entry in _group_images(_skip_errors(walker)):
        if isinstance(entry, RecipeEntry):
            yield entry


def walk_dir(path: os.PathLike | str) -> Iterator[Union[DirEntry, RecipeEntry]]:
    """Recipes and sub-directories of a single directory."""
    if not Path(path).is_dir():
        raise FileNotFoundError("dir not found")
    return _group_images(_skip_errors(Walker(path, 0)))