"""Breadth-first walker over a recipe directory.

The walker yields directories, recipe files (``.cook``) and images. Entries
of a directory are sorted by file name, files first, and sub-directories are
visited level by level. Names starting with ``.`` are skipped.
"""

from __future__ import annotations

import logging
import os
import stat
from collections import deque
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS: tuple[str, ...] = ("jpeg", "jpg", "png", "heic", "gif", "webp")
"""Valid image extensions."""

RECIPE_EXTENSION = "cook"


def _split_file_name(name: str) -> tuple[str, Optional[str]]:
    """Split a file name into stem and extension at the last dot."""
    if name == "..":
        return name, None
    dot = name.rfind(".")
    if dot <= 0:
        return name, None
    return name[:dot], name[dot + 1 :]


@dataclass(frozen=True)
class DirEntry:
    """A file or directory found while walking."""

    path: Path
    is_dir: bool = False
    is_file: bool = False

    @classmethod
    def from_path(cls, path: os.PathLike | str) -> "DirEntry":
        """Build an entry from the file system; raises ``OSError`` if missing."""
        info = os.stat(path)
        return cls(Path(path), stat.S_ISDIR(info.st_mode), stat.S_ISREG(info.st_mode))

    def file_name(self) -> str:
        return self.path.name or str(self.path)

    def file_stem(self) -> str:
        name = self.path.name
        if not name:
            return str(self.path)
        return _split_file_name(name)[0]

    def _extension(self) -> Optional[str]:
        name = self.path.name
        if not name:
            return None
        return _split_file_name(name)[1]

    def is_cooklang_file(self) -> bool:
        return self.is_file and self._extension() == RECIPE_EXTENSION

    def is_image(self) -> bool:
        return self._extension() in IMAGE_EXTENSIONS


class Walker:
    """Iterator over recipe files, images and directories under a base path.

    Paths include the base path: walking ``dir`` yields ``dir/whatever.cook``.
    Sub-directories deeper than ``max_depth`` are listed but not entered.
    """

    def __init__(self, directory: os.PathLike | str, max_depth: int) -> None:
        self.base_path = Path(directory)
        self.max_depth = max_depth
        self.config_dir: Optional[str] = None
        self._ignored: list[str] = []
        self._dirs: deque[Path] = deque([self.base_path])
        self._current: Iterator[DirEntry] = iter(())

    def set_config_dir(self, directory: str) -> None:
        """Set the config dir name; it is ignored and warned about when nested."""
        if not directory.startswith("."):
            self._ignored.append(directory)
        self.config_dir = directory

    def ignore(self, name: str) -> None:
        """Skip every file or directory with this name."""
        self._ignored.append(name)

    def __iter__(self) -> "Walker":
        return self

    def __next__(self) -> DirEntry:
        entry = next(self._current, None)
        if entry is not None:
            return entry
        while self._dirs:
            self._process_dir(self._dirs.popleft())
            entry = next(self._current, None)
            if entry is not None:
                return entry
        raise StopIteration

    def _depth(self, path: Path) -> int:
        return len(path.relative_to(self.base_path).parts)

    def _process_dir(self, directory: Path) -> None:
        new_dirs: list[Path] = []
        new_entries: list[DirEntry] = []
        with os.scandir(directory) as listing:
            for item in listing:
                is_dir = item.is_dir(follow_symlinks=False)
                is_file = item.is_file(follow_symlinks=False)
                path = directory / item.name

                if (
                    self.config_dir is not None
                    and is_dir
                    and item.name == self.config_dir
                    and self._depth(path) > 1
                ):
                    logger.warning(
                        "Config dir `%s` found not in base path. It will be ignored. "
                        "You may be running the application in the wrong directory.",
                        self.config_dir,
                    )

                if item.name.startswith(".") or item.name in self._ignored:
                    continue

                entry = DirEntry(path, is_dir, is_file)
                if is_dir:
                    if self._depth(path) <= self.max_depth:
                        new_dirs.append(path)
                elif not (entry.is_cooklang_file() or entry.is_image()):
                    continue
                new_entries.append(entry)

        new_dirs.sort(key=lambda p: p.name)
        new_entries.sort(key=lambda e: (e.is_dir, e.file_name()))
        self._dirs.extend(new_dirs)
        self._current = iter(new_entries)