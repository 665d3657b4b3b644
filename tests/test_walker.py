import logging
from pathlib import Path

import pytest

from cookshelf.walker import IMAGE_EXTENSIONS, DirEntry, Walker


def _touch(root: Path, rel: str) -> None:
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("x")


@pytest.fixture
def tree(tmp_path):
    for rel in [
        "b.cook",
        "a.cook",
        "a.jpg",
        "notes.txt",
        ".hidden.cook",
        ".git/x.cook",
        "sub/c.cook",
        "sub/deeper/d.cook",
    ]:
        _touch(tmp_path, rel)
    return tmp_path


def _walk(walker, base):
    return [e.path.relative_to(base).as_posix() for e in walker]


def test_breadth_first_sorted_order(tree):
    assert _walk(Walker(tree, 5), tree) == [
        "a.cook",
        "a.jpg",
        "b.cook",
        "sub",
        "sub/c.cook",
        "sub/deeper",
        "sub/deeper/d.cook",
    ]


def test_max_depth_one_lists_but_does_not_enter(tree):
    assert _walk(Walker(tree, 1), tree) == [
        "a.cook",
        "a.jpg",
        "b.cook",
        "sub",
        "sub/c.cook",
        "sub/deeper",
    ]


def test_max_depth_zero(tree):
    assert _walk(Walker(tree, 0), tree) == ["a.cook", "a.jpg", "b.cook", "sub"]


def test_paths_include_base(tree):
    entries = list(Walker(tree, 0))
    assert all(e.path.parent == tree for e in entries)


def test_ignore(tree):
    walker = Walker(tree, 5)
    walker.ignore("sub")
    walker.ignore("b.cook")
    assert _walk(walker, tree) == ["a.cook", "a.jpg"]


def test_config_dir_is_ignored(tree):
    _touch(tree, "config/x.cook")
    walker = Walker(tree, 5)
    walker.set_config_dir("config")
    assert "config" not in _walk(walker, tree)
    assert walker.config_dir == "config"


def test_nested_config_dir_warns(tree, caplog):
    _touch(tree, "sub/config/y.cook")
    walker = Walker(tree, 5)
    walker.set_config_dir("config")
    with caplog.at_level(logging.WARNING):
        names = _walk(walker, tree)
    assert "sub/config" not in names
    assert any("config" in r.getMessage() for r in caplog.records)


def test_top_level_config_dir_does_not_warn(tree, caplog):
    _touch(tree, "config/x.cook")
    walker = Walker(tree, 5)
    walker.set_config_dir("config")
    with caplog.at_level(logging.WARNING):
        list(walker)
    assert caplog.records == []


def test_missing_base_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        list(Walker(tmp_path / "missing", 1))


def test_iter_returns_self(tree):
    walker = Walker(tree, 0)
    assert iter(walker) is walker


def test_from_path_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        DirEntry.from_path(tmp_path / "nope.cook")


def test_from_path_file_and_dir(tree):
    entry = DirEntry.from_path(tree / "a.cook")
    assert entry.is_file and not entry.is_dir
    assert entry.is_cooklang_file()
    directory = DirEntry.from_path(tree / "sub")
    assert directory.is_dir and not directory.is_cooklang_file()


def test_dir_with_cook_extension_is_not_recipe(tmp_path):
    (tmp_path / "x.cook").mkdir()
    entry = DirEntry.from_path(tmp_path / "x.cook")
    assert entry.is_cooklang_file() is False


def test_names_and_stems():
    entry = DirEntry(Path("dir/Pasta.1.jpg"), is_file=True)
    assert entry.file_name() == "Pasta.1.jpg"
    assert entry.file_stem() == "Pasta.1"
    hidden = DirEntry(Path(".bashrc"), is_file=True)
    assert hidden.file_stem() == ".bashrc"
    assert hidden.is_image() is False


@pytest.mark.parametrize("ext", IMAGE_EXTENSIONS)
def test_is_image(ext):
    assert DirEntry(Path(f"r.{ext}"), is_file=True).is_image()


def test_image_extension_case_sensitive():
    assert DirEntry(Path("r.PNG"), is_file=True).is_image() is False


def test_walker_yields_only_known_image_extensions(tmp_path):
    for ext in ["jpeg", "jpg", "png", "heic", "gif", "webp", "bmp", "tiff"]:
        _touch(tmp_path, f"r.{ext}")
    names = _walk(Walker(tmp_path, 0), tmp_path)
    assert names == [
        "r.gif",
        "r.heic",
        "r.jpeg",
        "r.jpg",
        "r.png",
        "r.webp",
    ]