from pathlib import Path

import pytest
from PIL import Image

from zeroplug.nativesetu import SetuLibrary, difference_hash, is_image_name


def _pattern(kind):
    values = {
        "up": [x * 25 for x in range(9)],
        "down": [200 - x * 25 for x in range(9)],
        "zigzag": [0 if x % 2 == 0 else 200 for x in range(9)],
    }[kind]
    picture = Image.new("L", (9, 8))
    picture.putdata([value for _ in range(8) for value in values])
    return picture


def _save(path: Path, kind: str, fmt: str = "PNG") -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    _pattern(kind).convert("RGB").save(path, format=fmt, quality=95)


@pytest.fixture
def tree(tmp_path):
    root = tmp_path / "pics"
    _save(root / "cats" / "a.png", "up")
    _save(root / "cats" / "b.JPG", "down", "JPEG")
    (root / "cats" / "notes.txt").write_text("not a picture")
    _save(root / "dogs" / "c.png", "up")
    _save(root / "dogs" / "puppies" / "d.png", "down")
    return root


@pytest.fixture
def library(tmp_path):
    lib = SetuLibrary(tmp_path / "data.db")
    yield lib
    lib.close()


@pytest.mark.parametrize(
    "name, expected",
    [
        ("a.jpg", True),
        ("b.JPEG", True),
        ("c.Png", True),
        ("d.gif", True),
        ("e.webp", True),
        ("f.txt", False),
        ("png", False),
    ],
)
def test_is_image_name(name, expected):
    assert is_image_name(name) is expected


def test_uniform_image_hashes_to_zero():
    assert difference_hash(Image.new("L", (9, 8), 128)) == 0


def test_rising_gradient_sets_every_bit():
    assert difference_hash(_pattern("up")) == -1


def test_falling_gradient_sets_no_bit():
    assert difference_hash(_pattern("down")) == 0


def test_hash_fits_signed_64_bits():
    value = difference_hash(_pattern("zigzag").resize((90, 80)))
    assert -(1 << 63) <= value < (1 << 63)
    assert value not in (0, -1)


def test_classes_empty_before_scan(library):
    assert library.classes() == []


def test_scan_all_builds_classes(library, tree):
    library.scan_all(tree)
    assert library.classes() == ["cats", "dogs", "puppies"]
    assert library.count("cats") == 2
    assert library.count("dogs") == 1
    picked = library.pick("puppies")
    assert picked.name == "d.png"
    assert picked.path == "dogs/puppies/d.png"
    assert library.pick("dogs").path == "dogs/c.png"


def test_pick_returns_member_of_class(library, tree):
    library.scan_all(tree)
    assert library.pick("cats").name in {"a.png", "b.JPG"}


def test_summary_lists_classes(library, tree):
    library.scan_all(tree)
    assert library.summary() == "所有本地setu分类\n00. cats(2)\n01. dogs(1)\n02. puppies(1)"


def test_scan_class_refreshes(library, tree):
    library.scan_all(tree)
    _save(tree / "cats" / "e.png", "zigzag")
    library.scan_class(tree, "cats")
    assert library.count("cats") == 3


def test_scan_all_forgets_removed_folders(library, tree):
    library.scan_all(tree)
    (tree / "dogs" / "puppies" / "d.png").unlink()
    (tree / "dogs" / "puppies").rmdir()
    library.scan_all(tree)
    assert "puppies" not in library.classes()


def test_pick_from_empty_class_raises(library, tmp_path):
    root = tmp_path / "pics"
    (root / "empty").mkdir(parents=True)
    library.scan_all(root)
    assert library.count("empty") == 0
    with pytest.raises(LookupError):
        library.pick("empty")


def test_broken_picture_raises(library, tmp_path):
    root = tmp_path / "pics"
    (root / "bad").mkdir(parents=True)
    (root / "bad" / "x.png").write_bytes(b"not an image")
    with pytest.raises(OSError):
        library.scan_all(root)


def test_scan_all_missing_root_raises(library, tmp_path):
    with pytest.raises(FileNotFoundError):
        library.scan_all(tmp_path / "missing")