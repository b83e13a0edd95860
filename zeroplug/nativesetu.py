"""Local picture library: one table of images per folder, keyed by difference hash."""

from __future__ import annotations

import io
import logging
import os
import sqlite3
import threading
from dataclasses import dataclass
from pathlib import Path

from PIL import Image

log = logging.getLogger(__name__)

IMAGE_SUFFIXES = (".jpg", ".jpeg", ".png", ".gif", ".webp")
_HASH_WIDTH = 9
_HASH_HEIGHT = 8


def is_image_name(name: str) -> bool:
    """Whether a file name has one of the picture extensions, ignoring case."""
    return name.lower().endswith(IMAGE_SUFFIXES)


def difference_hash(image: Image.Image) -> int:
    """64 bit difference hash of an image, as a signed integer."""
    small = image.convert("RGB").resize(
        (_HASH_WIDTH, _HASH_HEIGHT), Image.Resampling.BILINEAR
    )
    pixels = list(small.convert("L").getdata())
    rows = [pixels[start:start + _HASH_WIDTH] for start in range(0, len(pixels), _HASH_WIDTH)]
    bits = (left < right for row in rows for left, right in zip(row, row[1:]))
    value = 0
    for bit in bits:
        value = (value << 1) | int(bit)
    return value - (1 << 64) if value >= 1 << 63 else value


def _quote(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


@dataclass(frozen=True)
class SetuImage:
    """One picture of a class."""

    img_id: int
    name: str
    path: str


class SetuLibrary:
    """Picture classes scanned from a folder tree into SQLite."""

    def __init__(self, db_path: str | os.PathLike[str]) -> None:
        self.db_path = Path(db_path)
        self._lock = threading.RLock()
        self._db: sqlite3.Connection | None = None

    def __enter__(self) -> "SetuLibrary":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _conn(self) -> sqlite3.Connection:
        if self._db is None:
            self._db = sqlite3.connect(self.db_path, check_same_thread=False)
        return self._db

    def _create(self, name: str) -> None:
        db = self._conn()
        db.execute(
            f"CREATE TABLE IF NOT EXISTS {_quote(name)}"
            " (imgid INTEGER PRIMARY KEY, name TEXT, path TEXT)"
        )
        db.commit()

    def classes(self) -> list[str]:
        """Names of all classes, sorted; empty when nothing was scanned yet."""
        with self._lock:
            if not self.db_path.exists():
                return []
            rows = self._conn().execute(
                "SELECT name FROM sqlite_master WHERE type = 'table' ORDER BY name"
            ).fetchall()
        return [row[0] for row in rows]

    def count(self, name: str) -> int:
        with self._lock:
            (number,) = self._conn().execute(
                f"SELECT COUNT(*) FROM {_quote(name)}"
            ).fetchone()
        return number

    def scan_all(self, root: str | os.PathLike[str]) -> None:
        """Rebuild the whole library from the folders below ``root``."""
        base = Path(root)
        if not base.is_dir():
            raise FileNotFoundError(f"no such directory: {base}")
        with self._lock:
            self.close()
            self.db_path.unlink(missing_ok=True)
        for current, dirnames, _ in os.walk(base):
            dirnames.sort()
            folder = Path(current)
            if folder == base:
                continue
            with self._lock:
                self._create(folder.name)
            self._scan_class(base, folder.relative_to(base).as_posix(), folder.name)

    def scan_class(self, root: str | os.PathLike[str], name: str) -> None:
        """Rebuild the class stored in the folder ``name`` directly below ``root``."""
        self._scan_class(Path(root), name, name)

    def _scan_class(self, root: Path, relative: str, name: str) -> None:
        entries = sorted(os.scandir(root / relative), key=lambda entry: entry.name)
        with self._lock:
            self._conn().execute(f"DROP TABLE IF EXISTS {_quote(name)}")
            self._create(name)
        for entry in entries:
            if entry.is_dir() or not is_image_name(entry.name):
                continue
            relpath = f"{relative}/{entry.name}"
            log.debug("reading %s", relpath)
            data = (root / relpath).read_bytes()
            with Image.open(io.BytesIO(data)) as picture:
                img_id = difference_hash(picture)
            log.debug("inserting %s with id %d into %s", entry.name, img_id, name)
            with self._lock:
                db = self._conn()
                db.execute(
                    f"REPLACE INTO {_quote(name)} (imgid, name, path) VALUES (?, ?, ?)",
                    (img_id, entry.name, relpath),
                )
                db.commit()

    def pick(self, name: str) -> SetuImage:
        """A random picture of the class."""
        with self._lock:
            row = self._conn().execute(
                f"SELECT imgid, name, path FROM {_quote(name)} ORDER BY RANDOM() LIMIT 1"
            ).fetchone()
        if row is None:
            raise LookupError(f"no pictures in {name}")
        return SetuImage(*row)

    def summary(self) -> str:
        """Numbered list of the classes with their sizes."""
        lines = ["所有本地setu分类"]
        with self._lock:
            for index, name in enumerate(self.classes()):
                try:
                    lines.append(f"{index:02d}. {name}({self.count(name)})")
                except sqlite3.Error as err:
                    log.error("cannot count %s: %s", name, err)
                    lines.append(f"{index:02d}. {name}(error)")
        return "\n".join(lines)

    def close(self) -> None:
        with self._lock:
            if self._db is not None:
                self._db.close()
                self._db = None