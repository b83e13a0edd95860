"""Senso-ji fortune slips: daily pick, slip images and their explanations."""

from __future__ import annotations

import hashlib
import os
import sqlite3
import threading
from datetime import date

BED = "https://gitcode.net/u011570312/senso-ji-omikuji/-/raw/main/{}_{}.jpg"
KUJI_COUNT = 100


def kuji_image_urls(number: int) -> tuple[str, str]:
    """Front and back image of slip ``number``."""
    return BED.format(number, 0), BED.format(number, 1)


def daily_number(user_id: int, today: date, n: int = KUJI_COUNT) -> int:
    """Number from 1 to ``n`` that stays the same for a user for one day."""
    if n <= 0:
        raise ValueError("n must be positive")
    digest = hashlib.md5(f"{user_id}:{today.isoformat()}".encode("ascii")).digest()
    return int.from_bytes(digest[:8], "little") % n + 1


class KujiBook:
    """Explanations of the slips, stored in SQLite."""

    def __init__(self, db_path: str | os.PathLike[str]) -> None:
        self._lock = threading.Lock()
        self._db = sqlite3.connect(db_path, check_same_thread=False)
        with self._db:
            self._db.execute(
                "CREATE TABLE IF NOT EXISTS kuji (id INTEGER PRIMARY KEY, text TEXT)"
            )

    def __enter__(self) -> "KujiBook":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def text(self, number: int) -> str:
        """Explanation of slip ``number``; LookupError if it is missing."""
        with self._lock:
            row = self._db.execute(
                "SELECT text FROM kuji WHERE id = ?", (number,)
            ).fetchone()
        if row is None:
            raise LookupError(f"no slip {number}")
        return row[0]

    def count(self) -> int:
        with self._lock:
            (number,) = self._db.execute("SELECT COUNT(*) FROM kuji").fetchone()
        return number

    def close(self) -> None:
        with self._lock:
            self._db.close()