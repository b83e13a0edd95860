"""Collect and serve pictures from the jandan.net picture board."""

from __future__ import annotations

import os
import re
import sqlite3
import threading
from typing import Callable, NamedTuple

import lxml.html

API = "http://jandan.net/pic"
_ISO_POLY = 0xD800000000000000
_MASK64 = (1 << 64) - 1
_NUMBER = re.compile(r"\d+")
_CURRENT_PAGE = "//*[@id='comments']/div[2]/div/span[@class='current-comment-page']/text()"
_PICTURES = "//*[@class='view_img_link']"
_PREVIOUS = (
    "//*[@id='comments']/div[@class='comments']/div[@class='cp-pagenavi']"
    "/a[@class='previous-comment-page']"
)


def _make_table() -> list[int]:
    table = []
    for index in range(256):
        crc = index
        for _ in range(8):
            crc = (crc >> 1) ^ _ISO_POLY if crc & 1 else crc >> 1
        table.append(crc)
    return table


_TABLE = _make_table()


def picture_id(url: str) -> int:
    """CRC-64 (ISO polynomial) of the URL, as an unsigned integer."""
    crc = _MASK64
    for byte in url.encode("utf-8"):
        crc = _TABLE[(crc ^ byte) & 0xFF] ^ (crc >> 8)
    return crc ^ _MASK64


def _signed(value: int) -> int:
    return value - (1 << 64) if value >= 1 << 63 else value


class Page(NamedTuple):
    """What one board page offers."""

    current: int | None
    pictures: list[str]
    previous: str | None


def _attr(element: lxml.html.HtmlElement, index: int) -> str | None:
    values = list(element.attrib.values())
    return values[index] if len(values) > index else None


def parse_page(html: str) -> Page:
    """Current page number, picture URLs and the link to the older page."""
    doc = lxml.html.fromstring(html)
    current = None
    texts = doc.xpath(_CURRENT_PAGE)
    if texts:
        match = _NUMBER.search(str(texts[0]))
        if match:
            current = int(match.group())
    pictures = [
        "https:" + value
        for value in (_attr(element, 0) for element in doc.xpath(_PICTURES))
        if value is not None
    ]
    previous = None
    links = doc.xpath(_PREVIOUS)
    if links:
        value = _attr(links[0], 1)
        if value is not None:
            previous = "https:" + value
    return Page(current, pictures, previous)


class PictureStore:
    """Picture URLs keyed by their checksum."""

    def __init__(self, db_path: str | os.PathLike[str]) -> None:
        self._lock = threading.Lock()
        self._db = sqlite3.connect(db_path, check_same_thread=False)
        with self._db:
            self._db.execute(
                "CREATE TABLE IF NOT EXISTS picture (id INTEGER PRIMARY KEY, url TEXT)"
            )

    def __enter__(self) -> "PictureStore":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def add(self, url: str) -> int:
        """Store a URL and return its id."""
        pid = picture_id(url)
        with self._lock, self._db:
            self._db.execute(
                "REPLACE INTO picture (id, url) VALUES (?, ?)", (_signed(pid), url)
            )
        return pid

    def contains(self, pid: int) -> bool:
        with self._lock:
            row = self._db.execute(
                "SELECT 1 FROM picture WHERE id = ?", (_signed(pid),)
            ).fetchone()
        return row is not None

    def random_url(self) -> str:
        with self._lock:
            row = self._db.execute(
                "SELECT url FROM picture ORDER BY RANDOM() LIMIT 1"
            ).fetchone()
        if row is None:
            raise LookupError("no pictures stored")
        return row[0]

    def count(self) -> int:
        with self._lock:
            (number,) = self._db.execute("SELECT COUNT(*) FROM picture").fetchone()
        return number

    def close(self) -> None:
        with self._lock:
            self._db.close()


def update(store: PictureStore, fetch: Callable[[str], str], start_url: str = API) -> int:
    """Walk back through the board, storing new pictures until a known one shows up.

    Returns the number of pictures added.
    """
    total = parse_page(fetch(start_url)).current
    if total is None:
        raise ValueError("current page number not found")
    url = start_url
    added = 0
    for index in range(total):
        page = parse_page(fetch(url))
        for picture in page.pictures:
            if store.contains(picture_id(picture)):
                return added
            store.add(picture)
            added += 1
        if index != total - 1:
            if page.previous is None:
                raise ValueError("link to the previous page not found")
            url = page.previous
    return added