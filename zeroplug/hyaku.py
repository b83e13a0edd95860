"""Ogura Hyakunin Isshu: the hundred poems and their pictures."""

from __future__ import annotations

import csv
import re
from dataclasses import astuple, dataclass
from pathlib import Path

BED = "https://gitcode.net/u011570312/OguraHyakuninIsshu/-/raw/master/"
CSV_NAME = "小倉百人一首.csv"
POEM_COUNT = 100

_LABELS = (
    ("●", "番号"),
    ("◉", "歌人"),
    ("○", "上の句"),
    ("○", "下の句"),
    ("◎", "上の句ひらがな"),
    ("◎", "下の句ひらがな"),
)
_INTEGER = re.compile(r"[+-]?[0-9]+")
_COMMAND = re.compile(r"^百人一首之\s?(\d+)$")


@dataclass(frozen=True)
class Poem:
    """One poem as listed in the csv file."""

    number: str
    poet: str
    kami_no_ku: str
    shimo_no_ku: str
    kami_no_ku_kana: str
    shimo_no_ku_kana: str

    def __str__(self) -> str:
        return "".join(
            f"{marker}{label}：{value}\n"
            for (marker, label), value in zip(_LABELS, astuple(self))
        )


def load_poems(path: str | Path) -> list[Poem]:
    """Read the hundred poems, checking count, columns and numbering."""
    with open(path, newline="", encoding="utf-8") as handle:
        records = list(csv.reader(handle))[1:]
    if len(records) != POEM_COUNT:
        raise ValueError("invalid csvfile")
    poems = []
    for index, record in enumerate(records):
        if len(record) != len(_LABELS):
            raise ValueError("invalid csvfile")
        if not _INTEGER.fullmatch(record[0]):
            raise ValueError(f"invalid poem number {record[0]!r}")
        if int(record[0]) - 1 != index:
            raise ValueError("invalid csvfile")
        poems.append(Poem(*record))
    return poems


def image_urls(number: int) -> tuple[str, str]:
    """Picture and calligraphy image of poem ``number`` (1-based)."""
    return f"{BED}img/{number:03d}.jpg", f"{BED}img/{number:03d}.png"


def poem_number(text: str) -> int:
    """Poem number requested by a ``百人一首之n`` command."""
    match = _COMMAND.match(text)
    if match is None:
        raise ValueError(f"not a poem request: {text!r}")
    number = int(match.group(1))
    if number > POEM_COUNT or number < 1:
        raise ValueError("超出范围")
    return number