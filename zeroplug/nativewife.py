"""Per-group gallery of pictures from which everyone draws a daily pick."""

from __future__ import annotations

import hashlib
import os
import random
from datetime import date
from pathlib import Path
from typing import NamedTuple

_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"


def _base36(number: int) -> str:
    if number == 0:
        return "0"
    sign = "-" if number < 0 else ""
    number = abs(number)
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(_DIGITS[remainder])
    return sign + "".join(reversed(digits))


def clean_name(text: str, command: str) -> str:
    """Name given after the last ``command`` in ``text``, without spaces or slashes."""
    compact = text.replace(" ", "")
    position = compact.rfind(command)
    if position < 0:
        raise ValueError(f"missing command {command!r}")
    name = compact[position + len(command):].replace("/", "").replace("\\", "")
    if not name:
        raise ValueError("没有找到wife的名字！")
    return name


def daily_seed(nickname: str, today: date) -> int:
    """Random seed that stays the same for a nickname for one day."""
    key = f"{nickname}{today.year}{today.month}{today.day}"
    digest = hashlib.md5(key.encode("utf-8")).digest()
    return int.from_bytes(digest[:8], "little", signed=True)


def can_add(data: int, is_admin: bool) -> bool:
    """Whether a member may add pictures, given the group's plugin data."""
    return data & 1 == 1 or is_admin


class WifeDraw(NamedTuple):
    """The drawn picture; ``shared`` when the group has only one."""

    name: str
    path: Path
    shared: bool


class WifeGallery:
    """Pictures stored in one folder per group below ``base``."""

    def __init__(self, base: str | os.PathLike[str]) -> None:
        self.base = Path(base)

    def group_folder(self, group_id: int) -> Path:
        return self.base / _base36(group_id)

    def draw(self, group_id: int, nickname: str, today: date) -> WifeDraw:
        """Today's pick for ``nickname``; LookupError when the group has none."""
        folder = self.group_folder(group_id)
        try:
            names = sorted(entry.name for entry in os.scandir(folder))
        except OSError as err:
            raise LookupError("一个wife也没有哦~") from err
        if not names:
            raise LookupError("一个wife也没有哦~")
        if len(names) == 1:
            return WifeDraw(names[0], folder / names[0], True)
        chosen = random.Random(daily_seed(nickname, today)).choice(names)
        return WifeDraw(chosen, folder / chosen, False)

    def add(self, group_id: int, name: str, data: bytes) -> Path:
        """Store a picture under ``name`` in the group's folder."""
        if not name or "/" in name or "\\" in name:
            raise ValueError(f"invalid name {name!r}")
        folder = self.group_folder(group_id)
        folder.mkdir(exist_ok=True)
        target = folder / name
        target.write_bytes(data)
        return target

    def remove(self, group_id: int, name: str) -> None:
        (self.group_folder(group_id) / name).unlink()