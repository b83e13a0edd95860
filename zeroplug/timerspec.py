"""Reminder timers with a packed month/day/week/hour/minute schedule."""

from __future__ import annotations

import hashlib
import logging
import re
from dataclasses import dataclass

log = logging.getLogger(__name__)

_ENABLED = 0x800000
_ALL_BITS = 0xFFFFFF
_MONTH = (0x780000, 19)
_DAY = (0x07C000, 14)
_WEEK = (0x003800, 11)
_HOUR = (0x0007C0, 6)
_MINUTE = (0x00003F, 0)

_CHINESE_DIGITS = "零一二三四五六七八九十"
_EVERY = "每"


@dataclass
class Timer:
    """A stored reminder. ``packed`` holds enable bit and schedule fields; -1 means "every"."""

    id: int = 0
    packed: int = 0
    self_id: int = 0
    group_id: int = 0
    alert: str = ""
    cron: str = ""
    url: str = ""

    def _get(self, spec: tuple[int, int]) -> int:
        mask, shift = spec
        value = (self.packed & mask) >> shift
        return -1 if value == mask >> shift else value

    def _put(self, spec: tuple[int, int], value: int) -> None:
        mask, shift = spec
        self.packed = ((value << shift) & mask) | (self.packed & (_ALL_BITS ^ mask))

    def _set_enabled(self, enabled: bool) -> None:
        if enabled:
            self.packed |= _ENABLED
        else:
            self.packed &= _ALL_BITS ^ _ENABLED

    def enabled(self) -> bool:
        return self.packed & _ENABLED != 0

    def month(self) -> int:
        return self._get(_MONTH)

    def day(self) -> int:
        return self._get(_DAY)

    def week(self) -> int:
        """Weekday with Sunday as 0."""
        return self._get(_WEEK)

    def hour(self) -> int:
        return self._get(_HOUR)

    def minute(self) -> int:
        return self._get(_MINUTE)

    def info(self) -> str:
        """Normalised description used to derive the timer id."""
        if self.cron:
            return f"[{self.group_id}]{self.cron}"
        return (
            f"[{self.group_id}]{self.month()}月{self.day()}日{self.week()}周"
            f"{self.hour()}:{self.minute()}"
        )

    def timer_id(self) -> int:
        digest = hashlib.md5(self.info().encode("utf-8")).digest()
        return int.from_bytes(digest[:4], "little")


def filled_cron_timer(cron: str, alert: str, url: str, self_id: int, group_id: int) -> Timer:
    return Timer(self_id=self_id, group_id=group_id, alert=alert, cron=cron, url=url)


def _drop_middle(chars: str, length: int) -> str:
    """Remove the middle 十 of a three character number such as 二十三."""
    return chars[0] + chars[2] if len(chars) == length else chars


def filled_timer(
    fields: list[str], self_id: int, group_id: int, match_date_only: bool
) -> Timer:
    """Build a timer from matched month, day/week, hour, minute, url and alert.

    On invalid input the returned timer carries the reason in ``alert`` and stays disabled.
    """
    month_str, day_week, hour_str, minute_str = fields[1], fields[2], fields[3], fields[4]
    timer = Timer()

    month = chinese_num_to_int(month_str)
    if (month != -1 and month <= 0) or month > 12:
        timer.alert = "月份非法！"
        return timer
    timer._put(_MONTH, month)

    if len(day_week) == 4:
        day = chinese_num_to_int(day_week[0] + day_week[2])
        if (day != -1 and day <= 0) or day > 31:
            timer.alert = "日期非法1！"
            return timer
        timer._put(_DAY, day)
    elif day_week[-1] == "日":
        day = chinese_num_to_int(day_week[:-1])
        if (day != -1 and day <= 0) or day > 31:
            timer.alert = "日期非法2！"
            return timer
        timer._put(_DAY, day)
    elif day_week[0] == _EVERY:
        timer._put(_WEEK, -1)
    else:
        week = chinese_num_to_int(day_week[1:])
        if week == 7:
            week = 0
        if week < 0 or week > 6:
            timer.alert = "星期非法！"
            return timer
        timer._put(_WEEK, week)

    hour = chinese_num_to_int(_drop_middle(hour_str, 3))
    if hour < -1 or hour > 23:
        timer.alert = "小时非法！"
        return timer
    timer._put(_HOUR, hour)

    minute = chinese_num_to_int(_drop_middle(minute_str, 3))
    if minute < -1 or minute > 59:
        timer.alert = "分钟非法！"
        return timer
    timer._put(_MINUTE, minute)

    if not match_date_only:
        url_field = fields[5]
        if url_field:
            # the field starts with the three byte character 用
            timer.url = url_field.encode("utf-8")[3:].decode("utf-8", "replace")
            log.debug("timer url %s", timer.url)
            if not timer.url.startswith("http"):
                timer.url = "illegal"
                return timer
        timer.alert = fields[6]
        timer._set_enabled(True)
    timer.self_id = self_id
    timer.group_id = group_id
    return timer


def _atoi(text: str) -> int:
    if re.fullmatch(r"[+-]?[0-9]+", text):
        return int(text)
    return 0


def chinese_num_to_int(text: str) -> int:
    """Convert a one or two digit Chinese or Arabic number; 每 is -1, 每二 is -2."""
    if not text:
        raise ValueError("empty number")
    length = len(text)
    if text[0].isdecimal():
        return _atoi(text)
    if text[0] == _EVERY:
        return -chinese_char_to_int(text[1]) if length == 2 else -1
    if length == 1:
        return chinese_char_to_int(text[0])
    tens = chinese_char_to_int(text[0])
    if tens != 10:
        tens *= 10
    ones = chinese_char_to_int(text[1])
    if ones == 10:
        ones = 0
    return tens + ones


def chinese_char_to_int(char: str) -> int:
    """Map a single Chinese numeral to 0..10; 日 and 天 mean Sunday (7)."""
    if char in ("日", "天"):
        return 7
    index = _CHINESE_DIGITS.find(char)
    return index if index >= 0 and len(char) == 1 else 0