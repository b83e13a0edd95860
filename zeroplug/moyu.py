"""Slacking-off reminders: days until the weekend and the public holidays."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable

HOLIDAY_NAMES = ("元旦", "春节", "清明节", "劳动节", "端午节", "中秋节", "国庆节")

_GREETING = (
    "上午好，摸鱼人！\n工作再累，一定不要忘记摸鱼哦！有事没事起身去茶水间，去厕所，"
    "去廊道走走别老在工位上坐着，钱是老板的,但命是自己的。\n"
)
_CLOSING = "上班是帮老板赚钱，摸鱼是赚老板的钱！最后，祝愿天下所有摸鱼人，都能愉快的渡过每一天…"
_NUMBER = re.compile(r"\s*([+-]?\d+)")


@dataclass(frozen=True)
class Holiday:
    """A holiday starting at ``date`` and lasting ``duration``."""

    name: str
    date: datetime
    duration: timedelta

    def describe(self, now: datetime) -> str:
        """How far away the holiday is, or whether it is on or over."""
        remaining = self.date - now
        if remaining >= timedelta(0):
            days = remaining.total_seconds() / 86400.0
            return f"距离{self.name}还有: {days:.2f}天！"
        if remaining + self.duration >= timedelta(0):
            return f"好好享受 {self.name} 假期吧!"
        return f"今年 {self.name} 假期已过"


def _scan(value: str) -> list[int]:
    """Read up to four integers separated by underscores; missing ones are 0."""
    numbers: list[int] = []
    position = 0
    for index in range(4):
        if index:
            if value[position:position + 1] != "_":
                break
            position += 1
        match = _NUMBER.match(value, position)
        if match is None:
            break
        numbers.append(int(match.group(1)))
        position = match.end()
    return numbers + [0] * (4 - len(numbers))


def _normal_date(year: int, month: int, day: int) -> datetime:
    year += (month - 1) // 12
    month = (month - 1) % 12 + 1
    if not datetime.min.year <= year <= datetime.max.year:
        raise ValueError(f"year {year} out of range")
    try:
        return datetime(year, month, 1) + timedelta(days=day - 1)
    except OverflowError as err:
        raise ValueError(str(err)) from err


def parse_holiday(name: str, value: str) -> Holiday:
    """Build a holiday from a ``days_year_month_day`` registry value."""
    days, year, month, day = _scan(value)
    return Holiday(name, _normal_date(year, month, day), timedelta(days=days))


def weekend(now: datetime) -> str:
    """Days left until the weekend."""
    weekday = now.isoweekday() % 7
    if weekday in (0, 6):
        return "好好享受周末吧！"
    return f"距离周末还有:{5 - weekday}天！"


def daily_digest(now: datetime, holidays: Iterable[Holiday]) -> str:
    """The full morning reminder text."""
    parts = [now.strftime("%Y-%m-%d"), _GREETING, weekend(now), "\n"]
    for holiday in holidays:
        parts.append(holiday.describe(now))
        parts.append("\n")
    parts.append(_CLOSING)
    return "".join(parts)