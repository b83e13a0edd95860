"""When a scheduled reminder wakes up next and whether it fires."""

from __future__ import annotations

from datetime import datetime, timedelta, tzinfo

from zeroplug.timerspec import Timer


def _go_weekday(moment: datetime) -> int:
    return moment.isoweekday() % 7


def _normal_date(
    year: int,
    month: int,
    day: int,
    hour: int,
    minute: int,
    second: int,
    microsecond: int,
    tz: tzinfo | None,
) -> datetime:
    """Build a date, carrying out-of-range fields over the way calendar arithmetic does."""
    year += (month - 1) // 12
    month = (month - 1) % 12 + 1
    start = datetime(year, month, 1, tzinfo=tz)
    return start + timedelta(
        days=day - 1, hours=hour, minutes=minute, seconds=second, microseconds=microsecond
    )


def _add_date(moment: datetime, years: int, months: int, days: int) -> datetime:
    return _normal_date(
        moment.year + years,
        moment.month + months,
        moment.day + days,
        moment.hour,
        moment.minute,
        moment.second,
        moment.microsecond,
        moment.tzinfo,
    )


def first_weekday(date: datetime, weekday: int) -> datetime:
    """First day of ``date``'s month that falls on ``weekday`` (Sunday is 0)."""
    if not 0 <= weekday <= 6:
        raise ValueError(f"invalid weekday {weekday}")
    result = _add_date(date, 0, 0, 1 - date.day)
    while _go_weekday(result) != weekday:
        result += timedelta(days=1)
    return result


def next_wake_time(timer: Timer, now: datetime) -> datetime:
    """Moment the timer's worker should next wake up; always after ``now``."""
    month, day, hour, minute, week = (
        timer.month(),
        timer.day(),
        timer.hour(),
        timer.minute(),
        timer.week(),
    )
    unit = timedelta(0)
    if minute >= 0:
        if hour < 0:
            unit = timedelta(hours=1)
        elif day < 0 or week < 0:
            unit = timedelta(days=1)
        elif day == 0 and week >= 0:
            delta = timedelta(days=week - _go_weekday(now))
            if delta < timedelta(0):
                delta = timedelta(days=7)
            unit += delta
    else:
        unit = timedelta(minutes=1)

    stable = 0
    if minute < 0:
        minute = now.minute
    if hour < 0:
        hour = now.hour
    else:
        stable |= 0x8
    if day < 0:
        day = now.day
    elif day > 0:
        stable |= 0x4
    else:
        day = now.day
        if week >= 0:
            stable |= 0x2
    if month < 0:
        month = now.month
    else:
        stable |= 0x1

    if stable == 0b0101:
        if timer.day() != now.day or timer.month() != now.month:
            hour = 0
    elif stable == 0b1001:
        if timer.month() != now.month:
            day = 0
    elif stable == 0b0001:
        if timer.month() != now.month:
            day = 0
            hour = 0

    date = _normal_date(
        now.year, month, day, hour, minute, now.second, now.microsecond, now.tzinfo
    )
    if unit > timedelta(0):
        date += unit

    if date <= now:
        if timer.month() < 0:
            if timer.day() > 0 or (timer.day() == 0 and timer.week() >= 0):
                date = _add_date(date, 0, 1, 0)
            elif timer.day() < 0 or timer.week() < 0:
                if timer.hour() > 0:
                    date = _add_date(date, 0, 0, 1)
                elif timer.minute() > 0:
                    date += timedelta(hours=1)
        else:
            date = _add_date(date, 1, 0, 0)

    if stable & 0x8 and date.hour != hour:
        if not stable & 0x4:
            date = _add_date(date, 0, 0, 1) - timedelta(hours=1)
        elif not stable & 0x2:
            date = _add_date(date, 0, 0, 7) - timedelta(hours=1)
        else:
            date = _add_date(date, 1, 0, 0) - timedelta(hours=1)
    if stable & 0x4 and date.day != day:
        date = _add_date(date, 1, 0, -1)
    if stable & 0x2 and _go_weekday(date) != week:
        date = first_weekday(_add_date(date, 1, 0, 0), week)

    if date <= now:
        date = now + timedelta(minutes=1)
    return date


def should_fire(timer: Timer, now: datetime) -> bool:
    """Whether the timer's schedule matches ``now`` at minute resolution."""
    if timer.month() >= 0 and timer.month() != now.month:
        return False
    if timer.day() < 0 or timer.day() == now.day:
        pass
    elif timer.day() == 0:
        if timer.week() >= 0 and timer.week() != _go_weekday(now):
            return False
    else:
        return False
    if timer.hour() >= 0 and timer.hour() != now.hour:
        return False
    return timer.minute() < 0 or timer.minute() == now.minute