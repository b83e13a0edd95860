from datetime import datetime, timedelta

import pytest

from zeroplug.timerspec import filled_timer
from zeroplug.wakeup import first_weekday, next_wake_time, should_fire


def make(month, day_week, hour, minute):
    return filled_timer(["", month, day_week, hour, minute, "", "alert"], 0, 0, False)


@pytest.mark.parametrize(
    "now",
    [
        datetime(2024, 1, 1, 10, 0),
        datetime(2024, 1, 6, 16, 30, 5),
        datetime(2024, 1, 6, 23, 59),
        datetime(2024, 2, 29, 0, 0),
        datetime(2023, 12, 31, 12, 0),
    ],
)
def test_next_wake_time_not_in_past(now):
    timer = make("每", "周六", "16", "30")
    assert next_wake_time(timer, now) > now


def test_weekly_saturday_pinned():
    timer = make("每", "周六", "16", "30")
    assert next_wake_time(timer, datetime(2024, 1, 1, 10, 0)) == datetime(2024, 1, 6, 16, 30)


def test_every_minute():
    now = datetime(2024, 1, 1, 10, 0, 12)
    timer = make("每", "每日", "每", "每")
    assert next_wake_time(timer, now) == now + timedelta(minutes=1)


def test_daily_pinned():
    timer = make("每", "每日", "8", "0")
    assert next_wake_time(timer, datetime(2024, 1, 1, 10, 0)) == datetime(2024, 1, 2, 8, 0)


@pytest.mark.parametrize(
    "fields",
    [("3", "15日", "9", "0"), ("每", "1日", "9", "0"), ("12", "每周", "0", "0"), ("每", "每日", "每", "5")],
)
def test_wake_time_always_future(fields):
    timer = make(*fields)
    for day in range(1, 29, 3):
        now = datetime(2024, 5, day, 13, 17)
        assert next_wake_time(timer, now) > now


def test_first_weekday():
    assert first_weekday(datetime(2024, 1, 17, 8, 0), 1) == datetime(2024, 1, 1, 8, 0)
    assert first_weekday(datetime(2024, 1, 17), 6).day == 6


def test_first_weekday_invalid():
    with pytest.raises(ValueError):
        first_weekday(datetime(2024, 1, 1), 7)


def test_should_fire_daily():
    timer = make("每", "每日", "16", "30")
    assert should_fire(timer, datetime(2024, 1, 3, 16, 30))
    assert not should_fire(timer, datetime(2024, 1, 3, 16, 31))


def test_should_fire_weekly():
    timer = make("每", "周六", "16", "30")
    assert should_fire(timer, datetime(2024, 1, 6, 16, 30))
    assert not should_fire(timer, datetime(2024, 1, 1, 16, 30))


def test_should_fire_month_mismatch():
    timer = make("2", "1日", "每", "每")
    assert should_fire(timer, datetime(2024, 2, 1, 5, 5))
    assert not should_fire(timer, datetime(2024, 3, 1, 5, 5))