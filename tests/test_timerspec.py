import pytest

from zeroplug.timerspec import (
    Timer,
    chinese_char_to_int,
    chinese_num_to_int,
    filled_cron_timer,
    filled_timer,
)


def make(month, day_week, hour, minute, url="", alert="test", only=False):
    return filled_timer(["", month, day_week, hour, minute, url, alert], 0, 0, only)


def test_clock_case_fields():
    timer = filled_timer(["", "12", "-1", "12", "0", "", "test"], 0, 0, False)
    assert timer.month() == 12
    assert timer.day() == 0
    assert timer.week() == 1
    assert timer.hour() == 12
    assert timer.minute() == 0
    assert timer.enabled()
    assert timer.alert == "test"
    assert timer.info() == "[0]12月0日1周12:0"


@pytest.mark.parametrize(
    "raw, expected",
    [("十二", 12), ("二十", 20), ("五", 5), ("每", -1), ("每二", -2), ("12", 12), ("十", 10)],
)
def test_chinese_num_to_int(raw, expected):
    assert chinese_num_to_int(raw) == expected


def test_chinese_num_empty_raises():
    with pytest.raises(ValueError):
        chinese_num_to_int("")


def test_chinese_char_to_int():
    assert chinese_char_to_int("天") == 7
    assert chinese_char_to_int("日") == 7
    assert chinese_char_to_int("九") == 9
    assert chinese_char_to_int("x") == 0


def test_every_fields_round_trip():
    timer = make("每", "每日", "每", "每")
    assert (timer.month(), timer.day(), timer.hour(), timer.minute()) == (-1, -1, -1, -1)


def test_long_day_and_hour():
    timer = make("三", "二十五日", "二十三", "五十九")
    assert (timer.month(), timer.day(), timer.hour(), timer.minute()) == (3, 25, 23, 59)


def test_short_day():
    assert make("1", "十二日", "8", "0").day() == 12


def test_weekly_every_week():
    timer = make("每", "每周", "8", "0")
    assert timer.week() == -1


def test_sunday_via_tian():
    assert make("每", "周天", "8", "0").week() == 0


def test_sunday_via_ri_is_rejected():
    timer = make("每", "周日", "8", "0")
    assert timer.alert == "日期非法2！"
    assert not timer.enabled()


@pytest.mark.parametrize(
    "fields, message",
    [
        (("13", "1日", "8", "0"), "月份非法！"),
        (("1", "32日", "8", "0"), "日期非法2！"),
        (("1", "1日", "24", "0"), "小时非法！"),
        (("1", "1日", "8", "60"), "分钟非法！"),
    ],
)
def test_invalid_fields(fields, message):
    timer = make(*fields)
    assert timer.alert == message
    assert not timer.enabled()


def test_url_is_stripped():
    timer = make("每", "每日", "8", "0", url="用http://example.com/a.png")
    assert timer.url == "http://example.com/a.png"
    assert timer.enabled()


def test_illegal_url():
    timer = make("每", "每日", "8", "0", url="用ftp://example.com")
    assert timer.url == "illegal"
    assert not timer.enabled()


def test_match_date_only_keeps_disabled():
    timer = make("1", "1日", "8", "0", only=True)
    assert not timer.enabled()
    assert timer.alert == ""


def test_timer_id_depends_on_info():
    first = make("1", "1日", "8", "0")
    second = make("1", "1日", "8", "0", alert="other")
    third = filled_timer(["", "1", "1日", "8", "0", "", "test"], 0, 5, False)
    assert first.timer_id() == second.timer_id()
    assert first.timer_id() != third.timer_id()
    assert 0 <= first.timer_id() < 2**32


def test_cron_timer_info():
    timer = filled_cron_timer("0 8 * * *", "hi", "", 1, 7)
    assert timer.info() == "[7]0 8 * * *"
    assert timer.alert == "hi"
    assert timer.self_id == 1


def test_default_timer_is_disabled():
    assert Timer().enabled() is False