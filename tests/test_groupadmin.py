import random

import pytest

from zeroplug.groupadmin import (
    check_card,
    check_quiz_answer,
    check_title,
    join_quiz,
    mute_duration,
    pick_lucky,
    self_mute_duration,
    toggle_gist_approval,
    toggle_join_verification,
    unescape_brackets,
)


def test_mute_minutes_in_seconds():
    assert mute_duration(1, "分钟") == 60


def test_mute_hours_equal_minutes():
    assert mute_duration(2, "小时") == mute_duration(120, "分钟")


def test_mute_unknown_unit_is_minutes():
    assert mute_duration(7, "xyz") == mute_duration(7, "分钟")


def test_mute_capped_at_a_month():
    assert mute_duration(100, "天") == 43199 * 60
    assert mute_duration(43200, "分钟") == 43199 * 60


@pytest.mark.parametrize("unit,word", [("h", "小时"), ("days", "天"), ("min", "分钟")])
def test_self_mute_english_units(unit, word):
    assert self_mute_duration(3, unit) == self_mute_duration(3, word)


def test_admin_mute_ignores_english_units():
    assert mute_duration(3, "h") == mute_duration(3, "分钟")


def test_check_card_limits():
    assert check_card("a" * 60) == "a" * 60
    with pytest.raises(ValueError, match="名字太长啦"):
        check_card("a" * 61)
    with pytest.raises(ValueError):
        check_card("名" * 21)


def test_check_title_limits():
    assert check_title("头衔头衔头衔") == "头衔头衔头衔"
    with pytest.raises(ValueError, match="头衔太长啦"):
        check_title("头衔头衔头衔头")


def test_unescape_brackets():
    assert unescape_brackets("&#91;CQ:at,qq=1&#93;") == "[CQ:at,qq=1]"


def test_pick_lucky_self():
    members = [{"user_id": 9, "last_sent_time": 1}]
    assert pick_lucky(members, 9, 1) == "幸运儿居然是我自己"


def test_pick_lucky_sender():
    members = [{"user_id": 5, "last_sent_time": 1}]
    assert pick_lucky(members, 9, 5) == "哎呀，就是你自己了"


def test_pick_lucky_uses_nickname_when_no_card():
    members = [{"user_id": 5, "last_sent_time": 1, "card": "", "nickname": "bob"}]
    assert pick_lucky(members, 9, 1) == "bob 就是你啦！"


def test_pick_lucky_prefers_card():
    members = [{"user_id": 5, "last_sent_time": 1, "card": "carol", "nickname": "bob"}]
    assert pick_lucky(members, 9, 1) == "carol 就是你啦！"


def test_pick_lucky_only_recent_members():
    members = [
        {"user_id": 100 + i, "last_sent_time": i, "nickname": f"n{i}"} for i in range(15)
    ]
    recent = {f"n{i} 就是你啦！" for i in range(5, 15)}
    rng = random.Random(3)
    for _ in range(50):
        assert pick_lucky(members, 1, 2, rng) in recent


def test_pick_lucky_empty():
    with pytest.raises(ValueError):
        pick_lucky([], 1, 2)


def test_join_verification_toggle():
    assert toggle_join_verification(0, "开启") == 1
    assert toggle_join_verification(toggle_join_verification(0, "打开"), "关闭") == 0
    with pytest.raises(ValueError):
        toggle_join_verification(0, "maybe")


def test_gist_approval_toggle():
    on = toggle_gist_approval(0, "启用")
    assert on & 0x10 == 0x10
    assert toggle_gist_approval(0x12, "禁用") & 0x2 == 0
    with pytest.raises(ValueError):
        toggle_gist_approval(0, "?")


def test_join_quiz_answer_is_sum():
    rng = random.Random(1)
    for _ in range(20):
        quiz = join_quiz(rng)
        assert 0 <= quiz.a < 100 and 0 <= quiz.b < 100
        assert quiz.answer == quiz.a + quiz.b
        assert f"{quiz.a}+{quiz.b}=?" in quiz.prompt("bot")


def test_check_quiz_answer():
    assert check_quiz_answer(["1 2"], 12) is True
    assert check_quiz_answer(["5"], 6) is False
    assert check_quiz_answer(["abc", "hello"], 6) is None
    assert check_quiz_answer(["abc", "6"], 6) is True