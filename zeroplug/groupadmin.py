"""Group administration helpers: mute lengths, name checks, lucky draw, join quiz."""

from __future__ import annotations

import random
import re
from typing import Any, Iterable, Mapping, NamedTuple, Sequence

MAX_MUTE_MINUTES = 43199  # QQ allows at most one month of muting
MAX_CARD_BYTES = 60
MAX_TITLE_BYTES = 18

_MUTE_FACTORS = {"分钟": 1, "小时": 60, "天": 60 * 24}
_SELF_MUTE_FACTORS = {
    **{unit: 1 for unit in ("分钟", "min", "mins", "m")},
    **{unit: 60 for unit in ("小时", "hour", "hours", "h")},
    **{unit: 60 * 24 for unit in ("天", "day", "days", "d")},
}

_ENABLE_WORDS = ("开启", "打开", "启用")
_DISABLE_WORDS = ("关闭", "关掉", "禁用")

_INTEGER = re.compile(r"[+-]?[0-9]+")


def _mute_seconds(amount: int, unit: str, factors: Mapping[str, int]) -> int:
    minutes = amount * factors.get(unit, 1)
    if minutes >= MAX_MUTE_MINUTES + 1:
        minutes = MAX_MUTE_MINUTES
    return minutes * 60


def mute_duration(amount: int, unit: str) -> int:
    """Seconds to mute for an admin's ban command; unknown units mean minutes."""
    return _mute_seconds(amount, unit, _MUTE_FACTORS)


def self_mute_duration(amount: int, unit: str) -> int:
    """Seconds to mute for the self-mute command, which also takes English units."""
    return _mute_seconds(amount, unit, _SELF_MUTE_FACTORS)


def check_card(name: str) -> str:
    """Return the group card if it is short enough, else raise ValueError."""
    if len(name.encode("utf-8")) > MAX_CARD_BYTES:
        raise ValueError("名字太长啦！")
    return name


def check_title(title: str) -> str:
    """Return the special title if it is short enough, else raise ValueError."""
    if len(title.encode("utf-8")) > MAX_TITLE_BYTES:
        raise ValueError("头衔太长啦！")
    return title


def unescape_brackets(text: str) -> str:
    """Turn escaped square brackets back into CQ-code brackets."""
    return text.replace("&#91;", "[").replace("&#93;", "]")


def pick_lucky(
    members: Sequence[Mapping[str, Any]],
    self_id: int,
    user_id: int,
    rng: random.Random | None = None,
) -> str:
    """Pick one of the ten most recently active members and say who it is."""
    if not members:
        raise ValueError("no group members")
    rng = rng or random.Random()
    recent = sorted(members, key=lambda member: int(member.get("last_sent_time", 0)))[-10:]
    who = rng.choice(recent)
    who_id = int(who.get("user_id", 0))
    if who_id == self_id:
        return "幸运儿居然是我自己"
    if who_id == user_id:
        return "哎呀，就是你自己了"
    nick = who.get("card") or who.get("nickname") or ""
    return f"{nick} 就是你啦！"


def toggle_join_verification(data: int, option: str) -> int:
    """New plugin data after switching the join quiz on or off."""
    if option in _ENABLE_WORDS:
        return data | 1
    if option in _DISABLE_WORDS:
        return data & 0x7FFFFFFF_FFFFFFFE
    raise ValueError(f"unknown option {option!r}")


def toggle_gist_approval(data: int, option: str) -> int:
    """New plugin data after switching gist based join approval on or off."""
    if option in _ENABLE_WORDS:
        return data | 0x10
    if option in _DISABLE_WORDS:
        return data & 0x7FFFFFFF_FFFFFFFD
    raise ValueError(f"unknown option {option!r}")


class Quiz(NamedTuple):
    """An addition question asked to new members."""

    a: int
    b: int
    answer: int

    def prompt(self, bot_name: str) -> str:
        return (
            f"考你一道题：{self.a}+{self.b}=?\n"
            f"如果60秒之内答不上来，{bot_name}就要把你踢出去了哦~"
        )


def join_quiz(rng: random.Random | None = None) -> Quiz:
    """Make a new addition question with both operands below 100."""
    rng = rng or random.Random()
    a = rng.randrange(100)
    b = rng.randrange(100)
    return Quiz(a, b, a + b)


def check_quiz_answer(texts: Iterable[str], expected: int) -> bool | None:
    """Check the first numeric text; None when no text holds a number."""
    for piece in texts:
        candidate = piece.replace(" ", "")
        if _INTEGER.fullmatch(candidate):
            return int(candidate) == expected
    return None