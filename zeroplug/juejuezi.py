"""The "绝绝子" sentence generator."""

from __future__ import annotations

import json
import re
from typing import Any

import requests

API_URL = "https://www.offjuan.com/api/juejuezi/text"
REFERER = "https://juejuezi.offjuan.com/"
USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/96.0.4664.110 Safari/537.36"
)
KEYWORD = "绝绝子"
_TRIGGER = re.compile("[\u4e00-\u9fa5]{0,10}绝绝子[\u4e00-\u9fa5]{0,10}")


def extract_subject(text: str) -> str:
    """Text left once 绝绝子 is removed.

    Two characters are the verb and the noun; longer text is split into words by the caller.
    """
    if _TRIGGER.search(text) is None:
        raise ValueError(f"not a {KEYWORD} request: {text!r}")
    subject = text.replace(KEYWORD, "")
    if len(subject) < 2:
        raise ValueError("不要只输入绝绝子")
    return subject


def request_body(verb: str, noun: str) -> str:
    """JSON body sent to the generator."""
    return f'{{"verb":"{verb}","noun":"{noun}"}}'


def generate(verb: str, noun: str, session: Any = None) -> str:
    """Generated sentence for ``verb`` and ``noun``; empty if the reply has none."""
    http = session if session is not None else requests
    response = http.post(
        API_URL,
        data=request_body(verb, noun).encode("utf-8"),
        headers={"Referer": REFERER, "User-Agent": USER_AGENT},
        timeout=30,
    )
    try:
        reply = json.loads(response.text)
    except ValueError:
        return ""
    if not isinstance(reply, dict):
        return ""
    value = reply.get("text")
    if value is None:
        return ""
    return value if isinstance(value, str) else json.dumps(value, ensure_ascii=False)