"""Guess what a pinyin abbreviation stands for."""

from __future__ import annotations

import json
import re
from typing import Any

import requests

GUESS_API = "https://lab.magiconch.com/api/nbnhhsh/guess"
_COMMAND = re.compile(r"^[?？]{1,2} ?([a-z0-9]+)$")


def parse_query(text: str) -> str:
    """The abbreviation asked about by a ``?? abbr`` command."""
    match = _COMMAND.match(text)
    if match is None:
        raise ValueError(f"not an abbreviation query: {text!r}")
    return match.group(1)


def _as_text(value: Any) -> str:
    return value if isinstance(value, str) else json.dumps(value, ensure_ascii=False)


def guesses(payload: Any) -> list[str]:
    """Translations from an API reply, falling back to input suggestions."""
    first = payload[0] if isinstance(payload, list) and payload else None
    if not isinstance(first, dict):
        return []
    values = first["trans"] if "trans" in first else first.get("inputting")
    if values is None:
        return []
    if not isinstance(values, list):
        values = [values]
    return [_as_text(value) for value in values]


def lookup(text: str, session: Any = None) -> list[str]:
    """Ask the guessing service about ``text``."""
    http = session if session is not None else requests
    response = http.post(GUESS_API, data={"text": text}, timeout=30)
    return guesses(json.loads(response.text))