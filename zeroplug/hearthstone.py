"""Hearthstone card search and deck code images."""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, NamedTuple

import requests

SITE = "https://hs.fbigame.com"
USER_AGENT = (
    "Mozilla/5.0 (Linux; Android 6.0; Nexus 5 Build/MRA58N) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/86.0.4240.198 Mobile Safari/537.36"
)
AJAX = "https://hs.fbigame.com/ajax.php?"
PARA = (
    "mod=get_cards_list&"
    "mode=-1&"
    "extend=-1&"
    "mutil_extend=&"
    "hero=-1&"
    "rarity=-1&"
    "cost=-1&"
    "mutil_cost=&"
    "techlevel=-1&"
    "type=-1&"
    "collectible=-1&"
    "isbacon=-1&"
    "page=1&"
    "search_type=1&"
    "deckmode=normal"
)
CARD_IMAGE_BASE = "https://res.fbigame.com/hs/v13/"
MAX_CARDS = 5

_HASH_MARK = 'var hash = "'
_DECK_CODE = re.compile(r"^[\s\S]*?(AAE[a-zA-Z0-9/\+=]{70,})[\s\S]*$")


class Card(NamedTuple):
    """A card found by a search."""

    card_id: str
    auth_key: str


def extract_hash(page: str) -> str:
    """The request hash embedded in the site's front page."""
    _, found, rest = page.partition(_HASH_MARK)
    if not found:
        raise ValueError("hash not found in page")
    return rest.split('"', 1)[0]


def search_url(page_hash: str, query: str) -> str:
    return AJAX + PARA + "&hash=" + page_hash + "&search=" + query


def deck_image_url(page_hash: str, code: str) -> str:
    return (
        AJAX + PARA + "mod=general_deck_image&deck_code=" + code
        + "&deck_text=&hash=" + page_hash + "&search=" + code
    )


def card_image_url(card_id: str, auth_key: str) -> str:
    return CARD_IMAGE_BASE + card_id + ".png?auth_key=" + auth_key


def find_deck_code(text: str) -> str | None:
    """The deck code contained in a message, if any."""
    match = _DECK_CODE.match(text)
    return match.group(1) if match else None


def _as_str(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else json.dumps(value, ensure_ascii=False)


class HearthstoneClient:
    """Talks to the card database site."""

    def __init__(self, session: Any = None) -> None:
        self._http = session if session is not None else requests.Session()

    def _get(self, url: str) -> Any:
        response = self._http.get(
            url, headers={"Referer": SITE, "User-Agent": USER_AGENT}, timeout=30
        )
        if response.status_code != 200:
            raise RuntimeError(f"code {response.status_code}")
        return response

    def _hash(self) -> str:
        return extract_hash(self._get(SITE).text)

    def search(self, query: str) -> list[Card]:
        """Cards matching ``query``; LookupError when there are none."""
        reply = json.loads(self._get(search_url(self._hash(), query)).text)
        entries = reply.get("list") if isinstance(reply, dict) else None
        if not entries:
            raise LookupError("查询为空！")
        return [
            Card(_as_str(entry.get("CardID")), _as_str(entry.get("auth_key")))
            for entry in entries
            if isinstance(entry, dict)
        ]

    def deck_image(self, code: str) -> str:
        """The deck picture as a ``base64://`` URI."""
        reply = json.loads(self._get(deck_image_url(self._hash(), code)).text)
        image = reply.get("img") if isinstance(reply, dict) else None
        return "base64://" + _as_str(image)

    def card_image(self, card_id: str, auth_key: str, cache_dir: str | Path) -> Path:
        """Path of the card's picture, downloading it into ``cache_dir`` if needed."""
        target = Path(cache_dir) / card_id
        if not target.exists():
            data = self._get(card_image_url(card_id, auth_key)).content
            target.write_bytes(data)
        return target