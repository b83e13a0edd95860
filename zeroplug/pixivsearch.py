"""Keyword search for illustrations."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Any, Iterable
from urllib.parse import quote_plus

import requests

SEARCH_API = "https://api.pixivel.moe/v2/pixiv/illust/search/"
REFERER = "https://pixivel.moe/"
USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/94.0.4606.61 Safari/537.36"
)
_HREF = re.compile(r'<a href=".*">')


@dataclass(frozen=True)
class Illust:
    """One search hit."""

    id: int = 0
    title: str = ""
    alt_title: str = ""
    description: str = ""
    type: int = 0
    create_date: str = ""
    upload_date: str = ""
    sanity: int = 0
    width: int = 0
    height: int = 0
    page_count: int = 0
    tags: tuple[tuple[str, str], ...] = field(default_factory=tuple)
    bookmarks: int = 0
    likes: int = 0
    comments: int = 0
    views: int = 0
    image: str = ""


def _illust(raw: dict[str, Any]) -> Illust:
    stats = raw.get("statistic") or {}
    tags = tuple(
        (tag.get("name", ""), tag.get("translation", "")) for tag in raw.get("tags") or []
    )
    return Illust(
        id=int(raw.get("id", 0)),
        title=raw.get("title", ""),
        alt_title=raw.get("altTitle", ""),
        description=raw.get("description", ""),
        type=int(raw.get("type", 0)),
        create_date=raw.get("createDate", ""),
        upload_date=raw.get("uploadDate", ""),
        sanity=int(raw.get("sanity", 0)),
        width=int(raw.get("width", 0)),
        height=int(raw.get("height", 0)),
        page_count=int(raw.get("pageCount", 0)),
        tags=tags,
        bookmarks=int(stats.get("bookmarks", 0)),
        likes=int(stats.get("likes", 0)),
        comments=int(stats.get("comments", 0)),
        views=int(stats.get("views", 0)),
        image=raw.get("image", ""),
    )


def parse_search(payload: str | bytes | dict[str, Any]) -> list[Illust]:
    """Illustrations in a search reply; RuntimeError when the reply reports an error."""
    reply = payload if isinstance(payload, dict) else json.loads(payload)
    if reply.get("error"):
        raise RuntimeError(reply.get("message", ""))
    data = reply.get("data") or {}
    return [_illust(raw) for raw in data.get("illusts") or []]


def clean_description(text: str) -> str:
    """Turn the HTML description into plain text."""
    text = text.replace("<br />", "\n").replace("</a>", "")
    return _HREF.sub("", text)


def format_tags(tags: Iterable[tuple[str, str]]) -> str:
    """One ``#tag (translation)`` line per tag, each preceded by a newline."""
    return "".join(
        f"\n#{name}" + (f" ({translation})" if translation else "")
        for name, translation in tags
    )


def search(keyword: str, session: Any = None) -> list[Illust]:
    """Search illustrations by keyword."""
    http = session if session is not None else requests
    response = http.get(
        SEARCH_API + quote_plus(keyword) + "?page=0",
        headers={"Referer": REFERER, "User-Agent": USER_AGENT},
        timeout=30,
    )
    if response.status_code != 200:
        raise RuntimeError(f"code {response.status_code}")
    return parse_search(response.text)


def describe(illust: Illust, user_name: str, user_id: int) -> str:
    """Caption sent along with the picture."""
    return (
        f"{illust.width}x{illust.height}\n"
        f"标题: {illust.title}\n"
        f"副标题: {illust.alt_title}\n"
        f"ID: {illust.id}\n"
        f"画师: {user_name} ({user_id})\n"
        f"分级:{illust.sanity}\n"
        + clean_description(illust.description)
        + format_tags(illust.tags)
    )