"""GitHub repository search."""

from __future__ import annotations

import json
import re
from typing import Any, Mapping

import requests

SEARCH_API = "https://api.github.com/search/repositories"
PREVIEW_BASE = "https://opengraph.githubassets.com/0/"
USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/88.0.4324.182 Safari/537.36"
)
_COMMAND = re.compile(r"^>github\s(-.{1,10}? )?(.*)$", re.DOTALL)


def notnull(text: str, default: str) -> str:
    """``text``, or ``default`` when it is empty."""
    return text if text else default


def parse_command(text: str) -> tuple[str, str]:
    """Split ``>github [-flag ]query`` into the flag (with its space) and the query."""
    match = _COMMAND.match(text)
    if match is None:
        raise ValueError(f"not a github command: {text!r}")
    return match.group(1) or "", match.group(2)


def search_repository(query: str, session: Any = None) -> dict[str, Any]:
    """Best matching repository for ``query``."""
    http = session if session is not None else requests
    response = http.get(
        SEARCH_API, params={"q": query}, headers={"User-Agent": USER_AGENT}, timeout=30
    )
    if response.status_code != 200:
        raise RuntimeError(f"code {response.status_code}")
    info = json.loads(response.text)
    if _int(info.get("total_count")) == 0 or not info.get("items"):
        raise LookupError("没有找到这样的仓库")
    return info["items"][0]


def _int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def _str(value: Any) -> str:
    return value if isinstance(value, str) else ""


def format_repository(repo: Mapping[str, Any]) -> str:
    """Text summary of a repository."""
    license_info = repo.get("license")
    license_key = _str(license_info.get("key")) if isinstance(license_info, Mapping) else ""
    return (
        f"{_str(repo.get('full_name'))}\n"
        f"Description: {_str(repo.get('description'))}\n"
        f"Star/Fork/Issue: {_int(repo.get('watchers'))}/{_int(repo.get('forks'))}"
        f"/{_int(repo.get('open_issues'))}\n"
        f"Language: {notnull(_str(repo.get('language')), 'None')}\n"
        f"License: {notnull(license_key.upper(), 'None')}\n"
        f"Last pushed: {_str(repo.get('pushed_at'))}\n"
        f"Jump: {_str(repo.get('html_url'))}\n"
    )


def preview_url(full_name: str) -> str:
    """Open Graph preview image of a repository."""
    return PREVIEW_BASE + full_name