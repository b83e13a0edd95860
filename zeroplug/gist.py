"""Automatic join approval by a timestamp published in a GitHub gist."""

from __future__ import annotations

import hashlib
import logging
import re
import sqlite3
import threading
import time
from typing import Callable

import requests

log = logging.getLogger(__name__)

GIST_RAW = "https://gist.githubusercontent.com/{}/{}/raw/{}"
VALID_SECONDS = 600
_ANSWER_MARK = "答案："
_INTEGER = re.compile(r"[+-]?[0-9]+")

Fetch = Callable[[str], bytes]


def parse_join_answer(comment: str) -> tuple[str, str]:
    """Split the answer of a join request into GitHub user name and gist hash."""
    start = comment.find(_ANSWER_MARK)
    answer = comment[start + len(_ANSWER_MARK):] if start >= 0 else comment
    divider = answer.find("/")
    if divider <= 0:
        raise ValueError("格式错误!")
    return answer[:divider], answer[divider + 1:]


def gist_url(username: str, gist_hash: str, group_id: int) -> str:
    """Raw URL of the gist file named after the md5 of the group number."""
    name = hashlib.md5(str(group_id).encode("ascii")).hexdigest()
    return GIST_RAW.format(username, gist_hash, name)


def _http_fetch(url: str) -> bytes:
    response = requests.get(url, timeout=30)
    response.raise_for_status()
    return response.content


class GistVerifier:
    """Checks gist timestamps and remembers which GitHub users have joined."""

    def __init__(self, db_path: str, fetch: Fetch | None = None) -> None:
        self._fetch = fetch or _http_fetch
        self._lock = threading.Lock()
        self._db = sqlite3.connect(db_path, check_same_thread=False)
        with self._db:
            self._db.execute(
                "CREATE TABLE IF NOT EXISTS member (qq INTEGER PRIMARY KEY, ghun TEXT)"
            )

    def __enter__(self) -> "GistVerifier":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _known(self, username: str) -> bool:
        with self._lock:
            row = self._db.execute(
                "SELECT 1 FROM member WHERE ghun = ?", (username,)
            ).fetchone()
        return row is not None

    def check_new_user(
        self,
        qq: int,
        group_id: int,
        username: str,
        gist_hash: str,
        now: float | None = None,
    ) -> tuple[bool, str]:
        """Return whether to approve the request and, if not, the reason."""
        if self._known(username):
            return False, "该github用户已入群"
        url = gist_url(username, gist_hash, group_id)
        log.debug("visiting gist %s", url)
        try:
            data = self._fetch(url)
        except Exception as err:
            return False, f"无法连接到gist: {err}"
        body = data.decode("utf-8", "replace")
        log.debug("gist content %r", body)
        if not _INTEGER.fullmatch(body):
            return False, "时间戳格式错误: " + body
        stamp = int(body)
        current = int(time.time() if now is None else now)
        if abs(current - stamp) >= VALID_SECONDS:
            return False, "时间戳超时"
        with self._lock, self._db:
            self._db.execute(
                "REPLACE INTO member (qq, ghun) VALUES (?, ?)", (qq, username)
            )
        return True, ""

    def close(self) -> None:
        with self._lock:
            self._db.close()