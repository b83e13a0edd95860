"""Per-group welcome and farewell messages kept in SQLite."""

from __future__ import annotations

import sqlite3
import threading

from zeroplug.message import unescape_cq

_TABLES = ("welcome", "farewell")


def render_greeting(
    template: str, user_id: int, nickname: str, group_id: int, group_name: str
) -> str:
    """Fill the {at} {nickname} {avatar} {uid} {gid} {groupname} placeholders."""
    uid = str(user_id)
    replacements = (
        ("{at}", f"[CQ:at,qq={uid}]"),
        ("{nickname}", nickname),
        ("{avatar}", f"[CQ:image,file=http://q4.qlogo.cn/g?b=qq&nk={uid}&s=640]"),
        ("{uid}", uid),
        ("{gid}", str(group_id)),
        ("{groupname}", group_name),
    )
    for placeholder, value in replacements:
        template = template.replace(placeholder, value)
    return template


def default_farewell(nickname: str, user_id: int) -> str:
    """Message sent when a member leaves and no farewell is set."""
    return f"{nickname}({user_id})离开了我们..."


class GreetingStore:
    """Welcome and farewell templates, one of each per group."""

    def __init__(self, path: str) -> None:
        self._lock = threading.Lock()
        self._db = sqlite3.connect(path, check_same_thread=False)
        with self._db:
            for table in _TABLES:
                self._db.execute(
                    f"CREATE TABLE IF NOT EXISTS {table} (gid INTEGER PRIMARY KEY, msg TEXT)"
                )

    def __enter__(self) -> "GreetingStore":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _set(self, table: str, group_id: int, text: str) -> None:
        with self._lock, self._db:
            self._db.execute(
                f"REPLACE INTO {table} (gid, msg) VALUES (?, ?)", (group_id, unescape_cq(text))
            )

    def _get(self, table: str, group_id: int) -> str | None:
        with self._lock:
            row = self._db.execute(
                f"SELECT msg FROM {table} WHERE gid = ?", (group_id,)
            ).fetchone()
        return None if row is None else row[0]

    def set_welcome(self, group_id: int, text: str) -> None:
        self._set("welcome", group_id, text)

    def welcome(self, group_id: int) -> str | None:
        """The group's welcome template, or None if none is set."""
        return self._get("welcome", group_id)

    def set_farewell(self, group_id: int, text: str) -> None:
        self._set("farewell", group_id, text)

    def farewell(self, group_id: int) -> str | None:
        """The group's farewell template, or None if none is set."""
        return self._get("farewell", group_id)

    def close(self) -> None:
        with self._lock:
            self._db.close()