"""A small buffer of random pictures fetched ahead of time."""

from __future__ import annotations

import base64
import json
import logging
import queue
from typing import Any, Callable, Mapping

import requests

log = logging.getLogger(__name__)

API = "https://api.lolicon.app/setu/v2"
CAPACITY = 10
REFILL_COUNT = 2

Fetch = Callable[[str], bytes]


def original_url(payload: Mapping[str, Any]) -> str:
    """Original picture URL in an API reply, moved to the i.pixiv.re mirror."""
    error = payload.get("error")
    if error:
        raise RuntimeError(str(error))
    try:
        url = payload["data"][0]["urls"]["original"]
    except (KeyError, IndexError, TypeError) as err:
        raise LookupError("no picture in reply") from err
    if not isinstance(url, str) or not url:
        raise LookupError("no picture in reply")
    return url.replace("i.pixiv.cat", "i.pixiv.re")


def image_name(url: str) -> str:
    """File name of the picture without its four character extension."""
    start = url.rfind("/") + 1
    end = len(url) - 4
    if end < start:
        raise ValueError(f"no file name in {url!r}")
    return url[start:end]


def _http_fetch(url: str) -> bytes:
    response = requests.get(url, timeout=30)
    response.raise_for_status()
    return response.content


class ImageQueue:
    """Pictures waiting to be sent, refilled in the background."""

    def __init__(self, fetch: Fetch | None = None, capacity: int = CAPACITY) -> None:
        self._fetch = fetch or _http_fetch
        self._queue: queue.Queue[str] = queue.Queue(maxsize=capacity)
        self.custom_api = ""

    def set_custom_api(self, url: str) -> str:
        """Use ``url`` as the picture source instead of the default API."""
        url = url.strip()
        if not url.startswith("http"):
            raise ValueError("url非法!")
        self.custom_api = url
        return url

    def _next_item(self) -> str:
        if self.custom_api:
            data = self._fetch(self.custom_api)
            return "base64://" + base64.b64encode(data).decode("ascii")
        return original_url(json.loads(self._fetch(API)))

    def refill(self, count: int = REFILL_COUNT) -> list[Exception]:
        """Fetch up to ``count`` pictures into free slots; return the failures."""
        errors: list[Exception] = []
        free = self._queue.maxsize - self._queue.qsize()
        for _ in range(min(free, count)):
            try:
                item = self._next_item()
            except (OSError, ValueError, RuntimeError, LookupError) as err:
                log.warning("fetching picture failed: %s", err)
                errors.append(err)
                continue
            try:
                self._queue.put_nowait(item)
            except queue.Full:
                break
        return errors

    def get(self, timeout: float = 60.0) -> str:
        """Next picture; TimeoutError if none arrives in time."""
        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty as err:
            raise TimeoutError("等待填充，请稍后再试......") from err