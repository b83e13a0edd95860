"""Message segments in CQ-code form."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Iterable


def _escape(value: str, in_param: bool) -> str:
    value = value.replace("&", "&amp;").replace("[", "&#91;").replace("]", "&#93;")
    if in_param:
        value = value.replace(",", "&#44;")
    return value


@dataclass(frozen=True)
class Segment:
    """One element of a chat message."""

    type: str
    data: dict[str, str] = field(default_factory=dict)

    def with_data(self, key: str, value: object) -> "Segment":
        """Return a copy with one more data entry."""
        return replace(self, data={**self.data, key: str(value)})

    def to_cq(self) -> str:
        """Render the segment as CQ code."""
        if self.type == "text":
            return _escape(self.data.get("text", ""), in_param=False)
        params = "".join(f",{key}={_escape(value, True)}" for key, value in self.data.items())
        return f"[CQ:{self.type}{params}]"


def text(*args: object) -> Segment:
    """A text segment; operands are joined, with a space between two non-strings."""
    parts: list[str] = []
    previous: object = ""
    for index, arg in enumerate(args):
        if index and not isinstance(arg, str) and not isinstance(previous, str):
            parts.append(" ")
        parts.append(str(arg))
        previous = arg
    return Segment("text", {"text": "".join(parts)})


def image(url: str) -> Segment:
    return Segment("image", {"file": url})


def at(qq: int | str) -> Segment:
    return Segment("at", {"qq": str(qq)})


def at_all() -> Segment:
    return at("all")


def record(url: str) -> Segment:
    return Segment("record", {"file": url})


def to_cq(segments: Iterable[Segment]) -> str:
    """Render a whole message as CQ code."""
    return "".join(segment.to_cq() for segment in segments)


def unescape_cq(text: str) -> str:
    """Undo CQ-code escaping in user supplied text."""
    text = text.replace("&#44;", ",")
    text = text.replace("&#91;", "[")
    text = text.replace("&#93;", "]")
    return text.replace("&amp;", "&")