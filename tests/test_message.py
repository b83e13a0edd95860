import pytest

from zeroplug.message import (
    Segment,
    at,
    at_all,
    image,
    record,
    text,
    to_cq,
    unescape_cq,
)


@pytest.mark.parametrize("raw", ["plain", "[brackets]", "a & b", "&#91;", "x,y"])
def test_text_round_trip(raw):
    assert unescape_cq(to_cq([text(raw)])) == raw


def test_text_escapes_brackets():
    rendered = text("[x]").to_cq()
    assert "[" not in rendered and "]" not in rendered


def test_at_all_code():
    assert at_all().to_cq() == "[CQ:at,qq=all]"


def test_at_uses_number():
    assert at(12345).data == {"qq": "12345"}


def test_with_data_keeps_original():
    base = image("http://example.com/a.png")
    cached = base.with_data("cache", 0)
    assert base.data == {"file": "http://example.com/a.png"}
    assert cached.data == {"file": "http://example.com/a.png", "cache": "0"}


def test_param_comma_escaped():
    rendered = record("a,b").to_cq()
    assert "," not in rendered.split(",", 1)[1]
    assert unescape_cq(rendered.split("=", 1)[1][:-1]) == "a,b"


def test_text_joins_strings():
    assert text("a", "b", 1).data["text"] == "ab1"


def test_text_spaces_between_non_strings():
    assert text(1, 2).data["text"] == "1 2"


def test_to_cq_concatenates():
    segments = [at_all(), text("hi")]
    assert to_cq(segments) == at_all().to_cq() + text("hi").to_cq()


def test_segment_equality():
    assert Segment("image", {"file": "f"}) == image("f")