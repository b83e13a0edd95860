import json
from urllib.parse import quote_plus

import pytest

from zeroplug import pixivsearch as ps

PAYLOAD = {
    "error": False,
    "message": "",
    "data": {
        "illusts": [
            {
                "id": 77,
                "title": "Sky",
                "altTitle": "Blue",
                "description": "hi<br />there",
                "type": 0,
                "sanity": 2,
                "width": 800,
                "height": 600,
                "pageCount": 1,
                "tags": [{"name": "sky", "translation": "天空"}, {"name": "cloud", "translation": ""}],
                "statistic": {"bookmarks": 5, "likes": 3, "comments": 1, "views": 9},
                "image": "img",
            }
        ],
        "scores": [1.0],
        "has_next": False,
    },
}


class FakeResponse:
    def __init__(self, text, status=200):
        self.text = text
        self.status_code = status


class FakeSession:
    def __init__(self, response):
        self.response = response
        self.urls = []

    def get(self, url, headers=None, timeout=None):
        self.urls.append(url)
        return self.response


def test_parse_search():
    (illust,) = ps.parse_search(json.dumps(PAYLOAD))
    assert illust.id == 77
    assert illust.alt_title == "Blue"
    assert illust.tags == (("sky", "天空"), ("cloud", ""))
    assert illust.views == 9


def test_parse_search_error():
    with pytest.raises(RuntimeError, match="bad"):
        ps.parse_search({"error": True, "message": "bad"})


def test_clean_description():
    assert ps.clean_description('a<br />b<a href="x">link</a>') == "a\nblink"


def test_format_tags():
    assert ps.format_tags([("n", "t"), ("m", "")]) == "\n#n (t)\n#m"


def test_search_url():
    session = FakeSession(FakeResponse(json.dumps(PAYLOAD)))
    result = ps.search("blue sky", session)
    assert session.urls == [ps.SEARCH_API + quote_plus("blue sky") + "?page=0"]
    assert result[0].title == "Sky"


def test_search_status():
    with pytest.raises(RuntimeError):
        ps.search("x", FakeSession(FakeResponse("", status=404)))


def test_describe():
    (illust,) = ps.parse_search(PAYLOAD)
    text = ps.describe(illust, "artist", 12)
    assert text.startswith("800x600\n标题: Sky\n副标题: Blue\nID: 77\n")
    assert "画师: artist (12)\n分级:2\n" in text
    assert text.endswith("hi\nthere" + ps.format_tags(illust.tags))