import json

import pytest

from zeroplug import hearthstone as hs


class FakeResponse:
    def __init__(self, body, status=200):
        self.status_code = status
        self.content = body if isinstance(body, bytes) else body.encode("utf-8")
        self.text = self.content.decode("utf-8")


class FakeSession:
    def __init__(self, routes):
        self.routes = routes
        self.calls = []

    def get(self, url, headers=None, timeout=None):
        self.calls.append((url, headers))
        for prefix, response in self.routes:
            if url.startswith(prefix):
                return response
        raise AssertionError(f"unexpected url {url}")


PAGE = 'x; var hash = "h42"; y'
CODE = "AAE" + "B" * 70


def test_extract_hash():
    assert hs.extract_hash(PAGE) == "h42"


def test_extract_hash_missing():
    with pytest.raises(ValueError):
        hs.extract_hash("nothing here")


def test_search_url():
    url = hs.search_url("h", "q")
    assert url == hs.AJAX + hs.PARA + "&hash=h&search=q"


def test_deck_image_url_glues_mod():
    url = hs.deck_image_url("h", "CODE")
    assert "deckmode=normalmod=general_deck_image&deck_code=CODE&deck_text=&hash=h" in url
    assert url.endswith("&search=CODE")


def test_card_image_url():
    assert hs.card_image_url("EX1", "k") == "https://res.fbigame.com/hs/v13/EX1.png?auth_key=k"


def test_find_deck_code():
    assert hs.find_deck_code("my deck " + CODE + " nice") == CODE
    assert hs.find_deck_code("AAE" + "B" * 10) is None


def test_search():
    body = json.dumps({"list": [{"CardID": "C1", "auth_key": "k1"}, {"CardID": "C2", "auth_key": "k2"}]})
    session = FakeSession([(hs.AJAX, FakeResponse(body)), (hs.SITE, FakeResponse(PAGE))])
    cards = hs.HearthstoneClient(session).search("fire")
    assert cards == [hs.Card("C1", "k1"), hs.Card("C2", "k2")]
    assert session.calls[1][0] == hs.search_url("h42", "fire")
    assert session.calls[0][1]["Referer"] == hs.SITE


def test_search_empty():
    session = FakeSession([(hs.AJAX, FakeResponse('{"list": []}')), (hs.SITE, FakeResponse(PAGE))])
    with pytest.raises(LookupError):
        hs.HearthstoneClient(session).search("none")


def test_deck_image():
    session = FakeSession([(hs.AJAX, FakeResponse('{"img": "QUJD"}')), (hs.SITE, FakeResponse(PAGE))])
    assert hs.HearthstoneClient(session).deck_image(CODE) == "base64://QUJD"


def test_bad_status():
    session = FakeSession([(hs.SITE, FakeResponse(PAGE, status=500))])
    with pytest.raises(RuntimeError):
        hs.HearthstoneClient(session).search("x")


def test_card_image_cached(tmp_path):
    session = FakeSession([(hs.CARD_IMAGE_BASE, FakeResponse(b"png-data"))])
    client = hs.HearthstoneClient(session)
    path = client.card_image("C1", "k", tmp_path)
    again = client.card_image("C1", "k", tmp_path)
    assert path.read_bytes() == b"png-data"
    assert again == path
    assert len(session.calls) == 1