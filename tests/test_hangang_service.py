import requests

from kairos_chat import hangang_service
from kairos_chat.hangang_service import HANGANG_LIVE_DATA_UNAVAILABLE, fetch_han_river_temperature


class FakeResponse:
    def __init__(self, status_code, payload=None):
        self.status_code = status_code
        self.payload = payload

    def json(self):
        if self.payload is None:
            raise requests.JSONDecodeError("Expecting value", "<html>", 0)
        return self.payload


def install_responses(monkeypatch, *responses):
    queue = list(responses)
    calls = []

    def fake_get(url, timeout):
        calls.append((url, timeout))
        item = queue.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    monkeypatch.setattr(hangang_service.requests, "get", fake_get)
    return calls


UNAVAILABLE = {"status": "service_unavailable", "message": HANGANG_LIVE_DATA_UNAVAILABLE}


def test_returns_body_unchanged(monkeypatch):
    body = {"status": "success", "DATAs": {"DATA": {"HAN_RIVER": {"TEMP": "12.3"}}}}
    calls = install_responses(monkeypatch, FakeResponse(200, body))

    assert fetch_han_river_temperature() == body
    assert calls == [("https://api.hangang.life/", 10)]


def test_retries_transient_status(monkeypatch):
    calls = install_responses(monkeypatch, FakeResponse(503), FakeResponse(200, {"temp": 9}))

    assert fetch_han_river_temperature() == {"temp": 9}
    assert len(calls) == 2


def test_retries_connection_errors_then_gives_up(monkeypatch):
    calls = install_responses(
        monkeypatch,
        requests.ConnectionError("down"),
        requests.Timeout("slow"),
    )

    assert fetch_han_river_temperature() == UNAVAILABLE
    assert len(calls) == 2


def test_non_transient_error_is_not_retried(monkeypatch):
    calls = install_responses(monkeypatch, FakeResponse(404))

    assert fetch_han_river_temperature() == UNAVAILABLE
    assert len(calls) == 1


def test_non_json_body(monkeypatch):
    install_responses(monkeypatch, FakeResponse(200))

    assert fetch_han_river_temperature() == UNAVAILABLE
