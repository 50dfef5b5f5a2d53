import logging

import requests

from quiz_harvest import connectors
from quiz_harvest.models import Difficulty, QuestionKind


class DummyResponse:
    def __init__(self, payload=None, status_code=200, json_error=None):
        self._payload = payload
        self.status_code = status_code
        self._json_error = json_error

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"status={self.status_code}")
        return None

    def json(self):
        if self._json_error:
            raise self._json_error
        return self._payload


QUESTION = {
    "type": "multiple",
    "difficulty": "medium",
    "category": "Science: Computers",
    "question": "What does CPU stand for?",
    "correct_answer": "Central Processing Unit",
    "incorrect_answers": ["Central Process Unit", "Computer Personal Unit", "Central Processor Unit"],
}


def test_fetch_quiz_batch_parses_results(monkeypatch):
    calls = []

    def fake_get(url, params=None, timeout=0):
        calls.append((url, params, timeout))
        return DummyResponse(payload={"response_code": 0, "results": [QUESTION]})

    monkeypatch.setattr(connectors.requests, "get", fake_get)
    records = connectors.fetch_quiz_batch("https://example.test/api.php", amount=20, timeout=5)

    assert calls == [("https://example.test/api.php", {"amount": 20}, 5)]
    assert len(records) == 1
    assert records[0].kind is QuestionKind.MULTIPLE
    assert records[0].difficulty is Difficulty.MEDIUM
    assert records[0].incorrect_answers == tuple(QUESTION["incorrect_answers"])


def test_fetch_quiz_batch_returns_empty_on_transport_error(monkeypatch, caplog):
    def fake_get(url, params=None, timeout=0):
        raise requests.ConnectionError("boom")

    monkeypatch.setattr(connectors.requests, "get", fake_get)
    with caplog.at_level(logging.WARNING, logger="quiz_harvest.connectors"):
        assert connectors.fetch_quiz_batch() == []
    assert "Quiz fetch failed" in caplog.text


def test_fetch_quiz_batch_returns_empty_on_http_error(monkeypatch):
    monkeypatch.setattr(connectors.requests, "get", lambda url, params=None, timeout=0: DummyResponse(status_code=503))
    assert connectors.fetch_quiz_batch() == []


def test_fetch_quiz_batch_returns_empty_on_nonzero_response_code(monkeypatch, caplog):
    monkeypatch.setattr(
        connectors.requests,
        "get",
        lambda url, params=None, timeout=0: DummyResponse(payload={"response_code": 5, "results": []}),
    )
    with caplog.at_level(logging.WARNING, logger="quiz_harvest.connectors"):
        assert connectors.fetch_quiz_batch() == []
    assert "rate_limit" in caplog.text


def test_fetch_quiz_batch_returns_empty_on_invalid_json(monkeypatch):
    monkeypatch.setattr(
        connectors.requests,
        "get",
        lambda url, params=None, timeout=0: DummyResponse(json_error=ValueError("no json")),
    )
    assert connectors.fetch_quiz_batch() == []


def test_fetch_quiz_batch_returns_empty_on_malformed_question(monkeypatch):
    broken = dict(QUESTION, type="essay")
    monkeypatch.setattr(
        connectors.requests,
        "get",
        lambda url, params=None, timeout=0: DummyResponse(payload={"response_code": 0, "results": [QUESTION, broken]}),
    )
    assert connectors.fetch_quiz_batch() == []


def test_fetch_quiz_batch_returns_empty_on_unexpected_payload(monkeypatch):
    monkeypatch.setattr(connectors.requests, "get", lambda url, params=None, timeout=0: DummyResponse(payload=[1, 2]))
    assert connectors.fetch_quiz_batch() == []
