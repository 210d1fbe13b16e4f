"""Tests for the webhook endpoint."""
from __future__ import annotations

import json
from unittest.mock import AsyncMock, Mock

import pytest
from fastapi.testclient import TestClient

from leetquiz.correlator import AnswerCorrelator
from leetquiz.main import app, get_correlator
from leetquiz.streak import StreakCalculator


@pytest.fixture
def client(store, transport, metrics):
    correlator = AnswerCorrelator(store, transport, StreakCalculator(store), metrics=metrics)
    app.dependency_overrides[get_correlator] = lambda: correlator
    # Not used as a context manager, so the startup hook never reads the environment.
    yield TestClient(app)
    app.dependency_overrides.clear()


def callback_update(data):
    return {
        "update_id": 1,
        "callback_query": {
            "id": "cb-1",
            "from": {"id": 9, "is_bot": False, "first_name": "Sam"},
            "data": data,
            "message": {
                "message_id": 7,
                "date": 0,
                "chat": {"id": 42, "type": "private"},
                "text": "Question: Which approach finds the pair in a single pass?",
            },
        },
    }


def test_callback_is_recorded(client, store, question, transport):
    store.create_question(question)

    response = client.post("/telegram-webhook", json=callback_update("answer:B:Q1"))

    assert response.status_code == 200
    assert response.json() == {"ok": True}
    assert len(store.list_attempts("Q1")) == 1
    assert transport.edits[0][:2] == (42, 7)


def test_unknown_question_still_returns_success(client, store, transport):
    response = client.post("/telegram-webhook", json=callback_update("answer:A:Q999"))

    assert response.status_code == 200
    assert store.get_recent_attempts() == []
    assert len(transport.sent) == 1


def test_non_callback_update_is_ignored(client, transport):
    response = client.post(
        "/telegram-webhook", json={"update_id": 2, "message": {"message_id": 1, "text": "hi"}}
    )

    assert response.status_code == 200
    assert transport.acks == []


def test_invalid_json_returns_success(client, transport):
    response = client.post(
        "/telegram-webhook", content=b"not json", headers={"content-type": "application/json"}
    )

    assert response.status_code == 200
    assert transport.acks == []


def test_forged_question_id_returns_success(client, store, transport):
    # A lone surrogate survives JSON decoding but cannot be encoded for SQLite.
    body = json.dumps(callback_update("answer:A:\ud800")).encode("ascii")
    response = client.post(
        "/telegram-webhook", content=body, headers={"content-type": "application/json"}
    )

    assert response.status_code == 200
    assert response.json() == {"ok": True}
    assert store.get_recent_attempts() == []
    assert transport.sent == []


def test_correlator_crash_still_returns_success():
    correlator = Mock()
    correlator.handle_inbound_action = AsyncMock(side_effect=RuntimeError("boom"))
    app.dependency_overrides[get_correlator] = lambda: correlator
    try:
        response = TestClient(app).post("/telegram-webhook", json=callback_update("answer:B:Q1"))
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 200
    assert response.json() == {"ok": True}
    correlator.handle_inbound_action.assert_awaited_once()


def test_healthz_reports_metrics(client):
    response = client.get("/healthz")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert "answers_correct" in response.json()["metrics"]
