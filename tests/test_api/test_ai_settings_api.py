"""
Tests for user settings and AI endpoints
"""
import json

import pytest

from app.api.deps import get_llm_client
from app.infrastructure.llm.openrouter import LLMClientError, LLMReply
from app.main import app


class StubLLM:
    def __init__(self, content="Keep it up.", error=None):
        self.content = content
        self.error = error
        self.calls = []

    def complete(self, messages, **params):
        self.calls.append(messages)
        if self.error:
            raise self.error
        return LLMReply(content=self.content, total_tokens=17)


@pytest.fixture
def llm(client):
    stub = StubLLM()
    app.dependency_overrides[get_llm_client] = lambda: stub
    return stub


def test_settings_defaults_without_row(client, sample_user_id):
    response = client.get(f"/api/v1/user-settings/{sample_user_id}")

    assert response.status_code == 200
    data = response.json()
    assert data["id"] is None
    assert data["user_id"] == sample_user_id
    assert data["currency_code"] == "USD"
    assert data["status_on_track_max"] == 0.85


def test_settings_create_then_existing(client, sample_user_id):
    created = client.post(f"/api/v1/user-settings/{sample_user_id}", json={"currency_code": "EUR"})
    existing = client.post(f"/api/v1/user-settings/{sample_user_id}")

    assert created.status_code == 201
    assert created.json()["currency_code"] == "EUR"
    assert existing.status_code == 200
    assert existing.json()["id"] == created.json()["id"]


def test_settings_patch(client, sample_user_id):
    assert client.patch(f"/api/v1/user-settings/{sample_user_id}", json={"timezone": "UTC"}).status_code == 404

    client.post(f"/api/v1/user-settings/{sample_user_id}")
    response = client.patch(f"/api/v1/user-settings/{sample_user_id}", json={"ai_frugal_score": 80})

    assert response.status_code == 200
    assert response.json()["ai_frugal_score"] == 80
    assert response.json()["timezone"] == "America/New_York"


def test_settings_patch_rejects_crossed_thresholds(client, sample_user_id):
    client.post(f"/api/v1/user-settings/{sample_user_id}")

    response = client.patch(f"/api/v1/user-settings/{sample_user_id}", json={"status_tight_max": 0.5})

    assert response.status_code == 400


def test_settings_patch_rejects_unknown_field(client, sample_user_id):
    client.post(f"/api/v1/user-settings/{sample_user_id}")

    response = client.patch(f"/api/v1/user-settings/{sample_user_id}", json={"theme": "dark"})

    assert response.status_code == 422


def test_settings_delete(client, sample_user_id):
    assert client.delete(f"/api/v1/user-settings/{sample_user_id}").status_code == 404

    client.post(f"/api/v1/user-settings/{sample_user_id}")
    response = client.delete(f"/api/v1/user-settings/{sample_user_id}")

    assert response.json() == {"message": "User settings deleted", "user_id": sample_user_id}


def test_chat(client, llm, sample_user_id, february_budget):
    response = client.post("/api/v1/ai/chat", json={
        "user_id": sample_user_id, "message": "Can I afford sushi?", "month": "2026-02",
    })

    assert response.status_code == 200
    assert response.json() == {"message": "Keep it up.", "tokens_used": 17}
    assert llm.calls[0][-1].content == "Can I afford sushi?"

    history = client.get(f"/api/v1/ai/history/{sample_user_id}").json()
    assert [(m["role"], m["content"]) for m in history] == [
        ("assistant", "Keep it up."),
        ("user", "Can I afford sushi?"),
    ]


def test_chat_empty_message(client, llm, sample_user_id):
    response = client.post("/api/v1/ai/chat", json={"user_id": sample_user_id, "message": "  "})
    assert response.status_code == 400
    assert llm.calls == []


def test_chat_llm_failure(client, llm, sample_user_id):
    llm.error = LLMClientError("upstream 500")

    response = client.post("/api/v1/ai/chat", json={"user_id": sample_user_id, "message": "hi"})

    assert response.status_code == 502


def test_ai_insights(client, llm, sample_user_id, february_budget):
    llm.content = json.dumps([
        {"kind": "positive", "title": "On plan", "body": "Nothing spent yet.", "action": "Action: keep it."},
        {"kind": "unknown", "title": "x", "body": "y", "action": "z"},
    ])

    response = client.post("/api/v1/ai/insights", json={"user_id": sample_user_id, "month": "2026-02"})

    assert response.status_code == 200
    assert response.json() == [
        {"kind": "positive", "title": "On plan", "body": "Nothing spent yet.", "action": "Action: keep it."},
    ]


def test_ai_insights_llm_failure(client, llm, sample_user_id):
    llm.error = LLMClientError("timeout")

    response = client.post("/api/v1/ai/insights", json={"user_id": sample_user_id, "month": "2026-02"})

    assert response.status_code == 502
