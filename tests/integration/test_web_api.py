"""Tests for the Flask API running against a real WebInterface."""

import pytest

from workflow_pricing.core.catalog import default_catalog
from workflow_pricing.core.conversation import QUESTION_FLOW
from workflow_pricing.core.session import InMemorySessionStore
from workflow_pricing.shared.errors import ConfigurationError
from workflow_pricing.web.app import create_app
from workflow_pricing.web.interface import WebInterface


@pytest.fixture
def session_store():
    return InMemorySessionStore()


@pytest.fixture
def app(session_store):
    """Create a test Flask app."""
    flask_app = create_app(
        WebInterface(session_store, catalog=default_catalog()),
        secret_key="test-secret-key",
    )
    flask_app.config["TESTING"] = True
    return flask_app


@pytest.fixture
def client(app):
    """Create a test client."""
    return app.test_client()


ANSWERS = [
    "Order tracking",
    ["Email", "Chat/Messaging"],
    "10,000",
    "4-6 steps (Moderate complexity with some logic)",
    "Yes - It needs to look up information occasionally (1-2 lookups per request)",
    "Yes - 1-2 simple integrations (like checking a database)",
    "A small team (2-3 specialized agents working together)",
    "0",
    "Moderate - Some quality checks are good",
    "Medium length (a paragraph, like email responses or summaries)",
]


def _complete_discovery(client):
    response = None
    for answer in ANSWERS:
        response = client.post("/api/chat", json={"message": answer})
        assert response.status_code == 200
    return response.get_json()


class TestAppFactory:
    def test_missing_secret_key(self, monkeypatch):
        monkeypatch.delenv("FLASK_SECRET_KEY", raising=False)
        with pytest.raises(ConfigurationError):
            create_app(WebInterface(catalog=default_catalog()))

    def test_index_lists_endpoints(self, client):
        data = client.get("/").get_json()
        assert "/api/chat" in data["endpoints"]

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.get_json() == {"status": "healthy"}


class TestDiscoveryEndpoints:
    """Test /api/question and /api/chat."""

    def test_question_starts_session(self, client, session_store):
        response = client.get("/api/question")

        data = response.get_json()
        assert response.status_code == 200
        assert data["question"]["id"] == "business_problem"
        assert data["response"] == QUESTION_FLOW[0].prompt
        assert data["is_done"] is False
        with client.session_transaction() as flask_session:
            assert session_store.get(flask_session["session_id"]) is not None

    def test_chat_advances_one_question(self, client):
        client.get("/api/question")
        response = client.post("/api/chat", json={"message": "Order tracking"})

        data = response.get_json()
        assert data["question"]["id"] == "channels"
        assert data["question"]["kind"] == "multiselect"
        assert data["extracted_data"]["workflow_description"] == "Order tracking"
        assert "history" not in data

    def test_full_discovery(self, client):
        data = _complete_discovery(client)

        assert data["is_done"] is True
        assert data["question"] is None
        assert data["response"] == data["summary"]
        assert "10,000 interactions per month via email, chat" in data["summary"]

    def test_history(self, client):
        client.post("/api/chat", json={"message": "Order tracking"})

        response = client.get("/api/history")

        data = response.get_json()
        assert response.status_code == 200
        assert [m["role"] for m in data["history"]] == ["assistant", "user", "assistant"]
        assert data["state"]["step"] == 1

    def test_history_without_session(self, client):
        response = client.get("/api/history")
        assert response.status_code == 400

    def test_history_after_store_lost_session(self, client, session_store):
        client.get("/api/question")
        session_store.clear()

        response = client.get("/api/history")

        assert response.status_code == 404
        assert response.get_json()["error"] == "Session not found"

    def test_malformed_multiselect_answer_rejected(self, client):
        client.post("/api/chat", json={"message": "Order tracking"})

        response = client.post("/api/chat", json={"message": 5})

        data = response.get_json()
        assert response.status_code == 422
        assert data["error_type"] == "PreconditionViolation"
        assert "channels" in data["error"]

        history = client.get("/api/history").get_json()
        assert history["state"]["step"] == 1
        assert len(history["history"]) == 3
        assert history["history"][-1]["content"] == QUESTION_FLOW[1].prompt

    def test_non_finite_number_answer_rejected(self, client):
        client.post("/api/chat", json={"message": "Order tracking"})
        client.post("/api/chat", json={"message": ["Email"]})

        response = client.post(
            "/api/chat", data='{"message": NaN}', content_type="application/json"
        )

        assert response.status_code == 422
        history = client.get("/api/history").get_json()
        assert history["state"]["step"] == 2
        assert [m["role"] for m in history["history"]].count("user") == 2

    def test_rejected_answer_can_be_retried(self, client):
        client.post("/api/chat", json={"message": "Order tracking"})
        client.post("/api/chat", json={"message": {"channel": "Email"}})

        response = client.post("/api/chat", json={"message": ["Email"]})

        assert response.status_code == 200
        assert response.get_json()["question"]["id"] == "monthly_volume"


class TestEstimateEndpoint:
    """Test /api/estimate."""

    def test_estimate_without_session(self, client):
        response = client.post("/api/estimate", json={})
        assert response.status_code == 400

    def test_estimate_before_discovery_done(self, client):
        client.post("/api/chat", json={"message": "Order tracking"})

        response = client.post("/api/estimate", json={})

        assert response.status_code == 400
        assert response.get_json()["error_type"] == "SessionError"

    def test_estimate_after_discovery(self, client):
        _complete_discovery(client)

        response = client.post("/api/estimate", json={"currency": "INR"})

        data = response.get_json()
        assert response.status_code == 200
        assert data["transactions_per_month"] == 10000
        assert data["breakdown"]["setup_costs"] == pytest.approx(3 * 0.05 + 1.0 + 0.1 + 2.0)
        assert [band["multiplier"] for band in data["bands"]] == [0.5, 1.0, 1.8]
        assert len(data["forecast"]) == 12
        assert data["formatted"]["monthly"].startswith("₹")

    def test_estimate_unknown_model(self, client):
        _complete_discovery(client)
        response = client.post("/api/estimate", json={"model": "Imaginary"})
        assert response.status_code == 422

    def test_estimate_unsupported_currency(self, client):
        _complete_discovery(client)
        response = client.post("/api/estimate", json={"currency": "JPY"})
        assert response.status_code == 422
        assert "Unsupported currency" in response.get_json()["error"]

    def test_direct_workload_estimate(self, client):
        response = client.post(
            "/api/estimate",
            json={"workload": {"emails_per_month": 1000, "chats_per_month": 0, "workflow_triggers_per_day": 0}},
        )

        data = response.get_json()
        assert response.status_code == 200
        assert data["transactions_per_month"] == 1000
        assert data["breakdown"]["monthly_credits"] == pytest.approx(
            data["breakdown"]["credits_per_transaction"] * 1000
        )

    def test_direct_workload_with_model(self, client):
        response = client.post("/api/estimate", json={"workload": {}, "model": "GPT-4o (own key)"})

        breakdown = response.get_json()["breakdown"]
        assert breakdown["token_cost_with_handling_fee"] == breakdown["token_cost"]

    def test_direct_workload_rejects_negative(self, client):
        response = client.post("/api/estimate", json={"workload": {"agents": -2}})
        assert response.status_code == 422
        assert "agents" in response.get_json()["error"]


class TestScenarioEndpoints:
    """Test /api/scenarios."""

    def test_list_scenarios(self, client):
        scenarios = client.get("/api/scenarios").get_json()["scenarios"]
        assert {s["id"] for s in scenarios} >= {"ecommerce-support", "healthcare-triage"}

    def test_play_scenario_then_estimate(self, client):
        response = client.post("/api/scenarios/healthcare-triage")

        data = response.get_json()
        assert response.status_code == 200
        assert data["is_done"] is True
        assert data["conversation"][0]["role"] == "assistant"

        estimate = client.post("/api/estimate", json={}).get_json()
        assert estimate["scenario_id"] == "healthcare-triage"
        assert estimate["transactions_per_month"] == 3500

    def test_play_unknown_scenario(self, client):
        response = client.post("/api/scenarios/does-not-exist")
        assert response.status_code == 404

    def test_models(self, client):
        models = client.get("/api/models").get_json()["models"]
        assert "Claude 3.5 Sonnet" in models


class TestResetEndpoint:
    def test_reset_clears_session(self, client, session_store):
        client.get("/api/question")
        with client.session_transaction() as flask_session:
            session_id = flask_session["session_id"]

        response = client.post("/api/reset")

        assert response.get_json() == {"status": "reset"}
        assert session_store.get(session_id) is None
        assert client.get("/api/history").status_code == 400

    def test_reset_without_session(self, client):
        assert client.post("/api/reset").get_json() == {"status": "reset"}
