"""
Test Web Module
===============

Tests for the agent endpoint and the read-only API routes.
"""

import random

import pytest
from fastapi.testclient import TestClient
from pathlib import Path
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.config import Config
from services.responder import REPLY_TEMPLATES, Responder
from ui.web.app import create_app


@pytest.fixture
def responder():
    return Responder(rng=random.Random(0))


@pytest.fixture
def client(responder):
    app = create_app(config=Config(), responder=responder)
    return TestClient(app)


class ExplodingResponder(Responder):
    def reply(self, message):
        raise RuntimeError("secret internals")


class TestAgentEndpoint:
    """Tests for POST /api/agent."""

    def test_reply(self, client):
        """Test a valid message is answered."""
        r = client.post("/api/agent", json={"message": "2 + 2"})

        assert r.status_code == 200
        assert r.json().keys() == {"response"}
        assert "2 + 2 = 4" in r.json()["response"]

    def test_greeting(self, client):
        """Test the reply is passed through unchanged."""
        r = client.post("/api/agent", json={"message": "hello"})

        assert r.json() == {"response": REPLY_TEMPLATES["greeting"]}

    @pytest.mark.parametrize("payload", [
        {},
        {"text": "hello"},
        {"message": 42},
        {"message": None},
        {"message": ["hello"]},
        {"message": ""},
        ["hello"],
    ])
    def test_malformed_payload(self, client, responder, payload):
        """Test invalid payloads are rejected before processing."""
        r = client.post("/api/agent", json=payload)

        assert r.status_code == 400
        assert r.json() == {"error": "Invalid message format"}
        assert len(responder.history) == 0

    def test_invalid_json(self, client):
        """Test a body that is not JSON is a client error."""
        r = client.post(
            "/api/agent",
            content="message=hello",
            headers={"Content-Type": "application/json"},
        )

        assert r.status_code == 400
        assert r.json() == {"error": "Invalid message format"}

    def test_internal_error_is_generic(self):
        """Test unexpected failures return a generic 500."""
        app = create_app(config=Config(), responder=ExplodingResponder())
        client = TestClient(app, raise_server_exceptions=False)

        r = client.post("/api/agent", json={"message": "hello"})

        assert r.status_code == 500
        assert r.json() == {"error": "Internal server error"}
        assert "secret" not in r.text

    def test_history_grows(self, client, responder):
        """Test each request adds a user and an agent turn."""
        for message in ["hello", "5 / 0", "why?"]:
            client.post("/api/agent", json={"message": message})

        assert len(responder.history) == 6

        r = client.get("/api/history")
        data = r.json()
        assert data["length"] == 6
        assert data["history"][2] == {"role": "user", "content": "5 / 0"}
        assert data["history"][3] == {"role": "agent", "content": REPLY_TEMPLATES["undefined"]}


class TestInfoRoutes:
    """Tests for page and read-only routes."""

    def test_chat_page(self, client):
        """Test the chat page renders."""
        r = client.get("/")

        assert r.status_code == 200
        assert "Ready to assist" in r.text
        assert "/api/agent" in r.text

    def test_rules(self, client):
        """Test the classification order is exposed."""
        data = client.get("/api/rules").json()

        assert [rule["name"] for rule in data["rules"]] == [
            "question", "greeting", "task", "math", "capabilities", "default",
        ]
        assert data["question_rules"][-1]["match_type"] == "always"

    def test_status(self, client):
        """Test the status summary."""
        client.post("/api/agent", json={"message": "hi"})
        data = client.get("/api/status").json()

        assert data["app_name"] == "Rule Agent"
        assert data["responder"]["history_length"] == 2
        assert "timestamp" in data

    def test_health(self, client):
        """Test the health check."""
        assert client.get("/health").json() == {"ok": True}

    def test_instances_are_isolated(self):
        """Test two apps do not share a responder."""
        first = TestClient(create_app(config=Config()))
        second = TestClient(create_app(config=Config()))

        first.post("/api/agent", json={"message": "hello"})

        assert first.get("/api/history").json()["length"] == 2
        assert second.get("/api/history").json()["length"] == 0
