"""
Tests for the web API endpoints (/api/*).

Uses Flask test client, with the question bank instead of an LLM.
"""

import sys
from datetime import datetime, timedelta
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

import web_intake
from web_intake import app
from case_intake.config import IntakeSettings
from case_intake.questions import OPENING_QUESTION
from case_intake.session import COMPLETION_MESSAGE


@pytest.fixture
def client(monkeypatch):
    app.config["TESTING"] = True
    monkeypatch.setitem(app.config, "INTAKE_SETTINGS", IntakeSettings())
    # Clear sessions between tests
    with web_intake.sessions_lock:
        web_intake.sessions.clear()
    with app.test_client() as client:
        yield client


def _start(client, **payload):
    response = client.post("/api/start", json=payload)
    assert response.status_code == 200
    return response.get_json()


# ═══════════════════════════════════════════════════════════════
# START
# ═══════════════════════════════════════════════════════════════

class TestStart:

    def test_start_returns_opening_question(self, client):
        data = _start(client)
        assert data["question"] == OPENING_QUESTION
        assert data["phase"] == "opening"
        assert data["depth"] == "standard"
        assert data["session_id"] in web_intake.sessions

    def test_start_with_depth_and_country(self, client):
        data = _start(client, depth="quick", country="Sweden")
        assert data["depth"] == "quick"
        assert data["country"] == "Sweden"

    def test_invalid_depth(self, client):
        response = client.post("/api/start", json={"depth": "exhaustive"})
        assert response.status_code == 400
        assert "exhaustive" in response.get_json()["error"]

    def test_start_without_body(self, client):
        response = client.post("/api/start")
        assert response.status_code == 200

    def test_idle_sessions_are_pruned(self, client):
        old = _start(client)["session_id"]
        web_intake.sessions[old]["last_active"] = datetime.now() - timedelta(
            seconds=web_intake.SESSION_TTL_SECONDS + 1
        )
        _start(client)
        assert old not in web_intake.sessions


# ═══════════════════════════════════════════════════════════════
# RESPOND
# ═══════════════════════════════════════════════════════════════

class TestRespond:

    def test_invalid_session(self, client):
        response = client.post("/api/respond", json={"session_id": "nope", "response": "hi"})
        assert response.status_code == 400
        assert response.get_json()["error"] == "Invalid session"

    def test_non_string_session_id(self, client):
        response = client.post("/api/respond", json={"session_id": ["x"], "response": "hi"})
        assert response.status_code == 400

    def test_non_string_response(self, client):
        session_id = _start(client)["session_id"]
        response = client.post("/api/respond", json={"session_id": session_id, "response": 42})
        assert response.status_code == 400

    def test_short_answer_gets_follow_up(self, client):
        session_id = _start(client)["session_id"]
        response = client.post("/api/respond", json={"session_id": session_id, "response": "Not sure"})

        assert response.status_code == 200
        data = response.get_json()
        assert data["is_follow_up"] is True
        assert data["question"] == "Could you provide more details about that?"
        assert data["phase"] == "opening"
        assert data["phase_name"] == "Opening"
        assert data["complete"] is False
        assert data["state"]["consecutive_follow_ups"] == 1
        assert data["decision"]["assessment"]["quality"] == "acceptable"

    def test_phase_advances(self, client):
        session_id = _start(client)["session_id"]
        data = None
        for _ in range(4):
            data = client.post(
                "/api/respond", json={"session_id": session_id, "response": "Not sure"}
            ).get_json()

        assert data["transitioned"] is True
        assert data["phase"] == "timeline"
        assert data["state"]["transitions"][0]["to"] == "timeline"

    def test_quick_interview_completes(self, client):
        session_id = _start(client, depth="quick")["session_id"]
        data = None
        for _ in range(100):
            data = client.post(
                "/api/respond", json={"session_id": session_id, "response": "Not sure"}
            ).get_json()
            if data["decision"]["should_follow_up"]:
                assert data["complete"] is False
            if data["complete"]:
                break

        assert data["complete"] is True
        assert data["phase"] == "closing"
        assert data["question"] == COMPLETION_MESSAGE


# ═══════════════════════════════════════════════════════════════
# STATE, RESET, END
# ═══════════════════════════════════════════════════════════════

class TestSessionLifecycle:

    def test_state(self, client):
        session_id = _start(client)["session_id"]
        client.post("/api/respond", json={"session_id": session_id, "response": "Not sure"})

        response = client.get(f"/api/state?session_id={session_id}")
        assert response.status_code == 200
        data = response.get_json()
        assert data["question"] == "Could you provide more details about that?"
        assert data["complete"] is False
        assert data["state"]["metrics"]["total_answers"] == 1

    def test_state_invalid_session(self, client):
        assert client.get("/api/state?session_id=nope").status_code == 400
        assert client.get("/api/state").status_code == 400

    def test_reset(self, client):
        session_id = _start(client)["session_id"]
        for _ in range(4):
            client.post("/api/respond", json={"session_id": session_id, "response": "Not sure"})

        data = client.post("/api/reset", json={"session_id": session_id}).get_json()
        assert data["question"] == OPENING_QUESTION
        assert data["phase"] == "opening"
        assert data["state"]["transitions"] == []

    def test_end_returns_summary_and_removes_session(self, client):
        session_id = _start(client, country="Sweden")["session_id"]
        client.post("/api/respond", json={"session_id": session_id, "response": "Not sure"})

        response = client.post("/api/end", json={"session_id": session_id})
        assert response.status_code == 200
        summary = response.get_json()["summary"]
        assert summary["country"] == "Sweden"
        assert summary["phase_history"] == ["opening"]

        assert session_id not in web_intake.sessions
        assert client.post("/api/end", json={"session_id": session_id}).status_code == 400


class TestPhases:

    def test_standard_phases(self, client):
        data = client.get("/api/phases").get_json()
        assert data["depth"] == "standard"
        assert len(data["phases"]) == 7
        assert data["phases"][0] == {
            "id": "opening",
            "name": "Opening",
            "description": "Let the user tell their story freely",
            "min_questions": 2,
        }

    def test_quick_phases(self, client):
        data = client.get("/api/phases?depth=quick").get_json()
        assert [p["id"] for p in data["phases"]] == ["opening", "timeline", "details", "closing"]

    def test_invalid_depth(self, client):
        assert client.get("/api/phases?depth=exhaustive").status_code == 400
