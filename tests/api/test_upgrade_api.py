"""Tests for the upgrade prompt API endpoints."""

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from coach_briefing.api.deps import get_now, get_upgrade_service
from coach_briefing.main import app
from coach_briefing.services.upgrade_prompts import UpgradePromptService


NOW = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def service(store, session_store):
    return UpgradePromptService(store, session_store)


@pytest.fixture
def client(service):
    """Create a test client backed by in-memory stores."""
    app.dependency_overrides[get_now] = lambda: NOW
    app.dependency_overrides[get_upgrade_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestEvaluateEndpoint:
    """Tests for POST /api/v1/upgrade/evaluate."""

    def test_prompt_shown(self, client):
        response = client.post("/api/v1/upgrade/evaluate", json={
            "userId": "u1",
            "coachCount": 2,
        })
        assert response.status_code == 200
        data = response.json()
        assert data["show"] is True
        assert data["trigger"] == "coaches_count"
        assert data["message"]

    def test_no_trigger(self, client):
        data = client.post("/api/v1/upgrade/evaluate", json={"userId": "u1"}).json()
        assert data == {"show": False, "trigger": None, "message": None}

    def test_premium_tier(self, client):
        data = client.post("/api/v1/upgrade/evaluate", json={
            "userId": "u1",
            "tier": "electric",
            "workoutCount": 10,
        }).json()
        assert data["show"] is False

    def test_missing_user_rejected(self, client):
        response = client.post("/api/v1/upgrade/evaluate", json={"coachCount": 2})
        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    def test_negative_count_rejected(self, client):
        response = client.post("/api/v1/upgrade/evaluate", json={"userId": "u1", "coachCount": -1})
        assert response.status_code == 422


class TestRecordEndpoint:
    """Tests for POST /api/v1/upgrade/record."""

    def test_record_throttles_session(self, client):
        response = client.post("/api/v1/upgrade/record", json={
            "userId": "u1",
            "trigger": "coaches_count",
        })
        assert response.status_code == 200
        assert response.json() == {"recorded": True}

        data = client.post("/api/v1/upgrade/evaluate", json={
            "userId": "u1",
            "workoutCount": 5,
        }).json()
        assert data["show"] is False

    def test_session_id_scopes_throttle(self, client):
        """A prompt shown in one client session does not block another."""
        client.post("/api/v1/upgrade/record", json={
            "userId": "u1",
            "trigger": "coaches_count",
            "sessionId": "s1",
        })
        other = client.post("/api/v1/upgrade/evaluate", json={
            "userId": "u1",
            "workoutCount": 5,
            "sessionId": "s2",
        }).json()
        same = client.post("/api/v1/upgrade/evaluate", json={
            "userId": "u1",
            "workoutCount": 5,
            "sessionId": "s1",
        }).json()
        assert other["show"] is True
        assert same["show"] is False

    def test_manual_not_recorded(self, client):
        response = client.post("/api/v1/upgrade/record", json={"userId": "u1", "trigger": "manual"})
        assert response.json() == {"recorded": False}

    def test_unknown_trigger(self, client):
        response = client.post("/api/v1/upgrade/record", json={"userId": "u1", "trigger": "bogus"})
        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "UNKNOWN_TRIGGER"
        assert error["details"] == {"trigger": "bogus", "field": "trigger"}


class TestManualEndpoint:
    """Tests for GET /api/v1/upgrade/manual."""

    def test_free_tier(self, client):
        data = client.get("/api/v1/upgrade/manual").json()
        assert data["show"] is True
        assert data["trigger"] == "manual"

    def test_electric_tier(self, client):
        data = client.get("/api/v1/upgrade/manual", params={"tier": "electric"}).json()
        assert data["show"] is False


class TestOnboardingEndpoints:
    """Tests for the onboarding endpoints."""

    def test_new_user(self, client):
        data = client.get("/api/v1/upgrade/onboarding/u1").json()
        assert data == {"shouldShow": True, "shownRecently": False}

    def test_mark_shown(self, client):
        data = client.post("/api/v1/upgrade/onboarding/u1").json()
        assert data == {"shouldShow": False, "shownRecently": True}

        evaluation = client.post("/api/v1/upgrade/evaluate", json={
            "userId": "u1",
            "coachCount": 3,
        }).json()
        assert evaluation["show"] is False
