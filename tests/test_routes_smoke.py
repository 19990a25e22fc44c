"""Smoke tests for API routes."""

import json
from unittest.mock import MagicMock, patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from times_trainer.api.routes import router
from times_trainer.models.leaderboard import LeaderboardEntry
from times_trainer.models.user_profile import UserProfile


@pytest.fixture
def mock_settings(tmp_path):
    settings = MagicMock()
    settings.progress_dir = tmp_path / "progress"
    settings.progress_dir.mkdir()
    settings.level_count = 50
    return settings


@pytest.fixture
def client(mock_settings):
    app = FastAPI()
    app.include_router(router)
    with patch("times_trainer.api.routes.get_settings", return_value=mock_settings):
        with TestClient(app) as c:
            yield c


class TestHealthCheck:
    def test_health_returns_ok(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}


class TestLevels:
    def test_fresh_level_map(self, client):
        response = client.get("/api/levels")
        assert response.status_code == 200
        levels = response.json()
        assert len(levels) == 50
        assert levels[0]["is_unlocked"] is True
        assert levels[0]["range"] == {"low": 2, "high": 5}
        assert levels[9]["type"] == "trophy"
        assert levels[1]["is_unlocked"] is False


class TestProfile:
    def test_default_profile(self, client):
        response = client.get("/api/profile")
        assert response.status_code == 200
        data = response.json()
        assert data["profile"]["total_xp"] == 0
        assert data["achievements"] == []

    def test_stored_profile_with_achievements(self, client, mock_settings):
        profile = UserProfile(levels_completed=6, accuracy=95, total_questions=60, correct_questions=57)
        (mock_settings.progress_dir / "math-profile.json").write_text(profile.model_dump_json())
        data = client.get("/api/profile").json()
        assert data["profile"]["levels_completed"] == 6
        assert [a["key"] for a in data["achievements"]] == ["beginner", "sharpshooter"]

    def test_malformed_profile_served_as_default(self, client, mock_settings):
        (mock_settings.progress_dir / "math-profile.json").write_text("][")
        response = client.get("/api/profile")
        assert response.status_code == 200
        assert response.json()["profile"]["total_xp"] == 0


class TestLeaderboard:
    def test_empty(self, client):
        assert client.get("/api/leaderboard").json() == []

    def test_limit(self, client, mock_settings):
        entries = [
            LeaderboardEntry(name="Student", score=s, accuracy=90, streak=0).model_dump(mode="json")
            for s in (300, 200, 100)
        ]
        (mock_settings.progress_dir / "math-leaderboard.json").write_text(json.dumps(entries))
        data = client.get("/api/leaderboard", params={"limit": 2}).json()
        assert [e["score"] for e in data] == [300, 200]

    def test_invalid_limit(self, client):
        assert client.get("/api/leaderboard", params={"limit": 0}).status_code == 422
