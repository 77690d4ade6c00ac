"""Pytest configuration and fixtures for CampusLink tests."""

import os
import tempfile

# Settings are read at import time, so the environment must be ready first
_TMP_DIR = tempfile.mkdtemp(prefix="campuslink-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'accounts.db')}"
os.environ["UPLOAD_DIR"] = os.path.join(_TMP_DIR, "uploads")
os.environ["ALLOWED_EMAIL_DOMAINS"] = '["campus.edu"]'
os.environ["ADMIN_EMAILS"] = '["dean@admin.org"]'
os.environ["GEMINI_API_KEY"] = "test-key"
os.environ["MENTOR_MATCH_MAX_CANDIDATES"] = "20"

import mongomock
import pytest
from fastapi.testclient import TestClient

from campuslink.db import mongodb
from campuslink.db.postgres import engine, metadata
from campuslink.services import gemini_client
from campuslink.services.gemini_client import GeminiClient


DEFAULT_REPLIES = {
    "moderation": '{"safe": true, "reason": "", "severity": "low"}',
    "triage": (
        "```json\n"
        '{"category": "Safety", "priority": "High", "tags": ["Lighting", "night"], '
        '"summary": "Street light is out near the library."}\n'
        "```"
    ),
    "match": '{"score": 85, "reason": "Strong skill overlap.", "matchedSkills": ["Python"]}',
    "query": 'Sure! {"skills": ["Python"], "keywords": ["data analysis"]}',
}


class FakeGeminiClient(GeminiClient):
    """
    Scripted stand-in for the Gemini API.

    Only _call_api is replaced, so JSON extraction and validation run for
    real. Set `replies[kind]` to a string or a callable(user_content), or
    add the kind to `offline` to make the call raise.
    """

    def __init__(self):
        self.model = "fake-gemini"
        self.replies = dict(DEFAULT_REPLIES)
        self.offline = set()
        self.calls = []

    @staticmethod
    def _kind(system_prompt: str) -> str:
        if "content moderation" in system_prompt:
            return "moderation"
        if "issue reporting" in system_prompt:
            return "triage"
        if "mentor matching" in system_prompt:
            return "match"
        if "search query" in system_prompt:
            return "query"
        return "other"

    def _call_api(self, system_prompt: str, user_content: str, max_tokens: int = 500) -> str:
        kind = self._kind(system_prompt)
        self.calls.append((kind, user_content))
        if kind in self.offline:
            raise ConnectionError("Gemini unreachable")
        reply = self.replies.get(kind, "OK")
        return reply(user_content) if callable(reply) else reply

    def calls_of(self, kind: str) -> list:
        return [content for k, content in self.calls if k == kind]


@pytest.fixture(autouse=True)
def mongo_db(monkeypatch):
    """Fresh in-memory MongoDB for every test."""
    client = mongomock.MongoClient()
    monkeypatch.setattr(mongodb, "_client", client)
    monkeypatch.setattr(mongodb, "_db", None)
    mongodb.init_mongo_indexes()
    return mongodb.get_mongo_db()


@pytest.fixture(autouse=True)
def sql_db():
    """Empty accounts table for every test."""
    metadata.drop_all(engine)
    metadata.create_all(engine)
    yield
    engine.dispose()


@pytest.fixture(autouse=True)
def fake_ai(monkeypatch) -> FakeGeminiClient:
    fake = FakeGeminiClient()
    monkeypatch.setattr(gemini_client, "_gemini_client", fake)
    return fake


@pytest.fixture
def client() -> TestClient:
    from campuslink.main import app
    return TestClient(app)


@pytest.fixture
def signup(client):
    """Register + login. Returns (user_id, auth headers)."""
    def _signup(email: str, password: str = "correct-horse-9"):
        resp = client.post("/api/auth/register", json={"email": email, "password": password})
        assert resp.status_code == 201, resp.text
        resp = client.post("/api/auth/login", json={"email": email, "password": password})
        assert resp.status_code == 200, resp.text
        body = resp.json()
        return body["user_id"], {"Authorization": f"Bearer {body['access_token']}"}
    return _signup


@pytest.fixture
def make_profile(client):
    def _make_profile(headers: dict, **overrides):
        payload = {
            "department": "Computer Science",
            "year": "2nd Year",
            "skills_have": "Python, Web Design",
            "skills_to_learn": "Photography",
            "bio": "Night owl, coffee person.",
        }
        payload.update(overrides)
        resp = client.post("/api/profiles/me", json=payload, headers=headers)
        assert resp.status_code == 201, resp.text
        return resp.json()
    return _make_profile
