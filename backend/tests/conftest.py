"""
Shared fixtures: a fresh SQLite database per test (file under tmp_path, foreign keys on),
a Session on it, and a TestClient with get_db / get_current_owner_id / get_generator overridden.
"""
import json
import os
import uuid

# Keep the app's own engine off the developer database and away from real providers.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LLM_PROVIDER", "mock")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from app.api.deps import get_current_owner_id, get_generator
from app.config import settings
from app.database import Base, get_db, import_models, make_engine
from app.main import app
from app.services import profile_service, topic_service


def topics_payload(n: int, **overrides) -> str:
    """Provider-shaped JSON with n valid topics."""
    topics = []
    for i in range(n):
        topic = {
            "title": f"Generated topic {i + 1}",
            "description": f"What topic {i + 1} covers",
            "practice_links": [
                {"title": f"Problem {i + 1}", "url": f"https://leetcode.com/problems/p{i + 1}/", "difficulty": "Easy"}
            ],
        }
        topic.update(overrides)
        topics.append(topic)
    return json.dumps({"topics": topics})


class FakeGenerator:
    """Scripted TopicGenerator: each call pops the next response; exceptions are raised."""

    name = "fake"

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = 0
        self.contexts = []

    def generate_topics(self, context):
        self.calls += 1
        self.contexts.append(context)
        response = self.responses[min(self.calls, len(self.responses)) - 1]
        if isinstance(response, BaseException):
            raise response
        return response


@pytest.fixture(autouse=True)
def _fast_retries(monkeypatch):
    monkeypatch.setattr(settings, "ai_retry_wait_seconds", 0)
    monkeypatch.setattr(settings, "ai_rate_limit_per_hour", 5)


@pytest.fixture
def engine(tmp_path):
    eng = make_engine(f"sqlite:///{tmp_path / 'test.db'}")
    import_models()
    Base.metadata.create_all(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def owner_id():
    return uuid.uuid4()


@pytest.fixture
def other_owner_id():
    return uuid.uuid4()


@pytest.fixture
def make_topic(db):
    """Factory: create a topic through the lifecycle service (defaults fill required fields)."""

    def _make(owner, title="Topic", technology="Python", **fields):
        data = {"title": title, "technology": technology, **fields}
        if data.get("parent_id") is not None:
            data["parent_id"] = str(data["parent_id"])
        return topic_service.create_topic(db, owner, data)

    return _make


@pytest.fixture
def make_profile(db):
    def _make(owner, experience_level="intermediate", years_away=3):
        return profile_service.upsert(db, owner, experience_level, years_away)

    return _make


@pytest.fixture
def fake_generator():
    """Default generator for API tests; replace .responses per test."""
    return FakeGenerator(topics_payload(3))


def _override_get_db(session_factory):
    def override():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    return override


@pytest.fixture
def client(session_factory, owner_id, fake_generator):
    """TestClient authenticated as owner_id."""
    app.dependency_overrides[get_db] = _override_get_db(session_factory)
    app.dependency_overrides[get_current_owner_id] = lambda: owner_id
    app.dependency_overrides[get_generator] = lambda: fake_generator
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def anon_client(session_factory):
    """TestClient with real Bearer token handling."""
    app.dependency_overrides[get_db] = _override_get_db(session_factory)
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
