import os
import tempfile

# Settings are read at import time, so point them at throwaway locations first
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="doodle-uploads-")
os.environ.pop("HF_TOKEN", None)

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from doodle.infrastructure.ai.ai_service import CourseAIService
from doodle.infrastructure.db.base import Base
from doodle.infrastructure.db import init_db  # noqa: F401  registers every model
from doodle.infrastructure.search.search_service import CourseSearchService
from doodle.infrastructure.storage.file_storage import FileStorageService
from doodle.presentation.dependencies import get_ai_service, get_db, get_search_service, get_storage


class FakeLLM:
    """LLMClient stand-in that replays canned completions and records prompts."""

    def __init__(self, responses=None, error=None):
        self.responses = list(responses or [])
        self.error = error
        self.calls = []

    def generate(self, *, system_prompt: str, user_prompt: str) -> str:
        self.calls.append({"system_prompt": system_prompt, "user_prompt": user_prompt})
        if self.error is not None:
            raise self.error
        if not self.responses:
            raise RuntimeError("FakeLLM has no more responses")
        return self.responses.pop(0)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(engine):
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def storage(tmp_path):
    return FileStorageService(str(tmp_path / "uploads"), "http://testserver")


@pytest.fixture
def search_service():
    return CourseSearchService()


@pytest.fixture
def ai_service():
    return CourseAIService()


@pytest.fixture
def client(engine, storage, search_service, ai_service):
    from main import app

    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        db = TestingSession()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_search_service] = lambda: search_service
    app.dependency_overrides[get_ai_service] = lambda: ai_service

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# --------------------------------------------------
# Helpers
# --------------------------------------------------

def register(client, email, role, password="secret123", **extra):
    resp = client.post(
        "/api/auth/register",
        json={"email": email, "password": password, "role": role, **extra},
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def instructor(client):
    body = register(client, "instructor@example.com", "instructor", first_name="Ada")
    return {"id": body["user"]["id"], "headers": auth_headers(body["token"])}


@pytest.fixture
def other_instructor(client):
    body = register(client, "other.instructor@example.com", "instructor")
    return {"id": body["user"]["id"], "headers": auth_headers(body["token"])}


@pytest.fixture
def student(client):
    body = register(client, "student@example.com", "student")
    return {"id": body["user"]["id"], "headers": auth_headers(body["token"])}


SAMPLE_SYLLABUS = [
    {
        "topic": "Core Concepts",
        "bloom_level": "UNDERSTAND",
        "subtopics": [
            "Fundamental principles",
            {"subtopic": "Key terminology", "bloom_level": "REMEMBER"},
        ],
    },
    {
        "topic": "Practical Applications",
        "bloom_level": "APPLY",
        "subtopics": ["Hands-on exercises"],
    },
]


def create_course(client, instructor, title="Cloud Computing", syllabus=None, publish=False):
    resp = client.post("/api/courses", json={"title": title, "description": "Intro course"}, headers=instructor["headers"])
    assert resp.status_code == 201, resp.text
    course = resp.json()["course"]

    if syllabus is not None:
        resp = client.put(f"/api/courses/{course['id']}", json={"syllabus": syllabus}, headers=instructor["headers"])
        assert resp.status_code == 200, resp.text
        course = resp.json()["course"]

    if publish:
        resp = client.put(f"/api/courses/{course['id']}/publish", headers=instructor["headers"])
        assert resp.status_code == 200, resp.text
        course = resp.json()["course"]

    return course


def create_assessment(client, instructor, course_id, subtopics=None, **extra):
    subtopics = subtopics or [
        {"topic_title": "Core Concepts", "subtopic": "Key terminology", "mcq_count": 2, "msq_count": 1, "subjective_count": 1},
    ]
    resp = client.post(
        "/api/assessments",
        json={"course_id": course_id, "title": "Quiz 1", "subtopics": subtopics, **extra},
        headers=instructor["headers"],
    )
    assert resp.status_code == 201, resp.text
    return resp.json()
