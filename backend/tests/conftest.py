"""Shared fixtures: in-memory database, both store backends, an idle scheduler
and an API client wired to them."""

import io
import json
import os
from datetime import date, timedelta

os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("STORAGE_BACKEND", "database")

import pytest
from apscheduler.schedulers.background import BackgroundScheduler
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from courtbell.api.v1.deps import get_legal_tools_service, get_session_registry
from courtbell.db.database import get_db, init_db
from courtbell.main import app
from courtbell.services.ai_service import LegalToolsService
from courtbell.services.local_document_store import LocalDocumentStore
from courtbell.services.session_service import SessionRegistry
from courtbell.services.sql_document_store import SqlDocumentStore


# =============================================================================
# Persistence
# =============================================================================


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def sql_store(session_factory) -> SqlDocumentStore:
    return SqlDocumentStore(session_factory)


@pytest.fixture
def local_store(tmp_path) -> LocalDocumentStore:
    return LocalDocumentStore(tmp_path / "data")


@pytest.fixture(params=["sql", "local"])
def store(request, session_factory, tmp_path):
    """Each store test runs against both backends."""
    if request.param == "sql":
        return SqlDocumentStore(session_factory)
    return LocalDocumentStore(tmp_path / "data")


# =============================================================================
# Scheduling
# =============================================================================


@pytest.fixture
def scheduler() -> BackgroundScheduler:
    """Never started (so no event loop is needed): added jobs stay pending
    and can be inspected."""
    return BackgroundScheduler()


@pytest.fixture
def tomorrow() -> str:
    return (date.today() + timedelta(days=1)).isoformat()


@pytest.fixture
def yesterday() -> str:
    return (date.today() - timedelta(days=1)).isoformat()


# =============================================================================
# API
# =============================================================================


class FakeBedrockClient:
    """Stands in for the bedrock-runtime client; records the last request."""

    def __init__(self, reply: str = "", error: Exception | None = None) -> None:
        self.reply = reply
        self.error = error
        self.calls: list[dict] = []

    def invoke_model(self, modelId: str, body: str) -> dict:
        self.calls.append({"modelId": modelId, "body": json.loads(body)})
        if self.error is not None:
            raise self.error
        payload = {"content": [{"type": "text", "text": self.reply}]}
        return {"body": io.BytesIO(json.dumps(payload).encode("utf-8"))}


@pytest.fixture
def bedrock() -> FakeBedrockClient:
    return FakeBedrockClient(reply=json.dumps({
        "suggestedStatutes": ["Transfer of Property Act, 1882 s.106"],
        "suggestedCaseLaw": ["Nopany Investments v. Santokh Singh (2008) 2 SCC 728"],
        "suggestedTemplates": ["Eviction notice"],
    }))


@pytest.fixture
def registry(sql_store, scheduler) -> SessionRegistry:
    registry = SessionRegistry(sql_store, scheduler)
    yield registry
    registry.close_all()


@pytest.fixture
def client(session_factory, registry, bedrock):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_registry] = lambda: registry
    app.dependency_overrides[get_legal_tools_service] = lambda: LegalToolsService(bedrock_client=bedrock)
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(client) -> dict:
    response = client.post(
        "/api/v1/auth/signup",
        json={"email": "advocate@example.com", "password": "secret123", "display_name": "A. Menon"},
    )
    assert response.status_code == 201, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}
