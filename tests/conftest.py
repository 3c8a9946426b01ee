import os
from typing import Generator

# Required secrets must exist before the app module loads settings
os.environ.setdefault("JWT_KEY", "test-signing-key-0123456789abcdef0123456789")
os.environ.setdefault("JWT_ISSUER", "LogiTrack-tests")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from logitrack import config
from logitrack.cache import ReadThroughCache
from logitrack.db import Base, SessionLocal, enable_sqlite_foreign_keys
from logitrack.main import app, get_db

MANAGER_EMAIL = "manager@logitrack.local"
MANAGER_PASSWORD = "Pass@word1!"


@pytest.fixture(autouse=True)
def settings():
    config.set_settings(None)
    yield config.get_settings()
    config.set_settings(None)


@pytest.fixture(scope="function")
def session_factory():
    # Use in-memory SQLite with a single connection
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine, future=True)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(session_factory) -> Generator:
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def cache():
    return ReadThroughCache(size_limit=1024)


@pytest.fixture(scope="function")
def client(db_session, session_factory):
    # Override dependency to use the same session
    def override_get_db():
        try:
            yield db_session
        finally:
            pass
    app.dependency_overrides[get_db] = override_get_db
    app.state.session_factory = session_factory
    from fastapi.testclient import TestClient
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
    app.state.session_factory = SessionLocal


def login(client, email, password) -> str:
    r = client.post("/api/auth/login", json={"email": email, "password": password})
    assert r.status_code == 200, r.text
    return r.json()["token"]


@pytest.fixture
def manager_headers(client):
    return {"Authorization": f"Bearer {login(client, MANAGER_EMAIL, MANAGER_PASSWORD)}"}


@pytest.fixture
def user_headers(client):
    r = client.post("/api/auth/register", json={"email": "clerk@example.com", "password": "Clerk#2024"})
    assert r.status_code == 200, r.text
    return {"Authorization": f"Bearer {login(client, 'clerk@example.com', 'Clerk#2024')}"}
