import os

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from cms_admin.api.v1.routes.content_types import limiter
from cms_admin.auth_utils import create_access_token
from cms_admin.db.database import get_db
from cms_admin.db.init_db import init_db
from cms_admin.main import app


@pytest.fixture(autouse=True, scope="session")
def set_test_env_vars():
    # Database settings
    os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

    # JWT Authentication settings
    os.environ.setdefault("JWT_SECRET", "test-jwt-secret-key")
    os.environ.setdefault("JWT_ALGORITHM", "HS256")

    os.environ.setdefault("ADMIN_ROLES", "ADMIN")


@pytest.fixture
def db_engine():
    # One shared in-memory connection, reachable from the TestClient's thread
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def db_session(db_engine):
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db_session):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    limiter.enabled = False
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
        limiter.enabled = True


def bearer(claims: dict) -> dict:
    return {"Authorization": f"Bearer {create_access_token(claims)}"}


@pytest.fixture
def make_headers():
    return bearer


@pytest.fixture
def admin_headers():
    return bearer({"sub": "admin-1", "role": "admin"})


@pytest.fixture
def editor_headers():
    return bearer({"sub": "editor-1", "role": "editor"})
