import os

# Must be set before the app modules read their settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-signing-secret-0123456789abcdef"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["APP_ENV"] = "development"

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from api.auth import TokenService, get_token_service
from database.connection import Base, get_db
from main import app

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

NAME_FIELDS = {
    "users": "full_name",
    "hospitals": "hospital_name",
    "pharmacies": "pharmacy_name",
}


@pytest.fixture()
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def tokens():
    return TokenService("test-signing-secret-0123456789abcdef", timedelta(days=7))


@pytest.fixture()
def client(db, tokens):
    def override_get_db():
        session = TestingSessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_token_service] = lambda: tokens
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture()
def signup(client):
    """Register an account through the API and return its token."""

    def _signup(kind, email, name=None, password="p1", **profile):
        body = {
            NAME_FIELDS[kind]: name or f"Test {kind}",
            "email": email,
            "password": password,
            **profile,
        }
        r = client.post(f"/api/{kind}/register", json=body)
        assert r.status_code == 201, r.text
        return r.json()["data"]["token"]

    return _signup
