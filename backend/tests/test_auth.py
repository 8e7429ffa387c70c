from datetime import datetime, timedelta, timezone

import jwt
import pytest
from fastapi import Depends, FastAPI, Request
from fastapi.testclient import TestClient

from api.auth import (
    InvalidToken,
    Principal,
    TokenService,
    get_token_service,
    hash_password,
    require_role,
    verify_password,
)
from api.errors import register_exception_handlers
from database.models import Role

SECRET = "test-signing-secret-0123456789abcdef"


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


# ==================== TOKEN SERVICE ====================

def test_issued_token_verifies_to_subject_and_role(tokens):
    token = tokens.issue(42, Role.HOSPITAL)
    assert tokens.verify(token) == Principal(subject_id=42, role=Role.HOSPITAL)


def test_token_carries_issue_and_expiry_times(tokens):
    payload = jwt.decode(tokens.issue(1, Role.USER), SECRET, algorithms=["HS256"])
    assert payload["exp"] - payload["iat"] == int(timedelta(days=7).total_seconds())


def test_expired_token_is_rejected_even_with_valid_signature(tokens):
    past = datetime.now(timezone.utc) - timedelta(hours=1)
    token = jwt.encode(
        {"id": 1, "role": "user", "iat": past - timedelta(days=7), "exp": past},
        SECRET,
        algorithm="HS256",
    )
    with pytest.raises(InvalidToken, match="expired"):
        tokens.verify(token)


def test_token_signed_with_another_secret_is_rejected(tokens):
    other = TokenService("another-signing-secret-0123456789abc")
    with pytest.raises(InvalidToken):
        tokens.verify(other.issue(1, Role.USER))


@pytest.mark.parametrize(
    "payload",
    [
        {"role": "user"},
        {"id": 1},
        {"id": "1", "role": "user"},
        {"id": 1, "role": "admin"},
    ],
)
def test_malformed_payload_is_rejected(tokens, payload):
    payload["exp"] = datetime.now(timezone.utc) + timedelta(hours=1)
    token = jwt.encode(payload, SECRET, algorithm="HS256")
    with pytest.raises(InvalidToken):
        tokens.verify(token)


def test_token_without_expiry_is_rejected(tokens):
    token = jwt.encode({"id": 1, "role": "user"}, SECRET, algorithm="HS256")
    with pytest.raises(InvalidToken):
        tokens.verify(token)


def test_garbage_token_is_rejected(tokens):
    with pytest.raises(InvalidToken):
        tokens.verify("not-a-jwt")


def test_token_service_needs_a_secret():
    with pytest.raises(ValueError):
        TokenService("")


# ==================== PASSWORDS ====================

def test_password_hash_is_salted_and_verifiable():
    first = hash_password("s3cret", rounds=4)
    second = hash_password("s3cret", rounds=4)

    assert first != "s3cret"
    assert first != second
    assert verify_password("s3cret", first)
    assert not verify_password("wrong", first)


def test_malformed_hash_never_verifies():
    assert not verify_password("s3cret", "not-a-bcrypt-hash")


# ==================== ACCESS GUARD ====================

def test_missing_token_is_unauthenticated(client):
    r = client.get("/api/users/search/doctors")
    assert r.status_code == 401
    assert r.json() == {"success": False, "message": "Access denied. No token provided."}


def test_non_bearer_scheme_is_unauthenticated(client):
    r = client.get("/api/users/search/doctors", headers={"Authorization": "Basic dXNlcjpwYXNz"})
    assert r.status_code == 401


def test_invalid_token_is_unauthenticated(client):
    r = client.get("/api/users/search/doctors", headers=bearer("abc.def.ghi"))
    assert r.status_code == 401
    assert r.json() == {"success": False, "message": "Invalid token."}


def test_expired_token_is_unauthenticated(client):
    expired = TokenService(SECRET, timedelta(seconds=-60)).issue(1, Role.USER)
    r = client.get("/api/users/search/doctors", headers=bearer(expired))
    assert r.status_code == 401


def test_token_of_other_role_is_forbidden(client, tokens):
    r = client.get("/api/users/search/doctors", headers=bearer(tokens.issue(1, Role.HOSPITAL)))
    assert r.status_code == 403
    assert r.json() == {"success": False, "message": "Access denied. Insufficient permissions."}


def test_token_of_required_role_is_accepted(client, tokens):
    r = client.get("/api/users/search/doctors", headers=bearer(tokens.issue(1, Role.USER)))
    assert r.status_code == 200


@pytest.mark.parametrize("path", ["/api/hospitals/doctors", "/api/pharmacies/medicines"])
def test_patient_cannot_reach_owner_routes(client, tokens, path):
    r = client.get(path, headers=bearer(tokens.issue(1, Role.USER)))
    assert r.status_code == 403


def test_guard_without_role_accepts_every_role_and_attaches_principal(tokens):
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/me")
    async def me(request: Request, principal: Principal = Depends(require_role())):
        assert request.state.principal == principal
        return {"id": principal.subject_id, "role": principal.role.value}

    app.dependency_overrides[get_token_service] = lambda: tokens
    client = TestClient(app)

    for role in Role:
        r = client.get("/me", headers=bearer(tokens.issue(7, role)))
        assert r.json() == {"id": 7, "role": role.value}

    assert client.get("/me").status_code == 401
