"""Auth tests.

Tests cover:
1. Registration + duplicate prevention (case-insensitive)
2. Login → JWT token that decodes back to the same identity
3. Indistinguishable login failures (unknown email vs wrong password)
4. The auth gate on /auth/me (missing, malformed, tampered, expired tokens)
"""

import uuid

import pytest
from conftest import PASSWORD, register_and_login, unique_email

from taskflow.auth.jwt import create_access_token, verify_token
from taskflow.db.models import UserRole


# ═══════════════════════════════════════════════════════════
# Registration
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_register_user(client):
    """Register returns the public projection, never the hash."""
    email = unique_email("reg")
    r = await client.post("/api/auth/register", json={"email": email, "password": PASSWORD})
    assert r.status_code == 201
    body = r.json()
    assert body["success"] is True
    assert body["message"] == "User registered successfully"
    assert set(body["data"]) == {"id", "email", "role"}
    assert body["data"]["email"] == email
    assert body["data"]["role"] == "user"
    assert "password" not in r.text


@pytest.mark.asyncio
async def test_register_ignores_client_supplied_role(client):
    r = await client.post(
        "/api/auth/register",
        json={"email": unique_email("sneaky"), "password": PASSWORD, "role": "admin"},
    )
    assert r.status_code == 201
    assert r.json()["data"]["role"] == "user"


@pytest.mark.asyncio
async def test_register_duplicate_email(client):
    """Can't register with the same email twice."""
    body = {"email": unique_email("dup"), "password": PASSWORD}

    r1 = await client.post("/api/auth/register", json=body)
    assert r1.status_code == 201

    r2 = await client.post("/api/auth/register", json=body)
    assert r2.status_code == 409
    assert r2.json() == {"success": False, "error": "User already exists with this email"}


@pytest.mark.asyncio
async def test_register_duplicate_email_different_case(client):
    email = unique_email("case")
    r1 = await client.post("/api/auth/register", json={"email": email, "password": PASSWORD})
    assert r1.status_code == 201

    r2 = await client.post(
        "/api/auth/register", json={"email": email.upper(), "password": PASSWORD}
    )
    assert r2.status_code == 409


@pytest.mark.asyncio
async def test_register_normalizes_email(client):
    r = await client.post(
        "/api/auth/register", json={"email": "  Mixed.Case@Example.COM ", "password": PASSWORD}
    )
    assert r.status_code == 201
    assert r.json()["data"]["email"] == "mixed.case@example.com"

    r = await client.post(
        "/api/auth/login", json={"email": "mixed.case@example.com", "password": PASSWORD}
    )
    assert r.status_code == 200


@pytest.mark.asyncio
async def test_register_short_password(client):
    """Password must be at least 8 characters."""
    r = await client.post(
        "/api/auth/register", json={"email": unique_email("short"), "password": "abc"}
    )
    assert r.status_code == 400
    body = r.json()
    assert body["success"] is False
    assert [e["field"] for e in body["errors"]] == ["password"]


@pytest.mark.asyncio
async def test_register_long_password(client):
    """Only a minimum length applies; long passphrases are accepted."""
    email = unique_email("long")
    password = "correct horse battery staple " * 7
    r = await client.post("/api/auth/register", json={"email": email, "password": password})
    assert r.status_code == 201

    r = await client.post("/api/auth/login", json={"email": email, "password": password})
    assert r.status_code == 200


@pytest.mark.asyncio
async def test_register_invalid_email(client):
    r = await client.post("/api/auth/register", json={"email": "not-an-email", "password": PASSWORD})
    assert r.status_code == 400
    assert r.json()["errors"][0]["field"] == "email"


# ═══════════════════════════════════════════════════════════
# Login
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_login_success_token_round_trip(client):
    """The token decodes back to the registered id, email and role."""
    email = unique_email("login")
    r = await client.post("/api/auth/register", json={"email": email, "password": PASSWORD})
    user = r.json()["data"]

    r = await client.post("/api/auth/login", json={"email": email, "password": PASSWORD})
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["token_type"] == "bearer"
    assert body["data"] == user
    assert r.headers["Cache-Control"] == "no-store"

    claims = verify_token(body["token"])
    assert str(claims.user_id) == user["id"]
    assert claims.email == email
    assert claims.role == UserRole.user


@pytest.mark.asyncio
async def test_login_failures_are_indistinguishable(client):
    """Unknown email and wrong password produce the exact same response."""
    email = unique_email("enum")
    await client.post("/api/auth/register", json={"email": email, "password": PASSWORD})

    wrong_password = await client.post(
        "/api/auth/login", json={"email": email, "password": "wrong_password"}
    )
    unknown_email = await client.post(
        "/api/auth/login", json={"email": unique_email("nobody"), "password": PASSWORD}
    )

    assert wrong_password.status_code == unknown_email.status_code == 401
    assert wrong_password.json() == unknown_email.json() == {
        "success": False,
        "error": "Invalid credentials",
    }


@pytest.mark.asyncio
async def test_login_missing_password(client):
    r = await client.post("/api/auth/login", json={"email": unique_email(), "password": ""})
    assert r.status_code == 400


# ═══════════════════════════════════════════════════════════
# Auth gate (/auth/me)
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_me_with_token(client):
    email = unique_email("me")
    headers = await register_and_login(client, email)

    r = await client.get("/api/auth/me", headers=headers)
    assert r.status_code == 200
    assert r.json()["data"]["email"] == email
    assert r.json()["data"]["role"] == "user"


@pytest.mark.asyncio
async def test_me_without_token(client):
    r = await client.get("/api/auth/me")
    assert r.status_code == 401
    assert r.json()["success"] is False
    assert r.headers["WWW-Authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_me_with_wrong_scheme(client, user_headers):
    token = user_headers["Authorization"].split(" ", 1)[1]
    r = await client.get("/api/auth/me", headers={"Authorization": f"Basic {token}"})
    assert r.status_code == 401


@pytest.mark.asyncio
@pytest.mark.parametrize("token", ["invalid_token_here", "a.b.c"])
async def test_me_with_invalid_token(client, token):
    r = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_me_with_tampered_token(client, user_headers):
    token = user_headers["Authorization"].split(" ", 1)[1]
    header, payload, signature = token.split(".")
    flipped = ("A" if signature[0] != "A" else "B") + signature[1:]
    r = await client.get(
        "/api/auth/me", headers={"Authorization": f"Bearer {header}.{payload}.{flipped}"}
    )
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_me_with_expired_token(client):
    token = create_access_token(uuid.uuid4(), "late@example.com", UserRole.user, expires_minutes=0)
    r = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 401
    assert r.json()["error"] == "Not authorized, token failed"


@pytest.mark.asyncio
async def test_me_trusts_claims_without_db_lookup(client):
    """The gate never touches the database: a valid token for an unknown id still passes."""
    user_id = uuid.uuid4()
    token = create_access_token(user_id, "ghost@example.com", UserRole.user)
    r = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 200
    assert r.json()["data"]["id"] == str(user_id)
