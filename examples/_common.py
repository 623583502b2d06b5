"""
Shared helpers for TaskFlow examples.

Handles the health check and authentication (register + login) so each
example can focus on its specific workflow.
"""

import os
import sys
import uuid

import httpx

BASE = os.environ.get("TASKFLOW_API_URL", "http://localhost:8000").rstrip("/") + "/api"


def check_backend() -> None:
    """Verify the backend is reachable and the database is up."""
    try:
        resp = httpx.get(f"{BASE}/health", timeout=5)
    except httpx.ConnectError:
        print(f"ERROR: Backend not reachable at {BASE}")
        print("Start it with:  taskflow serve --reload")
        sys.exit(1)

    if resp.status_code != 200:
        print(f"ERROR: Health check returned {resp.status_code}")
        sys.exit(1)

    health = resp.json()
    print("Backend health:")
    print(f"  Version:  {health['version']}")
    print(f"  Database: {'✓' if health['database'] == 'ok' else '✗'}")

    if health["status"] != "healthy":
        print(f"\nERROR: Database check failed ({health['database']})")
        sys.exit(1)


def login(email: str, password: str) -> httpx.Client:
    """Log in and return an httpx Client carrying the bearer token."""
    resp = httpx.post(
        f"{BASE}/auth/login",
        json={"email": email, "password": password},
        timeout=10,
    )
    if resp.status_code != 200:
        print(f"ERROR: Login failed for {email}: {resp.json().get('error', resp.text)}")
        sys.exit(1)

    return httpx.Client(
        base_url=BASE,
        timeout=10,
        headers={"Authorization": f"Bearer {resp.json()['token']}"},
    )


def create_user_client(prefix: str = "demo") -> tuple[httpx.Client, dict]:
    """Register a fresh user and log in.

    Uses a unique email per run so examples are idempotent.
    Returns (client, user).
    """
    email = f"{prefix}-{uuid.uuid4().hex[:8]}@example.com"
    password = "demo-password-123"

    resp = httpx.post(
        f"{BASE}/auth/register",
        json={"email": email, "password": password},
        timeout=10,
    )
    if resp.status_code != 201:
        print(f"ERROR: Registration failed: {resp.status_code} {resp.text}")
        sys.exit(1)

    user = resp.json()["data"]
    print(f"  User:     {user['email']} ({user['id'][:8]}...)")
    return login(email, password), user
