"""TaskFlow CLI: run the server, manage the schema, seed the admin, poke the API.

Usage:
    taskflow serve                               # Run the API with uvicorn
    taskflow init-db                             # Create tables
    taskflow seed-admin                          # Create the admin account
    taskflow login a@x.com                       # Print a bearer token
    taskflow tasks --status todo                 # List your tasks (needs TASKFLOW_TOKEN)
"""

from __future__ import annotations

import asyncio
import os
import sys
from typing import Optional

import click
import httpx

from taskflow import __version__
from taskflow.config import settings

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

DEFAULT_API_URL = "http://localhost:8000"
DEFAULT_ADMIN_EMAIL = "admin@taskflow.com"
DEFAULT_ADMIN_PASSWORD = "admin123456"


def _api_url() -> str:
    return os.environ.get("TASKFLOW_API_URL", DEFAULT_API_URL).rstrip("/")


def _client(token: Optional[str] = None) -> httpx.Client:
    """Build an HTTP client pointed at the TaskFlow backend."""
    headers = {"Authorization": f"Bearer {token}"} if token else {}
    return httpx.Client(base_url=_api_url(), timeout=30.0, headers=headers)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _fail(message: str) -> None:
    click.secho(f"Error: {message}", fg="red", err=True)
    sys.exit(1)


def _error_message(resp: httpx.Response) -> str:
    try:
        return resp.json().get("error") or resp.text
    except ValueError:
        return resp.text


def _print_table(rows: list[dict], columns: list[tuple[str, str, int]]):
    """Print a simple ASCII table.

    columns: list of (header, dict_key, width)
    """
    header = "  ".join(h.ljust(w) for h, _, w in columns)
    click.secho(header, bold=True)
    click.echo("-" * len(header))
    for row in rows:
        line = "  ".join(str(row.get(k) or "-")[:w].ljust(w) for _, k, w in columns)
        click.echo(line)


def _status_color(status: str) -> str:
    return {"todo": "white", "in_progress": "yellow", "done": "green"}.get(status, "white")


async def _with_session(database_url: str, work):
    """Run work(session) against a throwaway engine for database_url."""
    from taskflow.db.engine import build_engine, build_session_factory

    engine = build_engine(database_url)
    try:
        async with build_session_factory(engine)() as session:
            return await work(session)
    finally:
        await engine.dispose()


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="taskflow")
def main():
    """TaskFlow: task management API."""


@main.command()
@click.option("--host", default=None, help="Bind host (default from TASKFLOW_HOST)")
@click.option("--port", default=None, type=int, help="Bind port (default from TASKFLOW_PORT)")
@click.option("--reload", is_flag=True, help="Auto-reload on code changes")
def serve(host: Optional[str], port: Optional[int], reload: bool):
    """Run the API server."""
    import uvicorn

    uvicorn.run(
        "taskflow.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
    )


@main.command("init-db")
@click.option("--database-url", default=None, help="Database URL (default from TASKFLOW_DATABASE_URL)")
def init_db(database_url: Optional[str]):
    """Create all tables that do not exist yet."""
    from taskflow.db.engine import build_engine
    from taskflow.db.models import Base

    async def _create():
        engine = build_engine(database_url or settings.database_url)
        try:
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        finally:
            await engine.dispose()

    asyncio.run(_create())
    click.secho("Database schema created", fg="green")


@main.command("seed-admin")
@click.option("--email", default=DEFAULT_ADMIN_EMAIL, show_default=True)
@click.option("--password", default=DEFAULT_ADMIN_PASSWORD, show_default=True)
@click.option("--database-url", default=None, help="Database URL (default from TASKFLOW_DATABASE_URL)")
def seed_admin(email: str, password: str, database_url: Optional[str]):
    """Create the admin account if it does not exist."""
    from taskflow.services.auth_service import AuthService

    if len(password) < 8:
        _fail("Password must be at least 8 characters long")

    async def _seed(session):
        return await AuthService(session).ensure_admin(email, password)

    user, created = asyncio.run(_with_session(database_url or settings.database_url, _seed))

    if not created:
        click.echo("Admin user already exists")
        click.echo(f"Email: {user.email}")
        click.echo(f"Role: {user.role.value}")
        return

    click.secho("Admin user created successfully!", fg="green")
    click.echo("-" * 35)
    click.echo(f"Email: {user.email}")
    click.echo(f"Role: {user.role.value}")
    click.echo("-" * 35)
    click.secho("Please change the password after first login!", fg="yellow")


@main.command()
@click.argument("email")
@click.password_option("--password", confirmation_prompt=False)
def login(email: str, password: str):
    """Log in and print a bearer token (export it as TASKFLOW_TOKEN)."""
    with _client() as c:
        resp = c.post("/api/auth/login", json={"email": email, "password": password})
    if resp.status_code != 200:
        _fail(_error_message(resp))
    click.echo(resp.json()["token"])


@main.command()
@click.option("--status", type=click.Choice(["todo", "in_progress", "done"]))
@click.option("--priority", type=click.Choice(["low", "medium", "high"]))
@click.option("--page", default=1, show_default=True, type=int)
@click.option("--limit", default=10, show_default=True, type=int)
@click.option("--token", envvar="TASKFLOW_TOKEN", help="Bearer token (or set TASKFLOW_TOKEN)")
def tasks(status: Optional[str], priority: Optional[str], page: int, limit: int,
          token: Optional[str]):
    """List your tasks."""
    if not token:
        _fail("--token required (or set TASKFLOW_TOKEN; get one with `taskflow login`)")

    params = {"page": page, "limit": limit}
    if status:
        params["status"] = status
    if priority:
        params["priority"] = priority

    with _client(token) as c:
        resp = c.get("/api/tasks", params=params)
    if resp.status_code != 200:
        _fail(_error_message(resp))

    body = resp.json()
    rows = body["data"]
    if not rows:
        click.echo("No tasks found.")
        return

    _print_table(rows, [
        ("ID", "id", 36),
        ("TITLE", "title", 40),
        ("STATUS", "status", 12),
        ("PRIORITY", "priority", 8),
        ("DUE", "dueDate", 20),
    ])
    click.echo()
    counts: dict[str, int] = {}
    for row in rows:
        counts[row["status"]] = counts.get(row["status"], 0) + 1
    for name, n in sorted(counts.items()):
        click.secho(f"{name}: {n}", fg=_status_color(name))
    click.echo(f"Page {body['page']}/{body['pages']}, {body['total']} task(s) total")


if __name__ == "__main__":
    main()
