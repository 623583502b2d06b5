"""Service and repository tests, below the HTTP layer.

These drive TaskService and the repositories directly against the test
session, for behaviour the API can't easily provoke (a row vanishing
between the ownership check and the write).
"""

import uuid

import pytest
from conftest import PASSWORD, unique_email

from taskflow.auth.dependencies import CurrentIdentity
from taskflow.db.models import TaskPriority, TaskStatus, UserRole
from taskflow.db.repository import TaskRepository, UserRepository
from taskflow.errors import Forbidden, NotFound, ValidationError
from taskflow.schemas.task import TaskCreate
from taskflow.services.auth_service import AuthService
from taskflow.services.pagination import paginate
from taskflow.services.task_service import TaskService


async def _identity(db_session, role=UserRole.user) -> CurrentIdentity:
    user = await AuthService(db_session).register(unique_email(), PASSWORD, role=role)
    return CurrentIdentity(user_id=user.id, email=user.email, role=user.role)


# ─── TaskService ──────────────────────────────────────────


@pytest.mark.asyncio
async def test_create_forces_owner(db_session):
    me = await _identity(db_session)
    svc = TaskService(db_session)

    task = await svc.create_task(me, TaskCreate(title="Mine"))
    assert task.owner_id == me.user_id
    assert task.status == TaskStatus.todo
    assert task.priority == TaskPriority.medium


@pytest.mark.asyncio
async def test_update_drops_immutable_fields(db_session):
    me = await _identity(db_session)
    svc = TaskService(db_session)
    task = await svc.create_task(me, TaskCreate(title="Mine"))
    original_id, created_at = task.id, task.created_at

    updated = await svc.update_task(
        me,
        task.id,
        {"title": "Renamed", "owner_id": uuid.uuid4(), "id": uuid.uuid4(), "created_at": None},
    )
    assert updated.title == "Renamed"
    assert updated.id == original_id
    assert updated.owner_id == me.user_id
    assert updated.created_at == created_at


@pytest.mark.asyncio
async def test_update_after_concurrent_delete_is_not_found(db_session, monkeypatch):
    """The row disappears after the ownership check: NotFound, nothing written."""
    me = await _identity(db_session)
    svc = TaskService(db_session)
    task = await svc.create_task(me, TaskCreate(title="Doomed"))

    update_by_id = svc.tasks.update_by_id

    async def delete_first(id_, fields):
        await svc.tasks.delete_by_id(id_)
        return await update_by_id(id_, fields)

    monkeypatch.setattr(svc.tasks, "update_by_id", delete_first)

    with pytest.raises(NotFound):
        await svc.update_task(me, task.id, {"title": "Too late"})
    assert await TaskRepository(db_session).find_by_id(task.id) is None


@pytest.mark.asyncio
async def test_delete_after_concurrent_delete_is_not_found(db_session, monkeypatch):
    me = await _identity(db_session)
    svc = TaskService(db_session)
    task = await svc.create_task(me, TaskCreate(title="Doomed"))

    delete_by_id = svc.tasks.delete_by_id

    async def delete_twice(id_):
        await delete_by_id(id_)
        return await delete_by_id(id_)

    monkeypatch.setattr(svc.tasks, "delete_by_id", delete_twice)

    with pytest.raises(NotFound):
        await svc.delete_task(me, task.id)


@pytest.mark.asyncio
async def test_ownership_errors(db_session):
    me = await _identity(db_session)
    other = await _identity(db_session)
    svc = TaskService(db_session)
    task = await svc.create_task(me, TaskCreate(title="Mine"))

    with pytest.raises(Forbidden, match="Not authorized to access this task"):
        await svc.get_task(other, task.id)
    with pytest.raises(NotFound, match="Task not found"):
        await svc.get_task(me, uuid.uuid4())


@pytest.mark.asyncio
async def test_list_is_scoped_even_for_admins(db_session):
    me = await _identity(db_session)
    admin = await _identity(db_session, role=UserRole.admin)
    svc = TaskService(db_session)
    await svc.create_task(me, TaskCreate(title="Mine"))

    page = await svc.list_tasks(admin)
    assert page.total == 0
    assert page.items == []


# ─── Pagination ───────────────────────────────────────────


@pytest.mark.asyncio
@pytest.mark.parametrize("page,limit", [(0, 10), (1, 0), (-1, -1)])
async def test_paginate_rejects_non_positive(db_session, page, limit):
    with pytest.raises(ValidationError):
        await paginate(TaskRepository(db_session), None, page, limit)


@pytest.mark.asyncio
async def test_paginate_meta(db_session):
    me = await _identity(db_session)
    svc = TaskService(db_session)
    for i in range(7):
        await svc.create_task(me, TaskCreate(title=f"t{i}"))

    page = await svc.list_tasks(me, page=2, limit=5)
    assert page.meta() == {"count": 2, "total": 7, "page": 2, "pages": 2}


# ─── Repositories ─────────────────────────────────────────


@pytest.mark.asyncio
async def test_repository_find_and_count(db_session):
    me = await _identity(db_session)
    repo = TaskRepository(db_session)
    for status in (TaskStatus.todo, TaskStatus.done, TaskStatus.done):
        await repo.create(title="x", status=status, priority=TaskPriority.low, owner_id=me.user_id)

    assert await repo.count() == 3
    assert await repo.count({"status": TaskStatus.done}) == 2
    # None-valued filters are ignored.
    assert await repo.count({"status": None, "owner_id": me.user_id}) == 3

    items, total = await repo.find({"status": TaskStatus.done}, sort=("title",), limit=1)
    assert total == 2
    assert len(items) == 1


@pytest.mark.asyncio
async def test_repository_update_and_delete_missing(db_session):
    repo = TaskRepository(db_session)
    assert await repo.update_by_id(uuid.uuid4(), {"title": "x"}) is None
    assert await repo.delete_by_id(uuid.uuid4()) is False


@pytest.mark.asyncio
async def test_user_repository_lookups(db_session):
    a = await _identity(db_session)
    b = await _identity(db_session)
    users = UserRepository(db_session)

    found = await users.find_by_email(a.email)
    assert found.id == a.user_id
    assert await users.find_by_email("nobody@example.com") is None

    by_id = await users.find_by_ids([a.user_id, b.user_id, uuid.uuid4()])
    assert set(by_id) == {a.user_id, b.user_id}
    assert await users.find_by_ids([]) == {}


# ─── AuthService ──────────────────────────────────────────


@pytest.mark.asyncio
async def test_ensure_admin_is_idempotent(db_session):
    svc = AuthService(db_session)
    user, created = await svc.ensure_admin("root@example.com", "admin123456")
    assert created is True
    assert user.role == UserRole.admin

    again, created = await svc.ensure_admin("root@example.com", "something-else")
    assert created is False
    assert again.id == user.id
