"""Task service: ownership-scoped CRUD over the caller's own tasks.

Learn: every operation takes the CurrentIdentity produced by the auth gate.
- list only ever queries with owner_id = caller, whatever filters come in
- create forces owner_id to the caller
- read / update / delete go through require_owner: absent → NotFound,
  someone else's → Forbidden

Writes lock and re-fetch the row inside the same transaction. A task that
disappears between the ownership check and the write (concurrent delete)
surfaces as NotFound instead of a half-applied update.
"""

import uuid
from functools import partial
from typing import Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from taskflow.auth.dependencies import CurrentIdentity
from taskflow.auth.ownership import require_owner
from taskflow.db.models import Task, TaskPriority, TaskStatus
from taskflow.db.repository import TaskRepository
from taskflow.errors import NotFound
from taskflow.schemas.task import TaskCreate
from taskflow.services.pagination import Page, paginate

logger = structlog.get_logger()

# Fields a caller may change. id, owner_id and the timestamps are never writable.
MUTABLE_FIELDS = frozenset({"title", "description", "status", "priority", "due_date"})


def _owner_of(task: Task) -> uuid.UUID:
    return task.owner_id


class TaskService:
    """Business logic for a user's own tasks."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.tasks = TaskRepository(db)

    async def _owned(
        self, identity: CurrentIdentity, task_id: uuid.UUID, action: str, lock: bool = False
    ) -> Task:
        return await require_owner(
            partial(self.tasks.find_by_id, for_update=lock),
            task_id,
            identity,
            owner_of=_owner_of,
            resource_name="Task",
            action=action,
        )

    # ─── List ────────────────────────────────────────────

    async def list_tasks(
        self,
        identity: CurrentIdentity,
        status: Optional[TaskStatus] = None,
        priority: Optional[TaskPriority] = None,
        page: int = 1,
        limit: int = 10,
    ) -> Page[Task]:
        filters = {
            "status": status,
            "priority": priority,
            "owner_id": identity.user_id,
        }
        return await paginate(self.tasks, filters, page, limit)

    # ─── Create ──────────────────────────────────────────

    async def create_task(self, identity: CurrentIdentity, body: TaskCreate) -> Task:
        fields = body.model_dump(include=set(MUTABLE_FIELDS))
        task = await self.tasks.create(**fields, owner_id=identity.user_id)
        logger.info("task.created", task_id=str(task.id), owner_id=str(identity.user_id))
        return task

    # ─── Read ────────────────────────────────────────────

    async def get_task(self, identity: CurrentIdentity, task_id: uuid.UUID) -> Task:
        return await self._owned(identity, task_id, action="access")

    # ─── Update ──────────────────────────────────────────

    async def update_task(
        self, identity: CurrentIdentity, task_id: uuid.UUID, changes: dict
    ) -> Task:
        """Apply a partial update. Non-mutable keys are dropped, not rejected."""
        await self._owned(identity, task_id, action="update", lock=True)

        fields = {k: v for k, v in changes.items() if k in MUTABLE_FIELDS}
        task = await self.tasks.update_by_id(task_id, fields)
        if task is None:
            raise NotFound("Task not found")

        if fields:
            logger.info("task.updated", task_id=str(task_id), fields=sorted(fields))
        return task

    # ─── Delete ──────────────────────────────────────────

    async def delete_task(self, identity: CurrentIdentity, task_id: uuid.UUID) -> None:
        await self._owned(identity, task_id, action="delete", lock=True)
        if not await self.tasks.delete_by_id(task_id):
            raise NotFound("Task not found")
        logger.info("task.deleted", task_id=str(task_id))
