"""Admin API routes: read-only, across all users.

The whole router sits behind require_admin (applied where it is mounted
in taskflow.api), so handlers here never check roles themselves.

- GET /admin/tasks                all tasks with their owner embedded
- GET /admin/users/{id}/tasks     one user's tasks (404 if the user is unknown)
"""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from taskflow.config import settings
from taskflow.db.engine import get_db
from taskflow.db.models import TaskPriority, TaskStatus
from taskflow.schemas.auth import UserRead
from taskflow.schemas.common import PageResponse
from taskflow.schemas.task import AdminTaskRead, TaskRead
from taskflow.services.admin_service import AdminService

router = APIRouter(prefix="/admin")


class UserTasksResponse(PageResponse[TaskRead]):
    user: UserRead


def _admin_svc(db: AsyncSession = Depends(get_db)) -> AdminService:
    return AdminService(db)


def _page_query():
    return Query(1, ge=1, description="Page number")


def _limit_query():
    return Query(
        settings.default_page_size,
        ge=1,
        le=settings.max_page_size,
        description="Number of items per page",
    )


@router.get("/tasks", response_model=PageResponse[AdminTaskRead])
async def list_all_tasks(
    status: Optional[TaskStatus] = Query(None, description="Filter by status"),
    priority: Optional[TaskPriority] = Query(None, description="Filter by priority"),
    page: int = _page_query(),
    limit: int = _limit_query(),
    svc: AdminService = Depends(_admin_svc),
):
    """Get all tasks in the system, each with its owner's email and role."""
    result, owners = await svc.list_all_tasks(
        status=status, priority=priority, page=page, limit=limit
    )
    data = []
    for task in result.items:
        owner = owners.get(task.owner_id)
        item = AdminTaskRead.model_validate(task)
        item.owner = UserRead.model_validate(owner) if owner else None
        data.append(item)
    return PageResponse[AdminTaskRead](**result.meta(), data=data)


@router.get("/users/{user_id}/tasks", response_model=UserTasksResponse)
async def list_user_tasks(
    user_id: uuid.UUID,
    page: int = _page_query(),
    limit: int = _limit_query(),
    svc: AdminService = Depends(_admin_svc),
):
    """Get the tasks of one specific user."""
    user, result = await svc.list_user_tasks(user_id, page=page, limit=limit)
    return UserTasksResponse(
        **result.meta(),
        user=UserRead.model_validate(user),
        data=[TaskRead.model_validate(t) for t in result.items],
    )
