"""Task API routes: the caller's own tasks.

Routes just translate HTTP to service calls; the service enforces
ownership and raises AppErrors that the central handler turns into the
response envelope.

- GET    /tasks        list own tasks (status/priority filters, paginated)
- POST   /tasks        create a task owned by the caller
- GET    /tasks/{id}   read one (404 absent, 403 someone else's)
- PUT    /tasks/{id}   partial update
- DELETE /tasks/{id}   hard delete
"""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from taskflow.auth.dependencies import CurrentIdentity, get_current_user
from taskflow.config import settings
from taskflow.db.engine import get_db
from taskflow.db.models import TaskPriority, TaskStatus
from taskflow.schemas.common import DataResponse, MessageResponse, PageResponse
from taskflow.schemas.task import TaskCreate, TaskRead, TaskUpdate
from taskflow.services.task_service import TaskService

router = APIRouter(prefix="/tasks")


def _task_svc(db: AsyncSession = Depends(get_db)) -> TaskService:
    return TaskService(db)


@router.get("", response_model=PageResponse[TaskRead])
async def list_tasks(
    status: Optional[TaskStatus] = Query(None, description="Filter by status"),
    priority: Optional[TaskPriority] = Query(None, description="Filter by priority"),
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(
        settings.default_page_size,
        ge=1,
        le=settings.max_page_size,
        description="Number of items per page",
    ),
    identity: CurrentIdentity = Depends(get_current_user),
    svc: TaskService = Depends(_task_svc),
):
    """List the caller's tasks, newest first."""
    result = await svc.list_tasks(
        identity, status=status, priority=priority, page=page, limit=limit
    )
    return PageResponse[TaskRead](
        **result.meta(),
        data=[TaskRead.model_validate(t) for t in result.items],
    )


@router.post("", response_model=DataResponse[TaskRead], status_code=201)
async def create_task(
    body: TaskCreate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: TaskService = Depends(_task_svc),
):
    """Create a new task. Defaults: status 'todo', priority 'medium'."""
    task = await svc.create_task(identity, body)
    return DataResponse[TaskRead](data=TaskRead.model_validate(task))


@router.get("/{task_id}", response_model=DataResponse[TaskRead])
async def get_task(
    task_id: uuid.UUID,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: TaskService = Depends(_task_svc),
):
    """Get a single task by ID."""
    task = await svc.get_task(identity, task_id)
    return DataResponse[TaskRead](data=TaskRead.model_validate(task))


@router.put("/{task_id}", response_model=DataResponse[TaskRead])
async def update_task(
    task_id: uuid.UUID,
    body: TaskUpdate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: TaskService = Depends(_task_svc),
):
    """Partially update a task. id and ownerId in the body are ignored."""
    task = await svc.update_task(identity, task_id, body.changes())
    return DataResponse[TaskRead](data=TaskRead.model_validate(task))


@router.delete("/{task_id}", response_model=MessageResponse)
async def delete_task(
    task_id: uuid.UUID,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: TaskService = Depends(_task_svc),
):
    """Delete a task permanently."""
    await svc.delete_task(identity, task_id)
    return MessageResponse(message="Task deleted successfully")
