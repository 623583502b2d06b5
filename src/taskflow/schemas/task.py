"""Pydantic schemas for tasks.

Separate schemas for create/update/read keeps the API clean.
- TaskCreate: what you POST to create a task
- TaskUpdate: what you PUT to modify a task (all optional, partial)
- TaskRead: what the API returns
- AdminTaskRead: TaskRead plus the resolved owner, for admin listings

Wire names are camelCase (dueDate, ownerId, createdAt); snake_case is
accepted on input too. Unknown fields are ignored, which is how a client
supplied id or ownerId gets dropped on create and update.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from taskflow.db.models import TaskPriority, TaskStatus
from taskflow.schemas.auth import UserRead


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _strip(v: Optional[str]) -> Optional[str]:
    return v.strip() if isinstance(v, str) else v


class TaskCreate(CamelModel):
    title: str = Field(..., max_length=500)
    description: Optional[str] = None
    status: TaskStatus = TaskStatus.todo
    priority: TaskPriority = TaskPriority.medium
    due_date: Optional[datetime] = None

    @field_validator("title")
    @classmethod
    def _title_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Task title is required")
        return v

    @field_validator("description")
    @classmethod
    def _trim_description(cls, v: Optional[str]) -> Optional[str]:
        return _strip(v)


class TaskUpdate(CamelModel):
    """Partial update: only fields present in the request body are applied."""

    title: Optional[str] = Field(None, max_length=500)
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[datetime] = None

    @field_validator("title", "status", "priority", mode="before")
    @classmethod
    def _not_null(cls, v):
        if v is None:
            raise ValueError("Field cannot be null")
        return v

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, v: Optional[str]) -> Optional[str]:
        v = _strip(v)
        if v is not None and not v:
            raise ValueError("Task title cannot be empty")
        return v

    @field_validator("description")
    @classmethod
    def _trim_description(cls, v: Optional[str]) -> Optional[str]:
        return _strip(v)

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)


class TaskRead(CamelModel):
    id: uuid.UUID
    title: str
    description: Optional[str]
    status: TaskStatus
    priority: TaskPriority
    due_date: Optional[datetime]
    owner_id: uuid.UUID
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )


class AdminTaskRead(TaskRead):
    owner: Optional[UserRead] = None
