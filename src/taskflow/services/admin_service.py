"""Admin service: read-only views across every user's tasks.

No ownership filter applies here; the admin role gate in front of the
router is the only access check. Owners are resolved with one batched
user query per page rather than one lookup per task.
"""

import uuid
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from taskflow.db.models import Task, TaskPriority, TaskStatus, User
from taskflow.db.repository import TaskRepository, UserRepository
from taskflow.errors import NotFound
from taskflow.services.pagination import Page, paginate


class AdminService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.tasks = TaskRepository(db)
        self.users = UserRepository(db)

    async def list_all_tasks(
        self,
        status: Optional[TaskStatus] = None,
        priority: Optional[TaskPriority] = None,
        page: int = 1,
        limit: int = 10,
    ) -> tuple[Page[Task], dict[uuid.UUID, User]]:
        """All tasks, newest first, plus a map of owner id → owner."""
        result = await paginate(
            self.tasks, {"status": status, "priority": priority}, page, limit
        )
        owners = await self.users.find_by_ids(t.owner_id for t in result.items)
        return result, owners

    async def list_user_tasks(
        self,
        user_id: uuid.UUID,
        page: int = 1,
        limit: int = 10,
    ) -> tuple[User, Page[Task]]:
        user = await self.users.find_by_id(user_id)
        if user is None:
            raise NotFound("User not found")
        result = await paginate(self.tasks, {"owner_id": user.id}, page, limit)
        return user, result
