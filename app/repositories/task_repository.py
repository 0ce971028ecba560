from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select, or_

from app.models.task import Task
from app.repositories.base import BaseRepository


class TaskRepository(BaseRepository):
    """Encapsulates queries against the ``tasks`` table."""

    @staticmethod
    def _visible_to(user_id: UUID):
        """Personal tasks are only visible to their creator or assignee."""
        return or_(
            Task.is_personal.is_(False),
            Task.created_by == user_id,
            Task.assigned_to == user_id,
        )

    async def get_by_id(self, organization_id: UUID, task_id: UUID) -> Optional[Task]:
        """Return a task by primary key within the organization, or ``None``."""
        result = await self._db.execute(
            select(Task).where(
                Task.id == task_id,
                Task.organization_id == organization_id,
            )
        )
        return result.scalar_one_or_none()

    async def list_due_between(
        self,
        organization_id: UUID,
        user_id: UUID,
        start: datetime,
        end: datetime,
    ) -> List[Task]:
        """Return visible tasks with ``start <= due_date < end``, earliest first."""
        query = (
            select(Task)
            .where(
                Task.organization_id == organization_id,
                Task.due_date >= start,
                Task.due_date < end,
                self._visible_to(user_id),
            )
            .order_by(Task.due_date.asc())
        )
        result = await self._db.execute(query)
        return list(result.scalars().all())

    async def update_due_date(self, task: Task, due_date: datetime) -> None:
        """Set a new due instant on an existing task instance."""
        task.due_date = due_date

    async def update_done(self, task: Task, is_done: bool) -> None:
        """Mark an existing task instance done or open again."""
        task.is_done = is_done
