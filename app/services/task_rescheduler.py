import logging
from datetime import date, datetime, time, timezone
from enum import Enum
from typing import Any, Dict, Optional, Tuple
from uuid import UUID
from zoneinfo import ZoneInfo

from app.core.exceptions import InvalidDragStateError, TaskNotFoundError
from app.repositories.task_repository import TaskRepository
from app.schemas.context import RequestContext

logger = logging.getLogger(__name__)


class DragState(str, Enum):
    idle = "idle"
    dragging = "dragging"


class DragSession:
    """State machine for one calendar drag gesture.

    ``idle → dragging(task) → (drag_over target)* → dropped → idle``.
    Only one gesture is in flight at a time; an event that does not fit
    the current state raises :class:`InvalidDragStateError`.
    """

    def __init__(self) -> None:
        self.state: DragState = DragState.idle
        self.task_id: Optional[UUID] = None
        self.hover_date: Optional[date] = None

    def start(self, task_id: UUID) -> None:
        if self.state is not DragState.idle:
            raise InvalidDragStateError(
                f"Cannot start dragging {task_id} while {self.task_id} is in flight"
            )
        self.state = DragState.dragging
        self.task_id = task_id
        self.hover_date = None

    def drag_over(self, target: date) -> None:
        if self.state is not DragState.dragging:
            raise InvalidDragStateError("drag_over received with no drag in progress")
        self.hover_date = target

    def drop(self, target: date) -> Tuple[UUID, date]:
        """Finish the gesture and return ``(task_id, target_date)``."""
        if self.state is not DragState.dragging or self.task_id is None:
            raise InvalidDragStateError("drop received with no drag in progress")
        task_id = self.task_id
        self.cancel()
        return task_id, target

    def cancel(self) -> None:
        self.state = DragState.idle
        self.task_id = None
        self.hover_date = None


def compute_rescheduled_due(
    current_due: Optional[datetime], target_date: date, tz: ZoneInfo
) -> datetime:
    """Move a due instant onto *target_date*, keeping its local time of day.

    Both the original time of day and the target date are read in the
    organization timezone, so the wall-clock time survives DST changes
    between the two dates.  A task without a due date lands at local
    midnight.
    """
    if current_due is None:
        local_time = time.min
    else:
        if current_due.tzinfo is None:
            current_due = current_due.replace(tzinfo=timezone.utc)
        local_time = current_due.astimezone(tz).time().replace(microsecond=0)
    return datetime.combine(target_date, local_time, tzinfo=tz)


class TaskRescheduleService:
    """Persists a drag-and-drop date change for a single task.

    Nothing is changed in memory before the write; if the write fails the
    transaction is rolled back and :class:`PersistenceError` propagates.
    """

    async def reschedule(
        self,
        context: RequestContext,
        task_id: UUID,
        target_date: date,
        tz: ZoneInfo,
        task_repo: TaskRepository,
    ) -> Dict[str, Any]:
        task = await task_repo.get_by_id(context.organization_id, task_id)
        if task is None:
            raise TaskNotFoundError(f"Task {task_id} not found")

        previous_due = task.due_date
        new_due = compute_rescheduled_due(previous_due, target_date, tz)

        await task_repo.update_due_date(task, new_due)
        await task_repo.commit_or_raise(f"reschedule task {task_id}")

        logger.info(
            "Rescheduled task %s: %s → %s (%s)",
            task_id,
            previous_due.isoformat() if previous_due else None,
            new_due.isoformat(),
            tz.key,
        )
        return {"task": task, "previous_due_date": previous_due, "timezone": tz.key}

    async def reschedule_drop(
        self,
        context: RequestContext,
        session: DragSession,
        target_date: date,
        tz: ZoneInfo,
        task_repo: TaskRepository,
    ) -> Dict[str, Any]:
        """Finish *session* on *target_date* and persist the dragged task's move."""
        task_id, target = session.drop(target_date)
        return await self.reschedule(context, task_id, target, tz, task_repo)
