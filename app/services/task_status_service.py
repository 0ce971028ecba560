import logging
from uuid import UUID

from app.core.exceptions import TaskNotFoundError
from app.models.task import Task
from app.repositories.task_repository import TaskRepository
from app.schemas.common import TASK_DONE_STATUS, TASK_OPEN_STATUS
from app.schemas.context import RequestContext

logger = logging.getLogger(__name__)


class TaskStatusService:
    """Toggles the completion flag of a single task."""

    async def set_done(
        self,
        context: RequestContext,
        task_id: UUID,
        is_done: bool,
        task_repo: TaskRepository,
    ) -> Task:
        task = await task_repo.get_by_id(context.organization_id, task_id)
        if task is None:
            raise TaskNotFoundError(f"Task {task_id} not found")

        await task_repo.update_done(task, is_done)
        await task_repo.commit_or_raise(f"update status of task {task_id}")

        logger.info(
            "Task %s marked %s by user %s",
            task_id,
            TASK_DONE_STATUS if is_done else TASK_OPEN_STATUS,
            context.user_id,
        )
        return task
