from uuid import UUID
from zoneinfo import ZoneInfo

from fastapi import APIRouter, Depends

from app.schemas.context import RequestContext
from app.schemas.task import (
    TaskDoneRequest,
    TaskDoneResponse,
    TaskOut,
    TaskRescheduleRequest,
    TaskRescheduleResponse,
)
from app.services.task_rescheduler import DragSession, TaskRescheduleService
from app.services.task_status_service import TaskStatusService
from app.repositories.task_repository import TaskRepository
from app.api.deps import (
    get_org_timezone,
    get_request_context,
    get_reschedule_service,
    get_task_repo,
    get_task_status_service,
)

router = APIRouter(prefix="/tasks", tags=["Tasks"])


@router.patch("/{task_id}/reschedule", response_model=TaskRescheduleResponse)
async def reschedule_task(
    task_id: UUID,
    body: TaskRescheduleRequest,
    context: RequestContext = Depends(get_request_context),
    tz: ZoneInfo = Depends(get_org_timezone),
    service: TaskRescheduleService = Depends(get_reschedule_service),
    task_repo: TaskRepository = Depends(get_task_repo),
) -> TaskRescheduleResponse:
    """Move a task to the drop-target date, keeping its time of day.

    A failed write returns 503 ``persistence_failed`` and leaves the task
    unchanged.
    """
    session = DragSession()
    session.start(task_id)
    result = await service.reschedule_drop(context, session, body.target_date, tz, task_repo)
    return TaskRescheduleResponse(
        task=TaskOut.model_validate(result["task"]),
        previous_due_date=result["previous_due_date"],
        timezone=result["timezone"],
    )


@router.patch("/{task_id}/done", response_model=TaskDoneResponse)
async def set_task_done(
    task_id: UUID,
    body: TaskDoneRequest,
    context: RequestContext = Depends(get_request_context),
    service: TaskStatusService = Depends(get_task_status_service),
    task_repo: TaskRepository = Depends(get_task_repo),
) -> TaskDoneResponse:
    """Mark a task completed, or reopen it."""
    task = await service.set_done(context, task_id, body.is_done, task_repo)
    return TaskDoneResponse(task=TaskOut.model_validate(task))
