from datetime import date
from zoneinfo import ZoneInfo

from fastapi import APIRouter, Depends, Path

from app.core.constants import WEEKDAY_LABELS
from app.schemas.context import RequestContext
from app.schemas.task import (
    CalendarDayOut,
    CalendarMonthResponse,
    TaskOut,
    TasksOnDateResponse,
)
from app.services.calendar_service import CalendarService
from app.repositories.task_repository import TaskRepository
from app.api.deps import (
    get_calendar_service,
    get_org_timezone,
    get_request_context,
    get_task_repo,
)

router = APIRouter(prefix="/calendar", tags=["Calendar"])


@router.get("/day/{day}", response_model=TasksOnDateResponse)
async def get_tasks_on_date(
    day: date,
    context: RequestContext = Depends(get_request_context),
    tz: ZoneInfo = Depends(get_org_timezone),
    service: CalendarService = Depends(get_calendar_service),
    task_repo: TaskRepository = Depends(get_task_repo),
) -> TasksOnDateResponse:
    """Tasks due on one calendar date, as seen in the organization's timezone."""
    tasks = await service.tasks_on_date(context, day, tz, task_repo)
    return TasksOnDateResponse(
        date=day,
        timezone=tz.key,
        tasks=[TaskOut.model_validate(t) for t in tasks],
    )


@router.get("/{year}/{month}", response_model=CalendarMonthResponse)
async def get_calendar_month(
    year: int = Path(..., ge=1970, le=9999),
    month: int = Path(..., ge=1, le=12),
    context: RequestContext = Depends(get_request_context),
    tz: ZoneInfo = Depends(get_org_timezone),
    service: CalendarService = Depends(get_calendar_service),
    task_repo: TaskRepository = Depends(get_task_repo),
) -> CalendarMonthResponse:
    """Month grid in the organization's timezone with each day's tasks.

    The grid always covers whole weeks (Sunday first), so it includes the
    trailing days of the previous month and the leading days of the next.
    """
    days = await service.get_month(context, year, month, tz, task_repo)
    return CalendarMonthResponse(
        year=year,
        month=month,
        timezone=tz.key,
        weekday_labels=list(WEEKDAY_LABELS),
        days=[
            CalendarDayOut(
                date=day.date,
                weekday=day.weekday,
                in_current_month=day.in_current_month,
                is_today=day.is_today,
                tasks=[TaskOut.model_validate(t) for t in day.tasks],
            )
            for day in days
        ],
    )
