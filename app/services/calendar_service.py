import calendar
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple
from zoneinfo import ZoneInfo

from app.core.exceptions import CalendarRangeError
from app.repositories.task_repository import TaskRepository
from app.schemas.context import RequestContext

logger = logging.getLogger(__name__)


@dataclass
class CalendarDay:
    """One cell of a month view, as a calendar date in the org timezone."""

    date: date
    weekday: int  # 0 = Sunday
    in_current_month: bool
    is_today: bool
    tasks: List[Any] = field(default_factory=list)


def _sunday_offset(day: date) -> int:
    """Days since the most recent Sunday (Sunday itself is 0)."""
    return (day.weekday() + 1) % 7


def grid_bounds(year: int, month: int) -> Tuple[date, date]:
    """First and last cell dates of the Sunday-start grid for a month.

    Raises :class:`CalendarRangeError` when the padding weeks would run
    past ``date.min`` or ``date.max``.
    """
    first = date(year, month, 1)
    last = date(year, month, calendar.monthrange(year, month)[1])
    try:
        start = first - timedelta(days=_sunday_offset(first))
        end = last + timedelta(days=6 - _sunday_offset(last))
    except OverflowError:
        raise CalendarRangeError(
            f"{year:04d}-{month:02d} is outside the supported calendar range"
        )
    return start, end


def local_midnight(day: date, tz: ZoneInfo) -> datetime:
    """The instant a calendar day begins in *tz*."""
    return datetime.combine(day, time.min, tzinfo=tz)


def utc_day_window(first: date, last: date, tz: ZoneInfo) -> Tuple[datetime, datetime]:
    """UTC instants bounding local days *first* through *last* in *tz*."""
    try:
        start = local_midnight(first, tz).astimezone(timezone.utc)
        end = local_midnight(last + timedelta(days=1), tz).astimezone(timezone.utc)
    except OverflowError:
        raise CalendarRangeError(
            f"{first} to {last} is outside the supported calendar range"
        )
    return start, end


def task_local_date(due: Optional[datetime], tz: ZoneInfo) -> Optional[date]:
    """Calendar date of a stored instant as seen in the org timezone.

    Naive timestamps are taken to be UTC, which is how the store returns
    ``timestamptz`` values stripped of their offset.
    """
    if due is None:
        return None
    if due.tzinfo is None:
        due = due.replace(tzinfo=timezone.utc)
    return due.astimezone(tz).date()


def build_month_grid(
    year: int, month: int, tz: ZoneInfo, now: Optional[datetime] = None
) -> List[CalendarDay]:
    """Full weeks covering *month*, Sunday first, anchored to *tz*.

    ``is_today`` compares against *now* converted into *tz*, so it does
    not depend on the server's local zone.
    """
    now = now or datetime.now(timezone.utc)
    today = task_local_date(now, tz)
    start, end = grid_bounds(year, month)

    days: List[CalendarDay] = []
    for offset in range((end - start).days + 1):
        current = start + timedelta(days=offset)
        days.append(
            CalendarDay(
                date=current,
                weekday=offset % 7,
                in_current_month=(current.year == year and current.month == month),
                is_today=(current == today),
            )
        )
    return days


def attach_tasks(days: List[CalendarDay], tasks: List[Any], tz: ZoneInfo) -> List[CalendarDay]:
    """Place each task on the cell matching its org-local due date."""
    by_date: Dict[date, CalendarDay] = {day.date: day for day in days}
    for task in tasks:
        local_date = task_local_date(getattr(task, "due_date", None), tz)
        cell = by_date.get(local_date) if local_date else None
        if cell is not None:
            cell.tasks.append(task)
    return days


class CalendarService:
    """Builds timezone-anchored month views and per-day task lists."""

    async def get_month(
        self,
        context: RequestContext,
        year: int,
        month: int,
        tz: ZoneInfo,
        task_repo: TaskRepository,
        *,
        now: Optional[datetime] = None,
    ) -> List[CalendarDay]:
        days = build_month_grid(year, month, tz, now)
        window_start, window_end = utc_day_window(days[0].date, days[-1].date, tz)
        tasks = await task_repo.list_due_between(
            context.organization_id, context.user_id, window_start, window_end
        )
        logger.debug(
            "Calendar %04d-%02d for org %s: %d task(s) in %s",
            year,
            month,
            context.organization_id,
            len(tasks),
            tz.key,
        )
        return attach_tasks(days, tasks, tz)

    async def tasks_on_date(
        self,
        context: RequestContext,
        day: date,
        tz: ZoneInfo,
        task_repo: TaskRepository,
    ) -> List[Any]:
        """Tasks whose due instant falls on *day* in the org timezone."""
        start, end = utc_day_window(day, day, tz)
        tasks = await task_repo.list_due_between(
            context.organization_id, context.user_id, start, end
        )
        return [t for t in tasks if task_local_date(t.due_date, tz) == day]
