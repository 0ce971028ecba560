from datetime import date, datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4
from zoneinfo import ZoneInfo

import pytest

from app.core.exceptions import CalendarRangeError
from app.services.calendar_service import (
    CalendarService,
    build_month_grid,
    grid_bounds,
    task_local_date,
)

LA = ZoneInfo("America/Los_Angeles")
UTC = ZoneInfo("UTC")


def make_task(due):
    return SimpleNamespace(
        id=uuid4(),
        title="Task",
        description=None,
        is_done=False,
        is_personal=False,
        due_date=due,
        assigned_to=None,
        created_by=None,
    )


class TestMonthGrid:
    @pytest.mark.parametrize("year,month", [(2024, 2), (2024, 9), (2025, 3), (2026, 2)])
    def test_grid_is_whole_weeks_covering_the_month(self, year, month):
        days = build_month_grid(year, month, UTC)
        assert len(days) % 7 == 0
        dates = [d.date for d in days]
        assert date(year, month, 1) in dates
        in_month = [d for d in days if d.in_current_month]
        assert in_month[0].date == date(year, month, 1)
        assert in_month[-1].date.month == month

    def test_weekday_matches_column_with_sunday_first(self):
        days = build_month_grid(2024, 2, UTC)
        for index, day in enumerate(days):
            assert day.weekday == index % 7
            assert (day.date.weekday() + 1) % 7 == day.weekday

    def test_february_2024_bounds(self):
        assert grid_bounds(2024, 2) == (date(2024, 1, 28), date(2024, 3, 2))

    def test_month_starting_on_sunday_has_no_leading_days(self):
        start, _ = grid_bounds(2024, 9)
        assert start == date(2024, 9, 1)

    def test_is_today_uses_org_timezone(self):
        now = datetime(2024, 3, 1, 2, 0, tzinfo=timezone.utc)
        la_today = [d.date for d in build_month_grid(2024, 2, LA, now) if d.is_today]
        utc_today = [d.date for d in build_month_grid(2024, 2, UTC, now) if d.is_today]
        assert la_today == [date(2024, 2, 29)]
        assert utc_today == [date(2024, 3, 1)]


class TestTaskLocalDate:
    def test_instant_maps_to_previous_day_west_of_utc(self):
        due = datetime(2024, 3, 1, 2, 0, tzinfo=timezone.utc)
        assert task_local_date(due, LA) == date(2024, 2, 29)
        assert task_local_date(due, UTC) == date(2024, 3, 1)

    def test_missing_due_date(self):
        assert task_local_date(None, LA) is None


class TestCalendarService:
    @pytest.mark.asyncio
    async def test_get_month_places_tasks_by_local_date(self, ctx):
        late_evening = make_task(datetime(2024, 3, 1, 2, 0, tzinfo=timezone.utc))
        task_repo = MagicMock()
        task_repo.list_due_between = AsyncMock(return_value=[late_evening])

        days = await CalendarService().get_month(
            ctx, 2024, 2, LA, task_repo, now=datetime(2024, 2, 10, tzinfo=timezone.utc)
        )

        by_date = {d.date: d for d in days}
        assert by_date[date(2024, 2, 29)].tasks == [late_evening]
        assert by_date[date(2024, 3, 1)].tasks == []

    @pytest.mark.asyncio
    async def test_get_month_queries_local_midnight_window(self, ctx):
        task_repo = MagicMock()
        task_repo.list_due_between = AsyncMock(return_value=[])

        await CalendarService().get_month(ctx, 2024, 2, LA, task_repo)

        task_repo.list_due_between.assert_awaited_once_with(
            ctx.organization_id,
            ctx.user_id,
            datetime(2024, 1, 28, 8, 0, tzinfo=timezone.utc),
            datetime(2024, 3, 3, 8, 0, tzinfo=timezone.utc),
        )

    @pytest.mark.asyncio
    async def test_tasks_on_date(self, ctx):
        on_day = make_task(datetime(2024, 3, 1, 2, 0, tzinfo=timezone.utc))
        task_repo = MagicMock()
        task_repo.list_due_between = AsyncMock(return_value=[on_day])

        tasks = await CalendarService().tasks_on_date(ctx, date(2024, 2, 29), LA, task_repo)

        assert tasks == [on_day]
        _, _, start, end = task_repo.list_due_between.await_args.args
        assert start == datetime(2024, 2, 29, 8, 0, tzinfo=timezone.utc)
        assert end == datetime(2024, 3, 1, 8, 0, tzinfo=timezone.utc)


class TestCalendarRange:
    def test_grid_past_last_supported_date_is_rejected(self):
        with pytest.raises(CalendarRangeError):
            build_month_grid(9999, 12, UTC)

    def test_november_9999_still_renders(self):
        days = build_month_grid(9999, 11, UTC)
        assert days[-1].date.year == 9999

    @pytest.mark.asyncio
    async def test_last_representable_day_is_rejected(self, ctx):
        task_repo = MagicMock()
        task_repo.list_due_between = AsyncMock(return_value=[])

        with pytest.raises(CalendarRangeError):
            await CalendarService().tasks_on_date(ctx, date.max, UTC, task_repo)
        task_repo.list_due_between.assert_not_awaited()
