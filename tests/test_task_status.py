from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from sqlalchemy.exc import OperationalError

from app.core.exceptions import PersistenceError, TaskNotFoundError
from app.repositories.task_repository import TaskRepository
from app.services.task_status_service import TaskStatusService


class TestTaskStatusService:
    @pytest.mark.asyncio
    async def test_marks_task_done_and_commits(self, ctx):
        task = SimpleNamespace(id=uuid4(), is_done=False)
        task_repo = MagicMock()
        task_repo.get_by_id = AsyncMock(return_value=task)
        task_repo.update_done = AsyncMock()
        task_repo.commit_or_raise = AsyncMock()

        result = await TaskStatusService().set_done(ctx, task.id, True, task_repo)

        assert result is task
        task_repo.get_by_id.assert_awaited_once_with(ctx.organization_id, task.id)
        task_repo.update_done.assert_awaited_once_with(task, True)
        task_repo.commit_or_raise.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_reopen_sets_flag_false(self, ctx):
        task = SimpleNamespace(id=uuid4(), is_done=True)
        db = AsyncMock()
        db.execute = AsyncMock(
            return_value=MagicMock(scalar_one_or_none=MagicMock(return_value=task))
        )

        await TaskStatusService().set_done(ctx, task.id, False, TaskRepository(db))

        assert task.is_done is False
        db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unknown_task(self, ctx):
        task_repo = MagicMock()
        task_repo.get_by_id = AsyncMock(return_value=None)
        task_repo.update_done = AsyncMock()

        with pytest.raises(TaskNotFoundError):
            await TaskStatusService().set_done(ctx, uuid4(), True, task_repo)
        task_repo.update_done.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_failed_write_rolls_back_and_raises(self, ctx):
        task = SimpleNamespace(id=uuid4(), is_done=False)
        db = AsyncMock()
        db.execute = AsyncMock(
            return_value=MagicMock(scalar_one_or_none=MagicMock(return_value=task))
        )
        db.commit = AsyncMock(side_effect=OperationalError("UPDATE tasks", {}, Exception("down")))

        with pytest.raises(PersistenceError):
            await TaskStatusService().set_done(ctx, task.id, True, TaskRepository(db))
        db.rollback.assert_awaited_once()
