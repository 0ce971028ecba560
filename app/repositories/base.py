import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import PersistenceError

logger = logging.getLogger(__name__)


class BaseRepository:
    """Thin base class that holds the database session.

    Every concrete repository receives an ``AsyncSession`` at
    construction time so that multiple repositories can share the same
    unit-of-work within a single request.
    """

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def flush(self) -> None:
        """Flush pending changes without committing."""
        await self._db.flush()

    async def commit(self) -> None:
        """Commit the current transaction."""
        await self._db.commit()

    async def rollback(self) -> None:
        """Roll back the current transaction."""
        await self._db.rollback()

    async def refresh(self, instance: object) -> None:
        """Reload server-generated columns onto *instance*."""
        await self._db.refresh(instance)

    async def commit_or_raise(self, action: str) -> None:
        """Commit, or roll back and raise :class:`PersistenceError`.

        This is the single write path for every mutation, so all of them
        fail the same way regardless of which endpoint issued them.
        """
        try:
            await self._db.commit()
        except SQLAlchemyError as exc:
            await self._db.rollback()
            logger.error("Failed to %s", action, exc_info=True)
            raise PersistenceError(f"Could not {action}") from exc
