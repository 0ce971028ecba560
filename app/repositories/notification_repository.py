from datetime import datetime
from typing import Any, List, Optional
from uuid import UUID

from sqlalchemy import select, func, update, delete

from app.models.notification import Notification, NotificationPreference
from app.repositories.base import BaseRepository


class NotificationRepository(BaseRepository):
    """Encapsulates queries against the ``notifications`` table.

    Every query filters on both ``organization_id`` and ``user_id``; a
    user never sees another tenant's or another user's rows.
    """

    @staticmethod
    def _owned_by(organization_id: UUID, user_id: UUID) -> list:
        return [
            Notification.organization_id == organization_id,
            Notification.user_id == user_id,
        ]

    async def list_for_user(
        self, organization_id: UUID, user_id: UUID, unread_only: bool = False
    ) -> List[Notification]:
        """Return the user's notifications, newest first."""
        query = select(Notification).where(*self._owned_by(organization_id, user_id))
        if unread_only:
            query = query.where(Notification.is_read.is_(False))
        query = query.order_by(Notification.created_at.desc())
        result = await self._db.execute(query)
        return list(result.scalars().all())

    async def count_unread(self, organization_id: UUID, user_id: UUID) -> int:
        query = select(func.count(Notification.id)).where(
            *self._owned_by(organization_id, user_id),
            Notification.is_read.is_(False),
        )
        return (await self._db.execute(query)).scalar() or 0

    async def create(self, **kwargs: Any) -> Notification:
        """Insert a new notification."""
        notification = Notification(**kwargs)
        self._db.add(notification)
        return notification

    async def mark_read(
        self,
        organization_id: UUID,
        user_id: UUID,
        read_at: datetime,
        notification_id: Optional[UUID] = None,
    ) -> int:
        """Mark one (or, without *notification_id*, every) unread row as read.

        Returns the number of rows changed.
        """
        stmt = update(Notification).where(
            *self._owned_by(organization_id, user_id),
            Notification.is_read.is_(False),
        )
        if notification_id is not None:
            stmt = stmt.where(Notification.id == notification_id)
        result = await self._db.execute(
            stmt.values(is_read=True, read_at=read_at).execution_options(
                synchronize_session=False
            )
        )
        return result.rowcount or 0

    async def exists(
        self, organization_id: UUID, user_id: UUID, notification_id: UUID
    ) -> bool:
        query = select(Notification.id).where(
            *self._owned_by(organization_id, user_id),
            Notification.id == notification_id,
        )
        return (await self._db.execute(query)).scalar_one_or_none() is not None

    async def delete_all(self, organization_id: UUID, user_id: UUID) -> int:
        """Delete every notification of the user; returns rows removed."""
        result = await self._db.execute(
            delete(Notification)
            .where(*self._owned_by(organization_id, user_id))
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0


class NotificationPreferenceRepository(BaseRepository):
    """Encapsulates queries against ``notification_preferences``."""

    async def list_for_user(
        self, organization_id: UUID, user_id: UUID
    ) -> List[NotificationPreference]:
        result = await self._db.execute(
            select(NotificationPreference)
            .where(
                NotificationPreference.organization_id == organization_id,
                NotificationPreference.user_id == user_id,
            )
            .order_by(NotificationPreference.type.asc())
        )
        return list(result.scalars().all())

    async def get_by_type(
        self, organization_id: UUID, user_id: UUID, pref_type: str
    ) -> Optional[NotificationPreference]:
        result = await self._db.execute(
            select(NotificationPreference).where(
                NotificationPreference.organization_id == organization_id,
                NotificationPreference.user_id == user_id,
                NotificationPreference.type == pref_type,
            )
        )
        return result.scalar_one_or_none()

    async def get_dnd_preference(
        self, organization_id: UUID, user_id: UUID
    ) -> Optional[NotificationPreference]:
        """Return the first preference with do-not-disturb switched on."""
        result = await self._db.execute(
            select(NotificationPreference)
            .where(
                NotificationPreference.organization_id == organization_id,
                NotificationPreference.user_id == user_id,
                NotificationPreference.do_not_disturb.is_(True),
            )
            .order_by(NotificationPreference.type.asc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def create(self, **kwargs: Any) -> NotificationPreference:
        preference = NotificationPreference(**kwargs)
        self._db.add(preference)
        return preference
