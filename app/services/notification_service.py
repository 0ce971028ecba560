import asyncio
import logging
from collections import defaultdict
from datetime import datetime, time, timezone
from typing import Any, AsyncIterator, Dict, List, Optional, Set
from zoneinfo import ZoneInfo

from app.core.constants import NOTIFICATION_LINK_PATHS, NOTIFICATION_PREFERENCE_FIELDS
from app.core.exceptions import InvalidPreferenceError, NotificationNotFoundError
from app.repositories.notification_repository import (
    NotificationPreferenceRepository,
    NotificationRepository,
)
from app.schemas.common import NotificationLinkType
from app.schemas.context import RequestContext
from app.schemas.notification import (
    NotificationCreate,
    NotificationDelivery,
    NotificationOut,
    NotificationPreferenceUpdate,
)

logger = logging.getLogger(__name__)

# Per-subscriber queue bound; a client that stops reading loses old pushes
_SUBSCRIBER_QUEUE_SIZE = 100


def parse_hhmm(value: str) -> time:
    """Parse ``HH:MM`` or ``HH:MM:SS`` into a :class:`time`."""
    try:
        parts = [int(p) for p in value.split(":")]
        if len(parts) not in (2, 3):
            raise ValueError(value)
        return time(*parts)
    except (AttributeError, TypeError, ValueError):
        raise InvalidPreferenceError(f"Invalid time of day {value!r}; expected HH:MM")


def is_within_dnd(start: time, end: time, now: time) -> bool:
    """Return ``True`` if *now* falls inside the do-not-disturb window.

    A window with ``start < end`` is a same-day range, end exclusive.
    Otherwise it spans midnight: suppressed from *start* through the end
    of the day and from midnight until *end*.
    """
    if start < end:
        return start <= now < end
    return now >= start or now < end


def notification_link(link_type: Optional[str], link_id: Optional[str]) -> Optional[str]:
    """Admin UI path for a notification's target, or ``None``."""
    if not link_type or not link_id:
        return None
    try:
        template = NOTIFICATION_LINK_PATHS[NotificationLinkType(link_type)]
    except ValueError:
        return None
    return template.format(id=link_id)


def to_notification_out(notification: Any) -> NotificationOut:
    return NotificationOut(
        id=notification.id,
        type=notification.type,
        title=notification.title,
        description=notification.description,
        link_type=notification.link_type,
        link_id=notification.link_id,
        link_url=notification_link(notification.link_type, notification.link_id),
        is_read=bool(notification.is_read),
        created_at=notification.created_at,
        read_at=notification.read_at,
    )


class NotificationHub:
    """In-process fan-out of new notifications to live subscribers.

    Subscribers are keyed by ``RequestContext.scope_key`` so a user only
    receives rows addressed to them within the current organization.
    """

    def __init__(self) -> None:
        self._subscribers: Dict[str, Set[asyncio.Queue]] = defaultdict(set)

    def subscriber_count(self, scope: str) -> int:
        return len(self._subscribers.get(scope, ()))

    def publish(self, scope: str, delivery: NotificationDelivery) -> int:
        """Queue *delivery* for every subscriber of *scope*; returns receivers."""
        delivered = 0
        for queue in list(self._subscribers.get(scope, ())):
            try:
                queue.put_nowait(delivery)
                delivered += 1
            except asyncio.QueueFull:
                logger.warning("Dropping notification push for slow subscriber %s", scope)
        return delivered

    async def subscribe(self, scope: str) -> AsyncIterator[NotificationDelivery]:
        queue: asyncio.Queue = asyncio.Queue(maxsize=_SUBSCRIBER_QUEUE_SIZE)
        self._subscribers[scope].add(queue)
        logger.info("Notification subscriber attached (%s)", scope)
        try:
            while True:
                yield await queue.get()
        finally:
            self._subscribers[scope].discard(queue)
            if not self._subscribers[scope]:
                del self._subscribers[scope]
            logger.info("Notification subscriber detached (%s)", scope)


notification_hub = NotificationHub()


class NotificationService:
    """Notification list, delivery and preference workflows.

    All database operations are delegated to injected repositories; every
    mutation commits through ``commit_or_raise``.
    """

    def __init__(self, hub: Optional[NotificationHub] = None) -> None:
        self._hub = hub or notification_hub

    async def list_notifications(
        self,
        context: RequestContext,
        notification_repo: NotificationRepository,
        unread_only: bool = False,
    ) -> Dict[str, Any]:
        rows = await notification_repo.list_for_user(
            context.organization_id, context.user_id, unread_only=unread_only
        )
        unread = await notification_repo.count_unread(context.organization_id, context.user_id)
        return {
            "notifications": [to_notification_out(n) for n in rows],
            "unread_count": unread,
        }

    async def should_play_sound(
        self,
        context: RequestContext,
        preference_repo: NotificationPreferenceRepository,
        tz: ZoneInfo,
        now: Optional[datetime] = None,
    ) -> bool:
        """``False`` while the user's do-not-disturb window is active.

        "Now" is read in the organization timezone.  A preference with
        DND on but missing either bound never suppresses.
        """
        pref = await preference_repo.get_dnd_preference(context.organization_id, context.user_id)
        if pref is None or not pref.dnd_start_time or not pref.dnd_end_time:
            return True
        try:
            start = parse_hhmm(pref.dnd_start_time)
            end = parse_hhmm(pref.dnd_end_time)
        except InvalidPreferenceError:
            logger.warning(
                "Ignoring malformed DND window %r-%r for %s",
                pref.dnd_start_time,
                pref.dnd_end_time,
                context.scope_key,
            )
            return True
        local_now = (now or datetime.now(timezone.utc)).astimezone(tz).time()
        return not is_within_dnd(start, end, local_now)

    async def create_notification(
        self,
        context: RequestContext,
        payload: NotificationCreate,
        notification_repo: NotificationRepository,
        preference_repo: NotificationPreferenceRepository,
        tz: ZoneInfo,
        *,
        now: Optional[datetime] = None,
    ) -> NotificationDelivery:
        """Insert a notification and push it to the recipient's live stream.

        The recipient is ``payload.user_id`` (the caller when omitted), in
        the caller's organization.  Their do-not-disturb window only gates
        the sound; the row is always stored and counted as unread.
        """
        recipient = RequestContext(
            organization_id=context.organization_id,
            user_id=payload.user_id or context.user_id,
        )
        notification = await notification_repo.create(
            organization_id=recipient.organization_id,
            user_id=recipient.user_id,
            type=payload.type,
            title=payload.title,
            description=payload.description,
            link_type=payload.link_type,
            link_id=payload.link_id,
        )
        await notification_repo.commit_or_raise("create notification")
        await notification_repo.refresh(notification)

        play_sound = await self.should_play_sound(recipient, preference_repo, tz, now)
        unread = await notification_repo.count_unread(
            recipient.organization_id, recipient.user_id
        )
        delivery = NotificationDelivery(
            notification=to_notification_out(notification),
            play_sound=play_sound,
            unread_count=unread,
        )
        receivers = self._hub.publish(recipient.scope_key, delivery)
        logger.info(
            "Notification %s created for %s by %s (play_sound=%s, live receivers=%d)",
            notification.id,
            recipient.scope_key,
            context.user_id,
            play_sound,
            receivers,
        )
        return delivery

    async def mark_read(
        self,
        context: RequestContext,
        notification_id: Any,
        notification_repo: NotificationRepository,
    ) -> Dict[str, int]:
        if not await notification_repo.exists(
            context.organization_id, context.user_id, notification_id
        ):
            raise NotificationNotFoundError(f"Notification {notification_id} not found")
        updated = await notification_repo.mark_read(
            context.organization_id,
            context.user_id,
            datetime.now(timezone.utc),
            notification_id=notification_id,
        )
        await notification_repo.commit_or_raise("mark notification as read")
        unread = await notification_repo.count_unread(context.organization_id, context.user_id)
        return {"updated": updated, "unread_count": unread}

    async def mark_all_read(
        self, context: RequestContext, notification_repo: NotificationRepository
    ) -> Dict[str, int]:
        updated = await notification_repo.mark_read(
            context.organization_id, context.user_id, datetime.now(timezone.utc)
        )
        await notification_repo.commit_or_raise("mark all notifications as read")
        return {"updated": updated, "unread_count": 0}

    async def clear_all(
        self, context: RequestContext, notification_repo: NotificationRepository
    ) -> Dict[str, int]:
        deleted = await notification_repo.delete_all(context.organization_id, context.user_id)
        await notification_repo.commit_or_raise("clear notifications")
        return {"deleted": deleted}

    async def get_preferences(
        self, context: RequestContext, preference_repo: NotificationPreferenceRepository
    ) -> List[Any]:
        return await preference_repo.list_for_user(context.organization_id, context.user_id)

    async def update_preference(
        self,
        context: RequestContext,
        pref_type: str,
        changes: NotificationPreferenceUpdate,
        preference_repo: NotificationPreferenceRepository,
    ) -> Any:
        """Apply *changes* to one preference type, creating it if absent."""
        updates = {
            k: v
            for k, v in changes.model_dump(exclude_unset=True).items()
            if k in NOTIFICATION_PREFERENCE_FIELDS
        }
        for key in ("dnd_start_time", "dnd_end_time"):
            if updates.get(key):
                parse_hhmm(updates[key])

        pref = await preference_repo.get_by_type(context.organization_id, context.user_id, pref_type)
        if pref is None:
            pref = await preference_repo.create(
                organization_id=context.organization_id,
                user_id=context.user_id,
                type=pref_type,
                **updates,
            )
        else:
            for key, value in updates.items():
                setattr(pref, key, value)

        if pref.do_not_disturb and bool(pref.dnd_start_time) != bool(pref.dnd_end_time):
            await preference_repo.rollback()
            raise InvalidPreferenceError(
                "Do-not-disturb needs both dnd_start_time and dnd_end_time"
            )

        await preference_repo.commit_or_raise(f"update {pref_type} notification preference")
        return pref
