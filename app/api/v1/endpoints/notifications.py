import asyncio
import contextlib
import logging
from uuid import UUID
from zoneinfo import ZoneInfo

from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect

from app.core.exceptions import OrganizationContextError
from app.dependencies import build_context
from app.schemas.context import RequestContext
from app.schemas.notification import (
    ClearNotificationsResponse,
    MarkReadResponse,
    NotificationCreate,
    NotificationDelivery,
    NotificationListResponse,
    NotificationPreferenceOut,
    NotificationPreferenceUpdate,
)
from app.services.notification_service import NotificationService, notification_hub
from app.repositories.notification_repository import (
    NotificationPreferenceRepository,
    NotificationRepository,
)
from app.api.deps import (
    get_notification_repo,
    get_notification_service,
    get_org_timezone,
    get_preference_repo,
    get_request_context,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("", response_model=NotificationListResponse)
async def list_notifications(
    unread_only: bool = Query(False),
    context: RequestContext = Depends(get_request_context),
    service: NotificationService = Depends(get_notification_service),
    notification_repo: NotificationRepository = Depends(get_notification_repo),
) -> NotificationListResponse:
    data = await service.list_notifications(context, notification_repo, unread_only=unread_only)
    return NotificationListResponse(**data)


@router.post("", response_model=NotificationDelivery, status_code=201)
async def create_notification(
    payload: NotificationCreate,
    context: RequestContext = Depends(get_request_context),
    tz: ZoneInfo = Depends(get_org_timezone),
    service: NotificationService = Depends(get_notification_service),
    notification_repo: NotificationRepository = Depends(get_notification_repo),
    preference_repo: NotificationPreferenceRepository = Depends(get_preference_repo),
) -> NotificationDelivery:
    """Store a notification and push it to the recipient's live stream.

    ``play_sound`` in the response is ``False`` during do-not-disturb.
    """
    return await service.create_notification(
        context, payload, notification_repo, preference_repo, tz
    )


@router.post("/read-all", response_model=MarkReadResponse)
async def mark_all_read(
    context: RequestContext = Depends(get_request_context),
    service: NotificationService = Depends(get_notification_service),
    notification_repo: NotificationRepository = Depends(get_notification_repo),
) -> MarkReadResponse:
    return MarkReadResponse(**await service.mark_all_read(context, notification_repo))


@router.post("/{notification_id}/read", response_model=MarkReadResponse)
async def mark_read(
    notification_id: UUID,
    context: RequestContext = Depends(get_request_context),
    service: NotificationService = Depends(get_notification_service),
    notification_repo: NotificationRepository = Depends(get_notification_repo),
) -> MarkReadResponse:
    return MarkReadResponse(
        **await service.mark_read(context, notification_id, notification_repo)
    )


@router.delete("", response_model=ClearNotificationsResponse)
async def clear_notifications(
    context: RequestContext = Depends(get_request_context),
    service: NotificationService = Depends(get_notification_service),
    notification_repo: NotificationRepository = Depends(get_notification_repo),
) -> ClearNotificationsResponse:
    return ClearNotificationsResponse(**await service.clear_all(context, notification_repo))


@router.get("/preferences", response_model=list[NotificationPreferenceOut])
async def get_preferences(
    context: RequestContext = Depends(get_request_context),
    service: NotificationService = Depends(get_notification_service),
    preference_repo: NotificationPreferenceRepository = Depends(get_preference_repo),
) -> list[NotificationPreferenceOut]:
    prefs = await service.get_preferences(context, preference_repo)
    return [NotificationPreferenceOut.model_validate(p) for p in prefs]


@router.patch("/preferences/{pref_type}", response_model=NotificationPreferenceOut)
async def update_preference(
    pref_type: str,
    changes: NotificationPreferenceUpdate,
    context: RequestContext = Depends(get_request_context),
    service: NotificationService = Depends(get_notification_service),
    preference_repo: NotificationPreferenceRepository = Depends(get_preference_repo),
) -> NotificationPreferenceOut:
    pref = await service.update_preference(context, pref_type, changes, preference_repo)
    return NotificationPreferenceOut.model_validate(pref)


async def _forward_deliveries(websocket: WebSocket, scope: str) -> None:
    async for delivery in notification_hub.subscribe(scope):
        await websocket.send_json(delivery.model_dump(mode="json"))


@router.websocket("/stream")
async def notification_stream(
    websocket: WebSocket,
    organization_id: str = Query(...),
    user_id: str = Query(...),
) -> None:
    """Push each new notification for this user as it is created.

    Browsers cannot set headers on a WebSocket handshake, so the tenant
    context travels as query parameters here.  The socket is read while
    pushes are forwarded, so a client going away detaches its subscription
    immediately rather than at the next push.
    """
    try:
        context = build_context(organization_id, user_id)
    except OrganizationContextError as exc:
        await websocket.close(code=1008, reason=exc.detail)
        return

    await websocket.accept()
    sender = asyncio.create_task(_forward_deliveries(websocket, context.scope_key))
    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
    finally:
        sender.cancel()
        with contextlib.suppress(asyncio.CancelledError, WebSocketDisconnect):
            await sender
    logger.info("Notification stream closed by client (%s)", context.scope_key)
