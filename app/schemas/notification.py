from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.common import SuccessResponse

_HHMM_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d(:[0-5]\d)?$"


class NotificationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    type: str
    title: str
    description: Optional[str] = None
    link_type: Optional[str] = None
    link_id: Optional[str] = None
    link_url: Optional[str] = None
    is_read: bool = False
    created_at: Optional[datetime] = None
    read_at: Optional[datetime] = None


class NotificationListResponse(BaseModel):
    notifications: List[NotificationOut]
    unread_count: int


class NotificationCreate(BaseModel):
    """Payload for raising a notification.

    ``user_id`` names the recipient within the caller's organization; when
    omitted the notification goes to the calling user.
    """

    user_id: Optional[UUID] = None
    type: str = Field(..., min_length=1, max_length=50)
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    link_type: Optional[str] = None
    link_id: Optional[str] = None


class NotificationDelivery(BaseModel):
    """What the live stream pushes for a newly inserted notification.

    ``play_sound`` is ``False`` inside the do-not-disturb window; the
    notification itself is always delivered and counted.
    """

    notification: NotificationOut
    play_sound: bool
    unread_count: int


class NotificationPreferenceOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    type: str
    email_enabled: bool = True
    push_enabled: bool = True
    do_not_disturb: bool = False
    dnd_start_time: Optional[str] = None
    dnd_end_time: Optional[str] = None


class NotificationPreferenceUpdate(BaseModel):
    email_enabled: Optional[bool] = None
    push_enabled: Optional[bool] = None
    do_not_disturb: Optional[bool] = None
    dnd_start_time: Optional[str] = Field(None, pattern=_HHMM_PATTERN)
    dnd_end_time: Optional[str] = Field(None, pattern=_HHMM_PATTERN)


class MarkReadResponse(SuccessResponse):
    updated: int
    unread_count: int


class ClearNotificationsResponse(SuccessResponse):
    deleted: int
