from sqlalchemy import (
    Column,
    String,
    Text,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func

from app.models.base import Base


class Notification(Base):
    """In-app notification addressed to one user inside one organization."""

    __tablename__ = "notifications"
    id = Column(UUID(as_uuid=True), primary_key=True, server_default=func.gen_random_uuid())
    organization_id = Column(
        UUID(as_uuid=True), ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False
    )
    user_id = Column(UUID(as_uuid=True), nullable=False)
    type = Column(String(50), nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text)
    link_type = Column(String(50))
    link_id = Column(String(64))
    is_read = Column(Boolean, nullable=False, server_default="false")
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    read_at = Column(DateTime(timezone=True))

    __table_args__ = (
        Index("idx_notifications_user_created", "user_id", "organization_id", "created_at"),
    )


class NotificationPreference(Base):
    """Per-type delivery settings, including the do-not-disturb window.

    ``dnd_start_time`` / ``dnd_end_time`` are ``HH:MM`` strings; the window
    may span midnight (start later than end).
    """

    __tablename__ = "notification_preferences"
    id = Column(UUID(as_uuid=True), primary_key=True, server_default=func.gen_random_uuid())
    organization_id = Column(
        UUID(as_uuid=True), ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False
    )
    user_id = Column(UUID(as_uuid=True), nullable=False)
    type = Column(String(50), nullable=False)
    email_enabled = Column(Boolean, nullable=False, server_default="true")
    push_enabled = Column(Boolean, nullable=False, server_default="true")
    do_not_disturb = Column(Boolean, nullable=False, server_default="false")
    dnd_start_time = Column(String(8))
    dnd_end_time = Column(String(8))

    __table_args__ = (
        UniqueConstraint("user_id", "organization_id", "type", name="uq_notification_pref_type"),
    )
