from sqlalchemy import Column, String, Text, Boolean, DateTime, ForeignKey, Index
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func

from app.models.base import Base


class Task(Base):
    """A to-do item shown on the task calendars.

    ``due_date`` is stored as an absolute instant.  Calendar placement is
    always derived by converting it into the owning organization's
    timezone, never from the raw UTC components.
    """

    __tablename__ = "tasks"
    id = Column(UUID(as_uuid=True), primary_key=True, server_default=func.gen_random_uuid())
    organization_id = Column(
        UUID(as_uuid=True), ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False
    )
    title = Column(String(255), nullable=False)
    description = Column(Text)
    is_done = Column(Boolean, nullable=False, server_default="false")
    is_personal = Column(Boolean, nullable=False, server_default="false")
    due_date = Column(DateTime(timezone=True))
    assigned_to = Column(UUID(as_uuid=True))
    created_by = Column(UUID(as_uuid=True))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index("idx_tasks_org_due_date", "organization_id", "due_date"),
    )
