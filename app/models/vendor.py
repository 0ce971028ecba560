from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func

from app.models.base import Base


class Vendor(Base):
    """Vendor account; surfaces as ``Account`` in global search."""

    __tablename__ = "vendors"
    id = Column(UUID(as_uuid=True), primary_key=True, server_default=func.gen_random_uuid())
    organization_id = Column(
        UUID(as_uuid=True), ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False
    )
    name = Column(String(255), nullable=False)
    status = Column(String(50))
    type = Column(String(50))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
