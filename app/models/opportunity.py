from sqlalchemy import Column, String, Numeric, DateTime, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func

from app.models.base import Base


class Opportunity(Base):
    """Sales opportunity.  Progress is tracked by ``stage`` rather than ``status``."""

    __tablename__ = "opportunities"
    id = Column(UUID(as_uuid=True), primary_key=True, server_default=func.gen_random_uuid())
    organization_id = Column(
        UUID(as_uuid=True), ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False
    )
    name = Column(String(255), nullable=False)
    stage = Column(String(50))
    type = Column(String(50))
    amount = Column(Numeric(12, 2))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
