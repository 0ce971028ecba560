from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func

from app.models.base import Base


class Customer(Base):
    """Customer contact; surfaces as ``Contact`` in global search."""

    __tablename__ = "customers"
    id = Column(UUID(as_uuid=True), primary_key=True, server_default=func.gen_random_uuid())
    organization_id = Column(
        UUID(as_uuid=True), ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False
    )
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255))
    company = Column(String(255))
    phone = Column(String(32))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
