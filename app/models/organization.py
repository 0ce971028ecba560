from sqlalchemy import Column, String, DateTime
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func

from app.models.base import Base


class Organization(Base):
    """Tenant that owns every other row.

    ``timezone`` is an IANA zone name configured in organization settings.
    It may be empty, in which case calendar logic treats the tenant as UTC.
    """

    __tablename__ = "organizations"
    id = Column(UUID(as_uuid=True), primary_key=True, server_default=func.gen_random_uuid())
    name = Column(String(200), nullable=False)
    timezone = Column(String(64))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
