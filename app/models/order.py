from sqlalchemy import Column, String, Text, Numeric, DateTime, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func

from app.models.base import Base


class Order(Base):
    __tablename__ = "orders"
    id = Column(UUID(as_uuid=True), primary_key=True, server_default=func.gen_random_uuid())
    organization_id = Column(
        UUID(as_uuid=True), ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False
    )
    customer_id = Column(UUID(as_uuid=True), ForeignKey("customers.id", ondelete="SET NULL"))
    order_number = Column(String(50), nullable=False)
    po_number = Column(String(50))
    status = Column(String(50), nullable=False, server_default="pending")
    payment_status = Column(String(50))
    total_amount = Column(Numeric(12, 2))
    notes = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
