"""Temporary claim ("soft lock") on one unit of slot capacity."""

from sqlalchemy import Column, DateTime, ForeignKey, Index
from sqlalchemy.dialects.postgresql import UUID
import uuid
from datetime import datetime
from slotkeeper.core.database import Base


class Hold(Base):
    __tablename__ = "slot_reservations"
    __table_args__ = (
        Index("ix_slot_reservations_resource_window", "resource_id", "start_time", "end_time"),
        Index("ix_slot_reservations_type_window", "appointment_type_id", "start_time", "end_time"),
        Index("ix_slot_reservations_customer_type", "customer_id", "appointment_type_id"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    appointment_type_id = Column(
        UUID(as_uuid=True),
        ForeignKey("appointment_types.id", ondelete="CASCADE"),
        nullable=False,
    )
    # NULL means the appointment type has no resource; capacity is then 1.
    resource_id = Column(UUID(as_uuid=True), ForeignKey("resources.id", ondelete="CASCADE"), nullable=True)
    customer_id = Column(UUID(as_uuid=True), nullable=False)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)

    # expires_at == renewed_at + TTL, always.
    renewed_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    expires_at = Column(DateTime, nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
