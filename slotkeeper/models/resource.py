"""Bookable capacity unit (room, provider, equipment).

Owned by organiser tooling; the reservation core only reads it.
"""

from sqlalchemy import Column, String, DateTime, Boolean, Integer, CheckConstraint
from sqlalchemy.dialects.postgresql import UUID
import uuid
from datetime import datetime
from slotkeeper.core.database import Base


class Resource(Base):
    __tablename__ = "resources"
    __table_args__ = (
        CheckConstraint("capacity > 0", name="ck_resources_capacity_positive"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    organiser_id = Column(UUID(as_uuid=True), nullable=False, index=True)
    name = Column(String, nullable=False)
    capacity = Column(Integer, nullable=False, default=1)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
