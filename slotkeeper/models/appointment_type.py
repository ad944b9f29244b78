"""Appointment type (bookable service) and its weekly availability template."""

from sqlalchemy import Column, String, DateTime, Boolean, Integer, Numeric, Time, ForeignKey, CheckConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
import uuid
from datetime import datetime
from slotkeeper.core.database import Base


class AppointmentType(Base):
    __tablename__ = "appointment_types"
    __table_args__ = (
        CheckConstraint("duration_minutes > 0", name="ck_appointment_types_duration_positive"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    organiser_id = Column(UUID(as_uuid=True), nullable=False, index=True)
    title = Column(String, nullable=False)
    duration_minutes = Column(Integer, nullable=False)
    booking_fee = Column(Numeric(10, 2), nullable=False, default=0)
    is_published = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    schedules = relationship(
        "Schedule",
        back_populates="appointment_type",
        cascade="all, delete-orphan",
        order_by="Schedule.start_time",
    )


class Schedule(Base):
    """One availability range on a weekday.

    day_of_week: 0=Sunday ... 6=Saturday.
    """
    __tablename__ = "schedules"
    __table_args__ = (
        CheckConstraint("day_of_week BETWEEN 0 AND 6", name="ck_schedules_day_of_week"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    appointment_type_id = Column(
        UUID(as_uuid=True),
        ForeignKey("appointment_types.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    day_of_week = Column(Integer, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)

    appointment_type = relationship("AppointmentType", back_populates="schedules")
