"""Pydantic schemas for holds, slots and reservation requests."""

from datetime import datetime, timezone, date
from decimal import Decimal
from uuid import UUID
from pydantic import BaseModel, field_validator
from typing import Optional

from slotkeeper.schemas.booking import BookingOut, QuestionResponseIn


def _to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Holds and bookings store naive UTC; accept aware input and normalise it."""
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class ReserveRequest(BaseModel):
    """Request to place a hold. Presence of required fields is checked by the service."""
    appointment_type_id: Optional[UUID] = None
    resource_id: Optional[UUID] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    customer_id: Optional[UUID] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def normalise_times(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _to_naive_utc(value)


class HoldOut(BaseModel):
    id: UUID
    appointment_type_id: UUID
    resource_id: Optional[UUID] = None
    customer_id: UUID
    start_time: datetime
    end_time: datetime
    renewed_at: datetime
    expires_at: datetime
    created_at: datetime

    class Config:
        from_attributes = True


class ReserveResponse(BaseModel):
    hold: HoldOut
    expires_at: datetime
    timeout_minutes: int
    remaining_capacity: int


class CustomerRequest(BaseModel):
    """Body for operations that only need the owning customer."""
    customer_id: Optional[UUID] = None


class ExtendResponse(BaseModel):
    hold: HoldOut
    new_expires_at: datetime


class ReleaseResponse(BaseModel):
    released_hold: HoldOut


class ConfirmRequest(BaseModel):
    customer_id: Optional[UUID] = None
    assigned_user_id: Optional[UUID] = None
    question_responses: list[QuestionResponseIn] = []
    payment_reference: Optional[str] = None


class ConfirmResponse(BaseModel):
    booking: BookingOut


class ActiveHoldResponse(BaseModel):
    has_active: bool
    hold: Optional[HoldOut] = None
    appointment_title: Optional[str] = None
    resource_name: Optional[str] = None
    remaining_seconds: int = 0


class SlotOut(BaseModel):
    """One candidate window annotated with capacity. Never persisted."""
    start_time: datetime
    end_time: datetime
    resource_id: Optional[UUID] = None
    resource_name: Optional[str] = None
    remaining_capacity: int
    total_capacity: int
    available: bool


class AppointmentTypeSummary(BaseModel):
    id: UUID
    title: str
    duration_minutes: int
    booking_fee: Decimal

    class Config:
        from_attributes = True


class AvailableSlotsResponse(BaseModel):
    appointment_type: AppointmentTypeSummary
    date: date
    slots: list[SlotOut]
