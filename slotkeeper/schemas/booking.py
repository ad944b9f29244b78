"""Pydantic schemas for bookings."""

from datetime import datetime
from uuid import UUID
from pydantic import BaseModel
from typing import Optional
from slotkeeper.models.booking import BookingStatus, PaymentStatus


class QuestionResponseIn(BaseModel):
    """Intake answer supplied at confirm time."""
    question_id: UUID
    answer_value: Optional[str] = None


class QuestionResponseOut(BaseModel):
    id: UUID
    question_id: UUID
    answer_value: Optional[str] = None

    class Config:
        from_attributes = True


class BookingOut(BaseModel):
    id: UUID
    appointment_type_id: UUID
    resource_id: Optional[UUID] = None
    customer_id: UUID
    assigned_user_id: Optional[UUID] = None
    start_time: datetime
    end_time: datetime
    status: BookingStatus
    payment_status: PaymentStatus
    payment_reference: Optional[str] = None
    question_responses: list[QuestionResponseOut] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class BookingCancelRequest(BaseModel):
    customer_id: Optional[UUID] = None


class PaymentRequest(BaseModel):
    payment_reference: str
