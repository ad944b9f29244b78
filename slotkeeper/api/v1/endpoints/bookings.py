"""Booking read and status endpoints used by downstream flows."""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from slotkeeper.core.database import get_db
from slotkeeper.schemas.booking import BookingCancelRequest, BookingOut, PaymentRequest
from slotkeeper.services import bookings

router = APIRouter()


@router.get("/{booking_id}", response_model=BookingOut)
async def get_booking(
    booking_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    return await bookings.get_booking(db, booking_id)


@router.put("/{booking_id}/cancel", response_model=BookingOut)
async def cancel_booking(
    booking_id: UUID,
    payload: BookingCancelRequest,
    db: AsyncSession = Depends(get_db),
):
    """Cancel a booking (sets status to CANCELLED and frees the slot)."""
    return await bookings.cancel_booking(db, booking_id, payload.customer_id)


@router.put("/{booking_id}/complete", response_model=BookingOut)
async def complete_booking(
    booking_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """Mark a booking as completed."""
    return await bookings.complete_booking(db, booking_id)


@router.put("/{booking_id}/payment", response_model=BookingOut)
async def record_payment(
    booking_id: UUID,
    payload: PaymentRequest,
    db: AsyncSession = Depends(get_db),
):
    """Record the payment reference handed back by the payment collaborator."""
    return await bookings.record_payment(db, booking_id, payload.payment_reference)
