"""Booking status transitions after confirm.

Status only moves forward (PENDING -> CONFIRMED -> COMPLETED); CANCELLED is
reachable from PENDING or CONFIRMED and is terminal.
"""

import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from slotkeeper.core.exceptions import ConflictError, NotFoundError
from slotkeeper.models.booking import Booking, BookingStatus, PaymentStatus, ACTIVE_BOOKING_STATUSES

logger = logging.getLogger(__name__)


async def get_booking(db: AsyncSession, booking_id: UUID, for_update: bool = False) -> Booking:
    query = select(Booking).where(Booking.id == booking_id)
    if for_update:
        query = query.with_for_update()
    result = await db.execute(query)
    booking = result.scalar_one_or_none()
    if booking is None:
        raise NotFoundError("Booking not found")
    return booking


async def _transition(db: AsyncSession, booking: Booking, status: BookingStatus) -> Booking:
    previous = booking.status
    booking.status = status
    booking.updated_at = datetime.utcnow()
    await db.commit()

    logger.info("Booking %s: %s -> %s", booking.id, previous.value, status.value)
    return booking


async def cancel_booking(db: AsyncSession, booking_id: UUID, customer_id: Optional[UUID] = None) -> Booking:
    """Cancel a PENDING or CONFIRMED booking, releasing its capacity."""
    try:
        booking = await get_booking(db, booking_id, for_update=True)
        if customer_id is not None and booking.customer_id != customer_id:
            raise NotFoundError("Booking not found")
        if booking.status not in ACTIVE_BOOKING_STATUSES:
            raise ConflictError(f"Booking is {booking.status.value} and cannot be cancelled")
    except Exception:
        await db.rollback()
        raise

    return await _transition(db, booking, BookingStatus.CANCELLED)


async def complete_booking(db: AsyncSession, booking_id: UUID) -> Booking:
    try:
        booking = await get_booking(db, booking_id, for_update=True)
        if booking.status not in ACTIVE_BOOKING_STATUSES:
            raise ConflictError(f"Booking is {booking.status.value} and cannot be completed")
    except Exception:
        await db.rollback()
        raise

    return await _transition(db, booking, BookingStatus.COMPLETED)


async def record_payment(db: AsyncSession, booking_id: UUID, payment_reference: str) -> Booking:
    """Attach a payment reference; a PENDING booking becomes CONFIRMED/PAID."""
    try:
        booking = await get_booking(db, booking_id, for_update=True)
        if booking.payment_status == PaymentStatus.PAID:
            raise ConflictError("Booking is already paid")
        if booking.status not in ACTIVE_BOOKING_STATUSES:
            raise ConflictError(f"Booking is {booking.status.value} and cannot take a payment")
    except Exception:
        await db.rollback()
        raise

    booking.payment_reference = payment_reference
    booking.payment_status = PaymentStatus.PAID
    logger.info("Payment %s recorded for booking %s", payment_reference, booking.id)
    return await _transition(db, booking, BookingStatus.CONFIRMED)
