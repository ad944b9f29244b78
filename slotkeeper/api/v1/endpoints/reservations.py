"""Slot hold endpoints.

- POST   /api/v1/reservations/reserve → Place a hold (5 minute TTL)
- GET    /api/v1/reservations/available/{appointment_type_id}/{date} → Slots with capacity
- GET    /api/v1/reservations/active/{customer_id} → Customer's live hold
- DELETE /api/v1/reservations/{hold_id}?customer_id= → Release a hold
- POST   /api/v1/reservations/{hold_id}/confirm → Convert hold to booking
- PUT    /api/v1/reservations/{hold_id}/extend → Reset the hold's TTL
"""

from dataclasses import asdict
from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from slotkeeper.core.config import settings
from slotkeeper.core.database import get_db
from slotkeeper.schemas.booking import BookingOut
from slotkeeper.schemas.reservation import (
    ActiveHoldResponse,
    AppointmentTypeSummary,
    AvailableSlotsResponse,
    ConfirmRequest,
    ConfirmResponse,
    CustomerRequest,
    ExtendResponse,
    HoldOut,
    ReleaseResponse,
    ReserveRequest,
    ReserveResponse,
    SlotOut,
)
from slotkeeper.services import availability, reservations

router = APIRouter()


# ============================================================================
# HOLDS
# ============================================================================

@router.post("/reserve", response_model=ReserveResponse, status_code=201)
async def reserve_slot(
    payload: ReserveRequest,
    db: AsyncSession = Depends(get_db),
):
    """Temporarily hold one unit of capacity for a slot."""
    result = await reservations.reserve_slot(
        db,
        appointment_type_id=payload.appointment_type_id,
        resource_id=payload.resource_id,
        start_time=payload.start_time,
        end_time=payload.end_time,
        customer_id=payload.customer_id,
    )
    return ReserveResponse(
        hold=HoldOut.model_validate(result.hold),
        expires_at=result.hold.expires_at,
        timeout_minutes=settings.HOLD_TTL_MINUTES,
        remaining_capacity=result.remaining_capacity,
    )


@router.get("/available/{appointment_type_id}/{date}", response_model=AvailableSlotsResponse)
async def get_available_slots(
    appointment_type_id: UUID,
    date: date,
    db: AsyncSession = Depends(get_db),
):
    """Slots for a date with remaining capacity. An empty list is a valid answer."""
    appointment_type, slots = await availability.get_available_slots(db, appointment_type_id, date)
    return AvailableSlotsResponse(
        appointment_type=AppointmentTypeSummary.model_validate(appointment_type),
        date=date,
        slots=[SlotOut(**asdict(slot)) for slot in slots],
    )


@router.get("/active/{customer_id}", response_model=ActiveHoldResponse)
async def get_active_hold(
    customer_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """The customer's current hold and how long it has left."""
    active = await reservations.get_active_hold(db, customer_id)
    if active is None:
        return ActiveHoldResponse(has_active=False)

    return ActiveHoldResponse(
        has_active=True,
        hold=HoldOut.model_validate(active.hold),
        appointment_title=active.appointment_title,
        resource_name=active.resource_name,
        remaining_seconds=active.remaining_seconds,
    )


@router.delete("/{hold_id}", response_model=ReleaseResponse)
async def release_hold(
    hold_id: UUID,
    customer_id: Optional[UUID] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """Release a hold before confirming it."""
    hold = await reservations.release_hold(db, hold_id, customer_id)
    return ReleaseResponse(released_hold=HoldOut.model_validate(hold))


@router.post("/{hold_id}/confirm", response_model=ConfirmResponse, status_code=201)
async def confirm_hold(
    hold_id: UUID,
    payload: ConfirmRequest,
    db: AsyncSession = Depends(get_db),
):
    """Convert a live hold into a booking."""
    booking = await reservations.confirm_hold(
        db,
        hold_id,
        customer_id=payload.customer_id,
        assigned_user_id=payload.assigned_user_id,
        question_responses=payload.question_responses,
        payment_reference=payload.payment_reference,
    )
    return ConfirmResponse(booking=BookingOut.model_validate(booking))


@router.put("/{hold_id}/extend", response_model=ExtendResponse)
async def extend_hold(
    hold_id: UUID,
    payload: CustomerRequest,
    db: AsyncSession = Depends(get_db),
):
    """Give the customer a fresh TTL on their hold."""
    hold = await reservations.extend_hold(db, hold_id, payload.customer_id)
    return ExtendResponse(hold=HoldOut.model_validate(hold), new_expires_at=hold.expires_at)
