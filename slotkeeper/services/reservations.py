"""Hold lifecycle: reserve, release, extend, confirm.

States per hold: NONE -> HELD -> CONFIRMED | RELEASED | EXPIRED.
CONFIRMED and RELEASED delete the row; EXPIRED is derived from expires_at.

reserve re-derives capacity inside the same transaction as the insert, with
the appointment type row (and the resource row, when scoped) locked FOR
UPDATE so two reservers on the same window are serialized.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from slotkeeper.core.config import settings
from slotkeeper.core.exceptions import (
    ConflictError,
    NotFoundError,
    ReservationError,
    ValidationError,
)
from slotkeeper.models.appointment_type import AppointmentType
from slotkeeper.models.booking import Booking, BookingStatus, PaymentStatus, QuestionResponse
from slotkeeper.models.hold import Hold
from slotkeeper.models.resource import Resource
from slotkeeper.schemas.booking import QuestionResponseIn
from slotkeeper.services.capacity import (
    ResourceScoped,
    UNSCOPED_CAPACITY,
    get_active_resource,
    measure_capacity,
    scope_for,
)
from slotkeeper.services.hold_sweeper import sweep_expired_holds

logger = logging.getLogger(__name__)

HOLD_NOT_FOUND = "Hold not found, expired, or does not belong to you"


def hold_ttl() -> timedelta:
    return timedelta(minutes=settings.HOLD_TTL_MINUTES)


@dataclass
class ReservationResult:
    hold: Hold
    remaining_capacity: int


@dataclass
class ActiveHold:
    hold: Hold
    appointment_title: Optional[str]
    resource_name: Optional[str]
    remaining_seconds: int


def _require(**fields):
    missing = [name for name, value in fields.items() if value is None]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")


async def _get_owned_active_hold(
    db: AsyncSession,
    hold_id: UUID,
    customer_id: UUID,
    now: datetime,
) -> Optional[Hold]:
    """The hold iff it exists, belongs to customer_id and has not lapsed."""
    result = await db.execute(
        select(Hold)
        .where(
            Hold.id == hold_id,
            Hold.customer_id == customer_id,
            Hold.expires_at > now,
        )
        .with_for_update()
    )
    return result.scalar_one_or_none()


async def reserve_slot(
    db: AsyncSession,
    appointment_type_id: Optional[UUID],
    resource_id: Optional[UUID],
    start_time: Optional[datetime],
    end_time: Optional[datetime],
    customer_id: Optional[UUID],
) -> ReservationResult:
    """Place a hold on one unit of capacity for the exact window.

    Raises ValidationError, NotFoundError (appointment type or resource missing,
    resource inactive) or ConflictError (duplicate hold, no capacity).
    """
    _require(
        appointment_type_id=appointment_type_id,
        start_time=start_time,
        end_time=end_time,
        customer_id=customer_id,
    )
    if end_time <= start_time:
        raise ValidationError("end_time must be after start_time")

    now = datetime.utcnow()
    try:
        await sweep_expired_holds(db, now)

        result = await db.execute(
            select(AppointmentType)
            .where(AppointmentType.id == appointment_type_id)
            .with_for_update()
        )
        if result.scalar_one_or_none() is None:
            raise NotFoundError("Appointment type not found")

        existing = await db.execute(
            select(Hold.id).where(
                Hold.customer_id == customer_id,
                Hold.appointment_type_id == appointment_type_id,
                Hold.expires_at > now,
            ).limit(1)
        )
        existing_hold_id = existing.scalar_one_or_none()
        if existing_hold_id is not None:
            logger.warning(
                "Customer %s already holds %s for appointment type %s",
                customer_id,
                existing_hold_id,
                appointment_type_id,
            )
            raise ConflictError(
                "You already have an active hold for this appointment type",
                {"existing_hold_id": str(existing_hold_id)},
            )

        scope = scope_for(appointment_type_id, resource_id)
        if isinstance(scope, ResourceScoped):
            resource = await get_active_resource(db, scope.resource_id, for_update=True)
            if resource is None:
                raise NotFoundError("Resource not found or inactive")
            total_capacity = resource.capacity
        else:
            total_capacity = UNSCOPED_CAPACITY

        snapshot = await measure_capacity(db, scope, start_time, end_time, now, total_capacity)
        if snapshot.remaining <= 0:
            logger.warning(
                "No capacity for %s %s-%s (capacity=%d holds=%d bookings=%d)",
                scope,
                start_time.isoformat(),
                end_time.isoformat(),
                snapshot.total,
                snapshot.active_holds,
                snapshot.active_bookings,
            )
            raise ConflictError(
                "No capacity available for this time slot",
                {"remaining_capacity": 0},
            )

        hold = Hold(
            appointment_type_id=appointment_type_id,
            resource_id=resource_id,
            customer_id=customer_id,
            start_time=start_time,
            end_time=end_time,
            renewed_at=now,
            expires_at=now + hold_ttl(),
            created_at=now,
        )
        db.add(hold)
        await db.commit()
    except ReservationError:
        await db.rollback()
        raise
    except IntegrityError as e:
        await db.rollback()
        logger.warning("Hold insert rejected by the database: %s", e.orig)
        raise ConflictError("This time slot could not be held, please try again")
    except Exception:
        await db.rollback()
        logger.exception("Reserve failed for customer %s", customer_id)
        raise

    logger.info(
        "Hold %s created for customer %s on %s-%s, expires %s",
        hold.id,
        customer_id,
        start_time.isoformat(),
        end_time.isoformat(),
        hold.expires_at.isoformat(),
    )
    return ReservationResult(hold=hold, remaining_capacity=snapshot.remaining - 1)


async def release_hold(db: AsyncSession, hold_id: UUID, customer_id: Optional[UUID]) -> Hold:
    """Cancel a hold before confirming. Releasing twice is a NotFoundError."""
    _require(customer_id=customer_id)

    hold = await _get_owned_active_hold(db, hold_id, customer_id, datetime.utcnow())
    if hold is None:
        await db.rollback()
        raise NotFoundError(HOLD_NOT_FOUND)

    await db.delete(hold)
    await db.commit()

    logger.info("Hold %s released by customer %s", hold_id, customer_id)
    return hold


async def extend_hold(db: AsyncSession, hold_id: UUID, customer_id: Optional[UUID]) -> Hold:
    """Reset the hold's countdown to a full TTL from now (not additive)."""
    _require(customer_id=customer_id)

    now = datetime.utcnow()
    hold = await _get_owned_active_hold(db, hold_id, customer_id, now)
    if hold is None:
        await db.rollback()
        raise NotFoundError(HOLD_NOT_FOUND)

    hold.renewed_at = now
    hold.expires_at = now + hold_ttl()
    await db.commit()

    logger.info("Hold %s extended until %s", hold_id, hold.expires_at.isoformat())
    return hold


async def confirm_hold(
    db: AsyncSession,
    hold_id: UUID,
    customer_id: Optional[UUID],
    assigned_user_id: Optional[UUID] = None,
    question_responses: Optional[Sequence[QuestionResponseIn]] = None,
    payment_reference: Optional[str] = None,
) -> Booking:
    """Promote a live hold to a booking and delete the hold, atomically.

    Payment is advisory: without a reference the booking is PENDING/UNPAID.
    """
    _require(customer_id=customer_id)
    payment_reference = payment_reference or None

    try:
        hold = await _get_owned_active_hold(db, hold_id, customer_id, datetime.utcnow())
        if hold is None:
            raise NotFoundError(HOLD_NOT_FOUND)

        paid = payment_reference is not None
        booking = Booking(
            appointment_type_id=hold.appointment_type_id,
            resource_id=hold.resource_id,
            customer_id=customer_id,
            assigned_user_id=assigned_user_id,
            start_time=hold.start_time,
            end_time=hold.end_time,
            status=BookingStatus.CONFIRMED if paid else BookingStatus.PENDING,
            payment_status=PaymentStatus.PAID if paid else PaymentStatus.UNPAID,
            payment_reference=payment_reference,
            question_responses=[
                QuestionResponse(question_id=r.question_id, answer_value=r.answer_value)
                for r in (question_responses or [])
            ],
        )
        db.add(booking)
        await db.delete(hold)
        await db.commit()
    except ReservationError:
        await db.rollback()
        raise
    except IntegrityError as e:
        await db.rollback()
        logger.warning("Booking insert rejected by the database: %s", e.orig)
        raise ConflictError("Booking could not be created for this hold")
    except Exception:
        await db.rollback()
        logger.exception("Confirm failed for hold %s", hold_id)
        raise

    logger.info(
        "Hold %s confirmed as booking %s (%s/%s)",
        hold_id,
        booking.id,
        booking.status.value,
        booking.payment_status.value,
    )
    return booking


async def get_active_hold(db: AsyncSession, customer_id: UUID) -> Optional[ActiveHold]:
    """The customer's most recent live hold, with seconds left on it."""
    now = datetime.utcnow()
    await sweep_expired_holds(db, now)
    await db.commit()

    result = await db.execute(
        select(Hold, AppointmentType.title, Resource.name)
        .outerjoin(AppointmentType, Hold.appointment_type_id == AppointmentType.id)
        .outerjoin(Resource, Hold.resource_id == Resource.id)
        .where(Hold.customer_id == customer_id, Hold.expires_at > now)
        .order_by(Hold.created_at.desc())
        .limit(1)
    )
    row = result.first()
    if row is None:
        return None

    hold, title, resource_name = row
    remaining = max(0, int((hold.expires_at - now).total_seconds()))
    return ActiveHold(
        hold=hold,
        appointment_title=title,
        resource_name=resource_name,
        remaining_seconds=remaining,
    )
