"""Available-slots query: generated windows annotated with remaining capacity."""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from slotkeeper.core.exceptions import NotFoundError
from slotkeeper.models.appointment_type import AppointmentType, Schedule
from slotkeeper.models.resource import Resource
from slotkeeper.services.capacity import (
    ResourceScoped,
    Unscoped,
    UNSCOPED_CAPACITY,
    measure_capacity,
)
from slotkeeper.services.hold_sweeper import sweep_expired_holds
from slotkeeper.services.slot_generator import day_of_week_index, generate_windows

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Slot:
    start_time: datetime
    end_time: datetime
    resource_id: Optional[UUID]
    resource_name: Optional[str]
    remaining_capacity: int
    total_capacity: int
    available: bool


async def get_available_slots(
    db: AsyncSession,
    appointment_type_id: UUID,
    target_date: date,
) -> Tuple[AppointmentType, List[Slot]]:
    """Slots for one date, for every active resource of the organiser.

    Windows are in generator order; within a window, resources are ordered by
    name then id. With no resources there is a single unscoped pass.
    """
    now = datetime.utcnow()
    await sweep_expired_holds(db, now)
    await db.commit()

    result = await db.execute(select(AppointmentType).where(AppointmentType.id == appointment_type_id))
    appointment_type = result.scalar_one_or_none()
    if appointment_type is None:
        raise NotFoundError("Appointment type not found")

    schedules_result = await db.execute(
        select(Schedule)
        .where(
            Schedule.appointment_type_id == appointment_type_id,
            Schedule.day_of_week == day_of_week_index(target_date),
        )
        .order_by(Schedule.start_time)
    )
    schedules = schedules_result.scalars().all()

    windows = generate_windows(schedules, target_date, appointment_type.duration_minutes)
    if not windows:
        return appointment_type, []

    resources_result = await db.execute(
        select(Resource)
        .where(
            Resource.organiser_id == appointment_type.organiser_id,
            Resource.is_active.is_(True),
        )
        .order_by(Resource.name, Resource.id)
    )
    resources = resources_result.scalars().all()

    slots = []
    for start_time, end_time in windows:
        if resources:
            for resource in resources:
                snapshot = await measure_capacity(
                    db, ResourceScoped(resource.id), start_time, end_time, now, resource.capacity
                )
                slots.append(Slot(
                    start_time=start_time,
                    end_time=end_time,
                    resource_id=resource.id,
                    resource_name=resource.name,
                    remaining_capacity=snapshot.display_remaining,
                    total_capacity=snapshot.total,
                    available=snapshot.available,
                ))
        else:
            snapshot = await measure_capacity(
                db, Unscoped(appointment_type.id), start_time, end_time, now, UNSCOPED_CAPACITY
            )
            slots.append(Slot(
                start_time=start_time,
                end_time=end_time,
                resource_id=None,
                resource_name=None,
                remaining_capacity=snapshot.display_remaining,
                total_capacity=snapshot.total,
                available=snapshot.available,
            ))

    logger.debug(
        "Computed %d slot(s) for appointment type %s on %s",
        len(slots),
        appointment_type_id,
        target_date.isoformat(),
    )
    return appointment_type, slots
