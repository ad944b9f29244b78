"""Capacity accounting for a single slot window.

remaining = total_capacity - active holds - active bookings, matched on the
exact [start, end) window. Counts are always re-derived from the store.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union
from uuid import UUID

from sqlalchemy import select, func, and_
from sqlalchemy.ext.asyncio import AsyncSession

from slotkeeper.models.booking import Booking, ACTIVE_BOOKING_STATUSES
from slotkeeper.models.hold import Hold
from slotkeeper.models.resource import Resource

logger = logging.getLogger(__name__)

# Capacity of an appointment type that has no resource.
UNSCOPED_CAPACITY = 1


@dataclass(frozen=True)
class ResourceScoped:
    resource_id: UUID


@dataclass(frozen=True)
class Unscoped:
    appointment_type_id: UUID


CapacityScope = Union[ResourceScoped, Unscoped]


def scope_for(appointment_type_id: UUID, resource_id: Optional[UUID]) -> CapacityScope:
    if resource_id is not None:
        return ResourceScoped(resource_id)
    return Unscoped(appointment_type_id)


@dataclass(frozen=True)
class CapacitySnapshot:
    total: int
    active_holds: int
    active_bookings: int

    @property
    def remaining(self) -> int:
        """Raw remaining units; can only go negative if mutual exclusion failed."""
        return self.total - self.active_holds - self.active_bookings

    @property
    def display_remaining(self) -> int:
        return max(0, self.remaining)

    @property
    def available(self) -> bool:
        return self.remaining > 0


def _scope_filter(model, scope: CapacityScope):
    if isinstance(scope, ResourceScoped):
        return model.resource_id == scope.resource_id
    return and_(
        model.appointment_type_id == scope.appointment_type_id,
        model.resource_id.is_(None),
    )


async def count_active_holds(
    db: AsyncSession,
    scope: CapacityScope,
    start_time: datetime,
    end_time: datetime,
    now: datetime,
) -> int:
    """Unexpired holds on exactly this window. Lapsed rows are ignored even if unswept."""
    result = await db.execute(
        select(func.count(Hold.id)).where(
            _scope_filter(Hold, scope),
            Hold.start_time == start_time,
            Hold.end_time == end_time,
            Hold.expires_at > now,
        )
    )
    return result.scalar() or 0


async def count_active_bookings(
    db: AsyncSession,
    scope: CapacityScope,
    start_time: datetime,
    end_time: datetime,
) -> int:
    """PENDING and CONFIRMED bookings on exactly this window."""
    result = await db.execute(
        select(func.count(Booking.id)).where(
            _scope_filter(Booking, scope),
            Booking.start_time == start_time,
            Booking.end_time == end_time,
            Booking.status.in_(ACTIVE_BOOKING_STATUSES),
        )
    )
    return result.scalar() or 0


async def get_active_resource(db: AsyncSession, resource_id: UUID, for_update: bool = False) -> Optional[Resource]:
    query = select(Resource).where(Resource.id == resource_id, Resource.is_active.is_(True))
    if for_update:
        query = query.with_for_update()
    result = await db.execute(query)
    return result.scalar_one_or_none()


async def measure_capacity(
    db: AsyncSession,
    scope: CapacityScope,
    start_time: datetime,
    end_time: datetime,
    now: datetime,
    total_capacity: int,
) -> CapacitySnapshot:
    """Snapshot for a window when the total is already known (e.g. resource row loaded)."""
    holds = await count_active_holds(db, scope, start_time, end_time, now)
    bookings = await count_active_bookings(db, scope, start_time, end_time)
    snapshot = CapacitySnapshot(total=total_capacity, active_holds=holds, active_bookings=bookings)

    if snapshot.remaining < 0:
        logger.warning(
            "Over-committed slot %s %s-%s: capacity=%d holds=%d bookings=%d",
            scope,
            start_time.isoformat(),
            end_time.isoformat(),
            total_capacity,
            holds,
            bookings,
        )
    return snapshot


async def remaining_capacity(
    db: AsyncSession,
    scope: CapacityScope,
    start_time: datetime,
    end_time: datetime,
    now: Optional[datetime] = None,
) -> CapacitySnapshot:
    """Full calculation, including the total: resource capacity or the singleton 1.

    A missing or inactive resource has zero capacity.
    """
    now = now or datetime.utcnow()
    if isinstance(scope, ResourceScoped):
        resource = await get_active_resource(db, scope.resource_id)
        total = resource.capacity if resource else 0
    else:
        total = UNSCOPED_CAPACITY
    return await measure_capacity(db, scope, start_time, end_time, now, total)
