"""Shared test fixtures for Slotkeeper API tests.

Uses an in-memory SQLite async engine so tests run without PostgreSQL.
"""

import uuid
from datetime import datetime, time, timedelta
from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker

from slotkeeper.core.database import Base, get_db
from slotkeeper.main import app

from slotkeeper.models.booking import BookingStatus, PaymentStatus
from slotkeeper.models.registry import AppointmentType, Booking, Hold, Resource, Schedule


# Use aiosqlite for fast, isolated tests
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

engine = create_async_engine(TEST_DATABASE_URL, echo=False)
TestSession = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture(autouse=True)
async def setup_db():
    """Create all tables before each test, drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


async def override_get_db():
    async with TestSession() as session:
        yield session


app.dependency_overrides[get_db] = override_get_db


@pytest_asyncio.fixture
async def client():
    """Async HTTP test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def db():
    """Direct DB session for test setup/assertions."""
    async with TestSession() as session:
        yield session


class Factory:
    """Creates rows the reservation core only reads (or needs pre-seeded)."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.organiser_id = uuid.uuid4()

    async def appointment_type(self, duration_minutes=30, schedules=(), title="Consultation"):
        """schedules: iterable of (day_of_week, "HH:MM", "HH:MM")."""
        appointment_type = AppointmentType(
            organiser_id=self.organiser_id,
            title=title,
            duration_minutes=duration_minutes,
            booking_fee=Decimal("25.00"),
            is_published=True,
        )
        self.session.add(appointment_type)
        await self.session.flush()
        for day_of_week, start, end in schedules:
            self.session.add(Schedule(
                appointment_type_id=appointment_type.id,
                day_of_week=day_of_week,
                start_time=time.fromisoformat(start),
                end_time=time.fromisoformat(end),
            ))
        await self.session.commit()
        return appointment_type

    async def resource(self, capacity=1, name="Room A", is_active=True):
        resource = Resource(
            organiser_id=self.organiser_id,
            name=name,
            capacity=capacity,
            is_active=is_active,
        )
        self.session.add(resource)
        await self.session.commit()
        return resource

    async def hold(self, appointment_type_id, start_time, end_time, resource_id=None,
                   customer_id=None, expires_in=timedelta(minutes=5)):
        now = datetime.utcnow()
        hold = Hold(
            appointment_type_id=appointment_type_id,
            resource_id=resource_id,
            customer_id=customer_id or uuid.uuid4(),
            start_time=start_time,
            end_time=end_time,
            renewed_at=now + expires_in - timedelta(minutes=5),
            expires_at=now + expires_in,
            created_at=now,
        )
        self.session.add(hold)
        await self.session.commit()
        return hold

    async def booking(self, appointment_type_id, start_time, end_time, resource_id=None,
                      status=BookingStatus.PENDING, customer_id=None):
        booking = Booking(
            appointment_type_id=appointment_type_id,
            resource_id=resource_id,
            customer_id=customer_id or uuid.uuid4(),
            start_time=start_time,
            end_time=end_time,
            status=status,
            payment_status=PaymentStatus.PAID if status == BookingStatus.CONFIRMED else PaymentStatus.UNPAID,
        )
        self.session.add(booking)
        await self.session.commit()
        return booking


@pytest.fixture
def factory(db):
    return Factory(db)


@pytest.fixture
def session_factory():
    """Session factory bound to the test engine, for code that opens its own sessions."""
    return TestSession
