"""Tests for the available-slots query."""

import uuid
from datetime import date, datetime, timedelta

import pytest

from slotkeeper.models.booking import BookingStatus

MONDAY = date(2030, 1, 7)
TUESDAY = date(2030, 1, 8)
NINE = datetime(2030, 1, 7, 9, 0)
NINE_THIRTY = datetime(2030, 1, 7, 9, 30)


def windows(body):
    return [(s["start_time"], s["end_time"], s["resource_id"]) for s in body["slots"]]


@pytest.mark.asyncio
async def test_unknown_appointment_type_is_404(client):
    resp = await client.get(f"/api/v1/reservations/available/{uuid.uuid4()}/2030-01-07")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_day_without_schedule_is_empty(client, factory):
    appointment_type = await factory.appointment_type(schedules=[(1, "09:00", "12:00")])

    resp = await client.get(f"/api/v1/reservations/available/{appointment_type.id}/{TUESDAY.isoformat()}")
    assert resp.status_code == 200
    body = resp.json()
    assert body["slots"] == []
    assert body["appointment_type"]["title"] == "Consultation"


@pytest.mark.asyncio
async def test_range_shorter_than_duration_yields_no_slots(client, factory):
    appointment_type = await factory.appointment_type(duration_minutes=30, schedules=[(1, "09:00", "09:20")])

    resp = await client.get(f"/api/v1/reservations/available/{appointment_type.id}/{MONDAY.isoformat()}")
    assert resp.status_code == 200
    assert resp.json()["slots"] == []


@pytest.mark.asyncio
async def test_leftover_minutes_after_last_window_are_unused(client, factory):
    appointment_type = await factory.appointment_type(duration_minutes=30, schedules=[(1, "09:00", "09:50")])

    resp = await client.get(f"/api/v1/reservations/available/{appointment_type.id}/{MONDAY.isoformat()}")
    assert resp.status_code == 200
    (slot,) = resp.json()["slots"]
    assert datetime.fromisoformat(slot["start_time"]) == NINE
    assert datetime.fromisoformat(slot["end_time"]) == NINE_THIRTY


@pytest.mark.asyncio
async def test_unscoped_slots_have_singleton_capacity(client, factory):
    appointment_type = await factory.appointment_type(duration_minutes=30, schedules=[(1, "09:00", "10:00")])
    await factory.hold(appointment_type.id, NINE, NINE_THIRTY)

    resp = await client.get(f"/api/v1/reservations/available/{appointment_type.id}/{MONDAY.isoformat()}")
    body = resp.json()
    assert body["appointment_type"]["duration_minutes"] == 30
    assert body["date"] == "2030-01-07"
    first, second = body["slots"]
    assert first["resource_id"] is None
    assert first["total_capacity"] == 1
    assert first["remaining_capacity"] == 0
    assert first["available"] is False
    assert second["available"] is True


@pytest.mark.asyncio
async def test_slots_per_resource_in_window_order(client, factory):
    appointment_type = await factory.appointment_type(duration_minutes=30, schedules=[(1, "09:00", "10:00")])
    room_b = await factory.resource(capacity=2, name="Room B")
    room_a = await factory.resource(capacity=3, name="Room A")
    await factory.resource(capacity=9, name="Closed room", is_active=False)
    await factory.booking(appointment_type.id, NINE, NINE_THIRTY, resource_id=room_b.id)

    resp = await client.get(f"/api/v1/reservations/available/{appointment_type.id}/{MONDAY.isoformat()}")
    slots = resp.json()["slots"]
    assert [(s["start_time"][11:16], s["resource_name"]) for s in slots] == [
        ("09:00", "Room A"),
        ("09:00", "Room B"),
        ("09:30", "Room A"),
        ("09:30", "Room B"),
    ]
    assert slots[0]["remaining_capacity"] == 3
    assert slots[1]["remaining_capacity"] == 1
    assert slots[1]["total_capacity"] == 2
    assert slots[1]["resource_id"] == str(room_b.id)
    assert slots[2]["resource_id"] == str(room_a.id)


@pytest.mark.asyncio
async def test_expired_hold_looks_reclaimed(client, factory):
    appointment_type = await factory.appointment_type(duration_minutes=30, schedules=[(1, "09:00", "09:30")])
    resource = await factory.resource(capacity=1)
    await factory.hold(appointment_type.id, NINE, NINE_THIRTY, resource_id=resource.id,
                       expires_in=timedelta(seconds=-1))

    resp = await client.get(f"/api/v1/reservations/available/{appointment_type.id}/{MONDAY.isoformat()}")
    (slot,) = resp.json()["slots"]
    assert slot["available"] is True
    assert slot["remaining_capacity"] == 1


@pytest.mark.asyncio
async def test_overbooked_slot_is_clamped_to_zero(client, factory):
    appointment_type = await factory.appointment_type(duration_minutes=30, schedules=[(1, "09:00", "09:30")])
    resource = await factory.resource(capacity=1)
    await factory.booking(appointment_type.id, NINE, NINE_THIRTY, resource_id=resource.id)
    await factory.booking(appointment_type.id, NINE, NINE_THIRTY, resource_id=resource.id,
                          status=BookingStatus.CONFIRMED)

    resp = await client.get(f"/api/v1/reservations/available/{appointment_type.id}/{MONDAY.isoformat()}")
    (slot,) = resp.json()["slots"]
    assert slot["remaining_capacity"] == 0
    assert slot["available"] is False


@pytest.mark.asyncio
async def test_repeated_queries_return_identical_windows(client, factory):
    appointment_type = await factory.appointment_type(
        duration_minutes=45,
        schedules=[(1, "13:00", "17:00"), (1, "08:00", "12:00")],
    )

    url = f"/api/v1/reservations/available/{appointment_type.id}/{MONDAY.isoformat()}"
    first = (await client.get(url)).json()
    second = (await client.get(url)).json()
    assert windows(first) == windows(second)
    assert len(first["slots"]) == 10
    # ranges are read in start-time order
    assert first["slots"][0]["start_time"].startswith("2030-01-07T08:00")


@pytest.mark.asyncio
async def test_reserved_slot_can_be_reserved_with_returned_window(client, factory):
    appointment_type = await factory.appointment_type(duration_minutes=30, schedules=[(1, "09:00", "10:00")])
    resource = await factory.resource(capacity=2)

    url = f"/api/v1/reservations/available/{appointment_type.id}/{MONDAY.isoformat()}"
    slot = (await client.get(url)).json()["slots"][1]
    resp = await client.post("/api/v1/reservations/reserve", json={
        "appointment_type_id": str(appointment_type.id),
        "resource_id": slot["resource_id"],
        "customer_id": str(uuid.uuid4()),
        "start_time": slot["start_time"],
        "end_time": slot["end_time"],
    })
    assert resp.status_code == 201

    after = (await client.get(url)).json()["slots"][1]
    assert after["remaining_capacity"] == 1
    assert str(resource.id) == after["resource_id"]
