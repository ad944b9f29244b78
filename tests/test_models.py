"""Schema-level checks on the mapped tables."""

from slotkeeper.core.database import Base
from slotkeeper.models.registry import Booking, Hold


def test_registry_maps_every_table():
    assert set(Base.metadata.tables) == {
        "resources",
        "appointment_types",
        "schedules",
        "slot_reservations",
        "bookings",
        "question_responses",
    }


def test_deleting_a_resource_with_bookings_is_refused():
    # a nulled resource_id would move the booking into the unscoped pool
    (fk,) = Booking.__table__.c.resource_id.foreign_keys
    assert fk.ondelete == "RESTRICT"


def test_holds_go_with_their_resource():
    (fk,) = Hold.__table__.c.resource_id.foreign_keys
    assert fk.ondelete == "CASCADE"
