"""Every mapped table, imported in one place so Base.metadata is complete."""

from slotkeeper.models.appointment_type import AppointmentType, Schedule
from slotkeeper.models.booking import Booking, QuestionResponse
from slotkeeper.models.hold import Hold
from slotkeeper.models.resource import Resource

__all__ = [
    "AppointmentType",
    "Schedule",
    "Booking",
    "QuestionResponse",
    "Hold",
    "Resource",
]
