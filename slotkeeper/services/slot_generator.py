"""Slot generation from a weekly availability template.

Pure functions: the same schedule rows, date and duration always produce the
same ordered windows, which clients rely on to match slot identity.
"""

from datetime import date, datetime, time, timedelta
from typing import Iterable, List, Protocol, Tuple

from slotkeeper.core.exceptions import ValidationError


class ScheduleRange(Protocol):
    day_of_week: int
    start_time: time
    end_time: time


Window = Tuple[datetime, datetime]


def day_of_week_index(target_date: date) -> int:
    """Weekday index used by schedules: 0=Sunday ... 6=Saturday."""
    return target_date.isoweekday() % 7


def windows_for_range(target_date: date, start: time, end: time, duration_minutes: int) -> List[Window]:
    """Walk one range in duration steps; a trailing partial window is dropped."""
    step = timedelta(minutes=duration_minutes)
    range_end = datetime.combine(target_date, end)
    current = datetime.combine(target_date, start)

    windows = []
    while current + step <= range_end:
        windows.append((current, current + step))
        current += step
    return windows


def generate_windows(
    schedules: Iterable[ScheduleRange],
    target_date: date,
    duration_minutes: int,
) -> List[Window]:
    """Candidate windows for target_date, concatenated in schedule order as given.

    An empty list (not an error) when no range matches the weekday.
    """
    if not duration_minutes or duration_minutes <= 0:
        raise ValidationError("Appointment duration must be a positive number of minutes")

    weekday = day_of_week_index(target_date)
    windows: List[Window] = []
    for schedule in schedules:
        if schedule.day_of_week != weekday:
            continue
        windows.extend(
            windows_for_range(target_date, schedule.start_time, schedule.end_time, duration_minutes)
        )
    return windows
