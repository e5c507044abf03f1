"""Half-hour appointment grid for a single clinic day.

The clinic opens at 09:00 and the last appointment starts at 16:30, giving
sixteen 30-minute slots on every weekday and none on weekends.
"""

from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo

from clinic_backend.core import config
from clinic_backend.schemas import TimeSlot

OPEN_TIME = time(9, 0)
LAST_START_TIME = time(16, 30)
SLOT_DURATION_MINUTES = 30
DAY_ANCHOR_TIME = time(12, 0)


def is_business_day(slot_date: date, timezone_name: str | None = None) -> bool:
    """Return True when ``slot_date`` is Monday through Friday.

    ``slot_date`` is already a date on the clinic's wall clock, so the answer
    is the same for every zone; ``CLINIC_TIMEZONE`` is only checked at startup.
    """
    zone = ZoneInfo(timezone_name or config.CLINIC_TIMEZONE)
    anchored = datetime.combine(slot_date, DAY_ANCHOR_TIME, tzinfo=zone)
    return anchored.weekday() < 5


def generate_slot_starts(slot_date: date, timezone_name: str | None = None) -> list[datetime]:
    if not is_business_day(slot_date, timezone_name):
        return []

    slots: list[datetime] = []
    current = datetime.combine(slot_date, OPEN_TIME)
    last_start = datetime.combine(slot_date, LAST_START_TIME)

    while current <= last_start:
        slots.append(current)
        current += timedelta(minutes=SLOT_DURATION_MINUTES)

    return slots


def is_bookable_slot(instant: datetime, timezone_name: str | None = None) -> bool:
    if instant.second or instant.microsecond:
        return False
    return instant in generate_slot_starts(instant.date(), timezone_name)


def build_time_slots(
    slot_date: date,
    booked_starts: set[datetime],
    timezone_name: str | None = None,
) -> list[TimeSlot]:
    return [
        TimeSlot(
            time=slot_start.strftime('%H:%M'),
            datetime=slot_start,
            available=slot_start not in booked_starts,
        )
        for slot_start in generate_slot_starts(slot_date, timezone_name)
    ]
