"""Daily slot policy and display labels."""

from __future__ import annotations

from datetime import date, datetime, timedelta

WORKDAY_START_HOUR = 9
WORKDAY_END_HOUR = 17
SLOT_MINUTES = 30

# date.weekday(): Monday == 0 ... Sunday == 6
WEEKEND_DAYS = frozenset({5, 6})


def as_day(value: date | datetime) -> date:
    """Drop any time component so comparisons happen per calendar day."""
    if isinstance(value, datetime):
        return value.date()
    return value


def is_weekend(day: date | datetime) -> bool:
    return as_day(day).weekday() in WEEKEND_DAYS


def generate_daily_slots(day: date | datetime) -> list[str]:
    """Return the bookable ``HH:MM`` tokens for ``day`` in ascending order.

    Weekdays always yield the same 16 tokens (09:00 through 16:30); weekends
    yield nothing.
    """
    if is_weekend(day):
        return []
    slots: list[str] = []
    for hour in range(WORKDAY_START_HOUR, WORKDAY_END_HOUR):
        for minute in range(0, 60, SLOT_MINUTES):
            slots.append(f"{hour:02d}:{minute:02d}")
    return slots


def format_clock_label(token: str) -> str:
    """``"13:30"`` -> ``"1:30 PM"``."""
    hours_str, minutes_str = token.split(":")
    hours = int(hours_str)
    minutes = int(minutes_str)
    hour = hours % 12 or 12
    ampm = "PM" if hours >= 12 else "AM"
    return f"{hour}:{minutes:02d} {ampm}"


def format_day_label(day: date | datetime) -> str:
    """Short weekday/month/day label, e.g. ``Tue, Jan 7``."""
    day = as_day(day)
    return f"{day:%a}, {day:%b} {day.day}"


def next_booking_days(today: date | None = None, count: int = 5) -> list[str]:
    """ISO dates for the ``count`` days starting tomorrow."""
    base = as_day(today or date.today())
    return [(base + timedelta(days=offset)).isoformat() for offset in range(1, count + 1)]
