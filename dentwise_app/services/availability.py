"""Open-slot resolution and next-available search for a doctor.

Every function takes the appointment store explicitly so the computation
carries no process-wide state and can run against any store implementation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta

from dentwise_app.services.appointment_store import OCCUPYING_STATUSES, AppointmentStore
from dentwise_app.services.slots import (
    as_day,
    format_clock_label,
    format_day_label,
    generate_daily_slots,
    is_weekend,
)

log = logging.getLogger(__name__)

DEFAULT_HORIZON_DAYS = 7


class InvalidAvailabilityRequest(ValueError):
    """Raised for malformed doctor ids, days or horizons."""


class AvailabilityUnavailable(Exception):
    """Raised when the store failed while searching for the next slot."""

    def __init__(self, day: date, reason: str) -> None:
        super().__init__(f"{day.isoformat()}: {reason}")
        self.day = day
        self.reason = reason


@dataclass(frozen=True)
class AvailabilityResult:
    """Open tokens for one doctor/day, or the reason the store read failed."""

    slots: tuple[str, ...] = field(default_factory=tuple)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class NextAvailableSlot:
    day: date
    time: str
    formatted_date: str
    formatted_time: str

    def to_dict(self) -> dict[str, str]:
        return {
            "date": self.day.isoformat(),
            "time": self.time,
            "formatted_date": self.formatted_date,
            "formatted_time": self.formatted_time,
        }


def _check_doctor_id(doctor_id: object) -> str:
    if not isinstance(doctor_id, str) or not doctor_id.strip():
        raise InvalidAvailabilityRequest("doctor_id must be a non-empty string")
    return doctor_id


def _check_day(day: object) -> date:
    if not isinstance(day, date):
        raise InvalidAvailabilityRequest(f"expected a date, got {type(day).__name__}")
    return as_day(day)


def resolve_available_slots(store: AppointmentStore, doctor_id: str, day: date | datetime) -> AvailabilityResult:
    """Return the generated slots for ``day`` minus the occupied ones."""
    doctor_id = _check_doctor_id(doctor_id)
    day = _check_day(day)
    candidates = generate_daily_slots(day)
    if not candidates:
        return AvailabilityResult()
    try:
        booked = store.find_booked_times(doctor_id, day, OCCUPYING_STATUSES)
    except Exception as exc:
        log.warning("Availability lookup failed for doctor %s on %s: %s", doctor_id, day.isoformat(), exc)
        return AvailabilityResult(error=str(exc) or exc.__class__.__name__)
    return AvailabilityResult(slots=tuple(slot for slot in candidates if slot not in booked))


def get_available_time_slots(store: AppointmentStore, doctor_id: str, day: date | datetime) -> list[str]:
    """List form of :func:`resolve_available_slots`; empty when the store failed."""
    return list(resolve_available_slots(store, doctor_id, day).slots)


def find_next_available_slot(
    store: AppointmentStore,
    doctor_id: str,
    from_day: date | datetime | None = None,
    horizon_days: int = DEFAULT_HORIZON_DAYS,
) -> NextAvailableSlot | None:
    """Earliest open slot within ``horizon_days`` starting at ``from_day``.

    Weekend days are skipped without consulting the store. Returns ``None``
    when every working day in range is full. A failed store read raises
    :class:`AvailabilityUnavailable`, since a later hit could not be proven
    to be the earliest one.
    """
    doctor_id = _check_doctor_id(doctor_id)
    if isinstance(horizon_days, bool) or not isinstance(horizon_days, int):
        raise InvalidAvailabilityRequest("horizon_days must be an integer")
    if horizon_days < 0:
        raise InvalidAvailabilityRequest("horizon_days must not be negative")
    start = _check_day(from_day) if from_day is not None else date.today()

    for offset in range(horizon_days):
        candidate = start + timedelta(days=offset)
        if is_weekend(candidate):
            continue
        result = resolve_available_slots(store, doctor_id, candidate)
        if not result.ok:
            raise AvailabilityUnavailable(candidate, result.error or "")
        if result.slots:
            first = result.slots[0]
            return NextAvailableSlot(
                day=candidate,
                time=first,
                formatted_date=format_day_label(candidate),
                formatted_time=format_clock_label(first),
            )
    return None
