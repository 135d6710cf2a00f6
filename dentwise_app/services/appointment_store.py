"""Appointment store: the read/write boundary used by availability and seeding."""

from __future__ import annotations

import logging
import uuid
from datetime import date, datetime, timezone
from typing import Callable, Iterable, Protocol

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from dentwise_app.models import APPOINTMENT_STATUSES, Appointment, Doctor, User
from dentwise_app.services.database import session_scope
from dentwise_app.services.slots import as_day, generate_daily_slots

log = logging.getLogger(__name__)

OCCUPYING_STATUSES = frozenset({"CONFIRMED", "COMPLETED"})


class AppointmentError(Exception):
    """Base exception for appointment store operations."""


class StoreUnavailable(AppointmentError):
    """Raised when the backing database cannot be read or written."""


class SlotAlreadyBooked(AppointmentError):
    """Raised when an occupying booking already holds the requested slot."""


class InvalidSlot(AppointmentError):
    """Raised when a booking targets a token the day does not offer."""


class DoctorNotFound(AppointmentError):
    """Raised when a doctor id cannot be located."""


class UserNotFound(AppointmentError):
    """Raised when a booking names a patient id that does not exist."""


class AppointmentStore(Protocol):
    def find_booked_times(self, doctor_id: str, day: date, statuses: Iterable[str]) -> set[str]:
        ...

    def book(
        self,
        doctor_id: str,
        day: date,
        time: str,
        *,
        user_id: str | None = None,
        reason: str = "",
        status: str = "CONFIRMED",
    ) -> str:
        ...


def validate_booking(day: date, time: str, status: str) -> None:
    """Shared checks every store applies before writing a booking."""
    if status not in APPOINTMENT_STATUSES:
        raise AppointmentError(f"invalid_status:{status}")
    if time not in generate_daily_slots(day):
        raise InvalidSlot(f"{as_day(day).isoformat()} {time}")


class SqlAppointmentStore:
    """Appointment store over the application's SQLAlchemy session."""

    def __init__(self, session_factory: Callable[[], object] | None = None) -> None:
        self._session_factory = session_factory

    def find_booked_times(self, doctor_id: str, day: date, statuses: Iterable[str]) -> set[str]:
        wanted = list(statuses)
        if not wanted:
            return set()
        stmt = (
            select(Appointment.time)
            .where(Appointment.doctor_id == doctor_id)
            .where(Appointment.day == as_day(day).isoformat())
            .where(Appointment.status.in_(wanted))
        )
        try:
            with session_scope(self._session_factory) as session:
                return set(session.execute(stmt).scalars().all())
        except SQLAlchemyError as exc:
            raise StoreUnavailable(str(exc)) from exc

    def book(
        self,
        doctor_id: str,
        day: date,
        time: str,
        *,
        user_id: str | None = None,
        reason: str = "",
        status: str = "CONFIRMED",
    ) -> str:
        validate_booking(day, time, status)
        now = datetime.now(timezone.utc).isoformat()
        appt_id = str(uuid.uuid4())
        try:
            with session_scope(self._session_factory) as session:
                if session.get(Doctor, doctor_id) is None:
                    raise DoctorNotFound(doctor_id)
                if user_id is not None and session.get(User, user_id) is None:
                    raise UserNotFound(user_id)
                session.add(
                    Appointment(
                        id=appt_id,
                        user_id=user_id,
                        doctor_id=doctor_id,
                        day=as_day(day).isoformat(),
                        time=time,
                        reason=reason or None,
                        status=status,
                        created_at=now,
                        updated_at=now,
                    )
                )
        except IntegrityError as exc:
            message = str(exc.orig) if exc.orig is not None else str(exc)
            if "FOREIGN KEY" in message.upper():
                # Doctor or patient removed between the check and the insert.
                raise AppointmentError(f"invalid_reference:{doctor_id}") from exc
            raise SlotAlreadyBooked(f"{doctor_id} {as_day(day).isoformat()} {time}") from exc
        except SQLAlchemyError as exc:
            raise StoreUnavailable(str(exc)) from exc
        log.debug("Booked %s for doctor %s on %s at %s", appt_id, doctor_id, day, time)
        return appt_id
