"""Helpers shared by the booking page and JSON routes."""

from __future__ import annotations

from datetime import date
from typing import Any

from flask import current_app

from dentwise_app.services.appointment_store import AppointmentStore
from dentwise_app.services.availability import AvailabilityUnavailable, find_next_available_slot


def current_store() -> AppointmentStore:
    return current_app.extensions["appointment_store"]


def parse_day(raw: str | None, default: date | None = None) -> date:
    """ISO day from a query string; raises ValueError on garbage."""
    raw = (raw or "").strip()
    if not raw:
        return default or date.today()
    return date.fromisoformat(raw)


def next_available_payload(doctor_id: str, from_day: date | None = None) -> dict[str, Any]:
    """Next slot for a doctor card; ``degraded`` marks a failed store read."""
    try:
        found = find_next_available_slot(
            current_store(),
            doctor_id,
            from_day,
            current_app.config["SEARCH_HORIZON_DAYS"],
        )
    except AvailabilityUnavailable as exc:
        current_app.logger.warning("Next slot search degraded for %s: %s", doctor_id, exc)
        return {"next_available": None, "degraded": True}
    return {"next_available": found.to_dict() if found else None, "degraded": False}
