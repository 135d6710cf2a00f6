"""Doctor directory helpers: listing, filtering, avatars and duplicate cleanup."""

from __future__ import annotations

import re
from typing import Any, Iterable
from urllib.parse import quote

from sqlalchemy import delete, func, select

from dentwise_app.models import Appointment, Doctor
from dentwise_app.services.database import session_scope

BOROUGHS = ("Bronx", "Brooklyn", "Manhattan", "Queens")

# Words that carry no identity when building initials from a practice name.
_FILLER_WORDS = {"dental", "dr", "dr.", "dentist", "care", "center", "clinic", "office", "-", "|", ""}

AVATAR_COLORS = (
    "4f46e5",  # indigo
    "7c3aed",  # violet
    "0891b2",  # cyan
    "059669",  # emerald
    "dc2626",  # red
    "ea580c",  # orange
    "2563eb",  # blue
    "db2777",  # pink
)

_QUOTES = re.compile(r"^[\"']|[\"']$")


def strip_quotes(value: str) -> str:
    return _QUOTES.sub("", value or "").strip()


def avatar_initials(name: str) -> str:
    """Two-letter initials for a doctor or practice name."""
    clean = strip_quotes(name)
    words = clean.split()
    meaningful = [w for w in words if w.lower() not in _FILLER_WORDS]
    if not meaningful:
        return words[0][:2].upper() if words else "DC"
    if len(meaningful) == 1:
        return meaningful[0][:2].upper()
    return "".join(w[0] for w in meaningful[:2]).upper()


def avatar_color(name: str) -> str:
    clean = strip_quotes(name)
    if not clean:
        return AVATAR_COLORS[0]
    return AVATAR_COLORS[ord(clean[0]) % len(AVATAR_COLORS)]


def avatar_url(name: str) -> str:
    initials = avatar_initials(name)
    return (
        f"https://ui-avatars.com/api/?name={quote(initials)}&length=2&size=256"
        f"&font-size=0.5&bold=true&background={avatar_color(name)}&color=ffffff&format=svg"
    )


def format_phone_number(value: str) -> str:
    """Format US digits progressively: ``(212) 555-0100``."""
    if not value:
        return value
    digits = re.sub(r"\D", "", value)
    if len(digits) < 4:
        return digits
    if len(digits) < 7:
        return f"({digits[:3]}) {digits[3:]}"
    return f"({digits[:3]}) {digits[3:6]}-{digits[6:10]}"


def borough_for_area(area: str | None) -> str | None:
    if not area:
        return None
    lowered = area.lower()
    for borough in BOROUGHS:
        if borough.lower() in lowered:
            return borough
    return None


def area_choices(doctors: Iterable[dict[str, Any]]) -> list[str]:
    found = {borough_for_area(d.get("area")) for d in doctors}
    return sorted(b for b in found if b)


def filter_doctors(
    doctors: Iterable[dict[str, Any]],
    *,
    search: str | None = None,
    area: str | None = None,
) -> list[dict[str, Any]]:
    needle = (search or "").strip().lower()
    borough = (area or "").strip().lower()
    result = []
    for doctor in doctors:
        doctor_area = (doctor.get("area") or "").lower()
        if needle and not any(
            needle in value
            for value in ((doctor.get("name") or "").lower(), (doctor.get("speciality") or "").lower(), doctor_area)
        ):
            continue
        if borough and borough not in doctor_area:
            continue
        result.append(doctor)
    return result


def serialize_doctor(doctor: Doctor) -> dict[str, Any]:
    return {
        "id": doctor.id,
        "name": strip_quotes(doctor.name),
        "email": doctor.email,
        "phone": format_phone_number(doctor.phone),
        "speciality": doctor.speciality,
        "bio": doctor.bio,
        "address": doctor.address,
        "area": doctor.area,
        "borough": borough_for_area(doctor.area),
        "image_url": doctor.image_url or avatar_url(doctor.name),
        "initials": avatar_initials(doctor.name),
        "avatar_color": avatar_color(doctor.name),
        "gender": doctor.gender,
        "is_active": bool(doctor.is_active),
        "created_at": doctor.created_at,
    }


def list_active_doctors() -> list[dict[str, Any]]:
    with session_scope() as session:
        rows = session.execute(
            select(Doctor).where(Doctor.is_active.is_(True)).order_by(Doctor.name.asc())
        ).scalars().all()
        return [serialize_doctor(row) for row in rows]


def get_doctor(doctor_id: str) -> dict[str, Any] | None:
    with session_scope() as session:
        row = session.get(Doctor, doctor_id)
        if row is None or not row.is_active:
            return None
        return serialize_doctor(row)


def appointment_counts() -> dict[str, int]:
    with session_scope() as session:
        rows = session.execute(
            select(Appointment.doctor_id, func.count(Appointment.id)).group_by(Appointment.doctor_id)
        ).all()
        return {doctor_id: count for doctor_id, count in rows}


def _group(doctors: Iterable[Doctor], key) -> list[list[Doctor]]:
    groups: dict[str, list[Doctor]] = {}
    for doctor in doctors:
        groups.setdefault(key(doctor), []).append(doctor)
    return [group for group in groups.values() if len(group) > 1]


def find_duplicate_doctors() -> list[list[dict[str, Any]]]:
    """Groups sharing name and email (case/whitespace-insensitive), oldest first."""
    with session_scope() as session:
        rows = session.execute(
            select(Doctor).order_by(Doctor.created_at.asc(), Doctor.id.asc())
        ).scalars().all()
        groups = _group(rows, lambda d: f"{d.name.lower().strip()}-{d.email.lower().strip()}")
        return [[serialize_doctor(d) for d in group] for group in groups]


def same_name_groups() -> list[list[dict[str, Any]]]:
    with session_scope() as session:
        rows = session.execute(
            select(Doctor).where(Doctor.is_active.is_(True)).order_by(Doctor.name.asc(), Doctor.created_at.asc())
        ).scalars().all()
        return [[serialize_doctor(d) for d in group] for group in _group(rows, lambda d: d.name.lower().strip())]


def delete_doctor(doctor_id: str) -> None:
    """Remove a doctor together with every appointment booked against them."""
    with session_scope() as session:
        session.execute(delete(Appointment).where(Appointment.doctor_id == doctor_id))
        session.execute(delete(Doctor).where(Doctor.id == doctor_id))


def cleanup_duplicate_doctors(*, dry_run: bool = False) -> dict[str, Any]:
    """Keep the oldest doctor of each duplicate group and delete the rest."""
    groups = find_duplicate_doctors()
    kept: list[str] = []
    deleted: list[str] = []
    for group in groups:
        kept.append(group[0]["id"])
        for doctor in group[1:]:
            if not dry_run:
                delete_doctor(doctor["id"])
            deleted.append(doctor["id"])
    return {"groups": groups, "kept": kept, "deleted": deleted, "dry_run": dry_run}


def doctor_count() -> int:
    with session_scope() as session:
        return int(session.execute(select(func.count(Doctor.id))).scalar_one())
