"""Demo data: dentist CSV import and random bookings."""

from __future__ import annotations

import csv
import io
import logging
import random
import re
import uuid
from collections import Counter
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from dentwise_app.models import Doctor, User
from dentwise_app.services.appointment_store import AppointmentError, AppointmentStore, SlotAlreadyBooked
from dentwise_app.services.database import session_scope
from dentwise_app.services.doctors import avatar_url, strip_quotes
from dentwise_app.services.slots import generate_daily_slots

log = logging.getLogger(__name__)

CSV_COLUMNS = ("Name", "Address", "Category", "Notes", "Likely Area", "Email", "Phone")

SYSTEM_USER_EMAIL = "system@dentwise.com"
DEFAULT_AREA = "New York"
BOOKING_WINDOW_DAYS = 7
BOOKINGS_PER_DOCTOR = (3, 8)

_NON_LOCATION_WORDS = {"dentist", "dental", "office", "practice"}

# Checked in order; the first match wins.
_SPECIALTY_RULES = (
    ("pediatric", True, "Pediatric Dentistry"),
    ("orthodontic", True, "Orthodontics"),
    ("oral surgeon", False, "Oral Surgery"),
    ("cosmetic", True, "Cosmetic Dentistry"),
    ("implant", True, "Dental Implants"),
    ("endodontist", False, "Endodontics"),
    ("periodontist", False, "Periodontics"),
)

_BIO_TEMPLATES = (
    "{practice} specializes in {specialty}, serving the {area} community with exceptional care and modern techniques.",
    "Dedicated to providing comprehensive {specialty} services in {area}. Patient comfort and satisfaction are our top priorities.",
    "Experienced dental professionals at {practice} offering {specialty} in the heart of {area}.",
    "{practice} brings years of expertise in {specialty} to {area}, combining advanced technology with compassionate care.",
    "Your trusted {specialty} practice in {area}, committed to helping you achieve and maintain optimal oral health.",
)


def parse_dentist_csv(content: str) -> list[dict[str, str]]:
    """Parse the dentist list; rows with fewer than seven columns are dropped."""
    rows = [row for row in csv.reader(io.StringIO(content)) if any(cell.strip() for cell in row)]
    if not rows:
        return []
    dentists = []
    for row in rows[1:]:
        if len(row) < len(CSV_COLUMNS):
            continue
        dentists.append({col: strip_quotes(value) for col, value in zip(CSV_COLUMNS, row)})
    return dentists


def infer_specialty(category: str, name: str) -> str:
    category = (category or "").lower()
    name = (name or "").lower()
    for needle, check_name, specialty in _SPECIALTY_RULES:
        if needle in category or (check_name and needle in name):
            return specialty
    return "General Dentistry"


def practice_name(name: str) -> str:
    if any(marker in name for marker in ("Dr.", "DDS", "DMD")):
        return re.split(r",|Dr\.|DDS|DMD", name)[0].strip()
    return name


def generate_bio(specialty: str, area: str, name: str, rng: random.Random | None = None) -> str:
    rng = rng or random.Random()
    template = rng.choice(_BIO_TEMPLATES)
    return template.format(practice=practice_name(name), specialty=specialty.lower(), area=area)


def clean_area(notes: str, likely_area: str) -> str:
    for candidate in (likely_area, notes):
        cleaned = strip_quotes(candidate or "")
        if cleaned and cleaned.lower() not in _NON_LOCATION_WORDS:
            return cleaned
    return DEFAULT_AREA


def clean_phone_number(phone: str, rng: random.Random | None = None) -> str:
    """Keep already formatted numbers, otherwise make up a plausible one."""
    if phone and "(" in phone:
        return phone.strip()
    rng = rng or random.Random()
    return f"({rng.randint(100, 999)}) {rng.randint(100, 999)}-{rng.randint(1000, 9999)}"


def dentist_email(row: dict[str, str]) -> str:
    email = row.get("Email") or ""
    if "@" in email:
        return email
    local = re.sub(r"[^a-z0-9]", "", row["Name"].lower())
    return f"{local}@dentwise.app"


def ensure_system_user() -> str:
    """Id of the placeholder user owning generated bookings."""
    with session_scope() as session:
        existing = session.execute(select(User.id).where(User.email == SYSTEM_USER_EMAIL)).scalar_one_or_none()
        if existing:
            return existing
        user = User(
            id=str(uuid.uuid4()),
            external_id="system",
            email=SYSTEM_USER_EMAIL,
            first_name="System",
            last_name="Generated",
            created_at=datetime.now(timezone.utc).isoformat(),
        )
        session.add(user)
        return user.id


def generate_random_bookings(
    store: AppointmentStore,
    doctor_id: str,
    count: int = 5,
    *,
    user_id: str | None = None,
    today: date | None = None,
    rng: random.Random | None = None,
) -> int:
    """Book up to ``count`` random weekday slots in the coming week.

    Draws landing on a weekend or on an already booked slot are dropped, so
    the number created can be lower than ``count``.
    """
    rng = rng or random.Random()
    today = today or date.today()
    created = 0
    for _ in range(count):
        day = today + timedelta(days=rng.randrange(BOOKING_WINDOW_DAYS))
        slots = generate_daily_slots(day)
        if not slots:
            continue
        try:
            store.book(doctor_id, day, rng.choice(slots), user_id=user_id, reason="Patient consultation")
        except SlotAlreadyBooked:
            continue
        created += 1
    return created


def seed_dentists(
    csv_path: Path,
    store: AppointmentStore,
    *,
    rng: random.Random | None = None,
    today: date | None = None,
) -> dict[str, Any]:
    """Create doctors from the CSV and give each a handful of bookings."""
    rng = rng or random.Random()
    dentists = parse_dentist_csv(Path(csv_path).read_text(encoding="utf-8"))
    log.info("Found %d dentists in %s", len(dentists), csv_path)

    system_user_id = ensure_system_user()
    created = 0
    skipped = 0
    failed = 0
    areas: Counter[str] = Counter()

    for row in dentists:
        name = row.get("Name") or ""
        if not name or name == "Name":
            skipped += 1
            continue
        email = dentist_email(row)
        specialty = infer_specialty(row["Category"], name)
        area = clean_area(row["Notes"], row["Likely Area"])
        areas[area] += 1
        doctor_id = str(uuid.uuid4())
        now = datetime.now(timezone.utc).isoformat()
        try:
            with session_scope() as session:
                if session.execute(select(Doctor.id).where(Doctor.email == email)).scalar_one_or_none():
                    skipped += 1
                    continue
                session.add(
                    Doctor(
                        id=doctor_id,
                        name=name,
                        email=email,
                        phone=clean_phone_number(row["Phone"], rng),
                        speciality=specialty,
                        bio=generate_bio(specialty, area, name, rng),
                        address=row["Address"] or "",
                        area=area,
                        image_url=avatar_url(name),
                        gender=rng.choice(("MALE", "FEMALE")),
                        is_active=True,
                        created_at=now,
                        updated_at=now,
                    )
                )
        except IntegrityError:
            skipped += 1
            continue
        except Exception as exc:
            log.error("Error creating %s: %s", name, exc)
            failed += 1
            continue

        try:
            generate_random_bookings(
                store,
                doctor_id,
                rng.randint(*BOOKINGS_PER_DOCTOR),
                user_id=system_user_id,
                today=today,
                rng=rng,
            )
        except AppointmentError as exc:
            log.error("Created %s but could not book appointments: %s", name, exc)
            failed += 1
            continue
        created += 1
        if created % 25 == 0:
            log.info("Created %d dentists...", created)

    return {
        "found": len(dentists),
        "created": created,
        "skipped": skipped,
        "failed": failed,
        "areas": areas.most_common(10),
    }
