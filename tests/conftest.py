import os
import pathlib
import re
import shutil
import sys
import uuid
from datetime import date

import pytest

root = pathlib.Path(__file__).resolve().parents[1]
if str(root) not in sys.path:
    sys.path.insert(0, str(root))

from dentwise_app import create_app
from dentwise_app.extensions import db as sa_db
from dentwise_app.services.appointment_store import SlotAlreadyBooked, validate_booking
from dentwise_app.services.database import db as raw_db

MONDAY = date(2025, 1, 6)
TUESDAY = date(2025, 1, 7)
SATURDAY = date(2025, 1, 4)
SUNDAY = date(2025, 1, 5)


class FakeStore:
    """In-memory appointment store keyed by (doctor, day, time)."""

    def __init__(self):
        self.records = {}
        self.reads = []

    def find_booked_times(self, doctor_id, day, statuses):
        self.reads.append((doctor_id, day))
        wanted = set(statuses)
        return {
            time
            for (doc, booked_day, time), status in self.records.items()
            if doc == doctor_id and booked_day == day and status in wanted
        }

    def book(self, doctor_id, day, time, *, user_id=None, reason="", status="CONFIRMED"):
        validate_booking(day, time, status)
        key = (doctor_id, day, time)
        if self.records.get(key) in {"CONFIRMED", "COMPLETED"}:
            raise SlotAlreadyBooked(str(key))
        self.records[key] = status
        return str(uuid.uuid4())

    def fill_day(self, doctor_id, day, status="CONFIRMED"):
        from dentwise_app.services.slots import generate_daily_slots

        for time in generate_daily_slots(day):
            self.records[(doctor_id, day, time)] = status


class FailingStore:
    def __init__(self, fail_on=None):
        self.fail_on = fail_on
        self.reads = []

    def find_booked_times(self, doctor_id, day, statuses):
        self.reads.append(day)
        if self.fail_on is None or day == self.fail_on:
            raise ConnectionError("database is locked")
        return set()

    def book(self, *args, **kwargs):
        raise ConnectionError("database is locked")


@pytest.fixture
def fake_store():
    return FakeStore()


@pytest.fixture(scope="session")
def _template_db(tmp_path_factory):
    """Build a fully-migrated DB once per test session.

    Every function-scoped ``app`` fixture copies this file instead of
    running the Alembic upgrade again.
    """
    db_path = tmp_path_factory.mktemp("template") / "app.db"
    old_db = os.environ.get("DENTWISE_DB_PATH")
    old_key = os.environ.get("DENTWISE_SECRET_KEY")
    os.environ["DENTWISE_DB_PATH"] = str(db_path)
    os.environ["DENTWISE_SECRET_KEY"] = "test-secret"
    try:
        _app = create_app()
        with _app.app_context():
            pass
        # Flush any WAL pages into the main file before it gets copied.
        sa_db.engine.dispose()
    finally:
        if old_db is None:
            os.environ.pop("DENTWISE_DB_PATH", None)
        else:
            os.environ["DENTWISE_DB_PATH"] = old_db
        if old_key is None:
            os.environ.pop("DENTWISE_SECRET_KEY", None)
        else:
            os.environ["DENTWISE_SECRET_KEY"] = old_key
    return db_path


@pytest.fixture
def app(tmp_path, monkeypatch, _template_db):
    db_path = tmp_path / "app.db"
    shutil.copy2(_template_db, db_path)
    monkeypatch.setenv("DENTWISE_DB_PATH", str(db_path))
    monkeypatch.setenv("DENTWISE_SECRET_KEY", "test-secret")
    monkeypatch.setenv("DENTWISE_AUTO_MIGRATE", "0")  # Already migrated
    app = create_app()
    app.config.update(TESTING=True, WTF_CSRF_ENABLED=True)
    with app.app_context():
        yield app
    sa_db.engine.dispose()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_doctor(app):
    """Insert a doctor row directly and return its id."""

    def _make(name="Bright Smile Dental", email=None, area="Park Slope, Brooklyn", is_active=True, created_at=None):
        doctor_id = f"doc-{uuid.uuid4()}"
        conn = raw_db()
        try:
            conn.execute(
                "INSERT INTO doctors(id, name, email, phone, speciality, area, gender, is_active, created_at, updated_at) "
                "VALUES (?, ?, ?, ?, ?, ?, 'FEMALE', ?, COALESCE(?, datetime('now')), datetime('now'))",
                (
                    doctor_id,
                    name,
                    email or f"{doctor_id}@example.com",
                    "(212) 555-0100",
                    "General Dentistry",
                    area,
                    1 if is_active else 0,
                    created_at,
                ),
            )
            conn.commit()
        finally:
            conn.close()
        return doctor_id

    return _make


def _extract_csrf(response) -> str:
    match = re.search(r'name="csrf_token" value="([^"]+)"', response.data.decode("utf-8"))
    assert match, "CSRF token not found"
    return match.group(1)


@pytest.fixture
def get_csrf_token():
    return _extract_csrf
