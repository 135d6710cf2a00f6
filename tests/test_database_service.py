import importlib

from dentwise_app.services.database import db


def test_database_service_imports():
    m = importlib.import_module("dentwise_app.services.database")
    assert hasattr(m, "db")
    assert hasattr(m, "session_scope")


def test_sqlite_pragmas_active(app):
    conn = db()
    try:
        mode = conn.execute("PRAGMA journal_mode").fetchone()[0]
        timeout = conn.execute("PRAGMA busy_timeout").fetchone()[0]
        foreign = conn.execute("PRAGMA foreign_keys").fetchone()[0]
    finally:
        conn.close()
    assert mode.lower() == "wal"
    assert timeout == 5000
    assert foreign == 1


def test_base_tables_exist(app):
    conn = db()
    try:
        tables = {row[0] for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")}
        indexes = {row[0] for row in conn.execute("SELECT name FROM sqlite_master WHERE type='index'")}
    finally:
        conn.close()
    assert {"users", "doctors", "appointments"} <= tables
    assert "uq_appointments_doctor_slot" in indexes
