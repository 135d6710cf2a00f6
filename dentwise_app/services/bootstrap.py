"""Bootstrap helper to ensure critical tables exist for first-time runs."""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Iterable


def _execute_statements(conn: sqlite3.Connection, statements: Iterable[str]) -> None:
    for stmt in statements:
        conn.execute(stmt)


def ensure_base_tables(db_path: Path) -> None:
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(db_path)
    conn.execute("PRAGMA foreign_keys=ON")
    try:
        _execute_statements(
            conn,
            [
                """
                CREATE TABLE IF NOT EXISTS users (
                    id TEXT PRIMARY KEY,
                    external_id TEXT NOT NULL UNIQUE,
                    email TEXT NOT NULL UNIQUE,
                    first_name TEXT,
                    last_name TEXT,
                    phone TEXT,
                    created_at TEXT NOT NULL DEFAULT (datetime('now'))
                )
                """,
                """
                CREATE TABLE IF NOT EXISTS doctors (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    email TEXT NOT NULL UNIQUE,
                    phone TEXT NOT NULL DEFAULT '',
                    speciality TEXT NOT NULL DEFAULT 'General Dentistry',
                    bio TEXT,
                    address TEXT,
                    area TEXT,
                    image_url TEXT,
                    gender TEXT NOT NULL DEFAULT 'MALE',
                    is_active INTEGER NOT NULL DEFAULT 1,
                    created_at TEXT NOT NULL DEFAULT (datetime('now')),
                    updated_at TEXT NOT NULL DEFAULT (datetime('now')),
                    CHECK(gender IN ('MALE','FEMALE'))
                )
                """,
                """
                CREATE INDEX IF NOT EXISTS idx_doctors_name ON doctors(name)
                """,
                """
                CREATE TABLE IF NOT EXISTS appointments (
                    id TEXT PRIMARY KEY,
                    user_id TEXT,
                    doctor_id TEXT NOT NULL,
                    day TEXT NOT NULL,
                    time TEXT NOT NULL,
                    duration_minutes INTEGER NOT NULL DEFAULT 30,
                    reason TEXT,
                    status TEXT NOT NULL DEFAULT 'CONFIRMED',
                    created_at TEXT NOT NULL DEFAULT (datetime('now')),
                    updated_at TEXT NOT NULL DEFAULT (datetime('now')),
                    FOREIGN KEY(user_id) REFERENCES users(id) ON DELETE SET NULL,
                    FOREIGN KEY(doctor_id) REFERENCES doctors(id) ON DELETE CASCADE,
                    CHECK(status IN ('CONFIRMED','COMPLETED','CANCELLED'))
                )
                """,
                """
                CREATE UNIQUE INDEX IF NOT EXISTS uq_appointments_doctor_slot
                ON appointments(doctor_id, day, time)
                WHERE status != 'CANCELLED'
                """,
                """
                CREATE INDEX IF NOT EXISTS idx_appointments_doctor_day
                ON appointments(doctor_id, day)
                """,
            ],
        )
        conn.commit()
    finally:
        conn.close()
