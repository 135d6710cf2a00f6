"""Dentwise package exposing the Flask application factory."""

from __future__ import annotations

import os
from pathlib import Path
from datetime import timedelta

from flask import Flask, jsonify, request
from flask_wtf.csrf import CSRFError

from .blueprints import register_blueprints
from .extensions import init_extensions
from .services.auto_migrate import auto_upgrade
from .services.appointment_store import SqlAppointmentStore
from .services.bootstrap import ensure_base_tables
from .services.errors import record_exception
from .cli import register_cli


def _data_root(base_dir: Path, override: Path | None = None) -> Path:
    root = override if override else base_dir / "data"
    root.mkdir(parents=True, exist_ok=True)
    for sub in ("logs", "imports"):
        (root / sub).mkdir(parents=True, exist_ok=True)
    return root


def _repo_root() -> Path:
    return Path(__file__).resolve().parent.parent


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def create_app() -> Flask:
    db_override = os.getenv("DENTWISE_DB_PATH")
    override_root = Path(db_override).parent if db_override else None
    data_root = _data_root(_repo_root(), override_root)
    db_path = Path(db_override) if db_override else data_root / "app.db"

    app = Flask(__name__)

    secret_key = os.getenv("DENTWISE_SECRET_KEY")
    if not secret_key:
        secret_key = os.urandom(32)

    app.config.update(
        SECRET_KEY=secret_key,
        SESSION_COOKIE_NAME="dentwise_session",
        SESSION_COOKIE_HTTPONLY=True,
        SESSION_COOKIE_SAMESITE="Lax",
        PERMANENT_SESSION_LIFETIME=timedelta(hours=12),
        SQLALCHEMY_DATABASE_URI=f"sqlite:///{db_path}",
        SQLALCHEMY_ENGINE_OPTIONS={"connect_args": {"check_same_thread": False}},
        RATELIMIT_STORAGE_URI=os.getenv("RATELIMIT_STORAGE_URI", "memory://"),
        API_RATE_LIMIT=os.getenv("DENTWISE_API_RATE_LIMIT", "120 per minute"),
        DATA_ROOT=str(data_root),
        DENTWISE_DB=str(db_path),
        SEARCH_HORIZON_DAYS=max(_int_env("DENTWISE_SEARCH_HORIZON_DAYS", 7), 0),
        BOOKING_DAYS=max(_int_env("DENTWISE_BOOKING_DAYS", 5), 1),
    )

    init_extensions(app)
    app.extensions["appointment_store"] = SqlAppointmentStore()
    register_blueprints(app)
    auto_upgrade(app)
    ensure_base_tables(Path(app.config["DENTWISE_DB"]))
    register_cli(app)

    @app.errorhandler(CSRFError)
    def handle_csrf_error(e):
        app.logger.warning("CSRF validation failed: %s", e.description)
        return jsonify({"success": False, "errors": [f"CSRF validation failed: {e.description}"]}), 400

    @app.errorhandler(429)
    def handle_rate_limited(e):
        return jsonify({"success": False, "errors": ["Too many requests"]}), 429

    @app.errorhandler(500)
    def handle_internal_error(e):
        record_exception(request.endpoint or request.path, getattr(e, "original_exception", None) or e)
        return jsonify({"success": False, "errors": ["Internal server error"]}), 500

    return app


__all__ = ["create_app"]
