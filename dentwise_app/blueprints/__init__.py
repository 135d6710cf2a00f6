"""Blueprint registration."""

from __future__ import annotations

from flask import Flask


def register_blueprints(app: Flask) -> None:
    from dentwise_app.blueprints.booking import api_bp, bp

    app.register_blueprint(bp)
    app.register_blueprint(api_bp)


__all__ = ["register_blueprints"]
