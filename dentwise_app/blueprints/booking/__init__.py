"""Doctor selection and availability blueprints."""

from __future__ import annotations

# Import modules to register decorators and routes
from dentwise_app.blueprints.booking import api, routes

# Export the blueprints for registration
bp = routes.bp
api_bp = api.bp

__all__ = ["bp", "api_bp"]
