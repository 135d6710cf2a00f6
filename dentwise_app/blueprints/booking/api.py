"""JSON endpoints for doctors and their open slots."""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from dentwise_app.blueprints.booking.common import current_store, next_available_payload, parse_day
from dentwise_app.extensions import limiter
from dentwise_app.services.availability import (
    AvailabilityUnavailable,
    InvalidAvailabilityRequest,
    find_next_available_slot,
    resolve_available_slots,
)
from dentwise_app.services.doctors import area_choices, filter_doctors, get_doctor, list_active_doctors
from dentwise_app.services.errors import record_exception
from dentwise_app.services.slots import format_clock_label

bp = Blueprint("booking_api", __name__, url_prefix="/api")


def _api_limit() -> str:
    return current_app.config["API_RATE_LIMIT"]


def _doctor_not_found():
    return jsonify({"success": False, "error": "Doctor not found."}), 404


def _internal_error():
    return jsonify({"success": False, "error": "Internal server error"}), 500


@bp.route("/doctors", methods=["GET"])
@limiter.limit(_api_limit)
def doctors():
    try:
        everyone = list_active_doctors()
        matches = filter_doctors(everyone, search=request.args.get("q"), area=request.args.get("area"))
        payload = []
        for doctor in matches:
            payload.append({**doctor, **next_available_payload(doctor["id"])})
    except Exception as exc:
        record_exception("api.doctors", exc)
        return _internal_error()
    return jsonify({"success": True, "doctors": payload, "areas": area_choices(everyone)})


@bp.route("/doctors/<doctor_id>/slots", methods=["GET"])
@limiter.limit(_api_limit)
def doctor_slots(doctor_id: str):
    try:
        if get_doctor(doctor_id) is None:
            return _doctor_not_found()
        try:
            day = parse_day(request.args.get("day"))
        except ValueError:
            return jsonify({"success": False, "error": "Invalid day, expected YYYY-MM-DD."}), 400
        result = resolve_available_slots(current_store(), doctor_id, day)
    except Exception as exc:
        record_exception("api.doctor_slots", exc)
        return _internal_error()

    body = {
        "success": result.ok,
        "doctor_id": doctor_id,
        "day": day.isoformat(),
        "slots": [{"time": slot, "label": format_clock_label(slot)} for slot in result.slots],
        "degraded": not result.ok,
    }
    if not result.ok:
        body["error"] = "Availability is temporarily unavailable."
        return jsonify(body), 503
    return jsonify(body)


@bp.route("/doctors/<doctor_id>/next-slot", methods=["GET"])
@limiter.limit(_api_limit)
def doctor_next_slot(doctor_id: str):
    try:
        if get_doctor(doctor_id) is None:
            return _doctor_not_found()
        try:
            from_day = parse_day(request.args.get("from"))
            horizon_raw = request.args.get("horizon")
            horizon = int(horizon_raw) if horizon_raw else current_app.config["SEARCH_HORIZON_DAYS"]
            found = find_next_available_slot(current_store(), doctor_id, from_day, horizon)
        except (ValueError, InvalidAvailabilityRequest) as exc:
            return jsonify({"success": False, "error": str(exc)}), 400
        except AvailabilityUnavailable:
            return (
                jsonify({"success": False, "degraded": True, "error": "Availability is temporarily unavailable."}),
                503,
            )
    except Exception as exc:
        record_exception("api.doctor_next_slot", exc)
        return _internal_error()
    return jsonify({"success": True, "degraded": False, "next_available": found.to_dict() if found else None})
