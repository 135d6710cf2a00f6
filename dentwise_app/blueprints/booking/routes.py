"""Doctor selection pages."""

from __future__ import annotations

from flask import Blueprint, abort, current_app, flash, redirect, render_template, request, session, url_for

from dentwise_app.blueprints.booking.common import current_store, next_available_payload, parse_day
from dentwise_app.services.availability import resolve_available_slots
from dentwise_app.services.doctors import area_choices, filter_doctors, get_doctor, list_active_doctors
from dentwise_app.services.slots import format_clock_label, format_day_label, is_weekend, next_booking_days

bp = Blueprint("booking", __name__)


@bp.route("/", methods=["GET"])
def index():
    return redirect(url_for("booking.select_doctor"))


@bp.route("/book", methods=["GET", "POST"])
def select_doctor():
    if request.method == "POST":
        doctor_id = (request.form.get("doctor_id") or "").strip()
        doctor = get_doctor(doctor_id) if doctor_id else None
        if doctor is None:
            abort(404)
        session["selected_doctor_id"] = doctor_id
        return redirect(url_for("booking.doctor_day", doctor_id=doctor_id))

    search = (request.args.get("q") or "").strip()
    area = (request.args.get("area") or "").strip() or None
    everyone = list_active_doctors()
    cards = []
    for doctor in filter_doctors(everyone, search=search, area=area):
        cards.append({**doctor, **next_available_payload(doctor["id"])})
    return render_template(
        "booking/select_doctor.html",
        doctors=cards,
        areas=area_choices(everyone),
        search=search,
        selected_area=area,
        selected_doctor_id=session.get("selected_doctor_id"),
    )


@bp.route("/book/<doctor_id>", methods=["GET"])
def doctor_day(doctor_id: str):
    doctor = get_doctor(doctor_id)
    if doctor is None:
        abort(404)
    days = next_booking_days(count=current_app.config["BOOKING_DAYS"])
    try:
        day = parse_day(request.args.get("day"), default=parse_day(days[0]))
    except ValueError:
        flash("Invalid date.", "err")
        return redirect(url_for("booking.doctor_day", doctor_id=doctor_id))

    result = resolve_available_slots(current_store(), doctor_id, day)
    return render_template(
        "booking/doctor_day.html",
        doctor=doctor,
        day=day,
        day_label=format_day_label(day),
        weekend=is_weekend(day),
        days=[{"value": d, "label": format_day_label(parse_day(d))} for d in days],
        slots=[{"time": slot, "label": format_clock_label(slot)} for slot in result.slots],
        degraded=not result.ok,
    )
