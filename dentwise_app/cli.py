"""Flask CLI commands for migrations, seeding, cleanup and reporting."""

from __future__ import annotations

import random
from datetime import date
from pathlib import Path

import click
from alembic import command
from flask import current_app
from flask.cli import AppGroup, with_appcontext

from dentwise_app.services.auto_migrate import alembic_config
from dentwise_app.services.availability import (
    AvailabilityUnavailable,
    InvalidAvailabilityRequest,
    find_next_available_slot,
)
from dentwise_app.services.doctors import (
    appointment_counts,
    cleanup_duplicate_doctors,
    doctor_count,
    get_doctor,
    list_active_doctors,
    same_name_groups,
)
from dentwise_app.services.seeding import ensure_system_user, generate_random_bookings, seed_dentists


def _store():
    return current_app.extensions["appointment_store"]


def _rng(seed: int | None) -> random.Random:
    return random.Random(seed) if seed is not None else random.Random()


def register_cli(app) -> None:
    db_group = AppGroup("db")

    @db_group.command("upgrade")
    @with_appcontext
    def upgrade() -> None:
        cfg = alembic_config(current_app.config["SQLALCHEMY_DATABASE_URI"])
        if cfg is None:
            raise click.ClickException("alembic.ini or migrations/ not found.")
        command.upgrade(cfg, "head")
        click.echo("Database upgraded to head.")

    app.cli.add_command(db_group)

    @app.cli.command("seed-dentists")
    @click.option("--csv", "csv_path", required=True, type=click.Path(exists=True, dir_okay=False))
    @click.option("--seed", type=int, default=None, help="Random seed for reproducible demo data")
    @with_appcontext
    def seed_dentists_command(csv_path: str, seed: int | None) -> None:
        report = seed_dentists(Path(csv_path), _store(), rng=_rng(seed))
        click.echo(f"Found {report['found']} dentists in CSV")
        click.echo(f"Successfully created: {report['created']} dentists")
        click.echo(f"Skipped (duplicates): {report['skipped']} dentists")
        if report["failed"]:
            click.echo(f"Failed: {report['failed']} dentists")
        if report["areas"]:
            click.echo("Distribution by area:")
            for area, count in report["areas"]:
                click.echo(f"   {area}: {count} dentists")

    @app.cli.command("seed-bookings")
    @click.argument("doctor_id")
    @click.option("--count", type=int, default=5, show_default=True)
    @click.option("--seed", type=int, default=None)
    @with_appcontext
    def seed_bookings(doctor_id: str, count: int, seed: int | None) -> None:
        if get_doctor(doctor_id) is None:
            raise click.ClickException(f"Doctor '{doctor_id}' not found.")
        created = generate_random_bookings(
            _store(), doctor_id, count, user_id=ensure_system_user(), rng=_rng(seed)
        )
        click.echo(f"Created {created} bookings for {doctor_id}.")

    @app.cli.command("cleanup-duplicates")
    @click.option("--dry-run", is_flag=True, default=False)
    @with_appcontext
    def cleanup_duplicates(dry_run: bool) -> None:
        report = cleanup_duplicate_doctors(dry_run=dry_run)
        if not report["groups"]:
            click.echo("No duplicate doctors found.")
            return
        click.echo(f"Found {len(report['groups'])} groups of duplicate doctors:")
        for group in report["groups"]:
            keep, *rest = group
            click.echo(f"Group: {keep['name']} ({len(group)} duplicates)")
            click.echo(f"   Keeping: {keep['id']} (created: {keep['created_at']})")
            for doctor in rest:
                click.echo(f"   Deleting: {doctor['id']} (created: {doctor['created_at']})")
        verb = "Would delete" if dry_run else "Deleted"
        click.echo(f"{verb} {len(report['deleted'])} duplicate doctors.")
        click.echo(f"Final doctor count: {doctor_count()}")

    @app.cli.command("doctors-report")
    @with_appcontext
    def doctors_report() -> None:
        doctors = list_active_doctors()
        counts = appointment_counts()
        click.echo(f"Found {len(doctors)} active doctors")
        groups = same_name_groups()
        if groups:
            click.echo("Doctors sharing a name:")
            for group in groups:
                click.echo(f'Name: "{group[0]["name"]}" ({len(group)} doctors)')
                for doctor in group:
                    click.echo(f"   - ID: {doctor['id']}  Email: {doctor['email']}  Area: {doctor['area'] or 'No area'}")
        else:
            click.echo("No doctors with duplicate names found")
        click.echo("Sample of first 10 doctors:")
        for index, doctor in enumerate(doctors[:10], start=1):
            click.echo(
                f"{index}. {doctor['name']} ({doctor['email']}) - {doctor['area'] or 'No area'}"
                f" - {counts.get(doctor['id'], 0)} appointments"
            )

    @app.cli.command("next-slot")
    @click.argument("doctor_id")
    @click.option("--from", "from_day", default=None, help="Start day (YYYY-MM-DD), defaults to today")
    @click.option("--horizon", type=int, default=None, help="Days to search")
    @with_appcontext
    def next_slot(doctor_id: str, from_day: str | None, horizon: int | None) -> None:
        if get_doctor(doctor_id) is None:
            raise click.ClickException(f"Doctor '{doctor_id}' not found.")
        try:
            start = date.fromisoformat(from_day) if from_day else None
            found = find_next_available_slot(
                _store(),
                doctor_id,
                start,
                horizon if horizon is not None else current_app.config["SEARCH_HORIZON_DAYS"],
            )
        except (ValueError, InvalidAvailabilityRequest) as exc:
            raise click.BadParameter(str(exc)) from exc
        except AvailabilityUnavailable as exc:
            raise click.ClickException(f"Availability temporarily unavailable ({exc}).") from exc
        if found is None:
            click.echo("No available slots")
            return
        click.echo(f"{found.formatted_date} at {found.formatted_time} ({found.day.isoformat()} {found.time})")
