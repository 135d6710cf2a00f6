from dentwise_app.services.appointment_store import SqlAppointmentStore
from dentwise_app.services.database import db

from conftest import MONDAY


def _count(sql, params=()):
    conn = db()
    try:
        return conn.execute(sql, params).fetchone()[0]
    finally:
        conn.close()


def test_seed_dentists_command(app, tmp_path):
    csv_path = tmp_path / "dentists.csv"
    csv_path.write_text(
        "Name,Address,Category,Notes,Likely Area,Email,Phone\n"
        "Queens Smiles,1 Main St,Dentist,,Flushing Queens,q@smiles.com,(718) 555-0199\n",
        encoding="utf-8",
    )
    runner = app.test_cli_runner()
    result = runner.invoke(args=["seed-dentists", "--csv", str(csv_path), "--seed", "5"])
    assert result.exit_code == 0, result.output
    assert "Successfully created: 1 dentists" in result.output
    assert "Flushing Queens: 1 dentists" in result.output
    assert _count("SELECT COUNT(*) FROM doctors") == 1


def test_seed_bookings_command(app, make_doctor):
    doctor_id = make_doctor()
    runner = app.test_cli_runner()
    result = runner.invoke(args=["seed-bookings", doctor_id, "--count", "4", "--seed", "1"])
    assert result.exit_code == 0, result.output
    assert f"for {doctor_id}" in result.output
    missing = runner.invoke(args=["seed-bookings", "doc-nope"])
    assert missing.exit_code != 0
    assert "not found" in missing.output


def test_cleanup_duplicates_command(app, make_doctor):
    make_doctor(name="Twin Dental", email="twin@example.com", created_at="2024-01-01 00:00:00")
    make_doctor(name="Twin Dental", email="TWIN@example.com", created_at="2024-02-01 00:00:00")
    runner = app.test_cli_runner()

    dry = runner.invoke(args=["cleanup-duplicates", "--dry-run"])
    assert dry.exit_code == 0, dry.output
    assert "Would delete 1 duplicate doctors." in dry.output
    assert _count("SELECT COUNT(*) FROM doctors") == 2

    real = runner.invoke(args=["cleanup-duplicates"])
    assert "Deleted 1 duplicate doctors." in real.output
    assert "Final doctor count: 1" in real.output

    again = runner.invoke(args=["cleanup-duplicates"])
    assert "No duplicate doctors found." in again.output


def test_doctors_report_command(app, make_doctor):
    doctor_id = make_doctor(name="Report Dental", email="report@example.com")
    SqlAppointmentStore().book(doctor_id, MONDAY, "10:00")
    result = app.test_cli_runner().invoke(args=["doctors-report"])
    assert result.exit_code == 0, result.output
    assert "Found 1 active doctors" in result.output
    assert "1. Report Dental (report@example.com) - Park Slope, Brooklyn - 1 appointments" in result.output


def test_next_slot_command(app, make_doctor):
    doctor_id = make_doctor()
    SqlAppointmentStore().book(doctor_id, MONDAY, "09:00")
    runner = app.test_cli_runner()
    result = runner.invoke(args=["next-slot", doctor_id, "--from", MONDAY.isoformat()])
    assert result.exit_code == 0, result.output
    assert "Mon, Jan 6 at 9:30 AM (2025-01-06 09:30)" in result.output

    none_found = runner.invoke(args=["next-slot", doctor_id, "--from", "2025-01-04", "--horizon", "2"])
    assert "No available slots" in none_found.output

    bad = runner.invoke(args=["next-slot", doctor_id, "--horizon", "-1"])
    assert bad.exit_code != 0
