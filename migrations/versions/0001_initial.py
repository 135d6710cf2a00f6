"""Initial schema: users, doctors and appointments."""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def _create_index_if_not_exists(name: str, table: str, columns: str, *, unique: bool = False, where: str = "") -> None:
    kind = "UNIQUE INDEX" if unique else "INDEX"
    suffix = f" WHERE {where}" if where else ""
    op.execute(f"CREATE {kind} IF NOT EXISTS {name} ON {table}({columns}){suffix}")


def upgrade() -> None:
    bind = op.get_bind()
    inspector = sa.inspect(bind)
    tables = set(inspector.get_table_names())

    if "users" not in tables:
        op.create_table(
            "users",
            sa.Column("id", sa.Text(), primary_key=True),
            sa.Column("external_id", sa.Text(), nullable=False, unique=True),
            sa.Column("email", sa.Text(), nullable=False, unique=True),
            sa.Column("first_name", sa.Text(), nullable=True),
            sa.Column("last_name", sa.Text(), nullable=True),
            sa.Column("phone", sa.Text(), nullable=True),
            sa.Column("created_at", sa.Text(), server_default=sa.text("(datetime('now'))"), nullable=False),
        )

    if "doctors" not in tables:
        op.create_table(
            "doctors",
            sa.Column("id", sa.Text(), primary_key=True),
            sa.Column("name", sa.Text(), nullable=False),
            sa.Column("email", sa.Text(), nullable=False, unique=True),
            sa.Column("phone", sa.Text(), nullable=False, server_default=""),
            sa.Column("speciality", sa.Text(), nullable=False, server_default="General Dentistry"),
            sa.Column("bio", sa.Text(), nullable=True),
            sa.Column("address", sa.Text(), nullable=True),
            sa.Column("area", sa.Text(), nullable=True),
            sa.Column("image_url", sa.Text(), nullable=True),
            sa.Column("gender", sa.Text(), nullable=False, server_default="MALE"),
            sa.Column("is_active", sa.Integer(), nullable=False, server_default="1"),
            sa.Column("created_at", sa.Text(), server_default=sa.text("(datetime('now'))"), nullable=False),
            sa.Column("updated_at", sa.Text(), server_default=sa.text("(datetime('now'))"), nullable=False),
            sa.CheckConstraint("gender IN ('MALE','FEMALE')", name="ck_doctors_gender"),
        )

    _create_index_if_not_exists("idx_doctors_name", "doctors", "name")

    if "appointments" not in tables:
        op.create_table(
            "appointments",
            sa.Column("id", sa.Text(), primary_key=True),
            sa.Column("user_id", sa.Text(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
            sa.Column("doctor_id", sa.Text(), sa.ForeignKey("doctors.id", ondelete="CASCADE"), nullable=False),
            sa.Column("day", sa.Text(), nullable=False),
            sa.Column("time", sa.Text(), nullable=False),
            sa.Column("duration_minutes", sa.Integer(), nullable=False, server_default="30"),
            sa.Column("reason", sa.Text(), nullable=True),
            sa.Column("status", sa.Text(), nullable=False, server_default="CONFIRMED"),
            sa.Column("created_at", sa.Text(), server_default=sa.text("(datetime('now'))"), nullable=False),
            sa.Column("updated_at", sa.Text(), server_default=sa.text("(datetime('now'))"), nullable=False),
            sa.CheckConstraint(
                "status IN ('CONFIRMED','COMPLETED','CANCELLED')",
                name="ck_appointments_status",
            ),
        )

    _create_index_if_not_exists(
        "uq_appointments_doctor_slot",
        "appointments",
        "doctor_id, day, time",
        unique=True,
        where="status != 'CANCELLED'",
    )
    _create_index_if_not_exists("idx_appointments_doctor_day", "appointments", "doctor_id, day")


def downgrade() -> None:
    op.execute("DROP INDEX IF EXISTS idx_appointments_doctor_day")
    op.execute("DROP INDEX IF EXISTS uq_appointments_doctor_slot")
    op.drop_table("appointments")
    op.execute("DROP INDEX IF EXISTS idx_doctors_name")
    op.drop_table("doctors")
    op.drop_table("users")
