"""Initial schema: doctors, appointments.

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "doctors",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("full_name", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column("phone", sa.String(), nullable=True),
        sa.Column("bio", sa.String(), nullable=True),
        sa.Column("specialties", postgresql.ARRAY(sa.String()), nullable=False),
        sa.Column("years_of_experience", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("consultation_fee", sa.Float(), nullable=True),
        sa.Column("clinic_name", sa.String(), nullable=True),
        sa.Column("clinic_address", sa.String(), nullable=True),
        sa.Column("clinic_city", sa.String(), nullable=True),
        sa.Column("clinic_latitude", sa.Float(), nullable=True),
        sa.Column("clinic_longitude", sa.Float(), nullable=True),
        sa.Column("offers_telemedicine", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("offers_in_clinic", sa.Boolean(), nullable=False, server_default="true"),
        sa.Column("supports_emergency", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("is_accepting_new_patients", sa.Boolean(), nullable=False, server_default="true"),
        sa.Column("status", sa.String(), nullable=False, server_default="active"),
        sa.Column("schedule_template", postgresql.JSONB(), nullable=False, server_default="[]"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_doctors_clinic_city"), "doctors", ["clinic_city"], unique=False)
    op.create_index(op.f("ix_doctors_status"), "doctors", ["status"], unique=False)
    op.create_index("ix_doctors_clinic_lat_lng", "doctors", ["clinic_latitude", "clinic_longitude"], unique=False)
    op.create_index("ix_doctors_specialties", "doctors", ["specialties"], unique=False, postgresql_using="gin")

    op.create_table(
        "appointments",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("doctor_id", sa.Integer(), nullable=False),
        sa.Column("appointment_date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.String(), nullable=False),
        sa.Column("status", sa.String(), nullable=False, server_default="booked"),
        sa.Column("patient_name", sa.String(), nullable=False),
        sa.Column("patient_phone", sa.String(), nullable=True),
        sa.Column("reason", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["doctor_id"], ["doctors.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_appointments_doctor_id"), "appointments", ["doctor_id"], unique=False)
    op.create_index(op.f("ix_appointments_appointment_date"), "appointments", ["appointment_date"], unique=False)
    op.create_index(
        "uq_appointments_booked_slot",
        "appointments",
        ["doctor_id", "appointment_date", "start_time"],
        unique=True,
        postgresql_where=sa.text("status = 'booked'"),
    )


def downgrade() -> None:
    op.drop_index("uq_appointments_booked_slot", table_name="appointments")
    op.drop_index(op.f("ix_appointments_appointment_date"), table_name="appointments")
    op.drop_index(op.f("ix_appointments_doctor_id"), table_name="appointments")
    op.drop_table("appointments")
    op.drop_index("ix_doctors_specialties", table_name="doctors")
    op.drop_index("ix_doctors_clinic_lat_lng", table_name="doctors")
    op.drop_index(op.f("ix_doctors_status"), table_name="doctors")
    op.drop_index(op.f("ix_doctors_clinic_city"), table_name="doctors")
    op.drop_table("doctors")
