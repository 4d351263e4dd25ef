from datetime import UTC, date, datetime
from enum import Enum
from typing import Annotated

from pydantic import StringConstraints
from sqlalchemy import Index, text
from sqlmodel import Field, SQLModel

from docbook.models.schedule import HHMM_PATTERN


def _utc_naive_now() -> datetime:
    """Naive UTC for TIMESTAMP WITHOUT TIME ZONE columns."""
    return datetime.now(UTC).replace(tzinfo=None)


class AppointmentStatus(str, Enum):
    BOOKED = "booked"
    CANCELLED = "cancelled"


class Appointment(SQLModel, table=True):
    __tablename__ = "appointments"
    # At most one live booking per doctor/date/start time
    __table_args__ = (
        Index(
            "uq_appointments_booked_slot",
            "doctor_id",
            "appointment_date",
            "start_time",
            unique=True,
            postgresql_where=text("status = 'booked'"),
        ),
    )
    id: int | None = Field(default=None, primary_key=True)
    doctor_id: int = Field(foreign_key="doctors.id", index=True)
    appointment_date: date = Field(index=True)
    start_time: str  # HH:MM, matches a generated slot
    status: str = Field(default=AppointmentStatus.BOOKED.value)
    patient_name: str
    patient_phone: str | None = None
    reason: str | None = None
    created_at: datetime = Field(default_factory=_utc_naive_now)


class AppointmentCreate(SQLModel):
    doctor_id: int
    appointment_date: date
    start_time: Annotated[str, StringConstraints(pattern=HHMM_PATTERN)]
    patient_name: str = Field(min_length=1)
    patient_phone: str | None = None
    reason: str | None = None


class AppointmentPublic(SQLModel):
    id: int
    doctor_id: int
    appointment_date: date
    start_time: str
    status: str
    patient_name: str
    patient_phone: str | None = None
    reason: str | None = None
    created_at: datetime
