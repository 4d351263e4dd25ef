from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import model_validator
from sqlalchemy import Column, Index, String
from sqlalchemy.dialects.postgresql import ARRAY, JSONB
from sqlmodel import Field, SQLModel

from docbook.models.schedule import (
    DayTemplate,
    SessionTemplate,
    WeeklyScheduleTemplate,
    load_weekly_schedule,
)


def _utc_naive_now() -> datetime:
    """Naive UTC for TIMESTAMP WITHOUT TIME ZONE columns."""
    return datetime.now(UTC).replace(tzinfo=None)


class DoctorStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class Doctor(SQLModel, table=True):
    __tablename__ = "doctors"
    __table_args__ = (
        Index("ix_doctors_clinic_lat_lng", "clinic_latitude", "clinic_longitude"),
        Index("ix_doctors_specialties", "specialties", postgresql_using="gin"),
    )
    id: int | None = Field(default=None, primary_key=True)
    full_name: str
    email: str | None = None
    phone: str | None = None
    bio: str | None = None
    specialties: list[str] = Field(default_factory=list, sa_column=Column(ARRAY(String), nullable=False))
    years_of_experience: int = 0
    consultation_fee: float | None = None

    clinic_name: str | None = None
    clinic_address: str | None = None
    clinic_city: str | None = Field(default=None, index=True)
    clinic_latitude: float | None = None
    clinic_longitude: float | None = None

    offers_telemedicine: bool = False
    offers_in_clinic: bool = True
    supports_emergency: bool = False
    is_accepting_new_patients: bool = True
    status: str = Field(default=DoctorStatus.ACTIVE.value, index=True)

    # List of DayTemplate dicts
    schedule_template: list[dict[str, Any]] = Field(
        default_factory=list, sa_column=Column(JSONB, nullable=False)
    )
    created_at: datetime = Field(default_factory=_utc_naive_now)

    def weekly_schedule(self) -> WeeklyScheduleTemplate:
        return load_weekly_schedule(self.schedule_template)


class ClinicInfo(SQLModel):
    name: str | None = None
    address: str | None = None
    city: str | None = None
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)


class ConsultationModes(SQLModel):
    telemedicine: bool = False
    in_clinic: bool = True


class DoctorCreate(SQLModel):
    full_name: str = Field(min_length=1)
    email: str | None = None
    phone: str | None = None
    bio: str | None = None
    specialties: list[str] = Field(default_factory=list)
    years_of_experience: int = Field(default=0, ge=0)
    consultation_fee: float | None = Field(default=None, ge=0)
    clinic: ClinicInfo = Field(default_factory=ClinicInfo)
    consultation_modes: ConsultationModes = Field(default_factory=ConsultationModes)
    supports_emergency: bool = False
    is_accepting_new_patients: bool = True
    schedule_template: list[DayTemplate] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_schedule(self) -> "DoctorCreate":
        working_days: set[int] = set()
        for day in self.schedule_template:
            if day.is_working:
                if day.day_of_week in working_days:
                    raise ValueError(f"more than one working entry for day_of_week {day.day_of_week}")
                working_days.add(day.day_of_week)
            for s in day.sessions:
                _check_session(s)
        return self


def _check_session(s: SessionTemplate) -> None:
    if s.start_time >= s.end_time:
        raise ValueError(f"session start_time {s.start_time} must be before end_time {s.end_time}")
    if s.slot_duration_minutes <= 0:
        raise ValueError("slot_duration_minutes must be positive")


class DoctorPublic(SQLModel):
    id: int
    full_name: str
    email: str | None = None
    phone: str | None = None
    bio: str | None = None
    specialties: list[str]
    years_of_experience: int
    consultation_fee: float | None = None
    clinic: ClinicInfo
    consultation_modes: ConsultationModes
    supports_emergency: bool
    is_accepting_new_patients: bool
    status: str
    schedule_template: list[DayTemplate]
    created_at: datetime
    distance_km: float | None = None


def doctor_from_create(data: DoctorCreate) -> Doctor:
    return Doctor(
        full_name=data.full_name,
        email=data.email,
        phone=data.phone,
        bio=data.bio,
        specialties=list(data.specialties),
        years_of_experience=data.years_of_experience,
        consultation_fee=data.consultation_fee,
        clinic_name=data.clinic.name,
        clinic_address=data.clinic.address,
        clinic_city=data.clinic.city,
        clinic_latitude=data.clinic.latitude,
        clinic_longitude=data.clinic.longitude,
        offers_telemedicine=data.consultation_modes.telemedicine,
        offers_in_clinic=data.consultation_modes.in_clinic,
        supports_emergency=data.supports_emergency,
        is_accepting_new_patients=data.is_accepting_new_patients,
        schedule_template=[d.model_dump() for d in data.schedule_template],
    )


def doctor_to_public(doctor: Doctor, distance_km: float | None = None) -> DoctorPublic:
    return DoctorPublic(
        id=int(doctor.id) if doctor.id is not None else 0,
        full_name=doctor.full_name,
        email=doctor.email,
        phone=doctor.phone,
        bio=doctor.bio,
        specialties=list(doctor.specialties or []),
        years_of_experience=doctor.years_of_experience,
        consultation_fee=doctor.consultation_fee,
        clinic=ClinicInfo(
            name=doctor.clinic_name,
            address=doctor.clinic_address,
            city=doctor.clinic_city,
            latitude=doctor.clinic_latitude,
            longitude=doctor.clinic_longitude,
        ),
        consultation_modes=ConsultationModes(
            telemedicine=doctor.offers_telemedicine,
            in_clinic=doctor.offers_in_clinic,
        ),
        supports_emergency=doctor.supports_emergency,
        is_accepting_new_patients=doctor.is_accepting_new_patients,
        status=doctor.status,
        schedule_template=doctor.weekly_schedule(),
        created_at=doctor.created_at,
        distance_km=distance_km,
    )
