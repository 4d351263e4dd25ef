import logging
from datetime import date
from enum import Enum

from pydantic import BaseModel
from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from docbook.core.config import settings
from docbook.models.doctor import Doctor, DoctorCreate, DoctorStatus, doctor_from_create
from docbook.services.geo import GeoPoint, bounding_box, haversine_meters
from docbook.services.slot_service import resolve_day_schedule, weekday_index

logger = logging.getLogger(__name__)


class ConsultationType(str, Enum):
    TELEMEDICINE = "telemedicine"
    IN_CLINIC = "in_clinic"

    @classmethod
    def _missing_(cls, value):
        # Older clients send the camelCase spelling
        if value == "inClinic":
            return cls.IN_CLINIC
        return None


class DoctorFilter(BaseModel):
    specialty: str | None = None
    city: str | None = None
    consultation_type: ConsultationType | None = None
    supports_emergency: bool | None = None
    near: GeoPoint | None = None
    radius_km: float | None = None
    available_on: date | None = None

    @property
    def radius_meters(self) -> float | None:
        if self.near is None or self.radius_km is None:
            return None
        return self.radius_km * 1000


def build_search_query(filters: DoctorFilter) -> Select:
    """Translate a DoctorFilter into a SELECT over doctors (geo distance is applied separately)."""
    stmt = select(Doctor).where(
        Doctor.status == DoctorStatus.ACTIVE.value,
        Doctor.is_accepting_new_patients.is_(True),
    )
    if filters.specialty:
        stmt = stmt.where(Doctor.specialties.contains([filters.specialty]))
    if filters.city:
        stmt = stmt.where(Doctor.clinic_city == filters.city)
    if filters.consultation_type is ConsultationType.TELEMEDICINE:
        stmt = stmt.where(Doctor.offers_telemedicine.is_(True))
    elif filters.consultation_type is ConsultationType.IN_CLINIC:
        stmt = stmt.where(Doctor.offers_in_clinic.is_(True))
    # Only an explicit "true" narrows the search
    if filters.supports_emergency:
        stmt = stmt.where(Doctor.supports_emergency.is_(True))
    if filters.available_on is not None:
        # Must run in SQL so the result limit only counts doctors working that day
        working_day = {"day_of_week": weekday_index(filters.available_on), "is_working": True}
        stmt = stmt.where(Doctor.schedule_template.contains([working_day]))
    return stmt.order_by(Doctor.id)


def clinic_point(doctor: Doctor) -> GeoPoint | None:
    if doctor.clinic_latitude is None or doctor.clinic_longitude is None:
        return None
    return GeoPoint(lat=doctor.clinic_latitude, lng=doctor.clinic_longitude)


class DoctorRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, doctor_id: int) -> Doctor | None:
        result = await self.session.execute(select(Doctor).where(Doctor.id == doctor_id))
        return result.scalar_one_or_none()

    async def create(self, data: DoctorCreate) -> Doctor:
        doctor = doctor_from_create(data)
        self.session.add(doctor)
        await self.session.flush()
        await self.session.refresh(doctor)
        return doctor

    async def search(self, filters: DoctorFilter) -> list[Doctor]:
        stmt = build_search_query(filters)
        radius = filters.radius_meters
        if filters.near is not None and radius is not None:
            return await self.find_near(filters.near, radius, base=stmt)
        result = await self.session.execute(stmt.limit(settings.search_result_limit))
        return list(result.scalars().all())

    async def find_near(
        self, point: GeoPoint, radius_meters: float, base: Select | None = None
    ) -> list[Doctor]:
        """Doctors whose clinic lies within radius_meters of point, nearest first."""
        stmt = base if base is not None else select(Doctor)
        min_lat, max_lat, min_lng, max_lng = bounding_box(point, radius_meters)
        stmt = stmt.where(
            Doctor.clinic_latitude.is_not(None),
            Doctor.clinic_longitude.is_not(None),
            Doctor.clinic_latitude.between(min_lat, max_lat),
            Doctor.clinic_longitude.between(min_lng, max_lng),
        )
        result = await self.session.execute(stmt)
        return filter_within_radius(result.scalars().all(), point, radius_meters)[
            : settings.search_result_limit
        ]


def filter_within_radius(doctors, point: GeoPoint, radius_meters: float) -> list[Doctor]:
    ranked: list[tuple[float, Doctor]] = []
    for doctor in doctors:
        loc = clinic_point(doctor)
        if loc is None:
            continue
        distance = haversine_meters(point, loc)
        if distance <= radius_meters:
            ranked.append((distance, doctor))
    ranked.sort(key=lambda pair: pair[0])
    return [doctor for _, doctor in ranked]


def works_on(doctor: Doctor, d: date) -> bool:
    return resolve_day_schedule(doctor.weekly_schedule(), d) is not None


async def search_doctors(repo: DoctorRepository, filters: DoctorFilter) -> list[Doctor]:
    doctors = await repo.search(filters)
    if filters.available_on is not None:
        doctors = [doc for doc in doctors if works_on(doc, filters.available_on)]
    logger.debug("Doctor search %s matched %d doctor(s)", filters.model_dump(exclude_none=True), len(doctors))
    return doctors
