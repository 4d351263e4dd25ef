import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status

from docbook.api.deps import get_appointment_repository, get_doctor_repository
from docbook.api.schemas.doctor import DoctorResponse, DoctorSearchResponse, DoctorSlotsResponse
from docbook.models.doctor import DoctorCreate, doctor_to_public
from docbook.services.appointment_service import AppointmentRepository
from docbook.services.doctor_service import (
    ConsultationType,
    DoctorFilter,
    DoctorRepository,
    clinic_point,
    search_doctors,
)
from docbook.services.geo import GeoPoint, haversine_meters
from docbook.services.slot_service import get_available_slots

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/doctors", tags=["doctors"])

NOT_AVAILABLE_MESSAGE = "Doctor not available on selected date"


@router.post("", response_model=DoctorResponse, status_code=status.HTTP_201_CREATED)
async def create_doctor(
    body: DoctorCreate,
    doctors: DoctorRepository = Depends(get_doctor_repository),
) -> DoctorResponse:
    """Create a doctor profile (admin use / seeding)."""
    doctor = await doctors.create(body)
    logger.info("Created doctor %s (%s)", doctor.id, doctor.full_name)
    return DoctorResponse(message="Doctor created successfully", doctor=doctor_to_public(doctor))


@router.get("/search", response_model=DoctorSearchResponse)
async def search(
    specialty: str | None = Query(None),
    city: str | None = Query(None),
    consultation_type: ConsultationType | None = Query(None),
    supports_emergency: bool | None = Query(None),
    lat: float | None = Query(None, ge=-90, le=90),
    lng: float | None = Query(None, ge=-180, le=180),
    radius_km: float | None = Query(None, gt=0),
    date_param: date | None = Query(None, alias="date"),
    doctors: DoctorRepository = Depends(get_doctor_repository),
) -> DoctorSearchResponse:
    """Doctor discovery. Geolocation applies only when lat, lng and radius_km are all given."""
    near = GeoPoint(lat=lat, lng=lng) if lat is not None and lng is not None and radius_km else None
    filters = DoctorFilter(
        specialty=specialty,
        city=city,
        consultation_type=consultation_type,
        supports_emergency=supports_emergency,
        near=near,
        radius_km=radius_km if near else None,
        available_on=date_param,
    )
    found = await search_doctors(doctors, filters)
    public = []
    for doc in found:
        distance_km = None
        loc = clinic_point(doc)
        if near is not None and loc is not None:
            distance_km = round(haversine_meters(near, loc) / 1000, 3)
        public.append(doctor_to_public(doc, distance_km=distance_km))
    return DoctorSearchResponse(total=len(public), doctors=public)


@router.get("/{doctor_id}", response_model=DoctorResponse)
async def get_doctor(
    doctor_id: int,
    doctors: DoctorRepository = Depends(get_doctor_repository),
) -> DoctorResponse:
    doctor = await doctors.get(doctor_id)
    if not doctor:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Doctor not found")
    return DoctorResponse(doctor=doctor_to_public(doctor))


@router.get("/{doctor_id}/slots", response_model=DoctorSlotsResponse, response_model_exclude_none=True)
async def get_doctor_slots(
    doctor_id: int,
    date_param: str | None = Query(None, alias="date"),
    doctors: DoctorRepository = Depends(get_doctor_repository),
    appointments: AppointmentRepository = Depends(get_appointment_repository),
) -> DoctorSlotsResponse:
    """Slots for the doctor on date=YYYY-MM-DD, each marked available or booked."""
    if not date_param:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Date is required as query parameter",
        )
    try:
        day = date.fromisoformat(date_param)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid date, expected YYYY-MM-DD",
        )
    doctor = await doctors.get(doctor_id)
    if not doctor:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Doctor not found")

    booked = await appointments.booked_start_times(doctor_id, day)
    result = get_available_slots(doctor.weekly_schedule(), day, booked)
    if not result.is_scheduled:
        return DoctorSlotsResponse(date=day.isoformat(), total_slots=0, slots=[], message=NOT_AVAILABLE_MESSAGE)
    return DoctorSlotsResponse(date=day.isoformat(), total_slots=len(result.slots), slots=result.slots)
