import logging

from fastapi import APIRouter, Depends, HTTPException, status

from docbook.api.deps import get_appointment_repository, get_doctor_repository
from docbook.api.schemas.appointment import AppointmentResponse
from docbook.models.appointment import Appointment, AppointmentCreate, AppointmentPublic
from docbook.services.appointment_service import (
    AppointmentRepository,
    DoctorNotFound,
    SlotUnavailable,
    book_appointment,
)
from docbook.services.doctor_service import DoctorRepository

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/appointments", tags=["appointments"])


def _to_public(a: Appointment) -> AppointmentPublic:
    return AppointmentPublic.model_validate(a, from_attributes=True)


@router.post("", response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
async def create_appointment(
    body: AppointmentCreate,
    doctors: DoctorRepository = Depends(get_doctor_repository),
    appointments: AppointmentRepository = Depends(get_appointment_repository),
) -> AppointmentResponse:
    try:
        appointment = await book_appointment(doctors, appointments, body)
    except DoctorNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Doctor not found")
    except SlotUnavailable as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    return AppointmentResponse(message="Appointment booked successfully", appointment=_to_public(appointment))


@router.delete("/{appointment_id}", response_model=AppointmentResponse)
async def cancel_appointment(
    appointment_id: int,
    appointments: AppointmentRepository = Depends(get_appointment_repository),
) -> AppointmentResponse:
    appointment = await appointments.cancel(appointment_id)
    if not appointment:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Appointment not found")
    logger.info("Cancelled appointment %s", appointment_id)
    return AppointmentResponse(message="Appointment cancelled", appointment=_to_public(appointment))
