from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from docbook.core.db import get_session
from docbook.services.appointment_service import AppointmentRepository
from docbook.services.doctor_service import DoctorRepository


def get_doctor_repository(session: AsyncSession = Depends(get_session)) -> DoctorRepository:
    return DoctorRepository(session)


def get_appointment_repository(session: AsyncSession = Depends(get_session)) -> AppointmentRepository:
    return AppointmentRepository(session)
