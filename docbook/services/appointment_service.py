import logging
from datetime import date

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from docbook.models.appointment import Appointment, AppointmentCreate, AppointmentStatus
from docbook.models.schedule import SlotStatus
from docbook.services.doctor_service import DoctorRepository
from docbook.services.slot_service import get_available_slots

logger = logging.getLogger(__name__)


class DoctorNotFound(Exception):
    pass


class SlotUnavailable(Exception):
    pass


class AppointmentRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def booked_start_times(self, doctor_id: int, d: date) -> set[str]:
        result = await self.session.execute(
            select(Appointment.start_time).where(
                Appointment.doctor_id == doctor_id,
                Appointment.appointment_date == d,
                Appointment.status == AppointmentStatus.BOOKED.value,
            )
        )
        return {row[0] for row in result.all()}

    async def get(self, appointment_id: int) -> Appointment | None:
        result = await self.session.execute(select(Appointment).where(Appointment.id == appointment_id))
        return result.scalar_one_or_none()

    async def create(self, data: AppointmentCreate) -> Appointment:
        """Insert a booked appointment; raises SlotUnavailable if another booking won the slot."""
        appointment = Appointment(
            doctor_id=data.doctor_id,
            appointment_date=data.appointment_date,
            start_time=data.start_time,
            patient_name=data.patient_name,
            patient_phone=data.patient_phone,
            reason=data.reason,
        )
        try:
            async with self.session.begin_nested():
                self.session.add(appointment)
                await self.session.flush()
        except IntegrityError as e:
            raise SlotUnavailable("Slot already booked") from e
        await self.session.refresh(appointment)
        return appointment

    async def cancel(self, appointment_id: int) -> Appointment | None:
        appointment = await self.get(appointment_id)
        if not appointment:
            return None
        appointment.status = AppointmentStatus.CANCELLED.value
        self.session.add(appointment)
        await self.session.flush()
        return appointment


async def book_appointment(
    doctors: DoctorRepository, appointments: AppointmentRepository, data: AppointmentCreate
) -> Appointment:
    doctor = await doctors.get(data.doctor_id)
    if not doctor:
        raise DoctorNotFound(data.doctor_id)
    booked = await appointments.booked_start_times(data.doctor_id, data.appointment_date)
    day = get_available_slots(doctor.weekly_schedule(), data.appointment_date, booked)
    status = next((s.status for s in day.slots if s.time == data.start_time), None)
    if status is None:
        raise SlotUnavailable("Doctor has no slot at the requested time")
    if status is SlotStatus.BOOKED:
        raise SlotUnavailable("Slot already booked")
    appointment = await appointments.create(data)
    logger.info(
        "Booked appointment %s: doctor %s on %s at %s",
        appointment.id,
        data.doctor_id,
        data.appointment_date.isoformat(),
        data.start_time,
    )
    return appointment
