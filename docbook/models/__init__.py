from docbook.models.appointment import Appointment, AppointmentCreate, AppointmentPublic, AppointmentStatus
from docbook.models.doctor import Doctor, DoctorCreate, DoctorPublic, DoctorStatus
from docbook.models.schedule import DayTemplate, DaySlots, SessionTemplate, Slot, SlotStatus

__all__ = [
    "Appointment",
    "AppointmentCreate",
    "AppointmentPublic",
    "AppointmentStatus",
    "Doctor",
    "DoctorCreate",
    "DoctorPublic",
    "DoctorStatus",
    "DayTemplate",
    "DaySlots",
    "SessionTemplate",
    "Slot",
    "SlotStatus",
]
