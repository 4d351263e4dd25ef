from pydantic import BaseModel

from docbook.models.doctor import DoctorPublic
from docbook.models.schedule import Slot


class DoctorResponse(BaseModel):
    success: bool = True
    message: str | None = None
    doctor: DoctorPublic


class DoctorSearchResponse(BaseModel):
    success: bool = True
    total: int
    doctors: list[DoctorPublic]


class DoctorSlotsResponse(BaseModel):
    success: bool = True
    date: str  # YYYY-MM-DD
    total_slots: int
    slots: list[Slot]
    message: str | None = None
