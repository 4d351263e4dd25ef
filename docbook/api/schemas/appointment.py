from pydantic import BaseModel

from docbook.models.appointment import AppointmentPublic


class AppointmentResponse(BaseModel):
    success: bool = True
    message: str
    appointment: AppointmentPublic
