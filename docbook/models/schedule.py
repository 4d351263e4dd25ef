import logging
from collections.abc import Iterable
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

# Zero-padded 24h clock time
HHMM_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class SessionTemplate(BaseModel):
    """A contiguous working window, cut into fixed-width slots.

    Ordering of start/end and a positive duration are not enforced here so that
    stored templates always load; the slot calculator skips bad sessions.
    """

    start_time: str = Field(pattern=HHMM_PATTERN)
    end_time: str = Field(pattern=HHMM_PATTERN)
    slot_duration_minutes: int


class DayTemplate(BaseModel):
    day_of_week: int = Field(ge=0, le=6)  # 0=Sunday..6=Saturday
    is_working: bool = False
    sessions: list[SessionTemplate] = Field(default_factory=list)


WeeklyScheduleTemplate = list[DayTemplate]


class SlotStatus(str, Enum):
    AVAILABLE = "available"
    BOOKED = "booked"


class Slot(BaseModel):
    time: str
    status: SlotStatus


class DaySlots(BaseModel):
    """Slots for one date. is_scheduled is False when the doctor does not work that weekday."""

    slots: list[Slot]
    is_scheduled: bool


def load_weekly_schedule(raw: Iterable[Any] | None) -> WeeklyScheduleTemplate:
    """Parse a stored template, dropping entries that do not validate.

    Each day and each session is checked on its own, so one bad "9:00" start
    only costs that session, not the doctor's whole schedule.
    """
    days: WeeklyScheduleTemplate = []
    for entry in raw or []:
        if not isinstance(entry, dict):
            logger.warning("Skipping malformed schedule day %r", entry)
            continue
        try:
            day = DayTemplate.model_validate({k: v for k, v in entry.items() if k != "sessions"})
        except ValidationError as e:
            logger.warning("Skipping malformed schedule day %r: %s", entry, e)
            continue
        for session in entry.get("sessions") or []:
            try:
                day.sessions.append(SessionTemplate.model_validate(session))
            except ValidationError as e:
                logger.warning("Skipping malformed session %r: %s", session, e)
        days.append(day)
    return days
