"""Slot availability for a doctor on a date.

Turns a weekly schedule template into the day's slot list and marks each slot
booked or available. Everything here is pure: callers fetch the template and
the booked start times beforehand.
"""
import logging
from collections.abc import Iterable, Sequence
from datetime import date

from docbook.models.schedule import DaySlots, DayTemplate, SessionTemplate, Slot, SlotStatus

logger = logging.getLogger(__name__)


def weekday_index(d: date) -> int:
    """0=Sunday..6=Saturday."""
    return d.isoweekday() % 7


def _to_minutes(hhmm: str) -> int:
    h, m = hhmm.split(":")
    return int(h) * 60 + int(m)


def _format_minutes(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def resolve_day_schedule(template: Sequence[DayTemplate], d: date) -> DayTemplate | None:
    """First working entry for the weekday of d, or None when the doctor is off that day."""
    idx = weekday_index(d)
    for day in template:
        if day.day_of_week == idx and day.is_working:
            return day
    return None


def _session_slots(session: SessionTemplate) -> list[str]:
    start = _to_minutes(session.start_time)
    end = _to_minutes(session.end_time)
    step = session.slot_duration_minutes
    # start == end is an empty session, not a malformed one
    if start > end or step <= 0:
        logger.warning(
            "Skipping malformed session %s-%s (slot_duration_minutes=%s)",
            session.start_time,
            session.end_time,
            step,
        )
        return []
    out: list[str] = []
    current = start
    while current < end:
        out.append(_format_minutes(current))
        current += step
    return out


def generate_slots(day_schedule: DayTemplate) -> list[str]:
    """Slot start times for every session, in session order.

    A slot is identified by its start only, so the last one may run past the
    session end. Duplicates from overlapping sessions are kept.
    """
    slots: list[str] = []
    for session in day_schedule.sessions:
        slots.extend(_session_slots(session))
    return slots


def annotate_availability(generated_slots: Iterable[str], booked_start_times: Iterable[str]) -> list[Slot]:
    booked = set(booked_start_times)
    return [
        Slot(time=t, status=SlotStatus.BOOKED if t in booked else SlotStatus.AVAILABLE)
        for t in generated_slots
    ]


def get_available_slots(
    template: Sequence[DayTemplate], d: date, booked_start_times: Iterable[str]
) -> DaySlots:
    day_schedule = resolve_day_schedule(template, d)
    if day_schedule is None:
        return DaySlots(slots=[], is_scheduled=False)
    return DaySlots(
        slots=annotate_availability(generate_slots(day_schedule), booked_start_times),
        is_scheduled=True,
    )
