# backend/services/records.py

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from services.consumption import DEFAULT_SCALE_FACTOR, DeviceBreakdown, equal_split
from services.resolver import matching_history, matching_live
from services.snapshot import ScheduleSlot
from services.telemetry import parse_number
from utils.time import format_timestamp


@dataclass(frozen=True)
class UsageRecord:
    id: str
    room: str
    timestamp: datetime
    power_watts: float
    consumption_kwh: float
    device_breakdown: DeviceBreakdown
    instructor_name: str
    subject: str
    subject_code: str
    section: str
    schedule: ScheduleSlot
    session_id: Optional[str] = None

    def to_dict(self):
        return {
            "id": self.id,
            "room": self.room,
            "timestamp": format_timestamp(self.timestamp),
            "power_watts": self.power_watts,
            "consumption_kwh": self.consumption_kwh,
            "device_breakdown": self.device_breakdown.to_dict(),
            "instructor_name": self.instructor_name,
            "subject": self.subject,
            "subject_code": self.subject_code,
            "section": self.section,
            "schedule": self.schedule.to_dict(),
        }


def record_id(instructor_id, session_id):
    return f"{instructor_id}:{session_id or 'live'}"


def matches_query(record, query):
    needle = (query or "").strip().lower()
    if not needle:
        return True
    fields = (record.instructor_name, record.subject, record.subject_code, record.section)
    return any(needle in (f or "").lower() for f in fields)


def _sessions_for(instructor, room):
    history = matching_history(instructor, room)
    if history:
        return [(s.session_id, s.schedule) for s in history]
    live = matching_live(instructor, room)
    if live is not None:
        return [(None, live.schedule)]
    return []


def window_bounds(center, window_hours):
    """
    [center - window, center + window], clamped to the calendar range.
    """
    hours = max(parse_number(window_hours), 0.0)
    try:
        window = timedelta(hours=hours)
    except OverflowError:
        return datetime.min, datetime.max

    try:
        low = center - window
    except OverflowError:
        low = datetime.min
    try:
        high = center + window
    except OverflowError:
        high = datetime.max
    return low, high


def summarize(records):
    """
    Totals over a record set; all zero when there are no records.
    """
    if not records:
        return {
            "total_kwh": 0.0,
            "average_kwh": 0.0,
            "peak_kwh": 0.0,
            "total_power_watts": 0.0,
            "average_power_watts": 0.0,
        }

    count = len(records)
    total_kwh = sum(r.consumption_kwh for r in records)
    total_power = sum(r.power_watts for r in records)
    return {
        "total_kwh": total_kwh,
        "average_kwh": total_kwh / count,
        "peak_kwh": max(r.consumption_kwh for r in records),
        "total_power_watts": total_power,
        "average_power_watts": total_power / count,
    }


def aggregate(instructors, room, center, window_hours, query="",
              scale_factor=DEFAULT_SCALE_FACTOR, allocate=equal_split):
    """
    Usage records for `room` whose sample falls within
    [center - window_hours, center + window_hours], newest first.
    """
    low, high = window_bounds(center, window_hours)
    scale = parse_number(scale_factor)

    records = []
    for instructor in instructors:
        for session_id, schedule in _sessions_for(instructor, room):
            sample = schedule.room.sample
            if sample.timestamp is None or not (low <= sample.timestamp <= high):
                continue

            consumption_kwh = sample.billable_energy_kwh * scale
            record = UsageRecord(
                id=record_id(instructor.instructor_id, session_id),
                room=schedule.room.name,
                timestamp=sample.timestamp,
                power_watts=sample.power_watts,
                consumption_kwh=consumption_kwh,
                device_breakdown=allocate(consumption_kwh),
                instructor_name=instructor.name,
                subject=schedule.subject,
                subject_code=schedule.subject_code,
                section=schedule.section,
                schedule=schedule,
                session_id=session_id,
            )
            if matches_query(record, query):
                records.append(record)

    records.sort(key=lambda r: r.timestamp, reverse=True)
    return records
