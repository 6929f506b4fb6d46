# backend/services/resolver.py

from dataclasses import dataclass
from typing import Optional

from services.snapshot import CLASS_ENDED, ScheduleSlot
from services.telemetry import TelemetrySample

SOURCE_HISTORY = "history"
SOURCE_LIVE = "live"


@dataclass(frozen=True)
class Resolution:
    sample: TelemetrySample
    schedule: ScheduleSlot
    instructor_id: str
    instructor_name: str
    session_id: Optional[str]
    source: str


def _normalize_room(room):
    return (room or "").strip()


def _in_room(schedule, room):
    return schedule.room.name == room and schedule.room.sample is not None


def matching_history(instructor, room):
    """
    Ended sessions of one instructor for `room` that carry a sample,
    newest first. Ties on occurred_at keep their snapshot order.
    """
    room = _normalize_room(room)
    matches = [
        s for s in instructor.history
        if s.status == CLASS_ENDED and _in_room(s.schedule, room)
    ]
    return sorted(matches, key=lambda s: s.occurred_at, reverse=True)


def matching_live(instructor, room):
    live = instructor.live_session
    if live is not None and _in_room(live.schedule, _normalize_room(room)):
        return live
    return None


def resolve_room(instructors, room):
    """
    Pick the one authoritative sample for `room`.

    An ended class beats a live one even when the live reading is newer.
    Returns None when no source carries a sample for the room.
    """
    room = _normalize_room(room)
    if not room:
        return None

    candidates = []
    for instructor in instructors:
        for session in matching_history(instructor, room):
            candidates.append((session, instructor))

    if candidates:
        candidates.sort(key=lambda pair: pair[0].occurred_at, reverse=True)
        session, instructor = candidates[0]
        return Resolution(
            sample=session.schedule.room.sample,
            schedule=session.schedule,
            instructor_id=instructor.instructor_id,
            instructor_name=instructor.name,
            session_id=session.session_id,
            source=SOURCE_HISTORY,
        )

    for instructor in instructors:
        live = matching_live(instructor, room)
        if live is not None:
            return Resolution(
                sample=live.schedule.room.sample,
                schedule=live.schedule,
                instructor_id=instructor.instructor_id,
                instructor_name=instructor.name,
                session_id=None,
                source=SOURCE_LIVE,
            )

    return None
