# backend/services/snapshot.py

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from services.telemetry import TelemetrySample, sample_from_raw
from utils.time import parse_timestamp

CLASS_ENDED = "Class Ended"

ACTION_ACCESS = "Access"
ACTION_END_SESSION = "EndSession"

STATUS_GRANTED = "granted"
STATUS_COMPLETED = "completed"


# ===============================
# Normalized Records
# ===============================
@dataclass(frozen=True)
class RoomRef:
    name: str
    sample: Optional[TelemetrySample] = None


@dataclass(frozen=True)
class ScheduleSlot:
    room: RoomRef
    day: str = ""
    start_time: str = ""
    end_time: str = ""
    section: str = ""
    subject: str = ""
    subject_code: str = ""

    def to_dict(self):
        return {
            "day": self.day,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "section": self.section,
            "subject": self.subject,
            "subject_code": self.subject_code,
            "room": self.room.name,
        }


@dataclass(frozen=True)
class LiveSession:
    status: str
    occurred_at: str
    schedule: ScheduleSlot


@dataclass(frozen=True)
class HistoricalSession:
    session_id: str
    status: str
    occurred_at: str
    schedule: ScheduleSlot


@dataclass(frozen=True)
class LifecycleEvent:
    log_id: str
    action: str
    status: str
    timestamp: Optional[datetime]
    raw_timestamp: Optional[str] = None


@dataclass(frozen=True)
class Instructor:
    instructor_id: str
    name: str
    live_session: Optional[LiveSession] = None
    history: List[HistoricalSession] = field(default_factory=list)
    events: List[LifecycleEvent] = field(default_factory=list)


# ===============================
# Ingestion Helpers
# ===============================
def _text(value):
    if value is None:
        return ""
    return str(value).strip()


def _room_ref(raw):
    """
    `roomName` is either a bare name or {name, pzem}.
    """
    if isinstance(raw, dict):
        return RoomRef(name=_text(raw.get("name")), sample=sample_from_raw(raw.get("pzem")))
    return RoomRef(name=_text(raw))


def _schedule(raw):
    if not isinstance(raw, dict):
        return None

    room_raw = raw.get("roomName")
    if room_raw is None:
        room_raw = raw.get("room")

    return ScheduleSlot(
        room=_room_ref(room_raw),
        day=_text(raw.get("day")),
        start_time=_text(raw.get("startTime")),
        end_time=_text(raw.get("endTime")),
        section=_text(raw.get("section")),
        subject=_text(raw.get("subject")),
        subject_code=_text(raw.get("subjectCode")),
    )


def _live_session(raw):
    if not isinstance(raw, dict):
        return None
    schedule = _schedule(raw.get("schedule"))
    if schedule is None:
        return None
    return LiveSession(
        status=_text(raw.get("Status")),
        occurred_at=_text(raw.get("dateTime")),
        schedule=schedule,
    )


def _children(raw):
    """
    Keyed child nodes. RTDB hands back nodes with sequential integer
    keys as a list, with None in place of missing indexes.
    """
    if isinstance(raw, dict):
        return list(raw.items())
    if isinstance(raw, list):
        return [(index, entry) for index, entry in enumerate(raw) if entry is not None]
    return []


def _history(raw):
    sessions = []
    for sid, entry in _children(raw):
        if not isinstance(entry, dict):
            continue
        schedule = _schedule(entry.get("schedule"))
        if schedule is None:
            continue
        sessions.append(
            HistoricalSession(
                session_id=str(sid),
                status=_text(entry.get("Status")),
                occurred_at=_text(entry.get("dateTime")),
                schedule=schedule,
            )
        )
    return sessions


def _events(raw):
    events = []
    for log_id, entry in _children(raw):
        if not isinstance(entry, dict):
            continue
        raw_ts = entry.get("timestamp")
        events.append(
            LifecycleEvent(
                log_id=str(log_id),
                action=_text(entry.get("action")),
                status=_text(entry.get("status")),
                timestamp=parse_timestamp(raw_ts),
                raw_timestamp=raw_ts if isinstance(raw_ts, str) else None,
            )
        )
    return events


def _instructor_name(instructor_id, profile):
    if isinstance(profile, dict):
        for key in ("fullName", "name"):
            name = _text(profile.get(key))
            if name:
                return name
    return instructor_id


# ===============================
# Snapshot Loader
# ===============================
def load_instructors(snapshot):
    """
    Normalize the /Instructors subtree into Instructor records.

    Every part of an instructor node is optional; malformed parts are
    dropped rather than failing the whole snapshot.
    """
    if not isinstance(snapshot, dict):
        return []

    instructors = []
    for iid, node in snapshot.items():
        if not isinstance(node, dict):
            continue
        instructor_id = str(iid)
        instructors.append(
            Instructor(
                instructor_id=instructor_id,
                name=_instructor_name(instructor_id, node.get("Profile")),
                live_session=_live_session(node.get("ClassStatus")),
                history=_history(node.get("ClassHistory")),
                events=_events(node.get("AccessLogs")),
            )
        )
    return instructors
