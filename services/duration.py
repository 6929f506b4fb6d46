# backend/services/duration.py

from dataclasses import dataclass
from datetime import timedelta
from enum import Enum

from services.resolver import matching_history, matching_live
from services.snapshot import (
    ACTION_ACCESS,
    ACTION_END_SESSION,
    STATUS_COMPLETED,
    STATUS_GRANTED,
)

# Used when neither the access logs nor the meter readings give a span.
DEFAULT_SESSION_HOURS = 1.0


class DurationStrategy(str, Enum):
    SAMPLES = "samples"
    ACCESS_LOGS = "access_logs"


@dataclass(frozen=True)
class Duration:
    hours: int
    minutes: int
    total_hours: float

    @classmethod
    def from_timedelta(cls, delta):
        seconds = max(delta.total_seconds(), 0.0)
        return cls(
            hours=int(seconds // 3600),
            minutes=int((seconds % 3600) // 60),
            total_hours=seconds / 3600.0,
        )

    @classmethod
    def from_hours(cls, hours):
        return cls.from_timedelta(timedelta(hours=max(hours, 0.0)))

    def to_dict(self):
        return {
            "hours": self.hours,
            "minutes": self.minutes,
            "total_hours": self.total_hours,
        }


ZERO_DURATION = Duration(0, 0, 0.0)


# ===============================
# Access Log Helpers
# ===============================
def _latest_event(instructor, action, status):
    latest = None
    for event in instructor.events:
        if event.action != action or event.status != status or event.timestamp is None:
            continue
        if latest is None or event.timestamp > latest.timestamp:
            latest = event
    return latest


def latest_access(instructor):
    """
    Timestamp of the instructor's most recent granted badge-in, if any.
    """
    event = _latest_event(instructor, ACTION_ACCESS, STATUS_GRANTED)
    return event.timestamp if event else None


# ===============================
# Strategies
# ===============================
def estimate_from_samples(instructor, access_ts, room):
    """
    Session length = time from badge-in to the last meter reading
    for the room. Ended sessions are checked before the live one.
    """
    if access_ts is None:
        return ZERO_DURATION

    sessions = list(matching_history(instructor, room))
    live = matching_live(instructor, room)
    if live is not None:
        sessions.append(live)

    for session in sessions:
        sample_ts = session.schedule.room.sample.timestamp
        if sample_ts is None or sample_ts <= access_ts:
            continue
        return Duration.from_timedelta(sample_ts - access_ts)

    return ZERO_DURATION


def estimate_from_access_logs(instructor, access_ts, room, default_hours=DEFAULT_SESSION_HOURS):
    """
    Pair the latest granted Access with the latest completed EndSession.
    Falls back to the meter readings, then to `default_hours`.

    The log pair is not filtered by room; the access logs carry none.
    """
    start = _latest_event(instructor, ACTION_ACCESS, STATUS_GRANTED)
    end = _latest_event(instructor, ACTION_END_SESSION, STATUS_COMPLETED)
    if start is not None and end is not None and end.timestamp > start.timestamp:
        return Duration.from_timedelta(end.timestamp - start.timestamp)

    duration = estimate_from_samples(instructor, access_ts, room)
    if duration.total_hours > 0:
        return duration

    return Duration.from_hours(default_hours)


def estimate(instructor, access_ts, room, strategy=DurationStrategy.ACCESS_LOGS,
             default_hours=DEFAULT_SESSION_HOURS):
    strategy = DurationStrategy(strategy)
    if strategy is DurationStrategy.SAMPLES:
        return estimate_from_samples(instructor, access_ts, room)
    return estimate_from_access_logs(instructor, access_ts, room, default_hours)
