# backend/services/engine.py

import threading

from services.consumption import (
    DEFAULT_SCALE_FACTOR,
    DEFAULT_TARIFF_PER_KWH,
    compute,
    equal_split,
)
from services.duration import (
    DEFAULT_SESSION_HOURS,
    DurationStrategy,
    estimate,
    latest_access,
)
from services.records import aggregate
from services.resolver import resolve_room
from services.rooms import known_room_names, room_info
from services.snapshot import load_instructors
from utils.time import format_display, format_timestamp


class EnergyEngine:
    """
    Holds the latest /Instructors snapshot and derives room reports from it.

    Normalized instructors are memoized per snapshot object. The last
    successful report of each room is kept so a transient miss can be
    served as stale instead of flickering to "no data".
    """

    def __init__(
        self,
        snapshot_loader=None,
        rooms_loader=None,
        tariff_per_kwh=DEFAULT_TARIFF_PER_KWH,
        scale_factor=DEFAULT_SCALE_FACTOR,
        strategy=DurationStrategy.ACCESS_LOGS,
        default_hours=DEFAULT_SESSION_HOURS,
        allocate=equal_split,
    ):
        self.snapshot_loader = snapshot_loader
        self.rooms_loader = rooms_loader
        self.tariff_per_kwh = tariff_per_kwh
        self.scale_factor = scale_factor
        self.strategy = DurationStrategy(strategy)
        self.default_hours = default_hours
        self.allocate = allocate

        self._lock = threading.Lock()
        self._snapshot = None
        self._instructors = None
        self._rooms = None
        self._reports = {}

    # ===============================
    # Snapshot State
    # ===============================
    def update_snapshot(self, snapshot):
        with self._lock:
            if snapshot is self._snapshot and self._instructors is not None:
                return
        instructors = load_instructors(snapshot)
        with self._lock:
            self._snapshot = snapshot
            self._instructors = instructors

    def instructors(self):
        with self._lock:
            if self._instructors is not None:
                return self._instructors
        if self.snapshot_loader is None:
            return []
        self.update_snapshot(self.snapshot_loader())
        with self._lock:
            return self._instructors

    def room_metadata(self):
        if self._rooms is None:
            self._rooms = self.rooms_loader() if self.rooms_loader else {}
        return self._rooms

    # ===============================
    # Reports
    # ===============================
    def room_report(self, room):
        """
        Resolution, duration and consumption for one room.
        Returns None when the room has never resolved.
        """
        room = (room or "").strip()
        instructors = self.instructors()
        resolution = resolve_room(instructors, room)

        if resolution is None:
            with self._lock:
                cached = self._reports.get(room)
            if cached is None:
                return None
            return dict(cached, stale=True)

        instructor = next(i for i in instructors if i.instructor_id == resolution.instructor_id)
        access_ts = latest_access(instructor)
        duration = estimate(instructor, access_ts, room, self.strategy, self.default_hours)
        consumption = compute(
            resolution.sample,
            duration,
            self.tariff_per_kwh,
            self.scale_factor,
            self.allocate,
        )

        sample_ts = resolution.sample.timestamp
        report = {
            "room": room_info(self.room_metadata(), room).to_dict(),
            "source": resolution.source,
            "instructor_id": resolution.instructor_id,
            "instructor_name": resolution.instructor_name,
            "session_id": resolution.session_id,
            "schedule": resolution.schedule.to_dict(),
            "sample": resolution.sample.to_dict(),
            "sample_time": format_display(sample_ts) if sample_ts else None,
            "access_time": format_timestamp(access_ts) if access_ts else None,
            "strategy": self.strategy.value,
            "duration": duration.to_dict(),
            "tariff_per_kwh": self.tariff_per_kwh,
            "scale_factor": self.scale_factor,
            "consumption": consumption.to_dict(),
            "stale": False,
        }

        with self._lock:
            self._reports[room] = report
        return report

    def room_records(self, room, center, window_hours, query=""):
        return aggregate(
            self.instructors(),
            (room or "").strip(),
            center,
            window_hours,
            query,
            self.scale_factor,
            self.allocate,
        )

    def rooms(self):
        metadata = self.room_metadata()
        names = known_room_names(self.instructors(), metadata)
        return [room_info(metadata, name) for name in names]
