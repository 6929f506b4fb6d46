# backend/services/session_tracker.py

import threading
import time


class SnapshotTracker:
    """
    Periodically pulls the /Instructors subtree and hands changed
    snapshots to the engine. Recomputation is debounced so bursts of
    changes collapse into one update.
    """

    def __init__(self, engine, fetch, interval_s=30, debounce_s=5, clock=time.monotonic):
        self.engine = engine
        self.fetch = fetch
        self.interval_s = interval_s
        self.debounce_s = debounce_s
        self.clock = clock

        self._last_snapshot = None
        self._last_update = None
        self._thread = None

    def poll_once(self):
        """
        Returns True when the engine received a new snapshot.
        """
        try:
            snapshot = self.fetch()
        except Exception as e:
            print(f"ERROR in snapshot tracker: {e}")
            return False

        if snapshot == self._last_snapshot:
            return False

        now = self.clock()
        if self._last_update is not None and now - self._last_update < self.debounce_s:
            return False

        self.engine.update_snapshot(snapshot)
        self._last_snapshot = snapshot
        self._last_update = now
        print(f"[Snapshot] Updated with {len(snapshot or {})} instructors")
        return True

    def _run(self):
        while True:
            self.poll_once()
            time.sleep(self.interval_s)

    def start(self):
        if self._thread is None:
            self._thread = threading.Thread(target=self._run, daemon=True)
            self._thread.start()
        return self._thread
