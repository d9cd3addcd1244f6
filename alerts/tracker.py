from __future__ import annotations

from typing import Optional


class ElapsedTimeTracker:
    """Elapsed time of one run, net of pauses and saturated at the total."""

    def __init__(self, total_seconds: float):
        self.total_seconds = max(0.0, float(total_seconds))
        self.running = False
        self.start_ts: Optional[float] = None
        self.paused_total = 0.0
        self.pause_ts: Optional[float] = None

    @property
    def started(self) -> bool:
        return self.start_ts is not None

    @property
    def paused(self) -> bool:
        return not self.running and self.start_ts is not None

    def start(self, now: float) -> None:
        self.running = True
        self.start_ts = now
        self.paused_total = 0.0
        self.pause_ts = None

    def pause(self, now: float) -> bool:
        if not self.running:
            return False
        self.running = False
        self.pause_ts = now
        return True

    def resume(self, now: float) -> bool:
        if self.running or self.start_ts is None:
            return False
        if self.pause_ts is not None:
            self.paused_total += max(0.0, now - self.pause_ts)
        self.pause_ts = None
        self.running = True
        return True

    def reset(self) -> None:
        self.running = False
        self.start_ts = None
        self.paused_total = 0.0
        self.pause_ts = None

    def elapsed(self, now: float) -> float:
        if self.start_ts is None or self.total_seconds <= 0:
            return 0.0
        # Frozen at the pause instant until resume() folds the gap in.
        reference = now if self.running or self.pause_ts is None else self.pause_ts
        value = reference - self.start_ts - self.paused_total
        return max(0.0, min(self.total_seconds, value))
