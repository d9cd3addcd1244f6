from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from .lifecycle import ActiveAlert, AlertLifecycle
from .ports import NotificationPermission
from .scheduler import AlertEvent, AlertScheduler
from .settings import Settings
from .stages import Stage, StageCatalog
from .tracker import ElapsedTimeTracker

logger = logging.getLogger(__name__)


@dataclass
class TickResult:
    elapsed_seconds: int
    remaining_seconds: int
    next_stage: Optional[Stage]
    events: List[AlertEvent] = field(default_factory=list)
    progress: float = 0.0


class BrewTimer:
    """Boil timer core: elapsed tracking, stage crossings and alert lifecycle.

    The caller drives it with ``tick()``; nothing here blocks or starts
    timers of its own except the lifecycle's repeating main-alert sound.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        lifecycle: Optional[AlertLifecycle] = None,
        clock: Callable[[], float] = time.monotonic,
        on_alert: Optional[Callable[[AlertEvent], None]] = None,
    ):
        self.clock = clock
        self.on_alert = on_alert
        self.lifecycle = lifecycle or AlertLifecycle()
        self.scheduler = AlertScheduler()
        self.tracker = ElapsedTimeTracker(0)
        self.configure(settings or Settings())

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def running(self) -> bool:
        return self.tracker.running

    @property
    def started(self) -> bool:
        return self.tracker.started

    @property
    def active_alert(self) -> Optional[ActiveAlert]:
        return self.lifecycle.active_alert

    @property
    def permission(self) -> NotificationPermission:
        return self.lifecycle.permission

    @permission.setter
    def permission(self, value) -> None:
        self.lifecycle.permission = NotificationPermission.coerce(value)

    def configure(self, settings: Settings) -> Settings:
        self._settings: Settings = settings.normalized()
        self.tracker.total_seconds = float(self._settings.total_seconds)
        self.catalog: StageCatalog = StageCatalog(self._settings.stages, self._settings.total_minutes)
        self.lifecycle.apply_settings(self._settings)
        logger.debug(
            "Configured total=%smin stages=%s lead=%ss",
            self._settings.total_minutes,
            len(self.catalog),
            self._settings.pre_alert_seconds,
        )
        return self._settings

    def start(self, now: Optional[float] = None) -> None:
        now = self._now(now)
        self.tracker.start(now)
        self.scheduler.clear()
        self.lifecycle.clear()
        logger.info("Timer started (%s min, %s stages)", self._settings.total_minutes, len(self.catalog))

    def pause(self, now: Optional[float] = None) -> bool:
        paused = self.tracker.pause(self._now(now))
        if paused:
            logger.info("Timer paused")
        return paused

    def resume(self, now: Optional[float] = None) -> bool:
        resumed = self.tracker.resume(self._now(now))
        if resumed:
            logger.info("Timer resumed")
        return resumed

    def reset(self) -> None:
        self.tracker.reset()
        self.scheduler.clear()
        self.lifecycle.clear()
        logger.info("Timer reset")

    def acknowledge(self) -> Optional[ActiveAlert]:
        return self.lifecycle.acknowledge()

    def elapsed(self, now: Optional[float] = None) -> float:
        return self.tracker.elapsed(self._now(now))

    def tick(self, now: Optional[float] = None) -> TickResult:
        now = self._now(now)
        elapsed = self.tracker.elapsed(now)
        events: List[AlertEvent] = []
        if self.tracker.running:
            events = self.scheduler.evaluate(
                self.catalog, elapsed, self._settings.pre_alert_seconds, now
            )
            for event in events:
                self.lifecycle.handle(event)
                self._emit(event)

        total = self._settings.total_seconds
        elapsed_whole = int(math.floor(elapsed))
        return TickResult(
            elapsed_seconds=elapsed_whole,
            remaining_seconds=max(0, min(total, total - elapsed_whole)),
            next_stage=self.catalog.next_stage(elapsed_whole),
            events=events,
            progress=elapsed_whole / total if total else 0.0,
        )

    def _emit(self, event: AlertEvent) -> None:
        if not self.on_alert:
            return
        try:
            self.on_alert(event)
        except Exception:
            logger.error("on_alert callback failed", exc_info=True)

    def _now(self, now: Optional[float]) -> float:
        return self.clock() if now is None else now
