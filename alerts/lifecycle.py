from __future__ import annotations

import logging
from dataclasses import dataclass
from threading import Event, Thread
from typing import Callable, Optional

from .ports import (
    AudioOutput,
    Display,
    Haptics,
    NotificationPermission,
    Notifier,
    NullAudio,
    NullDisplay,
    NullHaptics,
    NullNotifier,
)
from .scheduler import AlertEvent, AlertKind
from .stages import SoundKind, Stage

logger = logging.getLogger(__name__)

ALERT_SOUND_MS = 900
PRE_ALERT_VIBRATION = (120,)
MAIN_ALERT_VIBRATION = (200, 100, 200)


@dataclass(frozen=True)
class ActiveAlert:
    kind: AlertKind
    stage: Stage
    fired_at: float


class SoundRepeater:
    """The single repeat-until-acknowledged signal.

    ``start`` runs the action immediately, then once per interval on a daemon
    thread until ``stop``. Each start gets its own stop event, so a stale loop
    can never outlive the one that replaced it.
    """

    def __init__(self, name: str = "alert-repeat"):
        self.name = name
        self._stop_event: Optional[Event] = None
        self._thread: Optional[Thread] = None

    @property
    def active(self) -> bool:
        return self._stop_event is not None and not self._stop_event.is_set()

    def start(self, action: Callable[[], None], interval_s: float) -> None:
        self.stop()
        stop_event = Event()
        self._stop_event = stop_event
        _run_safely(action)
        self._thread = Thread(
            target=self._loop,
            args=(action, max(0.01, interval_s), stop_event),
            name=self.name,
            daemon=True,
        )
        self._thread.start()

    def stop(self) -> None:
        if self._stop_event is not None:
            self._stop_event.set()
        self._stop_event = None
        self._thread = None

    @staticmethod
    def _loop(action: Callable[[], None], interval_s: float, stop_event: Event) -> None:
        while not stop_event.wait(interval_s):
            _run_safely(action)


def _run_safely(action: Callable[[], None]) -> None:
    try:
        action()
    except Exception:
        logger.error("Repeating alert sound failed", exc_info=True)


class AlertLifecycle:
    """Owns the active-alert slot and the repeating main-alert sound.

    Last fired wins: a new event replaces whatever alert is active,
    acknowledged or not.
    """

    def __init__(
        self,
        audio: Optional[AudioOutput] = None,
        haptics: Optional[Haptics] = None,
        notifier: Optional[Notifier] = None,
        display: Optional[Display] = None,
        repeater: Optional[SoundRepeater] = None,
        permission: NotificationPermission = NotificationPermission.DEFAULT,
    ):
        self.audio = audio or NullAudio()
        self.haptics = haptics or NullHaptics()
        self.notifier = notifier or NullNotifier()
        self.display = display or NullDisplay()
        self.repeater = repeater or SoundRepeater()
        self.permission = permission

        self.volume = 0.8
        self.repeat_interval_ms = 1200
        self.pre_alert_seconds = 60
        self.flash_screen = True
        self.vibrate = True

        self._active: Optional[ActiveAlert] = None

    @property
    def active_alert(self) -> Optional[ActiveAlert]:
        return self._active

    @property
    def repeating(self) -> bool:
        return self.repeater.active

    def apply_settings(self, settings) -> None:
        self.volume = settings.volume
        self.repeat_interval_ms = settings.repeat_interval_ms
        self.pre_alert_seconds = settings.pre_alert_seconds
        self.flash_screen = settings.flash_screen
        self.vibrate = settings.vibrate

    def handle(self, event: AlertEvent) -> None:
        if event.kind == AlertKind.PRE:
            self._on_pre_alert(event)
        else:
            self._on_main_alert(event)

    def acknowledge(self) -> Optional[ActiveAlert]:
        current = self._active
        self.clear()
        if current:
            logger.info("Alert acknowledged (%s: %s)", current.kind.value, current.stage.label)
        return current

    def clear(self) -> None:
        self.repeater.stop()
        self._active = None

    def _on_pre_alert(self, event: AlertEvent) -> None:
        stage = event.stage
        self._active = ActiveAlert(AlertKind.PRE, stage, event.fired_at)
        self._dispatch("audio", self.audio.play, SoundKind.CHIRP.value, ALERT_SOUND_MS, self.volume)
        if self.vibrate:
            self._dispatch("haptics", self.haptics.vibrate, list(PRE_ALERT_VIBRATION))
        if self.flash_screen:
            self._dispatch("display", self.display.flash)
        self._notify(f"Next up: {stage.label}", f"In {self.pre_alert_seconds:g}s")

    def _on_main_alert(self, event: AlertEvent) -> None:
        stage = event.stage
        self._active = ActiveAlert(AlertKind.MAIN, stage, event.fired_at)
        if self.flash_screen:
            self._dispatch("display", self.display.flash)
        kind = SoundKind.coerce(stage.sound).value
        self.repeater.start(
            lambda: self.audio.play(kind, ALERT_SOUND_MS, self.volume),
            self.repeat_interval_ms / 1000.0,
        )
        if self.vibrate:
            self._dispatch("haptics", self.haptics.vibrate, list(MAIN_ALERT_VIBRATION))
        self._notify(f"Stage: {stage.label}", f"Reached {int(stage.minute)}:00")

    def _notify(self, title: str, body: str) -> None:
        if self.permission != NotificationPermission.GRANTED:
            return
        self._dispatch("notifier", self.notifier.notify, title, body)

    @staticmethod
    def _dispatch(name: str, fn, *args) -> None:
        try:
            fn(*args)
        except Exception:
            logger.error("Alert %s dispatch failed", name, exc_info=True)
