from typing import List, Sequence, Tuple

import pytest

from alerts.engine import BrewTimer
from alerts.lifecycle import AlertLifecycle, SoundRepeater
from alerts.ports import AudioOutput, Display, Haptics, NotificationPermission, Notifier
from alerts.settings import Settings
from alerts.stages import SoundKind, Stage


class FakeAudio(AudioOutput):
    def __init__(self):
        self.played: List[Tuple[str, int, float]] = []

    def play(self, kind: str, duration_ms: int, volume: float) -> None:
        self.played.append((kind, duration_ms, volume))


class FakeHaptics(Haptics):
    def __init__(self):
        self.patterns: List[List[int]] = []

    def vibrate(self, pattern: Sequence[int]) -> None:
        self.patterns.append(list(pattern))


class FakeNotifier(Notifier):
    def __init__(self):
        self.sent: List[Tuple[str, str]] = []

    def notify(self, title: str, body: str) -> None:
        self.sent.append((title, body))


class FakeDisplay(Display):
    def __init__(self):
        self.flashes = 0

    def flash(self) -> None:
        self.flashes += 1


class FakeRepeater(SoundRepeater):
    """Runs the action once on start; ``fire()`` stands in for one interval."""

    def __init__(self):
        super().__init__()
        self.starts = 0
        self.stops = 0
        self.interval_s = None
        self._action = None
        self._active = False

    @property
    def active(self) -> bool:
        return self._active

    def start(self, action, interval_s: float) -> None:
        self.stop()
        self.starts += 1
        self.interval_s = interval_s
        self._action = action
        self._active = True
        action()

    def stop(self) -> None:
        if self._active:
            self.stops += 1
        self._active = False
        self._action = None

    def fire(self) -> None:
        if self._active and self._action:
            self._action()


def make_settings(stages, total_minutes=60, lead=60, **kwargs) -> Settings:
    built = tuple(
        s if isinstance(s, Stage) else Stage(f"st_{i}", s[0], s[1], SoundKind.coerce(s[2] if len(s) > 2 else "beep"))
        for i, s in enumerate(stages)
    )
    return Settings(total_minutes=total_minutes, stages=built, pre_alert_seconds=lead, **kwargs)


@pytest.fixture
def audio():
    return FakeAudio()


@pytest.fixture
def haptics():
    return FakeHaptics()


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def display():
    return FakeDisplay()


@pytest.fixture
def repeater():
    return FakeRepeater()


@pytest.fixture
def lifecycle(audio, haptics, notifier, display, repeater):
    return AlertLifecycle(
        audio=audio,
        haptics=haptics,
        notifier=notifier,
        display=display,
        repeater=repeater,
        permission=NotificationPermission.GRANTED,
    )


@pytest.fixture
def make_engine(lifecycle):
    def _make(stages, total_minutes=60, lead=60, **kwargs) -> BrewTimer:
        settings = make_settings(stages, total_minutes=total_minutes, lead=lead, **kwargs)
        return BrewTimer(settings, lifecycle=lifecycle, clock=lambda: 0.0)

    return _make
