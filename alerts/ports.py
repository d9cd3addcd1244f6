from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Sequence


class NotificationPermission(Enum):
    GRANTED = "granted"
    DENIED = "denied"
    DEFAULT = "default"

    @classmethod
    def coerce(cls, value) -> "NotificationPermission":
        if isinstance(value, NotificationPermission):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.DEFAULT


class AudioOutput(ABC):
    """Plays one short synthesized sound; must return without blocking."""

    @abstractmethod
    def play(self, kind: str, duration_ms: int, volume: float) -> None:
        pass


class Haptics(ABC):
    @abstractmethod
    def vibrate(self, pattern: Sequence[int]) -> None:
        pass


class Notifier(ABC):
    @abstractmethod
    def notify(self, title: str, body: str) -> None:
        pass


class Display(ABC):
    @abstractmethod
    def flash(self) -> None:
        pass


class NullAudio(AudioOutput):
    def play(self, kind: str, duration_ms: int, volume: float) -> None:
        pass


class NullHaptics(Haptics):
    def vibrate(self, pattern: Sequence[int]) -> None:
        pass


class NullNotifier(Notifier):
    def notify(self, title: str, body: str) -> None:
        pass


class NullDisplay(Display):
    def flash(self) -> None:
        pass
