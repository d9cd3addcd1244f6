from __future__ import annotations

import dataclasses
import json
import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .stages import SoundKind, Stage, new_stage_id

logger = logging.getLogger(__name__)

DEFAULT_TOTAL_MINUTES = 60
DEFAULT_VOLUME = 0.8
DEFAULT_PRE_ALERT_SECONDS = 60
DEFAULT_REPEAT_INTERVAL_MS = 1200

# Older settings files use camelCase keys.
_KEY_ALIASES = {
    "totalMinutes": "total_minutes",
    "flashScreen": "flash_screen",
    "preAlertSeconds": "pre_alert_seconds",
    "continuousBeepMs": "repeat_interval_ms",
    "repeatIntervalMs": "repeat_interval_ms",
}


def default_stages() -> List[Stage]:
    return [
        Stage(new_stage_id(), "Hop Add #1", 30, SoundKind.BEEP),
        Stage(new_stage_id(), "Hop Add #2", 45, SoundKind.BELL),
        Stage(new_stage_id(), "Hop Add #3", 55, SoundKind.AIRHORN),
        Stage(new_stage_id(), "Flame Out", 60, SoundKind.BEEP),
    ]


@dataclass(frozen=True)
class Settings:
    total_minutes: int = DEFAULT_TOTAL_MINUTES
    stages: tuple = field(default_factory=lambda: tuple(default_stages()))
    flash_screen: bool = True
    vibrate: bool = True
    volume: float = DEFAULT_VOLUME
    pre_alert_seconds: float = DEFAULT_PRE_ALERT_SECONDS
    repeat_interval_ms: int = DEFAULT_REPEAT_INTERVAL_MS

    @property
    def total_seconds(self) -> int:
        return self.total_minutes * 60

    def normalized(self) -> "Settings":
        """Coerce every field into range; bad values fall back to defaults."""

        total = _number(self.total_minutes, DEFAULT_TOTAL_MINUTES)
        total = max(1, int(math.floor(total + 0.5)))
        volume = min(1.0, max(0.0, _number(self.volume, DEFAULT_VOLUME)))
        lead = max(0.0, _number(self.pre_alert_seconds, DEFAULT_PRE_ALERT_SECONDS))
        repeat = _number(self.repeat_interval_ms, DEFAULT_REPEAT_INTERVAL_MS)
        repeat = int(math.floor(repeat + 0.5))
        if repeat <= 0:
            repeat = DEFAULT_REPEAT_INTERVAL_MS
        stages = tuple(
            stage if isinstance(stage, Stage) else Stage.from_dict(stage)
            for stage in self.stages or ()
        )
        return Settings(
            total_minutes=total,
            stages=stages,
            flash_screen=_flag(self.flash_screen),
            vibrate=_flag(self.vibrate),
            volume=volume,
            pre_alert_seconds=int(lead) if float(lead).is_integer() else lead,
            repeat_interval_ms=repeat,
        )

    def replace(self, **changes) -> "Settings":
        return dataclasses.replace(self, **changes).normalized()

    def with_total_minutes(self, minutes) -> "Settings":
        return self.replace(total_minutes=minutes)

    def with_stage_added(self, label: str, minute, sound=SoundKind.BEEP) -> "Settings":
        stage = Stage(new_stage_id(), label, _number(minute, 0.0), SoundKind.coerce(sound))
        return self.replace(stages=self.stages + (stage,))

    def with_stage_updated(
        self,
        stage_id: str,
        label: Optional[str] = None,
        minute=None,
        sound=None,
    ) -> "Settings":
        stages = []
        for stage in self.stages:
            if stage.id == stage_id:
                stage = Stage(
                    id=stage.id,
                    label=stage.label if label is None else label,
                    minute=stage.minute if minute is None else _number(minute, 0.0),
                    sound=stage.sound if sound is None else SoundKind.coerce(sound),
                )
            stages.append(stage)
        return self.replace(stages=tuple(stages))

    def with_stage_removed(self, stage_id: str) -> "Settings":
        return self.replace(stages=tuple(s for s in self.stages if s.id != stage_id))

    def to_dict(self) -> dict:
        return {
            "total_minutes": self.total_minutes,
            "stages": [s.to_dict() for s in self.stages],
            "flash_screen": self.flash_screen,
            "vibrate": self.vibrate,
            "volume": self.volume,
            "pre_alert_seconds": self.pre_alert_seconds,
            "repeat_interval_ms": self.repeat_interval_ms,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Settings":
        if not isinstance(data, dict):
            raise ValueError("Settings payload must be an object")
        values = {_KEY_ALIASES.get(k, k): v for k, v in data.items()}
        known = {f.name for f in dataclasses.fields(cls)}
        kwargs = {k: v for k, v in values.items() if k in known}
        raw_stages = kwargs.pop("stages", None)
        if raw_stages is not None:
            if not isinstance(raw_stages, list):
                raise ValueError("Settings stages must be a list")
            kwargs["stages"] = tuple(Stage.from_dict(item) for item in raw_stages if isinstance(item, dict))
        return cls(**kwargs).normalized()


def _number(value, default: float) -> float:
    if isinstance(value, bool):
        return float(value)
    try:
        number = float(value)
    except (TypeError, ValueError):
        return float(default)
    if not math.isfinite(number):
        return float(default)
    return number


def _flag(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() not in {"", "0", "false", "no", "off"}
    return bool(value)


def load_settings(path: Path) -> Settings:
    if not path.exists():
        return Settings()
    try:
        with path.open("r", encoding="utf-8") as f:
            payload = json.load(f)
        settings = Settings.from_dict(payload)
    except Exception as exc:
        logger.error("Failed to load settings from %s, using defaults: %s", path, exc)
        return Settings()
    logger.info("Loaded settings from %s (%s stages)", path, len(settings.stages))
    return settings


def save_settings(path: Path, settings: Settings) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(settings.to_dict(), f, ensure_ascii=False, indent=2)
