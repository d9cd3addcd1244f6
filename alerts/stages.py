from __future__ import annotations

import math
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional, Sequence, Tuple


class SoundKind(Enum):
    BEEP = "beep"
    BELL = "bell"
    AIRHORN = "airhorn"
    CHIRP = "chirp"

    @classmethod
    def coerce(cls, value) -> "SoundKind":
        if isinstance(value, SoundKind):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.BEEP


def new_stage_id() -> str:
    return f"st_{uuid.uuid4().hex[:8]}"


@dataclass(frozen=True)
class Stage:
    id: str
    label: str
    minute: float
    sound: SoundKind = SoundKind.BEEP

    @property
    def threshold_seconds(self) -> float:
        return self.minute * 60

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "label": self.label,
            "minute": int(self.minute) if float(self.minute).is_integer() else self.minute,
            "sound": self.sound.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Stage":
        raw_minute = data.get("minute")
        try:
            minute = float(raw_minute)
        except (TypeError, ValueError):
            minute = 0.0
        return cls(
            id=str(data.get("id") or new_stage_id()),
            label=str(data.get("label") or "Stage"),
            minute=minute,
            sound=SoundKind.coerce(data.get("sound")),
        )


def canonicalize_minute(raw, total_minutes: int) -> int:
    """Round half-up to a whole minute and clamp into [0, total_minutes]."""

    try:
        value = float(raw)
    except (TypeError, ValueError):
        value = 0.0
    if math.isnan(value):
        value = 0.0
    if math.isinf(value):
        return total_minutes if value > 0 else 0
    minute = math.floor(value + 0.5)
    return max(0, min(total_minutes, minute))


class StageCatalog:
    """Canonical, threshold-ordered view over the configured stages.

    Ties keep insertion order (``sorted`` is stable), which fixes the order in
    which same-minute stages fire inside one tick.
    """

    def __init__(self, stages: Sequence[Stage], total_minutes: int):
        self.total_minutes = total_minutes
        canonical: List[Stage] = [
            Stage(
                id=stage.id,
                label=stage.label,
                minute=canonicalize_minute(stage.minute, total_minutes),
                sound=SoundKind.coerce(stage.sound),
            )
            for stage in stages
        ]
        self._stages: Tuple[Stage, ...] = tuple(sorted(canonical, key=lambda s: s.minute))

    @property
    def stages(self) -> Tuple[Stage, ...]:
        return self._stages

    def __iter__(self) -> Iterator[Stage]:
        return iter(self._stages)

    def __len__(self) -> int:
        return len(self._stages)

    def get(self, stage_id: str) -> Optional[Stage]:
        for stage in self._stages:
            if stage.id == stage_id:
                return stage
        return None

    def next_stage(self, elapsed_seconds: float) -> Optional[Stage]:
        for stage in self._stages:
            if stage.threshold_seconds > elapsed_seconds:
                return stage
        return None
