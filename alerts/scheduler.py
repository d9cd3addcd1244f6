from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List

from .stages import Stage, StageCatalog

logger = logging.getLogger(__name__)


class AlertKind(Enum):
    PRE = "pre"
    MAIN = "main"


class StageState(Enum):
    IDLE = "idle"
    PRE_FIRED = "pre_fired"
    MAIN_FIRED = "main_fired"


@dataclass(frozen=True)
class AlertEvent:
    kind: AlertKind
    stage: Stage
    fired_at: float

    @property
    def is_main(self) -> bool:
        return self.kind == AlertKind.MAIN


class AlertScheduler:
    """Per-run threshold crossing detection with exactly-once firing.

    Comparisons are level-based over the absolute elapsed value, so a coarse
    or late tick still fires each crossing once. State is keyed by stage id
    and survives stage edits; it is only dropped by ``clear()``.
    """

    def __init__(self) -> None:
        self._states: Dict[str, StageState] = {}
        self._pre_fired: Dict[str, bool] = {}

    def clear(self) -> None:
        self._states = {}
        self._pre_fired = {}

    def state_of(self, stage_id: str) -> StageState:
        return self._states.get(stage_id, StageState.IDLE)

    def pre_fired(self, stage_id: str) -> bool:
        return self._pre_fired.get(stage_id, False)

    def main_fired(self, stage_id: str) -> bool:
        return self.state_of(stage_id) == StageState.MAIN_FIRED

    def evaluate(
        self,
        catalog: StageCatalog,
        elapsed: float,
        lead_seconds: float,
        now: float,
    ) -> List[AlertEvent]:
        events: List[AlertEvent] = []
        for stage in catalog:
            threshold = stage.threshold_seconds
            if (
                lead_seconds > 0
                and threshold - lead_seconds <= elapsed < threshold
                and not self.pre_fired(stage.id)
            ):
                self._pre_fired[stage.id] = True
                if self.state_of(stage.id) == StageState.IDLE:
                    self._states[stage.id] = StageState.PRE_FIRED
                logger.info("Pre-alert for %s (%s) at elapsed=%.1fs", stage.label, stage.id, elapsed)
                events.append(AlertEvent(AlertKind.PRE, stage, now))
            if elapsed >= threshold and not self.main_fired(stage.id):
                self._states[stage.id] = StageState.MAIN_FIRED
                logger.info("Main alert for %s (%s) at elapsed=%.1fs", stage.label, stage.id, elapsed)
                events.append(AlertEvent(AlertKind.MAIN, stage, now))
        return events
