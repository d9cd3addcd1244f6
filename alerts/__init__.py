"""Boil stage alert scheduling for the brew timer."""

from .engine import BrewTimer, TickResult
from .lifecycle import ActiveAlert, AlertLifecycle, SoundRepeater
from .scheduler import AlertEvent, AlertKind, AlertScheduler, StageState
from .settings import Settings, load_settings, save_settings
from .stages import SoundKind, Stage, StageCatalog
from .tracker import ElapsedTimeTracker
