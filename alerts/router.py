from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from .commands import TimerCommand, parse_command
from .engine import BrewTimer
from .ports import NotificationPermission
from .settings import Settings
from .time_utils import format_hms, format_stage_time

logger = logging.getLogger(__name__)

HELP_TEXT = (
    "Commands: start, pause, resume, reset, ack, status, stages,\n"
    "  add <minute> [beep|bell|airhorn|chirp] <label>, remove <n>,\n"
    "  edit <n> minute|label|sound <value>, total <min>, lead <sec>,\n"
    "  volume <0-1|%>, repeat <ms>, flash on|off, vibrate on|off,\n"
    "  notify, wake, help, quit"
)


@dataclass
class CommandResult:
    handled: bool
    response_text: Optional[str] = None
    action: Optional[str] = None
    quit: bool = False


class CommandRouter:
    def __init__(
        self,
        engine: BrewTimer,
        save_fn: Optional[Callable[[Settings], None]] = None,
        permission_fn: Optional[Callable[[], NotificationPermission]] = None,
        wake_lock=None,
    ):
        self.engine = engine
        self.save_fn = save_fn
        self.permission_fn = permission_fn
        self.wake_lock = wake_lock

    def handle_text(self, text: str, now: Optional[float] = None) -> Optional[CommandResult]:
        parsed = parse_command(text)
        if not parsed:
            return None
        logger.debug("Command parsed: %s", parsed)
        return self.handle(parsed, now=now)

    def handle(self, cmd: TimerCommand, now: Optional[float] = None) -> CommandResult:
        engine = self.engine
        action = cmd.action

        if action == "unknown":
            return CommandResult(handled=True, response_text=cmd.error, action=action)
        if action == "help":
            return CommandResult(handled=True, response_text=HELP_TEXT, action=action)
        if action == "quit":
            return CommandResult(handled=True, response_text="Bye.", action=action, quit=True)

        if action == "start":
            engine.start(now)
            return CommandResult(handled=True, response_text="Boil timer started.", action=action)
        if action == "pause":
            resp = "Paused." if engine.pause(now) else "Timer is not running."
            return CommandResult(handled=True, response_text=resp, action=action)
        if action == "resume":
            resp = "Resumed." if engine.resume(now) else "Nothing to resume."
            return CommandResult(handled=True, response_text=resp, action=action)
        if action == "reset":
            engine.reset()
            return CommandResult(handled=True, response_text="Timer reset.", action=action)
        if action == "ack":
            alert = engine.acknowledge()
            resp = f"Acknowledged: {alert.stage.label}." if alert else "No active alert."
            return CommandResult(handled=True, response_text=resp, action=action)
        if action == "status":
            return CommandResult(handled=True, response_text=self.status_text(now), action=action)
        if action == "stages":
            return CommandResult(handled=True, response_text=self.stages_text(), action=action)
        if action == "notify":
            return CommandResult(handled=True, response_text=self._request_permission(), action=action)
        if action == "wake":
            return CommandResult(handled=True, response_text=self._toggle_wake_lock(), action=action)

        return self._handle_settings(cmd)

    def status_text(self, now: Optional[float] = None) -> str:
        engine = self.engine
        total = engine.settings.total_seconds
        elapsed = int(engine.elapsed(now))
        if engine.running:
            state = "running"
        elif engine.started:
            state = "paused"
        else:
            state = "ready"
        nxt = engine.catalog.next_stage(elapsed)
        lines = [
            f"{state}: elapsed {format_hms(elapsed)}, remaining {format_hms(max(0, total - elapsed))}",
            f"Next: {nxt.label} at {format_stage_time(nxt.minute)}" if nxt else "All stages complete.",
        ]
        alert = engine.active_alert
        if alert:
            lines.append(f"Active alert: {alert.kind.value} - {alert.stage.label}")
        return "\n".join(lines)

    def stages_text(self) -> str:
        stages = self._ordered_stages()
        if not stages:
            return "No stages configured."
        parts = []
        for idx, stage in enumerate(stages, start=1):
            fired = "main" if self.engine.scheduler.main_fired(stage.id) else (
                "pre" if self.engine.scheduler.pre_fired(stage.id) else "-"
            )
            parts.append(f"{idx}) {format_stage_time(stage.minute)} {stage.label} [{stage.sound.value}] fired={fired}")
        return "Stages:\n" + "\n".join(parts)

    def _ordered_stages(self):
        return list(self.engine.catalog)

    def _stage_at(self, index: Optional[int]):
        stages = self._ordered_stages()
        if index is None or index < 1 or index > len(stages):
            return None
        return stages[index - 1]

    def _handle_settings(self, cmd: TimerCommand) -> CommandResult:
        settings = self.engine.settings
        action = cmd.action
        if action == "add":
            updated = settings.with_stage_added(cmd.label or "Stage", cmd.minute, cmd.sound)
            resp = f"Added {cmd.label} at {format_stage_time(cmd.minute or 0)}."
        elif action == "remove":
            stage = self._stage_at(cmd.index)
            if not stage:
                return CommandResult(handled=True, response_text="No such stage.", action=action)
            updated = settings.with_stage_removed(stage.id)
            resp = f"Removed {stage.label}."
        elif action == "edit":
            stage = self._stage_at(cmd.index)
            if not stage:
                return CommandResult(handled=True, response_text="No such stage.", action=action)
            updated = settings.with_stage_updated(stage.id, label=cmd.label, minute=cmd.minute, sound=cmd.sound)
            resp = f"Updated {stage.label}."
        elif action == "total":
            updated = settings.with_total_minutes(cmd.value)
            resp = f"Boil length set to {updated.total_minutes} min."
        elif action == "lead":
            updated = settings.replace(pre_alert_seconds=cmd.value)
            resp = f"Heads-up lead set to {updated.pre_alert_seconds}s."
        elif action == "volume":
            updated = settings.replace(volume=cmd.value)
            resp = f"Volume set to {int(round(updated.volume * 100))}%."
        elif action == "repeat":
            updated = settings.replace(repeat_interval_ms=cmd.value)
            resp = f"Alert repeat set to {updated.repeat_interval_ms} ms."
        elif action == "flash":
            updated = settings.replace(flash_screen=cmd.enabled)
            resp = f"Screen flash {'on' if updated.flash_screen else 'off'}."
        elif action == "vibrate":
            updated = settings.replace(vibrate=cmd.enabled)
            resp = f"Vibration {'on' if updated.vibrate else 'off'}."
        else:
            return CommandResult(handled=False, action=action)

        self.engine.configure(updated)
        if self.save_fn:
            try:
                self.save_fn(self.engine.settings)
            except OSError as exc:
                logger.error("Failed to save settings: %s", exc)
                resp += " (not saved)"
        return CommandResult(handled=True, response_text=resp, action=action)

    def _request_permission(self) -> str:
        if self.permission_fn:
            self.engine.permission = self.permission_fn()
        return f"Notify: {self.engine.permission.value}"

    def _toggle_wake_lock(self) -> str:
        if self.wake_lock is None:
            return "Keep awake is not available."
        if self.wake_lock.active:
            self.wake_lock.release()
        else:
            self.wake_lock.acquire()
        return "Keep Awake: ON" if self.wake_lock.active else "Keep Awake: OFF"
