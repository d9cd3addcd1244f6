from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from .stages import SoundKind

SIMPLE_ACTIONS = {
    "start": "start",
    "go": "start",
    "pause": "pause",
    "resume": "resume",
    "continue": "resume",
    "reset": "reset",
    "ack": "ack",
    "acknowledge": "ack",
    "ok": "ack",
    "stop": "ack",
    "status": "status",
    "stages": "stages",
    "list": "stages",
    "notify": "notify",
    "wake": "wake",
    "help": "help",
    "?": "help",
    "quit": "quit",
    "exit": "quit",
}

ON_WORDS = {"on", "yes", "true", "1", "enable"}
OFF_WORDS = {"off", "no", "false", "0", "disable"}
EDIT_FIELDS = {"minute", "min", "label", "name", "sound"}


@dataclass
class TimerCommand:
    action: str
    index: Optional[int] = None
    minute: Optional[float] = None
    label: Optional[str] = None
    sound: Optional[SoundKind] = None
    value: Optional[float] = None
    enabled: Optional[bool] = None
    field: Optional[str] = None
    error: Optional[str] = None
    raw_text: str = ""


def parse_command(text: str) -> Optional[TimerCommand]:
    """Parse one console line into a timer command; ``None`` for blank or unknown verbs."""

    cleaned = text.strip()
    if not cleaned:
        return None
    verb, _, rest = cleaned.partition(" ")
    verb = verb.lower()
    rest = rest.strip()

    if verb in SIMPLE_ACTIONS and not rest:
        return TimerCommand(action=SIMPLE_ACTIONS[verb], raw_text=cleaned)

    if verb == "add":
        return _parse_add(rest, cleaned)
    if verb in ("remove", "rm", "delete", "del"):
        index = _extract_index(rest)
        if index is None:
            return _unknown("Which stage? Use: remove <number>", cleaned)
        return TimerCommand(action="remove", index=index, raw_text=cleaned)
    if verb == "edit":
        return _parse_edit(rest, cleaned)
    if verb in ("total", "lead", "volume", "repeat"):
        value = _extract_number(rest)
        if value is None:
            return _unknown(f"{verb} needs a number", cleaned)
        if verb == "volume" and (rest.endswith("%") or value > 1):
            value = value / 100.0
        return TimerCommand(action=verb, value=value, raw_text=cleaned)
    if verb in ("flash", "vibrate"):
        enabled = _extract_switch(rest)
        if enabled is None:
            return _unknown(f"Use: {verb} on|off", cleaned)
        return TimerCommand(action=verb, enabled=enabled, raw_text=cleaned)
    if verb in SIMPLE_ACTIONS:
        return TimerCommand(action=SIMPLE_ACTIONS[verb], raw_text=cleaned)
    return None


def _parse_add(rest: str, cleaned: str) -> TimerCommand:
    # add <minute> [sound] <label>
    match = re.match(r"^(-?\d+(?:[.,]\d+)?)\s*(?:m|min|minutes?)?\b\s*(.*)$", rest, re.IGNORECASE)
    if not match:
        return _unknown("Use: add <minute> [beep|bell|airhorn|chirp] <label>", cleaned)
    minute = float(match.group(1).replace(",", "."))
    tail = match.group(2).strip()
    sound = SoundKind.BEEP
    first, _, remainder = tail.partition(" ")
    if first.lower() in {k.value for k in SoundKind}:
        sound = SoundKind(first.lower())
        tail = remainder.strip()
    label = tail or f"Stage @ {minute:g}"
    return TimerCommand(action="add", minute=minute, sound=sound, label=label, raw_text=cleaned)


def _parse_edit(rest: str, cleaned: str) -> TimerCommand:
    # edit <index> minute|label|sound <value>
    match = re.match(r"^(\d+)\s+(\w+)\s+(.+)$", rest)
    if not match or match.group(2).lower() not in EDIT_FIELDS:
        return _unknown("Use: edit <number> minute|label|sound <value>", cleaned)
    index = int(match.group(1))
    field_name = match.group(2).lower()
    value = match.group(3).strip()
    if field_name in ("minute", "min"):
        minute = _extract_number(value)
        if minute is None:
            return _unknown("Minute must be a number", cleaned)
        return TimerCommand(action="edit", index=index, field="minute", minute=minute, raw_text=cleaned)
    if field_name == "sound":
        if value.lower() not in {k.value for k in SoundKind}:
            return _unknown("Sound must be one of beep, bell, airhorn, chirp", cleaned)
        return TimerCommand(action="edit", index=index, field="sound", sound=SoundKind(value.lower()), raw_text=cleaned)
    return TimerCommand(action="edit", index=index, field="label", label=value, raw_text=cleaned)


def _unknown(error: str, cleaned: str) -> TimerCommand:
    return TimerCommand(action="unknown", error=error, raw_text=cleaned)


def _extract_index(text: str) -> Optional[int]:
    match = re.search(r"(\d+)", text)
    if match:
        return int(match.group(1))
    return None


def _extract_number(text: str) -> Optional[float]:
    match = re.search(r"(-?\d+(?:[.,]\d+)?)", text)
    if match:
        return float(match.group(1).replace(",", "."))
    return None


def _extract_switch(text: str) -> Optional[bool]:
    word = text.strip().lower()
    if word in ON_WORDS:
        return True
    if word in OFF_WORDS:
        return False
    return None
