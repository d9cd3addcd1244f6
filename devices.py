from __future__ import annotations

import logging
import shutil
import subprocess
import sys
from threading import Lock, Thread
from typing import Optional, Sequence, TextIO

from alerts.ports import Display, Haptics, NotificationPermission, Notifier

try:  # Optional local TTS for spoken notifications
    import pyttsx3
except ImportError:  # pragma: no cover - optional
    pyttsx3 = None  # type: ignore

logger = logging.getLogger(__name__)


class LogHaptics(Haptics):
    """Desktops have no vibration motor; the request is only logged."""

    def vibrate(self, pattern: Sequence[int]) -> None:
        logger.debug("Vibration requested: %s", list(pattern))


class SpeechNotifier(Notifier):
    """Speaks notification titles through SAPI/espeak via pyttsx3."""

    def __init__(self, rate: int = 185, enabled: bool = True):
        self._engine = None
        self._lock = Lock()
        if enabled and pyttsx3:
            try:
                self._engine = pyttsx3.init()
                self._engine.setProperty("rate", rate)
            except Exception:
                logger.warning("pyttsx3 unavailable, spoken notifications disabled", exc_info=True)
                self._engine = None

    @property
    def available(self) -> bool:
        return self._engine is not None

    def permission(self) -> NotificationPermission:
        return NotificationPermission.GRANTED if self.available else NotificationPermission.DENIED

    def notify(self, title: str, body: str) -> None:
        logger.info("Notification: %s (%s)", title, body)
        if not self._engine:
            return
        Thread(target=self._speak, args=(title,), name="notify-speech", daemon=True).start()

    def _speak(self, text: str) -> None:
        with self._lock:
            try:
                self._engine.say(text)
                self._engine.runAndWait()
            except Exception:  # pragma: no cover - engine runtime errors
                logger.error("pyttsx3 failed to speak text", exc_info=True)


class TerminalDisplay(Display):
    FLASH_BANNER = "\a\x1b[7m  !!!  BREW TIMER  !!!  \x1b[0m"

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream or sys.stdout

    def flash(self) -> None:
        self.stream.write(self.FLASH_BANNER + "\n")
        self.stream.flush()


class WakeLock:
    """Keeps the machine awake by holding a ``systemd-inhibit`` child process.

    Where the inhibitor is missing, acquire/release are silent no-ops.
    """

    def __init__(self, reason: str = "Brew timer running"):
        self.reason = reason
        self._proc: Optional[subprocess.Popen] = None
        self._binary = shutil.which("systemd-inhibit")

    @property
    def supported(self) -> bool:
        return self._binary is not None

    @property
    def active(self) -> bool:
        return self._proc is not None and self._proc.poll() is None

    def acquire(self) -> bool:
        if self.active:
            return True
        if not self._binary:
            logger.info("Wake lock not supported on this system")
            return False
        try:
            self._proc = subprocess.Popen(
                [
                    self._binary,
                    "--what=idle:sleep",
                    "--who=brewtimer",
                    f"--why={self.reason}",
                    "sleep",
                    "infinity",
                ],
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
        except OSError as exc:
            logger.warning("Wake lock error: %s", exc)
            self._proc = None
            return False
        logger.info("Wake lock acquired")
        return True

    def release(self) -> None:
        proc = self._proc
        self._proc = None
        if proc is None or proc.poll() is not None:
            return
        proc.terminate()
        try:
            proc.wait(timeout=2)
        except subprocess.TimeoutExpired:
            proc.kill()
        logger.info("Wake lock released")
