import logging
import signal
from threading import Event, Lock, Thread
from typing import Optional

from alerts.engine import BrewTimer, TickResult
from alerts.lifecycle import AlertLifecycle
from alerts.ports import NotificationPermission
from alerts.router import HELP_TEXT, CommandRouter
from alerts.scheduler import AlertEvent, AlertKind
from alerts.settings import Settings, load_settings, save_settings
from alerts.time_utils import format_hms, format_progress, format_stage_time
from audio_io import init_audio_output
from config import Config, load_config, setup_logging
from devices import LogHaptics, SpeechNotifier, TerminalDisplay, WakeLock

logger = logging.getLogger("brewtimer")


def graceful_exit(signum, frame) -> None:  # pragma: no cover - signal handler
    logger.info("Shutting down (signal %s)", signum)
    raise KeyboardInterrupt()


class BrewTimerApp:
    def __init__(self, config: Config, settings: Settings):
        self.config = config
        self.stop_event = Event()
        self.engine_lock = Lock()
        self.tick_thread: Optional[Thread] = None
        self._last_second: Optional[int] = None

        self.pa, self.audio = (None, None)
        if config.enable_audio:
            self.pa, self.audio = init_audio_output(config.output_sample_rate)
        self.notifier = SpeechNotifier(rate=config.speech_rate, enabled=config.enable_speech)
        self.display = TerminalDisplay()
        self.wake_lock = WakeLock()

        self.lifecycle = AlertLifecycle(
            audio=self.audio,
            haptics=LogHaptics(),
            notifier=self.notifier,
            display=self.display,
            permission=NotificationPermission.coerce(config.notify_permission),
        )
        self.engine = BrewTimer(settings, lifecycle=self.lifecycle, on_alert=self._on_alert)
        self.router = CommandRouter(
            self.engine,
            save_fn=lambda s: save_settings(self.config.settings_path, s),
            permission_fn=self.notifier.permission,
            wake_lock=self.wake_lock,
        )

    def start(self) -> None:
        if self.config.keep_awake:
            self.wake_lock.acquire()
        self.tick_thread = Thread(target=self._tick_loop, name="boil-tick", daemon=True)
        self.tick_thread.start()

    def shutdown(self) -> None:
        self.stop_event.set()
        if self.tick_thread:
            self.tick_thread.join(timeout=2)
        with self.engine_lock:
            self.lifecycle.clear()
        self.wake_lock.release()
        if self.audio:
            self.audio.close()
        if self.pa:
            self.pa.terminate()

    def handle_line(self, line: str) -> bool:
        """Route one console line; returns False when the app should exit."""

        with self.engine_lock:
            result = self.router.handle_text(line)
        if result is None:
            if line.strip():
                print("Unknown command. Type 'help'.")
            return True
        if result.response_text:
            print(result.response_text)
        return not result.quit

    def _tick_loop(self) -> None:
        interval = self.config.tick_interval_ms / 1000.0
        while not self.stop_event.is_set():
            try:
                with self.engine_lock:
                    result = self.engine.tick()
                self._log_progress(result)
            except Exception as exc:  # pragma: no cover - keep ticking
                logger.error("Tick failed: %s", exc, exc_info=True)
            self.stop_event.wait(interval)

    def _log_progress(self, result: TickResult) -> None:
        if not self.engine.running or result.elapsed_seconds == self._last_second:
            return
        self._last_second = result.elapsed_seconds
        if result.elapsed_seconds % 60 == 0:
            nxt = result.next_stage
            logger.info(
                "elapsed=%s remaining=%s %s next=%s",
                format_hms(result.elapsed_seconds),
                format_hms(result.remaining_seconds),
                format_progress(result.progress),
                f"{nxt.label}@{format_stage_time(nxt.minute)}" if nxt else "none",
            )

    def _on_alert(self, event: AlertEvent) -> None:
        if event.kind == AlertKind.PRE:
            print(f"HEADS-UP: {event.stage.label} in {self.engine.settings.pre_alert_seconds}s")
        else:
            print(f"ALERT: {event.stage.label} (minute {format_stage_time(event.stage.minute)}) - type 'ack'")


def main() -> None:
    config = load_config()
    setup_logging(config.log_level, config.log_dir)
    logger.info("Starting brew timer")
    settings = load_settings(config.settings_path)

    app = BrewTimerApp(config, settings)
    signal.signal(signal.SIGINT, graceful_exit)
    app.start()
    print("Brew Timer ready.")
    print(HELP_TEXT)
    try:
        while True:
            line = input("> ")
            if not app.handle_line(line):
                break
    except (KeyboardInterrupt, EOFError):
        logger.info("Interrupted by user")
    finally:
        app.shutdown()


if __name__ == "__main__":
    main()
