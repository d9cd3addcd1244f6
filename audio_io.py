import logging
from threading import Lock, Thread
from typing import Optional

import numpy as np
import pyaudio

from alerts.ports import AudioOutput
from alerts.tones import DEFAULT_SAMPLE_RATE, render_tone

logger = logging.getLogger(__name__)


def create_pyaudio() -> pyaudio.PyAudio:
    pa = pyaudio.PyAudio()
    return pa


class ToneAudioOutput(AudioOutput):
    """Plays synthesized alert tones on the default output device.

    ``play`` hands the write to a daemon thread so the caller never waits on
    the sound card. A request that arrives while a tone is still being written
    is dropped rather than queued.
    """

    def __init__(self, pa: pyaudio.PyAudio, rate: int = DEFAULT_SAMPLE_RATE):
        self.pa = pa
        self.rate = rate
        self._lock = Lock()
        self.stream: Optional[pyaudio.Stream] = self.pa.open(
            format=pyaudio.paFloat32,
            channels=1,
            rate=self.rate,
            output=True,
        )

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    def play(self, kind: str, duration_ms: int, volume: float) -> None:
        if not self._lock.acquire(blocking=False):
            logger.debug("Tone still playing, dropping %s request", kind)
            return
        try:
            samples = render_tone(kind, duration_ms, volume, self.rate)
            Thread(target=self._write, args=(samples,), name="tone-out", daemon=True).start()
        except Exception:
            self._lock.release()
            raise

    def _write(self, samples: np.ndarray) -> None:
        # Runs holding the lock taken in play().
        try:
            if self.stream is not None:
                self.stream.write(samples.tobytes())
        except OSError as exc:  # pragma: no cover - device errors
            logger.error("Audio output failed: %s", exc)
        finally:
            self._lock.release()

    def close(self) -> None:
        with self._lock:
            if self.stream is not None:
                self.stream.stop_stream()
                self.stream.close()
                self.stream = None


def init_audio_output(rate: int) -> tuple:
    """Open PyAudio and an output stream; returns ``(pa, output)`` or ``(None, None)``."""

    try:
        pa = create_pyaudio()
    except Exception as exc:  # pragma: no cover - no PortAudio host
        logger.error("Failed to initialize PyAudio: %s", exc)
        return None, None
    try:
        return pa, ToneAudioOutput(pa, rate)
    except OSError as exc:  # pragma: no cover - no output device
        logger.error("No audio output device available: %s", exc)
        pa.terminate()
        return None, None
