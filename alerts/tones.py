from __future__ import annotations

import numpy as np

from .stages import SoundKind

DEFAULT_SAMPLE_RATE = 44100
ATTACK_SECONDS = 0.01
DECAY_FLOOR = 0.001
CHIRP_SWEEP_SECONDS = 0.4

# Base frequency per sound kind; chirp sweeps from 400 Hz up to 1200 Hz.
TONE_FREQUENCIES = {
    SoundKind.BEEP: 880.0,
    SoundKind.BELL: 660.0,
    SoundKind.AIRHORN: 220.0,
    SoundKind.CHIRP: 400.0,
}


def _envelope(n: int, volume: float, sample_rate: int) -> np.ndarray:
    t = np.arange(n) / sample_rate
    duration = n / sample_rate
    attack = min(ATTACK_SECONDS, duration)
    env = np.empty(n, dtype=np.float64)
    rising = t < attack
    env[rising] = volume * t[rising] / attack if attack > 0 else volume
    # Exponential fall from the attack peak to DECAY_FLOOR at the last sample.
    span = max(duration - attack, 1.0 / sample_rate)
    tail = ~rising
    ratio = (t[tail] - attack) / span
    env[tail] = volume * (DECAY_FLOOR / max(volume, DECAY_FLOOR)) ** ratio if volume > 0 else 0.0
    return env


def _phase(kind: SoundKind, t: np.ndarray) -> np.ndarray:
    if kind != SoundKind.CHIRP:
        return TONE_FREQUENCIES[kind] * t
    start, end = TONE_FREQUENCIES[SoundKind.CHIRP], 1200.0
    k = np.log(end / start) / CHIRP_SWEEP_SECONDS
    sweep_t = np.minimum(t, CHIRP_SWEEP_SECONDS)
    phase = start * (np.exp(k * sweep_t) - 1.0) / k
    # Hold the top frequency once the sweep is done.
    return phase + end * np.maximum(t - CHIRP_SWEEP_SECONDS, 0.0)


def render_tone(kind, duration_ms: int, volume: float, sample_rate: int = DEFAULT_SAMPLE_RATE) -> np.ndarray:
    """Synthesize one alert sound as mono float32 samples in [-volume, volume]."""

    kind = SoundKind.coerce(kind)
    volume = float(min(1.0, max(0.0, volume)))
    n = max(0, int(sample_rate * max(0, duration_ms) / 1000))
    if n == 0:
        return np.zeros(0, dtype=np.float32)
    t = np.arange(n) / sample_rate
    cycles = _phase(kind, t)
    frac = cycles - np.floor(cycles)
    if kind == SoundKind.BELL:
        wave = 1.0 - 4.0 * np.abs(frac - 0.5)
    elif kind == SoundKind.AIRHORN:
        wave = np.where(frac < 0.5, 1.0, -1.0)
    elif kind == SoundKind.CHIRP:
        wave = 2.0 * frac - 1.0
    else:
        wave = np.sin(2 * np.pi * cycles)
    samples = wave * _envelope(n, volume, sample_rate)
    return np.clip(samples, -1.0, 1.0).astype(np.float32)
