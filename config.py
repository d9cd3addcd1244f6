import logging
import logging.handlers
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


def _get_env_bool(name: str, default: bool = False) -> bool:
    val = os.getenv(name)
    if val is None:
        return default
    return val.strip() in {"1", "true", "True", "yes", "YES", "y"}


def _get_env_int(name: str, default: int) -> int:
    val = os.getenv(name)
    if val is None or val == "":
        return default
    try:
        return int(val)
    except ValueError as exc:
        raise ValueError(f"Environment variable {name} must be an integer") from exc


@dataclass
class Config:
    settings_path: Path
    tick_interval_ms: int
    output_sample_rate: int
    enable_audio: bool
    enable_speech: bool
    speech_rate: int
    notify_permission: str
    keep_awake: bool
    debug: bool
    log_level: str
    log_dir: Path


def load_config(env_path: Optional[Path] = None) -> Config:
    if env_path is None:
        env_path = Path(".env")
    if env_path.exists():
        load_dotenv(env_path)

    settings_path = Path(os.getenv("SETTINGS_PATH", "data/brew_settings.json"))
    tick_interval_ms = _get_env_int("TICK_INTERVAL_MS", 250)
    if tick_interval_ms <= 0:
        raise ValueError("TICK_INTERVAL_MS must be positive")
    output_sample_rate = _get_env_int("OUTPUT_SAMPLE_RATE", 44100)
    enable_audio = _get_env_bool("ENABLE_AUDIO", True)
    enable_speech = _get_env_bool("ENABLE_SPEECH", True)
    speech_rate = _get_env_int("SPEECH_RATE", 185)
    notify_permission = os.getenv("NOTIFY_PERMISSION", "default").strip().lower()
    keep_awake = _get_env_bool("KEEP_AWAKE", False)
    debug = _get_env_bool("DEBUG", False)
    log_level = os.getenv("LOG_LEVEL", "DEBUG" if debug else "INFO").upper()
    log_dir = Path(os.getenv("LOG_DIR", "logs"))

    return Config(
        settings_path=settings_path,
        tick_interval_ms=tick_interval_ms,
        output_sample_rate=output_sample_rate,
        enable_audio=enable_audio,
        enable_speech=enable_speech,
        speech_rate=speech_rate,
        notify_permission=notify_permission,
        keep_awake=keep_awake,
        debug=debug,
        log_level=log_level,
        log_dir=log_dir,
    )


def setup_logging(log_level: str = "INFO", log_dir: Path = Path("logs"), console: bool = True) -> None:
    log_dir.mkdir(parents=True, exist_ok=True)

    log_path = log_dir / "brewtimer.log"
    formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    file_handler = logging.handlers.RotatingFileHandler(
        log_path, maxBytes=1_000_000, backupCount=3, encoding="utf-8"
    )
    file_handler.setFormatter(formatter)
    handlers = [file_handler]

    if console:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        console_handler.setLevel(logging.WARNING)
        handlers.append(console_handler)

    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        handlers=handlers,
    )
