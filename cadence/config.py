"""Configuration loading from environment variables."""
from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional

from .utils import parse_device_selector, parse_float_env, parse_int_env, resolve_path

AUDIO_BACKENDS = ("sounddevice", "vlc")
DEFAULT_AUDIO_BACKEND = "sounddevice"


@dataclass(frozen=True)
class AppConfig:
    log_level: str
    file_log_level: str
    log_dir: str
    log_file: str
    audio_backend: str = DEFAULT_AUDIO_BACKEND
    audio_device: int | str | None = None
    audio_blocksize: int = 2048
    seek_skip_limit_ms: Optional[int] = 1_800_000
    seek_step_seconds: float = 5.0
    command_timeout_seconds: Optional[float] = 10.0
    status_poll_ms: int = 250


def load_config() -> AppConfig:
    base_dir = str(Path(__file__).resolve().parents[1])
    log_level = os.getenv("LOG_LEVEL", "INFO").upper()
    file_log_level = os.getenv("FILE_LOG_LEVEL", "DEBUG").upper()
    log_dir = resolve_path(os.getenv("LOG_DIR", "logs"), base_dir)
    os.makedirs(log_dir, exist_ok=True)
    log_file = os.path.join(
        log_dir, f"cadence_{datetime.now().strftime('%Y%m%d_%H%M%S_%f')}.log"
    )
    audio_backend = os.getenv("AUDIO_BACKEND", DEFAULT_AUDIO_BACKEND).strip().lower()
    if audio_backend not in AUDIO_BACKENDS:
        audio_backend = DEFAULT_AUDIO_BACKEND
    audio_device = parse_device_selector(os.getenv("AUDIO_DEVICE", ""))
    audio_blocksize = parse_int_env("AUDIO_BLOCKSIZE", 2048, min_value=0, max_value=65536)
    seek_skip_limit_ms = parse_int_env("SEEK_SKIP_LIMIT_MS", 1_800_000, min_value=0)
    if seek_skip_limit_ms == 0:
        seek_skip_limit_ms = None
    seek_step_seconds = parse_float_env(
        "SEEK_STEP_SECONDS",
        5.0,
        min_value=0.5,
        max_value=600.0,
    )
    command_timeout_seconds = parse_float_env(
        "COMMAND_TIMEOUT_SECONDS",
        10.0,
        min_value=0.0,
        max_value=3600.0,
    )
    if command_timeout_seconds == 0:
        command_timeout_seconds = None
    status_poll_ms = parse_int_env("STATUS_POLL_MS", 250, min_value=50, max_value=5000)
    return AppConfig(
        log_level=log_level,
        file_log_level=file_log_level,
        log_dir=log_dir,
        log_file=log_file,
        audio_backend=audio_backend,
        audio_device=audio_device,
        audio_blocksize=audio_blocksize,
        seek_skip_limit_ms=seek_skip_limit_ms,
        seek_step_seconds=seek_step_seconds,
        command_timeout_seconds=command_timeout_seconds,
        status_poll_ms=status_poll_ms,
    )
