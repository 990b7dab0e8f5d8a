"""UI-neutral helpers shared by desktop UI implementations."""
from __future__ import annotations

from typing import Any, Mapping

from ..utils import format_timestamp

APP_TITLE = "Cadence"
NO_TRACK_TEXT = "No file loaded."
AUDIO_FILE_TYPES = [
    ("Audio files", "*.wav *.flac *.ogg *.oga *.mp3 *.aiff *.aif *.opus"),
    ("All files", "*.*"),
]


def is_error_payload(payload: Mapping[str, Any] | None) -> bool:
    return isinstance(payload, Mapping) and "error" in payload


def format_status_text(payload: Mapping[str, Any] | None) -> str:
    """Render a bridge status payload as a single status line."""
    if not payload:
        return "Stopped."
    if is_error_payload(payload):
        return f"Error: {payload['error']}"
    if payload.get("path") is None:
        return "Stopped."
    position = format_timestamp(payload.get("position_ms"))
    duration_ms = payload.get("duration_ms")
    total = format_timestamp(duration_ms) if duration_ms is not None else "--:--"
    state = "Paused" if payload.get("paused") else "Playing"
    return f"{state} {position} / {total}"


def transport_button_label(payload: Mapping[str, Any] | None) -> str:
    if not payload or is_error_payload(payload) or payload.get("path") is None:
        return "Play"
    return "Resume" if payload.get("paused") else "Pause"


def progress_fraction(payload: Mapping[str, Any] | None) -> float:
    if not payload or is_error_payload(payload):
        return 0.0
    duration_ms = payload.get("duration_ms") or 0
    if duration_ms <= 0:
        return 0.0
    return max(0.0, min(1.0, float(payload.get("position_ms") or 0) / float(duration_ms)))
