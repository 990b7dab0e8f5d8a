"""Playback state records and the wall-clock position rule."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class TrackInfo:
    """Descriptor of a loaded track."""

    path: str
    duration_ms: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"path": self.path, "duration_ms": self.duration_ms}


@dataclass(slots=True)
class CurrentTrack:
    """Mutable state of the track loaded into the sink.

    ``last_playback_timestamp`` is a monotonic clock reading taken when
    playback last started or resumed; ``None`` means paused. The position is
    derived from it instead of counting samples, so it is accurate to the
    clock granularity only.
    """

    info: TrackInfo
    last_playback_timestamp: float | None
    last_playback_position_ms: int = 0

    @property
    def is_paused(self) -> bool:
        return self.last_playback_timestamp is None

    def position_ms(self, now: float) -> int:
        if self.last_playback_timestamp is None:
            return self.last_playback_position_ms
        elapsed_ms = int(round(max(0.0, now - self.last_playback_timestamp) * 1000.0))
        return self.last_playback_position_ms + elapsed_ms


@dataclass(frozen=True)
class StatusSnapshot:
    path: str | None = None
    duration_ms: int | None = None
    position_ms: int = 0
    paused: bool = False

    @property
    def is_idle(self) -> bool:
        return self.path is None

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "duration_ms": self.duration_ms,
            "position_ms": self.position_ms,
            "paused": self.paused,
        }
