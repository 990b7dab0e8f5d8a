"""Domain records and errors for playback control."""

from .errors import (
    ActorUnavailable,
    BackendError,
    CommandTimeoutError,
    LoadError,
    PlayerError,
    SeekError,
    SeekUnsupportedError,
)
from .playback import CurrentTrack, StatusSnapshot, TrackInfo

__all__ = [
    "ActorUnavailable",
    "BackendError",
    "CommandTimeoutError",
    "CurrentTrack",
    "LoadError",
    "PlayerError",
    "SeekError",
    "SeekUnsupportedError",
    "StatusSnapshot",
    "TrackInfo",
]
