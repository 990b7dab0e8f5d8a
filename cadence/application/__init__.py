"""Application layer orchestration."""

from .actor import CommandActor
from .bootstrap import PlayerServices, create_audio_backend, initialize_player_services
from .bridge import PlayerBridge
from .commands import Command, Pause, Play, Resume, Seek, SeekTo, Status, Stop
from .controller import PlaybackController
from .ports import AudioBackend, AudioSink, AudioSource

__all__ = [
    "AudioBackend",
    "AudioSink",
    "AudioSource",
    "Command",
    "CommandActor",
    "Pause",
    "Play",
    "PlaybackController",
    "PlayerBridge",
    "PlayerServices",
    "Resume",
    "Seek",
    "SeekTo",
    "Status",
    "Stop",
    "create_audio_backend",
    "initialize_player_services",
]
