"""Error taxonomy for playback control."""

from __future__ import annotations


class PlayerError(Exception):
    """Base class for every error surfaced by the player."""


class LoadError(PlayerError):
    """File missing, unreadable or undecodable."""


class SeekError(PlayerError):
    """Backend rejected a seek request."""


class SeekUnsupportedError(SeekError):
    """Sink cannot seek the queued source natively."""


class BackendError(PlayerError):
    """Output device or stream fault."""


class ActorUnavailable(PlayerError):
    """The player thread has terminated; fatal for the session."""


class CommandTimeoutError(PlayerError):
    """A caller-imposed wait for a reply expired."""
