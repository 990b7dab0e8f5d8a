"""Messages accepted by the player thread."""

from __future__ import annotations

from concurrent.futures import Future
from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class Command:
    """Base message; ``reply`` is a one-shot channel resolved by the actor."""

    reply: Optional[Future[Any]] = field(default=None, kw_only=True)

    @property
    def name(self) -> str:
        return type(self).__name__.lower()


@dataclass
class Play(Command):
    path: str


@dataclass
class Pause(Command):
    pass


@dataclass
class Resume(Command):
    pass


@dataclass
class Stop(Command):
    pass


@dataclass
class Seek(Command):
    """Relative seek; negative deltas rewind."""

    delta_ms: int


@dataclass
class SeekTo(Command):
    position_ms: int


@dataclass
class Status(Command):
    pass


@dataclass
class _Shutdown(Command):
    pass
