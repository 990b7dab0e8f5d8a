"""Named player operations exposed to a desktop UI process."""

from __future__ import annotations

from typing import Any, Callable

from ..domain.errors import PlayerError
from .actor import CommandActor

BridgeResult = dict[str, Any]


class PlayerBridge:
    """Forward UI commands to the player thread and return JSON-ready dicts.

    Successful calls return ``TrackInfo``/``StatusSnapshot`` payloads or an
    empty dict for acknowledgements. Failures come back as
    ``{"error": message}`` with the error text unchanged.
    """

    OPERATIONS = ("play", "pause", "resume", "stop", "advance", "status")

    def __init__(self, actor: CommandActor, logger, *, timeout: float | None = None) -> None:
        self._actor = actor
        self._logger = logger
        self._timeout = timeout

    def play(self, path: str) -> BridgeResult:
        return self._call("play", lambda: self._actor.play(path, timeout=self._timeout).to_dict())

    def pause(self) -> BridgeResult:
        return self._call("pause", lambda: self._ack(self._actor.pause()))

    def resume(self) -> BridgeResult:
        return self._call("resume", lambda: self._ack(self._actor.resume()))

    def stop(self) -> BridgeResult:
        return self._call("stop", lambda: self._ack(self._actor.stop()))

    def advance(self, delta_ms: int) -> BridgeResult:
        try:
            delta = int(delta_ms)
        except (TypeError, ValueError) as exc:
            return {"error": f"Invalid arguments for advance: {exc}"}
        return self._call(
            "advance",
            lambda: self._ack(self._actor.advance(delta, timeout=self._timeout)),
        )

    def status(self) -> BridgeResult:
        return self._call("status", lambda: self._actor.status(timeout=self._timeout).to_dict())

    def invoke(self, operation: str, **kwargs: Any) -> BridgeResult:
        if operation not in self.OPERATIONS:
            return {"error": f"Unknown operation: {operation}"}
        try:
            return getattr(self, operation)(**kwargs)
        except (TypeError, ValueError) as exc:
            return {"error": f"Invalid arguments for {operation}: {exc}"}

    @staticmethod
    def _ack(_result: None) -> BridgeResult:
        return {}

    def _call(self, operation: str, work: Callable[[], BridgeResult]) -> BridgeResult:
        try:
            return work()
        except PlayerError as exc:
            self._logger.warning("Bridge %s failed: %s", operation, exc)
            return {"error": str(exc)}
