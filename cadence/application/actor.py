"""Single-threaded command front for PlaybackController."""

from __future__ import annotations

import os
import queue
import threading
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Any, Callable

from ..domain.errors import (
    ActorUnavailable,
    CommandTimeoutError,
    LoadError,
    SeekError,
)
from ..domain.playback import StatusSnapshot, TrackInfo
from .commands import Command, Pause, Play, Resume, Seek, SeekTo, Status, Stop, _Shutdown
from .controller import PlaybackController

ControllerFactory = Callable[[], PlaybackController]

_RECOVERABLE_ERRORS = (LoadError, SeekError)


class CommandActor:
    """Owns one PlaybackController on a dedicated thread.

    Commands are applied strictly in the order they were enqueued, one at a
    time. Callers that need a result wait on the command's future; pause,
    resume and stop return as soon as they are queued unless ``wait=True``.

    The controller is built inside the thread so the output device is
    acquired and released there. If the thread dies, every waiting and
    later caller gets ``ActorUnavailable``.
    """

    def __init__(
        self,
        controller_factory: ControllerFactory,
        logger,
        *,
        default_timeout: float | None = None,
        name: str = "cadence-player",
    ) -> None:
        self._controller_factory = controller_factory
        self._logger = logger
        self._default_timeout = default_timeout
        self._queue: queue.Queue[Command] = queue.Queue()
        self._state_lock = threading.Lock()
        self._ready = threading.Event()
        self._accepting = True
        self._failure: BaseException | None = None
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)

    @property
    def is_alive(self) -> bool:
        with self._state_lock:
            return self._accepting and self._thread.is_alive()

    def start(self, timeout: float | None = None) -> None:
        self._thread.start()
        if not self._ready.wait(timeout):
            raise ActorUnavailable("Player thread did not become ready in time.")
        with self._state_lock:
            failure = self._failure
            accepting = self._accepting
        if not accepting:
            raise ActorUnavailable(f"Player failed to start: {failure}") from failure

    def submit(self, command: Command) -> Future[Any] | None:
        with self._state_lock:
            if not self._accepting:
                raise self._unavailable()
            self._queue.put(command)
        return command.reply

    def play(self, path: str | os.PathLike[str], *, timeout: float | None = None) -> TrackInfo:
        return self._request(Play(os.fspath(path), reply=Future()), timeout)

    def pause(self, *, wait: bool = False, timeout: float | None = None) -> None:
        self._notify(Pause(reply=Future() if wait else None), timeout)

    def resume(self, *, wait: bool = False, timeout: float | None = None) -> None:
        self._notify(Resume(reply=Future() if wait else None), timeout)

    def stop(self, *, wait: bool = False, timeout: float | None = None) -> None:
        self._notify(Stop(reply=Future() if wait else None), timeout)

    def advance(self, delta_ms: int, *, timeout: float | None = None) -> None:
        self._request(Seek(int(delta_ms), reply=Future()), timeout)

    def seek_to(self, position_ms: int, *, timeout: float | None = None) -> None:
        self._request(SeekTo(int(position_ms), reply=Future()), timeout)

    def status(self, *, timeout: float | None = None) -> StatusSnapshot:
        return self._request(Status(reply=Future()), timeout)

    def shutdown(self, timeout: float | None = None) -> None:
        """Drain queued commands, release the controller and join the thread."""
        with self._state_lock:
            if self._accepting:
                self._accepting = False
                self._queue.put(_Shutdown())
        if self._thread.is_alive() and threading.current_thread() is not self._thread:
            self._thread.join(timeout)

    def _notify(self, command: Command, timeout: float | None) -> None:
        self.submit(command)
        if command.reply is not None:
            self._wait(command.reply, timeout)

    def _request(self, command: Command, timeout: float | None) -> Any:
        future = self.submit(command)
        assert future is not None
        return self._wait(future, timeout)

    def _wait(self, future: Future[Any], timeout: float | None) -> Any:
        wait_for = self._default_timeout if timeout is None else timeout
        try:
            return future.result(wait_for)
        except FutureTimeoutError as exc:
            raise CommandTimeoutError(f"No reply from the player within {wait_for}s.") from exc

    def _unavailable(self) -> ActorUnavailable:
        if self._failure is not None:
            return ActorUnavailable(f"Player thread died: {self._failure}")
        return ActorUnavailable("Player is shut down.")

    def _run(self) -> None:
        try:
            controller = self._controller_factory()
        except Exception as exc:
            self._logger.exception("Failed to create playback controller")
            self._die(exc)
            self._drain_pending()
            self._ready.set()
            return
        self._ready.set()
        self._logger.debug("Player thread ready")
        try:
            while True:
                command = self._queue.get()
                if isinstance(command, _Shutdown):
                    break
                try:
                    result = self._dispatch(controller, command)
                except _RECOVERABLE_ERRORS as exc:
                    self._logger.warning("%s failed: %s", command.name, exc)
                    _resolve(command.reply, error=exc)
                except Exception as exc:
                    self._logger.exception("Unrecoverable fault while handling %s", command.name)
                    self._die(exc, in_flight=command)
                    break
                else:
                    _resolve(command.reply, result=result)
        finally:
            self._close_controller(controller)
            self._drain_pending()
            self._logger.debug("Player thread stopped")

    def _dispatch(self, controller: PlaybackController, command: Command) -> Any:
        self._logger.debug("Handling %s", command)
        if isinstance(command, Play):
            return controller.load_and_play(command.path)
        if isinstance(command, Pause):
            controller.pause()
            return None
        if isinstance(command, Resume):
            controller.resume()
            return None
        if isinstance(command, Stop):
            controller.stop()
            return None
        if isinstance(command, Seek):
            controller.advance_or_rewind(command.delta_ms)
            return None
        if isinstance(command, SeekTo):
            controller.seek(command.position_ms)
            return None
        if isinstance(command, Status):
            return controller.status()
        raise TypeError(f"Unknown command: {command!r}")

    def _die(self, exc: BaseException, *, in_flight: Command | None = None) -> None:
        with self._state_lock:
            self._failure = exc
            self._accepting = False
        if in_flight is not None:
            _resolve_unavailable(in_flight.reply, self._unavailable(), exc)

    def _drain_pending(self) -> None:
        while True:
            try:
                command = self._queue.get_nowait()
            except queue.Empty:
                return
            _resolve_unavailable(command.reply, self._unavailable(), self._failure)

    def _close_controller(self, controller: PlaybackController) -> None:
        try:
            controller.stop()
        except Exception:
            self._logger.exception("Failed to stop playback on shutdown")
        try:
            controller.close()
        except Exception:
            self._logger.exception("Failed to release playback controller")


def _resolve(reply: Future[Any] | None, *, result: Any = None, error: BaseException | None = None) -> None:
    if reply is None or reply.done():
        return
    if error is not None:
        reply.set_exception(error)
    else:
        reply.set_result(result)


def _resolve_unavailable(
    reply: Future[Any] | None,
    error: ActorUnavailable,
    cause: BaseException | None,
) -> None:
    if reply is None or reply.done():
        return
    error.__cause__ = cause
    reply.set_exception(error)
