"""Playback control state machine."""

from __future__ import annotations

import os
import time
from typing import Callable

from ..domain.errors import BackendError, PlayerError, SeekError, SeekUnsupportedError
from ..domain.playback import CurrentTrack, StatusSnapshot, TrackInfo
from .ports import AudioBackend, AudioSource


class PlaybackController:
    """Owns one sink and the state of the track queued on it.

    States are Idle (no current track), Playing and Paused. The position of
    the current track is derived from the last recorded position plus the
    monotonic time elapsed since playback last started or resumed.

    Not safe for concurrent use; ``CommandActor`` is its only caller in the
    running application.
    """

    def __init__(
        self,
        backend: AudioBackend,
        logger,
        *,
        clock: Callable[[], float] = time.monotonic,
        seek_skip_limit_ms: int | None = None,
    ) -> None:
        self._backend = backend
        self._logger = logger
        self._clock = clock
        self._seek_skip_limit_ms = seek_skip_limit_ms
        self._sink = backend.create_sink()
        self._current: CurrentTrack | None = None

    @property
    def current_track(self) -> CurrentTrack | None:
        return self._current

    def load_and_play(self, path: str | os.PathLike[str]) -> TrackInfo:
        path_str = os.fspath(path)
        # Decoding failures raise before the sink is touched.
        source = self._backend.open_source(path_str)
        info = TrackInfo(path=path_str, duration_ms=source.duration_ms)
        self._sink.clear()
        self._queue_source(source, play=True)
        self._current = CurrentTrack(
            info=info,
            last_playback_timestamp=self._clock(),
            last_playback_position_ms=0,
        )
        self._logger.info(
            "Playing %s (duration_ms=%s)",
            info.path,
            info.duration_ms if info.duration_ms is not None else "unknown",
        )
        return info

    def pause(self) -> None:
        current = self._current
        if current is not None:
            current.last_playback_position_ms = current.position_ms(self._clock())
            current.last_playback_timestamp = None
        self._sink.pause()

    def resume(self) -> None:
        current = self._current
        if current is not None and current.last_playback_timestamp is None:
            current.last_playback_timestamp = self._clock()
        self._sink.play()

    def stop(self) -> None:
        self._sink.stop()
        if self._current is not None:
            self._logger.info("Stopped %s", self._current.info.path)
        self._current = None

    def position_ms(self) -> int:
        if self._current is None:
            return 0
        return self._current.position_ms(self._clock())

    def seek(self, to_ms: int) -> None:
        current = self._current
        if current is None:
            return
        to_ms = max(0, int(to_ms))
        duration_ms = current.info.duration_ms
        if duration_ms is not None and to_ms >= duration_ms:
            self._logger.debug("Seek to %s ms runs past %s ms; stopping", to_ms, duration_ms)
            self.stop()
            return
        was_playing = current.last_playback_timestamp is not None
        try:
            self._sink.try_seek(to_ms)
        except SeekUnsupportedError:
            self._logger.debug("Native seek unsupported for %s; re-queueing", current.info.path)
            if not self._seek_by_requeue(current, to_ms, was_playing=was_playing):
                self.stop()
                return
        except BackendError as exc:
            raise SeekError(f"Seek to {to_ms} ms failed: {exc}") from exc
        current.last_playback_position_ms = to_ms
        current.last_playback_timestamp = self._clock() if was_playing else None

    def advance_or_rewind(self, delta_ms: int) -> None:
        target = max(0, self.position_ms() + int(delta_ms))
        self.seek(target)

    def status(self) -> StatusSnapshot:
        current = self._current
        if current is None:
            return StatusSnapshot()
        return StatusSnapshot(
            path=current.info.path,
            duration_ms=current.info.duration_ms,
            position_ms=current.position_ms(self._clock()),
            paused=current.is_paused,
        )

    def close(self) -> None:
        """Release the sink and the backend's output device."""
        self._current = None
        try:
            self._sink.close()
        finally:
            self._backend.close()

    def _seek_by_requeue(self, current: CurrentTrack, to_ms: int, *, was_playing: bool) -> bool:
        """Re-decode from the start and skip forward; False when the stream ended first."""
        limit = self._seek_skip_limit_ms
        if limit is not None and to_ms > limit:
            raise SeekError(
                f"Cannot seek to {to_ms} ms: beyond the {limit} ms decode-and-skip limit"
            )
        try:
            source = self._backend.open_source(current.info.path)
        except PlayerError as exc:
            raise SeekError(f"Re-opening {current.info.path} failed: {exc}") from exc
        started = self._clock()
        skipped_ms = self._skip(source, to_ms)
        self._logger.debug(
            "Decode-and-skip of %s ms took %.3fs", skipped_ms, self._clock() - started
        )
        if skipped_ms < to_ms:
            source.close()
            return False
        self._sink.clear()
        self._queue_source(source, play=was_playing)
        return True

    def _queue_source(self, source: AudioSource, *, play: bool) -> None:
        """Queue a source on the cleared sink; on failure the track is dropped."""
        try:
            self._sink.append(source)
            if play:
                self._sink.play()
        except Exception:
            self._current = None
            source.close()
            raise

    @staticmethod
    def _skip(source: AudioSource, to_ms: int) -> int:
        try:
            return int(source.skip_ms(to_ms))
        except PlayerError:
            source.close()
            raise
        except Exception as exc:
            source.close()
            raise SeekError(f"Skipping to {to_ms} ms failed: {exc}") from exc
