"""libVLC backend wrappers for audio-only playback."""

from __future__ import annotations

import os
import sys

from ..domain.errors import BackendError, LoadError, SeekError, SeekUnsupportedError

try:
    import vlc as _vlc
except Exception:  # pragma: no cover - dependency optional at import time
    _vlc = None


class VlcSource:
    """A parsed libVLC media; decoding happens inside VLC once queued."""

    def __init__(self, path: str, media, duration_ms: int | None) -> None:
        self.path = path
        self.media = media
        self.duration_ms = duration_ms
        self.start_ms = 0
        self.released = False

    def skip_ms(self, duration_ms: int) -> int:
        # VLC decodes from the start and drops audio up to :start-time itself.
        target = int(max(0, duration_ms))
        self.media.add_option(f":start-time={target / 1000.0:.3f}")
        self.start_ms = target
        if self.duration_ms is not None:
            return min(target, self.duration_ms)
        return target

    def close(self) -> None:
        if self.released:
            return
        self.released = True
        try:
            self.media.release()
        except Exception:
            pass


class VlcSink:
    """One libVLC media player used as a single-slot playback queue."""

    def __init__(self, player, logger) -> None:
        self.player = player
        self._logger = logger
        self._source: VlcSource | None = None
        self._paused = False
        self._started = False

    def append(self, source: VlcSource) -> None:
        if self._source is not None:
            self._release_source()
        self.player.set_media(source.media)
        self._source = source
        self._started = False

    def play(self) -> None:
        self._paused = False
        if self._source is None:
            return
        if self._started:
            self.player.set_pause(0)
            return
        rc = int(self.player.play())
        if rc == -1:
            raise BackendError("VLC failed to start playback.")
        self._started = True

    def pause(self) -> None:
        self._paused = True
        if self._started:
            self.player.set_pause(1)

    def is_paused(self) -> bool:
        return self._paused

    def empty(self) -> bool:
        return self._source is None

    def clear(self) -> None:
        self.player.stop()
        self._release_source()

    def stop(self) -> None:
        self.clear()

    def try_seek(self, position_ms: int) -> None:
        if self._source is None:
            raise SeekUnsupportedError("Nothing queued to seek")
        if not self._started or not bool(self.player.is_seekable()):
            raise SeekUnsupportedError(f"{self._source.path} is not seekable")
        try:
            rc = self.player.set_time(int(max(0, position_ms)))
        except Exception as exc:
            raise SeekError(f"Seek in {self._source.path} failed: {exc}") from exc
        if rc == -1:
            raise SeekError(f"Seek in {self._source.path} failed")

    def close(self) -> None:
        try:
            self.player.stop()
        except Exception:
            pass
        self._release_source()
        try:
            self.player.release()
        except Exception:
            pass

    def _release_source(self) -> None:
        source = self._source
        self._source = None
        self._started = False
        if source is not None:
            source.close()


class VlcBackend:
    """libVLC instance shared by the sink and the media parser."""

    name = "vlc"

    def __init__(self, logger, *, vlc_module=None, platform_name: str | None = None) -> None:
        self._logger = logger
        self._vlc = vlc_module if vlc_module is not None else _vlc
        if self._vlc is None:
            raise BackendError("python-vlc is not available")
        platform_value = platform_name if platform_name is not None else sys.platform
        args = ["--no-xlib", "--no-video"] if str(platform_value).startswith("linux") else ["--no-video"]
        try:
            self.instance = self._vlc.Instance(args)
        except Exception as exc:
            raise BackendError(f"VLC init failed: {exc}") from exc
        if self.instance is None:
            raise BackendError("VLC init failed: libVLC could not be loaded")

    def open_source(self, path: str) -> VlcSource:
        if not os.path.isfile(path):
            raise LoadError(f"Failed to open {path}: file not found")
        try:
            media = self.instance.media_new(os.path.abspath(path))
            media.parse()
            length_ms = int(media.get_duration() or 0)
        except Exception as exc:
            raise LoadError(f"Unsupported/invalid audio: {path} ({exc})") from exc
        duration_ms = length_ms if length_ms > 0 else None
        self._logger.debug("VLC media parsed %s: duration_ms=%s", path, duration_ms)
        return VlcSource(path, media, duration_ms)

    def create_sink(self) -> VlcSink:
        return VlcSink(self.instance.media_player_new(), self._logger)

    def close(self) -> None:
        try:
            self.instance.release()
        except Exception:
            self._logger.exception("Failed to release VLC instance")
