"""Application-level ports for the audio backend."""

from __future__ import annotations

from typing import Protocol


class AudioSource(Protocol):
    """A decoder stream for one file."""

    path: str
    duration_ms: int | None

    def skip_ms(self, duration_ms: int) -> int:
        """Discard decoded audio and return how many milliseconds were skipped."""

    def close(self) -> None: ...


class AudioSink(Protocol):
    """Playback queue bound to the output device."""

    def append(self, source: AudioSource) -> None: ...

    def play(self) -> None: ...

    def pause(self) -> None: ...

    def stop(self) -> None: ...

    def clear(self) -> None: ...

    def try_seek(self, position_ms: int) -> None:
        """Seek the head source; raises SeekUnsupportedError when it cannot."""

    def is_paused(self) -> bool: ...

    def empty(self) -> bool: ...

    def close(self) -> None: ...


class AudioBackend(Protocol):
    """Device acquisition, decoding and sink construction."""

    name: str

    def open_source(self, path: str) -> AudioSource: ...

    def create_sink(self) -> AudioSink: ...

    def close(self) -> None: ...
