"""Streaming decoder built on soundfile (libsndfile)."""

from __future__ import annotations

import os
import threading

import numpy as np

from ..domain.errors import LoadError, SeekError, SeekUnsupportedError

try:
    import soundfile as _sf
except Exception:  # pragma: no cover - dependency optional at import time
    _sf = None

_SKIP_BLOCK_FRAMES = 65536


class SoundFileSource:
    """One open audio file read block by block as float32 frames."""

    def __init__(self, path: str, handle) -> None:
        self.path = path
        self._file = handle
        self._lock = threading.Lock()
        self.samplerate = int(handle.samplerate)
        self.channels = int(handle.channels)
        frames = int(getattr(handle, "frames", 0) or 0)
        self.total_frames = frames if frames > 0 else None
        if self.total_frames is not None and self.samplerate > 0:
            self.duration_ms: int | None = self.total_frames * 1000 // self.samplerate
        else:
            self.duration_ms = None
        self.closed = False

    @classmethod
    def open(cls, path: str, *, sf_module=None) -> "SoundFileSource":
        sf = sf_module if sf_module is not None else _sf
        if sf is None:
            raise LoadError("soundfile is not available")
        if not os.path.isfile(path):
            raise LoadError(f"Failed to open {path}: file not found")
        try:
            handle = sf.SoundFile(path, mode="r")
        except Exception as exc:
            raise LoadError(f"Unsupported/invalid audio: {path} ({exc})") from exc
        if int(handle.samplerate) <= 0 or int(handle.channels) <= 0:
            handle.close()
            raise LoadError(f"Unsupported/invalid audio: {path} (no audio stream)")
        return cls(path, handle)

    def read(self, frames: int) -> np.ndarray:
        with self._lock:
            if self.closed or frames <= 0:
                return np.zeros((0, self.channels), dtype=np.float32)
            return self._file.read(int(frames), dtype="float32", always_2d=True)

    def seek_ms(self, position_ms: int) -> None:
        with self._lock:
            if self.closed or not self._file.seekable():
                raise SeekUnsupportedError(f"{self.path} is not seekable")
            frame = int(max(0, position_ms)) * self.samplerate // 1000
            if self.total_frames is not None:
                frame = min(frame, self.total_frames)
            try:
                self._file.seek(frame)
            except Exception as exc:
                raise SeekError(f"Seek in {self.path} failed: {exc}") from exc

    def skip_ms(self, duration_ms: int) -> int:
        """Decode and discard audio; stops early at end of stream."""
        duration_ms = int(max(0, duration_ms))
        target = duration_ms * self.samplerate // 1000
        skipped = 0
        while skipped < target:
            block = self.read(min(_SKIP_BLOCK_FRAMES, target - skipped))
            if len(block) == 0:
                return skipped * 1000 // self.samplerate
            skipped += len(block)
        return duration_ms

    def close(self) -> None:
        with self._lock:
            if self.closed:
                return
            self.closed = True
            self._file.close()
