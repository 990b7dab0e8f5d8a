"""PortAudio output through sounddevice, fed by soundfile decoders."""

from __future__ import annotations

import threading
from collections import deque
from typing import Any

from ..domain.errors import BackendError, SeekUnsupportedError
from .soundfile_source import SoundFileSource

try:
    import sounddevice as _sd
except Exception:  # pragma: no cover - dependency optional at import time
    _sd = None


class OutputDevice:
    """Output device handle acquired once at startup and released at shutdown."""

    def __init__(self, *, index: int | str | None, name: str, sd_module) -> None:
        self.index = index
        self.name = name
        self._sd = sd_module
        self.released = False

    @classmethod
    def acquire(cls, device: int | str | None, logger, *, sd_module=None) -> "OutputDevice":
        sd = sd_module if sd_module is not None else _sd
        if sd is None:
            raise BackendError("sounddevice is not available (PortAudio missing?)")
        try:
            info = sd.query_devices(device, kind="output")
        except Exception as exc:
            raise BackendError(f"No output device available: {exc}") from exc
        if not isinstance(info, dict) or int(info.get("max_output_channels", 0) or 0) <= 0:
            raise BackendError("No output device available")
        index = info.get("index", device)
        name = str(info.get("name", "default"))
        logger.info("Output device: %s (index=%s)", name, index)
        return cls(index=index, name=name, sd_module=sd)

    def open_stream(self, *, samplerate: int, channels: int, blocksize: int, callback) -> Any:
        if self.released:
            raise BackendError("Output device already released")
        try:
            return self._sd.OutputStream(
                samplerate=samplerate,
                channels=channels,
                dtype="float32",
                device=self.index,
                blocksize=blocksize,
                callback=callback,
            )
        except Exception as exc:
            raise BackendError(f"Failed to open output stream: {exc}") from exc

    def release(self) -> None:
        self.released = True


class SoundDeviceSink:
    """Queue of decoders drained by a PortAudio callback.

    Pausing keeps the stream running and writes silence, so the decoder
    position is preserved. The queued sources are shared with the callback
    thread and guarded by ``_lock``.
    """

    def __init__(self, device: OutputDevice, logger, *, blocksize: int = 2048) -> None:
        self._device = device
        self._logger = logger
        self._blocksize = int(blocksize)
        self._lock = threading.Lock()
        self._sources: deque[SoundFileSource] = deque()
        self._paused = False
        self._stream = None
        self._stream_format: tuple[int, int] | None = None

    def append(self, source: SoundFileSource) -> None:
        # The stream must match the source format before the callback can see it.
        self._ensure_stream(source.samplerate, source.channels)
        with self._lock:
            self._sources.append(source)

    def play(self) -> None:
        with self._lock:
            self._paused = False

    def pause(self) -> None:
        with self._lock:
            self._paused = True

    def is_paused(self) -> bool:
        with self._lock:
            return self._paused

    def empty(self) -> bool:
        with self._lock:
            return not self._sources

    def clear(self) -> None:
        with self._lock:
            sources = list(self._sources)
            self._sources.clear()
        for source in sources:
            source.close()

    def stop(self) -> None:
        self.clear()
        self._close_stream()

    def try_seek(self, position_ms: int) -> None:
        with self._lock:
            head = self._sources[0] if self._sources else None
        if head is None:
            raise SeekUnsupportedError("Nothing queued to seek; the source has finished")
        head.seek_ms(position_ms)

    def close(self) -> None:
        self.stop()

    def _ensure_stream(self, samplerate: int, channels: int) -> None:
        stream_format = (int(samplerate), int(channels))
        if self._stream is not None and self._stream_format == stream_format:
            return
        self._close_stream()
        stream = self._device.open_stream(
            samplerate=stream_format[0],
            channels=stream_format[1],
            blocksize=self._blocksize,
            callback=self._callback,
        )
        try:
            stream.start()
        except Exception as exc:
            raise BackendError(f"Failed to start output stream: {exc}") from exc
        self._stream = stream
        self._stream_format = stream_format
        self._logger.debug("Output stream opened: %s Hz, %s channel(s)", *stream_format)

    def _close_stream(self) -> None:
        stream = self._stream
        self._stream = None
        self._stream_format = None
        if stream is None:
            return
        try:
            stream.abort()
            stream.close()
        except Exception:
            self._logger.exception("Failed to close output stream")

    def _callback(self, outdata, frames, _time_info, status) -> None:
        if status:
            self._logger.debug("Output stream status: %s", status)
        written = 0
        with self._lock:
            while not self._paused and written < frames and self._sources:
                head = self._sources[0]
                chunk = head.read(frames - written)
                count = len(chunk)
                if count == 0 or chunk.shape[1] != outdata.shape[1]:
                    self._sources.popleft().close()
                    continue
                outdata[written : written + count] = chunk
                written += count
        if written < frames:
            outdata[written:] = 0


class SoundDeviceBackend:
    """Audio backend pairing soundfile decoding with sounddevice output."""

    name = "sounddevice"

    def __init__(
        self,
        logger,
        *,
        device: int | str | None = None,
        blocksize: int = 2048,
        sd_module=None,
        sf_module=None,
    ) -> None:
        self._logger = logger
        self._blocksize = blocksize
        self._sf_module = sf_module
        self.device = OutputDevice.acquire(device, logger, sd_module=sd_module)

    def open_source(self, path: str) -> SoundFileSource:
        source = SoundFileSource.open(path, sf_module=self._sf_module)
        self._logger.debug(
            "Decoder opened %s: %s Hz, %s channel(s), duration_ms=%s",
            path,
            source.samplerate,
            source.channels,
            source.duration_ms,
        )
        return source

    def create_sink(self) -> SoundDeviceSink:
        return SoundDeviceSink(self.device, self._logger, blocksize=self._blocksize)

    def close(self) -> None:
        self.device.release()
        self._logger.debug("Output device released: %s", self.device.name)
