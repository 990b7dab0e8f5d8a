"""Shared fakes for player tests.

The fake backend mirrors the audio backend ports without touching an output
device, and the fake clock makes wall-clock position checks deterministic.
"""

from __future__ import annotations

import threading

import pytest

from cadence.application.controller import PlaybackController
from cadence.domain.errors import LoadError, SeekUnsupportedError


class FakeClock:
    def __init__(self, start: float = 100.0) -> None:
        self.now = float(start)

    def __call__(self) -> float:
        return self.now

    def advance_ms(self, ms: int) -> None:
        self.now += ms / 1000.0


class Logger:
    def __init__(self):
        self.debugs = []
        self.infos = []
        self.warnings = []
        self.exceptions = []

    def debug(self, message, *args):
        self.debugs.append(message % args if args else message)

    def info(self, message, *args):
        self.infos.append(message % args if args else message)

    def warning(self, message, *args):
        self.warnings.append(message % args if args else message)

    def exception(self, message, *args):
        self.exceptions.append(message % args if args else message)


class FakeSource:
    def __init__(self, path: str, duration_ms: int | None, *, stream_ms: int | None = None) -> None:
        self.path = path
        self.duration_ms = duration_ms
        self.stream_ms = stream_ms if stream_ms is not None else duration_ms
        self.skipped_ms = 0
        self.closed = False

    def skip_ms(self, duration_ms: int) -> int:
        if self.stream_ms is None:
            self.skipped_ms = duration_ms
        else:
            self.skipped_ms = min(duration_ms, self.stream_ms)
        return self.skipped_ms

    def close(self) -> None:
        self.closed = True


class FakeSink:
    def __init__(self) -> None:
        self.calls: list[str] = []
        self.sources: list[FakeSource] = []
        self.paused = False
        self.seek_supported = True
        self.seek_error: Exception | None = None
        self.fail_on: dict[str, Exception] = {}
        self.seeks: list[int] = []
        self.closed = False

    def _record(self, name: str) -> None:
        self.calls.append(name)
        error = self.fail_on.get(name)
        if error is not None:
            raise error

    def append(self, source) -> None:
        self._record("append")
        self.sources.append(source)

    def play(self) -> None:
        self._record("play")
        self.paused = False

    def pause(self) -> None:
        self._record("pause")
        self.paused = True

    def stop(self) -> None:
        self._record("stop")
        self.sources = []

    def clear(self) -> None:
        self._record("clear")
        self.sources = []

    def try_seek(self, position_ms: int) -> None:
        self._record("try_seek")
        if self.seek_error is not None:
            raise self.seek_error
        if not self.seek_supported:
            raise SeekUnsupportedError("not seekable")
        self.seeks.append(position_ms)

    def is_paused(self) -> bool:
        return self.paused

    def empty(self) -> bool:
        return not self.sources

    def close(self) -> None:
        self._record("close")
        self.closed = True


class FakeBackend:
    name = "fake"

    def __init__(self, tracks: dict[str, int | None] | None = None) -> None:
        self.tracks = dict(tracks or {})
        self.stream_ms: dict[str, int] = {}
        self.sink = FakeSink()
        self.opened: list[FakeSource] = []
        self.closed = False
        self.open_gate: threading.Event | None = None

    def open_source(self, path: str) -> FakeSource:
        if self.open_gate is not None:
            self.open_gate.wait(5)
        if path not in self.tracks:
            raise LoadError(f"Failed to open {path}: file not found")
        source = FakeSource(path, self.tracks[path], stream_ms=self.stream_ms.get(path))
        self.opened.append(source)
        return source

    def create_sink(self) -> FakeSink:
        return self.sink

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def logger():
    return Logger()


@pytest.fixture
def backend():
    return FakeBackend({"a.wav": 10_000, "b.flac": 4_000, "stream.ogg": None})


@pytest.fixture
def controller(backend, logger, clock):
    return PlaybackController(backend, logger, clock=clock, seek_skip_limit_ms=60_000)


@pytest.fixture
def make_backend():
    return FakeBackend


@pytest.fixture
def make_controller(logger, clock):
    def _make(backend, **kwargs):
        kwargs.setdefault("clock", clock)
        return PlaybackController(backend, logger, **kwargs)

    return _make
