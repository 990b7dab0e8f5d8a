import asyncio
import threading
from concurrent.futures import Future

import pytest

from cadence.application.actor import CommandActor
from cadence.application.commands import Pause, Play, Seek, Status
from cadence.application.controller import PlaybackController
from cadence.domain.errors import ActorUnavailable, CommandTimeoutError, LoadError
from cadence.domain.playback import StatusSnapshot, TrackInfo


class _RecordingController(PlaybackController):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.deltas = []

    def advance_or_rewind(self, delta_ms):
        self.deltas.append(delta_ms)


@pytest.fixture
def make_actor(backend, logger, clock):
    actors = []

    def _make(factory=None, **kwargs):
        if factory is None:
            factory = lambda: PlaybackController(backend, logger, clock=clock)
        actor = CommandActor(factory, logger, **kwargs)
        actors.append(actor)
        return actor

    yield _make

    if backend.open_gate is not None:
        backend.open_gate.set()
    for actor in actors:
        actor.shutdown(timeout=2.0)


def test_play_and_status_round_trip(make_actor, clock):
    actor = make_actor()
    actor.start(timeout=2.0)

    info = actor.play("a.wav")
    clock.advance_ms(1_500)
    status = actor.status()

    assert info == TrackInfo(path="a.wav", duration_ms=10_000)
    assert status == StatusSnapshot(path="a.wav", duration_ms=10_000, position_ms=1_500, paused=False)
    assert actor.is_alive


def test_status_when_idle(make_actor):
    actor = make_actor()
    actor.start(timeout=2.0)

    assert actor.status() == StatusSnapshot()


def test_fire_and_forget_commands_apply_in_order(make_actor, backend, clock):
    actor = make_actor()
    actor.start(timeout=2.0)
    actor.play("a.wav")
    clock.advance_ms(1_000)

    actor.pause()
    actor.resume()
    actor.pause()
    status = actor.status()

    assert backend.sink.calls[-3:] == ["pause", "play", "pause"]
    assert status.paused is True
    assert status.position_ms == 1_000


def test_commands_queued_behind_slow_load_keep_order(make_actor, backend):
    backend.open_gate = threading.Event()
    actor = make_actor()
    actor.start(timeout=2.0)

    loaded = actor.submit(Play("a.wav", reply=Future()))
    actor.pause()
    actor.stop()
    backend.open_gate.set()

    assert loaded.result(2.0).path == "a.wav"
    assert actor.status() == StatusSnapshot()
    assert backend.sink.calls == ["clear", "append", "play", "pause", "stop"]


def test_concurrent_callers_keep_their_own_order(make_actor, backend, logger, clock):
    controllers = []

    def _factory():
        controller = _RecordingController(backend, logger, clock=clock)
        controllers.append(controller)
        return controller

    actor = make_actor(_factory)
    actor.start(timeout=2.0)

    def _caller(offset):
        for step in range(20):
            actor.submit(Seek(offset + step))

    callers = [threading.Thread(target=_caller, args=(offset,)) for offset in (0, 1_000, 2_000)]
    for thread in callers:
        thread.start()
    for thread in callers:
        thread.join()
    actor.status()

    deltas = controllers[0].deltas
    assert len(deltas) == 60
    for offset in (0, 1_000, 2_000):
        own = [delta for delta in deltas if offset <= delta < offset + 1_000]
        assert own == [offset + step for step in range(20)]


def test_load_error_is_returned_and_actor_survives(make_actor, logger):
    actor = make_actor()
    actor.start(timeout=2.0)

    with pytest.raises(LoadError, match="missing.mp3"):
        actor.play("missing.mp3")

    assert actor.status() == StatusSnapshot()
    assert actor.is_alive
    assert any("missing.mp3" in message for message in logger.warnings)


def test_unexpected_fault_kills_actor_for_every_caller(make_actor, backend, logger):
    backend.open_gate = threading.Event()
    backend.sink.fail_on["pause"] = RuntimeError("device lost")
    actor = make_actor()
    actor.start(timeout=2.0)

    loaded = actor.submit(Play("a.wav", reply=Future()))
    paused = actor.submit(Pause(reply=Future()))
    pending = actor.submit(Status(reply=Future()))
    backend.open_gate.set()

    assert loaded.result(2.0).path == "a.wav"
    with pytest.raises(ActorUnavailable, match="device lost") as in_flight:
        paused.result(2.0)
    assert isinstance(in_flight.value.__cause__, RuntimeError)
    with pytest.raises(ActorUnavailable):
        pending.result(2.0)
    with pytest.raises(ActorUnavailable, match="died"):
        actor.status()
    assert not actor.is_alive
    assert logger.exceptions


def test_controller_is_released_after_fatal_fault(make_actor, backend):
    backend.sink.fail_on["pause"] = RuntimeError("device lost")
    actor = make_actor()
    actor.start(timeout=2.0)

    with pytest.raises(ActorUnavailable):
        actor.pause(wait=True)
    actor.shutdown(timeout=2.0)

    assert backend.sink.closed is True
    assert backend.closed is True


def test_start_raises_when_factory_fails(make_actor, logger):
    def _factory():
        raise RuntimeError("no output device")

    actor = make_actor(_factory)

    with pytest.raises(ActorUnavailable, match="no output device"):
        actor.start(timeout=2.0)
    with pytest.raises(ActorUnavailable):
        actor.pause()
    assert logger.exceptions == ["Failed to create playback controller"]


def test_shutdown_drains_queue_and_releases_backend(make_actor, backend):
    backend.open_gate = threading.Event()
    actor = make_actor()
    actor.start(timeout=2.0)

    loaded = actor.submit(Play("a.wav", reply=Future()))
    actor.pause()
    backend.open_gate.set()
    actor.shutdown(timeout=2.0)

    assert loaded.result(0).path == "a.wav"
    assert backend.sink.calls[-3:] == ["pause", "stop", "close"]
    assert backend.closed is True
    assert not actor.is_alive
    with pytest.raises(ActorUnavailable, match="shut down"):
        actor.play("b.flac")


def test_shutdown_is_idempotent(make_actor):
    actor = make_actor()
    actor.start(timeout=2.0)

    actor.shutdown(timeout=2.0)
    actor.shutdown(timeout=2.0)

    assert not actor.is_alive


def test_reply_timeout_raises_command_timeout(make_actor, backend):
    backend.open_gate = threading.Event()
    actor = make_actor(default_timeout=5.0)
    actor.start(timeout=2.0)

    with pytest.raises(CommandTimeoutError, match="0.05s"):
        actor.play("a.wav", timeout=0.05)

    backend.open_gate.set()
    assert actor.status().path == "a.wav"


def test_acknowledged_pause_waits_for_the_actor(make_actor, backend):
    actor = make_actor()
    actor.start(timeout=2.0)
    actor.play("a.wav")

    actor.pause(wait=True)

    assert backend.sink.calls[-1] == "pause"
    assert backend.sink.paused is True


def test_replies_can_be_awaited_from_asyncio(make_actor):
    actor = make_actor()
    actor.start(timeout=2.0)
    actor.play("b.flac")

    async def _status():
        return await asyncio.wrap_future(actor.submit(Status(reply=Future())))

    status = asyncio.run(_status())

    assert status.path == "b.flac"
    assert status.duration_ms == 4_000


def test_commands_from_separate_threads_apply_in_submission_order(make_actor, backend):
    backend.open_gate = threading.Event()
    actor = make_actor()
    actor.start(timeout=2.0)
    play_sent = threading.Event()
    pause_sent = threading.Event()
    replies = {}

    def _play():
        replies["play"] = actor.submit(Play("a.wav", reply=Future()))
        play_sent.set()

    def _pause():
        play_sent.wait(2.0)
        actor.pause()
        pause_sent.set()

    def _status():
        pause_sent.wait(2.0)
        replies["status"] = actor.submit(Status(reply=Future()))

    callers = [threading.Thread(target=target) for target in (_status, _pause, _play)]
    for thread in callers:
        thread.start()
    for thread in callers:
        thread.join(2.0)
    backend.open_gate.set()

    assert replies["play"].result(2.0).path == "a.wav"
    status = replies["status"].result(2.0)
    assert status.path == "a.wav"
    assert status.paused is True
