import dataclasses

import pytest

from cadence.domain import (
    ActorUnavailable,
    BackendError,
    CommandTimeoutError,
    CurrentTrack,
    LoadError,
    PlayerError,
    SeekError,
    SeekUnsupportedError,
    StatusSnapshot,
    TrackInfo,
)


def test_track_info_is_frozen_and_serializable():
    info = TrackInfo(path="a.wav", duration_ms=1_000)

    assert info.to_dict() == {"path": "a.wav", "duration_ms": 1_000}
    assert TrackInfo("live.ogg").duration_ms is None
    with pytest.raises(dataclasses.FrozenInstanceError):
        info.path = "b.wav"


def test_current_track_position_while_playing():
    track = CurrentTrack(TrackInfo("a.wav"), last_playback_timestamp=10.0, last_playback_position_ms=2_000)

    assert not track.is_paused
    assert track.position_ms(10.0) == 2_000
    assert track.position_ms(11.5) == 3_500


def test_current_track_position_while_paused_ignores_clock():
    track = CurrentTrack(TrackInfo("a.wav"), last_playback_timestamp=None, last_playback_position_ms=4_200)

    assert track.is_paused
    assert track.position_ms(0.0) == 4_200
    assert track.position_ms(1e9) == 4_200


def test_clock_reading_before_timestamp_never_rewinds():
    track = CurrentTrack(TrackInfo("a.wav"), last_playback_timestamp=50.0, last_playback_position_ms=700)

    assert track.position_ms(49.0) == 700


def test_status_snapshot_defaults_to_idle():
    snapshot = StatusSnapshot()

    assert snapshot.is_idle
    assert snapshot.to_dict() == {"path": None, "duration_ms": None, "position_ms": 0, "paused": False}
    assert not StatusSnapshot(path="a.wav").is_idle


def test_error_taxonomy():
    for error_type in (LoadError, SeekError, BackendError, ActorUnavailable, CommandTimeoutError):
        assert issubclass(error_type, PlayerError)
    assert issubclass(SeekUnsupportedError, SeekError)
