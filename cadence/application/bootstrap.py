"""Application bootstrap assembly for the backend, player thread and bridge."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from ..config import AppConfig
from ..integrations.sounddevice_backend import SoundDeviceBackend
from ..integrations.vlc_backend import VlcBackend
from .actor import CommandActor
from .bridge import PlayerBridge
from .controller import PlaybackController
from .ports import AudioBackend

BackendFactory = Callable[[], AudioBackend]

_STARTUP_TIMEOUT_SECONDS = 15.0


@dataclass(frozen=True)
class PlayerServices:
    actor: CommandActor
    bridge: PlayerBridge

    def shutdown(self, timeout: float | None = 5.0) -> None:
        self.actor.shutdown(timeout)


def create_audio_backend(config: AppConfig, logger) -> AudioBackend:
    """Create the configured backend; acquires the output device."""
    if config.audio_backend == "vlc":
        return VlcBackend(logger)
    return SoundDeviceBackend(
        logger,
        device=config.audio_device,
        blocksize=config.audio_blocksize,
    )


def build_controller_factory(
    config: AppConfig,
    logger,
    *,
    backend_factory: BackendFactory | None = None,
) -> Callable[[], PlaybackController]:
    def _factory() -> PlaybackController:
        backend = (
            backend_factory() if backend_factory is not None else create_audio_backend(config, logger)
        )
        logger.info("Audio backend: %s", getattr(backend, "name", type(backend).__name__))
        return PlaybackController(
            backend,
            logger,
            seek_skip_limit_ms=config.seek_skip_limit_ms,
        )

    return _factory


def initialize_player_services(
    *,
    config: AppConfig,
    logger,
    backend_factory: BackendFactory | None = None,
) -> PlayerServices:
    """Start the player thread and return a typed service bundle."""
    actor = CommandActor(
        build_controller_factory(config, logger, backend_factory=backend_factory),
        logger,
        default_timeout=config.command_timeout_seconds,
    )
    actor.start(timeout=_STARTUP_TIMEOUT_SECONDS)
    bridge = PlayerBridge(actor, logger, timeout=config.command_timeout_seconds)
    return PlayerServices(actor=actor, bridge=bridge)
