"""Desktop entrypoint for the Cadence player."""

from __future__ import annotations

import atexit
import platform
import sys

from cadence.application.bootstrap import PlayerServices, initialize_player_services
from cadence.config import load_config
from cadence.logging_config import setup_logging
from cadence.ui.tkinter_app import create_tkinter_app

CONFIG = load_config()
logger = setup_logging(CONFIG)

logger.info("Starting desktop player")
logger.info("Log file: %s", CONFIG.log_file)
logger.debug(
    "Config: LOG_LEVEL=%s FILE_LOG_LEVEL=%s AUDIO_BACKEND=%s AUDIO_DEVICE=%s "
    "AUDIO_BLOCKSIZE=%s SEEK_SKIP_LIMIT_MS=%s SEEK_STEP_SECONDS=%s "
    "COMMAND_TIMEOUT_SECONDS=%s STATUS_POLL_MS=%s",
    CONFIG.log_level,
    CONFIG.file_log_level,
    CONFIG.audio_backend,
    CONFIG.audio_device,
    CONFIG.audio_blocksize,
    CONFIG.seek_skip_limit_ms,
    CONFIG.seek_step_seconds,
    CONFIG.command_timeout_seconds,
    CONFIG.status_poll_ms,
)
logger.debug("Python version: %s", sys.version.replace("\n", " "))
logger.debug("Platform: %s", platform.platform())

_services: PlayerServices | None = None


def _shutdown_services() -> None:
    global _services
    if _services is None:
        return
    services = _services
    _services = None
    services.shutdown()


def launch(initial_path: str | None = None) -> None:
    global _services
    if _services is None:
        _services = initialize_player_services(config=CONFIG, logger=logger)
        atexit.register(_shutdown_services)
    app = create_tkinter_app(
        config=CONFIG,
        logger=logger,
        bridge=_services.bridge,
        initial_path=initial_path,
    )
    try:
        app.launch()
    finally:
        _shutdown_services()


if __name__ == "__main__":
    launch(sys.argv[1] if len(sys.argv) > 1 else None)
