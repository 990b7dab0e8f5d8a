"""Command-line player with an interactive command loop."""

from __future__ import annotations

import argparse
import sys
from typing import IO, Iterable

from .application.actor import CommandActor
from .domain.errors import ActorUnavailable, PlayerError
from .domain.playback import StatusSnapshot, TrackInfo
from .utils import format_timestamp

HELP_TEXT = (
    "Commands: play <path>, pause, resume, stop, seek <ms>, + [seconds], - [seconds], "
    "status, help, quit"
)
PROMPT = "> "


def describe_track(info: TrackInfo) -> str:
    return f"Playing: {info.path} ({info.duration_ms or 0} ms)"


def describe_status(snapshot: StatusSnapshot) -> str:
    if snapshot.is_idle:
        return "Idle"
    state = "Paused" if snapshot.paused else "Playing"
    total = format_timestamp(snapshot.duration_ms) if snapshot.duration_ms is not None else "--:--"
    return (
        f"{state}: {snapshot.path} {format_timestamp(snapshot.position_ms)} / {total} "
        f"({snapshot.position_ms} ms)"
    )


class PlayerRepl:
    """Maps one input line to one player command."""

    def __init__(self, actor: CommandActor, *, out: IO[str], step_seconds: float = 5.0) -> None:
        self.actor = actor
        self.out = out
        self.step_seconds = float(step_seconds)

    def run(self, lines: Iterable[str]) -> None:
        self._prompt()
        for line in lines:
            if not self.handle_line(line):
                return
            self._prompt()

    def handle_line(self, line: str) -> bool:
        """Run one command; returns False when the loop should end."""
        parts = line.strip().split(maxsplit=1)
        if not parts:
            return True
        command = parts[0].lower()
        argument = parts[1].strip() if len(parts) > 1 else ""
        try:
            return self._dispatch(command, argument)
        except ActorUnavailable:
            raise
        except PlayerError as exc:
            self._print(f"Error: {exc}")
        except ValueError:
            self._print(f"Invalid argument for {command}: {argument!r}")
        return True

    def _dispatch(self, command: str, argument: str) -> bool:
        if command == "play":
            if not argument:
                self._print("Usage: play <path>")
                return True
            self._print(describe_track(self.actor.play(argument)))
        elif command == "pause":
            self.actor.pause()
            self._print("Paused")
        elif command == "resume":
            self.actor.resume()
            self._print("Resumed")
        elif command == "stop":
            self.actor.stop()
            self._print("Stopped")
        elif command == "seek":
            if not argument:
                self._print("Usage: seek <ms>")
                return True
            self.actor.seek_to(int(argument))
            self._print(describe_status(self.actor.status()))
        elif command in ("+", "-"):
            seconds = float(argument) if argument else self.step_seconds
            delta_ms = int(round(seconds * 1000.0))
            self.actor.advance(delta_ms if command == "+" else -delta_ms)
            self._print(describe_status(self.actor.status()))
        elif command == "status":
            self._print(describe_status(self.actor.status()))
        elif command in ("quit", "q", "exit"):
            self.actor.stop()
            return False
        elif command in ("help", "h"):
            self._print(HELP_TEXT)
        else:
            self._print(f"Unknown command: {command}. Type 'help' for commands.")
        return True

    def _prompt(self) -> None:
        self.out.write(PROMPT)
        self.out.flush()

    def _print(self, message: str) -> None:
        self.out.write(f"{message}\n")
        self.out.flush()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cadence",
        description="Play a local audio file with transport controls.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    play_parser = subparsers.add_parser("play", help="Play a file and read commands from stdin.")
    play_parser.add_argument("path", help="Audio file to play.")
    desktop_parser = subparsers.add_parser("desktop", help="Open the desktop player window.")
    desktop_parser.add_argument("path", nargs="?", default=None, help="Audio file to open.")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    from .application.bootstrap import initialize_player_services
    from .config import load_config
    from .logging_config import setup_logging

    config = load_config()
    logger = setup_logging(config)
    logger.info("Starting cadence (%s)", args.command)
    logger.debug(
        "Config: AUDIO_BACKEND=%s AUDIO_DEVICE=%s AUDIO_BLOCKSIZE=%s SEEK_SKIP_LIMIT_MS=%s "
        "SEEK_STEP_SECONDS=%s COMMAND_TIMEOUT_SECONDS=%s LOG_FILE=%s",
        config.audio_backend,
        config.audio_device,
        config.audio_blocksize,
        config.seek_skip_limit_ms,
        config.seek_step_seconds,
        config.command_timeout_seconds,
        config.log_file,
    )
    try:
        services = initialize_player_services(config=config, logger=logger)
    except ActorUnavailable as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    try:
        if args.command == "desktop":
            from .ui.tkinter_app import create_tkinter_app

            create_tkinter_app(
                config=config,
                logger=logger,
                bridge=services.bridge,
                initial_path=args.path,
            ).launch()
            return 0

        repl = PlayerRepl(services.actor, out=sys.stdout, step_seconds=config.seek_step_seconds)
        try:
            print(describe_track(services.actor.play(args.path)))
        except PlayerError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            if isinstance(exc, ActorUnavailable):
                return 1
        print(HELP_TEXT)
        try:
            repl.run(sys.stdin)
        except ActorUnavailable as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return 1
        except KeyboardInterrupt:
            pass
        return 0
    finally:
        services.shutdown()
