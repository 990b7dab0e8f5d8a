"""Tkinter desktop UI for Cadence."""
from __future__ import annotations

import os
import threading
import tkinter as tk
from tkinter import filedialog, ttk
from typing import Any, Callable

from ..application.bridge import BridgeResult, PlayerBridge
from ..config import AppConfig
from .common import (
    APP_TITLE,
    AUDIO_FILE_TYPES,
    NO_TRACK_TEXT,
    format_status_text,
    is_error_payload,
    progress_fraction,
    transport_button_label,
)
from .desktop_types import DesktopApp

_PROGRESS_MAX = 1000


class CadenceDesktopApp(DesktopApp):
    """Small transport window; every player call goes through the bridge."""

    def __init__(
        self,
        *,
        config: AppConfig,
        logger,
        bridge: PlayerBridge,
        initial_path: str | None = None,
    ) -> None:
        self.title = APP_TITLE
        self.config = config
        self.logger = logger
        self.bridge = bridge
        self.initial_path = initial_path
        self.root: tk.Tk | None = None
        self.track_var: tk.StringVar | None = None
        self.time_var: tk.StringVar | None = None
        self.status_var: tk.StringVar | None = None
        self.progress_var: tk.DoubleVar | None = None
        self.transport_btn: ttk.Button | None = None
        self.last_status: BridgeResult = {}
        self.poll_job: str | None = None
        self.status_request_pending = False

    def launch(self) -> None:
        self._ensure_root()
        assert self.root is not None
        if self.initial_path:
            self._play_path(self.initial_path)
        self.root.mainloop()

    def build_for_test(self) -> tk.Tk:
        """Build root/widgets without entering mainloop (for tests)."""
        self._ensure_root()
        assert self.root is not None
        return self.root

    def _ensure_root(self) -> None:
        if self.root is not None:
            return
        root = tk.Tk()
        root.title(APP_TITLE)
        root.geometry("560x200")
        root.minsize(420, 180)
        self.root = root
        self._init_tk_variables()
        self._build_layout()
        self._bind_shortcuts()
        root.protocol("WM_DELETE_WINDOW", self._on_close)
        self._schedule_poll()
        self.logger.debug("Tkinter UI wiring complete")

    def _init_tk_variables(self) -> None:
        self.track_var = tk.StringVar(value=NO_TRACK_TEXT)
        self.time_var = tk.StringVar(value="00:00 / --:--")
        self.status_var = tk.StringVar(value="Open a file to start playback.")
        self.progress_var = tk.DoubleVar(value=0.0)

    def _build_layout(self) -> None:
        assert self.root is not None
        frame = ttk.Frame(self.root, padding=12)
        frame.pack(fill="both", expand=True)

        ttk.Label(frame, textvariable=self.track_var).pack(fill="x")
        ttk.Progressbar(
            frame,
            variable=self.progress_var,
            maximum=_PROGRESS_MAX,
            mode="determinate",
        ).pack(fill="x", pady=(8, 2))
        ttk.Label(frame, textvariable=self.time_var).pack(anchor="e")

        controls = ttk.Frame(frame)
        controls.pack(fill="x", pady=8)
        step = self.config.seek_step_seconds
        ttk.Button(controls, text="Open...", command=self._on_open).pack(side="left")
        ttk.Button(
            controls, text=f"-{step:g}s", command=lambda: self._on_seek(-step)
        ).pack(side="left", padx=(8, 0))
        self.transport_btn = ttk.Button(controls, text="Play", command=self._on_transport)
        self.transport_btn.pack(side="left", padx=(8, 0))
        ttk.Button(
            controls, text=f"+{step:g}s", command=lambda: self._on_seek(step)
        ).pack(side="left", padx=(8, 0))
        ttk.Button(controls, text="Stop", command=self._on_stop).pack(side="left", padx=(8, 0))

        ttk.Label(frame, textvariable=self.status_var, foreground="#555555").pack(fill="x")

    def _bind_shortcuts(self) -> None:
        assert self.root is not None
        step = self.config.seek_step_seconds
        self.root.bind("<space>", lambda _event: self._on_transport())
        self.root.bind("<Left>", lambda _event: self._on_seek(-step))
        self.root.bind("<Right>", lambda _event: self._on_seek(step))

    def _on_open(self) -> None:
        path = filedialog.askopenfilename(title="Open audio file", filetypes=AUDIO_FILE_TYPES)
        if path:
            self._play_path(path)

    def _play_path(self, path: str) -> None:
        self._set_status(f"Loading {os.path.basename(path)}...")
        self._threaded(lambda: self.bridge.play(path), self._on_play_result)

    def _on_play_result(self, payload: BridgeResult) -> None:
        if is_error_payload(payload):
            self._set_status(f"Error: {payload['error']}")
            return
        name = os.path.basename(str(payload.get("path") or ""))
        if self.track_var is not None:
            self.track_var.set(name or NO_TRACK_TEXT)
        self._set_status(f"Playing {name}.")
        self._request_status()

    def _on_transport(self) -> None:
        label = transport_button_label(self.last_status)
        if label == "Play":
            self._on_open()
        elif label == "Resume":
            self._threaded(self.bridge.resume, self._on_command_result)
        else:
            self._threaded(self.bridge.pause, self._on_command_result)

    def _on_stop(self) -> None:
        self._threaded(self.bridge.stop, self._on_command_result)

    def _on_seek(self, delta_seconds: float) -> None:
        if transport_button_label(self.last_status) == "Play":
            return
        delta_ms = int(round(float(delta_seconds) * 1000.0))
        self._threaded(lambda: self.bridge.advance(delta_ms), self._on_command_result)

    def _on_command_result(self, payload: BridgeResult) -> None:
        if is_error_payload(payload):
            self._set_status(f"Error: {payload['error']}")
        self._request_status()

    def _request_status(self) -> None:
        if self.status_request_pending:
            return
        self.status_request_pending = True
        self._threaded(self.bridge.status, self._apply_status)

    def _apply_status(self, payload: BridgeResult) -> None:
        self.status_request_pending = False
        if is_error_payload(payload):
            self._set_status(f"Error: {payload['error']}")
            return
        self.last_status = dict(payload or {})
        if self.time_var is not None:
            self.time_var.set(format_status_text(self.last_status))
        if self.progress_var is not None:
            self.progress_var.set(progress_fraction(self.last_status) * _PROGRESS_MAX)
        if self.transport_btn is not None:
            self.transport_btn.configure(text=transport_button_label(self.last_status))
        if self.track_var is not None and self.last_status.get("path") is None:
            self.track_var.set(NO_TRACK_TEXT)

    def _on_action_failed(self, message: str) -> None:
        self.status_request_pending = False
        self._set_status(f"Error: {message}")

    def _schedule_poll(self) -> None:
        if self.root is None:
            return
        self.poll_job = self.root.after(self.config.status_poll_ms, self._on_poll_tick)

    def _on_poll_tick(self) -> None:
        self.poll_job = None
        self._request_status()
        self._schedule_poll()

    def _set_status(self, message: str) -> None:
        if self.status_var is not None:
            self.status_var.set(message)

    def _on_close(self) -> None:
        if self.root is not None and self.poll_job is not None:
            try:
                self.root.after_cancel(self.poll_job)
            except Exception:
                self.logger.exception("Failed to cancel status poll")
            self.poll_job = None
        self.bridge.stop()
        if self.root is not None:
            self.root.destroy()
            self.root = None

    def _threaded(self, work: Callable[[], Any], on_success: Callable[[Any], None] | None = None) -> None:
        def _runner() -> None:
            try:
                result = work()
            except Exception as exc:
                self.logger.exception("Tkinter UI action failed")
                message = str(exc)
                self._run_on_ui(lambda message=message: self._on_action_failed(message))
                return
            if on_success is not None:
                self._run_on_ui(lambda: on_success(result))

        thread = threading.Thread(target=_runner, daemon=True)
        thread.start()

    def _run_on_ui(self, callback: Callable[[], None]) -> None:
        if self.root is None:
            return
        self.root.after(0, callback)


def create_tkinter_app(
    *,
    config: AppConfig,
    logger,
    bridge: PlayerBridge,
    initial_path: str | None = None,
) -> CadenceDesktopApp:
    return CadenceDesktopApp(
        config=config,
        logger=logger,
        bridge=bridge,
        initial_path=initial_path,
    )
