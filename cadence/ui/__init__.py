"""User interface layer."""

from .common import APP_TITLE, format_status_text, progress_fraction, transport_button_label
from .desktop_types import DesktopApp

__all__ = [
    "APP_TITLE",
    "DesktopApp",
    "format_status_text",
    "progress_fraction",
    "transport_button_label",
]
