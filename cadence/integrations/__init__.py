"""Integrations for audio libraries."""

from .sounddevice_backend import OutputDevice, SoundDeviceBackend, SoundDeviceSink
from .soundfile_source import SoundFileSource
from .vlc_backend import VlcBackend, VlcSink, VlcSource

__all__ = [
    "OutputDevice",
    "SoundDeviceBackend",
    "SoundDeviceSink",
    "SoundFileSource",
    "VlcBackend",
    "VlcSink",
    "VlcSource",
]
