"""Cadence: a minimal local audio player."""

__version__ = "0.1.0"
