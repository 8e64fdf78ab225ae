"""Procedural audio generation service (binaural beats, subliminal audio)."""

__version__ = "0.1.0"
