"""Timed sequences with transport, cues, snapping and timeline navigation."""

__version__ = "0.1.0"
__all__ = ["timing", "sequence", "manager", "editor", "header", "seeker"]