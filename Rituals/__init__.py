"""Rituals: daily ritual tracking on a local overlay store."""

__version__ = "1.0.0"
