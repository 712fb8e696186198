"""Incremental graph sync and layout for a visual planning canvas."""

__version__ = "0.1.0"
