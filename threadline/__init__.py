"""Threadline — conversation thread reconstruction and memory assembly."""

__version__ = "0.3.0"
