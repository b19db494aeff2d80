"""Versioned, content-addressed post store."""

__version__ = "1.0.0"
