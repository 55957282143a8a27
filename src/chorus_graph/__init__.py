"""Chorus Graph: relationship and authorization engine for the Chorus social graph."""

__version__ = "0.1.0"
