"""Collab Manager web client: API client, typed records and per-screen state."""

__version__ = "0.1.0"
