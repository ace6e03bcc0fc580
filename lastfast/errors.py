"""
Exception types raised at the edit and import boundaries.

Missing data (no active fast, no goal, empty history) is never an error;
those cases return defaults.
"""

from __future__ import annotations


class LastFastError(Exception):
    """Base class for all engine errors."""


class InvalidCorrectionError(LastFastError):
    """A manual correction would leave the session with an invalid range or goal."""


class SessionNotFoundError(LastFastError):
    def __init__(self, session_id: str):
        super().__init__(f"No fasting session with id {session_id!r}")
        self.session_id = session_id


class AlreadyFastingError(LastFastError):
    def __init__(self, session):
        super().__init__("A fast is already in progress")
        self.session = session


class SnapshotError(LastFastError):
    """A snapshot could not be encoded, decoded or written."""
