"""Exceptions raised inside the tracking core.

None of these are fatal: the store and the persistence adapter catch them,
log them and turn them into user-facing notices and boolean results.
"""


class TrackerError(Exception):
    """Base class for tracker failures."""


class ValidationError(TrackerError):
    """Rejected input: empty field, duplicate identity, bad status or index."""


class PersistenceError(TrackerError):
    """Base class for key-value store failures."""


class PersistenceReadError(PersistenceError):
    """Stored data could not be read or decoded."""


class PersistenceWriteError(PersistenceError):
    """Stored data could not be written or removed."""


class StorageQuotaExceeded(OSError):
    """Raised by a key-value store when a write would exceed its quota."""
