"""State management errors."""


class StateError(Exception):
    """Base exception for durable state operations."""


class MissingStateError(StateError):
    """Raised when no snapshot has been written yet."""


class UnsupportedStateVersionError(StateError):
    """Raised when a snapshot was written with an unknown record version."""
