"""Exceptions for soft delete operations."""

from typing import Any, Optional


class SoftDeleteError(Exception):
    """Base exception for soft delete operations."""

    def __init__(self, message: str, record: Optional[Any] = None):
        self.record = record
        super().__init__(message)


class RecordNotSoftDeleted(SoftDeleteError):
    """Raised by ``soft_delete_or_raise`` when the record was not soft deleted.

    Covers both a record that was already soft deleted and a ``before_soft_delete``
    guard that aborted the transition.
    """

    def __init__(
        self, message: str = "Failed to soft delete the record.", record: Any = None
    ):
        super().__init__(message, record=record)


class RecordNotRestored(SoftDeleteError):
    """Raised by ``restore_or_raise`` when the record was not restored."""

    def __init__(
        self, message: str = "Failed to restore the record.", record: Any = None
    ):
        super().__init__(message, record=record)


class SoftDeleteConfigurationError(SoftDeleteError):
    """Raised when a record type is missing or registered incorrectly."""

    def __init__(self, message: str):
        super().__init__(message)


class WriteAborted(SoftDeleteError):
    """Raised from a store-level save listener to veto a hooked marker write."""
