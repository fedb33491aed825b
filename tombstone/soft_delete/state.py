"""Soft delete state of a single record."""

from typing import Any

from .registry import record_type_of


def is_soft_deleted(record: Any) -> bool:
    """True if the record's marker is set."""
    record_type = record_type_of(record)
    return record_type.adapter.get_marker(record_type, record) is not None


def is_kept(record: Any) -> bool:
    """True if the record's marker is absent."""
    return not is_soft_deleted(record)
