"""
Visibility scopes over collections of a record type.

Each view is the type's base view plus at most one explicit filter. For a
hidden type the base view already excludes soft deleted records, so the
``soft_deleted`` view lifts that implicit filter before filtering on the
marker instead of stacking a second, contradictory filter.
"""

from typing import Any

from .models import Visibility
from .registry import record_type_of


def kept(model: Any, collection: Any) -> Any:
    """Records whose marker is absent."""
    record_type = record_type_of(model)
    if record_type.visibility == Visibility.HIDDEN:
        return collection
    return record_type.adapter.filter_kept(record_type, collection)


def soft_deleted(model: Any, collection: Any) -> Any:
    """Records whose marker is set."""
    record_type = record_type_of(model)
    adapter = record_type.adapter
    if record_type.visibility == Visibility.HIDDEN:
        collection = adapter.lift_marker_filter(record_type, collection)
    return adapter.filter_removed(record_type, collection)


def with_soft_deleted(model: Any, collection: Any) -> Any:
    """All records regardless of marker."""
    record_type = record_type_of(model)
    if record_type.visibility == Visibility.HIDDEN:
        return record_type.adapter.lift_marker_filter(record_type, collection)
    return collection
