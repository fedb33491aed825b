"""
Persistence adapter protocol.

The lifecycle core never touches storage directly. Every read, write and
collection filter goes through an adapter, and the record type is passed
alongside every call so adapters need no configuration of their own.
"""

from datetime import datetime
from typing import TYPE_CHECKING, Any, Optional, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .models import RecordType


@runtime_checkable
class PersistenceAdapter(Protocol):
    """Storage capability consumed by the soft delete lifecycle."""

    def install(self, record_type: "RecordType") -> None:
        """Validate and wire up a record type once, at registration."""
        ...

    def get_marker(self, record_type: "RecordType", record: Any) -> Optional[datetime]:
        """Read the marker of one record."""
        ...

    def set_marker_hooked(
        self, record_type: "RecordType", record: Any, value: Optional[datetime]
    ) -> bool:
        """Write the marker through the store's save events.

        Returns:
            False if a store-level listener vetoed the write
        """
        ...

    def set_marker_direct(
        self, record_type: "RecordType", record: Any, value: Optional[datetime]
    ) -> bool:
        """Write only the marker field, bypassing every store event."""
        ...

    def bulk_set_marker(
        self, record_type: "RecordType", collection: Any, value: Optional[datetime]
    ) -> int:
        """Set-based marker write over a collection.

        Removing (value set) touches only kept rows, restoring (value None)
        touches only removed rows.

        Returns:
            Number of rows written
        """
        ...

    def filter_kept(self, record_type: "RecordType", collection: Any) -> Any:
        """Add an explicit 'marker is absent' filter."""
        ...

    def filter_removed(self, record_type: "RecordType", collection: Any) -> Any:
        """Add an explicit 'marker is present' filter."""
        ...

    def lift_marker_filter(self, record_type: "RecordType", collection: Any) -> Any:
        """Remove the implicit filter a hidden type's base view carries."""
        ...
