"""
Soft delete and restore transitions of a single record.

A hooked transition runs, in order: the type's before guards, the marker
write (which fires the store's own update events when the type uses hooked
writes), then the type's after observers. A direct transition only writes the
marker. Both are no-ops returning False when the record is already in the
target state.
"""

import logging
from datetime import datetime
from typing import Any, Optional, Tuple

from ..config import get_config
from .exceptions import RecordNotRestored, RecordNotSoftDeleted
from .hooks import Guard, Observer, run_guards, run_observers
from .models import RecordType, TransitionMode
from .registry import record_type_of

logger = logging.getLogger(__name__)


def _transition(
    record: Any,
    mode: TransitionMode,
    value: Optional[datetime],
    guards: Tuple[Guard, ...],
    observers: Tuple[Observer, ...],
    record_type: RecordType,
) -> bool:
    hooked = TransitionMode(mode) == TransitionMode.HOOKED

    if hooked and not run_guards(guards, record):
        return False

    adapter = record_type.adapter
    if hooked and record_type.options.hooked_writes:
        written = adapter.set_marker_hooked(record_type, record, value)
    else:
        written = adapter.set_marker_direct(record_type, record, value)
    if not written:
        return False
    logger.debug(
        f"Wrote {record_type.column}={value!r} on {record!r} (hooked={hooked})"
    )

    if hooked:
        run_observers(observers, record)
    return True


def soft_delete(record: Any, mode: TransitionMode = TransitionMode.HOOKED) -> bool:
    """
    Soft delete a record by setting its marker to the current time.

    Args:
        record: Instance of a registered record type
        mode: HOOKED runs before/after_soft_delete hooks, DIRECT skips them

    Returns:
        True if the marker was written, False if the record was already soft
        deleted, a guard aborted, or the store vetoed the write
    """
    record_type = record_type_of(record)
    if record_type.adapter.get_marker(record_type, record) is not None:
        logger.debug(f"{record!r} is already soft deleted")
        return False

    hooks = record_type.hooks
    return _transition(
        record,
        mode,
        get_config().now(),
        hooks.before_soft_delete,
        hooks.after_soft_delete,
        record_type,
    )


def restore(record: Any, mode: TransitionMode = TransitionMode.HOOKED) -> bool:
    """
    Restore a soft deleted record by clearing its marker.

    Args:
        record: Instance of a registered record type
        mode: HOOKED runs before/after_restore hooks, DIRECT skips them

    Returns:
        True if the marker was cleared, False if the record was not soft
        deleted, a guard aborted, or the store vetoed the write
    """
    record_type = record_type_of(record)
    if record_type.adapter.get_marker(record_type, record) is None:
        logger.debug(f"{record!r} is not soft deleted")
        return False

    hooks = record_type.hooks
    return _transition(
        record,
        mode,
        None,
        hooks.before_restore,
        hooks.after_restore,
        record_type,
    )


def soft_delete_or_raise(record: Any) -> bool:
    """
    Soft delete a record with hooks, raising if nothing was written.

    Raises:
        RecordNotSoftDeleted: Record already soft deleted or transition aborted
    """
    if not soft_delete(record):
        raise RecordNotSoftDeleted(record=record)
    return True


def restore_or_raise(record: Any) -> bool:
    """
    Restore a record with hooks, raising if nothing was written.

    Raises:
        RecordNotRestored: Record not soft deleted or transition aborted
    """
    if not restore(record):
        raise RecordNotRestored(record=record)
    return True
