"""
Bulk soft delete and restore.

The hooked strategy loads every eligible record and runs the single-record
hooked transition on each, so one aborted record does not block the others
and there is no cross-record atomicity. The direct strategy issues one
set-based write and skips type-level hooks and store events entirely.
"""

import logging
from typing import Any, Callable, List, Union

from ..config import get_config
from .exceptions import RecordNotRestored, RecordNotSoftDeleted, SoftDeleteError
from .models import TransitionMode
from .registry import record_type_of
from .scopes import kept, soft_deleted
from .transitions import restore, restore_or_raise, soft_delete, soft_delete_or_raise

logger = logging.getLogger(__name__)


def soft_delete_all(
    model: Any, collection: Any, mode: TransitionMode = TransitionMode.HOOKED
) -> Union[List[Any], int]:
    """
    Soft delete every kept record of a collection.

    Note: The hooked strategy instantiates each record and issues at least
    one UPDATE per record. Use ``TransitionMode.DIRECT`` to soft delete many
    rows quickly when hooks and store events do not matter.

    Args:
        model: Registered record type
        collection: Collection of records of that type
        mode: HOOKED or DIRECT

    Returns:
        HOOKED: the records acted upon; DIRECT: the number of rows written
    """
    record_type = record_type_of(model)
    if TransitionMode(mode) == TransitionMode.DIRECT:
        count = record_type.adapter.bulk_set_marker(
            record_type, collection, get_config().now()
        )
        logger.debug(f"Soft deleted {count} {record_type.name} rows without hooks")
        return count

    records = list(kept(model, collection))
    for record in records:
        soft_delete(record)
    return records


def restore_all(
    model: Any, collection: Any, mode: TransitionMode = TransitionMode.HOOKED
) -> Union[List[Any], int]:
    """
    Restore every soft deleted record of a collection.

    Args:
        model: Registered record type
        collection: Collection of records of that type
        mode: HOOKED or DIRECT

    Returns:
        HOOKED: the records acted upon; DIRECT: the number of rows written
    """
    record_type = record_type_of(model)
    if TransitionMode(mode) == TransitionMode.DIRECT:
        count = record_type.adapter.bulk_set_marker(record_type, collection, None)
        logger.debug(f"Restored {count} {record_type.name} rows without hooks")
        return count

    records = list(soft_deleted(model, collection))
    for record in records:
        restore(record)
    return records


def _apply_all_or_raise(
    records: List[Any], transition: Callable[[Any], bool]
) -> List[Any]:
    failures: List[SoftDeleteError] = []
    for record in records:
        try:
            transition(record)
        except (RecordNotSoftDeleted, RecordNotRestored) as exc:
            failures.append(exc)

    if failures:
        logger.info(
            f"{len(failures)} of {len(records)} records failed to transition; "
            "raising the first failure"
        )
        raise failures[0]
    return records


def soft_delete_all_or_raise(model: Any, collection: Any) -> List[Any]:
    """
    Soft delete every kept record with hooks, then raise the first failure.

    Every record is attempted before raising and records already soft deleted
    stay soft deleted.

    Raises:
        RecordNotSoftDeleted: At least one record was not soft deleted
    """
    return _apply_all_or_raise(list(kept(model, collection)), soft_delete_or_raise)


def restore_all_or_raise(model: Any, collection: Any) -> List[Any]:
    """
    Restore every soft deleted record with hooks, then raise the first failure.

    Raises:
        RecordNotRestored: At least one record was not restored
    """
    return _apply_all_or_raise(list(soft_deleted(model, collection)), restore_or_raise)
