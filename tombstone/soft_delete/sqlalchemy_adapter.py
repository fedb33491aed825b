"""
SQLAlchemy persistence adapter for soft delete record types.

Records are mapped instances attached to a ``Session`` and collections are
ORM ``Query`` objects. Hidden record types get their implicit kept filter from
a session-wide ``do_orm_execute`` listener that adds ``with_loader_criteria``
to ORM SELECT statements, and the filter is lifted per query through the
``include_soft_deleted`` execution option.
"""

import logging
from datetime import datetime
from typing import Any, List, Optional

from sqlalchemy import event, inspect, update
from sqlalchemy.exc import NoInspectionAvailable
from sqlalchemy.orm import ORMExecuteState, Query, Session, object_session
from sqlalchemy.orm import with_loader_criteria
from sqlalchemy.orm.attributes import set_committed_value

from .exceptions import SoftDeleteConfigurationError, SoftDeleteError, WriteAborted
from .models import RecordType, Visibility

logger = logging.getLogger(__name__)

INCLUDE_SOFT_DELETED = "include_soft_deleted"


# Record types whose base view hides soft deleted rows, in registration order
_hidden_types: List[RecordType] = []


def apply_default_scope(execute_state: ORMExecuteState) -> None:
    """
    Hide soft deleted rows of hidden record types from ORM SELECTs.

    Connected to ``Session`` ``do_orm_execute``. Attribute refreshes and
    relationship loads are left alone; the criteria added to the parent
    statement already propagates to them, as it does to subqueries.

    The ``include_soft_deleted`` option is not per model: it lifts the filter
    of every hidden type in the statement, so a lifted query joined to another
    hidden type also returns that type's soft deleted rows. Filter the joined
    type explicitly when only one side should be lifted.
    """
    if (
        not execute_state.is_select
        or not execute_state.is_orm_statement
        or execute_state.is_column_load
        or execute_state.is_relationship_load
        or execute_state.execution_options.get(INCLUDE_SOFT_DELETED, False)
    ):
        return

    criteria = [
        with_loader_criteria(
            record_type.model,
            getattr(record_type.model, record_type.column).is_(None),
        )
        for record_type in _hidden_types
    ]

    if criteria:
        execute_state.statement = execute_state.statement.options(*criteria)


class SQLAlchemyAdapter:
    """Persistence adapter backed by SQLAlchemy ORM sessions."""

    def install(self, record_type: RecordType) -> None:
        """
        Validate the mapping of a record type and wire its base view.

        Raises:
            SoftDeleteConfigurationError: Model is not mapped or lacks the marker
        """
        try:
            mapper = inspect(record_type.model)
        except NoInspectionAvailable:
            raise SoftDeleteConfigurationError(
                f"{record_type.name} is not a mapped SQLAlchemy class"
            )

        if record_type.column not in mapper.column_attrs.keys():
            raise SoftDeleteConfigurationError(
                f"{record_type.name} has no mapped column '{record_type.column}' "
                "to use as soft delete marker"
            )

        if record_type.visibility == Visibility.HIDDEN:
            _hidden_types.append(record_type)
            if not event.contains(Session, "do_orm_execute", apply_default_scope):
                event.listen(Session, "do_orm_execute", apply_default_scope)
            logger.debug(
                f"Installed default kept scope for {record_type.name} "
                f"on '{record_type.column}'"
            )

    def get_marker(self, record_type: RecordType, record: Any) -> Optional[datetime]:
        return getattr(record, record_type.column)

    def set_marker_hooked(
        self, record_type: RecordType, record: Any, value: Optional[datetime]
    ) -> bool:
        """
        Assign the marker and flush inside a savepoint, firing mapper update
        events.

        A ``before_update``/``after_update`` listener may raise ``WriteAborted``.
        Only the savepoint is then rolled back, the previous marker is put back
        on the instance and False is returned. Other work pending in the
        session's transaction is kept.
        """
        session = self._session_for(record)
        previous = getattr(record, record_type.column)
        try:
            with session.begin_nested():
                setattr(record, record_type.column, value)
                session.flush()
        except WriteAborted as exc:
            logger.warning(f"Store listener vetoed marker write on {record!r}: {exc}")
            set_committed_value(record, record_type.column, previous)
            return False
        return True

    def set_marker_direct(
        self, record_type: RecordType, record: Any, value: Optional[datetime]
    ) -> bool:
        """
        Write the marker with a single UPDATE on the record's primary key.

        No mapper events fire and the instance is not left dirty.

        Raises:
            SoftDeleteError: Record is not persistent
        """
        session = self._session_for(record)
        state = inspect(record)
        if not state.persistent:
            raise SoftDeleteError(
                "Cannot write the soft delete marker of a record that is not "
                "persisted",
                record=record,
            )

        mapper = state.mapper
        marker = getattr(mapper.class_, record_type.column)
        stmt = (
            update(mapper.class_)
            .where(
                *[
                    column == value_
                    for column, value_ in zip(mapper.primary_key, state.identity)
                ]
            )
            .values({marker: value})
        )
        result = session.execute(
            stmt, execution_options={"synchronize_session": False}
        )
        set_committed_value(record, record_type.column, value)
        return result.rowcount > 0

    def bulk_set_marker(
        self, record_type: RecordType, collection: Query, value: Optional[datetime]
    ) -> int:
        marker = getattr(record_type.model, record_type.column)
        if value is None:
            scoped = collection.filter(marker.is_not(None))
        else:
            scoped = collection.filter(marker.is_(None))
        return scoped.update({marker: value}, synchronize_session=False)

    def filter_kept(self, record_type: RecordType, collection: Query) -> Query:
        return collection.filter(
            getattr(record_type.model, record_type.column).is_(None)
        )

    def filter_removed(self, record_type: RecordType, collection: Query) -> Query:
        return collection.filter(
            getattr(record_type.model, record_type.column).is_not(None)
        )

    def lift_marker_filter(self, record_type: RecordType, collection: Query) -> Query:
        return collection.execution_options(**{INCLUDE_SOFT_DELETED: True})

    @staticmethod
    def _session_for(record: Any) -> Session:
        session = object_session(record)
        if session is None:
            raise SoftDeleteError(
                f"{record!r} is not attached to a session", record=record
            )
        return session
