"""
SQLAlchemy mixin exposing the soft delete lifecycle on models.

The mixin declares no columns; the marker column is declared on the model and
named at registration:

    @soft_deletable(column="removed_at", without_default_scope=True)
    class Note(Base, SoftDeleteMixin):
        __tablename__ = "notes"
        id = Column(Integer, primary_key=True)
        removed_at = Column(DateTime(timezone=True), nullable=True)
"""

from typing import Any, List, Union

from sqlalchemy.orm import Query, Session

from . import bulk, scopes, state, transitions
from .models import TransitionMode


def _mode(hooks: bool) -> TransitionMode:
    return TransitionMode.HOOKED if hooks else TransitionMode.DIRECT


class SoftDeleteMixin:
    """
    Mixin adding soft delete and restore methods to a registered model.

    Provides:
    - State checks (is_soft_deleted, is_kept)
    - Single record transitions, hooked or direct
    - Kept / soft deleted / with soft deleted queries
    - Bulk transitions over the whole table
    """

    @property
    def is_soft_deleted(self) -> bool:
        """True if this record has been soft deleted."""
        return state.is_soft_deleted(self)

    @property
    def is_kept(self) -> bool:
        """True if this record has not been soft deleted."""
        return state.is_kept(self)

    def soft_delete(self, hooks: bool = True) -> bool:
        """
        Soft delete this record.

        Args:
            hooks: Run before/after_soft_delete hooks; False writes the marker
                only, with no hooks and no store events

        Returns:
            True if successful, otherwise False
        """
        return transitions.soft_delete(self, _mode(hooks))

    def soft_delete_or_raise(self) -> bool:
        """
        Soft delete this record with hooks.

        Raises:
            RecordNotSoftDeleted: Already soft deleted or a guard aborted
        """
        return transitions.soft_delete_or_raise(self)

    def restore(self, hooks: bool = True) -> bool:
        """
        Restore this record.

        Args:
            hooks: Run before/after_restore hooks; False clears the marker only

        Returns:
            True if successful, otherwise False
        """
        return transitions.restore(self, _mode(hooks))

    def restore_or_raise(self) -> bool:
        """
        Restore this record with hooks.

        Raises:
            RecordNotRestored: Not soft deleted or a guard aborted
        """
        return transitions.restore_or_raise(self)

    @classmethod
    def query_kept(cls, session: Session) -> Query[Any]:
        """Return query for kept records only."""
        return scopes.kept(cls, session.query(cls))

    @classmethod
    def query_soft_deleted(cls, session: Session) -> Query[Any]:
        """Return query for soft deleted records only."""
        return scopes.soft_deleted(cls, session.query(cls))

    @classmethod
    def query_with_soft_deleted(cls, session: Session) -> Query[Any]:
        """Return query for all records including soft deleted ones."""
        return scopes.with_soft_deleted(cls, session.query(cls))

    @classmethod
    def soft_delete_all(
        cls, session: Session, hooks: bool = True
    ) -> Union[List[Any], int]:
        """
        Soft delete all kept records.

        Returns:
            The records acted upon with hooks, the row count without
        """
        return bulk.soft_delete_all(cls, session.query(cls), _mode(hooks))

    @classmethod
    def soft_delete_all_or_raise(cls, session: Session) -> List[Any]:
        """Soft delete all kept records with hooks, raising the first failure."""
        return bulk.soft_delete_all_or_raise(cls, session.query(cls))

    @classmethod
    def restore_all(cls, session: Session, hooks: bool = True) -> Union[List[Any], int]:
        """
        Restore all soft deleted records.

        Returns:
            The records acted upon with hooks, the row count without
        """
        return bulk.restore_all(cls, session.query(cls), _mode(hooks))

    @classmethod
    def restore_all_or_raise(cls, session: Session) -> List[Any]:
        """Restore all soft deleted records with hooks, raising the first failure."""
        return bulk.restore_all_or_raise(cls, session.query(cls))
