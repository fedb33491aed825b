"""
Tombstone - soft delete lifecycle for persistent records.

Records are marked removed by a nullable timestamp instead of being deleted,
can be queried back through kept / soft deleted / with soft deleted scopes,
and can be restored. Every transition runs an ordered guard/observer hook
pipeline whose outcome is observable by the caller.

Quick Start
-----------
>>> from sqlalchemy import Column, DateTime, Integer
>>> from tombstone import SoftDeleteMixin, soft_deletable
>>>
>>> @soft_deletable(column="removed_at")
... class Note(Base, SoftDeleteMixin):
...     __tablename__ = "notes"
...     id = Column(Integer, primary_key=True)
...     removed_at = Column(DateTime(timezone=True), nullable=True)
>>>
>>> note.soft_delete()          # hooked, returns bool
>>> note.restore_or_raise()     # hooked, raises RecordNotRestored
>>> Note.query_kept(session).all()

Soft deleted rows of a type registered without ``without_default_scope`` are
hidden from every ORM query of that type until the query lifts the filter
with ``query_with_soft_deleted`` or ``query_soft_deleted``.
"""

__version__ = "1.0.0"

from .config import TombstoneConfig, configure, get_config, set_config
from .soft_delete import (
    HookOutcome,
    RecordNotRestored,
    RecordNotSoftDeleted,
    SoftDeleteError,
    SoftDeleteMixin,
    SoftDeleteOptions,
    TransitionMode,
    WriteAborted,
    soft_deletable,
)

__all__ = [
    # Soft Delete
    "soft_deletable",
    "SoftDeleteMixin",
    "SoftDeleteOptions",
    "TransitionMode",
    "HookOutcome",
    "SoftDeleteError",
    "RecordNotSoftDeleted",
    "RecordNotRestored",
    "WriteAborted",
    # Configuration
    "TombstoneConfig",
    "get_config",
    "set_config",
    "configure",
]
