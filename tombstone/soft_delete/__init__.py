"""
Soft Delete Module - recoverable removal of persistent records.

Provides record type registration, hooked and direct soft delete/restore
transitions, visibility scopes and bulk operations over a pluggable
persistence adapter, with a SQLAlchemy adapter and model mixin.
"""

from .adapter import PersistenceAdapter
from .bulk import (
    restore_all,
    restore_all_or_raise,
    soft_delete_all,
    soft_delete_all_or_raise,
)
from .exceptions import (
    RecordNotRestored,
    RecordNotSoftDeleted,
    SoftDeleteConfigurationError,
    SoftDeleteError,
    WriteAborted,
)
from .hooks import HookOutcome, HookTable
from .mixins import SoftDeleteMixin
from .models import RecordType, SoftDeleteOptions, TransitionMode, Visibility
from .registry import record_type_of, register_record_type, soft_deletable
from .scopes import kept, soft_deleted, with_soft_deleted
from .sqlalchemy_adapter import INCLUDE_SOFT_DELETED, SQLAlchemyAdapter
from .state import is_kept, is_soft_deleted
from .transitions import restore, restore_or_raise, soft_delete, soft_delete_or_raise

__all__ = [
    # Registration
    "soft_deletable",
    "register_record_type",
    "record_type_of",
    # Models
    "SoftDeleteOptions",
    "RecordType",
    "TransitionMode",
    "Visibility",
    "HookOutcome",
    "HookTable",
    # State
    "is_soft_deleted",
    "is_kept",
    # Transitions
    "soft_delete",
    "soft_delete_or_raise",
    "restore",
    "restore_or_raise",
    # Scopes
    "kept",
    "soft_deleted",
    "with_soft_deleted",
    # Bulk
    "soft_delete_all",
    "soft_delete_all_or_raise",
    "restore_all",
    "restore_all_or_raise",
    # Adapters
    "PersistenceAdapter",
    "SQLAlchemyAdapter",
    "INCLUDE_SOFT_DELETED",
    # Mixins
    "SoftDeleteMixin",
    # Exceptions
    "SoftDeleteError",
    "RecordNotSoftDeleted",
    "RecordNotRestored",
    "SoftDeleteConfigurationError",
    "WriteAborted",
]
