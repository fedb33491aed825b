"""
Data models for soft delete record types.

These models describe how a record type tracks removal: which attribute holds
the marker timestamp, whether removed records are hidden from the type's base
view, and whether marker writes go through the store's own save events.
"""

import keyword
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .hooks import HookTable

if TYPE_CHECKING:
    from .adapter import PersistenceAdapter


class Visibility(str, Enum):
    """Default visibility of removed records in a type's base view."""

    HIDDEN = "hidden"
    VISIBLE = "visible"


class TransitionMode(str, Enum):
    """Execution mode of a soft delete or restore transition."""

    HOOKED = "hooked"  # Runs guards and observers, may be aborted
    DIRECT = "direct"  # Writes the marker only, no hooks at all


class SoftDeleteOptions(BaseModel):
    """Registration options for a soft deletable record type."""

    model_config = ConfigDict(frozen=True)

    column: str = Field(
        "deleted_at",
        description="Attribute holding the removal timestamp",
        min_length=1,
        max_length=100,
    )
    without_default_scope: bool = Field(
        False, description="Keep removed records visible in the base view"
    )
    skip_orm_events: bool = Field(
        True, description="Write the marker without firing the store's save events"
    )

    @field_validator("column")
    @classmethod
    def validate_column(cls, v: str) -> str:
        """Ensure the marker column is usable as an attribute name."""
        v = v.strip()
        if not v.isidentifier() or keyword.iskeyword(v):
            raise ValueError(f"Marker column must be a valid attribute name: {v!r}")
        return v

    @property
    def default_visibility(self) -> Visibility:
        """Visibility of removed records when no scope is applied."""
        if self.without_default_scope:
            return Visibility.VISIBLE
        return Visibility.HIDDEN

    @property
    def hooked_writes(self) -> bool:
        """Whether marker writes fire the store's save events."""
        return not self.skip_orm_events


@dataclass(frozen=True)
class RecordType:
    """Resolved soft delete configuration of one model class.

    Attributes:
        model: The registered class
        options: Registration options
        hooks: Guard and observer chains per transition
        adapter: Persistence adapter performing reads and writes
    """

    model: Any
    options: SoftDeleteOptions
    hooks: HookTable
    adapter: "PersistenceAdapter"

    @property
    def name(self) -> str:
        return getattr(self.model, "__name__", repr(self.model))

    @property
    def column(self) -> str:
        return self.options.column

    @property
    def visibility(self) -> Visibility:
        return self.options.default_visibility
