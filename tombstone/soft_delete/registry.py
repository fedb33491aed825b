"""
Registration of soft deletable record types.

Registration resolves options and hook chains once into an immutable
``RecordType`` and attaches it to the model class as ``__soft_delete_type__``.
"""

import logging
from typing import Any, Callable, Iterable, Optional, TypeVar

from ..config import get_config
from .adapter import PersistenceAdapter
from .exceptions import SoftDeleteConfigurationError
from .hooks import HookTable
from .models import RecordType, SoftDeleteOptions

logger = logging.getLogger(__name__)

T = TypeVar("T")

TYPE_ATTRIBUTE = "__soft_delete_type__"


def build_options(
    column: Optional[str] = None,
    without_default_scope: Optional[bool] = None,
    skip_orm_events: Optional[bool] = None,
) -> SoftDeleteOptions:
    """Build registration options, filling unset values from the global config."""
    config = get_config()
    return SoftDeleteOptions(
        column=config.default_column if column is None else column,
        without_default_scope=(
            config.default_without_default_scope
            if without_default_scope is None
            else without_default_scope
        ),
        skip_orm_events=(
            config.default_skip_orm_events
            if skip_orm_events is None
            else skip_orm_events
        ),
    )


def register_record_type(
    model: Any,
    options: Optional[SoftDeleteOptions] = None,
    *,
    adapter: Optional[PersistenceAdapter] = None,
    **hooks: Iterable[Callable[..., Any]],
) -> RecordType:
    """
    Register a model class as a soft deletable record type.

    Args:
        model: Class to register
        options: Registration options, defaults built from the global config
        adapter: Persistence adapter, defaults to ``SQLAlchemyAdapter``
        **hooks: Hook chains keyed by hook name (before_soft_delete, ...)

    Returns:
        The registered record type

    Raises:
        SoftDeleteConfigurationError: Class already registered or adapter
            rejected the model
    """
    if TYPE_ATTRIBUTE in vars(model):
        raise SoftDeleteConfigurationError(
            f"{getattr(model, '__name__', model)} is already registered as a "
            "soft deletable record type"
        )

    if options is None:
        options = build_options()

    if adapter is None:
        from .sqlalchemy_adapter import SQLAlchemyAdapter

        adapter = SQLAlchemyAdapter()

    record_type = RecordType(
        model=model,
        options=options,
        hooks=HookTable.build(**hooks),
        adapter=adapter,
    )
    adapter.install(record_type)
    setattr(model, TYPE_ATTRIBUTE, record_type)

    logger.debug(
        f"Registered {record_type.name} as soft deletable "
        f"(column={options.column}, visibility={options.default_visibility.value}, "
        f"hooked_writes={options.hooked_writes})"
    )
    return record_type


def soft_deletable(
    column: Optional[str] = None,
    without_default_scope: Optional[bool] = None,
    skip_orm_events: Optional[bool] = None,
    *,
    adapter: Optional[PersistenceAdapter] = None,
    **hooks: Iterable[Callable[..., Any]],
) -> Callable[[T], T]:
    """
    Class decorator registering a soft deletable record type.

    Options left as None fall back to the global configuration.

    Usage:
        @soft_deletable(column="removed_at", before_soft_delete=[check_locked])
        class Note(Base, SoftDeleteMixin):
            __tablename__ = "notes"
            id = Column(Integer, primary_key=True)
            removed_at = Column(DateTime, nullable=True)
    """
    options = build_options(column, without_default_scope, skip_orm_events)

    def decorator(model: T) -> T:
        register_record_type(model, options, adapter=adapter, **hooks)
        return model

    return decorator


def record_type_of(obj: Any) -> RecordType:
    """
    Get the record type of a registered class or one of its instances.

    Raises:
        SoftDeleteConfigurationError: Class is not registered
    """
    cls = obj if isinstance(obj, type) else type(obj)
    record_type = getattr(cls, TYPE_ATTRIBUTE, None)
    if record_type is None:
        raise SoftDeleteConfigurationError(
            f"{cls.__name__} is not registered as a soft deletable record type"
        )
    return record_type
