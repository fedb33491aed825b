"""
Configuration module for Tombstone.

Provides the process-wide defaults used when soft deletable record types are
registered, and the time zone used for removal timestamps.
"""

from datetime import datetime
from typing import Any, Dict, Optional

import pytz
from pydantic import BaseModel, Field, field_validator


class TombstoneConfig(BaseModel):
    """Central configuration for soft delete record types.

    Registration reads the ``default_*`` values once, when a record type is
    registered without explicit options. A registered type never reads them
    again, so changing the configuration afterwards only affects types
    registered later.

    Configuration Sources (in order of precedence):
        1. Programmatic settings (highest priority)
        2. Environment variables (TOMBSTONE_ prefix)
        3. Default values (lowest priority)

    Example:
        >>> config = TombstoneConfig(default_column="removed_at")
        >>> import os
        >>> os.environ['TOMBSTONE_TIMEZONE'] = 'Europe/Berlin'
        >>> config = TombstoneConfig.from_env()
    """

    default_column: str = Field(
        "deleted_at", description="Marker attribute used when none is given"
    )
    default_without_default_scope: bool = Field(
        False, description="Keep removed records in the base view by default"
    )
    default_skip_orm_events: bool = Field(
        True, description="Bypass the store's save events on marker writes"
    )
    timezone: str = Field("UTC", description="Time zone of removal timestamps")

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """Ensure the time zone is known."""
        try:
            pytz.timezone(v)
        except pytz.UnknownTimeZoneError:
            raise ValueError(f"Unknown time zone: {v}")
        return v

    def now(self) -> datetime:
        """Current time in the configured time zone."""
        return datetime.now(pytz.timezone(self.timezone))

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return self.model_dump()

    @classmethod
    def from_env(cls, prefix: str = "TOMBSTONE_") -> "TombstoneConfig":
        """
        Load configuration from environment variables.

        Args:
            prefix: Prefix for environment variables

        Returns:
            Configuration instance
        """
        import os

        config_dict: Dict[str, Any] = {}

        for field_name, field_info in cls.model_fields.items():
            env_var = f"{prefix}{field_name.upper()}"
            if env_var in os.environ:
                value = os.environ[env_var]

                if field_info.annotation is bool:
                    config_dict[field_name] = value.lower() in (
                        "true",
                        "1",
                        "yes",
                        "on",
                    )
                else:
                    config_dict[field_name] = value

        return cls.model_validate(config_dict)


# Global configuration instance
_config: Optional[TombstoneConfig] = None


def get_config() -> TombstoneConfig:
    """
    Get the global configuration instance.

    Returns:
        Global configuration, loaded from the environment on first use
    """
    global _config

    if _config is None:
        _config = TombstoneConfig.from_env()

    return _config


def set_config(config: Optional[TombstoneConfig]) -> None:
    """
    Set the global configuration instance.

    Args:
        config: Configuration to set, or None to reload from the environment
    """
    global _config
    _config = config


def configure(**kwargs: Any) -> TombstoneConfig:
    """
    Configure Tombstone with keyword arguments.

    Args:
        **kwargs: Configuration parameters

    Returns:
        Updated configuration
    """
    global _config

    if _config is None:
        _config = TombstoneConfig(**kwargs)
    else:
        config_dict = _config.to_dict()
        config_dict.update(kwargs)
        _config = TombstoneConfig(**config_dict)

    return _config
