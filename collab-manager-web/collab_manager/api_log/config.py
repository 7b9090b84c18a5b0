"""API call log configuration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..settings import env_bool, env_int, env_optional_str, get_config as get_app_config


@dataclass(frozen=True)
class ApiLogConfig:
    """Configuration for the API call log.

    Environment variables:
    - API_LOG_DATABASE_URL: log-specific database URL
    - COLLAB_DATABASE_URL: shared local database (used when the above is unset)
    - API_LOG_RETENTION_DAYS: Number of days to keep logs (default: 30)
    - API_LOG_ENABLED: Enable/disable logging (default: true)
    """

    database_url: str
    retention_days: int
    enabled: bool

    @classmethod
    def from_env(cls) -> "ApiLogConfig":
        database_url = env_optional_str("API_LOG_DATABASE_URL") or get_app_config().database_url
        return cls(
            database_url=database_url,
            retention_days=env_int("API_LOG_RETENTION_DAYS", 30, minimum=1),
            enabled=env_bool("API_LOG_ENABLED", True),
        )


_config: Optional[ApiLogConfig] = None


def get_config() -> ApiLogConfig:
    """Get the API log configuration (cached)."""
    global _config
    if _config is None:
        _config = ApiLogConfig.from_env()
    return _config


def reset_config() -> None:
    global _config
    _config = None
