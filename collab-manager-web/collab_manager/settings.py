"""Runtime configuration for the Collab Manager web client.

Env-first with safe local-dev defaults. Credentials never live here: the
bearer token is obtained at login and kept in the session store.

Env vars:
- COLLAB_API_BASE_URL: backend REST root (default: https://app.auravisual.dk)
- COLLAB_API_TIMEOUT_SECONDS: per-request timeout (default: 15)
- COLLAB_VERIFY_SSL: verify TLS certificates (default: true)
- COLLAB_CLIENT_REFRESH_SECONDS: client task screen poll interval (default: 30)
- COLLAB_DATABASE_URL: local DB for the session token and API call log
  (default: SQLite at data/collab.db)
- COLLAB_DEMO_FALLBACK: show a demo roster when the team fetch fails (default: false)
- API_LOG_ENABLED / API_LOG_RETENTION_DAYS: see collab_manager.api_log.config
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


_APP_ROOT = Path(__file__).resolve().parents[1]

_TRUE = {"1", "true", "yes", "y", "on"}
_FALSE = {"0", "false", "no", "n", "off"}


def env_str(name: str, default: str) -> str:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip() or default


def env_optional_str(name: str, default: Optional[str] = None) -> Optional[str]:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip() or default


def env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    raw = raw.strip().lower()
    if raw in _TRUE:
        return True
    if raw in _FALSE:
        return False
    return default


def env_int(name: str, default: int, *, minimum: Optional[int] = None) -> int:
    raw = os.environ.get(name)
    try:
        value = int(raw.strip()) if raw is not None else int(default)
    except ValueError:
        value = int(default)
    if minimum is not None:
        value = max(minimum, value)
    return value


def default_database_url() -> str:
    data_dir = _APP_ROOT / "data"
    data_dir.mkdir(parents=True, exist_ok=True)
    return f"sqlite:///{(data_dir / 'collab.db').as_posix()}"


@dataclass(frozen=True)
class AppConfig:
    api_base_url: str
    timeout_seconds: int
    verify_ssl: bool
    client_refresh_seconds: int
    database_url: str
    demo_fallback: bool

    DEFAULT_API_BASE_URL = "https://app.auravisual.dk"
    DEFAULT_TIMEOUT_SECONDS = 15
    DEFAULT_CLIENT_REFRESH_SECONDS = 30

    @classmethod
    def from_env(cls) -> "AppConfig":
        return cls(
            api_base_url=env_str("COLLAB_API_BASE_URL", cls.DEFAULT_API_BASE_URL).rstrip("/"),
            timeout_seconds=env_int("COLLAB_API_TIMEOUT_SECONDS", cls.DEFAULT_TIMEOUT_SECONDS, minimum=1),
            verify_ssl=env_bool("COLLAB_VERIFY_SSL", True),
            client_refresh_seconds=env_int(
                "COLLAB_CLIENT_REFRESH_SECONDS", cls.DEFAULT_CLIENT_REFRESH_SECONDS, minimum=5
            ),
            database_url=env_optional_str("COLLAB_DATABASE_URL") or default_database_url(),
            demo_fallback=env_bool("COLLAB_DEMO_FALLBACK", False),
        )


_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """Cached configuration for the running app."""
    global _config
    if _config is None:
        _config = AppConfig.from_env()
    return _config


def reset_config() -> None:
    global _config
    _config = None
