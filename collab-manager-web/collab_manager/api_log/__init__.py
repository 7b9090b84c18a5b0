"""API Log - persistent record of every backend call made by the web client.

This module provides:
- Database model for storing API call logs
- Repository functions for writing, querying and pruning them
- Redaction of credential-like payload keys
"""

from .repo import (
    init_db,
    log_api_call,
    get_api_calls,
    get_api_call_stats,
    get_path_stats,
    get_recent_errors,
    cleanup_old_logs,
    redact_sensitive,
)

__all__ = [
    "init_db",
    "log_api_call",
    "get_api_calls",
    "get_api_call_stats",
    "get_path_stats",
    "get_recent_errors",
    "cleanup_old_logs",
    "redact_sensitive",
]
