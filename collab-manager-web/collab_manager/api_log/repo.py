"""API call log repository functions."""

from __future__ import annotations

import json
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Set

from sqlalchemy import Integer, and_, cast, desc, func
from sqlalchemy.exc import SQLAlchemyError

from ..db import get_engine, get_session
from .config import get_config
from .models import ApiCall, Base, utcnow


_initialised: Set[str] = set()

SENSITIVE_KEYS = {
    "password", "token", "access_token", "secret", "credential",
    "auth", "authorization", "api_key", "apikey",
}


def _resolve_url(database_url: Optional[str]) -> str:
    return database_url or get_config().database_url


def init_db(database_url: Optional[str] = None) -> None:
    """Create the log tables if they don't exist. Safe to call multiple times."""
    url = _resolve_url(database_url)
    Base.metadata.create_all(get_engine(url))
    _initialised.add(url)


def redact_sensitive(payload: Any) -> Any:
    """Replace the values of credential-like keys, recursing into dicts and lists."""
    if isinstance(payload, dict):
        redacted = {}
        for k, v in payload.items():
            key_lower = str(k).lower()
            if any(sens in key_lower for sens in SENSITIVE_KEYS):
                redacted[k] = "***REDACTED***"
            else:
                redacted[k] = redact_sensitive(v)
        return redacted
    if isinstance(payload, list):
        return [redact_sensitive(item) for item in payload]
    return payload


def log_api_call(
    method: str,
    path: str,
    payload: Optional[Any] = None,
    status_code: Optional[int] = None,
    success: bool = False,
    error_message: Optional[str] = None,
    error_type: Optional[str] = None,
    started_at: Optional[datetime] = None,
    duration_ms: Optional[float] = None,
    user: Optional[str] = None,
    database_url: Optional[str] = None,
) -> Optional[str]:
    """Record one API call.

    Returns:
        The ID of the created log entry, or None if logging is disabled or failed.
    """
    config = get_config()
    if not config.enabled:
        return None

    url = _resolve_url(database_url)
    try:
        if url not in _initialised:
            init_db(url)
        session = get_session(url)

        payload_json = None
        if payload is not None:
            payload_json = json.dumps(redact_sensitive(payload), default=str)[:10000]

        entry = ApiCall(
            method=method.upper(),
            path=path[:512],
            payload_json=payload_json,
            status_code=status_code,
            success=success,
            error_message=error_message[:2000] if error_message else None,
            error_type=error_type,
            started_at=started_at or utcnow(),
            duration_ms=duration_ms,
            user=user,
        )
        session.add(entry)
        session.commit()
        log_id = entry.id
        session.close()
        return log_id

    except SQLAlchemyError:
        # never let the log break a request
        return None


def get_api_calls(
    method: Optional[str] = None,
    path_contains: Optional[str] = None,
    success: Optional[bool] = None,
    since: Optional[datetime] = None,
    until: Optional[datetime] = None,
    limit: int = 100,
    offset: int = 0,
    database_url: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """Query logged calls, newest first."""
    try:
        session = get_session(_resolve_url(database_url))
        query = session.query(ApiCall)

        if method:
            query = query.filter(ApiCall.method == method.upper())
        if path_contains:
            query = query.filter(ApiCall.path.contains(path_contains))
        if success is not None:
            query = query.filter(ApiCall.success == success)
        if since:
            query = query.filter(ApiCall.started_at >= since)
        if until:
            query = query.filter(ApiCall.started_at < until)

        query = query.order_by(desc(ApiCall.started_at)).limit(limit).offset(offset)
        results = [row.to_dict() for row in query.all()]
        session.close()
        return results

    except SQLAlchemyError:
        return []


def get_api_call_stats(
    since: Optional[datetime] = None,
    until: Optional[datetime] = None,
    database_url: Optional[str] = None,
) -> Dict[str, Any]:
    """Aggregate statistics over a time range (default: last 7 days)."""
    if since is None:
        since = utcnow() - timedelta(days=7)
    if until is None:
        until = utcnow()

    try:
        session = get_session(_resolve_url(database_url))
        base_filter = and_(ApiCall.started_at >= since, ApiCall.started_at < until)

        total_calls = session.query(func.count(ApiCall.id)).filter(base_filter).scalar() or 0
        successful_calls = session.query(func.count(ApiCall.id)).filter(
            and_(base_filter, ApiCall.success.is_(True))
        ).scalar() or 0
        avg_duration = session.query(func.avg(ApiCall.duration_ms)).filter(
            and_(base_filter, ApiCall.duration_ms.isnot(None))
        ).scalar()
        max_duration = session.query(func.max(ApiCall.duration_ms)).filter(
            and_(base_filter, ApiCall.duration_ms.isnot(None))
        ).scalar()
        session.close()

        success_rate = (successful_calls / total_calls * 100) if total_calls > 0 else 0
        return {
            "total_calls": total_calls,
            "successful_calls": successful_calls,
            "failed_calls": total_calls - successful_calls,
            "success_rate": round(success_rate, 2),
            "avg_duration_ms": round(avg_duration, 2) if avg_duration else None,
            "max_duration_ms": round(max_duration, 2) if max_duration else None,
            "since": since.isoformat(),
            "until": until.isoformat(),
        }

    except SQLAlchemyError:
        return {
            "total_calls": 0,
            "successful_calls": 0,
            "failed_calls": 0,
            "success_rate": 0,
            "avg_duration_ms": None,
            "max_duration_ms": None,
            "since": since.isoformat(),
            "until": until.isoformat(),
        }


def get_path_stats(
    since: Optional[datetime] = None,
    until: Optional[datetime] = None,
    limit: int = 20,
    database_url: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """Per method+path counts, busiest first."""
    if since is None:
        since = utcnow() - timedelta(days=7)
    if until is None:
        until = utcnow()

    try:
        session = get_session(_resolve_url(database_url))
        results = session.query(
            ApiCall.method,
            ApiCall.path,
            func.count(ApiCall.id).label("total_calls"),
            func.sum(cast(ApiCall.success, Integer)).label("successful_calls"),
            func.avg(ApiCall.duration_ms).label("avg_duration_ms"),
        ).filter(
            and_(ApiCall.started_at >= since, ApiCall.started_at < until)
        ).group_by(ApiCall.method, ApiCall.path).order_by(desc("total_calls")).limit(limit).all()

        stats = []
        for row in results:
            total = row.total_calls or 0
            successful = int(row.successful_calls or 0)
            stats.append({
                "method": row.method,
                "path": row.path,
                "total_calls": total,
                "successful_calls": successful,
                "failed_calls": total - successful,
                "avg_duration_ms": round(row.avg_duration_ms, 2) if row.avg_duration_ms else None,
            })
        session.close()
        return stats

    except SQLAlchemyError:
        return []


def get_recent_errors(
    limit: int = 20,
    since: Optional[datetime] = None,
    database_url: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """Failed calls from the last day (or since ``since``), newest first."""
    if since is None:
        since = utcnow() - timedelta(days=1)

    try:
        session = get_session(_resolve_url(database_url))
        query = session.query(ApiCall).filter(
            and_(ApiCall.started_at >= since, ApiCall.success.is_(False))
        ).order_by(desc(ApiCall.started_at)).limit(limit)
        results = [row.to_dict() for row in query.all()]
        session.close()
        return results

    except SQLAlchemyError:
        return []


def cleanup_old_logs(
    retention_days: Optional[int] = None,
    database_url: Optional[str] = None,
) -> int:
    """Delete entries older than the retention period. Returns the number deleted."""
    if retention_days is None:
        retention_days = get_config().retention_days

    cutoff = utcnow() - timedelta(days=retention_days)
    try:
        session = get_session(_resolve_url(database_url))
        deleted = session.query(ApiCall).filter(
            ApiCall.created_at < cutoff
        ).delete(synchronize_session=False)
        session.commit()
        session.close()
        return deleted

    except SQLAlchemyError:
        return 0
