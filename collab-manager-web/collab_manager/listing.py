"""Client-side filtering and ordering shared by every list screen.

All functions are pure: they never mutate their input and return new lists.
Items can be typed records or plain mappings.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence

from .models import STATUS_ALL, TASK_IN_PROGRESS

# Searchable fields per screen
TASK_SEARCH_FIELDS = ("action", "project_name", "description")
CLIENT_TASK_SEARCH_FIELDS = ("title", "project_name", "description")
CLIENT_PROJECT_SEARCH_FIELDS = ("name", "description", "plan")
TICKET_SEARCH_FIELDS = ("message", "project_name")
CLIENT_SEARCH_FIELDS = ("full_name", "username", "email")


def field_value(item: Any, name: str) -> Any:
    if isinstance(item, dict):
        return item.get(name)
    return getattr(item, name, None)


def matches_query(item: Any, query: str, fields: Sequence[str]) -> bool:
    needle = (query or "").lower()
    if not needle:
        return True
    for name in fields:
        value = field_value(item, name)
        if value is not None and needle in str(value).lower():
            return True
    return False


def filter_items(
    items: Iterable[Any],
    *,
    status: str = STATUS_ALL,
    query: str = "",
    fields: Sequence[str] = TASK_SEARCH_FIELDS,
) -> List[Any]:
    """Items whose status equals ``status`` (any when ``"all"``) and that match ``query``."""
    result = []
    for item in items:
        if status != STATUS_ALL and field_value(item, "status") != status:
            continue
        if not matches_query(item, query, fields):
            continue
        result.append(item)
    return result


def parse_iso(value: Any) -> Optional[datetime]:
    """ISO-8601 string or datetime to datetime; None when it cannot be read."""
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    raw = value.strip()
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(raw)
    except ValueError:
        return None


def parse_timestamp(value: Any, now: datetime) -> datetime:
    """Timezone-aware UTC timestamp; missing or unparseable values become ``now``.

    Naive values are taken to be UTC.
    """
    parsed = parse_iso(value)
    if parsed is None:
        parsed = now
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _now(now: Optional[datetime]) -> datetime:
    return now if now is not None else datetime.now(timezone.utc)


def sort_newest_first(items: Iterable[Any], *, now: Optional[datetime] = None, key: str = "created_at") -> List[Any]:
    current = _now(now)
    return sorted(items, key=lambda item: parse_timestamp(field_value(item, key), current), reverse=True)


def sort_in_progress_first(items: Iterable[Any], *, now: Optional[datetime] = None) -> List[Any]:
    """``in_progress`` items first, each group newest first. Ties keep input order."""
    current = _now(now)
    newest = sort_newest_first(items, now=current)
    return sorted(newest, key=lambda item: field_value(item, "status") != TASK_IN_PROGRESS)


def sort_clients_by_activity(clients: Iterable[Any]) -> List[Any]:
    return sorted(
        clients,
        key=lambda c: (field_value(c, "active_projects_count") or 0, field_value(c, "total_projects_count") or 0),
        reverse=True,
    )


def sort_projects_by_name(projects: Iterable[Any]) -> List[Any]:
    return sorted(projects, key=lambda p: str(field_value(p, "name") or "").lower())


def count_by_status(items: Iterable[Any]) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for item in items:
        status = field_value(item, "status") or "unknown"
        counts[status] = counts.get(status, 0) + 1
    return counts
