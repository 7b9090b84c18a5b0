"""Persisted session token, one row per device key.

The only client-side persistence: the bearer token and the serialized
current user, so a browser reload does not force a new login. Every
browser carries its own random device key; there is no shared row.
"""
from __future__ import annotations

import json
import logging
import secrets
from datetime import timezone
from typing import Optional

from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.orm import declarative_base

from .api_log.models import utcnow
from .db import get_engine, get_session
from .errors import ParseError
from .models import User
from .session import SessionContext

logger = logging.getLogger(__name__)

Base = declarative_base()

DEVICE_KEY_BYTES = 16


class StoredSession(Base):
    __tablename__ = "stored_sessions"

    device_key = Column(String(128), primary_key=True)
    token = Column(Text, nullable=False)
    user_json = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)


def init_db(database_url: Optional[str] = None) -> None:
    Base.metadata.create_all(get_engine(database_url))


def new_device_key() -> str:
    return secrets.token_urlsafe(DEVICE_KEY_BYTES)


def save_session(
    context: SessionContext,
    device_key: str,
    database_url: Optional[str] = None,
) -> None:
    if not context.token:
        raise ValueError("Cannot persist a session without a token")
    init_db(database_url)
    user_json = context.user.model_dump_json() if context.user else None
    with get_session(database_url) as session:
        row = session.get(StoredSession, device_key)
        if row is None:
            row = StoredSession(device_key=device_key)
            session.add(row)
        row.token = context.token
        row.user_json = user_json
        row.created_at = context.created_at.replace(tzinfo=None)
        session.commit()


def load_session(
    device_key: str,
    database_url: Optional[str] = None,
) -> Optional[SessionContext]:
    """Restore a persisted session, or None when nothing usable is stored."""
    init_db(database_url)
    with get_session(database_url) as session:
        row = session.get(StoredSession, device_key)
        if row is None:
            return None
        token, user_json, created_at = row.token, row.user_json, row.created_at

    user = None
    if user_json:
        try:
            user = User.parse(json.loads(user_json))
        except (ValueError, ParseError):
            logger.warning("Discarding unreadable stored user for device %s", device_key)
            clear_session(device_key, database_url)
            return None
    context = SessionContext(token=token, user=user)
    if created_at is not None:
        context.created_at = created_at.replace(tzinfo=timezone.utc)
    return context


def clear_session(
    device_key: str,
    database_url: Optional[str] = None,
) -> None:
    init_db(database_url)
    with get_session(database_url) as session:
        session.query(StoredSession).filter(StoredSession.device_key == device_key).delete(
            synchronize_session=False
        )
        session.commit()
