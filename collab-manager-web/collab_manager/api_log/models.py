"""API call log database models."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Float, Index, Integer, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def _generate_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    """Naive UTC, the form every DateTime column here stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class ApiCall(Base):
    """One REST call made by the web client against the backend."""

    __tablename__ = "api_calls"

    id = Column(String(36), primary_key=True, default=_generate_id)

    method = Column(String(8), nullable=False, index=True)
    path = Column(String(512), nullable=False, index=True)
    payload_json = Column(Text, nullable=True)  # sensitive keys redacted

    status_code = Column(Integer, nullable=True, index=True)
    success = Column(Boolean, nullable=False, default=False, index=True)
    error_message = Column(Text, nullable=True)
    error_type = Column(String(128), nullable=True)

    started_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    duration_ms = Column(Float, nullable=True)

    # email of the signed-in user, when there is one
    user = Column(String(255), nullable=True, index=True)

    created_at = Column(DateTime, nullable=False, default=utcnow)

    __table_args__ = (
        Index("ix_api_calls_started_success", "started_at", "success"),
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "method": self.method,
            "path": self.path,
            "payload_json": self.payload_json,
            "status_code": self.status_code,
            "success": self.success,
            "error_message": self.error_message,
            "error_type": self.error_type,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "duration_ms": self.duration_ms,
            "user": self.user,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
