"""Explicit per-user session context passed to the API client."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Optional

from .models import User


@dataclass
class SessionContext:
    token: Optional[str] = None
    user: Optional[User] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    @property
    def role(self) -> Optional[str]:
        return self.user.role_key if self.user else None

    def auth_headers(self) -> Dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    def invalidate(self) -> None:
        """Forget the token and user; later authenticated calls fail fast."""
        self.token = None
        self.user = None
