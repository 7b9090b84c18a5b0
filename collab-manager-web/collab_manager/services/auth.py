"""Login, logout and session restore."""
from __future__ import annotations

import logging
from typing import Callable, Optional

from ..api_client import ApiClient
from ..errors import ApiError, AuthenticationRequired, ValidationFailed
from ..models import User
from ..session import SessionContext
from .. import session_store

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(
        self,
        api: ApiClient,
        device_key: Optional[str] = None,
        database_url: Optional[str] = None,
    ) -> None:
        """``device_key`` names this browser's stored session; without one nothing is persisted."""
        self.api = api
        self.device_key = device_key
        self.database_url = database_url

    @property
    def persist(self) -> bool:
        return bool(self.device_key)

    @property
    def session(self) -> SessionContext:
        return self.api.session

    def login(self, email: str, password: str) -> SessionContext:
        """Exchange credentials for a bearer token and load the current user."""
        try:
            data = self.api.post(
                "/auth/login",
                json={"email": email.strip(), "password": password},
                auth=False,
            )
        except (AuthenticationRequired, ValidationFailed) as exc:
            raise AuthenticationRequired("Invalid credentials", exc.status_code, exc.detail) from exc

        token = data.get("access_token") if isinstance(data, dict) else None
        if not token:
            raise ApiError("Login response did not include an access token")

        self.session.token = token
        user_payload = data.get("user")
        try:
            self.session.user = User.parse(user_payload) if isinstance(user_payload, dict) else self.current_user()
        except ApiError:
            self.session.invalidate()
            raise
        logger.info("Logged in as %s (%s)", self.session.user.email, self.session.user.role)

        if self.persist:
            session_store.save_session(self.session, self.device_key, self.database_url)
        return self.session

    def current_user(self) -> User:
        return User.parse(self.api.get("/auth/me"))

    def logout(self) -> None:
        """Best-effort server logout; the local session is always cleared."""
        if self.session.is_authenticated:
            try:
                self.api.post("/auth/logout", expected=(200, 204))
            except ApiError as exc:
                logger.debug("Server logout failed, clearing local session anyway: %s", exc)
        self.session.invalidate()
        if self.persist:
            session_store.clear_session(self.device_key, self.database_url)

    def restore(self, verify: Optional[Callable[[], User]] = None) -> bool:
        """Load this device's persisted session, confirmed against the server.

        The stored token is only kept once ``verify`` (``GET /auth/me`` by
        default) accepts it; the fresh user replaces the stored copy. A
        rejected token is deleted. Returns True when a session was restored.
        """
        if not self.persist:
            return False
        stored = session_store.load_session(self.device_key, self.database_url)
        if stored is None or not stored.token:
            return False
        self.session.token = stored.token
        self.session.user = None
        self.session.created_at = stored.created_at
        try:
            self.session.user = (verify or self.current_user)()
        except AuthenticationRequired:
            logger.info("Stored session token rejected; logging out")
            self.session.invalidate()
            session_store.clear_session(self.device_key, self.database_url)
            return False
        except ApiError:
            self.session.invalidate()
            raise
        session_store.save_session(self.session, self.device_key, self.database_url)
        return True
