"""Thin JSON-over-HTTP client for the Collab Manager backend.

Every call goes through ``ApiClient.request``: it adds the bearer token
from the explicit ``SessionContext``, maps HTTP failures to the typed
errors in ``collab_manager.errors`` and records the call in the API log.
"""
from __future__ import annotations

import logging
import time
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional

import requests

from .api_log import log_api_call
from .api_log.models import utcnow
from .errors import (
    AccessDenied,
    ApiError,
    AuthenticationRequired,
    Conflict,
    NetworkError,
    NotFound,
    ValidationFailed,
)
from .session import SessionContext
from .settings import AppConfig, get_config

logger = logging.getLogger(__name__)

Recorder = Callable[..., Any]

JSON_HEADERS = {"Content-Type": "application/json", "Accept": "application/json"}


def _server_detail(body: Any) -> Optional[str]:
    """Pull a human readable reason out of an error body (``detail`` or ``message``)."""
    if isinstance(body, str):
        return body.strip() or None
    if not isinstance(body, dict):
        return None
    detail = body.get("detail", body.get("message"))
    if isinstance(detail, list):
        # validation error lists: [{"loc": [...], "msg": "..."}]
        parts = [str(d.get("msg", d)) if isinstance(d, dict) else str(d) for d in detail]
        return "; ".join(parts) or None
    if detail is None:
        return None
    return str(detail)


def _denied_message(path: str) -> str:
    if path.startswith("/admin"):
        return "Access denied. Admin privileges required."
    if path.startswith("/client"):
        return "Access denied. Client role required."
    return "Access denied. You do not have permission for this action."


def unwrap_list(payload: Any, *keys: str) -> List[Any]:
    """Return the list held by ``payload``.

    Accepts a bare list, or an object holding the list under the first of
    ``keys`` (default ``data``/``results``/``items``) that maps to a list.
    Anything else yields an empty list.
    """
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in keys or ("data", "results", "items"):
            value = payload.get(key)
            if isinstance(value, list):
                return value
    return []


class ApiClient:
    def __init__(
        self,
        config: Optional[AppConfig] = None,
        session: Optional[SessionContext] = None,
        http: Any = None,
        recorder: Optional[Recorder] = None,
    ) -> None:
        self.config = config or get_config()
        self.session = session if session is not None else SessionContext()
        self.http = http if http is not None else requests.Session()
        self.recorder = recorder if recorder is not None else log_api_call

    def url_for(self, path: str) -> str:
        return f"{self.config.api_base_url.rstrip('/')}/{path.lstrip('/')}"

    def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: Optional[Dict[str, Any]] = None,
        auth: bool = True,
        expected: Iterable[int] = (200,),
    ) -> Any:
        """Perform one call and return the decoded JSON body (None when empty).

        Raises:
            AuthenticationRequired: no token for an authenticated call, or HTTP 401.
            AccessDenied / NotFound / Conflict / ValidationFailed: HTTP 403/404/409/400+422.
            ApiError: any other unexpected status.
            NetworkError: the transport failed before a response arrived.
        """
        method = method.upper()
        headers = dict(JSON_HEADERS)
        if auth:
            if not self.session.is_authenticated:
                raise AuthenticationRequired("No authentication token available. Please log in.")
            headers.update(self.session.auth_headers())

        started_at = utcnow()
        started = time.perf_counter()
        logger.debug("%s %s params=%s", method, path, params)
        try:
            resp = self.http.request(
                method,
                self.url_for(path),
                headers=headers,
                json=json,
                params=params,
                timeout=self.config.timeout_seconds,
                verify=self.config.verify_ssl,
            )
        except requests.RequestException as exc:
            duration_ms = (time.perf_counter() - started) * 1000
            logger.warning("%s %s failed: %s", method, path, exc)
            self._record(method, path, json, None, False, str(exc), "NetworkError", started_at, duration_ms)
            raise NetworkError(f"Network error: {exc}") from exc

        duration_ms = (time.perf_counter() - started) * 1000
        body = self._decode(resp)
        status = resp.status_code
        logger.debug("%s %s -> %s (%.0f ms)", method, path, status, duration_ms)

        if status in tuple(expected):
            self._record(method, path, json, status, True, None, None, started_at, duration_ms)
            return body

        error = self._error_for(status, path, body)
        logger.warning("%s %s -> %s: %s", method, path, status, error.message)
        self._record(
            method, path, json, status, False, error.message, type(error).__name__, started_at, duration_ms
        )
        raise error

    def get(self, path: str, **kwargs: Any) -> Any:
        return self.request("GET", path, **kwargs)

    def post(self, path: str, **kwargs: Any) -> Any:
        return self.request("POST", path, **kwargs)

    def patch(self, path: str, **kwargs: Any) -> Any:
        return self.request("PATCH", path, **kwargs)

    @staticmethod
    def _decode(resp: Any) -> Any:
        text = resp.text or ""
        if not text.strip():
            return None
        try:
            return resp.json()
        except ValueError:
            return text

    @staticmethod
    def _error_for(status: int, path: str, body: Any) -> ApiError:
        detail = _server_detail(body)
        if status == 401:
            return AuthenticationRequired("Authentication failed. Please log in again.", status, detail)
        if status == 403:
            return AccessDenied(_denied_message(path), status, detail)
        if status == 404:
            return NotFound(f"Resource not found: {path}", status, detail)
        if status == 409:
            return Conflict(detail or "Request conflicts with the current state", status, detail)
        if status in (400, 422):
            message = "Invalid request"
            if detail:
                message = f"{message}: {detail}"
            return ValidationFailed(message, status, detail)
        return ApiError(f"HTTP {status}", status, detail)

    def _record(
        self,
        method: str,
        path: str,
        payload: Any,
        status_code: Optional[int],
        success: bool,
        error_message: Optional[str],
        error_type: Optional[str],
        started_at: datetime,
        duration_ms: float,
    ) -> None:
        user = self.session.user.email if self.session.user else None
        self.recorder(
            method=method,
            path=path,
            payload=payload,
            status_code=status_code,
            success=success,
            error_message=error_message,
            error_type=error_type,
            started_at=started_at,
            duration_ms=duration_ms,
            user=user,
        )
