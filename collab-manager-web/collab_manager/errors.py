"""Exception types shared by the API client, services and screens."""
from __future__ import annotations

from typing import Any, Dict, Optional


class CollabError(Exception):
    """Base class for every error surfaced to the user as a notice."""


class ApiError(CollabError):
    def __init__(self, message: str, status_code: Optional[int] = None, detail: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.detail = detail


class NetworkError(ApiError):
    pass


class AuthenticationRequired(ApiError):
    pass


class AccessDenied(ApiError):
    pass


class NotFound(ApiError):
    pass


class Conflict(ApiError):
    pass


class ValidationFailed(ApiError):
    pass


class ParseError(ApiError):
    """Backend payload did not match the expected record shape."""


class TimerTransitionError(CollabError):
    pass


class TimerConflict(TimerTransitionError):
    """Another task already holds the user's single active/paused timer."""

    def __init__(self, message: str, active_task_id: str, active_task_title: Optional[str] = None) -> None:
        super().__init__(message)
        self.active_task_id = active_task_id
        self.active_task_title = active_task_title


class FormError(CollabError):
    def __init__(self, errors: Dict[str, str]) -> None:
        first = next(iter(errors.values()), "Invalid input")
        super().__init__(first)
        self.errors = dict(errors)
