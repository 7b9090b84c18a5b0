"""Streamlit glue: per-browser-session API client, services, screens and notices."""
from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Dict, Optional, TypeVar

import streamlit as st

from . import session_store
from .api_client import ApiClient
from .errors import CollabError
from .models import User
from .screens import Notice, ScreenState
from .services import AuthService
from .settings import get_config

# --- Fragment fallback (Streamlit >= 1.38 provides st.fragment; create no-op decorator if absent) ---
if not hasattr(st, "fragment"):
    def _fragment_decorator(func=None, **_kwargs):
        def wrapper(fn):
            def inner(*args, **kw):
                return fn(*args, **kw)
            return inner
        if func:
            return wrapper(func)
        return wrapper
    st.fragment = _fragment_decorator  # type: ignore

S = TypeVar("S")

_API_KEY = "cm_api_client"
_SCREENS_KEY = "cm_screens"
_RETRY_KEY = "cm_pending_retry"
_RESTORED_KEY = "cm_session_restored"
_DEVICE_KEY = "cm_device_key"
_AUTH_KEY = "cm_auth_service"

DEVICE_PARAM = "device"
MIN_DEVICE_KEY_LENGTH = 16

LEVEL_ICONS = {"success": "✅", "info": "ℹ️", "warning": "⚠️", "error": "❌"}


def get_api() -> ApiClient:
    if _API_KEY not in st.session_state:
        st.session_state[_API_KEY] = ApiClient(get_config())
    return st.session_state[_API_KEY]


def get_service(cls: Callable[[ApiClient], S]) -> S:
    key = f"cm_service_{cls.__name__}"
    if key not in st.session_state:
        st.session_state[key] = cls(get_api())
    return st.session_state[key]


def device_key() -> str:
    """This browser's random session key, mirrored into the URL so a reload keeps it.

    Page navigation may drop query params, so the key lives in session state
    and is written back on every run.
    """
    key = st.session_state.get(_DEVICE_KEY)
    if key is None:
        key = st.query_params.get(DEVICE_PARAM) or ""
        if len(key) < MIN_DEVICE_KEY_LENGTH:
            key = session_store.new_device_key()
        st.session_state[_DEVICE_KEY] = key
    if st.query_params.get(DEVICE_PARAM) != key:
        st.query_params[DEVICE_PARAM] = key
    return key


def get_auth() -> AuthService:
    if _AUTH_KEY not in st.session_state:
        st.session_state[_AUTH_KEY] = AuthService(get_api(), device_key=device_key())
    return st.session_state[_AUTH_KEY]


def restore_session() -> None:
    """Pick up this browser's persisted login once per browser session."""
    device_key()
    if st.session_state.get(_RESTORED_KEY):
        return
    st.session_state[_RESTORED_KEY] = True
    try:
        get_auth().restore()
    except CollabError as exc:
        st.warning(f"Could not restore your previous session: {exc}")


def current_user() -> Optional[User]:
    session = get_api().session
    return session.user if session.is_authenticated else None


def require_role(*roles: str) -> User:
    """Stop the page unless the signed-in user has one of ``roles``."""
    user = current_user()
    if user is None:
        st.warning("Please log in to continue.")
        st.stop()
    if roles and user.role_key not in roles:
        st.error("Access denied. This page is not available for your role.")
        st.stop()
    return user


def logout() -> None:
    get_auth().logout()
    for key in (_SCREENS_KEY, _RETRY_KEY):
        st.session_state.pop(key, None)
    st.rerun()


def get_screen(key: str, factory: Callable[[], S], autoload: bool = True) -> S:
    """The page's screen state, created (and loaded) on first visit.

    Entering a page detaches every other screen, so late results for a page
    the user already left are dropped.
    """
    screens: Dict[str, ScreenState] = st.session_state.setdefault(_SCREENS_KEY, {})
    for other_key, other in screens.items():
        if other_key != key:
            other.detach()
    screen = screens.get(key)
    if screen is None:
        screen = factory()
        screens[key] = screen
        screen.attach()
        if autoload and hasattr(screen, "load"):
            with st.spinner("Loading..."):
                screen.load()
    screen.attach()
    return screen


def render_notices(screen: ScreenState, key: str) -> None:
    """Toasts for plain notices; a banner with buttons for ones carrying a retry action."""
    pending: Dict[str, Notice] = st.session_state.setdefault(_RETRY_KEY, {})
    for notice in screen.drain_notices():
        if notice.retry is not None:
            pending[key] = notice
        else:
            st.toast(notice.message, icon=LEVEL_ICONS.get(notice.level, "ℹ️"))

    notice = pending.get(key)
    if notice is None:
        return
    banner = st.error if notice.level == "error" else st.warning
    banner(notice.message)
    c1, c2, _ = st.columns([1.2, 1, 4])
    with c1:
        if st.button(notice.retry_label, key=f"{key}-retry"):
            pending.pop(key, None)
            notice.retry()
            st.rerun()
    with c2:
        if st.button("Dismiss", key=f"{key}-dismiss"):
            pending.pop(key, None)
            st.rerun()


def format_date(value: Optional[datetime], fmt: str = "%d %b %Y") -> str:
    if value is None:
        return "-"
    return value.strftime(fmt)


def toolbar(screen: Any, key: str, statuses: Optional[list] = None, placeholder: str = "Search...") -> None:
    """Search box, optional status filter and a refresh button bound to a list screen."""
    cols = st.columns([3, 1.4, 0.6]) if statuses else st.columns([4.4, 0.6])
    with cols[0]:
        query = st.text_input("Search", value=screen.query, key=f"{key}-query", placeholder=placeholder)
        screen.set_query(query)
    if statuses:
        with cols[1]:
            options = ["all"] + list(statuses)
            index = options.index(screen.status) if screen.status in options else 0
            status = st.selectbox(
                "Status",
                options=options,
                index=index,
                key=f"{key}-status",
                format_func=lambda s: s.replace("_", " ").title(),
            )
            screen.set_status(status)
    with cols[-1]:
        st.write("")
        if st.button("↻", key=f"{key}-refresh", help="Reload from the server"):
            with st.spinner("Refreshing..."):
                screen.load()
            st.rerun()
