"""Local database engine and session management.

Holds the persisted session token and the API call log. SQLite by default
(see ``settings.default_database_url``); any SQLAlchemy URL works.
"""
from __future__ import annotations

from typing import Dict, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from .settings import get_config


# One engine per URL so tests can point at throwaway SQLite files
_engines: Dict[str, Engine] = {}


def get_engine(database_url: Optional[str] = None) -> Engine:
    """Get or create the SQLAlchemy engine for ``database_url``.

    Args:
        database_url: Optional override for the database URL.
                     If not provided, uses config.
    """
    if database_url is None:
        database_url = get_config().database_url

    engine = _engines.get(database_url)
    if engine is not None:
        return engine

    # Streamlit reruns scripts on worker threads
    connect_args = {}
    if database_url.startswith("sqlite:"):
        connect_args = {"check_same_thread": False}

    engine = create_engine(
        database_url,
        connect_args=connect_args,
        echo=False,
        pool_pre_ping=True,
    )
    _engines[database_url] = engine
    return engine


def get_session(database_url: Optional[str] = None) -> Session:
    """Create a new database session."""
    engine = get_engine(database_url)
    SessionLocal = sessionmaker(
        bind=engine,
        autoflush=False,
        expire_on_commit=False,
    )
    return SessionLocal()


def get_backend_name(database_url: Optional[str] = None) -> str:
    return get_engine(database_url).url.get_backend_name()


def dispose_engines() -> None:
    for engine in _engines.values():
        engine.dispose()
    _engines.clear()
