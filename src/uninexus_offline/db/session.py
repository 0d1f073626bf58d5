"""Database session configuration for the SQL-backed key-value store."""

from __future__ import annotations

from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker


class Base(DeclarativeBase):
    """Declarative base shared by all ORM models."""


# Ensure model modules are imported so that metadata is populated when create_all runs.
import uninexus_offline.models  # noqa: E402,F401


def build_engine(url: str, *, echo: bool = False) -> Engine:
    """Create an engine, allowing SQLite connections to cross worker threads."""
    connect_args: dict[str, Any] = {}
    if url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    return create_engine(url, pool_pre_ping=True, echo=echo, connect_args=connect_args)


def build_session_factory(bind: Engine) -> sessionmaker[Session]:
    """Return a session factory bound to ``bind``."""
    return sessionmaker(autocommit=False, autoflush=False, bind=bind)


def create_tables(bind: Engine) -> None:
    """Create all database tables."""
    Base.metadata.create_all(bind=bind)


def drop_tables(bind: Engine) -> None:
    """Drop all database tables."""
    Base.metadata.drop_all(bind=bind)
