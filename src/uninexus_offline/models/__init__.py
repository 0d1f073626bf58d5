# src/uninexus_offline/models/__init__.py
"""SQLAlchemy models for the offline sync store."""

from .kv_entry import KeyValueEntry

__all__ = ["KeyValueEntry"]
