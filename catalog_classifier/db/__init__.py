"""Database module."""
from catalog_classifier.db.base import (
    Base,
    UUIDMixin,
    TimestampMixin,
    get_engine,
    get_session_maker,
)

__all__ = [
    "Base",
    "UUIDMixin",
    "TimestampMixin",
    "get_engine",
    "get_session_maker",
]
