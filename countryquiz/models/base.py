"""Base utilities for SQLAlchemy models."""
from enum import Enum
from sqlalchemy import Column, Uuid


class RoundStatus(str, Enum):
    """Round status enumeration for type safety."""
    PENDING = "pending"
    RESOLVED = "resolved"
    ABANDONED = "abandoned"


def get_uuid_column(*args, **kwargs):
    """Get a UUID column that works on both PostgreSQL and SQLite.

    PostgreSQL stores a native UUID; SQLite stores a 32-character hex string.
    Values always come back as ``uuid.UUID``.

    Args:
        *args: Positional arguments to pass to Column (e.g., ForeignKey)
        **kwargs: Keyword arguments to pass to Column (e.g., primary_key=True)

    Example:
        round_id = get_uuid_column(primary_key=True, default=uuid.uuid4)
    """
    return Column(Uuid(as_uuid=True), *args, **kwargs)
