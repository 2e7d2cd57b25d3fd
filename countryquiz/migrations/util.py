"""Utility functions for Alembic migrations."""
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID
from alembic import op


def get_uuid_type():
    """Get the UUID column type for the current database dialect.

    PostgreSQL gets a native UUID. Everything else gets CHAR(32), the hex form
    SQLAlchemy's ``Uuid`` type writes on backends without a native UUID.
    """
    bind = op.get_bind()
    if bind.dialect.name == 'postgresql':
        return UUID(as_uuid=True)
    return sa.CHAR(length=32)


def get_timestamp_default():
    """Server default for timestamp columns on the current dialect."""
    bind = op.get_bind()
    if bind.dialect.name == 'postgresql':
        return sa.text('NOW()')
    return sa.text('CURRENT_TIMESTAMP')
