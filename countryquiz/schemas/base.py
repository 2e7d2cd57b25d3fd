"""Base schemas with common configuration."""
from datetime import datetime, UTC
from typing import Annotated

from pydantic import BaseModel, ConfigDict, PlainSerializer


def serialize_datetime_utc(dt: datetime) -> str:
    """ISO 8601 with a ``Z`` suffix. Naive values (SQLite) are taken as UTC."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC).isoformat().replace('+00:00', 'Z')


UTCDateTime = Annotated[datetime, PlainSerializer(serialize_datetime_utc, return_type=str, when_used="json")]


class BaseSchema(BaseModel):
    """Response schemas read straight from ORM objects."""

    model_config = ConfigDict(from_attributes=True)
