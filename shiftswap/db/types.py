from sqlalchemy import DateTime
from sqlalchemy.types import TypeDecorator

from shiftswap.core.timeutils import as_utc


class UTCDateTime(TypeDecorator):
    """DateTime that always comes back timezone-aware in UTC, sqlite included."""

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return as_utc(value)

    def process_result_value(self, value, dialect):
        return as_utc(value)
