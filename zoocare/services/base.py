import secrets
from collections.abc import Callable
from datetime import UTC, datetime

from dateutil import parser as date_parser

from zoocare.database import KeyValueDatabase
from zoocare.errors import ValidationError
from zoocare.models import Record

NowFn = Callable[[], datetime]
Database = KeyValueDatabase[str, Record]


def new_id() -> str:
    return secrets.token_hex(12)


def as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def parse_bound(value: str | None, field: str) -> datetime | None:
    """Parse an optional ISO 8601 range bound from a query string."""
    if value is None:
        return None
    try:
        return as_utc(date_parser.isoparse(value))
    except (ValueError, OverflowError):
        raise ValidationError(f"Invalid date for {field}: {value!r}", field=field)


class BaseService:
    def __init__(self, db: Database, now_fn: NowFn) -> None:
        self.db = db
        self.now_fn = now_fn

    def now(self) -> datetime:
        return as_utc(self.now_fn())
