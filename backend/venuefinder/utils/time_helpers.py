import datetime
from typing import Any


def as_date(value: Any) -> datetime.date:
    """Coerce a driver value (date, datetime or ISO string from SQLite) to a date."""
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    return datetime.date.fromisoformat(str(value)[:10])
