from datetime import datetime
from typing import Optional
import pytz
from labkeys.config import settings

def now_utc() -> datetime:
    """Get current datetime in UTC (timezone aware)."""
    return datetime.now(pytz.utc)

def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes (SQLite drops tzinfo) as UTC."""
    if value.tzinfo is None:
        return pytz.utc.localize(value)
    return value.astimezone(pytz.utc)

def to_local(value: Optional[datetime]) -> Optional[datetime]:
    """Convert to the configured display timezone."""
    if value is None:
        return None
    return as_utc(value).astimezone(pytz.timezone(settings.timezone))
