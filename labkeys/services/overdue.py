"""Overdue policy shared by every view that lists transactions."""
from datetime import datetime, timedelta
from typing import Optional

from labkeys.config import settings
from labkeys.utils.timezone import as_utc

OVERDUE_THRESHOLD_HOURS = settings.overdue_threshold_hours


def is_overdue(
    borrow_date: datetime,
    now: datetime,
    return_date: Optional[datetime] = None,
    threshold_hours: int = OVERDUE_THRESHOLD_HOURS,
) -> bool:
    """A transaction is overdue once it has been open for ``threshold_hours``.

    Returned transactions are never overdue, however long they were out.
    """
    if return_date is not None:
        return False
    return as_utc(now) - as_utc(borrow_date) >= timedelta(hours=threshold_hours)


def overdue_cutoff(now: datetime, threshold_hours: int = OVERDUE_THRESHOLD_HOURS) -> datetime:
    """Borrow dates at or before this instant are overdue at ``now``."""
    return as_utc(now) - timedelta(hours=threshold_hours)
