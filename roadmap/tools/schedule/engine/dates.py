"""Local-time date helpers shared by the scheduling engine.

All parsing lands on naive datetimes in the host's local time. A bare
``YYYY-MM-DD`` string is local midnight, never UTC midnight, so that the
calendar day a user typed is the calendar day we lay out.
"""
from datetime import date, datetime, time, timedelta
from typing import List, Optional
import logging

logger = logging.getLogger(__name__)

_MONTHS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]


def _is_date_only(s: str) -> bool:
    return (
        len(s) == 10
        and s[4] == "-"
        and s[7] == "-"
        and s[:4].isdigit()
        and s[5:7].isdigit()
        and s[8:].isdigit()
    )


def _to_local_naive(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt
    return dt.astimezone().replace(tzinfo=None)


def parse_date(value) -> Optional[datetime]:
    """Parse a date-like value into a naive local datetime.

    - datetime -> returned as-is (aware values are converted to local time)
    - date -> local midnight
    - 'YYYY-MM-DD' -> local midnight
    - other strings -> ISO parsing ('Z' suffix means UTC)

    Returns None for empty or unparseable input; never raises.
    """
    if value is None:
        return None
    if isinstance(value, date) and not isinstance(value, datetime):
        return datetime.combine(value, time())
    try:
        if isinstance(value, datetime):
            return _to_local_naive(value)
        s = str(value).strip()
        if not s:
            return None
        if _is_date_only(s):
            return datetime.combine(date.fromisoformat(s), time())
        if s.endswith("Z") or s.endswith("z"):
            s = s[:-1] + "+00:00"
        return _to_local_naive(datetime.fromisoformat(s))
    # local conversion of timestamps at the calendar edges overflows
    except (ValueError, OverflowError, OSError):
        logger.debug("unparseable date value %r", value)
        return None


def to_calendar_date(value) -> Optional[date]:
    parsed = parse_date(value)
    return parsed.date() if parsed else None


def format_date(value) -> str:
    """MM/DD/YYYY, or '' for unparseable input."""
    d = parse_date(value)
    if not d:
        return ""
    return f"{d.month:02d}/{d.day:02d}/{d.year:04d}"


def format_date_short(value) -> str:
    """Compact label for timeline bars, e.g. 'Jan 15'."""
    d = parse_date(value)
    if not d:
        return ""
    return f"{_MONTHS[d.month - 1]} {d.day}"


def format_date_medium(value) -> str:
    """Readable label for cards and headers, e.g. 'Jan 15, 2025'."""
    d = parse_date(value)
    if not d:
        return ""
    return f"{_MONTHS[d.month - 1]} {d.day}, {d.year}"


def to_date_input_value(value) -> str:
    """Normalize any parseable value to 'YYYY-MM-DD'."""
    d = parse_date(value)
    if not d:
        return ""
    return d.date().isoformat()


def is_same_day(a, b) -> bool:
    da = parse_date(a)
    db = parse_date(b)
    if not da or not db:
        return False
    return (da.year, da.month, da.day) == (db.year, db.month, db.day)


def add_days(d: date, n: int) -> date:
    """d shifted by n days, pinned to date.min / date.max at the calendar edges."""
    try:
        return d + timedelta(days=n)
    except OverflowError:
        return date.max if n > 0 else date.min


def days_between(start: date, end: date) -> int:
    """Whole calendar days from start to end (negative if end precedes start)."""
    return (end - start).days


def week_days(base: date) -> List[date]:
    """The Monday-first week containing base."""
    monday = add_days(base, -base.weekday())
    return [add_days(monday, i) for i in range(7)]
