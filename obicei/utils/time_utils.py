"""Time and timezone utilities."""

from datetime import date, datetime
from zoneinfo import ZoneInfo

UTC = ZoneInfo("UTC")


def _zone(tz: str | None) -> ZoneInfo | None:
    return ZoneInfo(tz) if tz else None


def to_utc(dt: datetime, tz: str | None = None) -> datetime:
    """Convert a datetime to UTC.

    Naive datetimes are interpreted in ``tz``, or in the host's local zone
    when ``tz`` is None.
    """
    if dt.tzinfo is None and tz:
        dt = dt.replace(tzinfo=ZoneInfo(tz))
    return dt.astimezone(UTC)


def from_utc(dt: datetime, tz: str | None = None) -> datetime:
    """Convert a UTC datetime to the given timezone (host zone if None)."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    if tz:
        return dt.astimezone(ZoneInfo(tz))
    return dt.astimezone()


def local_now(tz: str | None = None) -> datetime:
    """Current wall-clock time in ``tz`` (host zone if None)."""
    return datetime.now(UTC).astimezone(_zone(tz))


def utc_now() -> datetime:
    return datetime.now(UTC)


def date_key(dt: datetime) -> str:
    """Calendar date string used to key per-day bookkeeping."""
    return dt.date().isoformat()


def local_to_utc(
    hour: int, minute: int, tz: str | None = None, today: date | None = None
) -> tuple[int, int]:
    """Convert a local hour:minute to the UTC hour:minute for today.

    The offset is derived from today's date every call, so the result
    follows daylight-saving changes instead of a stored offset.

    Args:
        hour: Local hour (0-23)
        minute: Local minute (0-59)
        tz: IANA timezone name, None for the host's local zone
        today: Local calendar date to evaluate on, defaults to today

    Returns:
        Tuple of (utc_hour, utc_minute)
    """
    if today is None:
        today = local_now(tz).date()

    local = datetime(today.year, today.month, today.day, hour, minute, tzinfo=_zone(tz))
    utc = to_utc(local)
    return utc.hour, utc.minute


def utc_to_local(
    hour: int, minute: int, tz: str | None = None, today: date | None = None
) -> tuple[int, int]:
    """Convert a UTC hour:minute to the local hour:minute for today.

    Args:
        hour: UTC hour (0-23)
        minute: UTC minute (0-59)
        tz: IANA timezone name, None for the host's local zone
        today: UTC calendar date to evaluate on, defaults to today

    Returns:
        Tuple of (local_hour, local_minute)
    """
    if today is None:
        today = utc_now().date()

    utc = datetime(today.year, today.month, today.day, hour, minute, tzinfo=UTC)
    local = from_utc(utc, tz)
    return local.hour, local.minute


def is_valid_time(hour: object, minute: object) -> bool:
    """Check hour/minute are integers within 0-23 and 0-59."""
    return (
        isinstance(hour, int)
        and not isinstance(hour, bool)
        and isinstance(minute, int)
        and not isinstance(minute, bool)
        and 0 <= hour <= 23
        and 0 <= minute <= 59
    )


def format_hhmm(hour: int, minute: int) -> str:
    """Format an hour/minute pair as HH:MM."""
    return f"{hour:02d}:{minute:02d}"
