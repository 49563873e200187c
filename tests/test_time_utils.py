"""Tests for time utilities."""

from datetime import date, datetime
from zoneinfo import ZoneInfo

from obicei.utils.time_utils import (
    date_key,
    format_hhmm,
    from_utc,
    is_valid_time,
    local_to_utc,
    to_utc,
    utc_to_local,
)

WINTER = date(2026, 1, 15)
SUMMER = date(2026, 7, 15)


def test_to_utc():
    """Test timezone conversion to UTC."""
    # Create a datetime in EDT (March 15 is DST)
    dt = datetime(2026, 3, 15, 14, 30, tzinfo=ZoneInfo("America/New_York"))
    utc_dt = to_utc(dt)

    assert utc_dt.tzinfo == ZoneInfo("UTC")
    # EDT is UTC-4, so 14:30 EDT = 18:30 UTC
    assert utc_dt.hour == 18


def test_to_utc_naive_uses_given_zone():
    dt = datetime(2026, 1, 15, 9, 0)
    assert to_utc(dt, "America/New_York").hour == 14


def test_from_utc():
    """Test timezone conversion from UTC."""
    dt = datetime(2026, 3, 15, 19, 30, tzinfo=ZoneInfo("UTC"))
    edt_dt = from_utc(dt, "America/New_York")

    assert edt_dt.tzinfo == ZoneInfo("America/New_York")
    assert edt_dt.hour == 15  # 19:30 UTC = 15:30 EDT


def test_local_to_utc_fixed_offset():
    """9:00 at UTC-5 is stored as 14:00 UTC."""
    assert local_to_utc(9, 0, "Etc/GMT+5", WINTER) == (14, 0)
    assert local_to_utc(9, 0, "America/New_York", WINTER) == (14, 0)


def test_local_to_utc_follows_daylight_saving():
    """The offset comes from the date, so summer shifts by an hour."""
    assert local_to_utc(9, 0, "America/New_York", SUMMER) == (13, 0)
    assert local_to_utc(9, 0, "Europe/Bucharest", WINTER) == (7, 0)
    assert local_to_utc(9, 0, "Europe/Bucharest", SUMMER) == (6, 0)


def test_local_to_utc_wraps_past_midnight():
    assert local_to_utc(22, 30, "Etc/GMT+5", WINTER) == (3, 30)
    assert local_to_utc(1, 15, "Asia/Kolkata", WINTER) == (19, 45)


def test_utc_to_local():
    assert utc_to_local(14, 0, "Etc/GMT+5", WINTER) == (9, 0)
    assert utc_to_local(13, 0, "America/New_York", SUMMER) == (9, 0)


def test_round_trip_every_minute():
    """utc_to_local(local_to_utc(h, m)) is the identity within one day."""
    for tz in ("America/New_York", "Asia/Kolkata", "Australia/Adelaide"):
        for hour in range(24):
            for minute in range(0, 60, 7):
                utc_hour, utc_minute = local_to_utc(hour, minute, tz, WINTER)
                assert utc_to_local(utc_hour, utc_minute, tz, WINTER) == (hour, minute)


def test_default_zone_round_trip():
    """With no zone given the host's local zone is used both ways."""
    utc_hour, utc_minute = local_to_utc(12, 34)
    assert utc_to_local(utc_hour, utc_minute) == (12, 34)


def test_is_valid_time():
    assert is_valid_time(0, 0)
    assert is_valid_time(23, 59)
    assert not is_valid_time(24, 0)
    assert not is_valid_time(12, 60)
    assert not is_valid_time(-1, 0)
    assert not is_valid_time(None, 0)
    assert not is_valid_time(True, 0)
    assert not is_valid_time(9.5, 0)


def test_date_key_and_format():
    dt = datetime(2026, 3, 15, 23, 59, tzinfo=ZoneInfo("UTC"))
    assert date_key(dt) == "2026-03-15"
    assert format_hhmm(9, 5) == "09:05"
