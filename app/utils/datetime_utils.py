from datetime import datetime, timedelta, timezone


def utc_now() -> datetime:
    """
    Get current UTC datetime as a timezone-aware datetime.

    Returns:
        datetime: Current UTC datetime with timezone info
    """
    return datetime.now(timezone.utc)


def naive_utc_now() -> datetime:
    """
    Get current UTC datetime as a naive datetime (no timezone info).
    This is what the DateTime columns store.

    Returns:
        datetime: Current UTC datetime without timezone info
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def naive_utc_in(minutes: int) -> datetime:
    """Naive UTC datetime the given number of minutes from now."""
    return naive_utc_now() + timedelta(minutes=minutes)
