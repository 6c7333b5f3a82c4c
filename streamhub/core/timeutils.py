from datetime import date, datetime, timedelta, timezone

def utcnow() -> datetime:
    """Naive UTC timestamp. All DateTime columns hold UTC without a zone."""
    return datetime.now(timezone.utc).replace(tzinfo=None)

def utctoday() -> date:
    return utcnow().date()

def later_than(previous: datetime) -> datetime:
    """Current time, or one microsecond past `previous` if the clock has not moved beyond it."""
    now = utcnow()
    if previous is None or now > previous:
        return now
    return previous + timedelta(microseconds=1)
