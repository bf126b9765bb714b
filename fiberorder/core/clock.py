from datetime import datetime, timezone


def utcnow() -> datetime:
    """Naive UTC now; all timestamps are stored naive in UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value
