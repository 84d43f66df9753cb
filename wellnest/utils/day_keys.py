"""UTC day keys (``YYYY-MM-DD``) used for every streak and aggregate bucket."""

from datetime import date, datetime, time, timedelta, timezone

from wellnest.errors import ValidationError

DAY_KEY_FORMAT = "%Y-%m-%d"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(dt: datetime) -> datetime:
    """Attach UTC to naive datetimes (SQLite drops tzinfo) and convert aware ones."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def day_key(moment: datetime | None = None) -> str:
    return as_utc(moment or utc_now()).strftime(DAY_KEY_FORMAT)


def parse_day_key(value: str) -> date:
    try:
        parsed = datetime.strptime(value, DAY_KEY_FORMAT).date()
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid day key {value!r}, expected YYYY-MM-DD")
    # strptime accepts "2024-1-5"; keys must be zero-padded to sort as strings
    if parsed.strftime(DAY_KEY_FORMAT) != value:
        raise ValidationError(f"Invalid day key {value!r}, expected YYYY-MM-DD")
    return parsed


def shift_day_key(value: str, days: int) -> str:
    return (parse_day_key(value) + timedelta(days=days)).strftime(DAY_KEY_FORMAT)


def day_start(value: str) -> datetime:
    """Midnight UTC at the start of the given day key."""
    return datetime.combine(parse_day_key(value), time.min, tzinfo=timezone.utc)
