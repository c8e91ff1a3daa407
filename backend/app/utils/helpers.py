from datetime import datetime, timezone
from typing import Optional


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalize datetimes to naive UTC, the form stored in the database."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def percent(part: int, total: int) -> int:
    if total <= 0:
        return 0
    return round(part / total * 100)


def clean_tags(tags) -> list:
    if not tags:
        return []
    return [str(tag).strip() for tag in tags if str(tag).strip()]


def strip_text(value):
    return value.strip() if isinstance(value, str) else value
