from datetime import datetime, timedelta, timezone
from typing import Optional


def parse_date(value) -> Optional[datetime]:
    """Parse an ISO-ish date string into an aware UTC datetime."""
    if not value or not isinstance(value, str):
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(text)
    except ValueError:
        try:
            dt = datetime.fromisoformat(text.split("T")[0])
        except ValueError:
            return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def age_in_days(value, now: datetime) -> Optional[float]:
    """Days elapsed between a date string and ``now``; None when unparsable."""
    dt = parse_date(value)
    if dt is None:
        return None
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return (now - dt) / timedelta(days=1)
