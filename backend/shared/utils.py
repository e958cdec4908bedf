from datetime import date, datetime, time, timezone
from zoneinfo import ZoneInfo

from dateutil import parser as date_parser

# Every "which day is it" decision is made in this zone, wherever the
# scheduler happens to run.
REFERENCE_TIMEZONE = ZoneInfo("Europe/Berlin")


def parse_instant(value: str | datetime | None) -> datetime | None:
    """
    Parse an ISO-ish timestamp into a timezone-aware datetime.

    Naive values are treated as UTC, which is how the client and the
    notification log serialize instants.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return as_utc_aware(value)
    try:
        return as_utc_aware(date_parser.isoparse(value))
    except (ValueError, OverflowError, TypeError):
        return None


def as_utc_aware(value: datetime) -> datetime:
    """Attach UTC to a naive datetime, leave aware ones alone."""
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


def to_reference_date(value: str | date | datetime) -> date:
    """
    Convert a stored date or timestamp into a calendar date in REFERENCE_TIMEZONE.

    Plain dates ("2025-01-29") are taken as-is. Timestamps
    ("2025-01-28T23:00:00.000Z") are converted to the reference zone first,
    so a midnight recorded by a browser in Berlin stays on the right day.

    Raises:
        ValueError: If the value cannot be parsed
    """
    if isinstance(value, datetime):
        return as_utc_aware(value).astimezone(REFERENCE_TIMEZONE).date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Unsupported date value: {value!r}")

    text = value.strip()
    if len(text) == 10:
        return date.fromisoformat(text)

    instant = parse_instant(text)
    if instant is None:
        raise ValueError(f"Invalid date value: {value!r}")
    return instant.astimezone(REFERENCE_TIMEZONE).date()


def reference_now(now: datetime | None = None) -> datetime:
    """Current instant expressed in REFERENCE_TIMEZONE."""
    instant = as_utc_aware(now) if now is not None else datetime.now(timezone.utc)
    return instant.astimezone(REFERENCE_TIMEZONE)


def reference_noon(day: date) -> datetime:
    """Midday of a calendar day in REFERENCE_TIMEZONE (used for --date overrides)."""
    return datetime.combine(day, time(12, 0), tzinfo=REFERENCE_TIMEZONE)


def format_human_date(day: date) -> str:
    """Format a date for prompts, e.g. 'February 26'."""
    return f"{day.strftime('%B')} {day.day}"


def days_word(value: int) -> str:
    """'day' or 'days' for an absolute day count."""
    return "day" if abs(value) == 1 else "days"


def print_summary(stats: dict[str, int], notification_type: str | None) -> None:
    """Print run summary."""
    print(f"\n{'=' * 60}")
    print(f"[{datetime.now()}] Cycle Notification Run Complete")
    print(f"{'=' * 60}")
    print(f"Type:     {notification_type or 'none'}")
    print(f"✓ Sent:    {stats.get('sent', 0)}")
    print(f"✗ Failed:  {stats.get('failed', 0)}")
    print(f"⊘ Skipped: {stats.get('skipped', 0)}")
    print(f"{'=' * 60}\n")
