"""
Notification log used for deduplication.

The log document is an append-only list of sent notifications, newest first,
capped at LOG_CAP entries. A notification counts as sent for a day when an
entry of the same type has a sentAt falling on that day in the reference
time zone. Day boundaries never depend on the scheduler host's clock zone.
"""

from datetime import datetime, timezone
from typing import Any

from models import LedgerEntry, NotificationType, PersonaMessage
from models.types import DayKey, LogDocument, NotificationID
from shared.utils import REFERENCE_TIMEZONE, parse_instant

LOG_CAP = 200


def day_key_for(instant: datetime | str | None = None) -> DayKey:
    """
    Day key (YYYY-MM-DD) of an instant in REFERENCE_TIMEZONE.

    Naive datetimes and timestamps without offset are treated as UTC.
    Defaults to now.
    """
    parsed = parse_instant(instant) if instant is not None else datetime.now(timezone.utc)
    if parsed is None:
        raise ValueError(f"Invalid instant: {instant!r}")
    return DayKey(parsed.astimezone(REFERENCE_TIMEZONE).date().isoformat())


def _entry_day_key(entry: Any) -> DayKey | None:
    if not isinstance(entry, dict):
        return None
    sent_at = parse_instant(entry.get("sentAt"))
    if sent_at is None:
        return None
    return DayKey(sent_at.astimezone(REFERENCE_TIMEZONE).date().isoformat())


def find_entry_for_day(
    log: LogDocument | None,
    day_key: DayKey,
    notification_type: NotificationType | str | None = None,
) -> dict[str, Any] | None:
    """
    Most recent log entry sent on day_key, optionally of a given type.

    Entries without a parseable sentAt are ignored.
    """
    if not log or not isinstance(log.get("notifications"), list):
        return None

    type_value = NotificationType(notification_type).value if notification_type else None
    for entry in log["notifications"]:
        if _entry_day_key(entry) != day_key:
            continue
        if type_value is None or entry.get("type") == type_value:
            return entry
    return None


def was_already_sent(
    log: LogDocument | None, day_key: DayKey, notification_type: NotificationType | str
) -> bool:
    """True if a notification of this type was logged on day_key."""
    return find_entry_for_day(log, day_key, notification_type) is not None


def build_log_entry(
    notification_type: NotificationType,
    message: PersonaMessage,
    day_key: DayKey,
    sent_at: datetime | None = None,
    url: str | None = None,
) -> LedgerEntry:
    """Create the ledger entry (and push payload source) for today's notification."""
    sent = sent_at or datetime.now(timezone.utc)
    type_value = NotificationType(notification_type).value
    return LedgerEntry(
        id=NotificationID(f"{day_key}-{type_value}"),
        type=NotificationType(notification_type),
        title=message.title,
        body=message.body,
        sentAt=sent.astimezone(timezone.utc).isoformat().replace("+00:00", "Z"),
        url=url,
    )


def append_entry(log: LogDocument, entry: LedgerEntry, cap: int = LOG_CAP) -> LogDocument:
    """
    Return a new log with entry prepended and the list truncated to cap.

    The input log is left untouched.
    """
    existing = log.get("notifications") if isinstance(log, dict) else None
    notifications = list(existing) if isinstance(existing, list) else []

    updated = dict(log) if isinstance(log, dict) else {}
    updated["notifications"] = [entry.to_document(), *notifications][:cap]
    updated["lastUpdated"] = datetime.now(timezone.utc).isoformat()
    return updated
