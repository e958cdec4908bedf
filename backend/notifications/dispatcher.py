"""
Daily cycle notification run.

Loads cycle history and subscribers, decides today's notification, generates
its text once, pushes it to every enabled subscriber and records it in the
notification log exactly once per (day, type), and only if at least one
delivery succeeded.
"""

import time
from datetime import datetime
from typing import Any, Callable

from models import (
    CycleStats,
    DayClassification,
    LedgerEntry,
    NotificationType,
    PersonaMessage,
    PushPayload,
    Subscriber,
)
from models.types import DayKey, DocumentVersion, LogDocument, MessageCache
from notifications.error_logger import log_notification_error
from notifications.ledger import (
    append_entry,
    build_log_entry,
    day_key_for,
    find_entry_for_day,
)
from processing.classifier import classify_day
from processing.cycle_stats import compute_cycle_stats
from processing.persona_generator import build_message_context, generate_message
from shared.errors import DocumentConflictError, DocumentStoreError
from shared.utils import reference_now
from storage.documents import DocumentStore
from storage.records import (
    load_cycles,
    load_notifications_log,
    load_subscribers,
    save_notifications_log,
)

# Sender signature: (subscriber, payload) -> {'success': bool, 'status_code': ..., 'error': ...}
PushSender = Callable[[Subscriber, PushPayload], dict[str, Any]]

SEND_INTERVAL_SECONDS = 0.1


def _endpoint_tail(subscriber: Subscriber) -> str:
    return subscriber.endpoint[-20:]


def dispatch_to_subscribers(
    subscribers: list[Subscriber],
    notification_type: NotificationType,
    context: dict[str, Any],
    message_cache: MessageCache,
    send: PushSender,
    day_key: DayKey,
    model: str | None = None,
    recipient_name: str = "Nastia",
    url: str | None = None,
    now: datetime | None = None,
) -> tuple[dict[str, int], LedgerEntry | None]:
    """
    Send today's notification to every enabled subscriber.

    Disabled subscribers are skipped. Each delivery is independent: a failure
    is logged and the loop moves on.

    Args:
        subscribers: All subscribers, enabled or not
        notification_type: Today's notification type
        context: Prompt context for message generation
        message_cache: Per-run memo table shared with generate_message()
        send: Push sender
        day_key: Today's day key (used for the entry id)
        model: Ollama model name, None for canned text
        recipient_name: Name the persona addresses
        url: Link opened when the notification is clicked
        now: Send timestamp (default: current time)

    Returns:
        (stats, entry). stats has 'sent', 'failed', 'skipped'. entry is the
        ledger entry describing what was sent, None if nobody was eligible.
    """
    stats = {"sent": 0, "failed": 0, "skipped": 0}
    entry: LedgerEntry | None = None

    for subscriber in subscribers:
        if not subscriber.settings.enabled:
            stats["skipped"] += 1
            continue

        message: PersonaMessage = generate_message(
            notification_type, context, message_cache, model, recipient_name
        )
        if entry is None:
            entry = build_log_entry(notification_type, message, day_key, now, url)

        result = send(subscriber, PushPayload.from_entry(entry))

        if result.get("success"):
            stats["sent"] += 1
            print(f"  ✓ Notification ({entry.type.value}) sent to {_endpoint_tail(subscriber)}")
        else:
            stats["failed"] += 1
            status = result.get("status_code") or "unknown-status"
            error_msg = result.get("error", "Unknown error")
            print(f"  ✗ Failed to send to {_endpoint_tail(subscriber)}: {error_msg} ({status})")
            error_file = log_notification_error(
                error_type="delivery",
                error_message=str(error_msg),
                context={
                    "notification_id": entry.id,
                    "endpoint": subscriber.endpoint,
                    "status_code": status,
                },
            )
            print(f"    Error details logged to: {error_file}")

        time.sleep(SEND_INTERVAL_SECONDS)

    return stats, entry


def persist_log_entry(
    store: DocumentStore,
    log: LogDocument,
    version: DocumentVersion | None,
    entry: LedgerEntry,
) -> bool:
    """
    Append entry to the log and write it back once.

    On a version conflict the log is re-read and the entry re-applied (unless
    another writer already logged the same notification), then written one
    more time. Failures are logged, never raised: deliveries already happened.

    Returns:
        True if the log now contains the entry
    """
    try:
        save_notifications_log(store, append_entry(log, entry), version)
        return True
    except DocumentConflictError as e:
        print(f"  ⚠ Notifications log changed during the run, retrying: {e}")
    except DocumentStoreError as e:
        _log_persistence_failure(entry, e)
        return False

    try:
        fresh_log, fresh_version = load_notifications_log(store)
        if any(
            isinstance(existing, dict) and existing.get("id") == entry.id
            for existing in fresh_log["notifications"]
        ):
            return True
        save_notifications_log(store, append_entry(fresh_log, entry), fresh_version)
        return True
    except DocumentStoreError as e:
        _log_persistence_failure(entry, e)
        return False


def _log_persistence_failure(entry: LedgerEntry, error: Exception) -> None:
    print(f"  ✗ Failed to persist notifications log: {error}")
    error_file = log_notification_error(
        error_type="persistence",
        error_message=str(error),
        context={"notification_id": entry.id, "type": entry.type.value},
    )
    print(f"    Error details logged to: {error_file}")


def _already_sent(log: LogDocument, day_key: DayKey, notification_type: NotificationType) -> bool:
    existing = find_entry_for_day(log, day_key, notification_type)
    if existing:
        print(
            f"Notification {notification_type.value} already sent today "
            f"at {existing.get('sentAt')}, skipping"
        )
        return True
    return False


def run_daily_notifications(
    store: DocumentStore,
    send: PushSender | None,
    model: str | None = None,
    recipient_name: str = "Nastia",
    url: str | None = None,
    now: datetime | None = None,
    dry_run: bool = False,
    message_cache: MessageCache | None = None,
) -> dict[str, Any]:
    """
    Run the daily decision, generation and delivery pipeline once.

    Args:
        store: Record store with cycles, subscriptions and the notification log
        send: Push sender (may be None for dry runs)
        model: Ollama model name, None for canned text only
        recipient_name: Name the persona addresses
        url: Link opened when the notification is clicked
        now: Current instant (default: system clock); only its date in the
            reference time zone matters for the decision
        dry_run: Decide and generate, but don't send or write anything
        message_cache: Memo table for generated messages (default: fresh per run)

    Returns:
        Dictionary with 'type' (str | None), 'sent', 'failed', 'skipped'
    """
    result: dict[str, Any] = {"type": None, "sent": 0, "failed": 0, "skipped": 0}
    cache: MessageCache = message_cache if message_cache is not None else {}
    current = reference_now(now)
    today = current.date()
    day_key = day_key_for(current)

    cycles = load_cycles(store)
    subscribers = load_subscribers(store)
    print(f"Cycles loaded: {len(cycles)}")
    print(f"Subscriptions loaded: {len(subscribers)}")

    stats: CycleStats | None = compute_cycle_stats(cycles)
    if stats is None:
        print("No cycles available, skipping notifications")
        return result

    print(f"Today ({current.tzinfo}): {today.isoformat()}")
    print(
        f"Next period: {stats.next_period_date} Ovulation: {stats.ovulation_date} "
        f"Fertile start: {stats.fertile_start} (avg {stats.average_length_days} days)"
    )

    classification: DayClassification | None = classify_day(today, stats)
    if classification is None:
        print("No notification planned for today")
        return result

    notification_type = classification.type
    result["type"] = notification_type.value
    print(f"Notification type: {notification_type.value} {classification.metadata}")

    try:
        log, _version = load_notifications_log(store)
    except DocumentStoreError as e:
        print(f"✗ Could not read notifications log, not sending to avoid duplicates: {e}")
        log_notification_error(
            error_type="ledger",
            error_message=str(e),
            context={"day_key": day_key, "type": notification_type.value},
        )
        return result

    if _already_sent(log, day_key, notification_type):
        return result

    context = build_message_context(today, stats, classification)
    message = generate_message(notification_type, context, cache, model, recipient_name)

    if dry_run:
        print("[DRY RUN] Would send:")
        print(f"  {message.title}: {message.body}")
        enabled = [s for s in subscribers if s.settings.enabled]
        result["skipped"] = len(subscribers) - len(enabled)
        print(f"[DRY RUN] Enabled subscribers: {len(enabled)}")
        return result

    # Read again right before sending: another run may have finished since the first check.
    try:
        log, version = load_notifications_log(store)
    except DocumentStoreError as e:
        print(f"✗ Could not re-read notifications log, not sending: {e}")
        return result

    if _already_sent(log, day_key, notification_type):
        return result

    if send is None:
        raise ValueError("A push sender is required unless dry_run is set")

    delivery_stats, entry = dispatch_to_subscribers(
        subscribers,
        notification_type,
        context,
        cache,
        send,
        day_key,
        model=model,
        recipient_name=recipient_name,
        url=url,
        now=current,
    )
    result.update(delivery_stats)

    if delivery_stats["sent"] > 0 and entry is not None:
        if persist_log_entry(store, log, version, entry):
            print(f"✓ Logged {entry.id}")

    print(f"Total notifications sent: {delivery_stats['sent']}")
    return result
