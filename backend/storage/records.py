"""
Loading typed records out of the versioned documents.

Missing or malformed documents are never fatal: each loader substitutes a
well-defined default and the run continues.
"""

from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError

from models import CycleRecord, Subscriber
from models.types import DocumentVersion, LogDocument
from shared.db import get_supabase_client
from shared.errors import DocumentStoreError, SetupError
from shared.settings import Settings
from storage.documents import (
    DocumentStore,
    GitHubDocumentStore,
    SupabaseDocumentStore,
)

CYCLES_DOCUMENT = "nastia-cycles.json"
LEGACY_CYCLES_DOCUMENT = "nastia-data.json"
SUBSCRIPTIONS_DOCUMENT = "subscriptions.json"
NOTIFICATIONS_LOG_DOCUMENT = "nastia-notifications.json"


def build_document_store(settings: Settings) -> DocumentStore:
    """Create the record store selected by RECORD_STORE."""
    if settings.record_store == "supabase":
        client = get_supabase_client(settings.supabase_url, settings.supabase_key)
        return SupabaseDocumentStore(client)

    if not settings.github_token:
        raise SetupError("GITHUB_TOKEN is required for the github record store")
    return GitHubDocumentStore(settings.github_token, settings.github_data_repo)


def empty_notifications_log() -> LogDocument:
    return {
        "notifications": [],
        "lastUpdated": datetime.now(timezone.utc).isoformat(),
    }


def _read_or_none(store: DocumentStore, name: str) -> Any:
    try:
        value, _version = store.read(name)
        return value
    except DocumentStoreError as e:
        print(f"  ⚠ Could not read {name}, using default: {e}")
        return None


def load_cycles(store: DocumentStore) -> list[CycleRecord]:
    """
    Load cycle history.

    Reads the cycles document, falling back to the legacy combined data
    document when the former is absent. Entries without a usable start date
    are skipped.

    Returns:
        List of CycleRecord in stored order (empty list if nothing usable)
    """
    data = _read_or_none(store, CYCLES_DOCUMENT)
    if not data:
        data = _read_or_none(store, LEGACY_CYCLES_DOCUMENT)

    raw_cycles = data.get("cycles") if isinstance(data, dict) else None
    if not isinstance(raw_cycles, list):
        return []

    cycles = []
    for raw in raw_cycles:
        try:
            cycles.append(CycleRecord.model_validate(raw))
        except ValidationError as e:
            print(f"  ⚠ Skipping invalid cycle record {raw!r}: {e.error_count()} error(s)")
    return cycles


def load_subscribers(store: DocumentStore) -> list[Subscriber]:
    """
    Load push subscribers, skipping malformed entries.

    Returns:
        List of Subscriber, enabled and disabled alike
    """
    data = _read_or_none(store, SUBSCRIPTIONS_DOCUMENT)
    raw_subscriptions = data.get("subscriptions") if isinstance(data, dict) else None
    if not isinstance(raw_subscriptions, list):
        return []

    subscribers = []
    for raw in raw_subscriptions:
        try:
            subscribers.append(Subscriber.model_validate(raw))
        except ValidationError as e:
            endpoint = raw.get("endpoint", "?") if isinstance(raw, dict) else "?"
            print(f"  ⚠ Skipping invalid subscription {str(endpoint)[-20:]}: {e.error_count()} error(s)")
    return subscribers


def load_notifications_log(
    store: DocumentStore,
) -> tuple[LogDocument, DocumentVersion | None]:
    """
    Load the notification log with its version token.

    A missing, empty or malformed log becomes an empty log (the version is
    kept so the next write replaces the broken file).

    Raises:
        DocumentStoreError: If the store cannot be read. Callers must not
            send without knowing what was already sent.
    """
    value, version = store.read(NOTIFICATIONS_LOG_DOCUMENT)

    if not isinstance(value, dict):
        if value is not None:
            print("  ⚠ Notifications log has unexpected shape, starting a fresh log")
        return empty_notifications_log(), version

    log = dict(value)
    if not isinstance(log.get("notifications"), list):
        log["notifications"] = []
    return log, version


def save_notifications_log(
    store: DocumentStore, log: LogDocument, expected_version: DocumentVersion | None
) -> DocumentVersion:
    return store.write(NOTIFICATIONS_LOG_DOCUMENT, log, expected_version)
