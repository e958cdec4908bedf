"""
Unit tests for storage/records.py

Tests that missing or malformed documents degrade to defaults.
"""

import unittest
from datetime import date
from unittest.mock import patch

from shared.errors import DocumentStoreError, SetupError
from shared.settings import Settings
from storage.documents import GitHubDocumentStore, SupabaseDocumentStore
from storage.records import (
    CYCLES_DOCUMENT,
    LEGACY_CYCLES_DOCUMENT,
    NOTIFICATIONS_LOG_DOCUMENT,
    SUBSCRIPTIONS_DOCUMENT,
    build_document_store,
    load_cycles,
    load_notifications_log,
    load_subscribers,
    save_notifications_log,
)
from tests.fixtures.cycle_factory import create_test_cycle, create_test_cycles_document
from tests.fixtures.mock_helpers import InMemoryDocumentStore
from tests.fixtures.subscriber_factory import (
    create_test_log,
    create_test_subscription,
    create_test_subscriptions_document,
)


class TestLoadCycles(unittest.TestCase):
    """Tests for load_cycles()"""

    def test_loads_cycles(self):
        store = InMemoryDocumentStore(
            {CYCLES_DOCUMENT: create_test_cycles_document(["2025-01-01", "2025-01-29"])}
        )

        cycles = load_cycles(store)

        self.assertEqual([c.start_date for c in cycles], [date(2025, 1, 1), date(2025, 1, 29)])

    def test_falls_back_to_legacy_document(self):
        store = InMemoryDocumentStore(
            {LEGACY_CYCLES_DOCUMENT: create_test_cycles_document(["2025-01-01"])}
        )

        self.assertEqual(len(load_cycles(store)), 1)
        self.assertEqual(store.reads, [CYCLES_DOCUMENT, LEGACY_CYCLES_DOCUMENT])

    def test_missing_documents_give_empty_list(self):
        self.assertEqual(load_cycles(InMemoryDocumentStore()), [])

    @patch("builtins.print")
    def test_skips_invalid_records(self, mock_print):
        document = create_test_cycles_document(["2025-01-01"])
        document["cycles"].append(create_test_cycle(start_date="yesterday-ish"))
        document["cycles"].append({"id": "no-date"})
        store = InMemoryDocumentStore({CYCLES_DOCUMENT: document})

        self.assertEqual(len(load_cycles(store)), 1)

    def test_wrong_shape_gives_empty_list(self):
        store = InMemoryDocumentStore({CYCLES_DOCUMENT: {"cycles": "nope"}})

        self.assertEqual(load_cycles(store), [])

    @patch("builtins.print")
    def test_read_failure_gives_empty_list(self, mock_print):
        store = InMemoryDocumentStore()
        store.fail_reads = {CYCLES_DOCUMENT, LEGACY_CYCLES_DOCUMENT}

        self.assertEqual(load_cycles(store), [])


class TestLoadSubscribers(unittest.TestCase):
    """Tests for load_subscribers()"""

    @patch("builtins.print")
    def test_loads_valid_and_skips_invalid(self, mock_print):
        document = create_test_subscriptions_document(
            [
                create_test_subscription(endpoint="https://push/a"),
                create_test_subscription(endpoint="https://push/b", enabled=False),
                {"endpoint": "https://push/c"},
            ]
        )
        store = InMemoryDocumentStore({SUBSCRIPTIONS_DOCUMENT: document})

        subscribers = load_subscribers(store)

        self.assertEqual([s.endpoint for s in subscribers], ["https://push/a", "https://push/b"])
        self.assertEqual([s.settings.enabled for s in subscribers], [True, False])

    def test_settings_default_to_enabled(self):
        subscription = create_test_subscription()
        del subscription["settings"]
        store = InMemoryDocumentStore(
            {SUBSCRIPTIONS_DOCUMENT: create_test_subscriptions_document([subscription])}
        )

        self.assertTrue(load_subscribers(store)[0].settings.enabled)

    def test_missing_document(self):
        self.assertEqual(load_subscribers(InMemoryDocumentStore()), [])


class TestNotificationsLog(unittest.TestCase):
    """Tests for load_notifications_log() and save_notifications_log()"""

    def test_missing_log_is_empty_without_version(self):
        log, version = load_notifications_log(InMemoryDocumentStore())

        self.assertEqual(log["notifications"], [])
        self.assertIsNone(version)

    @patch("builtins.print")
    def test_malformed_log_is_empty_with_version(self, mock_print):
        store = InMemoryDocumentStore({NOTIFICATIONS_LOG_DOCUMENT: ["not", "a", "dict"]})

        log, version = load_notifications_log(store)

        self.assertEqual(log["notifications"], [])
        self.assertEqual(version, "1")

    def test_missing_notifications_list_repaired(self):
        store = InMemoryDocumentStore({NOTIFICATIONS_LOG_DOCUMENT: {"lastUpdated": "x"}})

        log, _version = load_notifications_log(store)

        self.assertEqual(log["notifications"], [])

    def test_read_failure_propagates(self):
        store = InMemoryDocumentStore()
        store.fail_reads = {NOTIFICATIONS_LOG_DOCUMENT}

        with self.assertRaises(DocumentStoreError):
            load_notifications_log(store)

    def test_save_uses_version(self):
        store = InMemoryDocumentStore({NOTIFICATIONS_LOG_DOCUMENT: create_test_log()})
        log, version = load_notifications_log(store)

        new_version = save_notifications_log(store, log, version)

        self.assertEqual(new_version, "2")
        self.assertEqual(store.writes, [NOTIFICATIONS_LOG_DOCUMENT])


class TestBuildDocumentStore(unittest.TestCase):
    """Tests for build_document_store()"""

    def test_github_store(self):
        store = build_document_store(Settings(record_store="github", github_token="t"))

        self.assertIsInstance(store, GitHubDocumentStore)
        self.assertEqual(store.repo, "nastia-data")

    @patch("storage.records.get_supabase_client")
    def test_supabase_store(self, mock_get_client):
        settings = Settings(record_store="supabase", supabase_url="https://x.supabase.co", supabase_key="k")

        store = build_document_store(settings)

        self.assertIsInstance(store, SupabaseDocumentStore)
        mock_get_client.assert_called_once_with("https://x.supabase.co", "k")

    def test_github_store_without_token(self):
        with self.assertRaises(SetupError):
            build_document_store(Settings(record_store="github"))


if __name__ == "__main__":
    unittest.main()
