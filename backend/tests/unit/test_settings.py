"""
Unit tests for shared/settings.py
"""

import os
import unittest
from unittest.mock import patch

from shared.errors import SetupError
from shared.settings import load_settings

GITHUB_ENV = {
    "GITHUB_TOKEN": "ghp_test",
    "VAPID_PUBLIC_KEY": "BPublic",
    "VAPID_PRIVATE_KEY": "private",
}


class TestLoadSettings(unittest.TestCase):
    """Tests for load_settings()"""

    @patch.dict(os.environ, GITHUB_ENV, clear=True)
    def test_defaults(self):
        settings = load_settings()

        self.assertEqual(settings.record_store, "github")
        self.assertEqual(settings.github_data_repo, "nastia-data")
        self.assertEqual(settings.vapid_subject, "mailto:noreply@nastia-calendar.com")
        self.assertTrue(settings.enable_llm)
        self.assertEqual(settings.recipient_name, "Nastia")

    @patch.dict(os.environ, {"GITHUB_TOKEN": "ghp_test"}, clear=True)
    def test_missing_vapid_keys(self):
        with self.assertRaises(SetupError) as ctx:
            load_settings()
        self.assertIn("VAPID_PUBLIC_KEY", str(ctx.exception))
        self.assertIn("VAPID_PRIVATE_KEY", str(ctx.exception))

    @patch.dict(os.environ, {"GITHUB_TOKEN": "ghp_test"}, clear=True)
    def test_dry_run_needs_no_vapid_keys(self):
        settings = load_settings(require_push=False)
        self.assertIsNone(settings.vapid_private_key)

    @patch.dict(os.environ, {"VAPID_PUBLIC_KEY": "p", "VAPID_PRIVATE_KEY": "k"}, clear=True)
    def test_missing_github_token(self):
        with self.assertRaisesRegex(SetupError, "GITHUB_TOKEN"):
            load_settings()

    @patch.dict(os.environ, {"RECORD_STORE": "dropbox"}, clear=True)
    def test_unknown_store(self):
        with self.assertRaisesRegex(SetupError, "RECORD_STORE"):
            load_settings(require_push=False)

    @patch.dict(
        os.environ,
        {"RECORD_STORE": "Supabase", "SUPABASE_URL": "https://x.supabase.co"},
        clear=True,
    )
    def test_supabase_requires_service_key(self):
        with self.assertRaisesRegex(SetupError, "SUPABASE_SERVICE_KEY"):
            load_settings(require_push=False)

    @patch.dict(
        os.environ,
        {
            **GITHUB_ENV,
            "ENABLE_LLM": "false",
            "OLLAMA_MODEL": "qwen2.5:7b",
            "RECIPIENT_NAME": "Vera",
            "APP_BASE_URL": "https://example.com/app/",
            "GITHUB_DATA_REPO": "someone/data",
        },
        clear=True,
    )
    def test_overrides(self):
        settings = load_settings()

        self.assertFalse(settings.enable_llm)
        self.assertEqual(settings.ollama_model, "qwen2.5:7b")
        self.assertEqual(settings.recipient_name, "Vera")
        self.assertEqual(settings.github_data_repo, "someone/data")
        self.assertEqual(settings.notifications_url, "https://example.com/app/?open=notifications")


if __name__ == "__main__":
    unittest.main()
