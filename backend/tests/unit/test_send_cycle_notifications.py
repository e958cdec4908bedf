"""
Unit tests for notifications/send_cycle_notifications.py (CLI entry point)
"""

import os
import unittest
from datetime import date
from unittest.mock import patch

from notifications.send_cycle_notifications import main
from shared.utils import reference_noon

ENV = {
    "GITHUB_TOKEN": "ghp_test",
    "VAPID_PUBLIC_KEY": "BPublic",
    "VAPID_PRIVATE_KEY": "private",
}
RESULT = {"type": "period_start", "sent": 2, "failed": 0, "skipped": 1}


@patch("builtins.print")
@patch("notifications.send_cycle_notifications.build_document_store")
@patch("notifications.send_cycle_notifications.run_daily_notifications", return_value=RESULT)
class TestMain(unittest.TestCase):
    """Tests for main()"""

    @patch.dict(os.environ, ENV, clear=True)
    def test_regular_run(self, mock_run, mock_build_store, mock_print):
        self.assertEqual(main([]), 0)

        args, kwargs = mock_run.call_args
        self.assertIs(args[0], mock_build_store.return_value)
        self.assertEqual(args[1].keywords["vapid_private_key"], "private")
        self.assertEqual(kwargs["model"], "llama3.1:8b")
        self.assertFalse(kwargs["dry_run"])
        self.assertIsNone(kwargs["now"])

    @patch.dict(os.environ, {"GITHUB_TOKEN": "ghp_test"}, clear=True)
    def test_dry_run_with_date(self, mock_run, mock_build_store, mock_print):
        self.assertEqual(main(["--dry-run", "--date", "2025-02-26"]), 0)

        args, kwargs = mock_run.call_args
        self.assertIsNone(args[1])
        self.assertTrue(kwargs["dry_run"])
        self.assertEqual(kwargs["now"], reference_noon(date(2025, 2, 26)))

    @patch.dict(os.environ, {**ENV, "ENABLE_LLM": "false"}, clear=True)
    def test_llm_disabled(self, mock_run, mock_build_store, mock_print):
        main([])
        self.assertIsNone(mock_run.call_args[1]["model"])

    @patch.dict(os.environ, {"GITHUB_TOKEN": "ghp_test"}, clear=True)
    def test_missing_credentials_exit_code(self, mock_run, mock_build_store, mock_print):
        self.assertEqual(main([]), 1)
        mock_run.assert_not_called()

    @patch.dict(os.environ, ENV, clear=True)
    def test_date_requires_dry_run(self, mock_run, mock_build_store, mock_print):
        with self.assertRaises(SystemExit) as ctx:
            main(["--date", "2025-02-26"])
        self.assertEqual(ctx.exception.code, 2)
        mock_run.assert_not_called()

    @patch.dict(os.environ, ENV, clear=True)
    def test_invalid_date_argument(self, mock_run, mock_build_store, mock_print):
        with self.assertRaises(SystemExit):
            main(["--date", "26.02.2025"])
        mock_run.assert_not_called()


if __name__ == "__main__":
    unittest.main()
