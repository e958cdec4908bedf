"""
Unit tests for notifications/error_logger.py
"""

import os
import tempfile
import unittest
from unittest.mock import patch

from notifications.error_logger import log_notification_error


class TestLogNotificationError(unittest.TestCase):
    """Tests for log_notification_error()"""

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)

    def test_writes_report(self):
        path = log_notification_error(
            "delivery",
            "Push subscription has unsubscribed or expired.",
            {"notification_id": "2025-02-26-period_start", "status_code": 410, "endpoint": None},
            log_dir=self.tmp.name,
        )

        self.assertTrue(os.path.basename(path).startswith("cycle_notification_delivery_"))
        with open(path, encoding="utf-8") as f:
            report = f.read()
        self.assertIn("Stage: delivery", report)
        self.assertIn("notification_id: 2025-02-26-period_start", report)
        self.assertIn("status_code: 410", report)
        self.assertNotIn("endpoint", report)

    def test_directory_from_environment(self):
        target = os.path.join(self.tmp.name, "nested")
        with patch.dict(os.environ, {"NOTIFICATION_ERROR_LOG_DIR": target}):
            path = log_notification_error("ledger", "read failed")

        self.assertEqual(os.path.dirname(path), target)
        with open(path, encoding="utf-8") as f:
            self.assertNotIn("Context:", f.read())


if __name__ == "__main__":
    unittest.main()
