"""
Notification system for the cycle calendar.

This module handles:
- Deduplicating notifications against the notification log
- Sending Web Push messages to subscribers
- Running the daily decide-generate-send pipeline
"""

from .ledger import append_entry, day_key_for, was_already_sent
from .dispatcher import dispatch_to_subscribers, run_daily_notifications

__all__ = [
    'append_entry',
    'day_key_for',
    'was_already_sent',
    'dispatch_to_subscribers',
    'run_daily_notifications',
]
