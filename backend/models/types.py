"""Shared type definitions for type checking.

Uses NewType for identifiers that must not be mixed up (e.g., passing a
DayKey where a NotificationID is expected).

Uses TypeAlias for structural types.
"""

from typing import Any, NewType, TypeAlias

# ID types using NewType for type safety
NotificationID = NewType("NotificationID", str)  # "<day_key>-<type>"
DayKey = NewType("DayKey", str)  # YYYY-MM-DD in the reference time zone
Endpoint = NewType("Endpoint", str)

# Structural aliases using TypeAlias
DocumentName: TypeAlias = str  # e.g. "subscriptions.json"
DocumentVersion: TypeAlias = str  # opaque version token (git sha, row version)
LogDocument: TypeAlias = dict[str, Any]  # {"notifications": [...], "lastUpdated": ...}
MessageCache: TypeAlias = dict[str, Any]  # notification type -> PersonaMessage
