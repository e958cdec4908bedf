"""Pydantic models for data validation and type checking."""

from models.cycle import CycleRecord, CycleStats
from models.notification import (
    DayClassification,
    LedgerEntry,
    NotificationType,
    PersonaMessage,
    PersonaReply,
    PushPayload,
    Subscriber,
    SubscriberKeys,
    SubscriberSettings,
)

__all__ = [
    "CycleRecord",
    "CycleStats",
    "DayClassification",
    "NotificationType",
    "PersonaMessage",
    "PersonaReply",
    "LedgerEntry",
    "PushPayload",
    "Subscriber",
    "SubscriberKeys",
    "SubscriberSettings",
]
