"""Pydantic models for the notification pipeline."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from models.types import Endpoint, NotificationID


class NotificationType(str, Enum):
    """Kinds of daily notification. At most one applies per day."""

    PERIOD_START = "period_start"
    PERIOD_FORECAST = "period_forecast"
    OVULATION_DAY = "ovulation_day"
    FERTILE_WINDOW = "fertile_window"
    PERIOD_CONFIRMED_DAY0 = "period_confirmed_day0"
    PERIOD_CONFIRMED_DAY1 = "period_confirmed_day1"
    PERIOD_CONFIRMED_DAY2 = "period_confirmed_day2"
    PERIOD_WAITING = "period_waiting"
    PERIOD_DELAY_WARNING = "period_delay_warning"


class DayClassification(BaseModel):
    """The notification chosen for a day, with the numbers behind the choice."""

    type: NotificationType
    metadata: dict[str, Any] = Field(default_factory=dict)


class PersonaReply(BaseModel):
    """Structured reply requested from the language model."""

    title: str = Field(..., description="Fictional character name, 1-3 capitalized words, no emoji")
    body: str = Field(..., description="Single sentence, at most 120 characters, 1-2 emoji")


class PersonaMessage(BaseModel):
    """Validated notification text."""

    model_config = ConfigDict(frozen=True)

    title: str = Field(..., min_length=1, max_length=40)
    body: str = Field(..., min_length=1, max_length=120)


class SubscriberKeys(BaseModel):
    p256dh: str = Field(..., min_length=1)
    auth: str = Field(..., min_length=1)


class SubscriberSettings(BaseModel):
    model_config = ConfigDict(extra="allow")

    enabled: bool = True


class Subscriber(BaseModel):
    """A Web Push subscription registered by the client."""

    model_config = ConfigDict(extra="ignore")

    endpoint: Endpoint = Field(..., min_length=1)
    keys: SubscriberKeys
    settings: SubscriberSettings = Field(default_factory=SubscriberSettings)

    def subscription_info(self) -> dict[str, Any]:
        """Destination descriptor in the shape the push library expects."""
        return {"endpoint": self.endpoint, "keys": self.keys.model_dump()}


class LedgerEntry(BaseModel):
    """One sent notification as recorded in the notification log."""

    model_config = ConfigDict(populate_by_name=True)

    id: NotificationID
    type: NotificationType
    title: str
    body: str
    sent_at: str = Field(..., alias="sentAt")
    url: str | None = None

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class PushPayload(BaseModel):
    """Envelope delivered to the service worker."""

    model_config = ConfigDict(populate_by_name=True)

    title: str
    body: str
    id: NotificationID
    type: NotificationType
    sent_at: str = Field(..., alias="sentAt")
    url: str | None = None

    @classmethod
    def from_entry(cls, entry: LedgerEntry) -> "PushPayload":
        return cls(
            title=entry.title,
            body=entry.body,
            id=entry.id,
            type=entry.type,
            sentAt=entry.sent_at,
            url=entry.url,
        )

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)
