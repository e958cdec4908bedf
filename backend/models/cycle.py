"""Pydantic models for cycle history and derived statistics."""

from datetime import date

from pydantic import BaseModel, ConfigDict, Field, field_validator

from shared.utils import to_reference_date


class CycleRecord(BaseModel):
    """One recorded cycle, identified by its start date."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: str | None = None
    start_date: date = Field(..., alias="startDate")

    @field_validator("start_date", mode="before")
    @classmethod
    def _coerce_start_date(cls, value: object) -> date:
        if isinstance(value, (str, date)):
            return to_reference_date(value)
        raise ValueError(f"startDate must be a date string, got {type(value).__name__}")


class CycleStats(BaseModel):
    """Predictions derived from cycle history. Never persisted."""

    model_config = ConfigDict(frozen=True)

    last_start: date
    next_period_date: date
    average_length_days: int = Field(..., gt=0)
    ovulation_date: date
    fertile_start: date
    fertile_end: date
