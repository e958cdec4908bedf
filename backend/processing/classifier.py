"""
Daily notification classification.

Rules are evaluated top to bottom and the first match wins. Windows overlap
(a forecast day can also be far from ovulation, a fertile day is never a
forecast day), so the order is the precedence:

1. period_start            predicted period starts today
2. period_forecast         predicted period in 1-5 days
3. ovulation_day           predicted ovulation today
4. fertile_window          fertile_start <= today < ovulation
5. period_confirmed_dayN   a period was recorded 0-2 days ago
6. period_waiting          prediction passed 1-2 days ago without a new record
7. period_delay_warning    prediction passed more than 2 days ago
"""

from datetime import date
from typing import Any, Callable

from models import CycleStats, DayClassification, NotificationType

FORECAST_HORIZON_DAYS = 5
CONFIRMED_PERIOD_DAYS = 2
WAITING_DAYS = 2

CONFIRMED_DAY_TYPES = {
    0: NotificationType.PERIOD_CONFIRMED_DAY0,
    1: NotificationType.PERIOD_CONFIRMED_DAY1,
    2: NotificationType.PERIOD_CONFIRMED_DAY2,
}


class DayFacts:
    """Day differences between today and the predicted dates."""

    def __init__(self, today: date, stats: CycleStats):
        self.today = today
        self.stats = stats
        self.days_until_period = (stats.next_period_date - today).days
        self.days_until_ovulation = (stats.ovulation_date - today).days
        self.days_since_last_start = (today - stats.last_start).days

    @property
    def predicted_date(self) -> str:
        return self.stats.next_period_date.isoformat()


Rule = Callable[[DayFacts], tuple[NotificationType, dict[str, Any]] | None]


def _period_start(facts: DayFacts):
    if facts.days_until_period == 0:
        return NotificationType.PERIOD_START, {
            "days_until_period": 0,
            "predicted_date": facts.predicted_date,
        }
    return None


def _period_forecast(facts: DayFacts):
    if 0 < facts.days_until_period <= FORECAST_HORIZON_DAYS:
        return NotificationType.PERIOD_FORECAST, {
            "days_until_period": facts.days_until_period,
            "predicted_date": facts.predicted_date,
        }
    return None


def _ovulation_day(facts: DayFacts):
    if facts.days_until_ovulation == 0:
        return NotificationType.OVULATION_DAY, {"days_until_ovulation": 0}
    return None


def _fertile_window(facts: DayFacts):
    if facts.stats.fertile_start <= facts.today < facts.stats.ovulation_date:
        return NotificationType.FERTILE_WINDOW, {
            "days_until_ovulation": facts.days_until_ovulation,
        }
    return None


def _period_confirmed(facts: DayFacts):
    days = facts.days_since_last_start
    if 0 <= days <= CONFIRMED_PERIOD_DAYS:
        return CONFIRMED_DAY_TYPES[days], {
            "days_since_period_start": days,
            "period_start_date": facts.stats.last_start.isoformat(),
        }
    return None


def _period_waiting(facts: DayFacts):
    days_past = -facts.days_until_period
    if 1 <= days_past <= WAITING_DAYS:
        return NotificationType.PERIOD_WAITING, {
            "days_past_prediction": days_past,
            "predicted_date": facts.predicted_date,
        }
    return None


def _period_delay_warning(facts: DayFacts):
    days_past = -facts.days_until_period
    if days_past > WAITING_DAYS:
        return NotificationType.PERIOD_DELAY_WARNING, {
            "days_past_prediction": days_past,
            "predicted_date": facts.predicted_date,
        }
    return None


CLASSIFICATION_RULES: list[Rule] = [
    _period_start,
    _period_forecast,
    _ovulation_day,
    _fertile_window,
    _period_confirmed,
    _period_waiting,
    _period_delay_warning,
]


def classify_day(today: date, stats: CycleStats | None) -> DayClassification | None:
    """
    Pick today's notification.

    Args:
        today: Calendar date in the reference time zone
        stats: Cycle statistics (None means nothing to notify about)

    Returns:
        DayClassification for the first matching rule, or None
    """
    if stats is None:
        return None

    facts = DayFacts(today, stats)
    for rule in CLASSIFICATION_RULES:
        match = rule(facts)
        if match:
            notification_type, metadata = match
            return DayClassification(type=notification_type, metadata=metadata)
    return None
