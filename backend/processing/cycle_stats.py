"""
Cycle statistics derived from recorded cycle starts.

Predicts the next period from the average distance between consecutive
starts, then places ovulation 14 days before it and the fertile window in the
5 days leading up to ovulation.
"""

import math
from datetime import timedelta

from models import CycleRecord, CycleStats

DEFAULT_CYCLE_LENGTH_DAYS = 28
MIN_CYCLE_LENGTH_DAYS = 21
LUTEAL_PHASE_DAYS = 14
FERTILE_WINDOW_DAYS = 5


def average_cycle_length(cycles: list[CycleRecord]) -> int:
    """
    Rounded mean of the day deltas between consecutive cycle starts.

    Duplicate start dates are collapsed before measuring. Rounds half up.

    Args:
        cycles: Cycle records in any order

    Returns:
        Average length in days, DEFAULT_CYCLE_LENGTH_DAYS with fewer than two
        distinct starts, never below MIN_CYCLE_LENGTH_DAYS
    """
    starts = sorted({cycle.start_date for cycle in cycles})
    deltas = [(current - previous).days for previous, current in zip(starts, starts[1:])]

    if not deltas:
        return DEFAULT_CYCLE_LENGTH_DAYS

    average = math.floor(sum(deltas) / len(deltas) + 0.5)
    return max(MIN_CYCLE_LENGTH_DAYS, average)


def compute_cycle_stats(cycles: list[CycleRecord]) -> CycleStats | None:
    """
    Compute predictions from cycle history.

    Args:
        cycles: Cycle records in any order

    Returns:
        CycleStats, or None if there are no cycles
    """
    if not cycles:
        return None

    average_length = average_cycle_length(cycles)
    last_start = max(cycle.start_date for cycle in cycles)
    next_period = last_start + timedelta(days=average_length)
    ovulation = next_period - timedelta(days=LUTEAL_PHASE_DAYS)
    fertile_start = ovulation - timedelta(days=FERTILE_WINDOW_DAYS)

    return CycleStats(
        last_start=last_start,
        next_period_date=next_period,
        average_length_days=average_length,
        ovulation_date=ovulation,
        fertile_start=fertile_start,
        fertile_end=ovulation,
    )
