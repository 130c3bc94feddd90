"""Recurring schedule package: occurrence arithmetic and materialization."""

from budgetsaver.schedule.clock import UnknownFrequencyError, next_occurrence
from budgetsaver.schedule.engine import (
    FIRST_OCCURRENCE_LOOKBACK,
    check_schedule,
    initial_cursor,
    materialize,
    occurrence_transaction_id,
    walk_schedule,
)

__all__ = [
    "FIRST_OCCURRENCE_LOOKBACK",
    "UnknownFrequencyError",
    "check_schedule",
    "initial_cursor",
    "materialize",
    "next_occurrence",
    "occurrence_transaction_id",
    "walk_schedule",
]
