"""
Materialization Engine

Turns recurring schedules into concrete transactions.

For each schedule the engine walks forward from its checkpoint one
occurrence at a time, emitting a transaction per occurrence, until the
next occurrence is in the future or past the schedule's end date. It
then hands back the schedule with its checkpoint advanced.

GUARANTEES:
- Pure: no I/O, no clock reads. The caller supplies "now".
- Re-entrant: transaction ids are a function of (schedule id, instant),
  so a second pass over the same state yields nothing new once the
  first pass's ids are known.
- Bounded: every iteration strictly advances the cursor.
- A broken schedule is skipped and reported, never fatal.
"""

from collections.abc import Iterable, Sequence
from datetime import datetime, timedelta, timezone

from budgetsaver.models.entities import RecurringTransaction, Transaction
from budgetsaver.models.results import (
    MaterializationResult,
    ScheduleIssue,
    ScheduleIssueKind,
)
from budgetsaver.schedule.clock import next_occurrence


# A schedule with no checkpoint starts one day before its start date, so
# that a start date which is itself an occurrence is emitted on the first pass.
FIRST_OCCURRENCE_LOOKBACK = timedelta(days=1)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def occurrence_transaction_id(schedule_id: str, occurrence: datetime) -> str:
    """Deterministic id for the transaction a schedule emits at occurrence."""
    millis = (occurrence - _EPOCH) // timedelta(milliseconds=1)
    return f"{schedule_id}-{millis}"


def initial_cursor(schedule: RecurringTransaction) -> datetime:
    """Where the walk starts: the checkpoint, or just before the start date."""
    if schedule.last_generated_date is not None:
        return schedule.last_generated_date
    return schedule.start_date - FIRST_OCCURRENCE_LOOKBACK


def check_schedule(schedule: RecurringTransaction) -> list[ScheduleIssue]:
    """Return the integrity problems that prevent materializing schedule."""
    issues = []
    
    if schedule.cadence is None:
        issues.append(ScheduleIssue(
            schedule_id=schedule.id,
            kind=ScheduleIssueKind.UNKNOWN_FREQUENCY,
            message=f"Unknown frequency {schedule.frequency!r}",
        ))
    
    if schedule.end_date is not None and schedule.end_date < schedule.start_date:
        issues.append(ScheduleIssue(
            schedule_id=schedule.id,
            kind=ScheduleIssueKind.END_BEFORE_START,
            message=(
                f"End date {schedule.end_date.isoformat()} is before "
                f"start date {schedule.start_date.isoformat()}"
            ),
        ))
    
    return issues


def _synthesize(schedule: RecurringTransaction, occurrence: datetime) -> Transaction:
    return Transaction(
        id=occurrence_transaction_id(schedule.id, occurrence),
        description=schedule.description,
        amount=schedule.amount,
        date=occurrence,
        budget_id=schedule.budget_id,
        account_id=schedule.account_id,
        recurring_transaction_id=schedule.id,
    )


def walk_schedule(
    schedule: RecurringTransaction,
    now: datetime,
) -> tuple[list[Transaction], RecurringTransaction]:
    """
    Emit every due occurrence of a single, already-checked schedule.
    
    Both bounds are inclusive: an occurrence exactly at now, or exactly
    at the end date, is emitted.
    
    Returns:
        (transactions, schedule with its checkpoint advanced)
    """
    cursor = initial_cursor(schedule)
    emitted = []
    
    while True:
        candidate = next_occurrence(cursor, schedule.frequency)
        if candidate > now:
            break
        if schedule.end_date is not None and candidate > schedule.end_date:
            break
        emitted.append(_synthesize(schedule, candidate))
        cursor = candidate
    
    if not emitted:
        return emitted, schedule
    return emitted, schedule.model_copy(update={"last_generated_date": cursor})


def materialize(
    schedules: Sequence[RecurringTransaction],
    now: datetime,
    existing_transaction_ids: Iterable[str] = (),
) -> MaterializationResult:
    """
    Run one materialization pass over all schedules.
    
    Args:
        schedules: Current schedule snapshot
        now: The instant to materialize up to (inclusive)
        existing_transaction_ids: Ids already in the ledger; transactions
            with these ids are not returned again
            
    Returns:
        MaterializationResult with new transactions, every schedule
        (checkpoints advanced where due) and any skipped schedules
    """
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    
    seen = set(existing_transaction_ids)
    result = MaterializationResult()
    
    for schedule in schedules:
        issues = check_schedule(schedule)
        if issues:
            result.issues.extend(issues)
            result.updated_schedules.append(schedule)
            continue
        
        emitted, updated = walk_schedule(schedule, now)
        result.updated_schedules.append(updated)
        if updated is not schedule:
            result.advanced_ids.add(updated.id)
        
        for transaction in emitted:
            if transaction.id in seen:
                continue
            seen.add(transaction.id)
            result.new_transactions.append(transaction)
    
    return result
