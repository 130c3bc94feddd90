"""
Schedule Clock

Pure date arithmetic: given an instant and a frequency, where does the
next occurrence fall?

Month and year steps carry the day-of-month over and let any overflow
roll into the following month, the way native date-increment does:
Jan 31 + 1 month lands on Mar 2 (Mar 3 in a non-leap year), and
Feb 29 + 1 year lands on Mar 1. Stored checkpoints were produced with
this rule, so it must not be "fixed" to clamp to month end.
"""

from datetime import datetime, timedelta
from typing import Union

from budgetsaver.models.entities import Frequency


class UnknownFrequencyError(ValueError):
    """A schedule carries a frequency outside the known set."""
    pass


def _add_months(instant: datetime, months: int) -> datetime:
    month_index = instant.month - 1 + months
    year = instant.year + month_index // 12
    month = month_index % 12 + 1
    first_of_month = instant.replace(year=year, month=month, day=1)
    return first_of_month + timedelta(days=instant.day - 1)


def next_occurrence(
    instant: datetime,
    frequency: Union[Frequency, str],
) -> datetime:
    """
    Compute the occurrence that follows instant.
    
    Always strictly later than instant.
    
    Raises:
        UnknownFrequencyError: If frequency is not one of the four known values
    """
    try:
        cadence = Frequency(frequency)
    except ValueError:
        raise UnknownFrequencyError(f"Unknown frequency: {frequency!r}") from None
    
    if cadence is Frequency.DAILY:
        return instant + timedelta(days=1)
    if cadence is Frequency.WEEKLY:
        return instant + timedelta(days=7)
    if cadence is Frequency.MONTHLY:
        return _add_months(instant, 1)
    return _add_months(instant, 12)
