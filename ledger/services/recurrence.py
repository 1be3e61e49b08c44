"""
Date arithmetic and advancement rules for recurring transactions.

Everything in this module is pure: functions read a record (a Transaction
model instance or any object exposing the same attributes) and return plain
values. Persisting the outcome is the caller's job.
"""

import calendar
from dataclasses import dataclass, field
from typing import Optional

from dateutil.relativedelta import relativedelta

from ledger.utils.constants import FREQUENCY_MONTHS
from ledger.utils.enums import RecurrenceFrequency, TransactionStatus
from ledger.utils.exceptions import InvalidFrequency, PreconditionViolation


# Copied verbatim from the generator into every new occurrence
CARRIED_FIELDS = (
    "user_id",
    "type",
    "description",
    "amount",
    "account_id",
    "case_id",
    "category_id",
    "observations",
    "recurrence_frequency",
    "recurrence_end_date",
)


@dataclass
class AdvanceResult:
    """Outcome of advancing one recurring record"""

    record_id: object
    terminated: bool
    original_patch: dict
    new_occurrence: Optional[dict] = None
    next_due_date: object = None
    reason: Optional[str] = field(default=None)


def resolve_frequency(value):
    """
    Normalize a stored frequency into a RecurrenceFrequency member.

    Raises:
        InvalidFrequency: If the value is missing or not a known frequency
    """
    if value is None or value == "":
        raise InvalidFrequency("Recurring transaction has no recurrence frequency")

    if isinstance(value, RecurrenceFrequency):
        return value

    try:
        return RecurrenceFrequency(str(value).upper())
    except ValueError:
        raise InvalidFrequency(f"Unknown recurrence frequency: {value}")


def step_forward(due_date, frequency):
    """
    Move a due date forward by one period of the given frequency.

    Steps are whole calendar months. When the target month is shorter the
    day is clamped to its last day, so 2024-01-31 monthly gives 2024-02-29.
    A date on the last day of its month stays on the last day, which keeps
    a month-end series from drifting (2024-02-29 monthly gives 2024-03-31).
    """
    months = FREQUENCY_MONTHS[resolve_frequency(frequency)]
    next_date = due_date + relativedelta(months=months)

    if due_date.day == calendar.monthrange(due_date.year, due_date.month)[1]:
        next_date += relativedelta(day=31)

    return next_date


def is_series_exhausted(next_due_date, end_date=None, remaining=None):
    """Whether a series may not produce an occurrence on next_due_date"""
    if end_date is not None and next_due_date > end_date:
        return True
    if remaining is not None and remaining <= 1:
        return True
    return False


def _decrement(count):
    return count - 1 if count is not None else None


def advance(record, as_of):
    """
    Compute the next occurrence of a recurring record.

    Args:
        record: Recurring transaction, acting as the series cursor
        as_of: Date the run is performed for

    Returns:
        AdvanceResult. When the series has ended, ``terminated`` is True,
        ``new_occurrence`` is None and ``original_patch`` switches the
        generator off. Otherwise ``new_occurrence`` holds the values of the
        row to insert and ``original_patch`` moves the cursor forward.

    Raises:
        PreconditionViolation: Record is not recurring or is not yet due
        InvalidFrequency: Record has no usable frequency
    """
    if not record.is_recurring:
        raise PreconditionViolation(
            f"Transaction {record.id} is not recurring", record_id=record.id
        )

    try:
        frequency = resolve_frequency(record.recurrence_frequency)
    except InvalidFrequency as e:
        e.record_id = record.id
        raise

    if record.due_date > as_of:
        raise PreconditionViolation(
            f"Transaction {record.id} is due on {record.due_date}, after {as_of}",
            record_id=record.id,
        )

    next_due_date = step_forward(record.due_date, frequency)
    remaining = record.recurrence_count

    if is_series_exhausted(next_due_date, record.recurrence_end_date, remaining):
        if remaining is not None and remaining <= 1:
            reason = "count_exhausted"
        else:
            reason = "end_date_reached"
        return AdvanceResult(
            record_id=record.id,
            terminated=True,
            original_patch={"is_recurring": False},
            next_due_date=next_due_date,
            reason=reason,
        )

    new_count = _decrement(remaining)

    new_occurrence = {name: getattr(record, name) for name in CARRIED_FIELDS}
    new_occurrence.update(
        {
            "due_date": next_due_date,
            "status": TransactionStatus.PENDING,
            "payment_date": None,
            # Occurrences are one-shot rows; only the root keeps generating
            "is_recurring": False,
            "recurrence_count": new_count,
            "recurrence_original_id": record.recurrence_original_id or record.id,
        }
    )

    return AdvanceResult(
        record_id=record.id,
        terminated=False,
        original_patch={"due_date": next_due_date, "recurrence_count": new_count},
        new_occurrence=new_occurrence,
        next_due_date=next_due_date,
    )


def upcoming_due_dates(record, limit):
    """
    Preview the due dates the next runs would generate for a record.

    Args:
        record: Recurring transaction
        limit: Maximum number of dates to return

    Returns:
        list of dates, empty when the record is not an active generator
    """
    if not record.is_recurring:
        return []

    frequency = resolve_frequency(record.recurrence_frequency)

    dates = []
    due_date = record.due_date
    remaining = record.recurrence_count

    while len(dates) < limit:
        next_due_date = step_forward(due_date, frequency)
        if is_series_exhausted(next_due_date, record.recurrence_end_date, remaining):
            break
        dates.append(next_due_date)
        due_date = next_due_date
        remaining = _decrement(remaining)

    return dates
