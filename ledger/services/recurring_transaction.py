import uuid
from dataclasses import dataclass, field
from datetime import date

from marshmallow import ValidationError
from sqlalchemy import or_

from ledger.models.transaction import Transaction
from ledger.extensions import db
from ledger.services.recurrence import advance
from ledger.services.store import TransactionStore
from ledger.utils.enums import TransactionType, RecurrenceFrequency
from ledger.utils.exceptions import (
    RecurrenceError,
    DuplicateKey,
    NotFound,
    StoreUnavailable,
    PreconditionViolation,
)
from ledger.utils.logger import logger
from ledger.utils.validators import is_valid_uuid, parse_date


@dataclass
class ProcessingReport:
    """Summary of one run of the recurring transaction driver"""

    as_of: date
    processed: int = 0
    generated: list = field(default_factory=list)
    recovered: list = field(default_factory=list)
    terminated: list = field(default_factory=list)
    skipped: list = field(default_factory=list)
    failures: list = field(default_factory=list)

    @property
    def status(self):
        return "partial_failure" if self.failures else "success"

    def add_failure(self, record_id, error):
        self.failures.append(
            {
                "id": str(record_id),
                "code": error.__class__.__name__,
                "error": str(error),
            }
        )

    def to_dict(self):
        return {
            "as_of": self.as_of.isoformat(),
            "status": self.status,
            "processed": self.processed,
            "generated_count": len(self.generated),
            "generated": [str(i) for i in self.generated],
            "recovered": [str(i) for i in self.recovered],
            "terminated": [str(i) for i in self.terminated],
            "skipped": [str(i) for i in self.skipped],
            "failed_count": len(self.failures),
            "failures": self.failures,
        }


def process_recurring_transactions(as_of=None, store=None):
    """
    Advance every recurring transaction that is due by as_of.

    Each record is processed and committed on its own, so a failing record
    is reported and left untouched while the rest of the batch continues.

    Args:
        as_of: Run date (defaults to today)
        store: TransactionStore to read and write through

    Returns:
        ProcessingReport

    Raises:
        StoreUnavailable: The store failed; the batch is aborted
    """
    as_of = as_of or date.today()
    store = store or TransactionStore()
    report = ProcessingReport(as_of=as_of)

    logger.info(f"Processing recurring transactions due by {as_of}")

    candidate_ids = [record.id for record in store.list_due(as_of)]

    logger.info(f"Found {len(candidate_ids)} due recurring transactions")

    for record_id in candidate_ids:
        report.processed += 1
        try:
            result, new_id, recovered = process_single_transaction(
                record_id, as_of, store
            )

        except StoreUnavailable as e:
            store.rollback()
            logger.error(f"Store unavailable while processing {record_id}: {str(e)}")
            raise

        except NotFound as e:
            store.rollback()
            logger.warning(f"Skipping recurring transaction {record_id}: {str(e)}")
            report.skipped.append(record_id)

        except RecurrenceError as e:
            store.rollback()
            logger.error(
                f"Error processing recurring transaction {record_id}: {str(e)}"
            )
            report.add_failure(record_id, e)

        except Exception as e:
            store.rollback()
            logger.exception(
                f"Unexpected error processing recurring transaction {record_id}: {str(e)}"
            )
            report.add_failure(record_id, e)

        else:
            if result.terminated:
                report.terminated.append(record_id)
            elif recovered:
                report.recovered.append(record_id)
            else:
                report.generated.append(new_id)

    logger.info(
        f"Recurring run for {as_of} finished: {len(report.generated)} generated, "
        f"{len(report.terminated)} terminated, {len(report.failures)} failed"
    )
    return report


def process_single_transaction(record_id, as_of, store):
    """
    Advance one recurring transaction and commit the outcome.

    The occurrence is inserted first and the cursor update is the commit
    point. An existing occurrence for the same period means an earlier run
    stopped before moving the cursor, so only the cursor is moved.

    Returns:
        tuple of (AdvanceResult, new occurrence id or None, recovered flag)
    """
    record = store.get(record_id)
    if record is None:
        raise NotFound(f"Transaction {record_id} not found", record_id=record_id)

    result = advance(record, as_of)

    if result.terminated:
        store.update(record_id, result.original_patch)
        store.commit()
        logger.info(
            f"Recurring transaction {record_id} terminated ({result.reason})"
        )
        return result, None, False

    new_id = None
    recovered = False
    try:
        new_id = store.insert(result.new_occurrence)
    except DuplicateKey:
        logger.warning(
            f"Occurrence for {record_id} on {result.next_due_date} already exists, "
            f"moving cursor only"
        )
        recovered = True

    store.update(record_id, result.original_patch)
    store.commit()

    if not recovered:
        logger.info(
            f"Created recurring occurrence {new_id} from {record_id} due {result.next_due_date}"
        )
    return result, new_id, recovered


def get_recurring_transactions(query_params=None):
    """
    Build a query over active recurring generators.

    Args:
        query_params: Dict with optional filters:
            - user_id: Owner of the generators
            - type: INCOME or EXPENSE
            - frequency: Recurrence frequency
            - as_of: Generators whose end date is before this date (default
              today) can no longer produce occurrences and are left out
    """
    if query_params is None:
        query_params = {}

    as_of = date.today()
    if "as_of" in query_params and query_params["as_of"]:
        try:
            as_of = parse_date(query_params["as_of"])
        except ValueError:
            raise ValidationError(f"Invalid as_of format: {query_params['as_of']}")

    query = Transaction.query.filter(
        Transaction.is_recurring == True,
        Transaction.is_deleted == False,
        or_(
            Transaction.recurrence_end_date.is_(None),
            Transaction.recurrence_end_date >= as_of,
        ),
    )

    if "user_id" in query_params and query_params["user_id"]:
        user_id = query_params["user_id"]

        if is_valid_uuid(user_id):
            query = query.filter(Transaction.user_id == uuid.UUID(user_id))
        else:
            raise ValidationError(f"Invalid user_id format {user_id}")

    if "type" in query_params and query_params["type"]:
        try:
            transaction_type = TransactionType(query_params["type"])
            query = query.filter(Transaction.type == transaction_type)
        except ValueError:
            raise ValidationError(f"Invalid transaction type: {query_params['type']}")

    if "frequency" in query_params and query_params["frequency"]:
        try:
            frequency = RecurrenceFrequency(query_params["frequency"])
            query = query.filter(Transaction.recurrence_frequency == frequency)
        except ValueError:
            raise ValidationError(f"Invalid frequency: {query_params['frequency']}")

    query = query.order_by(Transaction.due_date)

    logger.debug("Recurring transaction query built successfully")
    return query


def set_recurring_status(transaction, is_recurring):
    """
    Pause or resume a recurring generator.

    Raises:
        PreconditionViolation: Resuming a generated occurrence or a row
            without frequency
    """
    if is_recurring:
        if transaction.recurrence_original_id is not None:
            raise PreconditionViolation(
                "Generated occurrences cannot become recurring generators",
                record_id=transaction.id,
            )
        if transaction.recurrence_frequency is None:
            raise PreconditionViolation(
                "A recurrence frequency is required to resume recurrence",
                record_id=transaction.id,
            )

    transaction.is_recurring = is_recurring
    db.session.commit()

    logger.info(
        f"Recurrence {'resumed' if is_recurring else 'paused'} for transaction {transaction.id}"
    )
    return transaction


def get_series_occurrences(transaction):
    """Query the occurrences generated from the series root of a transaction"""
    return Transaction.query.filter(
        Transaction.recurrence_original_id == transaction.series_root_id,
        Transaction.is_deleted == False,
    ).order_by(Transaction.due_date)
