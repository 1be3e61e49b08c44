from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ledger.extensions import db
from ledger.models.transaction import Transaction
from ledger.utils.exceptions import DuplicateKey, NotFound, StoreUnavailable
from ledger.utils.logger import logger


class TransactionStore:
    """
    Record store used by the recurring transaction driver.

    Writes are staged in the current session; the caller decides when a
    record's unit of work is committed or rolled back.
    """

    def __init__(self, session=None):
        self.session = session or db.session

    def list_due(self, as_of):
        """Return recurring generators whose due date has arrived by as_of"""
        try:
            return (
                self.session.query(Transaction)
                .filter(
                    Transaction.is_recurring == True,
                    Transaction.is_deleted == False,
                    Transaction.due_date <= as_of,
                    or_(
                        Transaction.recurrence_end_date.is_(None),
                        Transaction.recurrence_end_date >= as_of,
                    ),
                )
                .order_by(Transaction.due_date, Transaction.created_at)
                .all()
            )
        except SQLAlchemyError as e:
            raise StoreUnavailable(f"Could not list due recurring transactions: {e}")

    def get(self, record_id):
        try:
            record = self.session.get(Transaction, record_id)
        except SQLAlchemyError as e:
            raise StoreUnavailable(f"Could not load transaction {record_id}: {e}")

        if not record or record.is_deleted:
            return None
        return record

    def occurrence_exists(self, original_id, due_date):
        try:
            return (
                self.session.query(Transaction.id)
                .filter(
                    Transaction.recurrence_original_id == original_id,
                    Transaction.due_date == due_date,
                )
                .first()
                is not None
            )
        except SQLAlchemyError as e:
            raise StoreUnavailable(f"Could not check existing occurrences: {e}")

    def insert(self, values):
        """
        Stage a new transaction row and return its id.

        Raises:
            DuplicateKey: A row for the same series and due date already exists
            IntegrityError: Any other constraint violation
        """
        original_id = values.get("recurrence_original_id")
        due_date = values.get("due_date")

        if original_id is not None and self.occurrence_exists(original_id, due_date):
            raise DuplicateKey(
                f"Occurrence of series {original_id} on {due_date} already exists",
                record_id=original_id,
            )

        transaction = Transaction(**values)
        self.session.add(transaction)

        try:
            self.session.flush()
        except IntegrityError as e:
            self.session.rollback()
            logger.warning(f"Integrity error inserting occurrence: {str(e.orig)}")

            # Only a row for the same period counts as a duplicate
            if original_id is not None and self.occurrence_exists(
                original_id, due_date
            ):
                raise DuplicateKey(
                    f"Occurrence of series {original_id} on {due_date} already exists",
                    record_id=original_id,
                )
            raise
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StoreUnavailable(f"Could not insert transaction: {e}")

        return transaction.id

    def update(self, record_id, patch):
        """
        Apply a field patch to an existing row.

        Raises:
            NotFound: The row no longer exists or was deleted
        """
        record = self.get(record_id)
        if record is None:
            raise NotFound(f"Transaction {record_id} not found", record_id=record_id)

        for name, value in patch.items():
            setattr(record, name, value)

        try:
            self.session.flush()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StoreUnavailable(f"Could not update transaction {record_id}: {e}")

    def commit(self):
        try:
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StoreUnavailable(f"Could not commit: {e}")

    def rollback(self):
        self.session.rollback()
