import uuid
from datetime import date

from marshmallow import ValidationError

from ledger.extensions import db
from ledger.models.transaction import Transaction
from ledger.utils.enums import TransactionType, TransactionStatus
from ledger.utils.logger import logger
from ledger.utils.validators import is_valid_uuid, parse_date


UUID_FILTERS = ("user_id", "account_id", "case_id", "category_id")


def get_transactions(query_params=None):
    """
    Get transactions with optional filters

    Args:
        query_params: Dict with optional filters (user_id, account_id, case_id,
            category_id, type, status, from_date, to_date)

    Returns:
        SQLAlchemy query object with appropriate filters
    """
    logger.info(f"Getting transactions with filters: {query_params}")

    query_params = query_params or {}

    query = Transaction.query.filter(Transaction.is_deleted == False)

    for name in UUID_FILTERS:
        if name in query_params and query_params[name]:
            value = query_params[name]

            if is_valid_uuid(value):
                query = query.filter(getattr(Transaction, name) == uuid.UUID(value))
            else:
                raise ValidationError(f"Invalid {name} format {value}")

    if "type" in query_params and query_params["type"]:
        try:
            transaction_type = TransactionType(query_params["type"])
        except ValueError:
            raise ValidationError(f"Invalid transaction type: {query_params['type']}")
        query = query.filter(Transaction.type == transaction_type)

    if "status" in query_params and query_params["status"]:
        try:
            status = TransactionStatus(query_params["status"])
        except ValueError:
            raise ValidationError(f"Invalid status: {query_params['status']}")
        query = query.filter(Transaction.status == status)

    if "from_date" in query_params and query_params["from_date"]:
        try:
            from_date = parse_date(query_params["from_date"])
            query = query.filter(Transaction.due_date >= from_date)
        except ValueError:
            raise ValidationError(
                f"Invalid from_date format: {query_params['from_date']}"
            )

    if "to_date" in query_params and query_params["to_date"]:
        try:
            to_date = parse_date(query_params["to_date"])
            query = query.filter(Transaction.due_date <= to_date)
        except ValueError:
            raise ValidationError(f"Invalid to_date format: {query_params['to_date']}")

    query = query.order_by(Transaction.due_date.desc(), Transaction.created_at.desc())

    logger.debug("Transaction query built successfully")
    return query


def create_transaction(transaction):
    """Create a transaction"""
    try:
        db.session.add(transaction)
        db.session.commit()

        logger.info(f"Created transaction: {transaction.id}")
        return transaction

    except Exception as e:
        db.session.rollback()
        logger.error(f"Error creating transaction: {e}")
        return {"error": f"Error creating transaction {str(e)}"}, 500


def update_transaction(transaction):
    """Persist changes loaded into a transaction"""
    try:
        if transaction.status == TransactionStatus.PENDING:
            transaction.payment_date = None

        db.session.commit()

        logger.info(f"Updated transaction: {transaction.id}")
        return transaction

    except Exception as e:
        db.session.rollback()
        logger.error(f"Error updating transaction: {e}")
        return {"error": f"Error updating transaction {str(e)}"}, 500


def mark_transaction_paid(transaction, payment_date=None):
    """Settle a pending transaction"""
    if transaction.status == TransactionStatus.PAID:
        raise ValidationError({"status": ["Transaction is already paid"]})

    try:
        transaction.status = TransactionStatus.PAID
        transaction.payment_date = payment_date or date.today()
        db.session.commit()

        logger.info(
            f"Transaction {transaction.id} paid on {transaction.payment_date}"
        )
        return transaction

    except Exception as e:
        db.session.rollback()
        logger.error(f"Error paying transaction: {e}")
        return {"error": f"Error paying transaction {str(e)}"}, 500


def delete_transaction(transaction):
    """Soft delete a transaction; a deleted generator stops recurring"""
    try:
        transaction.is_deleted = True
        transaction.is_recurring = False
        db.session.commit()

        logger.info(f"Deleted transaction: {transaction.id}")
        return True

    except Exception as e:
        db.session.rollback()
        logger.error(f"Error deleting transaction: {e}")
        return {"error": f"Error deleting transaction {str(e)}"}, 500
