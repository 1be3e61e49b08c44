import os
import sys
import uuid
import pytest
from datetime import date
from decimal import Decimal

# Add project root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

# Set environment to testing
os.environ["FLASK_ENV"] = "testing"

from ledger import create_app
from ledger.config import TestConfig
from ledger.extensions import db
from ledger.models.transaction import Transaction
from ledger.utils.enums import (
    TransactionType,
    TransactionStatus,
    RecurrenceFrequency,
)


@pytest.fixture(scope="session")
def app():
    """Create the test app and keep one application context for the session."""
    test_app = create_app(TestConfig)
    ctx = test_app.app_context()
    ctx.push()
    db.create_all()

    yield test_app

    db.session.remove()
    db.drop_all()
    ctx.pop()


@pytest.fixture(autouse=True)
def clean_db(app):
    """Wipe every table after each test so tests never share state."""
    yield
    db.session.rollback()
    for table in reversed(db.metadata.sorted_tables):
        db.session.execute(table.delete())
    db.session.commit()
    db.session.expunge_all()


@pytest.fixture
def db_session(app):
    return db.session


@pytest.fixture
def client(app):
    """Flask test client for API requests."""
    return app.test_client()


@pytest.fixture
def runner(app):
    """Flask CLI test runner."""
    return app.test_cli_runner()


@pytest.fixture
def owner_id():
    return uuid.uuid4()


@pytest.fixture
def make_transaction(db_session, owner_id):
    """Factory persisting a transaction with sensible defaults."""

    def _make(**overrides):
        values = {
            "user_id": owner_id,
            "type": TransactionType.EXPENSE,
            "description": "Office rent",
            "amount": Decimal("1500.00"),
            "due_date": date(2024, 1, 15),
            "status": TransactionStatus.PENDING,
        }
        values.update(overrides)
        transaction = Transaction(**values)
        db_session.add(transaction)
        db_session.commit()
        return transaction

    return _make


@pytest.fixture
def recurring_transaction(make_transaction):
    """Monthly recurring expense with three occurrences left."""
    return make_transaction(
        is_recurring=True,
        recurrence_frequency=RecurrenceFrequency.MONTHLY,
        recurrence_count=3,
        account_id=uuid.uuid4(),
        case_id=uuid.uuid4(),
        category_id=uuid.uuid4(),
        observations="Paid by bank transfer",
    )


@pytest.fixture
def transaction_data(owner_id):
    """Sample payload for creating a transaction."""
    return {
        "user_id": str(owner_id),
        "type": "INCOME",
        "description": "Retainer fee",
        "amount": "2500.00",
        "due_date": "2024-03-10",
        "case_id": str(uuid.uuid4()),
    }


@pytest.fixture
def series_rows(db_session):
    """Fetch occurrences generated for a series, oldest first."""

    def _rows(root_id):
        db_session.expire_all()
        return (
            Transaction.query.filter(Transaction.recurrence_original_id == root_id)
            .order_by(Transaction.due_date)
            .all()
        )

    return _rows
