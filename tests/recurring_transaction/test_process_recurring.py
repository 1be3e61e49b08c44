import pytest
from datetime import date
from decimal import Decimal
from sqlalchemy.exc import IntegrityError

from ledger.extensions import db
from ledger.models.transaction import Transaction
from ledger.services.recurrence import advance
from ledger.services.recurring_transaction import process_recurring_transactions
from ledger.services.store import TransactionStore
from ledger.utils.enums import TransactionStatus, RecurrenceFrequency
from ledger.utils.exceptions import StoreUnavailable


class TestProcessRecurringTransactions:
    def test_generates_one_occurrence_and_moves_cursor(
        self, recurring_transaction, series_rows
    ):
        report = process_recurring_transactions(as_of=date(2024, 2, 1))

        occurrences = series_rows(recurring_transaction.id)
        assert len(occurrences) == 1
        assert report.generated == [occurrences[0].id]
        assert occurrences[0].due_date == date(2024, 2, 15)
        assert occurrences[0].recurrence_count == 2
        assert occurrences[0].status == TransactionStatus.PENDING
        assert occurrences[0].is_recurring is False

        assert recurring_transaction.due_date == date(2024, 2, 15)
        assert recurring_transaction.recurrence_count == 2
        assert recurring_transaction.is_recurring is True

    def test_second_run_same_day_is_idempotent(
        self, recurring_transaction, series_rows
    ):
        first = process_recurring_transactions(as_of=date(2024, 2, 1))
        second = process_recurring_transactions(as_of=date(2024, 2, 1))

        assert len(first.generated) == 1
        assert second.processed == 0
        assert second.generated == []
        assert len(series_rows(recurring_transaction.id)) == 1

    def test_one_occurrence_per_run_after_downtime(
        self, recurring_transaction, series_rows
    ):
        report = process_recurring_transactions(as_of=date(2024, 5, 1))

        assert len(report.generated) == 1
        assert [row.due_date for row in series_rows(recurring_transaction.id)] == [
            date(2024, 2, 15)
        ]

    def test_successive_runs_exhaust_count(self, recurring_transaction, series_rows):
        for as_of in (date(2024, 1, 15), date(2024, 2, 15), date(2024, 3, 15)):
            process_recurring_transactions(as_of=as_of)

        occurrences = series_rows(recurring_transaction.id)
        assert [row.due_date for row in occurrences] == [
            date(2024, 2, 15),
            date(2024, 3, 15),
        ]
        assert [row.recurrence_count for row in occurrences] == [2, 1]
        assert recurring_transaction.is_recurring is False

    def test_copies_references_to_occurrence(self, recurring_transaction, series_rows):
        process_recurring_transactions(as_of=date(2024, 1, 15))

        occurrence = series_rows(recurring_transaction.id)[0]
        for name in (
            "user_id",
            "type",
            "description",
            "amount",
            "account_id",
            "case_id",
            "category_id",
            "observations",
        ):
            assert getattr(occurrence, name) == getattr(recurring_transaction, name)
        assert occurrence.payment_date is None

    def test_paid_original_produces_pending_occurrence(
        self, make_transaction, series_rows
    ):
        original = make_transaction(
            is_recurring=True,
            recurrence_frequency=RecurrenceFrequency.ANNUAL,
            status=TransactionStatus.PAID,
            payment_date=date(2024, 1, 10),
        )

        process_recurring_transactions(as_of=date(2024, 1, 15))

        occurrence = series_rows(original.id)[0]
        assert occurrence.due_date == date(2025, 1, 15)
        assert occurrence.status == TransactionStatus.PENDING
        assert occurrence.payment_date is None

    def test_count_one_terminates_without_occurrence(
        self, make_transaction, series_rows
    ):
        original = make_transaction(
            is_recurring=True,
            recurrence_frequency=RecurrenceFrequency.MONTHLY,
            recurrence_count=1,
        )

        report = process_recurring_transactions(as_of=date(2024, 1, 20))

        assert report.terminated == [original.id]
        assert report.generated == []
        assert series_rows(original.id) == []
        assert original.is_recurring is False
        assert original.due_date == date(2024, 1, 15)

    def test_end_date_terminates_without_occurrence(
        self, make_transaction, series_rows
    ):
        original = make_transaction(
            due_date=date(2024, 11, 30),
            is_recurring=True,
            recurrence_frequency=RecurrenceFrequency.QUARTERLY,
            recurrence_end_date=date(2025, 1, 1),
        )

        report = process_recurring_transactions(as_of=date(2024, 12, 1))

        assert report.terminated == [original.id]
        assert series_rows(original.id) == []
        assert original.is_recurring is False

    def test_ignores_paused_future_and_expired_rows(self, make_transaction):
        make_transaction(
            is_recurring=False, recurrence_frequency=RecurrenceFrequency.MONTHLY
        )
        make_transaction(
            due_date=date(2024, 3, 1),
            is_recurring=True,
            recurrence_frequency=RecurrenceFrequency.MONTHLY,
        )
        make_transaction(
            is_recurring=True,
            recurrence_frequency=RecurrenceFrequency.MONTHLY,
            recurrence_end_date=date(2024, 1, 31),
        )
        make_transaction(
            is_recurring=True,
            recurrence_frequency=RecurrenceFrequency.MONTHLY,
            is_deleted=True,
        )

        report = process_recurring_transactions(as_of=date(2024, 2, 1))

        assert report.processed == 0
        assert Transaction.query.count() == 4

    def test_existing_occurrence_only_moves_cursor(
        self, recurring_transaction, make_transaction, series_rows
    ):
        # An earlier run inserted the occurrence but never moved the cursor
        make_transaction(
            due_date=date(2024, 2, 15),
            recurrence_original_id=recurring_transaction.id,
            recurrence_count=2,
        )

        report = process_recurring_transactions(as_of=date(2024, 2, 1))

        assert report.generated == []
        assert report.recovered == [recurring_transaction.id]
        assert len(series_rows(recurring_transaction.id)) == 1
        assert recurring_transaction.due_date == date(2024, 2, 15)
        assert recurring_transaction.recurrence_count == 2

    def test_invalid_record_does_not_block_batch(
        self, recurring_transaction, make_transaction, series_rows
    ):
        broken = make_transaction(is_recurring=True, recurrence_frequency=None)

        report = process_recurring_transactions(as_of=date(2024, 2, 1))

        assert report.status == "partial_failure"
        assert report.failures == [
            {
                "id": str(broken.id),
                "code": "InvalidFrequency",
                "error": "Recurring transaction has no recurrence frequency",
            }
        ]
        assert len(report.generated) == 1
        assert len(series_rows(recurring_transaction.id)) == 1

        db.session.expire_all()
        assert broken.is_recurring is True
        assert broken.due_date == date(2024, 1, 15)

    def test_vanished_record_is_skipped(
        self, recurring_transaction, make_transaction, mocker
    ):
        other = make_transaction(
            is_recurring=True, recurrence_frequency=RecurrenceFrequency.MONTHLY
        )
        store = TransactionStore()
        real_get = store.get
        mocker.patch.object(
            store,
            "get",
            side_effect=lambda record_id: None
            if record_id == other.id
            else real_get(record_id),
        )

        report = process_recurring_transactions(as_of=date(2024, 2, 1), store=store)

        assert report.skipped == [other.id]
        assert report.failures == []
        assert len(report.generated) == 1

    def test_failed_update_rolls_back_insert(
        self, recurring_transaction, series_rows, mocker
    ):
        store = TransactionStore()
        mocker.patch.object(
            store, "update", side_effect=RuntimeError("connection reset")
        )

        report = process_recurring_transactions(as_of=date(2024, 2, 1), store=store)

        assert report.failures[0]["id"] == str(recurring_transaction.id)
        assert series_rows(recurring_transaction.id) == []
        assert recurring_transaction.due_date == date(2024, 1, 15)

    def test_store_unavailable_aborts_batch(self, recurring_transaction, mocker):
        store = TransactionStore()
        mocker.patch.object(
            store, "list_due", side_effect=StoreUnavailable("database is down")
        )

        with pytest.raises(StoreUnavailable):
            process_recurring_transactions(as_of=date(2024, 2, 1), store=store)

    def test_report_to_dict(self, recurring_transaction):
        report = process_recurring_transactions(as_of=date(2024, 2, 1))

        data = report.to_dict()

        assert data["as_of"] == "2024-02-01"
        assert data["status"] == "success"
        assert data["processed"] == 1
        assert data["generated_count"] == 1
        assert data["failed_count"] == 0
        assert data["generated"] == [str(report.generated[0])]


class TestConcurrentInsert:
    """Another run inserted the same occurrence after the existence check passed"""

    @pytest.fixture
    def stale_store(self, mocker):
        store = TransactionStore()
        real_exists = store.occurrence_exists
        seen = set()

        def exists_after_first_check(original_id, due_date):
            if (original_id, due_date) not in seen:
                seen.add((original_id, due_date))
                return False
            return real_exists(original_id, due_date)

        mocker.patch.object(
            store, "occurrence_exists", side_effect=exists_after_first_check
        )
        return store

    def test_unique_violation_recovers_and_batch_continues(
        self, recurring_transaction, make_transaction, series_rows, stale_store
    ):
        make_transaction(
            due_date=date(2024, 2, 15),
            recurrence_original_id=recurring_transaction.id,
            recurrence_count=2,
        )
        other = make_transaction(
            description="Software license",
            is_recurring=True,
            recurrence_frequency=RecurrenceFrequency.MONTHLY,
        )

        report = process_recurring_transactions(
            as_of=date(2024, 2, 1), store=stale_store
        )

        assert report.failures == []
        assert report.recovered == [recurring_transaction.id]
        assert len(series_rows(recurring_transaction.id)) == 1
        assert recurring_transaction.due_date == date(2024, 2, 15)
        assert recurring_transaction.recurrence_count == 2

        other_rows = series_rows(other.id)
        assert report.generated == [other_rows[0].id]
        assert other_rows[0].due_date == date(2024, 2, 15)
        assert other.due_date == date(2024, 2, 15)

    def test_other_constraint_violation_is_a_failure(
        self, recurring_transaction, series_rows, mocker
    ):
        def advance_without_description(record, as_of):
            result = advance(record, as_of)
            result.new_occurrence["description"] = None
            return result

        mocker.patch(
            "ledger.services.recurring_transaction.advance",
            side_effect=advance_without_description,
        )

        report = process_recurring_transactions(as_of=date(2024, 2, 1))

        assert report.recovered == []
        assert report.generated == []
        assert report.failures[0]["id"] == str(recurring_transaction.id)
        assert report.failures[0]["code"] == "IntegrityError"
        assert series_rows(recurring_transaction.id) == []
        assert recurring_transaction.due_date == date(2024, 1, 15)

    def test_store_insert_reraises_other_integrity_errors(
        self, recurring_transaction, owner_id
    ):
        store = TransactionStore()

        with pytest.raises(IntegrityError):
            store.insert(
                {
                    "user_id": owner_id,
                    "type": None,
                    "description": "Office rent",
                    "amount": Decimal("1500.00"),
                    "due_date": date(2024, 2, 15),
                    "recurrence_original_id": recurring_transaction.id,
                }
            )
