from flask_restful import Resource
from flask import g, request
from marshmallow import ValidationError

from ledger.models.transaction import Transaction
from ledger.schemas.transaction import transaction_schema, transactions_schema
from ledger.schemas.recurring_transaction import (
    recurring_toggle_schema,
    process_request_schema,
    upcoming_query_schema,
)
from ledger.services.recurrence import upcoming_due_dates
from ledger.services.recurring_transaction import (
    get_recurring_transactions,
    process_recurring_transactions,
    set_recurring_status,
    get_series_occurrences,
)
from ledger.utils.exceptions import RecurrenceError, StoreUnavailable
from ledger.utils.lookup import object_lookup
from ledger.utils.responses import validation_error_response
from ledger.utils.pagination import paginate
from ledger.utils.logger import logger


class RecurringTransactionListResource(Resource):
    """Resource for listing active recurring generators"""

    def get(self):
        try:
            query_params = request.args.to_dict()
            query = get_recurring_transactions(query_params)

            return (
                paginate(
                    query,
                    transactions_schema,
                    endpoint="recurring_transaction.recurring_transactions",
                ),
                200,
            )

        except ValidationError as err:
            return validation_error_response(err)


class RecurringProcessResource(Resource):
    """Resource for running the recurring transaction driver on demand"""

    def post(self):
        try:
            data = process_request_schema.load(request.get_json(silent=True) or {})
        except ValidationError as err:
            return validation_error_response(err)

        try:
            report = process_recurring_transactions(as_of=data["as_of"])
        except StoreUnavailable as e:
            logger.error(f"Recurring run aborted: {e.message}")
            return e.to_dict(), 503

        status_code = 207 if report.failures else 200
        return report.to_dict(), status_code


class RecurringToggleResource(Resource):
    """Resource for pausing or resuming a recurring generator"""

    method_decorators = [object_lookup(Transaction)]

    def patch(self, id):
        try:
            data = recurring_toggle_schema.load(request.get_json() or {})
            transaction = set_recurring_status(g.object, data["is_recurring"])
            return transaction_schema.dump(transaction), 200

        except ValidationError as err:
            return validation_error_response(err)

        except RecurrenceError as e:
            return e.to_dict(), e.status_code


class RecurringUpcomingResource(Resource):
    """Resource previewing the next due dates of a generator"""

    method_decorators = [object_lookup(Transaction)]

    def get(self, id):
        try:
            params = upcoming_query_schema.load(request.args.to_dict())
            dates = upcoming_due_dates(g.object, params["limit"])

        except ValidationError as err:
            return validation_error_response(err)

        except RecurrenceError as e:
            return e.to_dict(), 422

        return {
            "id": str(g.object.id),
            "upcoming": [d.isoformat() for d in dates],
        }, 200


class RecurringSeriesResource(Resource):
    """Resource listing occurrences generated for a series"""

    method_decorators = [object_lookup(Transaction)]

    def get(self, id):
        query = get_series_occurrences(g.object)
        return (
            paginate(
                query,
                transactions_schema,
                endpoint="recurring_transaction.recurring-transaction-series",
                id=id,
            ),
            200,
        )
