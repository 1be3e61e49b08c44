from flask import Blueprint
from flask_restful import Api
from ledger.resources.recurring_transaction import (
    RecurringTransactionListResource,
    RecurringProcessResource,
    RecurringToggleResource,
    RecurringUpcomingResource,
    RecurringSeriesResource,
)


recurring_transaction_bp = Blueprint("recurring_transaction", __name__)
recurring_transaction_api = Api(recurring_transaction_bp)

recurring_transaction_api.add_resource(
    RecurringTransactionListResource, "", endpoint="recurring_transactions"
)
recurring_transaction_api.add_resource(
    RecurringProcessResource, "/process", endpoint="recurring-transaction-process"
)
recurring_transaction_api.add_resource(
    RecurringToggleResource, "/<id>/toggle", endpoint="recurring-transaction-toggle"
)
recurring_transaction_api.add_resource(
    RecurringUpcomingResource,
    "/<id>/upcoming",
    endpoint="recurring-transaction-upcoming",
)
recurring_transaction_api.add_resource(
    RecurringSeriesResource, "/<id>/series", endpoint="recurring-transaction-series"
)
