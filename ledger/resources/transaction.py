from flask_restful import Resource
from flask import g, request
from marshmallow import ValidationError

from ledger.models.transaction import Transaction
from ledger.schemas.transaction import (
    transaction_schema,
    transactions_schema,
    transaction_update_schema,
    payment_schema,
)
from ledger.services.transaction import (
    get_transactions,
    create_transaction,
    update_transaction,
    mark_transaction_paid,
    delete_transaction,
)
from ledger.utils.lookup import object_lookup
from ledger.utils.responses import validation_error_response
from ledger.utils.pagination import paginate
from ledger.utils.logger import logger


class TransactionListResource(Resource):
    """Resource for listing and creating transactions"""

    def get(self):
        """Get paginated list of transactions with filtering"""
        try:
            query_params = request.args.to_dict()

            logger.info(f"Transactions list requested with filters: {query_params}")
            query = get_transactions(query_params)

            return (
                paginate(
                    query=query,
                    schema=transactions_schema,
                    endpoint="transaction.transactions",
                ),
                200,
            )

        except ValidationError as err:
            return validation_error_response(err)

    def post(self):
        """Create a new transaction"""
        try:
            data = request.get_json() or {}

            logger.info(f"Creating transaction: {data}")

            transaction = transaction_schema.load(data)
            result = create_transaction(transaction)

            if isinstance(result, tuple):
                return result

            logger.info(f"Transaction created successfully with ID {result.id}")
            return transaction_schema.dump(result), 201

        except ValidationError as err:
            return validation_error_response(err)


class TransactionDetailResource(Resource):
    """Resource for retrieving, updating and deleting a transaction"""

    method_decorators = [object_lookup(Transaction)]

    def get(self, id):
        """Get a specific transaction"""
        return transaction_schema.dump(g.object), 200

    def patch(self, id):
        """Update a specific transaction"""
        try:
            data = request.get_json() or {}

            logger.info(f"Updating transaction {id}: {data}")

            transaction = transaction_update_schema.load(
                data, instance=g.object, partial=True
            )
            result = update_transaction(transaction)

            if isinstance(result, tuple):
                return result

            return transaction_schema.dump(result), 200

        except ValidationError as err:
            return validation_error_response(err)

    def delete(self, id):
        """Soft delete a specific transaction"""
        result = delete_transaction(g.object)

        if isinstance(result, tuple):
            return result

        return "", 204


class TransactionPaymentResource(Resource):
    """Resource for settling a transaction"""

    method_decorators = [object_lookup(Transaction)]

    def post(self, id):
        try:
            data = payment_schema.load(request.get_json(silent=True) or {})
            result = mark_transaction_paid(g.object, data["payment_date"])

            if isinstance(result, tuple):
                return result

            return transaction_schema.dump(result), 200

        except ValidationError as err:
            return validation_error_response(err)
