from marshmallow import fields, validates_schema, ValidationError, EXCLUDE
from marshmallow.validate import Range

from ledger.extensions import ma
from ledger.models.transaction import Transaction
from ledger.utils.logger import logger
from ledger.utils.enums import (
    TransactionType,
    TransactionStatus,
    RecurrenceFrequency,
)
from ledger.utils.constants import (
    AMOUNT_MIN_VALUE as min_val,
    AMOUNT_MAX_VALUE as max_val,
)


TRANSACTION_FIELDS = (
    "id",
    "user_id",
    "type",
    "description",
    "amount",
    "due_date",
    "payment_date",
    "status",
    "is_recurring",
    "recurrence_frequency",
    "recurrence_end_date",
    "recurrence_count",
    "recurrence_original_id",
    "account_id",
    "case_id",
    "category_id",
    "observations",
    "is_deleted",
    "created_at",
    "updated_at",
)


def validate_recurrence(data, errors):
    """Cross-field rules shared by create and update"""
    if data.get("is_recurring") and not data.get("recurrence_frequency"):
        errors["recurrence_frequency"] = [
            "Recurrence frequency is required for recurring transactions"
        ]

    end_date = data.get("recurrence_end_date")
    due_date = data.get("due_date")
    if end_date and due_date and end_date < due_date:
        errors["recurrence_end_date"] = ["End date cannot be before the due date"]

    if data.get("status") == TransactionStatus.PAID and not data.get("payment_date"):
        errors["payment_date"] = ["Payment date is required for paid transactions"]


class TransactionSchema(ma.SQLAlchemyAutoSchema):
    """Schema for Transaction model - used for creation and reading"""

    class Meta:
        model = Transaction
        load_instance = True
        include_fk = True
        fields = TRANSACTION_FIELDS
        dump_only = (
            "id",
            "recurrence_original_id",
            "is_deleted",
            "created_at",
            "updated_at",
        )
        unknown = EXCLUDE

    type = fields.Enum(TransactionType, by_value=True, required=True)
    status = fields.Enum(TransactionStatus, by_value=True)
    recurrence_frequency = fields.Enum(
        RecurrenceFrequency, by_value=True, allow_none=True
    )
    recurrence_count = fields.Integer(allow_none=True, validate=Range(min=1))
    amount = fields.Decimal(
        required=True,
        places=2,
        validate=Range(min=min_val, max=max_val),
        as_string=True,
    )

    @validates_schema
    def validate_transaction(self, data, **kwargs):
        """Additional validation for the whole transaction"""
        logger.debug("Performing whole transaction validation")

        errors = {}
        validate_recurrence(data, errors)

        if errors:
            raise ValidationError(errors)

        logger.debug("Transaction validation passed")


class TransactionUpdateSchema(ma.SQLAlchemyAutoSchema):
    """Schema for updating Transaction - can't change owner or series link"""

    class Meta:
        model = Transaction
        load_instance = True
        include_fk = True
        fields = (
            "type",
            "description",
            "amount",
            "due_date",
            "payment_date",
            "status",
            "is_recurring",
            "recurrence_frequency",
            "recurrence_end_date",
            "recurrence_count",
            "account_id",
            "case_id",
            "category_id",
            "observations",
        )
        unknown = EXCLUDE

    type = fields.Enum(TransactionType, by_value=True)
    status = fields.Enum(TransactionStatus, by_value=True)
    recurrence_frequency = fields.Enum(
        RecurrenceFrequency, by_value=True, allow_none=True
    )
    recurrence_count = fields.Integer(allow_none=True, validate=Range(min=1))
    amount = fields.Decimal(
        places=2,
        validate=Range(min=min_val, max=max_val),
        as_string=True,
    )

    @validates_schema
    def validate_update_schema(self, data, **kwargs):
        """Schema-level validation for updates, merged with stored values"""
        logger.debug("Performing schema-level validation for transaction update")
        instance = self.instance

        merged = {
            name: data.get(name, getattr(instance, name))
            for name in (
                "is_recurring",
                "recurrence_frequency",
                "recurrence_end_date",
                "due_date",
                "status",
                "payment_date",
            )
        }

        errors = {}
        validate_recurrence(merged, errors)

        if (
            data.get("is_recurring")
            and not instance.is_recurring
            and instance.recurrence_original_id is not None
        ):
            errors["is_recurring"] = [
                "Generated occurrences cannot become recurring generators"
            ]

        if errors:
            raise ValidationError(errors)

        logger.debug("Transaction update validation passed")


class PaymentSchema(ma.Schema):
    """Payload for settling a transaction"""

    class Meta:
        unknown = EXCLUDE

    payment_date = fields.Date(load_default=None)


# Initialize schemas
transaction_schema = TransactionSchema()
transactions_schema = TransactionSchema(many=True)
transaction_update_schema = TransactionUpdateSchema()
payment_schema = PaymentSchema()
