from decimal import Decimal
from ledger.extensions import db
from ledger.models.base import BaseModel
from ledger.utils.enums import (
    TransactionType,
    TransactionStatus,
    RecurrenceFrequency,
)


class Transaction(BaseModel):
    """Receivable or payable entry, optionally acting as a recurring generator"""

    __tablename__ = "transactions"

    user_id = db.Column(db.Uuid(as_uuid=True), nullable=False, index=True)
    type = db.Column(db.Enum(TransactionType, name="transaction_type"), nullable=False)
    description = db.Column(db.Text, nullable=False)
    amount = db.Column(db.Numeric(12, 2), nullable=False)

    due_date = db.Column(db.Date, nullable=False, index=True)
    payment_date = db.Column(db.Date, nullable=True, default=None)
    status = db.Column(
        db.Enum(TransactionStatus, name="transaction_status"),
        nullable=False,
        default=TransactionStatus.PENDING,
    )

    # Recurrence
    is_recurring = db.Column(db.Boolean, nullable=False, default=False, index=True)
    recurrence_frequency = db.Column(
        db.Enum(RecurrenceFrequency, name="recurrence_frequency"), nullable=True
    )
    recurrence_end_date = db.Column(db.Date, nullable=True, default=None)
    recurrence_count = db.Column(db.Integer, nullable=True, default=None)
    recurrence_original_id = db.Column(
        db.Uuid(as_uuid=True),
        db.ForeignKey("transactions.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    # Opaque references, owned by other parts of the office application
    account_id = db.Column(db.Uuid(as_uuid=True), nullable=True, index=True)
    case_id = db.Column(db.Uuid(as_uuid=True), nullable=True, index=True)
    category_id = db.Column(db.Uuid(as_uuid=True), nullable=True)

    observations = db.Column(db.Text, nullable=True)

    original = db.relationship(
        "Transaction",
        remote_side="Transaction.id",
        backref=db.backref("occurrences", lazy="dynamic"),
    )

    __table_args__ = (
        db.UniqueConstraint(
            "recurrence_original_id", "due_date", name="unique_series_occurrence"
        ),
    )

    def __repr__(self):
        return f"<Transaction {self.user_id} | {self.type.value} {self.amount} due {self.due_date}>"

    @property
    def get_amount(self):
        """Return amount as a Python Decimal object"""
        return Decimal(str(self.amount))

    @property
    def series_root_id(self):
        """Id of the first row of the series this row belongs to"""
        return self.recurrence_original_id or self.id
