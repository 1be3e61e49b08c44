import enum


class TransactionType(enum.Enum):
    """Enum for transaction types"""

    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


class TransactionStatus(enum.Enum):
    """Enum for transaction payment status"""

    PENDING = "PENDING"
    PAID = "PAID"


class RecurrenceFrequency(enum.Enum):
    """Enum for recurrence frequency"""

    MONTHLY = "MONTHLY"
    BIMONTHLY = "BIMONTHLY"
    QUARTERLY = "QUARTERLY"
    SEMIANNUAL = "SEMIANNUAL"
    ANNUAL = "ANNUAL"
