from ledger.models.transaction import Transaction
