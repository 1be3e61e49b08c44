from ledger.utils.enums import RecurrenceFrequency

AMOUNT_MIN_VALUE = 0.01
AMOUNT_MAX_VALUE = 9999999999.99

MAX_PAGE_SIZE = 100

# Calendar months added per step
FREQUENCY_MONTHS = {
    RecurrenceFrequency.MONTHLY: 1,
    RecurrenceFrequency.BIMONTHLY: 2,
    RecurrenceFrequency.QUARTERLY: 3,
    RecurrenceFrequency.SEMIANNUAL: 6,
    RecurrenceFrequency.ANNUAL: 12,
}

UPCOMING_DEFAULT_LIMIT = 6
UPCOMING_MAX_LIMIT = 36

DATE_FORMAT = "%Y-%m-%d"
