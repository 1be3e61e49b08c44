import uuid
from datetime import datetime

from ledger.utils.constants import DATE_FORMAT


def is_valid_uuid(value):
    """Check if a value is a valid UUID"""
    try:
        uuid.UUID(str(value))
        return True
    except (ValueError, TypeError):
        return False


def parse_date(value):
    """Parse a YYYY-MM-DD string into a date, raising ValueError on bad input"""
    return datetime.strptime(value, DATE_FORMAT).date()
