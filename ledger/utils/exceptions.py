class RecurrenceError(Exception):
    """Base class for recurring transaction processing errors"""

    status_code = 400

    def __init__(self, message, record_id=None):
        super().__init__(message)
        self.message = message
        self.record_id = record_id

    def to_dict(self):
        return {"error": self.message, "code": self.__class__.__name__}


class InvalidFrequency(RecurrenceError):
    """Recurring record has no usable recurrence frequency"""


class PreconditionViolation(RecurrenceError):
    """Engine called on a record that is not eligible for advancing"""


class DuplicateKey(RecurrenceError):
    """An occurrence for the same series and due date already exists"""

    status_code = 409


class NotFound(RecurrenceError):
    """Record vanished between read and write"""

    status_code = 404


class StoreUnavailable(RecurrenceError):
    """The record store cannot be reached; processing must stop"""

    status_code = 503
