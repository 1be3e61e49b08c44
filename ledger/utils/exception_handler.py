from marshmallow import ValidationError
from werkzeug.exceptions import HTTPException

from ledger.utils.exceptions import RecurrenceError
from ledger.utils.logger import logger
from ledger.utils.responses import validation_error_response


def handle_error(app):
    """Register JSON error handlers on the application"""

    @app.errorhandler(ValidationError)
    def handle_validation_error(err):
        return validation_error_response(err)

    @app.errorhandler(RecurrenceError)
    def handle_recurrence_error(err):
        logger.warning(f"{err.__class__.__name__}: {err.message}")
        return err.to_dict(), err.status_code

    @app.errorhandler(HTTPException)
    def handle_http_exception(err):
        return {"error": err.description}, err.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(err):
        logger.exception(f"Unhandled error: {str(err)}")
        return {"error": "Internal server error"}, 500
