from ledger.utils.logger import logger


def validation_error_response(err):
    """Build a 400 response body from a marshmallow ValidationError"""
    logger.warning(f"Validation error: {err.messages}")
    return {"error": err.messages}, 400
