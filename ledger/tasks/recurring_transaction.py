from datetime import date
from ledger.celery_app import celery
from ledger.services.recurring_transaction import process_recurring_transactions
from ledger.utils.exceptions import StoreUnavailable
from ledger.utils.logger import logger


@celery.task(name="process_recurring_transactions", bind=True, max_retries=3)
def process_recurring_transactions_task(self, as_of=None):
    """
    Daily driver for recurring transactions.

    Args:
        as_of: Optional ISO date string; defaults to today

    Returns:
        The processing report as a dict, or False when the store stayed
        unavailable after all retries
    """
    run_date = date.fromisoformat(as_of) if as_of else date.today()

    try:
        report = process_recurring_transactions(as_of=run_date)

    except StoreUnavailable as e:
        logger.error(f"Error in process_recurring_transactions task: {e.message}")
        if self.request.retries < self.max_retries:
            raise self.retry(exc=e, countdown=60 * (self.request.retries + 1))
        return False

    if report.failures:
        logger.warning(
            f"Recurring run for {run_date} finished with {len(report.failures)} failures"
        )
    return report.to_dict()
