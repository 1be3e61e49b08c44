from celery import Celery
import os
from celery.schedules import crontab
from flask import has_app_context


_flask_app = None


def _worker_app():
    """Flask app used by tasks running inside a standalone worker process"""
    global _flask_app
    if _flask_app is None:
        from ledger import create_app

        _flask_app = create_app()
    return _flask_app


def make_celery(app=None):
    """
    Create a Celery instance that integrates with Flask application context.
    """
    celery = Celery(
        "ledger",
        broker=os.getenv("CELERY_BROKER_URL"),
        backend=os.getenv("CELERY_RESULT_BACKEND"),
        include=[
            "ledger.tasks.recurring_transaction",
        ],
    )

    celery.conf.broker_url = (
        app.config.get("CELERY_BROKER_URL") if app else "redis://localhost:6379/0"
    )
    celery.conf.result_backend = (
        app.config.get("CELERY_RESULT_BACKEND") if app else "redis://localhost:6379/0"
    )

    # Configure Celery
    celery.conf.update(
        task_serializer="json",
        accept_content=["json"],
        result_serializer="json",
        timezone="UTC",
        task_track_started=True,
        worker_max_tasks_per_child=1000,
        task_acks_late=True,
        broker_connection_retry_on_startup=True,
        worker_hijack_root_logger=False,
        task_always_eager=app.config.get("CELERY_TASK_ALWAYS_EAGER", False)
        if app
        else False,
    )

    hour = app.config.get("RECURRING_SCHEDULE_HOUR", 2) if app else 2
    minute = app.config.get("RECURRING_SCHEDULE_MINUTE", 0) if app else 0

    # Configure Celery Beat Schedule
    celery.conf.beat_schedule = {
        "process-recurring-transactions-daily": {
            "task": "process_recurring_transactions",
            "schedule": crontab(hour=hour, minute=minute),
        },
    }

    class ContextTask(celery.Task):
        def __call__(self, *args, **kwargs):
            if app:
                with app.app_context():
                    return self.run(*args, **kwargs)
            elif has_app_context():
                return self.run(*args, **kwargs)
            else:
                with _worker_app().app_context():
                    return self.run(*args, **kwargs)

    celery.Task = ContextTask
    return celery


# Create a celery instance without Flask app for task definitions
celery = make_celery()
