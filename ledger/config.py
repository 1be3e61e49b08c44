import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _database_uri():
    if os.getenv("DATABASE_URL"):
        return os.getenv("DATABASE_URL")
    return (
        f"postgresql://"
        f"{os.getenv('DB_USER')}:"
        f"{os.getenv('DB_PASSWORD')}@"
        f"{os.getenv('DB_HOST', 'localhost')}:"
        f"{os.getenv('DB_PORT', '5432')}/"
        f"{os.getenv('DB_NAME')}"
    )


class Config:
    """Base configuration class."""

    SECRET_KEY = os.getenv("SECRET_KEY", "secret-key")
    SQLALCHEMY_DATABASE_URI = _database_uri()
    SQLALCHEMY_TRACK_MODIFICATIONS = False  # Required for Flask-SQLAlchemy
    SQLALCHEMY_ENGINE_OPTIONS = {"pool_pre_ping": True}
    FLASK_ENV = os.getenv("FLASK_ENV")
    FLASK_DEBUG = os.getenv("FLASK_DEBUG")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Celery
    CELERY_BROKER_URL = os.getenv("CELERY_BROKER_URL", "redis://localhost:6379/0")
    CELERY_RESULT_BACKEND = os.getenv(
        "CELERY_RESULT_BACKEND", "redis://localhost:6379/0"
    )
    CELERY_TASK_ALWAYS_EAGER = False

    # Daily run of the recurring transaction driver (UTC)
    RECURRING_SCHEDULE_HOUR = int(os.getenv("RECURRING_SCHEDULE_HOUR", "2"))
    RECURRING_SCHEDULE_MINUTE = int(os.getenv("RECURRING_SCHEDULE_MINUTE", "0"))


class TestConfig(Config):
    """Test configuration."""

    TESTING = True

    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite://")
    SQLALCHEMY_ENGINE_OPTIONS = {}

    # Run Celery tasks synchronously for testing
    CELERY_TASK_ALWAYS_EAGER = True
    CELERY_BROKER_URL = "memory://"
    CELERY_RESULT_BACKEND = "cache+memory://"
