import uuid
from flask import Flask, request

from ledger.config import Config  # Import configuration settings
from ledger.extensions import db, migrate, ma
from ledger.urls import register_blueprints
from ledger.celery_app import make_celery
from ledger.commands import register_commands
from ledger.utils.exception_handler import handle_error
from ledger.utils.logger import logger


def create_app(test_config=None):
    """Factory function to create and configure the Flask application"""
    app = Flask(__name__)

    if test_config:
        app.config.from_object(test_config)
    else:
        app.config.from_object(Config)

    app.config["PROPAGATE_EXCEPTIONS"] = True
    logger.setLevel(str(app.config.get("LOG_LEVEL", "INFO")).upper())

    # Initialize Flask extensions
    db.init_app(app)
    migrate.init_app(app, db)
    ma.init_app(app)  # Must follow db so auto schemas get the session

    # Register Blueprints (URLs)
    register_blueprints(app)
    register_commands(app)

    app.celery = make_celery(app)
    handle_error(app)

    @app.before_request
    def validate_uuid_params():
        # Check if view_args is populated and has an 'id' key
        if request.view_args and "id" in request.view_args:
            id_value = request.view_args["id"]
            try:
                uuid.UUID(id_value)
            except ValueError:
                return {
                    "error": f"Invalid id format, it must be a UUID: {id_value}"
                }, 400

    return app


# importing all the models
from ledger import models
