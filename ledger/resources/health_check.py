from flask import Blueprint
from flask_restful import Api, Resource
from sqlalchemy import text
from sqlalchemy.exc import OperationalError
from ledger.extensions import db

health_bp = Blueprint("health", __name__)
health_api = Api(health_bp)


class HealthCheckResource(Resource):
    def get(self):
        try:
            db.session.execute(text("SELECT 1;"))
            return {"message": "Database is healthy"}, 200

        except OperationalError as e:
            return {"message": "Database connection failed", "error": str(e)}, 500


health_api.add_resource(HealthCheckResource, "/health-check")
