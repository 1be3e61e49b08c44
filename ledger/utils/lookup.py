import uuid
from functools import wraps

from flask import g

from ledger.extensions import db
from ledger.utils.logger import logger


def object_lookup(model_class, id_param="id"):
    """
    Decorator that loads a non-deleted object by id into g.object.
    """

    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):

            object_id = kwargs.get(id_param)
            if not object_id:
                logger.warning(f"Missing {id_param} in request")
                return {"error": "Missing object ID"}, 400

            obj = db.session.get(model_class, uuid.UUID(object_id))
            if not obj or obj.is_deleted:
                logger.error(f"{model_class.__name__} not found for ID: {object_id}")
                return {"error": f"{model_class.__name__} not found."}, 404

            g.object = obj
            return fn(*args, **kwargs)

        return wrapper

    return decorator
