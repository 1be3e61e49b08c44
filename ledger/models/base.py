import uuid
from datetime import datetime, timezone

from ledger.extensions import db


class BaseModel(db.Model):
    """Abstract base model with UUID primary key, timestamps and soft delete"""

    __abstract__ = True

    id = db.Column(db.Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    is_deleted = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(
        db.DateTime, nullable=False, default=lambda: datetime.now(timezone.utc)
    )
    updated_at = db.Column(
        db.DateTime,
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
