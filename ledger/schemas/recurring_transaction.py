from marshmallow import fields, EXCLUDE
from marshmallow.validate import Range

from ledger.extensions import ma
from ledger.utils.constants import UPCOMING_DEFAULT_LIMIT, UPCOMING_MAX_LIMIT


class RecurringToggleSchema(ma.Schema):
    """Payload for pausing or resuming a recurring generator"""

    class Meta:
        unknown = EXCLUDE

    is_recurring = fields.Boolean(required=True)


class ProcessRequestSchema(ma.Schema):
    """Payload for an on-demand recurring run"""

    class Meta:
        unknown = EXCLUDE

    as_of = fields.Date(load_default=None)


class UpcomingQuerySchema(ma.Schema):
    """Query string for previewing upcoming due dates"""

    class Meta:
        unknown = EXCLUDE

    limit = fields.Integer(
        load_default=UPCOMING_DEFAULT_LIMIT,
        validate=Range(min=1, max=UPCOMING_MAX_LIMIT),
    )


recurring_toggle_schema = RecurringToggleSchema()
process_request_schema = ProcessRequestSchema()
upcoming_query_schema = UpcomingQuerySchema()
