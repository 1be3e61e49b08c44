from flask import request, url_for
from ledger.utils.constants import MAX_PAGE_SIZE


DEFAULT_PAGE_SIZE = 10


class PaginatedResult:
    """
    Paginates a SQLAlchemy query and formats the page with previous/next links.
    """

    def __init__(self, query, page=1, per_page=DEFAULT_PAGE_SIZE):
        self.page = max(1, page)
        self.per_page = max(1, per_page)
        self.pagination = query.paginate(
            page=self.page, per_page=self.per_page, error_out=False
        )

    @property
    def items(self):
        return self.pagination.items

    def to_dict(self, schema, endpoint=None, **kwargs):
        """
        Serialize the current page.

        Args:
            schema: Marshmallow schema used to dump items
            endpoint: Endpoint name used to build navigation links
            **kwargs: Extra URL parameters carried into the links
        """
        response = {
            "total_items": self.pagination.total,
            "total_pages": self.pagination.pages,
            "current_page": self.page,
            "per_page": self.per_page,
            "previous": None,
            "next": None,
        }

        if endpoint:
            params = dict(kwargs, per_page=self.per_page)
            if self.pagination.has_prev:
                response["previous"] = url_for(
                    endpoint, **dict(params, page=self.page - 1), _external=True
                )
            if self.pagination.has_next:
                response["next"] = url_for(
                    endpoint, **dict(params, page=self.page + 1), _external=True
                )

        response["data"] = schema.dump(self.items)
        return response


def _int_arg(kwargs, name, default):
    try:
        value = int(kwargs.pop(name, request.args.get(name, default)))
    except (ValueError, TypeError):
        return default
    return value if value > 0 else default


def paginate(query, schema, endpoint=None, **kwargs):
    """
    Paginate a query using the page and per_page request arguments.

    Returns:
        Dictionary with pagination metadata and serialized items under "data"
    """
    page = _int_arg(kwargs, "page", 1)
    per_page = min(_int_arg(kwargs, "per_page", DEFAULT_PAGE_SIZE), MAX_PAGE_SIZE)

    return PaginatedResult(query, page, per_page).to_dict(schema, endpoint, **kwargs)
