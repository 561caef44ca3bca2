"""
Generic paginated resource client.

`fetch_page(path, page, limit, filters)` is the one way list screens read
data. Filters go to the server verbatim as query parameters; nothing is
filtered again on the client.
"""

from typing import Any, Callable, Dict, List, Optional, Tuple

from infrastructure.external.api_client import ApiClient
from infrastructure.external.errors import ApiError
from services.resource_service.models import PaginatedResponse
from utils.logging_config import get_logger


ItemFactory = Callable[[Dict[str, Any]], Any]


def _as_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def parse_paginated_body(body: Any, page: int, limit: int) -> Tuple[List[Any], int, int, int]:
    """
    Pull (items, total, limit, page) out of the shapes the backend uses:

    - {"success": true, "data": [...], "total": n, "limit": l, "page": p}
    - {"success": true, "data": {"data": [...], "total": n, ...}}
    - either of the above with the numbers under a "pagination" object
    - a bare list
    """
    if isinstance(body, list):
        return body, len(body), limit, page

    if not isinstance(body, dict):
        raise ApiError("Unexpected response format from server")

    container = body
    data = body.get("data")
    if isinstance(data, dict) and "data" in data:
        container = data
        data = data.get("data")

    if data is None:
        data = container.get("items", [])
    if not isinstance(data, list):
        raise ApiError("Unexpected response format from server")

    meta = container.get("pagination") or body.get("pagination") or container
    if not isinstance(meta, dict):
        raise ApiError("Unexpected response format from server")
    total = _as_int(meta.get("total"), len(data))
    resolved_limit = _as_int(meta.get("limit"), limit) or limit
    resolved_page = _as_int(meta.get("page"), page) or page
    return data, total, resolved_limit, resolved_page


class PaginatedResourceClient:
    """Reads one page of any list endpoint"""

    def __init__(self, api_client: ApiClient):
        self.api = api_client
        self.logger = get_logger(__name__)

    def fetch_page(self, resource_path: str, page: int = 1, limit: int = 10,
                   filters: Optional[Dict[str, Any]] = None,
                   item_factory: Optional[ItemFactory] = None) -> PaginatedResponse:
        """
        Fetch one page

        Args:
            resource_path: List endpoint, e.g. "/bookings"
            page: 1-based page number
            limit: Page size
            filters: Extra query parameters; None values are dropped
            item_factory: Converts each raw item (e.g. Booking.from_dict)

        Returns:
            PaginatedResponse with at most `limit` items

        Raises:
            ApiError: Any transport, HTTP or envelope failure
        """
        if page < 1:
            raise ValueError("page must be >= 1")
        if limit < 1:
            raise ValueError("limit must be >= 1")

        params: Dict[str, Any] = dict(filters or {})
        params["page"] = page
        params["limit"] = limit

        body = self.api.request_envelope("GET", resource_path, params=params)
        try:
            items, total, _, resolved_page = parse_paginated_body(body, page, limit)

            if len(items) > limit:
                self.logger.warning(
                    f"{resource_path} returned {len(items)} items for limit {limit}; truncating"
                )
                items = items[:limit]

            if item_factory is not None:
                items = [item_factory(item) for item in items]
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            self.logger.error(f"Malformed {resource_path} page: {e!r}")
            raise ApiError("Unexpected response format from server") from e

        # The requested limit is authoritative for page arithmetic
        return PaginatedResponse(items=items, total=total, limit=limit, page=resolved_page)


def fetch_page(api_client: ApiClient, resource_path: str, page: int = 1, limit: int = 10,
               filters: Optional[Dict[str, Any]] = None,
               item_factory: Optional[ItemFactory] = None) -> PaginatedResponse:
    """Functional shortcut for PaginatedResourceClient(api_client).fetch_page(...)"""
    return PaginatedResourceClient(api_client).fetch_page(
        resource_path, page, limit, filters, item_factory
    )
