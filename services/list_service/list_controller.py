"""
List screen controller - filter, page and item state for one list screen.

Every fetch is tagged with a sequence number and only the response to the
latest-issued request is applied, so a slow page-2 response can never
overwrite the results of a filter change made after it was sent.
"""

import threading
from concurrent.futures import Executor, Future
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Union

from config.app_config import get_config
from infrastructure.external.errors import ApiError
from services.resource_service.models import PaginatedResponse, compute_total_pages
from utils.logging_config import get_logger, log_execution_time


class ListStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    ERRORED = "errored"


@dataclass(frozen=True)
class FetchTicket:
    """Parameters of one issued request"""
    sequence: int
    page: int
    limit: int
    filters: Dict[str, Any]


@dataclass(frozen=True)
class ListState:
    """Snapshot for rendering"""
    items: List[Any]
    page: int
    limit: int
    filters: Dict[str, Any]
    total: int
    total_pages: int
    status: ListStatus
    error: Optional[str] = None
    sequence: int = 0
    is_loading: bool = field(init=False, default=False)

    def __post_init__(self):
        object.__setattr__(self, "is_loading", self.status == ListStatus.LOADING)


def _item_id(item: Any) -> Any:
    if isinstance(item, dict):
        return item.get("id")
    return getattr(item, "id", None)


def _is_blank(value: Any) -> bool:
    return value is None or value == ""


class ListScreenController:
    """
    State holder for a paginated, filterable list screen

    Args:
        service: Anything with `list_page(page, limit, filters)`; CRUD helpers
            also use its `create`, `update` and `delete`
        limit: Page size (defaults to the configured pagination default)
        filters: Initial filters
        executor: When given, fetches run on it and `load()` returns a Future
        on_change: Called with a ListState after every state change
    """

    def __init__(self, service, limit: Optional[int] = None,
                 filters: Optional[Dict[str, Any]] = None,
                 executor: Optional[Executor] = None,
                 on_change: Optional[Callable[[ListState], None]] = None,
                 name: Optional[str] = None):
        if limit is None:
            limit = get_config().pagination.default_limit
        if limit < 1:
            raise ValueError("limit must be >= 1")

        self.service = service
        self.executor = executor
        self.on_change = on_change
        self.name = name or getattr(service, "base_path", "") or "list"
        self.logger = get_logger(__name__)

        self.page = 1
        self.limit = limit
        self.filters: Dict[str, Any] = {k: v for k, v in (filters or {}).items() if not _is_blank(v)}
        self.items: List[Any] = []
        self.total = 0
        self.total_pages = 0
        self.status = ListStatus.IDLE
        self.error: Optional[str] = None

        self._sequence = 0
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Snapshot
    # ------------------------------------------------------------------

    def state(self) -> ListState:
        with self._lock:
            return ListState(
                items=list(self.items),
                page=self.page,
                limit=self.limit,
                filters=dict(self.filters),
                total=self.total,
                total_pages=self.total_pages,
                status=self.status,
                error=self.error,
                sequence=self._sequence,
            )

    def _changed(self):
        if self.on_change is not None:
            self.on_change(self.state())

    # ------------------------------------------------------------------
    # Request bookkeeping
    # ------------------------------------------------------------------

    def begin_request(self) -> FetchTicket:
        """Issue a new sequence number for the current page and filters"""
        with self._lock:
            self._sequence += 1
            self.status = ListStatus.LOADING
            ticket = FetchTicket(
                sequence=self._sequence,
                page=self.page,
                limit=self.limit,
                filters=dict(self.filters),
            )
        self._changed()
        return ticket

    def is_current(self, ticket: FetchTicket) -> bool:
        with self._lock:
            return ticket.sequence == self._sequence

    def apply_response(self, ticket: FetchTicket, response: PaginatedResponse) -> bool:
        """
        Apply a fetched page if it answers the latest request

        Returns:
            False when the response was stale and discarded
        """
        refetch = False
        with self._lock:
            if ticket.sequence != self._sequence:
                self.logger.debug(
                    f"Discarding stale {self.name} response #{ticket.sequence} "
                    f"(latest #{self._sequence})"
                )
                return False

            self.items = list(response.items)
            self.total = response.total
            self.total_pages = compute_total_pages(response.total, ticket.limit)
            self.status = ListStatus.LOADED
            self.error = None

            # A shrunken result set can leave us past the last page
            if self.total_pages > 0 and self.page > self.total_pages:
                self.page = self.total_pages
                refetch = True

        self._changed()
        if refetch:
            self.logger.info(f"{self.name}: page past end, clamping to {self.page}")
            self.load()
        return True

    def apply_error(self, ticket: FetchTicket, error: BaseException) -> bool:
        """Record a failed fetch; items and totals keep their previous values"""
        with self._lock:
            if ticket.sequence != self._sequence:
                return False
            self.status = ListStatus.ERRORED
            self.error = str(error) or "Failed to load data"
        self._changed()
        return True

    def _run(self, ticket: FetchTicket) -> bool:
        try:
            with log_execution_time(self.logger, f"fetch {self.name}", page=ticket.page,
                                    limit=ticket.limit, sequence=ticket.sequence):
                response = self.service.list_page(ticket.page, ticket.limit, dict(ticket.filters))
        except ApiError as e:
            return self.apply_error(ticket, e)
        except Exception as e:
            self.apply_error(ticket, e)
            raise
        return self.apply_response(ticket, response)

    # ------------------------------------------------------------------
    # Fetch triggers
    # ------------------------------------------------------------------

    def load(self) -> Union[bool, Future]:
        """
        Fetch the current page

        Returns:
            Whether the response was applied, or a Future of that when an
            executor is configured
        """
        ticket = self.begin_request()
        if self.executor is not None:
            return self.executor.submit(self._run, ticket)
        return self._run(ticket)

    def refresh(self) -> Union[bool, Future]:
        return self.load()

    def set_filters(self, **changes) -> Optional[Union[bool, Future]]:
        """
        Merge filter changes; None or "" removes a filter

        Resets to page 1 and fetches once. Returns None (no fetch) when
        nothing actually changed.
        """
        with self._lock:
            updated = dict(self.filters)
            for key, value in changes.items():
                if _is_blank(value):
                    updated.pop(key, None)
                else:
                    updated[key] = value
            if updated == self.filters:
                return None
            self.filters = updated
            self.page = 1
        return self.load()

    def set_filter(self, name: str, value: Any) -> Optional[Union[bool, Future]]:
        return self.set_filters(**{name: value})

    def clear_filters(self) -> Optional[Union[bool, Future]]:
        with self._lock:
            if not self.filters:
                return None
            self.filters = {}
            self.page = 1
        return self.load()

    def set_limit(self, limit: int) -> Optional[Union[bool, Future]]:
        if limit < 1:
            raise ValueError("limit must be >= 1")
        with self._lock:
            if limit == self.limit:
                return None
            self.limit = limit
            self.page = 1
        return self.load()

    def set_page(self, page: int) -> Union[bool, Future]:
        """Go to a page, clamped to [1, total_pages] once the page count is known"""
        with self._lock:
            page = max(1, int(page))
            if self.total_pages > 0:
                page = min(page, self.total_pages)
            self.page = page
        return self.load()

    def next_page(self) -> Optional[Union[bool, Future]]:
        with self._lock:
            if self.total_pages > 0 and self.page >= self.total_pages:
                return None
            target = self.page + 1
        return self.set_page(target)

    def previous_page(self) -> Optional[Union[bool, Future]]:
        with self._lock:
            if self.page <= 1:
                return None
            target = self.page - 1
        return self.set_page(target)

    # ------------------------------------------------------------------
    # Optimistic mutations
    # ------------------------------------------------------------------
    # These patch the current page only. Page, total and total_pages are
    # left alone until the next fetch brings them back in line.

    def apply_created(self, item: Any):
        with self._lock:
            self.items = self.items + [item]
        self._changed()

    def apply_updated(self, item: Any) -> bool:
        target = _item_id(item)
        with self._lock:
            for index, existing in enumerate(self.items):
                if _item_id(existing) == target:
                    items = list(self.items)
                    items[index] = item
                    self.items = items
                    break
            else:
                return False
        self._changed()
        return True

    def apply_deleted(self, item_id: Any) -> bool:
        with self._lock:
            for index, existing in enumerate(self.items):
                if _item_id(existing) == item_id:
                    self.items = self.items[:index] + self.items[index + 1:]
                    break
            else:
                return False
        self._changed()
        return True

    def create(self, data: Dict[str, Any]) -> Any:
        item = self.service.create(data)
        self.apply_created(item)
        return item

    def update(self, item_id: Any, data: Dict[str, Any]) -> Any:
        item = self.service.update(item_id, data)
        self.apply_updated(item)
        return item

    def delete(self, item_id: Any):
        self.service.delete(item_id)
        self.apply_deleted(item_id)

    def perform(self, action: Callable[..., Any], *args, **kwargs) -> Any:
        """Run a service call that returns the changed record (e.g. a status change) and apply it"""
        item = action(*args, **kwargs)
        self.apply_updated(item)
        return item
