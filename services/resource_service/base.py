"""
Shared CRUD for REST resources.
"""

from typing import Any, Callable, Dict, List, Optional

from infrastructure.external.api_client import ApiClient
from services.resource_service.models import PaginatedResponse
from services.resource_service.paginated_client import PaginatedResourceClient
from utils.logging_config import get_logger


class ResourceService:
    """
    CRUD over `<base_path>` and `<base_path>/<id>`

    Subclasses bind a path and an item factory and add the domain actions
    of their resource.
    """

    base_path: str = ""
    # Some resources update with PATCH rather than PUT
    update_method: str = "PUT"

    def __init__(self, api_client: ApiClient, base_path: Optional[str] = None,
                 item_factory: Optional[Callable[[Dict[str, Any]], Any]] = None):
        self.api = api_client
        if base_path is not None:
            self.base_path = base_path
        self.item_factory = item_factory
        self.pages = PaginatedResourceClient(api_client)
        self.logger = get_logger(self.__class__.__module__)

    def _url(self, *parts: Any) -> str:
        return "/".join([self.base_path.rstrip("/")] + [str(p) for p in parts])

    def _build(self, data: Any) -> Any:
        if self.item_factory is None or not isinstance(data, dict):
            return data
        return self.item_factory(data)

    def _build_list(self, data: Any) -> List[Any]:
        return [self._build(item) for item in (data or [])]

    def list_page(self, page: int = 1, limit: int = 10,
                  filters: Optional[Dict[str, Any]] = None) -> PaginatedResponse:
        return self.pages.fetch_page(self.base_path, page, limit, filters, self.item_factory)

    def get(self, item_id: str) -> Any:
        return self._build(self.api.get(self._url(item_id)))

    def create(self, data: Dict[str, Any]) -> Any:
        created = self._build(self.api.post(self.base_path, data))
        self.logger.info(f"Created {self.base_path} item")
        return created

    def update(self, item_id: str, data: Dict[str, Any]) -> Any:
        return self._build(self.api.request(self.update_method, self._url(item_id), json=data))

    def delete(self, item_id: str):
        self.api.delete(self._url(item_id))
        self.logger.info(f"Deleted {self._url(item_id)}")
