"""
Stylist service.
"""

from typing import Any, Dict, List, Optional

from services.resource_service.base import ResourceService
from services.resource_service.models import Stylist


class StylistService(ResourceService):
    """Stylists at `/stylists`; updates use PATCH"""

    update_method = "PATCH"

    def __init__(self, api_client):
        super().__init__(api_client, "/stylists", Stylist.from_dict)

    def list_all(self, filters: Optional[Dict[str, Any]] = None) -> List[Stylist]:
        """Unpaginated listing, used for pickers"""
        data = self.api.get(self.base_path, params=filters)
        # Tolerate a paginated body from newer backends
        if isinstance(data, dict):
            data = data.get("data") or data.get("items") or []
        return self._build_list(data)
