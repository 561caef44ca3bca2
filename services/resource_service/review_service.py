"""
Review service - moderation and per-user/stylist/service lookups.
"""

from typing import Any, Dict, List, Optional

from services.resource_service.base import ResourceService
from services.resource_service.models import Review


class ReviewService(ResourceService):
    """Reviews at `/reviews`"""

    def __init__(self, api_client):
        super().__init__(api_client, "/reviews", Review.from_dict)

    def approve(self, review_id: str) -> Review:
        return self._build(self.api.patch(self._url(review_id, "approve"), {}))

    def reject(self, review_id: str, reason: Optional[str] = None) -> Review:
        return self._build(self.api.patch(self._url(review_id, "reject"), {"reason": reason}))

    def get_by_user(self, user_id: str) -> List[Review]:
        return self._build_list(self.api.get(self._url("user", user_id)))

    def get_by_stylist(self, stylist_id: str) -> List[Review]:
        return self._build_list(self.api.get(self._url("stylist", stylist_id)))

    def get_by_service(self, service_id: str) -> List[Review]:
        return self._build_list(self.api.get(self._url("service", service_id)))

    def get_statistics(self) -> Dict[str, Any]:
        return self.api.get(self._url("statistics"))
