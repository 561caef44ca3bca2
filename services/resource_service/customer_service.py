"""
Customer service - customers CRUD, histories, loyalty points and export.
"""

from typing import Any, Dict, Optional

from services.resource_service.base import ResourceService
from services.resource_service.models import Booking, Customer, PaginatedResponse, Payment


class CustomerService(ResourceService):
    """Customers at `/customers`"""

    def __init__(self, api_client):
        super().__init__(api_client, "/customers", Customer.from_dict)

    def get_booking_history(self, customer_id: str, page: int = 1,
                            limit: int = 10) -> PaginatedResponse:
        return self.pages.fetch_page(self._url(customer_id, "bookings"), page, limit,
                                     item_factory=Booking.from_dict)

    def get_payment_history(self, customer_id: str, page: int = 1,
                            limit: int = 10) -> PaginatedResponse:
        return self.pages.fetch_page(self._url(customer_id, "payments"), page, limit,
                                     item_factory=Payment.from_dict)

    def add_loyalty_points(self, customer_id: str, points: int,
                           reason: Optional[str] = None) -> Customer:
        if points == 0:
            raise ValueError("points must be non-zero")
        payload: Dict[str, Any] = {"points": points}
        if reason:
            payload["reason"] = reason
        return self._build(self.api.post(self._url(customer_id, "loyalty-points"), payload))

    def get_statistics(self) -> Dict[str, Any]:
        return self.api.get(self._url("statistics"))

    def export(self, filters: Optional[Dict[str, Any]] = None) -> bytes:
        return self.api.get_bytes(self._url("export"), params=filters)
