"""
Dashboard service - headline statistics and analytics for the dashboard page.

When the backend is unreachable and demo mode is on, `get_stats()` serves
fixed sample numbers instead of failing.
"""

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from config.app_config import get_config
from infrastructure.external.api_client import ApiClient
from infrastructure.external.errors import NetworkError
from services.resource_service.models import Booking
from utils.logging_config import get_logger


MOCK_DASHBOARD_STATS: Dict[str, Any] = {
    "totalCustomers": 456,
    "totalBookings": 1234,
    "totalRevenue": "15750000",
    "averageRating": 4.8,
    "todayBookings": 23,
    "monthlyBookings": 342,
    "pendingBookings": 8,
    "completedBookings": 18,
    "cancelledBookings": 5,
    "topStylists": [
        {"id": "1", "name": "Ahmad Stylist", "rating": 4.9, "totalBookings": 156, "revenue": "2450000"},
        {"id": "2", "name": "Budi Barber", "rating": 4.8, "totalBookings": 134, "revenue": "2100000"},
        {"id": "3", "name": "Candra Hair", "rating": 4.7, "totalBookings": 128, "revenue": "1980000"},
    ],
    "recentBookings": [
        {
            "id": "1",
            "customerId": "c1",
            "customer": {"id": "c1", "fullName": "John Doe"},
            "stylistId": "s1",
            "stylist": {"id": "s1", "user": {"fullName": "Ahmad Stylist"}},
            "serviceId": "sv1",
            "service": {"id": "sv1", "name": "Classic Hair Cut"},
            "bookingDate": "2024-01-20",
            "startTime": "10:00",
            "endTime": "10:45",
            "status": "CONFIRMED",
            "notes": "Customer prefers shorter sides",
            "totalPrice": "50000",
            "createdAt": "2024-01-15T08:00:00Z",
            "updatedAt": "2024-01-15T08:00:00Z",
        },
    ],
    "monthlyRevenue": [
        {"month": "Jan", "revenue": "12500000", "bookings": 156},
        {"month": "Feb", "revenue": "14200000", "bookings": 178},
        {"month": "Mar", "revenue": "15750000", "bookings": 195},
    ],
    "bookingsByStatus": [
        {"status": "COMPLETED", "count": 890, "percentage": 72.1},
        {"status": "CONFIRMED", "count": 156, "percentage": 12.6},
        {"status": "PENDING", "count": 98, "percentage": 7.9},
        {"status": "CANCELLED", "count": 67, "percentage": 5.4},
        {"status": "NO_SHOW", "count": 23, "percentage": 1.9},
    ],
}


@dataclass
class DashboardStats:
    """Dashboard numbers plus whether they came from the sample data"""
    data: Dict[str, Any] = field(default_factory=dict)
    is_mock: bool = False

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    @property
    def recent_bookings(self) -> List[Booking]:
        return [Booking.from_dict(item) for item in self.data.get("recentBookings") or []]


class DashboardService:
    """Reads `/dashboard/*`"""

    def __init__(self, api_client: ApiClient, demo_mode_enabled: Optional[bool] = None):
        self.api = api_client
        if demo_mode_enabled is None:
            demo_mode_enabled = get_config().auth.demo_mode_enabled
        self.demo_mode_enabled = demo_mode_enabled
        self.logger = get_logger(__name__)

    def get_stats(self, filters: Optional[Dict[str, Any]] = None) -> DashboardStats:
        """
        Fetch headline statistics

        Raises:
            NetworkError: Backend unreachable and demo mode disabled
            ApiError: Any other failure, in or out of demo mode
        """
        try:
            data = self.api.get("/dashboard/stats", params=filters)
        except NetworkError as e:
            if not self.demo_mode_enabled:
                raise
            self.logger.warning(f"Dashboard stats unavailable ({e}); serving demo data")
            return DashboardStats(data=copy.deepcopy(MOCK_DASHBOARD_STATS), is_mock=True)
        return DashboardStats(data=data or {})

    def get_revenue_analytics(self, filters: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return self.api.get("/dashboard/analytics/revenue", params=filters)

    def get_booking_analytics(self, filters: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return self.api.get("/dashboard/analytics/bookings", params=filters)

    def get_customer_analytics(self, filters: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return self.api.get("/dashboard/analytics/customers", params=filters)

    def get_stylist_analytics(self, filters: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return self.api.get("/dashboard/analytics/stylists", params=filters)

    def get_recent_bookings(self, limit: int = 10) -> List[Booking]:
        data = self.api.get("/dashboard/recent-bookings", params={"limit": limit}) or []
        return [Booking.from_dict(item) for item in data]

    def get_monthly_revenue(self, months: int = 12) -> List[Dict[str, Any]]:
        return self.api.get("/dashboard/monthly-revenue", params={"months": months}) or []
