"""
Booking service - bookings CRUD plus status transitions, availability and exports.
"""

from typing import Any, Dict, List, Optional, Union

from services.resource_service.base import ResourceService
from services.resource_service.models import Booking, BookingStatus, PaginatedResponse


class BookingService(ResourceService):
    """Bookings at `/bookings`"""

    def __init__(self, api_client):
        super().__init__(api_client, "/bookings", Booking.from_dict)

    # ------------------------------------------------------------------
    # Status transitions
    # ------------------------------------------------------------------

    def _transition(self, booking_id: str, action: str, payload: Optional[Dict[str, Any]] = None) -> Booking:
        booking = self._build(self.api.patch(self._url(booking_id, action), payload))
        self.logger.info(f"Booking {booking_id}: {action}")
        return booking

    def update_status(self, booking_id: str, status: Union[BookingStatus, str]) -> Booking:
        value = status.value if isinstance(status, BookingStatus) else BookingStatus(status).value
        return self._transition(booking_id, "status", {"status": value})

    def cancel(self, booking_id: str, reason: Optional[str] = None) -> Booking:
        return self._transition(booking_id, "cancel", {"reason": reason} if reason else {})

    def confirm(self, booking_id: str) -> Booking:
        return self._transition(booking_id, "confirm")

    def start(self, booking_id: str) -> Booking:
        return self._transition(booking_id, "start")

    def complete(self, booking_id: str) -> Booking:
        return self._transition(booking_id, "complete")

    def mark_no_show(self, booking_id: str) -> Booking:
        return self._transition(booking_id, "no-show")

    def reschedule(self, booking_id: str, booking_date: str, start_time: str) -> Booking:
        return self._transition(booking_id, "reschedule", {
            "bookingDate": booking_date,
            "startTime": start_time,
        })

    # ------------------------------------------------------------------
    # Availability
    # ------------------------------------------------------------------

    def get_stylist_availability(self, stylist_id: str, date: str,
                                 service_id: Optional[str] = None) -> Dict[str, Any]:
        return self.api.get(
            self._url("availability", "stylist", stylist_id),
            params={"date": date, "serviceId": service_id},
        )

    def check_time_slot_availability(self, stylist_id: str, date: str, start_time: str,
                                     duration: int, exclude_booking_id: Optional[str] = None) -> bool:
        data = self.api.get(
            self._url("availability", "check", stylist_id),
            params={
                "date": date,
                "startTime": start_time,
                "duration": duration,
                "excludeBookingId": exclude_booking_id,
            },
        )
        return bool(data and data.get("available"))

    # ------------------------------------------------------------------
    # Scoped listings
    # ------------------------------------------------------------------

    def get_customer_bookings(self, customer_id: str, page: int = 1,
                              limit: int = 10) -> PaginatedResponse:
        return self.pages.fetch_page(self._url("customer", customer_id), page, limit,
                                     item_factory=self.item_factory)

    def get_stylist_bookings(self, stylist_id: str, page: int = 1, limit: int = 10,
                             filters: Optional[Dict[str, Any]] = None) -> PaginatedResponse:
        return self.pages.fetch_page(self._url("stylist", stylist_id), page, limit, filters,
                                     self.item_factory)

    def get_todays_bookings(self, stylist_id: Optional[str] = None) -> List[Booking]:
        return self._build_list(self.api.get(self._url("today"), params={"stylistId": stylist_id}))

    def get_upcoming_bookings(self, limit: int = 10,
                              stylist_id: Optional[str] = None) -> List[Booking]:
        return self._build_list(self.api.get(
            self._url("upcoming"),
            params={"limit": limit, "stylistId": stylist_id},
        ))

    def get_stats(self, filters: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return self.api.get(self._url("stats"), params=filters)

    def get_calendar_events(self, start_date: str, end_date: str,
                            stylist_id: Optional[str] = None) -> List[Dict[str, Any]]:
        return self.api.get(self._url("calendar"), params={
            "startDate": start_date,
            "endDate": end_date,
            "stylistId": stylist_id,
        }) or []

    def export(self, filters: Optional[Dict[str, Any]] = None, format: str = "csv") -> bytes:
        """Download bookings as CSV or XLSX"""
        if format not in ("csv", "xlsx"):
            raise ValueError(f"Unsupported export format: {format}")
        params = dict(filters or {})
        params["format"] = format
        return self.api.get_bytes(self._url("export"), params=params)
