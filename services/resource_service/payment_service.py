"""
Payment service.
"""

from typing import List

from services.resource_service.base import ResourceService
from services.resource_service.models import Payment


class PaymentService(ResourceService):
    """Payments at `/payments`"""

    def __init__(self, api_client):
        super().__init__(api_client, "/payments", Payment.from_dict)

    def get_by_booking(self, booking_id: str) -> List[Payment]:
        return self._build_list(self.api.get(self._url("booking", booking_id)))

    def process(self, booking_id: str, payment_method: str, amount: float) -> Payment:
        """Charge a booking"""
        if amount <= 0:
            raise ValueError("amount must be positive")
        payment = self._build(self.api.post(self._url("process"), {
            "bookingId": booking_id,
            "paymentMethod": payment_method,
            "amount": amount,
        }))
        self.logger.info(f"Processed {payment_method} payment for booking {booking_id}")
        return payment
