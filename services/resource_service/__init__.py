"""
Resource service - paginated reads and CRUD for the barbershop's records.
"""

from .models import (
    PaginatedResponse,
    Booking,
    BookingStatus,
    Customer,
    Payment,
    PaymentStatus,
    Review,
    ReviewStatus,
    Service,
    Stylist,
    compute_total_pages
)
from .paginated_client import PaginatedResourceClient, fetch_page
from .base import ResourceService
from .booking_service import BookingService
from .customer_service import CustomerService
from .payment_service import PaymentService
from .review_service import ReviewService
from .catalog_service import ServiceCatalogService
from .stylist_service import StylistService
from .user_service import UserService

__all__ = [
    'PaginatedResponse',
    'Booking',
    'BookingStatus',
    'Customer',
    'Payment',
    'PaymentStatus',
    'Review',
    'ReviewStatus',
    'Service',
    'Stylist',
    'compute_total_pages',
    'PaginatedResourceClient',
    'fetch_page',
    'ResourceService',
    'BookingService',
    'CustomerService',
    'PaymentService',
    'ReviewService',
    'ServiceCatalogService',
    'StylistService',
    'UserService'
]
