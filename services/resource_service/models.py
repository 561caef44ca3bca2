"""
Data models for the barbershop resources listed on the dashboard.

The backend owns these records; the dashboard only holds per-page copies.
Each model keeps the raw payload so screens can show fields the model does
not name.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar


T = TypeVar("T")


class BookingStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    NO_SHOW = "NO_SHOW"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"


class ReviewStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


def _parse_enum(enum_cls, value):
    try:
        return enum_cls(value)
    except ValueError:
        return None


def _to_float(value: Any, default: float = 0.0) -> float:
    """Amounts arrive as numbers or as decimal strings ("50000")"""
    if value is None or value == "":
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def compute_total_pages(total: int, limit: int) -> int:
    """ceil(total / limit); zero items means zero pages"""
    if total <= 0 or limit <= 0:
        return 0
    return math.ceil(total / limit)


@dataclass
class PaginatedResponse(Generic[T]):
    """One page of a resource listing"""
    items: List[T]
    total: int
    limit: int
    page: int
    total_pages: int = -1

    def __post_init__(self):
        # total_pages is always derived, whatever the server claimed
        self.total_pages = compute_total_pages(self.total, self.limit)

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    def map(self, factory: Callable[[Any], Any]) -> 'PaginatedResponse':
        return PaginatedResponse(
            items=[factory(item) for item in self.items],
            total=self.total,
            limit=self.limit,
            page=self.page,
        )


@dataclass
class Booking:
    id: str
    customer_id: Optional[str] = None
    stylist_id: Optional[str] = None
    service_id: Optional[str] = None
    booking_date: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    status: Optional[BookingStatus] = None
    notes: str = ""
    total_price: float = 0.0
    customer_name: str = ""
    stylist_name: str = ""
    service_name: str = ""
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Booking':
        customer = data.get("customer") or {}
        stylist = data.get("stylist") or {}
        stylist_user = stylist.get("user") or {}
        service = data.get("service") or {}
        return cls(
            id=str(data["id"]),
            customer_id=data.get("customerId"),
            stylist_id=data.get("stylistId"),
            service_id=data.get("serviceId"),
            booking_date=data.get("bookingDate"),
            start_time=data.get("startTime"),
            end_time=data.get("endTime"),
            status=_parse_enum(BookingStatus, data.get("status")),
            notes=data.get("notes") or "",
            total_price=_to_float(data.get("totalPrice")),
            customer_name=customer.get("fullName") or customer.get("name") or "",
            stylist_name=stylist_user.get("fullName") or stylist.get("name") or "",
            service_name=service.get("name") or "",
            created_at=data.get("createdAt"),
            updated_at=data.get("updatedAt"),
            raw=data,
        )


@dataclass
class Customer:
    id: str
    name: str = ""
    email: str = ""
    phone: str = ""
    address: Optional[str] = None
    membership_level: Optional[str] = None
    loyalty_points: int = 0
    total_bookings: int = 0
    total_spent: float = 0.0
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Customer':
        return cls(
            id=str(data["id"]),
            name=data.get("name") or data.get("fullName") or "",
            email=data.get("email") or "",
            phone=data.get("phone") or "",
            address=data.get("address"),
            membership_level=data.get("membershipLevel"),
            loyalty_points=int(data.get("loyaltyPoints") or 0),
            total_bookings=int(data.get("totalBookings") or 0),
            total_spent=_to_float(data.get("totalSpent")),
            created_at=data.get("createdAt"),
            updated_at=data.get("updatedAt"),
            raw=data,
        )


@dataclass
class Payment:
    id: str
    booking_id: Optional[str] = None
    amount: float = 0.0
    status: Optional[PaymentStatus] = None
    payment_method: str = ""
    transaction_id: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Payment':
        return cls(
            id=str(data["id"]),
            booking_id=data.get("bookingId"),
            amount=_to_float(data.get("amount")),
            status=_parse_enum(PaymentStatus, data.get("status")),
            payment_method=data.get("paymentMethod") or "",
            transaction_id=data.get("transactionId"),
            created_at=data.get("createdAt"),
            updated_at=data.get("updatedAt"),
            raw=data,
        )


@dataclass
class Review:
    id: str
    user_id: Optional[str] = None
    booking_id: Optional[str] = None
    stylist_id: Optional[str] = None
    service_id: Optional[str] = None
    rating: int = 0
    comment: str = ""
    status: Optional[ReviewStatus] = None
    reviewer_name: str = ""
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Review':
        details = data.get("userDetails") or {}
        return cls(
            id=str(data["id"]),
            user_id=data.get("userId"),
            booking_id=data.get("bookingId"),
            stylist_id=data.get("stylistId"),
            service_id=data.get("serviceId"),
            rating=int(data.get("rating") or 0),
            comment=data.get("comment") or "",
            status=_parse_enum(ReviewStatus, data.get("status")),
            reviewer_name=details.get("name") or "",
            created_at=data.get("createdAt"),
            updated_at=data.get("updatedAt"),
            raw=data,
        )


@dataclass
class Service:
    """A bookable barbershop service (haircut, shave, ...)"""
    id: str
    name: str = ""
    description: str = ""
    price: float = 0.0
    duration: int = 0
    category_id: Optional[str] = None
    is_active: bool = True
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Service':
        return cls(
            id=str(data["id"]),
            name=data.get("name") or "",
            description=data.get("description") or "",
            price=_to_float(data.get("price")),
            duration=int(data.get("duration") or 0),
            category_id=data.get("categoryId"),
            is_active=bool(data.get("isActive", True)),
            created_at=data.get("createdAt"),
            updated_at=data.get("updatedAt"),
            raw=data,
        )


@dataclass
class Stylist:
    id: str
    user_id: Optional[str] = None
    name: str = ""
    bio: str = ""
    specializations: List[str] = field(default_factory=list)
    experience: int = 0
    rating: float = 0.0
    total_reviews: int = 0
    is_active: bool = True
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Stylist':
        user = data.get("user") or {}
        return cls(
            id=str(data["id"]),
            user_id=data.get("userId"),
            name=user.get("fullName") or data.get("name") or "",
            bio=data.get("bio") or "",
            specializations=list(data.get("specializations") or []),
            experience=int(data.get("experience") or 0),
            rating=_to_float(data.get("rating")),
            total_reviews=int(data.get("totalReviews") or 0),
            is_active=bool(data.get("isActive", True)),
            created_at=data.get("createdAt"),
            updated_at=data.get("updatedAt"),
            raw=data,
        )
