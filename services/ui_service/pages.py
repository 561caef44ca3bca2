"""
Dashboard pages and the permission-filtered navigation between them.
"""

from dataclasses import dataclass
from typing import Callable, Dict, List

import streamlit as st

from infrastructure.external.errors import ApiError
from services.auth_service.auth_context import AuthContext
from services.auth_service.models import UserRole
from services.auth_service.permissions import Permissions
from services.dashboard_service import DashboardService
from services.resource_service import (
    BookingService,
    BookingStatus,
    CustomerService,
    PaymentService,
    PaymentStatus,
    ReviewService,
    ReviewStatus,
    ServiceCatalogService,
    StylistService,
    UserService,
)
from services.ui_service.list_screen import (
    FilterField,
    FormField,
    ListScreen,
    StatusAction,
    format_currency,
    render_list_screen,
)


SERVICE_CATEGORIES = ["haircut", "beard_trim", "hair_wash", "styling", "coloring", "treatment", "package"]
USER_STATUS_OPTIONS = ["active", "inactive"]


def _status(item) -> str:
    return item.status.value if item.status else "-"


def _yes_no(value) -> str:
    return "✅" if value else "❌"


def _set_user_status(service: UserService, user_id: str, value: str):
    return service.update_status(user_id, value == "active")


BOOKINGS_SCREEN = ListScreen(
    key="bookings",
    title="📅 Bookings",
    columns={
        "Date": lambda b: b.booking_date,
        "Time": lambda b: b.start_time,
        "Customer": lambda b: b.customer_name,
        "Stylist": lambda b: b.stylist_name,
        "Service": lambda b: b.service_name,
        "Status": _status,
        "Total": lambda b: format_currency(b.total_price),
    },
    filters=[
        FilterField("search", "Search"),
        FilterField("status", "Status", [s.value for s in BookingStatus]),
    ],
    can_delete=True,
    item_label="booking",
    form_fields=[
        FormField("customerId", "Customer ID", required=True, create_only=True),
        FormField("stylistId", "Stylist ID", required=True),
        FormField("serviceId", "Service ID", required=True),
        FormField("bookingDate", "Date (YYYY-MM-DD)", required=True),
        FormField("startTime", "Start time (HH:MM)", required=True),
        FormField("notes", "Notes", "textarea"),
    ],
    can_create=True,
    can_update=True,
    status_action=StatusAction(
        "Update booking status",
        [s.value for s in BookingStatus],
        lambda service, booking_id, value: service.update_status(booking_id, value),
    ),
)

CUSTOMERS_SCREEN = ListScreen(
    key="customers",
    title="👥 Customers",
    columns={
        "Name": lambda c: c.name,
        "Email": lambda c: c.email,
        "Phone": lambda c: c.phone,
        "Bookings": lambda c: c.total_bookings,
        "Spent": lambda c: format_currency(c.total_spent),
        "Points": lambda c: c.loyalty_points,
    },
    filters=[FilterField("search", "Search")],
    can_delete=True,
    item_label="customer",
    form_fields=[
        FormField("name", "Name", required=True),
        FormField("email", "Email", required=True),
        FormField("phone", "Phone", required=True),
        FormField("address", "Address", "textarea"),
    ],
    can_create=True,
    can_update=True,
)

PAYMENTS_SCREEN = ListScreen(
    key="payments",
    title="💳 Payments",
    columns={
        "Booking": lambda p: p.booking_id,
        "Amount": lambda p: format_currency(p.amount),
        "Method": lambda p: p.payment_method,
        "Status": _status,
        "Created": lambda p: p.created_at,
    },
    filters=[FilterField("status", "Status", [s.value for s in PaymentStatus])],
)

REVIEWS_SCREEN = ListScreen(
    key="reviews",
    title="⭐ Reviews",
    columns={
        "Reviewer": lambda r: r.reviewer_name,
        "Rating": lambda r: "★" * r.rating,
        "Comment": lambda r: r.comment,
        "Status": _status,
    },
    filters=[FilterField("status", "Status", [s.value for s in ReviewStatus])],
    can_delete=True,
)

SERVICES_SCREEN = ListScreen(
    key="services",
    title="✂️ Services",
    columns={
        "Name": lambda s: s.name,
        "Category": lambda s: s.raw.get("category") or "-",
        "Duration (min)": lambda s: s.duration,
        "Price": lambda s: format_currency(s.price),
        "Active": lambda s: _yes_no(s.is_active),
    },
    filters=[
        FilterField("search", "Search"),
        FilterField("category", "Category", SERVICE_CATEGORIES),
    ],
    can_delete=True,
    item_label="service",
    form_fields=[
        FormField("name", "Name", required=True),
        FormField("category", "Category", "select", SERVICE_CATEGORIES, required=True),
        FormField("description", "Description", "textarea"),
        FormField("price", "Price", "number", required=True),
        FormField("duration", "Duration (minutes)", "integer", required=True),
        FormField("tags", "Tags", "list"),
        FormField("isActive", "Active", "checkbox"),
    ],
    can_create=True,
    can_update=True,
)

STYLISTS_SCREEN = ListScreen(
    key="stylists",
    title="💇 Stylists",
    columns={
        "Name": lambda s: s.name,
        "Specializations": lambda s: ", ".join(s.specializations),
        "Experience (yrs)": lambda s: s.experience,
        "Rating": lambda s: f"{s.rating:.1f} ({s.total_reviews})",
        "Active": lambda s: _yes_no(s.is_active),
    },
    filters=[FilterField("search", "Search")],
    can_delete=True,
    item_label="stylist",
    form_fields=[
        FormField("userId", "User ID", required=True, create_only=True),
        FormField("bio", "Bio", "textarea"),
        FormField("specializations", "Specializations", "list"),
        FormField("experience", "Experience (years)", "integer"),
        FormField("isActive", "Active", "checkbox"),
    ],
    can_create=True,
    can_update=True,
)

USERS_SCREEN = ListScreen(
    key="users",
    title="🔐 Users",
    columns={
        "Name": lambda u: u.full_name,
        "Email": lambda u: u.email,
        "Role": lambda u: u.role.value if u.role else "-",
        "Active": lambda u: _yes_no(u.is_active),
        "Verified": lambda u: _yes_no(u.email_verified),
    },
    filters=[
        FilterField("search", "Search"),
        FilterField("role", "Role", [r.value for r in UserRole]),
    ],
    can_delete=True,
    item_label="user",
    form_fields=[
        FormField("fullName", "Full name", required=True),
        FormField("email", "Email", required=True, create_only=True),
        FormField("phone", "Phone", required=True),
        FormField("role", "Role", "select", [r.value for r in UserRole], required=True),
        FormField("username", "Username"),
        FormField("password", "Password", "password", required=True, create_only=True),
    ],
    can_create=True,
    can_update=True,
    status_action=StatusAction("Activate / deactivate user", USER_STATUS_OPTIONS, _set_user_status),
)


@dataclass
class Page:
    title: str
    render: Callable[[AuthContext], None]
    allowed: Callable[[Permissions], bool]


def render_dashboard_page(context: AuthContext):
    st.header("📊 Dashboard")
    try:
        stats = DashboardService(context.api_client).get_stats()
    except ApiError as e:
        st.error(e.message)
        return

    if stats.is_mock:
        st.warning("Backend offline - showing demo data")

    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Customers", stats.get("totalCustomers", 0))
    col2.metric("Bookings", stats.get("totalBookings", 0))
    col3.metric("Revenue", format_currency(float(stats.get("totalRevenue") or 0)))
    col4.metric("Rating", stats.get("averageRating", 0))

    col1, col2, col3 = st.columns(3)
    col1.metric("Today", stats.get("todayBookings", 0))
    col2.metric("Pending", stats.get("pendingBookings", 0))
    col3.metric("Cancelled", stats.get("cancelledBookings", 0))

    recent = stats.recent_bookings
    if recent:
        st.subheader("Recent bookings")
        st.dataframe([
            {"Date": b.booking_date, "Customer": b.customer_name, "Service": b.service_name,
             "Status": _status(b)}
            for b in recent
        ], use_container_width=True, hide_index=True)


def _list_page(screen: ListScreen, service_cls) -> Callable[[AuthContext], None]:
    def render(context: AuthContext):
        render_list_screen(screen, lambda: service_cls(context.api_client))
    return render


PAGES: List[Page] = [
    Page("Dashboard", render_dashboard_page, lambda p: p.can_access_dashboard),
    Page("Bookings", _list_page(BOOKINGS_SCREEN, BookingService), lambda p: p.can_manage_bookings),
    Page("Customers", _list_page(CUSTOMERS_SCREEN, CustomerService), lambda p: p.can_manage_users),
    Page("Payments", _list_page(PAYMENTS_SCREEN, PaymentService), lambda p: p.can_manage_payments),
    Page("Reviews", _list_page(REVIEWS_SCREEN, ReviewService), lambda p: p.can_view_analytics),
    Page("Services", _list_page(SERVICES_SCREEN, ServiceCatalogService), lambda p: p.can_manage_services),
    Page("Stylists", _list_page(STYLISTS_SCREEN, StylistService), lambda p: p.can_manage_stylists),
    Page("Users", _list_page(USERS_SCREEN, UserService), lambda p: p.can_manage_users),
]


def visible_pages(permissions: Permissions) -> Dict[str, Page]:
    """Pages the role may open, in navigation order"""
    return {page.title: page for page in PAGES if page.allowed(permissions)}
