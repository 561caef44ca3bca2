"""
Tests for page gating, list screen helpers and form payloads
"""

from unittest.mock import Mock, patch

import pytest

from infrastructure.external.errors import ApiError
from services.auth_service.models import User, UserRole
from services.auth_service.permissions import Permissions
from services.list_service import ListScreenController, ListStatus
from services.resource_service.models import PaginatedResponse, Service
from services.ui_service.list_screen import (
    FormField,
    ListScreen,
    build_payload,
    current_value,
    format_currency,
    get_list_controller,
)
from services.ui_service.pages import (
    BOOKINGS_SCREEN,
    SERVICES_SCREEN,
    STYLISTS_SCREEN,
    USERS_SCREEN,
    visible_pages,
)
from tests.conftest import MockSessionState, user_payload


class TestVisiblePages:
    """Test permission-filtered navigation"""

    def test_admin_sees_every_page(self):
        pages = visible_pages(Permissions.for_role(UserRole.ADMIN))
        assert list(pages) == [
            "Dashboard", "Bookings", "Customers", "Payments", "Reviews", "Services", "Stylists", "Users",
        ]

    def test_manager_sees_management_pages(self):
        pages = visible_pages(Permissions.for_role(UserRole.MANAGER))
        assert {"Services", "Stylists", "Users"} <= set(pages)

    def test_stylist_sees_own_scope_pages(self):
        pages = visible_pages(Permissions.for_role(UserRole.STYLIST))
        assert list(pages) == ["Dashboard", "Bookings", "Reviews"]

    def test_customer_sees_nothing(self):
        assert visible_pages(Permissions.for_role(UserRole.CUSTOMER)) == {}


def test_format_currency_idr():
    assert format_currency(1500000) == "Rp 1.500.000"


class TestListControllerStorage:
    """Test per-session controller storage"""

    def test_list_controller_kept_in_session_state(self):
        session_state = MockSessionState()
        service = Mock()
        service.list_page.return_value = PaginatedResponse(items=[{"id": "1"}], total=1, limit=10, page=1)
        factory = Mock(return_value=service)
        screen = ListScreen(key="bookings", title="Bookings", columns={})

        with patch("services.ui_service.list_screen.st") as mock_st:
            mock_st.session_state = session_state
            first = get_list_controller(screen, factory)
            second = get_list_controller(screen, factory)

        assert first is second
        factory.assert_called_once()
        assert first.status == ListStatus.LOADED

    def test_list_controller_kept_when_first_load_fails(self):
        session_state = MockSessionState()
        service = Mock()
        service.list_page.side_effect = ApiError("Unexpected response format from server")
        factory = Mock(return_value=service)
        screen = ListScreen(key="payments", title="Payments", columns={})

        with patch("services.ui_service.list_screen.st") as mock_st:
            mock_st.session_state = session_state
            first = get_list_controller(screen, factory)
            second = get_list_controller(screen, factory)

        assert first is second
        factory.assert_called_once()
        service.list_page.assert_called_once()
        assert first.status == ListStatus.ERRORED
        assert first.error == "Unexpected response format from server"


class TestBuildPayload:
    """Test form values to request bodies"""

    def test_service_form(self):
        values = {
            "name": " Fade ", "category": "haircut", "description": "", "price": 50000.0,
            "duration": 30, "tags": "classic, , quick", "isActive": False,
        }

        assert build_payload(SERVICES_SCREEN.form_fields, values) == {
            "name": "Fade", "category": "haircut", "price": 50000.0, "duration": 30,
            "tags": ["classic", "quick"], "isActive": False,
        }

    def test_required_field_blank(self):
        with pytest.raises(ValueError, match="Full name is required"):
            build_payload(USERS_SCREEN.form_fields, {"fullName": "  ", "email": "a@b.c"})

    def test_editing_skips_create_only_fields(self):
        values = {"fullName": "Budi", "phone": "0812", "role": "STYLIST"}

        payload = build_payload(USERS_SCREEN.form_fields, values, editing=True)

        assert payload == {"fullName": "Budi", "phone": "0812", "role": "STYLIST"}

    def test_stylist_create_requires_user(self):
        with pytest.raises(ValueError, match="User ID"):
            build_payload(STYLISTS_SCREEN.form_fields, {"bio": "Ten years of fades"})

    def test_optional_blank_left_out(self):
        fields = [FormField("notes", "Notes", "textarea")]
        assert build_payload(fields, {"notes": ""}) == {}


class TestCurrentValue:
    """Test edit form prefill"""

    def test_from_raw_record(self):
        service = Service.from_dict({"id": "s-1", "name": "Shave", "category": "beard_trim"})
        assert current_value(service, "category") == "beard_trim"

    def test_from_user(self):
        user = User.from_dict(user_payload(role="MANAGER"))
        assert current_value(user, "role") == "MANAGER"
        assert current_value(user, "fullName") == "Admin User"


class TestStatusActions:
    """Test status changes wired through the controller"""

    def make_controller(self, items):
        service = Mock()
        service.list_page.return_value = PaginatedResponse(items=items, total=len(items), limit=10, page=1)
        controller = ListScreenController(service, limit=10)
        controller.load()
        return controller, service

    def test_booking_status_change(self):
        controller, service = self.make_controller([{"id": "b-1", "status": "PENDING"}])
        service.update_status.return_value = {"id": "b-1", "status": "CONFIRMED"}
        action = BOOKINGS_SCREEN.status_action

        controller.perform(action.apply, controller.service, "b-1", "CONFIRMED")

        service.update_status.assert_called_once_with("b-1", "CONFIRMED")
        assert controller.items == [{"id": "b-1", "status": "CONFIRMED"}]

    @pytest.mark.parametrize("choice,is_active", [("active", True), ("inactive", False)])
    def test_user_activation(self, choice, is_active):
        controller, service = self.make_controller([{"id": "u-1"}])
        service.update_status.return_value = {"id": "u-1", "isActive": is_active}

        controller.perform(USERS_SCREEN.status_action.apply, controller.service, "u-1", choice)

        service.update_status.assert_called_once_with("u-1", is_active)
        assert controller.items[0]["isActive"] is is_active
