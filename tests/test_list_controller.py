"""
Tests for the list screen controller
"""

from concurrent.futures import Future
from unittest.mock import Mock

import pytest

from infrastructure.external.errors import NetworkError, ValidationError
from services.list_service import FetchTicket, ListScreenController, ListStatus
from services.resource_service.models import PaginatedResponse


class FakeService:
    """In-memory list endpoint; filters match on exact field equality"""

    base_path = "/bookings"

    def __init__(self, total=25):
        self.records = [{"id": str(i), "status": "CONFIRMED" if i % 2 else "PENDING"}
                        for i in range(1, total + 1)]
        self.calls = []
        self.fail_with = None

    def list_page(self, page, limit, filters):
        self.calls.append((page, limit, dict(filters)))
        if self.fail_with is not None:
            raise self.fail_with
        matching = [r for r in self.records
                    if all(r.get(k) == v for k, v in filters.items())]
        start = (page - 1) * limit
        return PaginatedResponse(items=matching[start:start + limit], total=len(matching),
                                 limit=limit, page=page)

    def create(self, data):
        return {"id": "new", **data}

    def update(self, item_id, data):
        return {"id": item_id, **data}

    def delete(self, item_id):
        self.records = [r for r in self.records if r["id"] != item_id]


class ManualExecutor:
    """Holds submitted work until the test runs it, in any order"""

    def __init__(self):
        self.pending = []

    def submit(self, fn, *args):
        future = Future()
        self.pending.append((future, fn, args))
        return future

    def run(self, index):
        future, fn, args = self.pending[index]
        future.set_result(fn(*args))
        return future


@pytest.fixture
def service():
    return FakeService()


@pytest.fixture
def controller(service):
    controller = ListScreenController(service, limit=10)
    controller.load()
    service.calls.clear()
    return controller


class TestLoad:
    """Test basic fetching"""

    def test_initial_load(self, service):
        controller = ListScreenController(service, limit=10)
        assert controller.state().status == ListStatus.IDLE

        assert controller.load() is True

        state = controller.state()
        assert state.status == ListStatus.LOADED
        assert len(state.items) == 10
        assert state.total == 25
        assert state.total_pages == 3
        assert not state.is_loading

    def test_default_limit_from_config(self, service):
        assert ListScreenController(service).limit == 10

    def test_rejects_bad_limit(self, service):
        with pytest.raises(ValueError):
            ListScreenController(service, limit=0)

    def test_blank_initial_filters_dropped(self, service):
        controller = ListScreenController(service, limit=10, filters={"status": "", "stylistId": None})
        assert controller.filters == {}

    def test_on_change_receives_loading_then_loaded(self, service):
        states = []
        controller = ListScreenController(service, limit=10, on_change=states.append)

        controller.load()

        assert [s.status for s in states] == [ListStatus.LOADING, ListStatus.LOADED]
        assert states[0].is_loading


class TestFilters:
    """Test filter changes"""

    def test_filter_change_resets_page_and_fetches_once(self, controller, service):
        controller.set_page(3)
        service.calls.clear()

        controller.set_filter("status", "PENDING")

        assert service.calls == [(1, 10, {"status": "PENDING"})]
        assert controller.page == 1
        assert controller.total == 12

    def test_unchanged_filter_does_not_fetch(self, controller, service):
        controller.set_filter("status", "PENDING")
        service.calls.clear()

        assert controller.set_filter("status", "PENDING") is None
        assert service.calls == []

    def test_blank_value_removes_filter(self, controller, service):
        controller.set_filter("status", "PENDING")

        controller.set_filter("status", "")

        assert controller.filters == {}
        assert service.calls[-1] == (1, 10, {})

    def test_removing_absent_filter_is_a_no_op(self, controller, service):
        assert controller.set_filter("status", None) is None
        assert service.calls == []

    def test_set_filters_merges(self, controller, service):
        controller.set_filters(status="CONFIRMED", stylistId="s-1")

        assert controller.filters == {"status": "CONFIRMED", "stylistId": "s-1"}
        assert len(service.calls) == 1

    def test_clear_filters(self, controller, service):
        assert controller.clear_filters() is None

        controller.set_filter("status", "PENDING")
        controller.clear_filters()

        assert controller.filters == {}
        assert len(service.calls) == 2

    def test_set_limit(self, controller, service):
        controller.set_page(2)
        service.calls.clear()

        controller.set_limit(25)

        assert controller.page == 1
        assert controller.total_pages == 1
        assert service.calls == [(1, 25, {})]
        assert controller.set_limit(25) is None


class TestPaging:
    """Test page navigation and clamping"""

    def test_next_and_previous(self, controller, service):
        controller.next_page()
        assert controller.page == 2

        controller.previous_page()
        assert controller.page == 1
        assert controller.previous_page() is None

    def test_next_page_stops_at_last(self, controller, service):
        controller.set_page(3)
        service.calls.clear()

        assert controller.next_page() is None
        assert service.calls == []

    def test_set_page_clamped_to_known_range(self, controller, service):
        controller.set_page(99)
        assert controller.page == 3

        controller.set_page(-4)
        assert controller.page == 1

    def test_shrunken_results_clamp_and_refetch(self, controller, service):
        controller.set_page(3)
        service.records = service.records[:12]
        service.calls.clear()

        controller.refresh()

        assert controller.page == 2
        assert service.calls == [(3, 10, {}), (2, 10, {})]
        assert len(controller.items) == 2

    def test_empty_result_stays_on_page_one(self, controller, service):
        controller.set_filter("status", "CANCELLED")

        state = controller.state()
        assert state.items == []
        assert state.total_pages == 0
        assert state.page == 1


class TestStaleResponses:
    """Test that only the latest request is applied"""

    def test_late_response_discarded(self, controller):
        page_two = controller.begin_request()
        filtered = controller.begin_request()

        fresh = PaginatedResponse(items=[{"id": "9"}], total=1, limit=10, page=1)
        late = PaginatedResponse(items=[{"id": "11"}, {"id": "12"}], total=25, limit=10, page=2)

        assert controller.apply_response(filtered, fresh) is True
        assert controller.apply_response(page_two, late) is False

        assert controller.items == [{"id": "9"}]
        assert controller.total == 1

    def test_stale_error_ignored(self, controller):
        old = controller.begin_request()
        current = controller.begin_request()

        assert controller.apply_error(old, NetworkError("down")) is False
        assert controller.status == ListStatus.LOADING
        assert controller.is_current(current)

    def test_out_of_order_completion_on_executor(self, service):
        executor = ManualExecutor()
        controller = ListScreenController(service, limit=10, executor=executor)

        controller.set_page(2)
        controller.set_filter("status", "PENDING")

        newest = executor.run(1)
        oldest = executor.run(0)

        assert newest.result() is True
        assert oldest.result() is False
        assert controller.filters == {"status": "PENDING"}
        assert all(item["status"] == "PENDING" for item in controller.items)
        assert controller.total == 12

    def test_ticket_captures_parameters(self, controller):
        controller.filters = {"status": "PENDING"}
        ticket = controller.begin_request()
        controller.filters["status"] = "CONFIRMED"

        assert isinstance(ticket, FetchTicket)
        assert ticket.filters == {"status": "PENDING"}


class TestErrors:
    """Test failed fetches"""

    def test_api_error_keeps_items(self, controller, service):
        before = list(controller.items)
        service.fail_with = NetworkError("Network error. Please check your connection and try again.")

        assert controller.refresh() is True

        state = controller.state()
        assert state.status == ListStatus.ERRORED
        assert state.error.startswith("Network error")
        assert state.items == before
        assert state.total == 25

    def test_next_success_clears_error(self, controller, service):
        service.fail_with = NetworkError("down")
        controller.refresh()
        service.fail_with = None

        controller.refresh()

        assert controller.status == ListStatus.LOADED
        assert controller.error is None

    def test_unexpected_error_recorded_and_raised(self, controller, service):
        service.fail_with = KeyError("id")

        with pytest.raises(KeyError):
            controller.refresh()

        assert controller.status == ListStatus.ERRORED


class TestOptimisticMutations:
    """Test local patches after create, update and delete"""

    def test_delete_removes_one_item_without_fetch(self, controller, service):
        states = []
        controller.on_change = states.append

        controller.delete("3")

        assert [item["id"] for item in controller.items] == ["1", "2", "4", "5", "6", "7", "8", "9", "10"]
        assert controller.page == 1
        assert controller.total == 25
        assert controller.total_pages == 3
        assert service.calls == []
        assert len(states) == 1

    def test_delete_unknown_id(self, controller):
        assert controller.apply_deleted("missing") is False
        assert len(controller.items) == 10

    def test_delete_only_first_match(self, controller):
        controller.items = [{"id": "a"}, {"id": "a"}]
        controller.apply_deleted("a")
        assert controller.items == [{"id": "a"}]

    def test_update_replaces_in_place(self, controller, service):
        updated = controller.update("2", {"status": "CANCELLED"})

        assert controller.items[1] == updated
        assert controller.items[1]["status"] == "CANCELLED"
        assert service.calls == []

    def test_update_of_item_not_on_page(self, controller):
        assert controller.apply_updated({"id": "99"}) is False

    def test_perform_applies_returned_record(self, controller, service):
        def set_status(item_id, status):
            return {"id": item_id, "status": status}

        updated = controller.perform(set_status, "4", status="COMPLETED")

        assert updated == {"id": "4", "status": "COMPLETED"}
        assert controller.items[3]["status"] == "COMPLETED"
        assert service.calls == []

    def test_perform_failure_leaves_items(self, controller):
        def reject(item_id):
            raise ValidationError("Invalid status transition", 400)

        before = list(controller.items)
        with pytest.raises(ValidationError):
            controller.perform(reject, "4")

        assert controller.items == before

    def test_create_appends(self, controller, service):
        controller.create({"status": "PENDING"})

        assert controller.items[-1]["id"] == "new"
        assert len(controller.items) == 11
        assert controller.total == 25
        assert service.calls == []

    def test_service_failure_leaves_page_untouched(self, controller):
        controller.service = Mock()
        controller.service.delete.side_effect = NetworkError("down")

        with pytest.raises(NetworkError):
            controller.delete("1")

        assert len(controller.items) == 10

    def test_patches_work_on_model_objects(self, controller):
        item = Mock(id="x")
        controller.items = [item]

        assert controller.apply_deleted("x") is True
        assert controller.items == []
