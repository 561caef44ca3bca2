"""
Generic Streamlit list screen: filters, a table, pagination, create/edit forms,
status actions and row deletion.

Each screen keeps its ListScreenController in `st.session_state`, so page
and filters survive reruns.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence

import streamlit as st

from config.app_config import get_config
from infrastructure.external.errors import ApiError
from services.list_service.list_controller import ListScreenController, ListStatus
from utils.logging_config import get_logger, log_user_interaction


logger = get_logger(__name__)


@dataclass
class FilterField:
    """A select or text filter rendered above the table"""
    name: str
    label: str
    options: Optional[Sequence[str]] = None


@dataclass
class FormField:
    """
    One input of a create or edit form, named after the backend's JSON field

    kind is one of text, textarea, password, number, integer, checkbox,
    select or list (comma-separated text sent as a JSON array).
    """
    name: str
    label: str
    kind: str = "text"
    options: Optional[Sequence[str]] = None
    required: bool = False
    create_only: bool = False


@dataclass
class StatusAction:
    """A one-field status change applied to a selected row"""
    label: str
    options: Sequence[str]
    apply: Callable[[Any, str, str], Any]  # (service, item_id, value) -> updated record


@dataclass
class ListScreen:
    """Static description of one list page"""
    key: str
    title: str
    columns: Dict[str, Callable[[Any], Any]]
    filters: List[FilterField] = field(default_factory=list)
    can_delete: bool = False
    item_label: str = "record"
    form_fields: List[FormField] = field(default_factory=list)
    can_create: bool = False
    can_update: bool = False
    status_action: Optional[StatusAction] = None


def get_list_controller(screen: ListScreen, service_factory: Callable[[], Any]) -> ListScreenController:
    state_key = f"list_controller_{screen.key}"
    if state_key not in st.session_state:
        controller = ListScreenController(service_factory(), name=screen.key)
        # Kept even when the first load fails
        st.session_state[state_key] = controller
        controller.load()
    return st.session_state[state_key]


def format_currency(amount: float) -> str:
    currency = get_config().ui.currency
    if currency == "IDR":
        return f"Rp {amount:,.0f}".replace(",", ".")
    return f"{currency} {amount:,.2f}"


def build_payload(fields: Sequence[FormField], values: Dict[str, Any],
                  editing: bool = False) -> Dict[str, Any]:
    """
    Turn submitted form values into a request body

    Blank optional values are left out. Create-only fields (passwords, ids
    fixed at creation) are skipped when editing.

    Raises:
        ValueError: A required field is blank
    """
    payload: Dict[str, Any] = {}
    for form_field in fields:
        if editing and form_field.create_only:
            continue
        value = values.get(form_field.name)
        if isinstance(value, str):
            value = value.strip()
            if form_field.kind == "list":
                value = [part.strip() for part in value.split(",") if part.strip()]
        if value is None or value == "" or value == []:
            if form_field.required:
                raise ValueError(f"{form_field.label} is required")
            continue
        payload[form_field.name] = value
    return payload


def current_value(item: Any, name: str) -> Any:
    """The record's current value for a JSON field name, for prefilling edit forms"""
    raw = getattr(item, "raw", None)
    if isinstance(raw, dict):
        return raw.get(name)
    if hasattr(item, "to_dict"):
        return item.to_dict().get(name)
    if isinstance(item, dict):
        return item.get(name)
    return None


def _render_input(form_field: FormField, current: Any, key: str) -> Any:
    label = f"{form_field.label} *" if form_field.required else form_field.label
    kind = form_field.kind
    if kind == "textarea":
        return st.text_area(label, value=current or "", key=key)
    if kind == "password":
        return st.text_input(label, type="password", key=key)
    if kind == "number":
        return st.number_input(label, value=float(current or 0), min_value=0.0, key=key)
    if kind == "integer":
        return st.number_input(label, value=int(current or 0), min_value=0, step=1, key=key)
    if kind == "checkbox":
        return st.checkbox(label, value=True if current is None else bool(current), key=key)
    if kind == "select":
        options = list(form_field.options or [])
        index = options.index(current) if current in options else 0
        return st.selectbox(label, options, index=index, key=key)
    if kind == "list":
        return st.text_input(label, value=", ".join(current or []), key=key)
    return st.text_input(label, value=current or "", key=key)


def _submit(screen: ListScreen, event: str, call: Callable[[], Any]):
    try:
        call()
    except ValueError as e:
        st.error(str(e))
        return
    except ApiError as e:
        st.error(e.message)
        return
    log_user_interaction(logger, event, screen=screen.key)
    st.rerun()


def _render_create_form(screen: ListScreen, controller: ListScreenController):
    with st.expander(f"➕ New {screen.item_label}"):
        with st.form(f"{screen.key}_create_form", clear_on_submit=True):
            values = {
                form_field.name: _render_input(form_field, None, f"{screen.key}_create_{form_field.name}")
                for form_field in screen.form_fields
            }
            submitted = st.form_submit_button("Create", type="primary")
        if submitted:
            _submit(screen, "record_created",
                    lambda: controller.create(build_payload(screen.form_fields, values)))


def _render_edit_form(screen: ListScreen, controller: ListScreenController, items: List[Any]):
    with st.expander(f"✏️ Edit {screen.item_label}"):
        records = {str(getattr(item, "id", "")): item for item in items}
        selected = st.selectbox("Record", list(records), key=f"{screen.key}_edit_choice")
        item = records[selected]
        with st.form(f"{screen.key}_edit_form"):
            values = {
                form_field.name: _render_input(form_field, current_value(item, form_field.name),
                                               f"{screen.key}_edit_{selected}_{form_field.name}")
                for form_field in screen.form_fields if not form_field.create_only
            }
            submitted = st.form_submit_button("Save")
        if submitted:
            _submit(screen, "record_updated",
                    lambda: controller.update(selected, build_payload(screen.form_fields, values,
                                                                      editing=True)))


def _render_status_action(screen: ListScreen, controller: ListScreenController, items: List[Any]):
    action = screen.status_action
    with st.expander(f"🔁 {action.label}"):
        col1, col2, col3 = st.columns([2, 2, 1])
        with col1:
            selected = st.selectbox("Record", [str(getattr(item, "id", "")) for item in items],
                                    key=f"{screen.key}_status_choice")
        with col2:
            value = st.selectbox("Status", list(action.options), key=f"{screen.key}_status_value")
        with col3:
            clicked = st.button("Apply", key=f"{screen.key}_status_apply")
        if clicked:
            _submit(screen, "status_changed",
                    lambda: controller.perform(action.apply, controller.service, selected, value))


def _render_filters(screen: ListScreen, controller: ListScreenController):
    if not screen.filters:
        return
    cols = st.columns(len(screen.filters) + 1)
    changes: Dict[str, Any] = {}
    for col, filter_field in zip(cols, screen.filters):
        current = controller.filters.get(filter_field.name)
        with col:
            if filter_field.options:
                options = ["All"] + list(filter_field.options)
                index = options.index(current) if current in options else 0
                choice = st.selectbox(filter_field.label, options, index=index, key=f"{screen.key}_{filter_field.name}")
                changes[filter_field.name] = None if choice == "All" else choice
            else:
                text = st.text_input(filter_field.label, value=current or "", key=f"{screen.key}_{filter_field.name}")
                changes[filter_field.name] = text.strip() or None
    with cols[-1]:
        st.write("")
        if st.button("Clear", key=f"{screen.key}_clear") and controller.filters:
            for filter_field in screen.filters:
                st.session_state.pop(f"{screen.key}_{filter_field.name}", None)
            controller.clear_filters()
            st.rerun()

    if controller.set_filters(**changes) is not None:
        log_user_interaction(logger, "filters_changed", screen=screen.key,
                             filters=sorted(k for k, v in changes.items() if v is not None))


def _render_table(screen: ListScreen, controller: ListScreenController):
    state = controller.state()
    if not state.items:
        st.info("No records found")
        return

    rows = [{label: getter(item) for label, getter in screen.columns.items()} for item in state.items]
    st.dataframe(rows, use_container_width=True, hide_index=True)

    if screen.can_delete:
        with st.expander("Delete a record"):
            labels = {str(getattr(item, "id", "")): item for item in state.items}
            selected = st.selectbox("Record", list(labels), key=f"{screen.key}_delete_choice")
            if st.button("🗑️ Delete", key=f"{screen.key}_delete"):
                try:
                    controller.delete(selected)
                    st.success("Deleted")
                    log_user_interaction(logger, "record_deleted", screen=screen.key)
                except ApiError as e:
                    st.error(e.message)
                st.rerun()


def _render_pagination(screen: ListScreen, controller: ListScreenController):
    state = controller.state()
    prev_col, info_col, next_col, size_col = st.columns([1, 2, 1, 1])
    with prev_col:
        if st.button("◀ Previous", key=f"{screen.key}_prev", disabled=state.page <= 1):
            controller.previous_page()
            st.rerun()
    with info_col:
        st.write(f"Page {state.page} of {max(state.total_pages, 1)} · {state.total} records")
    with next_col:
        if st.button("Next ▶", key=f"{screen.key}_next", disabled=state.page >= state.total_pages):
            controller.next_page()
            st.rerun()
    with size_col:
        options = get_config().pagination.page_size_options
        index = options.index(state.limit) if state.limit in options else 0
        limit = st.selectbox("Per page", options, index=index, key=f"{screen.key}_limit",
                             label_visibility="collapsed")
        if controller.set_limit(limit) is not None:
            st.rerun()


def render_list_screen(screen: ListScreen, service_factory: Callable[[], Any]):
    """Render a complete list page for one resource"""
    st.header(screen.title)
    controller = get_list_controller(screen, service_factory)

    _render_filters(screen, controller)

    if controller.status == ListStatus.ERRORED:
        # Previous rows stay visible under the error
        st.error(controller.error)
        if st.button("🔄 Retry", key=f"{screen.key}_retry"):
            controller.refresh()
            st.rerun()

    items = controller.state().items
    if screen.can_create and screen.form_fields:
        _render_create_form(screen, controller)
    if items and screen.can_update and screen.form_fields:
        _render_edit_form(screen, controller, items)
    if items and screen.status_action is not None:
        _render_status_action(screen, controller, items)

    _render_table(screen, controller)
    _render_pagination(screen, controller)
