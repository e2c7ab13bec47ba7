from __future__ import annotations

import enum


class ChangeReason(str, enum.Enum):
    """Reason tags carried by data-requested, navigate-requested,
    state-changed and field-changed notifications."""

    RELOAD = "reload"
    LOAD_PAGE = "load_page"
    CHANGE_PAGE_SIZE = "change_page_size"
    RESET_FILTERS = "reset_filters"
    SEARCH = "search"
    SET_FIELDS = "set_fields"
    CLEAR_STATE = "clear_state"
    CLEAR_DATA = "clear_data"
    RESET = "reset"
    TOGGLE_AREA_EXPANDED = "toggle_area_expanded"
    FIELD_TOGGLE_VISIBLE = "field.toggle_visible"


NOTIFIER_NAMES: tuple[str, ...] = (
    "navigate_requested",
    "data_requested",
    "data_loading",
    "data_loaded",
    "sort_changed",
    "pagination_changed",
    "state_changed",
    "field_changed",
)
