"""Application service holding the presentation state of one list view.

``ListDataSource`` sits between UI components and the layers that fetch,
route and persist.  It owns sort, pagination and filter state, keeps the
pagination window consistent with the item count, and announces every
change through its notifiers.  It never fetches: ``reload()`` emits
``data_requested`` and the fetch layer answers later with ``set_data()``.

No public operation raises for ordinary misuse.  Bad input is normalised
and logged, and calls on a disposed instance are logged no-ops.
"""

from __future__ import annotations

import logging
import time
from copy import deepcopy
from dataclasses import replace
from typing import Any, Generic, Iterable, Mapping, MutableMapping, Optional, TypeVar, Union
from uuid import uuid4

from domain.events import NOTIFIER_NAMES, ChangeReason, EventNotifier
from domain.exceptions import DataSourceDisposedError
from domain.models import CacheSnapshot, Field, FieldVisibility, PaginationState, ViewState
from domain.services.filter_coercion import coerce_filter_value, is_empty_value, to_number
from domain.services.pagination_engine import PaginationEngine

from application.schemas.pagination import DataInput, PageData
from infrastructure.settings import ListSettings

logger = logging.getLogger(__name__)

T = TypeVar("T")

# ---------------------------------------------------------------------------
# Wire keys shared with routers and fetch layers
# ---------------------------------------------------------------------------

PAGE_INDEX_KEY = "pageIndex"
PAGE_SIZE_KEY = "pageSize"
SORT1_NAME_KEY = "sort1Name"
SORT1_DIR_KEY = "sort1Dir"
SORT2_NAME_KEY = "sort2Name"
SORT2_DIR_KEY = "sort2Dir"

PAGINATION_KEYS: frozenset[str] = frozenset({PAGE_INDEX_KEY, PAGE_SIZE_KEY})

_SORT_KEY_ATTRS: dict[str, str] = {
    SORT1_NAME_KEY: "sort1_name",
    SORT1_DIR_KEY: "sort1_dir",
    SORT2_NAME_KEY: "sort2_name",
    SORT2_DIR_KEY: "sort2_dir",
}

ROW_NUMBER_KEY = "row_number"

SORT_ASC = "asc"
SORT_DESC = "desc"


def toggle_sort_dir(direction: Optional[str]) -> str:
    if direction == SORT_ASC:
        return SORT_DESC
    if direction == SORT_DESC:
        return SORT_ASC
    return SORT_DESC


def _new_html_id() -> str:
    return f"lds{int(time.time() * 1000)}{uuid4().hex[:7]}"


def _stamp_row_number(item: Any, number: int) -> None:
    if isinstance(item, MutableMapping):
        item[ROW_NUMBER_KEY] = number
        return
    try:
        setattr(item, ROW_NUMBER_KEY, number)
    except (AttributeError, TypeError):
        logger.debug("Cannot stamp row number on %s item", type(item).__name__)


FieldInput = Union[Field, Mapping[str, Any]]
DataPayload = Union[DataInput[Any], Mapping[str, Any], None]


class ListDataSource(Generic[T]):
    """State core behind one filterable, sortable, paginated list."""

    def __init__(
        self,
        id: str,
        type: str,
        settings: Optional[ListSettings] = None,
        cache: Optional[CacheSnapshot] = None,
        *,
        engine: Optional[PaginationEngine] = None,
    ) -> None:
        self.id = id
        self.type = type
        self.settings: ListSettings = (settings or ListSettings()).model_copy()
        self._engine = engine or PaginationEngine()

        self.navigate_requested: EventNotifier[str] = self._notifier("navigate_requested")
        self.data_requested: EventNotifier[str] = self._notifier("data_requested")
        self.data_loading: EventNotifier[str] = self._notifier("data_loading")
        self.data_loaded: EventNotifier[DataInput[T]] = self._notifier("data_loaded")
        self.sort_changed: EventNotifier[Optional[str]] = self._notifier("sort_changed")
        self.pagination_changed: EventNotifier[ViewState] = self._notifier("pagination_changed")
        self.state_changed: EventNotifier[str] = self._notifier("state_changed")
        self.field_changed: EventNotifier[str] = self._notifier("field_changed")

        self.is_loading = False
        self.is_configured = False
        self.is_new = True

        self.field_list: list[Field] = []
        self.fields_backup: list[Field] = []
        self.sort_list1: list[Field] = []
        self.sort_list2: list[Field] = []
        self.sort_item1: Optional[Field] = None
        self.sort_item2: Optional[Field] = None
        self._field_map: dict[str, Field] = {}

        self._items: list[T] = []
        self._source_items: list[T] = []
        self._pages: list[PageData[T]] = []
        self._is_disposed = False

        if cache is not None:
            self.is_new = False
            self.cache = cache
            self.state = cache.state
            self.filters: dict[str, Any] = cache.filters if cache.filters is not None else {}
        else:
            self.cache = CacheSnapshot(id=id, type=type)
            self.state = ViewState.create(
                _new_html_id(), 0, self.settings.pagination.page_size, 0
            )
            self.state.pagination.enabled = self.settings.pagination.enabled
            self.state.pagination.button_count = self.settings.pagination.button_count
            self.filters = {}
            # disabled pagination starts from the sentinel too
            self._update_pagination_state()

    def _notifier(self, name: str) -> EventNotifier[Any]:
        return EventNotifier(
            f"{self.id}.{name}",
            debug=self.settings.debug,
            max_subscribers=self.settings.max_subscribers,
        )

    # -- fields -----------------------------------------------------------

    def set_fields(self, fields: Iterable[FieldInput], call_state_changed: bool = False) -> None:
        """Register the column descriptors of this list."""
        if self._check_disposed("set_fields"):
            return

        incoming = list(fields)
        self.sort_list1 = []
        self.sort_list2 = []
        self.sort_item1 = None
        self.sort_item2 = None
        self._field_map.clear()
        self.fields_backup = [
            f.clone() if isinstance(f, Field) else Field.from_mapping(f) for f in incoming
        ]

        default_dir = self.settings.sort.default_dir
        restore_visibility = bool(self.settings.save_state and self.cache.field_list)
        registered: list[Field] = []

        for data in incoming:
            field = data if isinstance(data, Field) else Field.from_mapping(data)
            if field.name in self._field_map:
                logger.warning("Duplicate field %s on %s; the last one wins", field.name, self.id)
            field.attach(self)
            self._field_map[field.name] = field

            if field.sortable:
                if field.sort1_name is None:
                    field.sort1_name = field.name
                if field.sort1_dir is None:
                    field.sort1_dir = default_dir
                if field.sort2_dir is None:
                    field.sort2_dir = default_dir
                self.sort_list1.append(field)
                self.sort_list2.append(field)
                if field.name == self.state.sort1_name:
                    self.sort_item1 = field
                if field.name == self.state.sort2_name:
                    self.sort_item2 = field

            if restore_visibility:
                cached = self.cache.find_field(field.name)
                if cached is not None:
                    field.visible = cached.visible

            registered.append(field)

        self.field_list = registered
        self.is_configured = True
        if call_state_changed:
            self.state_changed.emit(ChangeReason.SET_FIELDS)

    def field(self, name: str, condition: Optional[bool] = None) -> Optional[Field]:
        """Look up a field by name, optionally applying a visibility condition."""
        if self._check_disposed("field"):
            return None

        found = self._field_map.get(name)
        if found is None:
            logger.info("Field %s not found on %s", name, self.id)
            return None
        if condition is not None:
            found.visible_condition = condition
            found.visible = condition
        return found

    # -- data -------------------------------------------------------------

    def set_data(self, data: DataPayload) -> None:
        """Accept the result of a fetch triggered by ``data_requested``."""
        if self._check_disposed("set_data"):
            return

        if data is None:
            logger.warning("set_data called with no data on %s", self.id)
            data = DataInput(items=[], total=0)
        elif isinstance(data, Mapping):
            data = DataInput.from_mapping(data)
        elif not isinstance(data, DataInput):
            logger.warning("set_data called with unsupported %s on %s", type(data).__name__, self.id)
            data = DataInput(items=[], total=0)

        if data.items is None:
            data.items = []
        if data.has_error:
            logger.warning("Data load for %s reported an error: %s", self.id, data.error)

        self.set_items(data.items)
        self.state.total_item_count = data.total if data.total is not None else len(data.items)
        self._update_pagination_state()
        self.is_loading = False
        self.data_loaded.emit(data)

    def set_items(self, items: Optional[list[T]]) -> None:
        """Replace the current page's items and retain them by page index."""
        if self._check_disposed("set_items"):
            return

        if items is None:
            items = []
        offset = self.page_index * self.page_size
        for i, item in enumerate(items):
            _stamp_row_number(item, offset + i + 1)
        self._items = items

        page_index = self.state.pagination.page_index
        for page in self._pages:
            if page.page_index == page_index:
                page.items = items
                break
        else:
            self._pages.append(PageData(page_index=page_index, items=items))

    def set_source_items(self, items: Optional[list[T]]) -> None:
        """Replace the full unpaginated set used for client-side paging."""
        if self._check_disposed("set_source_items"):
            return

        if items is None:
            items = []
        self._source_items = items
        self.state.total_item_count = len(items)
        self._update_pagination_state()

    def set_source_url(self, url: str) -> None:
        if self._check_disposed("set_source_url"):
            return
        self.state.source_url = url

    def reload(self, reason: Optional[str] = None) -> None:
        """Ask the fetch layer for fresh data."""
        if self._check_disposed("reload"):
            return

        if self.state.sort1_dir is None:
            self.state.sort1_dir = self.settings.sort.default_dir
        if self.state.sort1_name is None:
            self.state.sort1_name = self.settings.sort.default_name
        if self.has_data:
            self._update_pagination_state()

        tag = reason or ChangeReason.RELOAD
        self.is_loading = True
        self.data_loading.emit(tag)
        self.data_requested.emit(tag)

    def clear_data(self) -> None:
        if self._check_disposed("clear_data"):
            return

        self._items = []
        self.state.total_item_count = 0
        self._update_pagination_state()
        self.state_changed.emit(ChangeReason.CLEAR_DATA)

    # -- paging -----------------------------------------------------------

    def load_page(self, page_index: int) -> None:
        if self._check_disposed("load_page"):
            return
        if self.state.pagination.page_index == page_index:
            return
        if page_index < 0:
            logger.warning("Page index must not be negative, got %s", page_index)
            return

        previous = replace(self.state.pagination)
        self.state.pagination.page_index = page_index
        self._update_pagination_state(previous)
        self.reload(ChangeReason.LOAD_PAGE)

    def load_next_page(self) -> None:
        pagination = self.state.pagination
        if pagination.total_page_count - 1 < pagination.page_index + 1:
            return
        self.load_page(pagination.page_index + 1)

    def set_page_size(self, size: int) -> None:
        if self._check_disposed("set_page_size"):
            return
        if size <= 0:
            logger.warning("Page size must be greater than 0, got %s", size)
            return
        self.state.pagination.page_size = size

    def change_page_size(self, size: int) -> None:
        if self._check_disposed("change_page_size"):
            return
        if size <= 0:
            logger.warning("Page size must be greater than 0, got %s", size)
            return
        if self.state.pagination.page_size == size:
            return

        previous = replace(self.state.pagination)
        self.state.pagination.page_size = size
        self._update_pagination_state(previous)
        self.reload(ChangeReason.CHANGE_PAGE_SIZE)

    def _update_pagination_state(self, previous: Optional[PaginationState] = None) -> None:
        """Recompute pagination; *previous* is the state before the caller's edits."""
        if self._engine.apply(self.state.pagination, self.state.total_item_count, previous):
            self.pagination_changed.emit(self.state)

    # -- sorting ----------------------------------------------------------

    def change_sort(self, name: Optional[str] = None, direction: Optional[str] = None) -> None:
        """Sort by *name*; repeating the current primary sort toggles direction."""
        if self._check_disposed("change_sort"):
            return

        state = self.state
        if state.sort1_name == name:
            state.sort1_dir = toggle_sort_dir(state.sort1_dir)
        else:
            state.sort1_name = name
            state.sort1_dir = direction or self.settings.sort.default_dir
        self.sort_item1 = self._field_map.get(name) if name is not None else None
        self.sort_changed.emit(name)

    # -- filters ----------------------------------------------------------

    def clear_filters(self) -> None:
        if self._check_disposed("clear_filters"):
            return

        self.filters = {}
        previous = replace(self.state.pagination)
        self.state.pagination.page_index = 0
        self._update_pagination_state(previous)

    def reset_filters(self) -> None:
        if self._check_disposed("reset_filters"):
            return

        self.clear_filters()
        if self.settings.use_routing:
            self.navigate_requested.emit(ChangeReason.RESET_FILTERS)
        else:
            self.reload(ChangeReason.RESET_FILTERS)

    def search(self) -> None:
        """Restart from the first page with the current filter values."""
        if self._check_disposed("search"):
            return

        previous = replace(self.state.pagination)
        self.state.pagination.page_index = 0
        self._update_pagination_state(previous)
        if self.settings.use_routing:
            self.filters[PAGE_INDEX_KEY] = self.state.pagination.page_index
            self.filters[PAGE_SIZE_KEY] = self.state.pagination.page_size
            self.navigate_requested.emit(ChangeReason.SEARCH)
        else:
            self.reload(ChangeReason.SEARCH)

    def get_filters(self) -> dict[str, Any]:
        """Merged request parameters for the fetch layer.

        Page index and size are written before and after the filter values
        so a filter key can never shadow them.
        """
        pagination = self.state.pagination
        page_size = pagination.page_size
        if page_size <= 0:
            page_size = self.settings.pagination.page_size

        filters: dict[str, Any] = {
            PAGE_INDEX_KEY: pagination.page_index,
            PAGE_SIZE_KEY: page_size,
        }
        filters.update(self.filters)
        filters[PAGE_INDEX_KEY] = pagination.page_index
        filters[PAGE_SIZE_KEY] = page_size
        filters[SORT1_NAME_KEY] = self.state.sort1_name or self.settings.sort.default_name
        filters[SORT1_DIR_KEY] = self.state.sort1_dir or self.settings.sort.default_dir
        filters[SORT2_NAME_KEY] = self.state.sort2_name
        filters[SORT2_DIR_KEY] = self.state.sort2_dir
        return filters

    def get_query_params(self, include_pagination: bool = True) -> dict[str, Any]:
        """Parameters for URL serialisation by an external router."""
        params = self.get_filters()
        if not (include_pagination and self.state.pagination.enabled):
            for key in PAGINATION_KEYS:
                params.pop(key, None)
        return {key: value for key, value in params.items() if value is not None}

    def apply_query_params(
        self,
        params: Mapping[str, Any],
        custom_field_types: Optional[Mapping[str, str]] = None,
    ) -> None:
        """Load filter, sort and pagination values from route parameters.

        Raw values are coerced by the data type of the matching field, or
        by *custom_field_types* for keys without a registered field.
        """
        if self._check_disposed("apply_query_params"):
            return

        pagination = self.state.pagination
        previous = replace(pagination)
        self._apply_pagination_params(pagination, params)

        for key, attr in _SORT_KEY_ATTRS.items():
            value = params.get(key)
            if not is_empty_value(value):
                setattr(self.state, attr, str(value))

        type_map: dict[str, str] = {
            f.name: f.data_type for f in self.field_list if f.data_type
        }
        if custom_field_types:
            type_map.update(custom_field_types)

        for key, value in params.items():
            if key in PAGINATION_KEYS or key in _SORT_KEY_ATTRS:
                continue
            if is_empty_value(value):
                continue
            accepted, converted = coerce_filter_value(value, type_map.get(key))
            if not accepted:
                logger.debug("Skipping filter %s: %r is not a number", key, value)
                continue
            self.filters[key] = converted

        if pagination.enabled:
            self._update_pagination_state(previous)

    def _apply_pagination_params(
        self, pagination: PaginationState, params: Mapping[str, Any]
    ) -> None:
        raw_index = params.get(PAGE_INDEX_KEY)
        if not is_empty_value(raw_index):
            page_index = to_number(raw_index)
            if not isinstance(page_index, int):
                logger.debug("Skipping %s: %r is not a whole number", PAGE_INDEX_KEY, raw_index)
            elif page_index >= 0:
                pagination.enabled = True
                pagination.page_index = page_index

        raw_size = params.get(PAGE_SIZE_KEY)
        if not is_empty_value(raw_size):
            page_size = to_number(raw_size)
            if not isinstance(page_size, int):
                logger.debug("Skipping %s: %r is not a whole number", PAGE_SIZE_KEY, raw_size)
            elif page_size > 0:
                pagination.enabled = True
                pagination.page_size = page_size

        if pagination.enabled:
            # leaving the "pagination off" sentinel
            if pagination.page_size <= 0:
                pagination.page_size = self.settings.pagination.page_size
            if pagination.page_index < 0:
                pagination.page_index = 0

    # -- state ------------------------------------------------------------

    def clear_state(self) -> None:
        if self._check_disposed("clear_state"):
            return

        state = self.state
        state.sort1_name = None
        state.sort1_dir = None
        state.sort2_name = None
        state.sort2_dir = None
        self.sort_item1 = None
        self.sort_item2 = None
        previous = replace(state.pagination)
        state.pagination.page_index = 0
        state.pagination.page_size = self.settings.pagination.page_size
        self._update_pagination_state(previous)
        self.state_changed.emit(ChangeReason.CLEAR_STATE)

    def reset(self) -> None:
        """Clear filters, state and data in one go."""
        if self._check_disposed("reset"):
            return

        self.clear_filters()
        self.clear_state()
        self.clear_data()
        self.state_changed.emit(ChangeReason.RESET)

    def toggle_area_expanded(self) -> None:
        if self._check_disposed("toggle_area_expanded"):
            return
        self.state.area_expanded = not self.state.area_expanded
        self.state_changed.emit(ChangeReason.TOGGLE_AREA_EXPANDED)

    def to_cache_snapshot(self, path_name: str = "") -> CacheSnapshot:
        """Capture what a persistence layer needs to restore this list."""
        return CacheSnapshot(
            id=self.id,
            path_name=path_name,
            type=self.type,
            state=deepcopy(self.state),
            filters=deepcopy(self.filters),
            field_list=[FieldVisibility(name=f.name, visible=f.visible) for f in self.field_list],
        )

    # -- lifecycle --------------------------------------------------------

    @property
    def notifiers(self) -> tuple[EventNotifier[Any], ...]:
        return tuple(getattr(self, name) for name in NOTIFIER_NAMES)

    def dispose(self) -> None:
        """Release subscribers and buffers.  Further mutations are no-ops."""
        if self._is_disposed:
            return

        for notifier in self.notifiers:
            notifier.complete()

        for field in self.field_list:
            field.detach()
        self._items = []
        self._source_items = []
        self._pages = []
        self.field_list = []
        self.sort_list1 = []
        self.sort_list2 = []
        self.sort_item1 = None
        self.sort_item2 = None
        self._field_map.clear()

        self._is_disposed = True
        logger.debug("Data source %s disposed", self.id)

    @property
    def is_disposed(self) -> bool:
        return self._is_disposed

    def ensure_active(self, method_name: str = "operation") -> None:
        """Raise instead of silently ignoring a disposed instance."""
        if self._is_disposed:
            raise DataSourceDisposedError(data_source_id=self.id, method_name=method_name)

    def _check_disposed(self, method_name: str) -> bool:
        if self._is_disposed:
            logger.warning("%s() called on disposed data source %s", method_name, self.id)
            return True
        return False

    # -- accessors --------------------------------------------------------

    @property
    def pagination(self) -> PaginationState:
        return self.state.pagination

    @property
    def page_index(self) -> int:
        return self.state.pagination.page_index

    @property
    def page_size(self) -> int:
        return self.state.pagination.page_size

    @property
    def total_count(self) -> int:
        return self.state.total_item_count

    @property
    def has_data(self) -> bool:
        return self._items is not None and len(self._items) > 0

    @property
    def is_last_page(self) -> bool:
        return self.state.pagination.total_page_count == self.state.pagination.page_index + 1

    @property
    def items(self) -> list[T]:
        return self._items

    @property
    def source_items(self) -> list[T]:
        return self._source_items

    @property
    def pages(self) -> list[PageData[T]]:
        return self._pages

    @property
    def fields(self) -> list[Field]:
        return self.field_list

    @property
    def html_id(self) -> str:
        return self.state.html_id

    def __repr__(self) -> str:
        return (
            f"ListDataSource(id={self.id!r}, type={self.type!r}, "
            f"page_index={self.page_index}, total={self.total_count}, "
            f"disposed={self._is_disposed})"
        )
