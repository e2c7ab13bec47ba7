from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

DEFAULT_BUTTON_COUNT: int = 7


@dataclass
class PaginationState:
    """Pagination window of a list view.

    ``end_item_index`` is exclusive.  When ``enabled`` is false the state
    holds the "pagination off" sentinel: one page, ``page_index == -1``,
    ``page_size == 0`` and no page buttons.
    """

    enabled: bool = False
    page_index: int = 0
    page_size: int = 0
    total_page_count: int = 1
    pages: list[int] = field(default_factory=list)
    start_paging_index: int = 0
    end_paging_index: int = 0
    start_item_index: int = 0
    end_item_index: int = 0
    button_count: int = DEFAULT_BUTTON_COUNT


@dataclass
class ViewState:
    """Serializable sort / pagination / UI-flag snapshot of one list view."""

    html_id: str = ""
    sort1_name: Optional[str] = None
    sort1_dir: Optional[str] = None
    sort2_name: Optional[str] = None
    sort2_dir: Optional[str] = None
    total_item_count: int = 0
    show_spinner: bool = False
    area_expanded: bool = False
    data: dict[str, Any] = field(default_factory=dict)
    source_url: Optional[str] = None
    query_string: Optional[str] = None
    pagination: PaginationState = field(default_factory=PaginationState)

    @classmethod
    def create(
        cls,
        html_id: str,
        page_index: int,
        page_size: int,
        total_item_count: int,
        sort1_name: Optional[str] = None,
        sort1_dir: Optional[str] = None,
    ) -> "ViewState":
        return cls(
            html_id=html_id,
            sort1_name=sort1_name,
            sort1_dir=sort1_dir,
            total_item_count=total_item_count,
            pagination=PaginationState(page_index=page_index, page_size=page_size),
        )
