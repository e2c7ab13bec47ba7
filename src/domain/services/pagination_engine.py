from __future__ import annotations

import math
from dataclasses import fields, replace

from domain.models.view_state import DEFAULT_BUTTON_COUNT, PaginationState


class PaginationEngine:

    def compute(self, pagination: PaginationState, total_item_count: int) -> PaginationState:
        """Derive page count, item range and page-button window.

        Returns a new state; *pagination* is left untouched.
        """
        if not pagination.enabled:
            return replace(
                pagination,
                total_page_count=1,
                start_paging_index=0,
                end_paging_index=0,
                start_item_index=0,
                end_item_index=0,
                page_index=-1,
                page_size=0,
                pages=[],
            )

        page_size = pagination.page_size
        button_count = pagination.button_count or DEFAULT_BUTTON_COUNT
        half_buttons = button_count // 2

        if page_size > 0:
            total_page_count = math.ceil(total_item_count / page_size)
        else:
            total_page_count = 0

        # An empty list at page 0 stays at page 0.
        page_index = max(pagination.page_index, 0)
        if total_page_count != 0 and page_index > 0 and page_index >= total_page_count:
            page_index = total_page_count - 1

        # past-the-end pages of an empty list keep an empty item range
        start_item_index = min(page_index * page_size, total_item_count)
        end_item_index = min(start_item_index + page_size, total_item_count)

        if page_index + half_buttons >= total_page_count:
            end_paging_index = total_page_count - 1
        else:
            end_paging_index = page_index + half_buttons

        # keep the window full width near the start
        if end_paging_index < button_count - 1:
            end_paging_index = min(button_count, total_page_count) - 1

        start_paging_index = max(0, end_paging_index - button_count + 1)

        return replace(
            pagination,
            page_index=page_index,
            total_page_count=total_page_count,
            start_item_index=start_item_index,
            end_item_index=end_item_index,
            start_paging_index=start_paging_index,
            end_paging_index=end_paging_index,
            pages=list(range(start_paging_index, end_paging_index + 1)),
        )

    def has_changed(self, old: PaginationState, new: PaginationState) -> bool:
        if old.page_index != new.page_index or old.page_size != new.page_size:
            return True
        if not new.enabled:
            return False
        return old.total_page_count != new.total_page_count

    def apply(
        self,
        pagination: PaginationState,
        total_item_count: int,
        previous: PaginationState | None = None,
    ) -> bool:
        """Recompute *pagination* in place.

        Returns whether the change is one listeners must be notified of,
        measured against *previous* when the caller already edited
        *pagination* before recomputing.
        """
        computed = self.compute(pagination, total_item_count)
        changed = self.has_changed(previous or pagination, computed)
        for f in fields(computed):
            setattr(pagination, f.name, getattr(computed, f.name))
        return changed
