"""
Pydantic v2 schemas for serialising cache snapshots.

The wire format uses camelCase keys (``pathName``, ``fieldList``,
``pageIndex`` ...) so snapshots written by other front ends can be read
back.  Both snake_case and camelCase are accepted on input.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from domain.models import CacheSnapshot, FieldVisibility, PaginationState, ViewState

# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------


class _CamelModel(BaseModel):
    """Base model emitting camelCase aliases and reading dataclass attributes."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ---------------------------------------------------------------------------
# View state
# ---------------------------------------------------------------------------


class PaginationStateSchema(_CamelModel):
    enabled: bool = False
    page_index: int = 0
    page_size: int = 0
    total_page_count: int = 1
    pages: list[int] = Field(default_factory=list)
    start_paging_index: int = 0
    end_paging_index: int = 0
    start_item_index: int = 0
    end_item_index: int = 0
    button_count: int = Field(default=7, ge=1)

    def to_domain(self) -> PaginationState:
        return PaginationState(**self.model_dump())


class ViewStateSchema(_CamelModel):
    html_id: str = ""
    sort1_name: str | None = None
    sort1_dir: str | None = None
    sort2_name: str | None = None
    sort2_dir: str | None = None
    total_item_count: int = Field(default=0, ge=0)
    show_spinner: bool = False
    area_expanded: bool = False
    data: dict[str, Any] = Field(default_factory=dict)
    source_url: str | None = None
    query_string: str | None = None
    pagination: PaginationStateSchema = Field(default_factory=PaginationStateSchema)

    def to_domain(self) -> ViewState:
        values = self.model_dump(exclude={"pagination"})
        return ViewState(pagination=self.pagination.to_domain(), **values)


# ---------------------------------------------------------------------------
# Snapshot
# ---------------------------------------------------------------------------


class FieldVisibilitySchema(_CamelModel):
    name: str
    visible: bool = True


class CacheSnapshotSchema(_CamelModel):
    """Serialised form of :class:`domain.models.CacheSnapshot`."""

    id: str
    path_name: str = ""
    type: str = ""
    state: ViewStateSchema = Field(default_factory=ViewStateSchema)
    filters: dict[str, Any] = Field(default_factory=dict)
    field_list: list[FieldVisibilitySchema] | None = None
    date: str = ""

    @classmethod
    def from_domain(cls, snapshot: CacheSnapshot) -> "CacheSnapshotSchema":
        return cls.model_validate(snapshot)

    def to_domain(self) -> CacheSnapshot:
        field_list = None
        if self.field_list is not None:
            field_list = [FieldVisibility(name=f.name, visible=f.visible) for f in self.field_list]
        return CacheSnapshot(
            id=self.id,
            path_name=self.path_name,
            type=self.type,
            state=self.state.to_domain(),
            filters=dict(self.filters),
            field_list=field_list,
            date=self.date,
        )


def snapshot_to_json(snapshot: CacheSnapshot) -> str:
    return CacheSnapshotSchema.from_domain(snapshot).model_dump_json(by_alias=True)


def snapshot_from_json(payload: str | bytes) -> CacheSnapshot:
    return CacheSnapshotSchema.model_validate_json(payload).to_domain()
