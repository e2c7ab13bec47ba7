"""Shared fixtures for unit tests."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

import pytest

# Ensure src is importable
sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from application.services.list_data_source import ListDataSource
from domain.events import EventNotifier
from domain.models import Field
from infrastructure.adapters import InMemorySnapshotRepository
from infrastructure.settings import ListSettings, PaginationSettings, SortSettings

DATA_SOURCE_ID = "orders"
DATA_SOURCE_TYPE = "grid"


class Recorder:
    """Collects every value a notifier emits."""

    def __init__(self) -> None:
        self.calls: list[Any] = []

    def __call__(self, value: Any) -> None:
        self.calls.append(value)

    @property
    def count(self) -> int:
        return len(self.calls)

    @property
    def last(self) -> Any:
        return self.calls[-1] if self.calls else None


@pytest.fixture
def record():
    """Subscribe a fresh :class:`Recorder` to a notifier."""

    def _record(notifier: EventNotifier[Any]) -> Recorder:
        recorder = Recorder()
        notifier.subscribe(recorder)
        return recorder

    return _record


@pytest.fixture
def settings() -> ListSettings:
    return ListSettings(
        pagination=PaginationSettings(enabled=True, page_size=10, button_count=7),
        sort=SortSettings(default_dir="desc"),
    )


@pytest.fixture
def unpaged_settings() -> ListSettings:
    return ListSettings()


@pytest.fixture
def routing_settings() -> ListSettings:
    return ListSettings(
        use_routing=True,
        pagination=PaginationSettings(enabled=True, page_size=10),
    )


@pytest.fixture
def saving_settings() -> ListSettings:
    return ListSettings(
        save_state=True,
        pagination=PaginationSettings(enabled=True, page_size=10),
    )


@pytest.fixture
def sample_fields() -> list[Field]:
    return [
        Field(name="Id", title="#", data_type="number"),
        Field(name="Name", title="Name"),
        Field(name="CatId", title="Category", data_type="number"),
        Field(name="Active", title="Active", data_type="boolean"),
        Field(name="Notes", title="Notes", sortable=False),
    ]


@pytest.fixture
def ds(settings: ListSettings) -> ListDataSource[dict[str, Any]]:
    return ListDataSource(DATA_SOURCE_ID, DATA_SOURCE_TYPE, settings)


@pytest.fixture
def unpaged_ds(unpaged_settings: ListSettings) -> ListDataSource[dict[str, Any]]:
    return ListDataSource(DATA_SOURCE_ID, DATA_SOURCE_TYPE, unpaged_settings)


@pytest.fixture
def snapshot_repo() -> InMemorySnapshotRepository:
    return InMemorySnapshotRepository()


@pytest.fixture
def make_items():
    def _make(count: int, start: int = 0) -> list[dict[str, Any]]:
        return [{"Id": start + i, "Name": f"item-{start + i}"} for i in range(count)]

    return _make
