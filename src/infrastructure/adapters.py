"""Adapter implementations bridging infrastructure to application-layer ports.

Provides an in-memory snapshot repository that keeps snapshots in their
serialised JSON form, and a listener that mirrors data source notifications
into the structured log.
"""

from __future__ import annotations

from typing import Any, Callable, Optional

from domain.events import NOTIFIER_NAMES
from domain.models import CacheSnapshot

from application.schemas.snapshot import snapshot_from_json, snapshot_to_json
from application.services.list_data_source import ListDataSource
from infrastructure.observability.logging_config import get_logger


# ---------------------------------------------------------------------------
# Snapshot repository (in-memory, swap for session/local storage in a UI host)
# ---------------------------------------------------------------------------

class InMemorySnapshotRepository:
    """Keyed snapshot store holding serialised JSON payloads.

    Storing the serialised form means every ``get`` hands out a fresh
    object graph, the way a real storage medium would.
    """

    def __init__(self, storage: str = "session") -> None:
        self.storage = storage
        self._store: dict[str, str] = {}

    def get(self, key: str) -> Optional[CacheSnapshot]:
        payload = self._store.get(key)
        if payload is None:
            return None
        return snapshot_from_json(payload)

    def save(self, key: str, snapshot: CacheSnapshot) -> CacheSnapshot:
        self._store[key] = snapshot_to_json(snapshot)
        return snapshot

    def delete(self, key: str) -> None:
        self._store.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._store)

    def __len__(self) -> int:
        return len(self._store)


# ---------------------------------------------------------------------------
# Event listener
# ---------------------------------------------------------------------------

class LoggingEventListener:
    """Logs every notification emitted by the attached data sources."""

    def __init__(self) -> None:
        self._log = get_logger("list_state.events")
        self._detachers: dict[str, list[Callable[[], None]]] = {}

    def attach(self, data_source: ListDataSource[Any]) -> None:
        if data_source.id in self._detachers:
            return
        log = self._log.bind(data_source=data_source.id, list_type=data_source.type)
        detachers: list[Callable[[], None]] = []
        for name in NOTIFIER_NAMES:
            notifier = getattr(data_source, name)
            detachers.append(notifier.subscribe(self._handler(log, name)))
        self._detachers[data_source.id] = detachers

    def detach(self, data_source_id: str) -> None:
        for unsubscribe in self._detachers.pop(data_source_id, []):
            unsubscribe()

    @property
    def attached(self) -> list[str]:
        return list(self._detachers)

    @staticmethod
    def _handler(log: Any, event: str) -> Callable[[Any], None]:
        def handle(payload: Any) -> None:
            # full view states are too noisy for the log
            if event == "pagination_changed":
                pagination = payload.pagination
                log.info(event, page_index=pagination.page_index, page_size=pagination.page_size,
                         total_page_count=pagination.total_page_count)
            elif event == "data_loaded":
                log.info(event, item_count=len(payload.items or []), total=payload.total)
            else:
                log.info(event, reason=payload)

        return handle
