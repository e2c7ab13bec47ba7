"""Application service that persists and restores list data source state.

The data source itself never touches storage.  ``SnapshotService`` wires
its change notifications to a ``SnapshotRepository`` port when
``save_state`` is enabled, and rehydrates new instances from the stored
snapshot.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional, Protocol

from domain.models import CacheSnapshot

from application.services.list_data_source import ListDataSource
from infrastructure.settings import ListSettings

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Repository port
# ---------------------------------------------------------------------------

class SnapshotRepository(Protocol):
    """Port: keyed storage of :class:`CacheSnapshot` records."""

    def get(self, key: str) -> Optional[CacheSnapshot]: ...

    def save(self, key: str, snapshot: CacheSnapshot) -> CacheSnapshot: ...

    def delete(self, key: str) -> None: ...


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

class SnapshotService:
    """Restores data sources from, and saves them to, a snapshot repository."""

    def __init__(self, repository: SnapshotRepository, settings: ListSettings) -> None:
        self._repository = repository
        self._settings = settings

    @staticmethod
    def snapshot_key(id: str, path_name: str = "") -> str:
        return f"{path_name}:{id}"

    def open(self, id: str, type: str, path_name: str = "") -> ListDataSource[Any]:
        """Create a data source, rehydrated when a saved snapshot exists."""
        cache: Optional[CacheSnapshot] = None
        if self._settings.save_state:
            cache = self._repository.get(self.snapshot_key(id, path_name))
            if cache is not None:
                logger.info("Restoring data source %s from snapshot dated %s", id, cache.date)
        return ListDataSource(id, type, self._settings, cache)

    def save(self, data_source: ListDataSource[Any], path_name: str = "") -> Optional[CacheSnapshot]:
        if data_source.is_disposed:
            logger.warning("Not saving disposed data source %s", data_source.id)
            return None
        snapshot = data_source.to_cache_snapshot(path_name)
        return self._repository.save(self.snapshot_key(data_source.id, path_name), snapshot)

    def forget(self, id: str, path_name: str = "") -> None:
        self._repository.delete(self.snapshot_key(id, path_name))

    def track(self, data_source: ListDataSource[Any], path_name: str = "") -> Callable[[], None]:
        """Save a fresh snapshot after every state-affecting notification.

        Returns a callable that stops tracking.  Nothing is subscribed when
        ``save_state`` is off.
        """
        if not self._settings.save_state:
            return lambda: None

        def persist(_: Any) -> None:
            self.save(data_source, path_name)

        unsubscribers = [
            data_source.data_requested.subscribe(persist),
            data_source.navigate_requested.subscribe(persist),
            data_source.state_changed.subscribe(persist),
            data_source.sort_changed.subscribe(persist),
            data_source.pagination_changed.subscribe(persist),
            data_source.field_changed.subscribe(persist),
        ]

        def stop() -> None:
            for unsubscribe in unsubscribers:
                unsubscribe()

        return stop
