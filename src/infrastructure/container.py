"""Dependency injection container for list data sources.

Wires settings, the snapshot repository and the snapshot service together
and hands out data sources that are restored, persisted and logged the
same way everywhere.
"""

from __future__ import annotations

import logging
from typing import Any

from application.services.list_data_source import ListDataSource
from application.services.snapshot_service import SnapshotService
from infrastructure.adapters import InMemorySnapshotRepository, LoggingEventListener
from infrastructure.observability.logging_config import setup_logging
from infrastructure.settings import ListSettings, get_settings

logger = logging.getLogger(__name__)


class ServiceContainer:
    """Central DI container that owns all service instances."""

    def __init__(self, settings: ListSettings | None = None) -> None:
        self.settings = settings or get_settings()

        # Infrastructure adapters
        self.snapshot_repo = InMemorySnapshotRepository(storage=self.settings.storage)
        self.event_listener = LoggingEventListener()

        # Application services
        self.snapshot_service = SnapshotService(
            repository=self.snapshot_repo,
            settings=self.settings,
        )

        logger.info("ServiceContainer initialized")

    def create_data_source(
        self,
        id: str,
        type: str,
        path_name: str = "",
        *,
        track_state: bool = True,
    ) -> ListDataSource[Any]:
        """Open a data source, restoring and tracking it when ``save_state`` is on."""
        data_source = self.snapshot_service.open(id, type, path_name)
        if track_state:
            self.snapshot_service.track(data_source, path_name)
        if self.settings.debug:
            self.event_listener.attach(data_source)
        return data_source

    def release_data_source(self, data_source: ListDataSource[Any], path_name: str = "") -> None:
        """Persist a final snapshot (when enabled) and dispose the data source."""
        if self.settings.save_state:
            self.snapshot_service.save(data_source, path_name)
        self.event_listener.detach(data_source.id)
        data_source.dispose()


# Module-level singleton
_container: ServiceContainer | None = None


def get_container() -> ServiceContainer:
    """Return the global container singleton, configuring logging on first use."""
    global _container
    if _container is None:
        settings = get_settings()
        setup_logging(settings.log_level)
        _container = ServiceContainer(settings)
    return _container


def reset_container() -> None:
    """Reset the global container (for testing)."""
    global _container
    _container = None
