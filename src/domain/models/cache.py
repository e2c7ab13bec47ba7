from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Optional

from domain.models.view_state import ViewState


@dataclass
class FieldVisibility:
    name: str
    visible: bool = True


@dataclass
class CacheSnapshot:
    """Externally persisted state used to rehydrate a list data source."""

    id: str = ""
    path_name: str = ""
    type: str = ""
    state: ViewState = field(default_factory=ViewState)
    filters: dict[str, Any] = field(default_factory=dict)
    field_list: Optional[list[FieldVisibility]] = None
    date: str = field(default_factory=lambda: datetime.now(UTC).isoformat())

    def find_field(self, name: str) -> Optional[FieldVisibility]:
        for entry in self.field_list or []:
            if entry.name == name:
                return entry
        return None
