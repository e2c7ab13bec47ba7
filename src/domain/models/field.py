from __future__ import annotations

import enum
import weakref
from dataclasses import dataclass, field, fields, replace
from typing import Any, Mapping, Optional, Protocol

from domain.events.list_events import ChangeReason
from domain.events.notifier import EventNotifier


class FieldDataType(str, enum.Enum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"

    @classmethod
    def parse(cls, value: Any) -> "FieldDataType":
        """Resolve *value* to a member; unknown or missing types are strings."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            return cls.STRING


class FieldOwner(Protocol):
    """What a field needs from the data source that registered it."""

    field_changed: EventNotifier[str]
    state_changed: EventNotifier[str]


# camelCase keys accepted by ``Field.from_mapping``
_MAPPING_ALIASES: dict[str, str] = {
    "dataType": "data_type",
    "sort1Name": "sort1_name",
    "sort1Dir": "sort1_dir",
    "sort2Name": "sort2_name",
    "sort2Dir": "sort2_dir",
    "visibleCondition": "visible_condition",
}


@dataclass
class Field:
    """Describes one column of a list: identity, display and sort defaults."""

    name: str
    title: Optional[str] = None
    data_type: Optional[str] = None
    visible: bool = True
    sortable: bool = True
    sort1_name: Optional[str] = None
    sort1_dir: Optional[str] = None
    sort2_name: Optional[str] = None
    sort2_dir: Optional[str] = None
    visible_condition: Any = None
    _owner: Optional[weakref.ReferenceType[Any]] = field(
        default=None, init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        if self.sort1_name is None:
            self.sort1_name = self.name

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Field":
        known = {f.name for f in fields(cls) if f.init}
        kwargs: dict[str, Any] = {}
        for key, value in data.items():
            key = _MAPPING_ALIASES.get(key, key)
            if key in known:
                kwargs[key] = value
        if kwargs.get("visible") is None:
            kwargs.pop("visible", None)
        if kwargs.get("sortable") is None:
            kwargs.pop("sortable", None)
        return cls(**kwargs)

    @property
    def resolved_data_type(self) -> FieldDataType:
        return FieldDataType.parse(self.data_type)

    @property
    def data_source(self) -> Optional[FieldOwner]:
        """The owning data source, if it is still alive."""
        if self._owner is None:
            return None
        return self._owner()

    def attach(self, owner: FieldOwner) -> None:
        self._owner = weakref.ref(owner)

    def detach(self) -> None:
        self._owner = None

    def clone(self) -> "Field":
        """Unowned copy carrying the same descriptor values."""
        return replace(self)

    def toggle_visible(self, call_state_changed: bool = False) -> None:
        self.visible = not self.visible
        owner = self.data_source
        if owner is None:
            return
        owner.field_changed.emit(ChangeReason.FIELD_TOGGLE_VISIBLE)
        if call_state_changed:
            owner.state_changed.emit(ChangeReason.FIELD_TOGGLE_VISIBLE)
