"""Payload containers exchanged between a list data source and its fetch layer.

``DataInput`` is what the fetch layer hands back after a data request;
``PageData`` is the slice of items retained per loaded page index.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, List, Mapping, Optional, TypeVar

T = TypeVar("T")


@dataclass
class PageData(Generic[T]):
    """Items retained for one page index."""

    page_index: int
    items: List[T] = field(default_factory=list)


@dataclass
class DataInput(Generic[T]):
    """Result of one fetch: the page items plus the total across all pages.

    ``total`` may be ``None`` when the backend does not report it, in which
    case the item count is used.
    """

    items: Optional[List[T]] = None
    total: Optional[int] = None
    error: Any = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "DataInput[Any]":
        return cls(
            items=data.get("items"),
            total=data.get("total"),
            error=data.get("error"),
        )

    @property
    def has_error(self) -> bool:
        return self.error is not None
