from domain.models.cache import CacheSnapshot, FieldVisibility
from domain.models.field import Field, FieldDataType, FieldOwner
from domain.models.view_state import DEFAULT_BUTTON_COUNT, PaginationState, ViewState

__all__ = [
    "DEFAULT_BUTTON_COUNT",
    "CacheSnapshot",
    "Field",
    "FieldDataType",
    "FieldOwner",
    "FieldVisibility",
    "PaginationState",
    "ViewState",
]
