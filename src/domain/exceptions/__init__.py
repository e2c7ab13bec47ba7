from domain.exceptions.list_exceptions import (
    DataSourceDisposedError,
    ListStateError,
    NotifierCompletedError,
)

__all__ = [
    "DataSourceDisposedError",
    "ListStateError",
    "NotifierCompletedError",
]
