from __future__ import annotations


class ListStateError(Exception):
    """Base class for all list-state exceptions.

    Carries a short ``title`` alongside the human readable ``detail`` so
    callers can surface the failure without knowing exception internals.
    """

    def __init__(self, detail: str = "", *, title: str = "List State Error") -> None:
        super().__init__(detail)
        self.detail = detail
        self.title = title


class NotifierCompletedError(ListStateError):
    def __init__(self, name: str = "") -> None:
        self.name = name
        label = f" '{name}'" if name else ""
        super().__init__(
            detail=f"Notifier{label} is already completed",
            title="Notifier Completed",
        )


class DataSourceDisposedError(ListStateError):
    def __init__(self, data_source_id: str = "", method_name: str = "") -> None:
        self.data_source_id = data_source_id
        self.method_name = method_name
        super().__init__(
            detail=f"{method_name}() called on disposed data source {data_source_id}",
            title="Data Source Disposed",
        )
