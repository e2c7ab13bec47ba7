"""List data source settings loaded from environment variables via Pydantic."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings


class SortSettings(BaseModel):
    model_config = {"frozen": True}

    default_dir: str = "desc"
    default_name: Optional[str] = None
    class_name_default: str = "lds-sort"
    class_name_asc: str = "lds-sort-asc"
    class_name_desc: str = "lds-sort-desc"
    icon: Optional[str] = None


class PaginationSettings(BaseModel):
    model_config = {"frozen": True}

    enabled: bool = False
    page_size: int = Field(default=10, gt=0)
    button_count: int = Field(default=7, gt=0)
    first_title: str = "First"
    last_title: str = "Last"
    next_title: str = "Next"
    prev_title: str = "Prev"


class HttpSettings(BaseModel):
    model_config = {"frozen": True}

    method: str = "GET"


class ListSettings(BaseSettings):
    """Configuration handed to every list data source at construction."""

    model_config = {
        "env_prefix": "LDS_",
        "env_nested_delimiter": "__",
        "case_sensitive": False,
        "frozen": True,
    }

    # Persistence (consumed by the snapshot layer)
    save_state: bool = False
    storage: str = "session"

    # Diagnostics
    debug_mode: int = 0
    max_subscribers: Optional[int] = None
    log_level: str = "INFO"

    # Routing integration
    use_routing: bool = False

    sort: SortSettings = Field(default_factory=SortSettings)
    pagination: PaginationSettings = Field(default_factory=PaginationSettings)
    http: HttpSettings = Field(default_factory=HttpSettings)

    @property
    def debug(self) -> bool:
        return self.debug_mode > 0


def get_settings() -> ListSettings:
    """Return a freshly loaded settings instance."""
    return ListSettings()
