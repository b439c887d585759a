"""Event model — one normalized log record plus its delivery target."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

INDEX_PREFIX = "logstash-"
DEFAULT_TYPE = "logs"
SCHEMA_VERSION = 1


def index_for(when: datetime) -> str:
    """Daily index name, e.g. ``logstash-2024.01.01``."""
    return INDEX_PREFIX + when.strftime("%Y.%m.%d")


def rfc3339(when: datetime) -> str:
    """Format an aware datetime as RFC 3339 with second precision."""
    stamp = when.isoformat(timespec="seconds")
    if stamp.endswith("+00:00"):
        stamp = stamp[:-6] + "Z"
    return stamp


@dataclass(frozen=True)
class Event:
    target_index: str
    target_type: str = DEFAULT_TYPE
    fields: dict[str, Any] = field(default_factory=dict)

    @property
    def url_path(self) -> str:
        return f"/{self.target_index}/{self.target_type}"
