"""Domain models for the ServiceNow change request adapter.

All models in this module use only Python standard library types,
keeping the core free of transport and framework dependencies.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, TypeAlias

AdapterIdentity: TypeAlias = str


class HealthStatus(Enum):
    """Connectivity states reported to the host platform.

    The value doubles as the event name emitted for the status.
    """

    ONLINE = "ONLINE"
    OFFLINE = "OFFLINE"


@dataclass(frozen=True)
class Credentials:
    """Login credentials for the remote instance."""

    username: str
    password: str

    def __repr__(self) -> str:
        return f"Credentials(username={self.username!r}, password='***')"


@dataclass(frozen=True)
class ConnectionConfig:
    """Connection details for one configured adapter instance.

    record_payload is the body submitted when creating a record; it is
    converted to a read-only proxy on creation.
    """

    service_url: str
    credentials: Credentials
    table_name: str
    record_payload: dict[str, Any] | MappingProxyType[str, Any] = field(
        default_factory=dict
    )

    def __post_init__(self) -> None:
        """Validate connection invariants and freeze the payload."""
        if not self.service_url or not self.service_url.strip():
            raise ValueError("service_url must be a non-empty string")
        if not self.table_name or not self.table_name.strip():
            raise ValueError("table_name must be a non-empty string")
        if isinstance(self.record_payload, dict):
            object.__setattr__(
                self, "record_payload", MappingProxyType(self.record_payload)
            )


@dataclass(frozen=True)
class RawResponse:
    """The transport's result for a completed HTTP call.

    body is the decoded JSON document, or the raw text when the response
    was not JSON (e.g. the hibernation placeholder page).
    """

    status_code: int
    body: Any
    headers: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ChangeRecord:
    """A change request in the canonical shape exposed to callers.

    The core's normalized representation, independent of the remote
    table schema (number/sys_id become change_ticket_number/key).
    """

    change_ticket_number: str | None
    active: Any
    priority: Any
    description: str | None
    work_start: Any
    work_end: Any
    change_ticket_key: str | None

    def to_dict(self) -> dict[str, Any]:
        """Return the record as a plain dictionary with exactly its seven fields."""
        return {
            "change_ticket_number": self.change_ticket_number,
            "active": self.active,
            "priority": self.priority,
            "description": self.description,
            "work_start": self.work_start,
            "work_end": self.work_end,
            "change_ticket_key": self.change_ticket_key,
        }
