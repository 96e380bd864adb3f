"""Port interfaces for the ServiceNow change request adapter.

These abstract base classes define the boundaries between the core
adapter logic and external collaborators. Implementations live in the
adapters/ package.

Port Interface Categories:

1. **Driven Ports** (core calls out to adapters)
   - TransportPort: Authenticated HTTP calls against the change table

2. **Driving Ports** (host platform, CLI, and scheduler call into core)
   - ChangeManagementPort: Health checks and record operations
"""

from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from typing import Any

from .models import ChangeRecord, HealthStatus, RawResponse

# Data-first completion callback: (response_data, error). Exactly one of
# the two arguments is not None.
CompletionCallback = Callable[[Any, Exception | None], None]


# ============================================================================
# DRIVEN PORTS (Core calls out to adapters)
# ============================================================================


class TransportPort(ABC):
    """Port for authenticated HTTP calls against the configured table.

    Implementations are constructed once per adapter instance with the
    instance's ConnectionConfig and own their connection handling,
    including any request timeout.
    """

    @abstractmethod
    async def get(self) -> RawResponse:
        """Issue a read against the configured table.

        Returns:
            RawResponse with the decoded body (JSON document or text).

        Raises:
            TransportError: On network, authentication, or HTTP failure.
        """

    @abstractmethod
    async def post(self, options: Mapping[str, Any]) -> RawResponse:
        """Issue a create against the configured table.

        Args:
            options: Request options. The ``body`` member holds the record
                fields to submit.

        Returns:
            RawResponse whose body echoes the created record.

        Raises:
            TransportError: On network, authentication, or HTTP failure.
        """

    @abstractmethod
    async def close(self) -> None:
        """Release connection resources."""


# ============================================================================
# DRIVING PORTS (External systems call into core)
# ============================================================================


class ChangeManagementPort(ABC):
    """Port for health monitoring and change record operations."""

    @abstractmethod
    async def connect(self) -> None:
        """Run the initial health check after construction."""

    @abstractmethod
    async def healthcheck(
        self, callback: CompletionCallback | None = None
    ) -> HealthStatus:
        """Classify remote availability and emit the matching status event.

        Args:
            callback: Optional completion callback, invoked once with either
                the retrieved records or the error that made the check fail.

        Returns:
            The status that was emitted.
        """

    @abstractmethod
    async def get_record(
        self, callback: CompletionCallback | None = None
    ) -> list[ChangeRecord]:
        """Retrieve change records in canonical shape.

        Raises:
            TransportError: If no callback was supplied and the read failed.
            InstanceHibernatingError: If no callback was supplied and the
                instance is hibernating.
        """

    @abstractmethod
    async def post_record(
        self,
        callback: CompletionCallback | None = None,
        payload: Mapping[str, Any] | None = None,
    ) -> list[ChangeRecord]:
        """Create a change record and return it in canonical shape.

        Raises:
            TransportError: If no callback was supplied and the create failed.
            InstanceHibernatingError: If no callback was supplied and the
                instance is hibernating.
        """


__all__ = ["ChangeManagementPort", "CompletionCallback", "TransportPort"]
