"""ServiceNow change request adapter.

Implements the health monitor (ONLINE/OFFLINE classification of the
remote instance) and the record gateway (canonical reshaping of change
records) on top of a TransportPort.
"""

import logging
from collections.abc import Mapping
from typing import Any

from .errors import ChangeBridgeError, InstanceHibernatingError, TransportError
from .events import EventEmitter, EventHandler
from .models import (
    AdapterIdentity,
    ChangeRecord,
    ConnectionConfig,
    HealthStatus,
    RawResponse,
)
from .normalizer import is_hibernating, normalize_records
from .ports import ChangeManagementPort, CompletionCallback, TransportPort


class ServiceNowAdapter(ChangeManagementPort):
    """Bridges the host platform to a ServiceNow change request table.

    The adapter owns its event sink rather than inheriting one: the host
    subscribes through ``on()`` (or ``events.on()``) to the ONLINE and
    OFFLINE events, each carrying ``{"id": <instance id>}``.

    Every operation is an independent coroutine. Overlapping calls are
    not serialized; their completions and emitted events have no defined
    order relative to each other.
    """

    def __init__(
        self,
        instance_id: AdapterIdentity,
        config: ConnectionConfig,
        transport: TransportPort,
        logger: logging.Logger | None = None,
        events: EventEmitter | None = None,
    ):
        """Initialize the adapter.

        Args:
            instance_id: Identifier of this configured instance, used to tag
                log lines and event payloads.
            config: Connection details; also supplies the default payload for
                record creation.
            transport: Transport built from the same config.
            logger: Logger to write to. Defaults to this module's logger.
            events: Event sink to publish status on. A private one is created
                when omitted.
        """
        self.id = instance_id
        self.config = config
        self.transport = transport
        self.logger = logger or logging.getLogger(__name__)
        self.events = events or EventEmitter()

    def on(self, event: str, handler: EventHandler) -> None:
        """Subscribe a handler to one of the adapter's status events."""
        self.events.on(event, handler)

    async def connect(self) -> None:
        """Complete a single health check and emit ONLINE or OFFLINE.

        The host calls this once after construction; all connection details
        were supplied to the constructor.
        """
        await self.healthcheck()

    async def healthcheck(
        self, callback: CompletionCallback | None = None
    ) -> HealthStatus:
        """Verify the remote instance is available and healthy.

        Classification order:
        1. Transport failure -> OFFLINE, callback gets the error.
        2. Successful call serving the hibernation page -> OFFLINE, callback
           gets an InstanceHibernatingError.
        3. Otherwise -> ONLINE, callback gets the normalized records.

        The read goes through the same path as get_record, so the body is
        only inspected when the transport call succeeded. Exactly one status
        event is emitted per call.
        """
        try:
            response = await self._read()
        except Exception as e:
            self.emit_offline()
            self.logger.error(
                f"Error returned: {e} for service instance {self.id}",
                exc_info=not isinstance(e, ChangeBridgeError),
            )
            if callback is not None:
                callback(None, e)
            return HealthStatus.OFFLINE

        records = normalize_records(response.body)
        self.emit_online()
        self.logger.debug(
            f"Health check returned {len(records)} record(s) "
            f"for service instance {self.id}"
        )
        if callback is not None:
            callback(records, None)
        return HealthStatus.ONLINE

    def emit_offline(self) -> None:
        """Emit OFFLINE, indicating the external system is not available."""
        self.emit_status(HealthStatus.OFFLINE)
        self.logger.warning(f"ServiceNow: Instance {self.id} is unavailable.")

    def emit_online(self) -> None:
        """Emit ONLINE, indicating the external system is available."""
        self.emit_status(HealthStatus.ONLINE)
        self.logger.debug(f"ServiceNow: Instance {self.id} is available.")

    def emit_status(self, status: HealthStatus) -> None:
        """Publish a status event identifying this adapter instance."""
        self.events.emit(status.value, {"id": self.id})

    async def _read(self) -> RawResponse:
        """Read the configured table, rejecting the hibernation page.

        Raises:
            TransportError: If the read failed.
            InstanceHibernatingError: If the instance served its placeholder.
        """
        return self._ensure_available(await self.transport.get())

    @staticmethod
    def _ensure_available(response: RawResponse) -> RawResponse:
        if is_hibernating(response.body):
            raise InstanceHibernatingError()
        return response

    async def get_record(
        self, callback: CompletionCallback | None = None
    ) -> list[ChangeRecord]:
        """Retrieve change records from the configured table.

        Args:
            callback: Optional completion callback. When supplied, a transport
                failure or a hibernating instance is delivered to it instead
                of being raised.

        Returns:
            Records in canonical shape; empty when the table returned none or
            the call failed and was reported through the callback.

        Raises:
            TransportError: If the read failed and no callback was supplied.
            InstanceHibernatingError: If the instance is hibernating and no
                callback was supplied.
        """
        try:
            response = await self._read()
        except (TransportError, InstanceHibernatingError) as e:
            self.logger.error(
                f"Failed to get records for service instance {self.id}: {e}"
            )
            if callback is None:
                raise
            callback(None, e)
            return []

        records = normalize_records(response.body)
        if callback is not None:
            callback(records, None)
        return records

    async def post_record(
        self,
        callback: CompletionCallback | None = None,
        payload: Mapping[str, Any] | None = None,
    ) -> list[ChangeRecord]:
        """Create a change record in the configured table.

        Args:
            callback: Optional completion callback, same contract as
                get_record.
            payload: Record fields to submit. Defaults to the configured
                record payload.

        Returns:
            The created record(s) echoed by the remote service, in canonical
            shape.

        Raises:
            TransportError: If the create failed and no callback was supplied.
            InstanceHibernatingError: If the instance is hibernating and no
                callback was supplied.
        """
        body = dict(payload if payload is not None else self.config.record_payload)
        try:
            response = self._ensure_available(
                await self.transport.post({"body": body})
            )
        except (TransportError, InstanceHibernatingError) as e:
            self.logger.error(
                f"Failed to create record for service instance {self.id}: {e}"
            )
            if callback is None:
                raise
            callback(None, e)
            return []

        records = normalize_records(response.body)
        self.logger.info(
            f"Created {len(records)} record(s) for service instance {self.id}"
        )
        if callback is not None:
            callback(records, None)
        return records
