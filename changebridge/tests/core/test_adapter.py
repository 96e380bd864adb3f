"""Unit tests for ServiceNowAdapter.

Tests verify the health check classification (ONLINE, OFFLINE on
transport failure, OFFLINE on a hibernating instance), status emission,
and the record gateway's normalization and error pass-through.
"""

import logging
from typing import Any

import pytest

from changebridge.core.adapter import ServiceNowAdapter
from changebridge.core.errors import InstanceHibernatingError, TransportError
from changebridge.core.events import EventEmitter
from changebridge.core.models import (
    ChangeRecord,
    ConnectionConfig,
    Credentials,
    HealthStatus,
)
from changebridge.tests.fakes import EventRecorder, FakeTransportPort

LOGGER_NAME = "changebridge.tests.adapter"

HIBERNATING_BODY = "<html><head><title>Instance Hibernating page</title></head></html>"


# ============================================================================
# Test Fixtures
# ============================================================================


@pytest.fixture
def config() -> ConnectionConfig:
    """Create a connection config for testing."""
    return ConnectionConfig(
        service_url="https://dev12345.service-now.com",
        credentials=Credentials(username="admin", password="secret"),
        table_name="change_request",
        record_payload={"short_description": "Patch web tier"},
    )


@pytest.fixture
def transport() -> FakeTransportPort:
    """Create a fake transport."""
    return FakeTransportPort()


@pytest.fixture
def adapter(config: ConnectionConfig, transport: FakeTransportPort) -> ServiceNowAdapter:
    """Create an adapter with id sn1 and an injected logger."""
    return ServiceNowAdapter(
        "sn1",
        config,
        transport,
        logger=logging.getLogger(LOGGER_NAME),
    )


@pytest.fixture
def recorder(adapter: ServiceNowAdapter) -> EventRecorder:
    """Capture every status event the adapter emits."""
    return EventRecorder(adapter.events)


class CallbackRecorder:
    """Records completion callback invocations."""

    def __init__(self) -> None:
        self.calls: list[tuple[Any, Exception | None]] = []

    def __call__(self, data: Any, error: Exception | None) -> None:
        self.calls.append((data, error))


# ============================================================================
# Health check
# ============================================================================


class TestHealthcheckTransportFailure:
    """Transport errors always classify as OFFLINE."""

    @pytest.mark.asyncio
    async def test_emits_single_offline_event(
        self,
        adapter: ServiceNowAdapter,
        transport: FakeTransportPort,
        recorder: EventRecorder,
    ) -> None:
        transport.set_error(TransportError("ECONNREFUSED"))

        status = await adapter.healthcheck()

        assert status is HealthStatus.OFFLINE
        assert recorder.emitted == [("OFFLINE", {"id": "sn1"})]

    @pytest.mark.asyncio
    async def test_logs_error_with_instance_id(
        self,
        adapter: ServiceNowAdapter,
        transport: FakeTransportPort,
        recorder: EventRecorder,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        transport.set_error(TransportError("ECONNREFUSED"))
        caplog.set_level(logging.DEBUG, logger=LOGGER_NAME)

        await adapter.healthcheck()

        errors = [r for r in caplog.records if r.levelno == logging.ERROR]
        assert len(errors) == 1
        assert "sn1" in errors[0].getMessage()
        assert "ECONNREFUSED" in errors[0].getMessage()

    @pytest.mark.asyncio
    async def test_callback_receives_error_only(
        self, adapter: ServiceNowAdapter, transport: FakeTransportPort
    ) -> None:
        error = TransportError("ECONNREFUSED")
        transport.set_error(error)
        callback = CallbackRecorder()

        await adapter.healthcheck(callback)

        assert callback.calls == [(None, error)]

    @pytest.mark.asyncio
    async def test_unexpected_exception_still_offline(
        self,
        adapter: ServiceNowAdapter,
        transport: FakeTransportPort,
        recorder: EventRecorder,
    ) -> None:
        """Any failure of the read yields exactly one OFFLINE event."""
        transport.set_error(RuntimeError("boom"))

        status = await adapter.healthcheck()

        assert status is HealthStatus.OFFLINE
        assert recorder.names() == ["OFFLINE"]


class TestHealthcheckHibernating:
    """A hibernating instance is OFFLINE even though the call succeeded."""

    @pytest.mark.asyncio
    async def test_emits_offline(
        self,
        adapter: ServiceNowAdapter,
        transport: FakeTransportPort,
        recorder: EventRecorder,
    ) -> None:
        transport.set_get_body(HIBERNATING_BODY)

        status = await adapter.healthcheck()

        assert status is HealthStatus.OFFLINE
        assert recorder.emitted == [("OFFLINE", {"id": "sn1"})]

    @pytest.mark.asyncio
    async def test_logs_hibernating_message(
        self,
        adapter: ServiceNowAdapter,
        transport: FakeTransportPort,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        transport.set_get_body("<html>Instance Hibernating page</html>")
        caplog.set_level(logging.DEBUG, logger=LOGGER_NAME)

        await adapter.healthcheck()

        errors = [r.getMessage() for r in caplog.records if r.levelno == logging.ERROR]
        assert len(errors) == 1
        assert "hibernating" in errors[0]
        assert "sn1" in errors[0]

    @pytest.mark.asyncio
    async def test_callback_receives_hibernating_error(
        self, adapter: ServiceNowAdapter, transport: FakeTransportPort
    ) -> None:
        transport.set_get_body(HIBERNATING_BODY)
        callback = CallbackRecorder()

        await adapter.healthcheck(callback)

        assert len(callback.calls) == 1
        data, error = callback.calls[0]
        assert data is None
        assert isinstance(error, InstanceHibernatingError)
        assert str(error) == "Service Now instance is hibernating"


class TestHealthcheckOnline:
    """Successful, non-hibernating reads classify as ONLINE."""

    @pytest.mark.asyncio
    async def test_emits_single_online_event(
        self,
        adapter: ServiceNowAdapter,
        transport: FakeTransportPort,
        recorder: EventRecorder,
    ) -> None:
        transport.set_get_body({"result": [{"number": "CHG1", "sys_id": "abc"}]})

        status = await adapter.healthcheck()

        assert status is HealthStatus.ONLINE
        assert recorder.emitted == [("ONLINE", {"id": "sn1"})]
        assert recorder.count("OFFLINE") == 0

    @pytest.mark.asyncio
    async def test_callback_receives_records(
        self, adapter: ServiceNowAdapter, transport: FakeTransportPort
    ) -> None:
        transport.set_get_body({"result": [{"number": "CHG1", "sys_id": "abc"}]})
        callback = CallbackRecorder()

        await adapter.healthcheck(callback)

        assert len(callback.calls) == 1
        records, error = callback.calls[0]
        assert error is None
        assert records[0].change_ticket_number == "CHG1"
        assert records[0].change_ticket_key == "abc"

    @pytest.mark.asyncio
    async def test_empty_table_is_online(
        self,
        adapter: ServiceNowAdapter,
        transport: FakeTransportPort,
        recorder: EventRecorder,
    ) -> None:
        transport.set_get_body({"result": []})

        assert await adapter.healthcheck() is HealthStatus.ONLINE
        assert recorder.names() == ["ONLINE"]

    @pytest.mark.asyncio
    async def test_logs_at_debug_without_errors(
        self,
        adapter: ServiceNowAdapter,
        transport: FakeTransportPort,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        caplog.set_level(logging.DEBUG, logger=LOGGER_NAME)

        await adapter.healthcheck()

        levels = {r.levelno for r in caplog.records if r.name == LOGGER_NAME}
        assert levels == {logging.DEBUG}

    @pytest.mark.asyncio
    async def test_reads_once_per_check(
        self, adapter: ServiceNowAdapter, transport: FakeTransportPort
    ) -> None:
        await adapter.healthcheck()
        assert transport.get_call_count == 1


class TestConnect:
    """connect() runs exactly one health check."""

    @pytest.mark.asyncio
    async def test_connect_triggers_healthcheck(
        self,
        adapter: ServiceNowAdapter,
        transport: FakeTransportPort,
        recorder: EventRecorder,
    ) -> None:
        await adapter.connect()

        assert transport.get_call_count == 1
        assert recorder.names() == ["ONLINE"]


class TestSharedReadPath:
    """healthcheck and get_record classify the same read the same way."""

    @pytest.mark.asyncio
    async def test_both_use_read_helper(
        self,
        adapter: ServiceNowAdapter,
        recorder: EventRecorder,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        calls: list[str] = []

        async def _read():
            calls.append("read")
            raise InstanceHibernatingError()

        monkeypatch.setattr(adapter, "_read", _read)

        assert await adapter.healthcheck() is HealthStatus.OFFLINE
        with pytest.raises(InstanceHibernatingError):
            await adapter.get_record()

        assert calls == ["read", "read"]
        assert recorder.names() == ["OFFLINE"]


# ============================================================================
# Status emission
# ============================================================================


class TestStatusEmission:
    """Tests for emit_status, emit_online, and emit_offline."""

    def test_payload_shape_is_same_for_both_statuses(
        self, adapter: ServiceNowAdapter, recorder: EventRecorder
    ) -> None:
        adapter.emit_status(HealthStatus.ONLINE)
        adapter.emit_status(HealthStatus.OFFLINE)

        assert recorder.emitted == [
            ("ONLINE", {"id": "sn1"}),
            ("OFFLINE", {"id": "sn1"}),
        ]

    def test_emit_offline_logs_warning(
        self, adapter: ServiceNowAdapter, caplog: pytest.LogCaptureFixture
    ) -> None:
        caplog.set_level(logging.DEBUG, logger=LOGGER_NAME)

        adapter.emit_offline()

        assert [r.levelno for r in caplog.records] == [logging.WARNING]
        assert "unavailable" in caplog.records[0].getMessage()

    def test_emit_online_logs_debug(
        self, adapter: ServiceNowAdapter, caplog: pytest.LogCaptureFixture
    ) -> None:
        caplog.set_level(logging.DEBUG, logger=LOGGER_NAME)

        adapter.emit_online()

        assert [r.levelno for r in caplog.records] == [logging.DEBUG]
        assert "available" in caplog.records[0].getMessage()

    def test_failing_handler_does_not_break_emission(
        self, adapter: ServiceNowAdapter
    ) -> None:
        def _broken(payload: dict[str, Any]) -> None:
            raise RuntimeError("subscriber failure")

        events = EventEmitter()
        events.on("ONLINE", _broken)
        other = ServiceNowAdapter(
            "sn2", adapter.config, adapter.transport, events=events
        )
        second = EventRecorder(events)

        other.emit_online()

        assert second.emitted == [("ONLINE", {"id": "sn2"})]

    def test_on_subscribes_to_owned_emitter(self, adapter: ServiceNowAdapter) -> None:
        received: list[dict[str, Any]] = []
        adapter.on("OFFLINE", received.append)

        adapter.emit_offline()

        assert received == [{"id": "sn1"}]


# ============================================================================
# Record gateway
# ============================================================================


class TestGetRecord:
    """Tests for get_record normalization and error pass-through."""

    @pytest.mark.asyncio
    async def test_normalizes_remote_records(
        self, adapter: ServiceNowAdapter, transport: FakeTransportPort
    ) -> None:
        transport.set_get_body(
            {
                "result": [
                    {
                        "number": "CHG2",
                        "sys_id": "xyz",
                        "active": False,
                        "priority": "3",
                        "description": "",
                        "work_start": None,
                        "work_end": None,
                    }
                ]
            }
        )

        records = await adapter.get_record()

        assert len(records) == 1
        assert records[0].change_ticket_key == "xyz"
        assert records[0].change_ticket_number == "CHG2"
        assert records[0].active is False

    @pytest.mark.asyncio
    async def test_callback_receives_normalized_records(
        self, adapter: ServiceNowAdapter, transport: FakeTransportPort
    ) -> None:
        transport.set_get_body({"result": [{"number": "CHG2", "sys_id": "xyz"}]})
        callback = CallbackRecorder()

        records = await adapter.get_record(callback)

        assert callback.calls == [(records, None)]
        assert isinstance(records[0], ChangeRecord)

    @pytest.mark.asyncio
    async def test_empty_result_set(
        self, adapter: ServiceNowAdapter, transport: FakeTransportPort
    ) -> None:
        transport.set_get_body({"result": []})
        assert await adapter.get_record() == []

    @pytest.mark.asyncio
    async def test_error_raised_without_callback(
        self, adapter: ServiceNowAdapter, transport: FakeTransportPort
    ) -> None:
        error = TransportError("Unauthorized", status_code=401)
        transport.set_error(error)

        with pytest.raises(TransportError) as exc_info:
            await adapter.get_record()

        assert exc_info.value is error

    @pytest.mark.asyncio
    async def test_error_delivered_to_callback_unchanged(
        self, adapter: ServiceNowAdapter, transport: FakeTransportPort
    ) -> None:
        error = TransportError("ECONNREFUSED")
        transport.set_error(error)
        callback = CallbackRecorder()

        records = await adapter.get_record(callback)

        assert records == []
        assert callback.calls == [(None, error)]

    @pytest.mark.asyncio
    async def test_get_record_emits_no_status(
        self,
        adapter: ServiceNowAdapter,
        transport: FakeTransportPort,
        recorder: EventRecorder,
    ) -> None:
        await adapter.get_record()
        assert recorder.emitted == []

    @pytest.mark.asyncio
    async def test_hibernating_instance_delivered_to_callback(
        self,
        adapter: ServiceNowAdapter,
        transport: FakeTransportPort,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """A hibernating instance is not reported as an empty table."""
        transport.set_get_body(HIBERNATING_BODY)
        callback = CallbackRecorder()
        caplog.set_level(logging.DEBUG, logger=LOGGER_NAME)

        records = await adapter.get_record(callback)

        assert records == []
        assert len(callback.calls) == 1
        data, error = callback.calls[0]
        assert data is None
        assert isinstance(error, InstanceHibernatingError)
        errors = [r.getMessage() for r in caplog.records if r.levelno == logging.ERROR]
        assert len(errors) == 1
        assert "sn1" in errors[0]
        assert "hibernating" in errors[0]

    @pytest.mark.asyncio
    async def test_hibernating_instance_raised_without_callback(
        self, adapter: ServiceNowAdapter, transport: FakeTransportPort
    ) -> None:
        transport.set_get_body(HIBERNATING_BODY)

        with pytest.raises(InstanceHibernatingError):
            await adapter.get_record()


class TestPostRecord:
    """Tests for post_record payload selection and normalization."""

    @pytest.mark.asyncio
    async def test_posts_configured_payload(
        self, adapter: ServiceNowAdapter, transport: FakeTransportPort
    ) -> None:
        await adapter.post_record()

        assert transport.post_calls == [
            {"body": {"short_description": "Patch web tier"}}
        ]

    @pytest.mark.asyncio
    async def test_explicit_payload_overrides_config(
        self, adapter: ServiceNowAdapter, transport: FakeTransportPort
    ) -> None:
        await adapter.post_record(payload={"priority": "1"})

        assert transport.post_calls == [{"body": {"priority": "1"}}]

    @pytest.mark.asyncio
    async def test_normalizes_created_record(
        self, adapter: ServiceNowAdapter, transport: FakeTransportPort
    ) -> None:
        transport.set_post_body(
            {"result": {"number": "CHG0030001", "sys_id": "9f1c", "active": "true"}}
        )
        callback = CallbackRecorder()

        records = await adapter.post_record(callback)

        assert [r.change_ticket_number for r in records] == ["CHG0030001"]
        assert records[0].change_ticket_key == "9f1c"
        assert callback.calls == [(records, None)]

    @pytest.mark.asyncio
    async def test_error_delivered_to_callback(
        self, adapter: ServiceNowAdapter, transport: FakeTransportPort
    ) -> None:
        error = TransportError("Forbidden", status_code=403)
        transport.set_error(error)
        callback = CallbackRecorder()

        assert await adapter.post_record(callback) == []
        assert callback.calls == [(None, error)]

    @pytest.mark.asyncio
    async def test_error_raised_without_callback(
        self, adapter: ServiceNowAdapter, transport: FakeTransportPort
    ) -> None:
        transport.set_error(TransportError("Forbidden", status_code=403))

        with pytest.raises(TransportError):
            await adapter.post_record()

    @pytest.mark.asyncio
    async def test_hibernating_instance_delivered_to_callback(
        self, adapter: ServiceNowAdapter, transport: FakeTransportPort
    ) -> None:
        transport.set_post_body(HIBERNATING_BODY, status_code=200)
        callback = CallbackRecorder()

        records = await adapter.post_record(callback)

        assert records == []
        assert len(callback.calls) == 1
        assert callback.calls[0][0] is None
        assert isinstance(callback.calls[0][1], InstanceHibernatingError)

    @pytest.mark.asyncio
    async def test_hibernating_instance_raised_without_callback(
        self, adapter: ServiceNowAdapter, transport: FakeTransportPort
    ) -> None:
        transport.set_post_body(HIBERNATING_BODY, status_code=200)

        with pytest.raises(InstanceHibernatingError):
            await adapter.post_record()
