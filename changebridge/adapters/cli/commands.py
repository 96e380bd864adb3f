"""CLI command implementations for the change request adapter.

This adapter maps CLI commands (healthcheck, get, post) to
ChangeManagementPort operations. It handles CLI-specific formatting
and error reporting.
"""

import logging
from collections.abc import Mapping
from typing import Any

from changebridge.core.errors import ChangeBridgeError
from changebridge.core.models import ChangeRecord
from changebridge.core.ports import ChangeManagementPort

logger = logging.getLogger(__name__)


class CLICommandHandler:
    """Handles CLI commands by delegating to ChangeManagementPort."""

    def __init__(self, adapter: ChangeManagementPort):
        """Initialize the CLI command handler.

        Args:
            adapter: ChangeManagementPort implementation to execute commands.
        """
        self.adapter = adapter

    async def healthcheck(self) -> dict[str, Any]:
        """Run a health check and report the status and any failure."""
        outcome: dict[str, Any] = {}

        def _capture(data: Any, error: Exception | None) -> None:
            outcome["error"] = error
            outcome["records"] = data

        status = await self.adapter.healthcheck(_capture)

        result: dict[str, Any] = {
            "status": "success",
            "operation": "healthcheck",
            "health": status.value,
        }
        if outcome.get("error") is not None:
            result["status"] = "error"
            result["message"] = str(outcome["error"])
        else:
            result["record_count"] = len(outcome.get("records") or [])
        return result

    async def get_records(self, output_format: str = "json") -> dict[str, Any]:
        """Retrieve change records.

        Args:
            output_format: "json" for record dictionaries, "text" for a
                one-line-per-record listing.

        Returns:
            Dictionary with status and the records.
        """
        try:
            records = await self.adapter.get_record()
        except ChangeBridgeError as e:
            logger.error(f"Failed to get records: {e}")
            return {"status": "error", "operation": "get", "message": str(e)}

        return {
            "status": "success",
            "operation": "get",
            "count": len(records),
            "records": self._format_records(records, output_format),
        }

    async def post_record(
        self, payload: Mapping[str, Any] | None = None
    ) -> dict[str, Any]:
        """Create a change record.

        Args:
            payload: Record fields to submit. Uses the configured payload
                when omitted.

        Returns:
            Dictionary with status and the created record(s).
        """
        try:
            records = await self.adapter.post_record(payload=payload)
        except ChangeBridgeError as e:
            logger.error(f"Failed to create record: {e}")
            return {"status": "error", "operation": "post", "message": str(e)}

        return {
            "status": "success",
            "operation": "post",
            "count": len(records),
            "records": [record.to_dict() for record in records],
        }

    @staticmethod
    def _format_records(
        records: list[ChangeRecord], output_format: str
    ) -> list[Any]:
        if output_format == "text":
            return [
                f"{r.change_ticket_number} [{r.change_ticket_key}] "
                f"priority={r.priority} active={r.active}: {r.description or ''}"
                for r in records
            ]
        return [record.to_dict() for record in records]
