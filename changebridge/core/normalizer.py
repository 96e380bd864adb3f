"""Reshaping of remote change request records into ChangeRecord.

The remote table API wraps records in a ``result`` member: a list for
table reads, a single object for the record echoed back by a create.
"""

import json
import logging
from collections.abc import Mapping
from typing import Any

from .models import ChangeRecord

logger = logging.getLogger(__name__)

HIBERNATION_MARKER = "Instance Hibernating page"

# Remote field name -> canonical field name.
FIELD_MAP: Mapping[str, str] = {
    "number": "change_ticket_number",
    "active": "active",
    "priority": "priority",
    "description": "description",
    "work_start": "work_start",
    "work_end": "work_end",
    "sys_id": "change_ticket_key",
}


def is_hibernating(body: Any) -> bool:
    """Check whether a response body is the hibernation placeholder page.

    Only text bodies are inspected; a decoded JSON document is never the
    placeholder.
    """
    if isinstance(body, bytes):
        body = body.decode("utf-8", errors="replace")
    return isinstance(body, str) and HIBERNATION_MARKER in body


def normalize_record(raw: Mapping[str, Any]) -> ChangeRecord:
    """Rename a single remote record into the canonical shape.

    Missing fields become None. Fields outside the mapping are dropped.
    """
    values = {canonical: raw.get(remote) for remote, canonical in FIELD_MAP.items()}
    return ChangeRecord(**values)


def extract_records(body: Any) -> list[Mapping[str, Any]]:
    """Pull the list of remote records out of a response body.

    Args:
        body: Decoded JSON document, JSON text, or None.

    Returns:
        Remote record mappings. Empty list when the body holds no result.
        Entries that are not mappings are skipped with a warning.
    """
    if body is None:
        return []

    if isinstance(body, (str, bytes)):
        try:
            body = json.loads(body)
        except ValueError:
            logger.warning("Response body is not JSON, no records extracted")
            return []

    if not isinstance(body, Mapping):
        logger.warning(f"Unexpected response body type: {type(body).__name__}")
        return []

    result = body.get("result")
    if result is None:
        return []
    if isinstance(result, Mapping):
        return [result]
    if not isinstance(result, list):
        logger.warning(f"Unexpected result type: {type(result).__name__}")
        return []

    records = []
    for index, item in enumerate(result):
        if not isinstance(item, Mapping):
            logger.warning(f"Skipping malformed record at index {index}: {item!r}")
            continue
        records.append(item)
    return records


def normalize_records(body: Any) -> list[ChangeRecord]:
    """Normalize every record in a response body."""
    return [normalize_record(raw) for raw in extract_records(body)]


__all__ = [
    "FIELD_MAP",
    "HIBERNATION_MARKER",
    "extract_records",
    "is_hibernating",
    "normalize_record",
    "normalize_records",
]
