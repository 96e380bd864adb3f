"""Core domain logic for the ServiceNow change request adapter.

This package contains zero external dependencies: health classification,
record normalization, and status emission. Transports and entry points
live in the adapters package.
"""

from .errors import ChangeBridgeError, InstanceHibernatingError, TransportError
from .models import (
    AdapterIdentity,
    ChangeRecord,
    ConnectionConfig,
    Credentials,
    HealthStatus,
    RawResponse,
)

__all__ = [
    "AdapterIdentity",
    "ChangeBridgeError",
    "ChangeRecord",
    "ConnectionConfig",
    "Credentials",
    "HealthStatus",
    "InstanceHibernatingError",
    "RawResponse",
    "TransportError",
]
