"""Error types raised by the adapter core and its transports."""


class ChangeBridgeError(Exception):
    """Base class for all adapter errors."""


class TransportError(ChangeBridgeError):
    """A network, authentication, or HTTP-level failure from the transport.

    Attributes:
        message: Human-readable description of the failure.
        status_code: HTTP status code when the remote service answered,
            None for connection-level failures.
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def __str__(self) -> str:
        if self.status_code is not None:
            return f"{self.message} (HTTP {self.status_code})"
        return self.message


class InstanceHibernatingError(ChangeBridgeError):
    """The remote instance answered successfully but is serving its
    hibernation placeholder page instead of data."""

    def __init__(self, message: str = "Service Now instance is hibernating"):
        super().__init__(message)
        self.message = message


__all__ = ["ChangeBridgeError", "InstanceHibernatingError", "TransportError"]
