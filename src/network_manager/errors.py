"""Exception hierarchy shared by the NetworkManager client."""

from __future__ import annotations


class NetworkManagerError(RuntimeError):
    """Base exception raised by the NetworkManager client."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class TransportError(NetworkManagerError):
    """Raised when the bus session cannot be opened or stops working."""


class MessageEncodingError(NetworkManagerError):
    """Raised when a method call cannot be turned into a bus message."""


class PathEncodingError(MessageEncodingError):
    """Raised when an object path is not a valid textual bus path."""

    def __init__(self, path: object) -> None:
        super().__init__(f"Invalid object path: {path!r}")
        self.path = path


class MethodCallError(NetworkManagerError):
    """Raised when the remote service answers a method call with an error."""

    def __init__(
        self,
        error_name: str,
        *,
        interface: str,
        method: str,
        path: str,
        details: str | None = None,
    ) -> None:
        message = f"{interface}::{method} method call failed on {path}: {error_name}"
        if details:
            message = f"{message} ({details})"
        super().__init__(message)
        self.error_name = error_name
        self.interface = interface
        self.method = method
        self.path = path
        self.details = details


class RetriesExhaustedError(MethodCallError):
    """Raised when a transient error persisted through every retry attempt."""

    def __init__(
        self,
        error_name: str,
        *,
        interface: str,
        method: str,
        path: str,
        attempts: int,
    ) -> None:
        super().__init__(
            error_name,
            interface=interface,
            method=method,
            path=path,
            details=f"gave up after {attempts} attempts",
        )
        self.attempts = attempts


class PropertyReadError(MethodCallError):
    """Raised when a property could not be read from a remote object."""

    def __init__(self, cause: MethodCallError, *, interface: str, name: str) -> None:
        NetworkManagerError.__init__(
            self,
            f"Get {interface}::{name} property failed on {cause.path}: {cause.error_name}",
        )
        self.error_name = cause.error_name
        self.interface = interface
        self.method = "Get"
        self.path = cause.path
        self.details = cause.details
        self.name = name


class DecodeError(NetworkManagerError):
    """Raised when a reply value does not have the expected wire type."""


class WrongResponseShapeError(DecodeError):
    """Raised when a method reply does not carry the expected values."""


class PropertyDecodeError(DecodeError):
    """Raised when a property value does not have the expected wire type."""

    def __init__(self, message: str, *, path: str, interface: str, name: str) -> None:
        super().__init__(message)
        self.path = path
        self.interface = interface
        self.name = name


class SsidTooLongError(NetworkManagerError, ValueError):
    """Raised when an SSID exceeds the 32 byte limit."""

    def __init__(self, length: int) -> None:
        super().__init__(f"SSID length should not exceed 32 bytes: {length}")
        self.length = length


class SsidDecodeError(NetworkManagerError, ValueError):
    """Raised when an SSID is not valid UTF-8 text."""


class SsidValueError(NetworkManagerError, ValueError):
    """Raised when an SSID cannot be built from the given octets."""


class PreSharedKeyError(NetworkManagerError, ValueError):
    """Raised when a Wi-Fi password is not an acceptable pre-shared key."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Invalid pre-shared key: {reason}")
        self.reason = reason


class DeviceNotFoundError(NetworkManagerError):
    """Raised when no device matches a lookup."""


class DeviceTypeError(NetworkManagerError):
    """Raised when a device is not of the requested type."""


__all__ = [
    "DecodeError",
    "DeviceNotFoundError",
    "DeviceTypeError",
    "MessageEncodingError",
    "MethodCallError",
    "NetworkManagerError",
    "PathEncodingError",
    "PreSharedKeyError",
    "PropertyDecodeError",
    "PropertyReadError",
    "RetriesExhaustedError",
    "SsidDecodeError",
    "SsidTooLongError",
    "SsidValueError",
    "TransportError",
    "WrongResponseShapeError",
]
