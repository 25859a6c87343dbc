"""Synchronous NetworkManager client over the D-Bus system bus."""

from .config import ClientConfig, load_client_config
from .connection import Connection, ConnectionSettings, ConnectionState
from .dbus_api import BusClient
from .dbus_nm import NetworkManagerClient
from .device import Device, DeviceState, DeviceType
from .errors import (
    DecodeError,
    DeviceNotFoundError,
    DeviceTypeError,
    MessageEncodingError,
    MethodCallError,
    NetworkManagerError,
    PathEncodingError,
    PreSharedKeyError,
    PropertyDecodeError,
    PropertyReadError,
    RetriesExhaustedError,
    SsidDecodeError,
    SsidTooLongError,
    SsidValueError,
    TransportError,
    WrongResponseShapeError,
)
from .ethernet import EthernetDevice
from .manager import NetworkManager
from .security import (
    EnterpriseCredentials,
    NoCredentials,
    Security,
    WepCredentials,
    WpaCredentials,
    derive_security,
)
from .ssid import Ssid
from .status import Connectivity, NetworkManagerState, Status
from .wifi import AccessPoint, WiFiDevice

__all__ = [
    "AccessPoint",
    "BusClient",
    "ClientConfig",
    "Connection",
    "ConnectionSettings",
    "ConnectionState",
    "Connectivity",
    "DecodeError",
    "Device",
    "DeviceNotFoundError",
    "DeviceState",
    "DeviceType",
    "DeviceTypeError",
    "EnterpriseCredentials",
    "EthernetDevice",
    "MessageEncodingError",
    "MethodCallError",
    "NetworkManager",
    "NetworkManagerClient",
    "NetworkManagerError",
    "NetworkManagerState",
    "NoCredentials",
    "PathEncodingError",
    "PreSharedKeyError",
    "PropertyDecodeError",
    "PropertyReadError",
    "RetriesExhaustedError",
    "Security",
    "Ssid",
    "SsidDecodeError",
    "SsidTooLongError",
    "SsidValueError",
    "Status",
    "TransportError",
    "WepCredentials",
    "WiFiDevice",
    "WpaCredentials",
    "WrongResponseShapeError",
    "derive_security",
    "load_client_config",
]
