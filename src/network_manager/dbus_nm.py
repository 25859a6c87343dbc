"""NetworkManager specific D-Bus calls and settings dictionaries."""

from __future__ import annotations

import logging
import socket
import sys
import time
from typing import Any, Callable, Sequence

from .config import DEFAULT_CLIENT_CONFIG, ClientConfig
from .connection import ConnectionSettings, ConnectionState
from .dbus_api import (
    BusClient,
    decode,
    extract,
    extract_two,
    to_bool,
    to_bytes,
    to_int,
    to_path,
    to_str,
    to_str_list,
)
from .device import DeviceState, DeviceType
from .errors import (
    DecodeError,
    MethodCallError,
    PreSharedKeyError,
    SsidDecodeError,
    WrongResponseShapeError,
)
from .security import (
    AccessPointCredentials,
    ApFlags,
    ApSecurityFlags,
    EnterpriseCredentials,
    NoCredentials,
    WepCredentials,
    WpaCredentials,
)
from .ssid import Ssid
from .status import Connectivity, NetworkManagerState

logger = logging.getLogger(__name__)

NM_SERVICE_PATH = "/org/freedesktop/NetworkManager"
NM_SETTINGS_PATH = "/org/freedesktop/NetworkManager/Settings"

NM_SERVICE_INTERFACE = "org.freedesktop.NetworkManager"
NM_SETTINGS_INTERFACE = "org.freedesktop.NetworkManager.Settings"
NM_CONNECTION_INTERFACE = "org.freedesktop.NetworkManager.Settings.Connection"
NM_ACTIVE_INTERFACE = "org.freedesktop.NetworkManager.Connection.Active"
NM_DEVICE_INTERFACE = "org.freedesktop.NetworkManager.Device"
NM_WIRELESS_INTERFACE = "org.freedesktop.NetworkManager.Device.Wireless"
NM_ACCESS_POINT_INTERFACE = "org.freedesktop.NetworkManager.AccessPoint"

NM_WEP_KEY_TYPE_PASSPHRASE = 2
ROOT_PATH = "/"

HOTSPOT_PREFIX = 24
MIN_PSK_LENGTH = 8
MAX_PSK_LENGTH = 64

Settings = dict[str, dict[str, tuple[str, Any]]]


def verify_password(password: str) -> str:
    """Return ``password`` if it is usable as a WEP/WPA passphrase."""

    if not isinstance(password, str):
        raise PreSharedKeyError("password must be a string")
    if not password.isascii():
        raise PreSharedKeyError("password must only contain ASCII characters")
    if len(password) < MIN_PSK_LENGTH:
        raise PreSharedKeyError(f"password must be at least {MIN_PSK_LENGTH} characters")
    if len(password) > MAX_PSK_LENGTH:
        raise PreSharedKeyError(f"password must be at most {MAX_PSK_LENGTH} characters")
    return password


def _ipv4_to_u32(address: str) -> int:
    # NetworkManager expects IPv4 addresses as uint32 values in network byte order.
    try:
        packed = socket.inet_pton(socket.AF_INET, str(address))
    except OSError as exc:
        raise ValueError(f"Invalid IPv4 address: {address!r}") from exc
    return int.from_bytes(packed, sys.byteorder)


def wireless_settings(ssid: Ssid, credentials: AccessPointCredentials) -> Settings:
    """Build the settings used to join an access point."""

    settings: Settings = {"802-11-wireless": {"ssid": ("ay", ssid.as_bytes())}}
    if isinstance(credentials, WepCredentials):
        settings["802-11-wireless-security"] = {
            "wep-key-type": ("u", NM_WEP_KEY_TYPE_PASSPHRASE),
            "wep-key0": ("s", verify_password(credentials.passphrase)),
        }
    elif isinstance(credentials, WpaCredentials):
        settings["802-11-wireless-security"] = {
            "key-mgmt": ("s", "wpa-psk"),
            "psk": ("s", verify_password(credentials.passphrase)),
        }
    elif isinstance(credentials, EnterpriseCredentials):
        settings["802-11-wireless-security"] = {"key-mgmt": ("s", "wpa-eap")}
        settings["802-1x"] = {
            "eap": ("as", ["peap"]),
            "identity": ("s", credentials.identity),
            "password": ("s", credentials.passphrase),
            "phase2-auth": ("s", "mschapv2"),
        }
    elif not isinstance(credentials, NoCredentials):
        raise TypeError(f"Unsupported credentials: {credentials!r}")
    return settings


def hotspot_settings(
    interface: str,
    ssid: Ssid,
    password: str | None = None,
    address: str | None = None,
) -> Settings:
    """Build the settings for an access point hosted on ``interface``."""

    connection: dict[str, tuple[str, Any]] = {
        "autoconnect": ("b", False),
        "interface-name": ("s", interface),
        "type": ("s", "802-11-wireless"),
    }
    try:
        connection["id"] = ("s", ssid.as_str())
    except SsidDecodeError:
        logger.debug("Hotspot SSID %r is not UTF-8; leaving the connection id unset", ssid.as_bytes())

    wireless: dict[str, tuple[str, Any]] = {
        "ssid": ("ay", ssid.as_bytes()),
        "band": ("s", "bg"),
        "hidden": ("b", False),
        "mode": ("s", "ap"),
    }
    settings: Settings = {"connection": connection, "802-11-wireless": wireless}

    if password is not None:
        wireless["security"] = ("s", "802-11-wireless-security")
        settings["802-11-wireless-security"] = {
            "key-mgmt": ("s", "wpa-psk"),
            "psk": ("s", verify_password(password)),
        }

    if address is not None:
        # Validates the address before it is sent.
        _ipv4_to_u32(address)
        settings["ipv4"] = {
            "method": ("s", "manual"),
            "address-data": (
                "aa{sv}",
                [{"address": ("s", str(address)), "prefix": ("u", HOTSPOT_PREFIX)}],
            ),
        }
    else:
        settings["ipv4"] = {"method": ("s", "shared")}
    return settings


def ethernet_settings(
    interface: str,
    *,
    address: str,
    prefix: int,
    gateway: str,
    dns: Sequence[str] = (),
    dns_search: str = "",
    method: str = "manual",
    connection_name: str,
) -> Settings:
    """Build the settings for a wired connection with a static address."""

    if not 0 <= int(prefix) <= 32:
        raise ValueError("Prefix must be between 0 and 32")
    _ipv4_to_u32(address)
    _ipv4_to_u32(gateway)
    ipv4: dict[str, tuple[str, Any]] = {
        "method": ("s", method),
        "address-data": (
            "aa{sv}",
            [{"address": ("s", str(address)), "prefix": ("u", int(prefix))}],
        ),
        "gateway": ("s", str(gateway)),
        "dns": ("au", [_ipv4_to_u32(server) for server in dns]),
    }
    if dns_search:
        ipv4["dns-search"] = ("as", [dns_search])
    return {
        "connection": {
            "id": ("s", connection_name),
            "interface-name": ("s", interface),
            "type": ("s", "802-3-ethernet"),
        },
        "ipv4": ipv4,
    }


def parse_connection_settings(settings: dict[str, Any]) -> ConnectionSettings:
    """Pick the identifying values out of a ``GetSettings`` reply."""

    values: dict[str, Any] = {}
    for block_name, block in settings.items():
        if not isinstance(block, dict):
            raise WrongResponseShapeError(f"Settings block {block_name!r} is not a dictionary")
        for key, variant in block.items():
            try:
                if key in ("id", "uuid", "type", "mode"):
                    values.setdefault(key, decode(variant, str))
                elif key == "ssid":
                    values.setdefault(key, Ssid(decode(variant, bytes)))
            except DecodeError as exc:
                # Other setting blocks may reuse these key names with other types.
                logger.debug("Ignoring %s.%s setting: %s", block_name, key, exc)
    return ConnectionSettings(
        kind=values.get("type", ""),
        id=values.get("id", ""),
        uuid=values.get("uuid", ""),
        ssid=values.get("ssid", Ssid()),
        mode=values.get("mode", ""),
    )


class NetworkManagerClient:
    """Typed access to the NetworkManager D-Bus API."""

    def __init__(self, bus: BusClient, *, sleep: Callable[[float], None] = time.sleep) -> None:
        self._bus = bus
        self._sleep = sleep

    @classmethod
    def open(
        cls,
        config: ClientConfig = DEFAULT_CLIENT_CONFIG,
        *,
        sleep: Callable[[float], None] = time.sleep,
    ) -> "NetworkManagerClient":
        return cls(BusClient.open(config, sleep=sleep), sleep=sleep)

    @property
    def bus(self) -> BusClient:
        return self._bus

    @property
    def method_timeout(self) -> int:
        return self._bus.method_timeout

    @method_timeout.setter
    def method_timeout(self, value: int) -> None:
        self._bus.method_timeout = value

    def sleep(self, seconds: float) -> None:
        self._sleep(seconds)

    def close(self) -> None:
        self._bus.close()

    # ------------------------------- manager -------------------------------
    def get_state(self) -> NetworkManagerState:
        reply = self._bus.call(NM_SERVICE_PATH, NM_SERVICE_INTERFACE, "state")
        return NetworkManagerState(extract(reply, to_int))

    def check_connectivity(self) -> Connectivity:
        reply = self._bus.call(NM_SERVICE_PATH, NM_SERVICE_INTERFACE, "CheckConnectivity")
        return Connectivity(extract(reply, to_int))

    def is_wireless_enabled(self) -> bool:
        return self._bus.property(NM_SERVICE_PATH, NM_SERVICE_INTERFACE, "WirelessEnabled", to_bool)

    def is_networking_enabled(self) -> bool:
        return self._bus.property(NM_SERVICE_PATH, NM_SERVICE_INTERFACE, "NetworkingEnabled", to_bool)

    # ----------------------------- connections -----------------------------
    def list_connections(self) -> list[str]:
        reply = self._bus.call(NM_SETTINGS_PATH, NM_SETTINGS_INTERFACE, "ListConnections")
        return extract(reply, to_str_list)

    def get_active_connections(self) -> list[str]:
        return self._bus.property(
            NM_SERVICE_PATH, NM_SERVICE_INTERFACE, "ActiveConnections", to_str_list
        )

    def get_active_connection_path(self, active_path: str) -> str | None:
        """Return the settings path behind an active connection, if it still exists."""

        try:
            return self._bus.property(active_path, NM_ACTIVE_INTERFACE, "Connection", to_path)
        except MethodCallError:
            return None

    def get_connection_state(self, active_path: str) -> ConnectionState:
        try:
            state = self._bus.property(active_path, NM_ACTIVE_INTERFACE, "State", to_int)
        except MethodCallError:
            return ConnectionState.UNKNOWN
        return ConnectionState(state)

    def get_connection_settings(self, path: str) -> ConnectionSettings:
        reply = self._bus.call(path, NM_CONNECTION_INTERFACE, "GetSettings")
        settings = extract(reply, dict)
        return parse_connection_settings(settings)

    def get_active_connection_devices(self, active_path: str) -> list[str]:
        return self._bus.property(active_path, NM_ACTIVE_INTERFACE, "Devices", to_str_list)

    def delete_connection(self, path: str) -> None:
        self._bus.call(path, NM_CONNECTION_INTERFACE, "Delete")

    def activate_connection(self, path: str) -> str:
        reply = self._bus.call(
            NM_SERVICE_PATH,
            NM_SERVICE_INTERFACE,
            "ActivateConnection",
            [("o", path), ("o", ROOT_PATH), ("o", ROOT_PATH)],
        )
        return extract(reply, to_path)

    def deactivate_connection(self, active_path: str) -> None:
        self._bus.call(
            NM_SERVICE_PATH, NM_SERVICE_INTERFACE, "DeactivateConnection", [("o", active_path)]
        )

    def add_and_activate_connection(
        self,
        settings: Settings,
        device_path: str,
        specific_object: str = ROOT_PATH,
    ) -> tuple[str, str]:
        """Create a connection from ``settings`` and activate it on a device.

        Returns the new connection path and its active connection path.
        """

        reply = self._bus.call(
            NM_SERVICE_PATH,
            NM_SERVICE_INTERFACE,
            "AddAndActivateConnection",
            [("a{sa{sv}}", settings), ("o", device_path), ("o", specific_object)],
        )
        return extract_two(reply, to_path, to_path)

    def connect_to_access_point(
        self,
        device_path: str,
        access_point_path: str,
        ssid: Ssid,
        credentials: AccessPointCredentials,
    ) -> tuple[str, str]:
        settings = wireless_settings(ssid, credentials)
        return self.add_and_activate_connection(settings, device_path, access_point_path)

    def create_hotspot(
        self,
        device_path: str,
        interface: str,
        ssid: Ssid,
        password: str | None = None,
        address: str | None = None,
    ) -> tuple[str, str]:
        settings = hotspot_settings(interface, ssid, password, address)
        return self.add_and_activate_connection(settings, device_path)

    def add_and_activate_ethernet(
        self,
        device_path: str,
        interface: str,
        **options: Any,
    ) -> tuple[str, str]:
        settings = ethernet_settings(interface, **options)
        return self.add_and_activate_connection(settings, device_path)

    # ------------------------------- devices -------------------------------
    def get_devices(self) -> list[str]:
        return self._bus.property(NM_SERVICE_PATH, NM_SERVICE_INTERFACE, "Devices", to_str_list)

    def get_device_by_interface(self, interface: str) -> str:
        reply = self._bus.call(
            NM_SERVICE_PATH, NM_SERVICE_INTERFACE, "GetDeviceByIpIface", [("s", interface)]
        )
        return extract(reply, to_path)

    def get_device_interface(self, path: str) -> str:
        return self._bus.property(path, NM_DEVICE_INTERFACE, "Interface", to_str)

    def get_device_type(self, path: str) -> DeviceType:
        return DeviceType(self._bus.property(path, NM_DEVICE_INTERFACE, "DeviceType", to_int))

    def get_device_state(self, path: str) -> DeviceState:
        return DeviceState(self._bus.property(path, NM_DEVICE_INTERFACE, "State", to_int))

    def is_device_real(self, path: str) -> bool:
        return self._bus.property(path, NM_DEVICE_INTERFACE, "Real", to_bool)

    def connect_device(self, path: str) -> str:
        reply = self._bus.call(
            NM_SERVICE_PATH,
            NM_SERVICE_INTERFACE,
            "ActivateConnection",
            [("o", ROOT_PATH), ("o", path), ("o", ROOT_PATH)],
        )
        return extract(reply, to_path)

    def disconnect_device(self, path: str) -> None:
        self._bus.call(path, NM_DEVICE_INTERFACE, "Disconnect")

    # ---------------------------- access points ----------------------------
    def request_scan(self, path: str) -> None:
        self._bus.call(path, NM_WIRELESS_INTERFACE, "RequestScan", [("a{sv}", {})])

    def get_device_access_points(self, path: str) -> list[str]:
        return self._bus.property(path, NM_WIRELESS_INTERFACE, "AccessPoints", to_str_list)

    def get_access_point_ssid(self, path: str) -> Ssid:
        return Ssid(self._bus.property(path, NM_ACCESS_POINT_INTERFACE, "Ssid", to_bytes))

    def get_access_point_strength(self, path: str) -> int:
        return self._bus.property(path, NM_ACCESS_POINT_INTERFACE, "Strength", to_int)

    def get_access_point_flags(self, path: str) -> ApFlags:
        return ApFlags(self._bus.property(path, NM_ACCESS_POINT_INTERFACE, "Flags", to_int))

    def get_access_point_wpa_flags(self, path: str) -> ApSecurityFlags:
        return ApSecurityFlags(
            self._bus.property(path, NM_ACCESS_POINT_INTERFACE, "WpaFlags", to_int)
        )

    def get_access_point_rsn_flags(self, path: str) -> ApSecurityFlags:
        return ApSecurityFlags(
            self._bus.property(path, NM_ACCESS_POINT_INTERFACE, "RsnFlags", to_int)
        )


__all__ = [
    "NM_ACCESS_POINT_INTERFACE",
    "NM_ACTIVE_INTERFACE",
    "NM_CONNECTION_INTERFACE",
    "NM_DEVICE_INTERFACE",
    "NM_SERVICE_INTERFACE",
    "NM_SERVICE_PATH",
    "NM_SETTINGS_INTERFACE",
    "NM_SETTINGS_PATH",
    "NM_WEP_KEY_TYPE_PASSPHRASE",
    "NM_WIRELESS_INTERFACE",
    "NetworkManagerClient",
    "ethernet_settings",
    "hotspot_settings",
    "parse_connection_settings",
    "verify_password",
    "wireless_settings",
]
