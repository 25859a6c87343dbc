"""Wi-Fi scanning, joining networks and hosting hotspots."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .connection import Connection, ConnectionState
from .device import Device
from .errors import MethodCallError
from .security import AccessPointCredentials, NoCredentials, Security, derive_security
from .ssid import Ssid, as_ssid

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class AccessPoint:
    """An access point seen by the last scan."""

    path: str
    ssid: Ssid
    strength: int
    security: Security

    def to_dict(self) -> dict[str, object]:
        return {
            "path": self.path,
            "ssid": str(self.ssid),
            "strength": self.strength,
            "security": [flag.name.lower() for flag in Security if flag and flag in self.security],
        }


class WiFiDevice:
    """Wireless operations for a device of type ``DeviceType.WIFI``."""

    def __init__(self, device: Device) -> None:
        self._device = device
        self._client = device.client

    @property
    def device(self) -> Device:
        return self._device

    @property
    def path(self) -> str:
        return self._device.path

    @property
    def interface(self) -> str:
        return self._device.interface

    def request_scan(self) -> None:
        self._client.request_scan(self._device.path)

    def get_access_points(self) -> list[AccessPoint]:
        """Return the visible access points, strongest first."""

        access_points: list[AccessPoint] = []
        for path in self._client.get_device_access_points(self._device.path):
            try:
                access_points.append(self._read_access_point(path))
            except MethodCallError as exc:
                # Access points routinely vanish between listing and reading.
                logger.debug("Skipping access point %s: %s", path, exc.error_name)
        access_points.sort(key=lambda access_point: access_point.strength, reverse=True)
        return access_points

    def _read_access_point(self, path: str) -> AccessPoint:
        client = self._client
        security = derive_security(
            client.get_access_point_flags(path),
            client.get_access_point_wpa_flags(path),
            client.get_access_point_rsn_flags(path),
        )
        return AccessPoint(
            path=path,
            ssid=client.get_access_point_ssid(path),
            strength=client.get_access_point_strength(path),
            security=security,
        )

    def connect(
        self,
        access_point: AccessPoint,
        credentials: AccessPointCredentials = NoCredentials(),
        timeout: int | None = None,
    ) -> tuple[Connection, ConnectionState]:
        """Join ``access_point`` and wait for the connection to activate.

        The returned state is whatever was observed when the wait ended, so
        callers must check it for ``ConnectionState.ACTIVATED``.
        """

        logger.info("Connecting %s to %s", self.interface, access_point.ssid)
        connection_path, _active_path = self._client.connect_to_access_point(
            self._device.path, access_point.path, access_point.ssid, credentials
        )
        connection = Connection(self._client, connection_path)
        state = connection.wait(ConnectionState.ACTIVATED, timeout)
        return connection, state

    def create_hotspot(
        self,
        ssid: Ssid | str | bytes,
        password: str | None = None,
        address: str | None = None,
        timeout: int | None = None,
    ) -> tuple[Connection, ConnectionState]:
        """Host an access point on this device.

        Without ``address`` the hotspot shares this machine's connectivity and
        hands out addresses to clients; with one the interface uses it as a
        static /24 address.
        """

        ssid = as_ssid(ssid)
        logger.info("Creating hotspot %s on %s", ssid, self.interface)
        connection_path, _active_path = self._client.create_hotspot(
            self._device.path, self.interface, ssid, password, address
        )
        connection = Connection(self._client, connection_path)
        state = connection.wait(ConnectionState.ACTIVATED, timeout)
        return connection, state

    def __repr__(self) -> str:
        return f"WiFiDevice(interface={self.interface!r}, path={self.path!r})"


__all__ = ["AccessPoint", "WiFiDevice"]
