"""Wired device configuration."""

from __future__ import annotations

import logging
from typing import Sequence

from .connection import Connection, ConnectionState
from .device import Device

logger = logging.getLogger(__name__)

DEFAULT_CONNECTION_NAME = "Wired connection"


class EthernetDevice:
    """Operations for a device of type ``DeviceType.ETHERNET``."""

    def __init__(self, device: Device) -> None:
        self._device = device
        self._client = device.client

    @property
    def device(self) -> Device:
        return self._device

    @property
    def interface(self) -> str:
        return self._device.interface

    def set_ethernet_address(
        self,
        address: str,
        prefix: int,
        gateway: str,
        dns: Sequence[str] = (),
        dns_search: str = "",
        method: str = "manual",
        connection_name: str = DEFAULT_CONNECTION_NAME,
        timeout: int | None = None,
    ) -> tuple[Connection, ConnectionState]:
        """Create and activate a static IPv4 connection on this device."""

        logger.info("Setting %s/%s on %s", address, prefix, self.interface)
        connection_path, _active_path = self._client.add_and_activate_ethernet(
            self._device.path,
            self.interface,
            address=address,
            prefix=prefix,
            gateway=gateway,
            dns=dns,
            dns_search=dns_search,
            method=method,
            connection_name=connection_name,
        )
        connection = Connection(self._client, connection_path)
        state = connection.wait(ConnectionState.ACTIVATED, timeout)
        return connection, state

    def __repr__(self) -> str:
        return f"EthernetDevice(interface={self.interface!r}, path={self._device.path!r})"


__all__ = ["DEFAULT_CONNECTION_NAME", "EthernetDevice"]
