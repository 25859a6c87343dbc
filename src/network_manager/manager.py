"""Entry point that hands out connections and devices."""

from __future__ import annotations

import logging
import time
from typing import Callable

from . import connection as _connection
from . import device as _device
from .config import DEFAULT_CLIENT_CONFIG, ClientConfig
from .connection import Connection
from .dbus_nm import NetworkManagerClient
from .device import Device, DeviceType
from .status import Connectivity, NetworkManagerState, Status

logger = logging.getLogger(__name__)


class NetworkManager:
    """Root object owning the bus session shared by every domain object.

    Pass ``client`` to reuse an existing session; otherwise a session is
    opened on the bus named in ``config``. Closing the manager closes the
    session, after which objects it produced can no longer query the service.
    """

    def __init__(
        self,
        client: NetworkManagerClient | None = None,
        *,
        config: ClientConfig | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if client is None:
            client = NetworkManagerClient.open(config or DEFAULT_CLIENT_CONFIG, sleep=sleep)
        self._client = client

    @property
    def client(self) -> NetworkManagerClient:
        return self._client

    @property
    def method_timeout(self) -> int:
        return self._client.method_timeout

    @method_timeout.setter
    def method_timeout(self, value: int) -> None:
        self._client.method_timeout = value

    # ------------------------------- service -------------------------------
    def get_state(self) -> NetworkManagerState:
        return self._client.get_state()

    def check_connectivity(self) -> Connectivity:
        return self._client.check_connectivity()

    def is_wireless_enabled(self) -> bool:
        return self._client.is_wireless_enabled()

    def is_networking_enabled(self) -> bool:
        return self._client.is_networking_enabled()

    def get_status(self) -> Status:
        return Status(
            state=self.get_state(),
            connectivity=self.check_connectivity(),
            wireless_enabled=self.is_wireless_enabled(),
            networking_enabled=self.is_networking_enabled(),
        )

    # ----------------------------- connections -----------------------------
    def get_connections(self) -> list[Connection]:
        return _connection.list_connections(self._client)

    def get_active_connections(self) -> list[Connection]:
        return _connection.get_active_connections(self._client)

    # ------------------------------- devices -------------------------------
    def get_devices(self) -> list[Device]:
        return _device.get_devices(self._client)

    def get_device_by_interface(self, interface: str) -> Device:
        return _device.get_device_by_interface(self._client, interface)

    def find_device(self, device_type: DeviceType, interface: str | None = None) -> Device:
        return _device.find_device(self._client, device_type, interface)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "NetworkManager":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


__all__ = ["NetworkManager"]
