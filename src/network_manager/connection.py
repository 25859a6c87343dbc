"""Saved connection profiles and their activation state."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import total_ordering
from typing import TYPE_CHECKING

from .device import Device
from .ssid import Ssid
from .status import WireEnum
from .wait import wait_for_state

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .dbus_nm import NetworkManagerClient

logger = logging.getLogger(__name__)


class ConnectionState(WireEnum):
    UNKNOWN = 0
    ACTIVATING = 1
    ACTIVATED = 2
    DEACTIVATING = 3
    DEACTIVATED = 4


@dataclass(frozen=True, slots=True)
class ConnectionSettings:
    """Identifying values read from a connection profile."""

    kind: str = ""
    id: str = ""
    uuid: str = ""
    ssid: Ssid = Ssid()
    mode: str = ""

    def to_dict(self) -> dict[str, object]:
        return {
            "kind": self.kind,
            "id": self.id,
            "uuid": self.uuid,
            "ssid": str(self.ssid),
            "mode": self.mode,
        }


def _path_sort_key(path: str) -> tuple[int, int, str]:
    suffix = path.rsplit("/", 1)[-1]
    if suffix.isdigit():
        return (0, int(suffix), path)
    return (1, 0, path)


@total_ordering
class Connection:
    """A connection profile stored by NetworkManager.

    The settings snapshot is read once when the object is created. The
    activation state is always queried again because it is owned by the
    service.
    """

    def __init__(self, client: "NetworkManagerClient", path: str) -> None:
        self._client = client
        self._path = path
        self._settings = client.get_connection_settings(path)

    @property
    def path(self) -> str:
        return self._path

    @property
    def settings(self) -> ConnectionSettings:
        return self._settings

    def get_active_path(self) -> str | None:
        """Return the active connection object applying this profile, if any."""

        for active_path in self._client.get_active_connections():
            if self._client.get_active_connection_path(active_path) == self._path:
                return active_path
        return None

    def get_state(self) -> ConnectionState:
        active_path = self.get_active_path()
        if active_path is None:
            return ConnectionState.DEACTIVATED
        return self._client.get_connection_state(active_path)

    def get_devices(self) -> list[Device]:
        active_path = self.get_active_path()
        if active_path is None:
            return []
        return [
            Device(self._client, device_path)
            for device_path in self._client.get_active_connection_devices(active_path)
        ]

    def activate(self, timeout: int | None = None) -> ConnectionState:
        state = self.get_state()
        if state == ConnectionState.ACTIVATED:
            return state
        if state != ConnectionState.ACTIVATING:
            logger.debug("Activating connection %s", self._path)
            self._client.activate_connection(self._path)
        return self.wait(ConnectionState.ACTIVATED, timeout)

    def deactivate(self, timeout: int | None = None) -> ConnectionState:
        active_path = self.get_active_path()
        if active_path is None:
            return ConnectionState.DEACTIVATED
        state = self._client.get_connection_state(active_path)
        if state == ConnectionState.DEACTIVATED:
            return state
        if state != ConnectionState.DEACTIVATING:
            logger.debug("Deactivating connection %s via %s", self._path, active_path)
            self._client.deactivate_connection(active_path)
        return self.wait(ConnectionState.DEACTIVATED, timeout)

    def delete(self) -> None:
        self._client.delete_connection(self._path)

    def wait(self, target: ConnectionState, timeout: int | None = None) -> ConnectionState:
        if timeout is None:
            timeout = self._client.method_timeout
        return wait_for_state(self.get_state, target, timeout, sleep=self._client.sleep)

    def to_dict(self) -> dict[str, object]:
        return {"path": self._path, **self._settings.to_dict()}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Connection):
            return NotImplemented
        return self._path == other._path

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Connection):
            return NotImplemented
        return _path_sort_key(self._path) < _path_sort_key(other._path)

    def __hash__(self) -> int:
        return hash(self._path)

    def __repr__(self) -> str:
        return f"Connection(path={self._path!r}, id={self._settings.id!r})"


def list_connections(client: "NetworkManagerClient") -> list[Connection]:
    """Return every saved connection ordered by the numeric suffix of its path."""

    return sorted(Connection(client, path) for path in client.list_connections())


def get_active_connections(client: "NetworkManagerClient") -> list[Connection]:
    connections: list[Connection] = []
    for active_path in client.get_active_connections():
        path = client.get_active_connection_path(active_path)
        if path is not None:
            connections.append(Connection(client, path))
    return sorted(connections)


__all__ = [
    "Connection",
    "ConnectionSettings",
    "ConnectionState",
    "get_active_connections",
    "list_connections",
]
