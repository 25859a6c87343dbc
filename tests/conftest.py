from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

import pytest
from jeepney import new_error, new_method_return
from jeepney.low_level import HeaderFields, Message

from network_manager.dbus_api import BusClient
from network_manager.dbus_nm import NetworkManagerClient

NM = "org.freedesktop.NetworkManager"
NM_PATH = "/org/freedesktop/NetworkManager"
NM_SETTINGS_PATH = "/org/freedesktop/NetworkManager/Settings"
PROPERTIES = "org.freedesktop.DBus.Properties"


@dataclass(slots=True)
class FakeError:
    name: str
    message: str = ""


def _wire(message: Message, serial: int = 1) -> Message:
    """Round trip a message through the D-Bus wire format."""

    return Message.from_buffer(message.serialise(serial=serial))


class FakeBus:
    """In-memory stand-in for a blocking jeepney connection.

    Method handlers are keyed by ``(path, interface, member)`` and return a
    ``(signature, body)`` pair or a :class:`FakeError`. Property values may be
    callables so a test can script state transitions.
    """

    def __init__(self) -> None:
        self.methods: dict[tuple[str, str, str], Any] = {}
        self.properties: dict[tuple[str, str, str], tuple[str, Any]] = {}
        self.sent: list[Message] = []
        self.timeouts: list[float | None] = []
        self.closed = False
        self.devices: list[str] = []
        self.connections: list[str] = []
        self.active_connections: list[str] = []
        self._access_points: dict[str, list[str]] = {}
        self.set_property(NM_PATH, NM, "Devices", "ao", self.devices)
        self.set_property(NM_PATH, NM, "ActiveConnections", "ao", self.active_connections)
        self.add_method(NM_SETTINGS_PATH, f"{NM}.Settings", "ListConnections", ("ao", (self.connections,)))

    # ------------------------------ jeepney API ------------------------------
    def send_and_get_reply(self, message: Message, *, timeout: float | None = None) -> Message:
        self.timeouts.append(timeout)
        message = _wire(message, serial=len(self.sent) + 1)
        self.sent.append(message)
        fields = message.header.fields
        path = fields[HeaderFields.path]
        interface = fields.get(HeaderFields.interface)
        member = fields[HeaderFields.member]

        if interface == PROPERTIES and member == "Get":
            property_interface, name = message.body
            try:
                signature, value = self.properties[(path, property_interface, name)]
            except KeyError:
                return _wire(
                    new_error(
                        message,
                        "org.freedesktop.DBus.Error.UnknownObject",
                        "s",
                        (f"No such object path '{path}'",),
                    )
                )
            if callable(value):
                value = value()
            return _wire(new_method_return(message, "v", ((signature, value),)))

        handler = self.methods.get((path, interface, member))
        if handler is None:
            result: Any = FakeError("org.freedesktop.DBus.Error.UnknownMethod", f"No method {member}")
        elif callable(handler):
            result = handler(*message.body)
        else:
            result = handler
        if isinstance(result, FakeError):
            return _wire(new_error(message, result.name, "s", (result.message,)))
        signature, body = result
        return _wire(new_method_return(message, signature or None, body))

    def close(self) -> None:
        self.closed = True

    # ------------------------------- scripting -------------------------------
    def add_method(self, path: str, interface: str, member: str, handler: Any) -> None:
        self.methods[(path, interface, member)] = handler

    def set_property(self, path: str, interface: str, name: str, signature: str, value: Any) -> None:
        self.properties[(path, interface, name)] = (signature, value)

    @staticmethod
    def sequence(*values: Any) -> Callable[[], Any]:
        """Return successive ``values`` on each call, repeating the last one."""

        remaining = list(values)

        def _next() -> Any:
            if len(remaining) > 1:
                return remaining.pop(0)
            return remaining[0]

        return _next

    def calls(self, member: str) -> list[tuple[str, tuple[Any, ...]]]:
        """Return ``(path, body)`` for every call of ``member``."""

        found = []
        for message in self.sent:
            fields = message.header.fields
            if fields.get(HeaderFields.interface) == PROPERTIES:
                continue
            if fields[HeaderFields.member] == member:
                found.append((fields[HeaderFields.path], message.body))
        return found

    def add_device(
        self,
        path: str,
        interface: str,
        device_type: int,
        state: Any = 30,
        *,
        real: bool = True,
    ) -> None:
        self.devices.append(path)
        self.set_property(path, f"{NM}.Device", "Interface", "s", interface)
        self.set_property(path, f"{NM}.Device", "DeviceType", "u", device_type)
        self.set_property(path, f"{NM}.Device", "State", "u", state)
        self.set_property(path, f"{NM}.Device", "Real", "b", real)
        self.add_method(NM_PATH, NM, "GetDeviceByIpIface", self._device_by_interface)
        if device_type == 2:
            access_points = self._access_points.setdefault(path, [])
            self.set_property(path, f"{NM}.Device.Wireless", "AccessPoints", "ao", access_points)

    def _device_by_interface(self, interface: str) -> Any:
        for path in self.devices:
            if self.properties[(path, f"{NM}.Device", "Interface")][1] == interface:
                return ("o", (path,))
        return FakeError(f"{NM}.UnknownDevice", f"No device found for the requested iface '{interface}'")

    def add_connection(
        self,
        path: str,
        *,
        id: str,
        uuid: str = "0b8e5b2f-5f3c-4a5e-9a53-6b4c1b6c2f10",
        kind: str = "802-11-wireless",
        ssid: bytes | None = None,
        mode: str = "infrastructure",
    ) -> None:
        settings: dict[str, dict[str, tuple[str, Any]]] = {
            "connection": {
                "id": ("s", id),
                "uuid": ("s", uuid),
                "type": ("s", kind),
                "autoconnect": ("b", True),
            },
            "ipv4": {"method": ("s", "auto"), "dns": ("au", [])},
        }
        if ssid is not None:
            settings["802-11-wireless"] = {"ssid": ("ay", ssid), "mode": ("s", mode)}
        self.connections.append(path)
        self.add_method(path, f"{NM}.Settings.Connection", "GetSettings", ("a{sa{sv}}", (settings,)))

    def add_active_connection(
        self,
        path: str,
        connection_path: str,
        state: Any = 2,
        devices: list[str] | None = None,
    ) -> None:
        self.active_connections.append(path)
        self.set_property(path, f"{NM}.Connection.Active", "Connection", "o", connection_path)
        self.set_property(path, f"{NM}.Connection.Active", "State", "u", state)
        self.set_property(path, f"{NM}.Connection.Active", "Devices", "ao", list(devices or []))

    def add_access_point(
        self,
        path: str,
        device_path: str,
        ssid: bytes,
        strength: int,
        *,
        flags: int = 0,
        wpa_flags: int = 0,
        rsn_flags: int = 0,
    ) -> None:
        self._access_points.setdefault(device_path, []).append(path)
        interface = f"{NM}.AccessPoint"
        self.set_property(path, interface, "Ssid", "ay", ssid)
        self.set_property(path, interface, "Strength", "y", strength)
        self.set_property(path, interface, "Flags", "u", flags)
        self.set_property(path, interface, "WpaFlags", "u", wpa_flags)
        self.set_property(path, interface, "RsnFlags", "u", rsn_flags)


@pytest.fixture
def fake_bus() -> FakeBus:
    return FakeBus()


@pytest.fixture
def sleeps() -> list[float]:
    return []


@pytest.fixture
def bus_client(fake_bus: FakeBus, sleeps: list[float]) -> BusClient:
    return BusClient(fake_bus, sleep=sleeps.append)


@pytest.fixture
def client(bus_client: BusClient, sleeps: list[float]) -> NetworkManagerClient:
    return NetworkManagerClient(bus_client, sleep=sleeps.append)
