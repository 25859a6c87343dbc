"""Network devices managed by NetworkManager."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .errors import DeviceNotFoundError, DeviceTypeError, MethodCallError
from .status import WireEnum
from .wait import wait_for_state

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .dbus_nm import NetworkManagerClient
    from .ethernet import EthernetDevice
    from .wifi import WiFiDevice

logger = logging.getLogger(__name__)


class DeviceType(WireEnum):
    UNKNOWN = 0
    ETHERNET = 1
    WIFI = 2
    UNUSED1 = 3
    UNUSED2 = 4
    BLUETOOTH = 5
    OLPC_MESH = 6
    WIMAX = 7
    MODEM = 8
    INFINIBAND = 9
    BOND = 10
    VLAN = 11
    ADSL = 12
    BRIDGE = 13
    GENERIC = 14
    TEAM = 15
    TUN = 16
    IP_TUNNEL = 17
    MACVLAN = 18
    VXLAN = 19
    VETH = 20
    MACSEC = 21
    DUMMY = 22


class DeviceState(WireEnum):
    UNKNOWN = 0
    UNMANAGED = 10
    UNAVAILABLE = 20
    DISCONNECTED = 30
    PREPARE = 40
    CONFIG = 50
    NEED_AUTH = 60
    IP_CONFIG = 70
    IP_CHECK = 80
    SECONDARIES = 90
    ACTIVATED = 100
    DEACTIVATING = 110
    FAILED = 120


ACTIVATING_STATES = frozenset(
    {
        DeviceState.PREPARE,
        DeviceState.CONFIG,
        DeviceState.NEED_AUTH,
        DeviceState.IP_CONFIG,
        DeviceState.IP_CHECK,
        DeviceState.SECONDARIES,
    }
)

_TYPE_LABELS = {DeviceType.WIFI: "WiFi", DeviceType.ETHERNET: "Ethernet"}


def _describe(device_type: DeviceType) -> str:
    label = _TYPE_LABELS.get(device_type, device_type.name.replace("_", " ").title())
    article = "an" if label[0] in "AEIOU" else "a"
    return f"{article} {label} device"


class Device:
    """A network interface known to NetworkManager.

    The interface name and device type are read once; the state is read on
    every call.
    """

    def __init__(self, client: "NetworkManagerClient", path: str) -> None:
        self._client = client
        self._path = path
        self._interface = client.get_device_interface(path)
        self._device_type = client.get_device_type(path)

    @property
    def client(self) -> "NetworkManagerClient":
        return self._client

    @property
    def path(self) -> str:
        return self._path

    @property
    def interface(self) -> str:
        return self._interface

    @property
    def device_type(self) -> DeviceType:
        return self._device_type

    def get_state(self) -> DeviceState:
        return self._client.get_device_state(self._path)

    def is_real(self) -> bool:
        return self._client.is_device_real(self._path)

    def connect(self, timeout: int | None = None) -> DeviceState:
        state = self.get_state()
        if state == DeviceState.ACTIVATED:
            return state
        if state not in ACTIVATING_STATES:
            logger.debug("Connecting device %s (%s)", self._interface, self._path)
            self._client.connect_device(self._path)
        return self.wait(DeviceState.ACTIVATED, timeout)

    def disconnect(self, timeout: int | None = None) -> DeviceState:
        state = self.get_state()
        if state == DeviceState.DISCONNECTED:
            return state
        if state != DeviceState.DEACTIVATING:
            logger.debug("Disconnecting device %s (%s)", self._interface, self._path)
            self._client.disconnect_device(self._path)
        return self.wait(DeviceState.DISCONNECTED, timeout)

    def wait(self, target: DeviceState, timeout: int | None = None) -> DeviceState:
        if timeout is None:
            timeout = self._client.method_timeout
        return wait_for_state(self.get_state, target, timeout, sleep=self._client.sleep)

    def as_wifi_device(self) -> "WiFiDevice":
        from .wifi import WiFiDevice

        self._require_type(DeviceType.WIFI)
        return WiFiDevice(self)

    def as_ethernet_device(self) -> "EthernetDevice":
        from .ethernet import EthernetDevice

        self._require_type(DeviceType.ETHERNET)
        return EthernetDevice(self)

    def _require_type(self, device_type: DeviceType) -> None:
        if self._device_type != device_type:
            raise DeviceTypeError(f"{self._interface} is not {_describe(device_type)}")

    def to_dict(self) -> dict[str, object]:
        return {
            "path": self._path,
            "interface": self._interface,
            "device_type": self._device_type.name.lower(),
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Device):
            return NotImplemented
        return self._path == other._path

    def __hash__(self) -> int:
        return hash(self._path)

    def __repr__(self) -> str:
        return (
            f"Device(path={self._path!r}, interface={self._interface!r}, "
            f"device_type={self._device_type.name})"
        )


def get_devices(client: "NetworkManagerClient") -> list[Device]:
    return [Device(client, path) for path in client.get_devices()]


def get_device_by_interface(client: "NetworkManagerClient", interface: str) -> Device:
    try:
        path = client.get_device_by_interface(interface)
    except MethodCallError as exc:
        raise DeviceNotFoundError(f"Cannot find a device for interface {interface}") from exc
    return Device(client, path)


def find_device(
    client: "NetworkManagerClient",
    device_type: DeviceType,
    interface: str | None = None,
) -> Device:
    """Return the device on ``interface``, or the first device of ``device_type``."""

    if interface is not None:
        device = get_device_by_interface(client, interface)
        device._require_type(device_type)
        return device
    for device in get_devices(client):
        if device.device_type == device_type:
            return device
    raise DeviceNotFoundError(f"Cannot find {_describe(device_type)}")


__all__ = [
    "ACTIVATING_STATES",
    "Device",
    "DeviceState",
    "DeviceType",
    "find_device",
    "get_device_by_interface",
    "get_devices",
]
