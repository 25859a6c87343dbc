"""Overall NetworkManager state and the wire enums shared by the client."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import IntEnum

logger = logging.getLogger(__name__)


class WireEnum(IntEnum):
    """Integer enum that maps unknown wire codes to ``UNKNOWN``.

    Newer NetworkManager releases add states, so an unexpected code is
    logged and tolerated instead of failing the read.
    """

    @classmethod
    def _missing_(cls, value: object) -> "WireEnum":
        logger.warning("Undefined %s value: %r", cls.__name__, value)
        return cls["UNKNOWN"]


class NetworkManagerState(WireEnum):
    UNKNOWN = 0
    ASLEEP = 10
    DISCONNECTED = 20
    DISCONNECTING = 30
    CONNECTING = 40
    CONNECTED_LOCAL = 50
    CONNECTED_SITE = 60
    CONNECTED_GLOBAL = 70


class Connectivity(WireEnum):
    UNKNOWN = 0
    NONE = 1
    PORTAL = 2
    LIMITED = 3
    FULL = 4


@dataclass(frozen=True, slots=True)
class Status:
    """Snapshot of the service wide networking state."""

    state: NetworkManagerState = NetworkManagerState.UNKNOWN
    connectivity: Connectivity = Connectivity.UNKNOWN
    wireless_enabled: bool = False
    networking_enabled: bool = False

    def to_dict(self) -> dict[str, object]:
        return {
            "state": self.state.name.lower(),
            "connectivity": self.connectivity.name.lower(),
            "wireless_enabled": self.wireless_enabled,
            "networking_enabled": self.networking_enabled,
        }


__all__ = ["Connectivity", "NetworkManagerState", "Status", "WireEnum"]
