"""Access point security capabilities and credentials."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntFlag


class Security(IntFlag):
    """Security schemes supported by an access point."""

    NONE = 0
    WEP = 0x1
    WPA = 0x2
    WPA2 = 0x4
    ENTERPRISE = 0x8


class ApFlags(IntFlag):
    """General capability flags reported in ``AccessPoint.Flags``."""

    NONE = 0
    PRIVACY = 0x1


class ApSecurityFlags(IntFlag):
    """Security flags reported in ``AccessPoint.WpaFlags`` and ``RsnFlags``."""

    NONE = 0
    PAIR_WEP40 = 0x1
    PAIR_WEP104 = 0x2
    PAIR_TKIP = 0x4
    PAIR_CCMP = 0x8
    GROUP_WEP40 = 0x10
    GROUP_WEP104 = 0x20
    GROUP_TKIP = 0x40
    GROUP_CCMP = 0x80
    KEY_MGMT_PSK = 0x100
    KEY_MGMT_802_1X = 0x200


def derive_security(
    flags: ApFlags | int,
    wpa_flags: ApSecurityFlags | int,
    rsn_flags: ApSecurityFlags | int,
) -> Security:
    """Classify an access point from its raw capability flags.

    Every check is independent, so a network offering both WPA generations
    with 802.1X key management is reported as ``WPA | WPA2 | ENTERPRISE``.
    """

    flags = ApFlags(flags)
    wpa_flags = ApSecurityFlags(wpa_flags)
    rsn_flags = ApSecurityFlags(rsn_flags)

    security = Security.NONE
    if (
        ApFlags.PRIVACY in flags
        and wpa_flags == ApSecurityFlags.NONE
        and rsn_flags == ApSecurityFlags.NONE
    ):
        security |= Security.WEP
    if wpa_flags != ApSecurityFlags.NONE:
        security |= Security.WPA
    if rsn_flags != ApSecurityFlags.NONE:
        security |= Security.WPA2
    if ApSecurityFlags.KEY_MGMT_802_1X in wpa_flags or ApSecurityFlags.KEY_MGMT_802_1X in rsn_flags:
        security |= Security.ENTERPRISE
    return security


@dataclass(frozen=True, slots=True)
class NoCredentials:
    """Join an open network."""


@dataclass(frozen=True, slots=True)
class WepCredentials:
    passphrase: str


@dataclass(frozen=True, slots=True)
class WpaCredentials:
    passphrase: str


@dataclass(frozen=True, slots=True)
class EnterpriseCredentials:
    """PEAP/MSCHAPv2 login for 802.1X networks."""

    identity: str
    passphrase: str


AccessPointCredentials = NoCredentials | WepCredentials | WpaCredentials | EnterpriseCredentials


__all__ = [
    "AccessPointCredentials",
    "ApFlags",
    "ApSecurityFlags",
    "EnterpriseCredentials",
    "NoCredentials",
    "Security",
    "WepCredentials",
    "WpaCredentials",
    "derive_security",
]
