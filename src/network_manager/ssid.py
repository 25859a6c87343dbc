"""SSID value type."""

from __future__ import annotations

from dataclasses import dataclass

from .errors import SsidDecodeError, SsidTooLongError, SsidValueError

MAX_SSID_LENGTH = 32


@dataclass(frozen=True, slots=True, order=True)
class Ssid:
    """An 802.11 network name of at most 32 octets.

    SSIDs are opaque bytes on the air, so equality, ordering and hashing use
    the raw value. ``as_str`` is a convenience view that fails when the bytes
    are not UTF-8.
    """

    value: bytes = b""

    def __post_init__(self) -> None:
        if isinstance(self.value, (bytearray, memoryview, list, tuple)):
            try:
                object.__setattr__(self, "value", bytes(self.value))
            except (TypeError, ValueError) as exc:
                raise SsidValueError(f"Invalid SSID octets {self.value!r}: {exc}") from exc
        if not isinstance(self.value, bytes):
            raise TypeError("SSID value must be bytes; use Ssid.from_str for text")
        if len(self.value) > MAX_SSID_LENGTH:
            raise SsidTooLongError(len(self.value))

    @classmethod
    def from_bytes(cls, value: bytes | bytearray | list[int]) -> "Ssid":
        return cls(value)

    @classmethod
    def from_str(cls, value: str) -> "Ssid":
        return cls(value.encode("utf-8"))

    def as_bytes(self) -> bytes:
        return self.value

    def as_str(self) -> str:
        try:
            return self.value.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise SsidDecodeError(f"SSID is not valid UTF-8: {self.value!r}") from exc

    def __len__(self) -> int:
        return len(self.value)

    def __str__(self) -> str:
        return self.value.decode("utf-8", errors="replace")


def as_ssid(value: Ssid | str | bytes) -> Ssid:
    if isinstance(value, Ssid):
        return value
    if isinstance(value, str):
        return Ssid.from_str(value)
    return Ssid.from_bytes(value)


__all__ = ["MAX_SSID_LENGTH", "Ssid", "as_ssid"]
