"""Blocking D-Bus transport used by the NetworkManager client.

Method arguments and property values travel as ``(signature, value)`` pairs,
the same representation jeepney uses for variants. Replies are decoded with
small named decoder functions that check the wire signature before accepting
a value.
"""

from __future__ import annotations

import logging
import struct
import time
from typing import Any, Callable, Iterable, Sequence, TypeVar

from jeepney import DBusAddress, new_method_call
from jeepney.io.blocking import open_dbus_connection
from jeepney.low_level import HeaderFields, Message, MessageType, ObjectPathType, parse_signature

from .config import DEFAULT_CLIENT_CONFIG, ClientConfig
from .errors import (
    DecodeError,
    MessageEncodingError,
    MethodCallError,
    PathEncodingError,
    PropertyDecodeError,
    PropertyReadError,
    RetriesExhaustedError,
    TransportError,
    WrongResponseShapeError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")
U = TypeVar("U")

Variant = tuple[str, Any]
Decoder = Callable[[str, Any], T]

PROPERTIES_INTERFACE = "org.freedesktop.DBus.Properties"
NO_REPLY_ERROR = "org.freedesktop.DBus.Error.NoReply"

_OBJECT_PATH_TYPE = ObjectPathType()
_INTEGER_SIGNATURES = frozenset("ynqiuxt")


# ------------------------------- decoders -------------------------------
def to_str(signature: str, value: Any) -> str:
    if signature not in ("s", "o", "g") or not isinstance(value, str):
        raise DecodeError(f"Expected a string, got {signature!r} value {value!r}")
    return value


def to_path(signature: str, value: Any) -> str:
    if signature != "o" or not isinstance(value, str):
        raise DecodeError(f"Expected an object path, got {signature!r} value {value!r}")
    return value


def to_int(signature: str, value: Any) -> int:
    if signature not in _INTEGER_SIGNATURES or isinstance(value, bool) or not isinstance(value, int):
        raise DecodeError(f"Expected an integer, got {signature!r} value {value!r}")
    return value


def to_bool(signature: str, value: Any) -> bool:
    if signature != "b" or not isinstance(value, bool):
        raise DecodeError(f"Expected a boolean, got {signature!r} value {value!r}")
    return value


def to_bytes(signature: str, value: Any) -> bytes:
    if signature != "ay" or not isinstance(value, (bytes, bytearray, list)):
        raise DecodeError(f"Expected a byte array, got {signature!r} value {value!r}")
    return bytes(value)


def to_str_list(signature: str, value: Any) -> list[str]:
    if signature not in ("as", "ao") or not isinstance(value, list):
        raise DecodeError(f"Expected a string array, got {signature!r} value {value!r}")
    return [str(item) for item in value]


def to_dict(signature: str, value: Any) -> dict[Any, Any]:
    if not signature.startswith("a{") or not isinstance(value, dict):
        raise DecodeError(f"Expected a dictionary, got {signature!r} value {value!r}")
    return value


DECODERS: dict[type, Decoder[Any]] = {
    str: to_str,
    int: to_int,
    bool: to_bool,
    bytes: to_bytes,
    list: to_str_list,
    dict: to_dict,
}


def decode(variant: Variant, target: type[T]) -> T:
    """Decode a ``(signature, value)`` variant into ``target``."""

    try:
        decoder = DECODERS[target]
    except KeyError:
        raise DecodeError(f"Unsupported decode target: {target!r}") from None
    if not isinstance(variant, tuple) or len(variant) != 2:
        raise DecodeError(f"Expected a variant, got {variant!r}")
    signature, value = variant
    return decoder(signature, value)


def split_signature(signature: str) -> list[str]:
    """Split a message signature into its complete types."""

    types: list[str] = []
    remaining = list(signature)
    start = 0
    while remaining:
        # parse_signature consumes one complete type from the front of the list.
        try:
            parse_signature(remaining)
        except (IndexError, KeyError, ValueError) as exc:
            raise DecodeError(f"Invalid signature: {signature!r}") from exc
        end = len(signature) - len(remaining)
        types.append(signature[start:end])
        start = end
    return types


def _resolve_decoder(decoder: Decoder[T] | type[T]) -> Decoder[T]:
    if isinstance(decoder, type):
        try:
            return DECODERS[decoder]
        except KeyError:
            raise DecodeError(f"Unsupported decode target: {decoder!r}") from None
    return decoder


def _reply_values(reply: Message) -> list[Variant]:
    signature = reply.header.fields.get(HeaderFields.signature, "")
    return list(zip(split_signature(signature), reply.body))


def extract(reply: Message, decoder: Decoder[T] | type[T]) -> T:
    """Decode the first value of a method reply."""

    decode_first = _resolve_decoder(decoder)
    values = _reply_values(reply)
    if not values:
        raise WrongResponseShapeError("Expected a reply with one value, got an empty reply")
    try:
        return decode_first(*values[0])
    except DecodeError as exc:
        raise WrongResponseShapeError(f"Unexpected reply: {exc}") from exc


def extract_two(
    reply: Message,
    first: Decoder[T] | type[T],
    second: Decoder[U] | type[U],
) -> tuple[T, U]:
    """Decode the first two values of a method reply."""

    decode_first = _resolve_decoder(first)
    decode_second = _resolve_decoder(second)
    values = _reply_values(reply)
    if len(values) < 2:
        raise WrongResponseShapeError(f"Expected a reply with two values, got {len(values)}")
    try:
        return decode_first(*values[0]), decode_second(*values[1])
    except DecodeError as exc:
        raise WrongResponseShapeError(f"Unexpected reply: {exc}") from exc


def object_path(path: str | bytes) -> str:
    """Return ``path`` as text, rejecting values that are not bus object paths."""

    if isinstance(path, (bytes, bytearray)):
        try:
            path = bytes(path).decode("utf-8")
        except UnicodeDecodeError:
            raise PathEncodingError(path) from None
    try:
        _OBJECT_PATH_TYPE.check_data(path)
    except (TypeError, ValueError):
        raise PathEncodingError(path) from None
    return path


def _error_details(reply: Message) -> str | None:
    if reply.body and isinstance(reply.body[0], str):
        return reply.body[0]
    return None


class BusClient:
    """Send method calls and read properties on one bus service."""

    def __init__(
        self,
        connection: Any,
        base: str = DEFAULT_CLIENT_CONFIG.service_name,
        *,
        retry_error_names: Iterable[str] = DEFAULT_CLIENT_CONFIG.retry_error_names,
        method_timeout: int = DEFAULT_CLIENT_CONFIG.method_timeout,
        retries: int = DEFAULT_CLIENT_CONFIG.retry_attempts,
        retry_delay: float = DEFAULT_CLIENT_CONFIG.retry_delay,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if retries < 1:
            raise ValueError("Retries must be at least 1")
        self._connection = connection
        self._base = base
        self._retry_error_names = frozenset(retry_error_names)
        self._method_timeout = int(method_timeout)
        self._retries = int(retries)
        self._retry_delay = float(retry_delay)
        self._sleep = sleep

    @classmethod
    def open(
        cls,
        config: ClientConfig = DEFAULT_CLIENT_CONFIG,
        *,
        sleep: Callable[[float], None] = time.sleep,
    ) -> "BusClient":
        """Connect to the configured message bus."""

        try:
            connection = open_dbus_connection(bus=config.bus)
        except (OSError, ValueError, KeyError) as exc:
            raise TransportError(f"Unable to connect to the {config.bus.lower()} bus: {exc}") from exc
        logger.debug("Connected to the %s bus for %s", config.bus.lower(), config.service_name)
        return cls(
            connection,
            config.service_name,
            retry_error_names=config.retry_error_names,
            method_timeout=config.method_timeout,
            retries=config.retry_attempts,
            retry_delay=config.retry_delay,
            sleep=sleep,
        )

    @property
    def base(self) -> str:
        return self._base

    @property
    def method_timeout(self) -> int:
        return self._method_timeout

    @method_timeout.setter
    def method_timeout(self, value: int) -> None:
        if value <= 0:
            raise ValueError("Method timeout must be positive")
        self._method_timeout = int(value)

    def close(self) -> None:
        self._connection.close()

    def __enter__(self) -> "BusClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ------------------------------ operations -----------------------------
    def call(
        self,
        path: str | bytes,
        interface: str,
        method: str,
        args: Sequence[Variant] = (),
    ) -> Message:
        """Call ``interface.method`` on ``path`` and return the reply message."""

        path = object_path(path)
        signature = "".join(arg[0] for arg in args)
        body = tuple(arg[1] for arg in args)
        address = DBusAddress(path, bus_name=self._base, interface=interface)
        try:
            message = new_method_call(address, method, signature or None, body)
            # Serialise once up front so encoding problems are not retried.
            message.serialise(serial=1)
        except (TypeError, ValueError, KeyError, struct.error) as exc:
            raise MessageEncodingError(
                f"Unable to encode {interface}::{method} call on {path}: {exc}"
            ) from exc
        return self.call_with_retry(message, path=path, interface=interface, method=method)

    def call_with_retry(
        self,
        message: Message,
        *,
        path: str,
        interface: str,
        method: str,
    ) -> Message:
        """Send ``message``, retrying error replies named in the retry list."""

        error_name = ""
        for attempt in range(1, self._retries + 1):
            try:
                reply = self._connection.send_and_get_reply(message, timeout=self._method_timeout)
            except TimeoutError:
                error_name = NO_REPLY_ERROR
                details: str | None = f"no reply within {self._method_timeout} seconds"
            except OSError as exc:
                raise TransportError(
                    f"Bus connection failed during {interface}::{method} on {path}: {exc}"
                ) from exc
            else:
                if reply.header.message_type != MessageType.error:
                    return reply
                error_name = reply.header.fields.get(HeaderFields.error_name, "")
                details = _error_details(reply)

            if error_name not in self._retry_error_names:
                logger.debug(
                    "%s::%s method call failed on %s: %s %s",
                    interface,
                    method,
                    path,
                    error_name,
                    details or "",
                )
                raise MethodCallError(
                    error_name,
                    interface=interface,
                    method=method,
                    path=path,
                    details=details,
                )
            logger.debug(
                "Retrying %s::%s on %s after %s (attempt %d of %d)",
                interface,
                method,
                path,
                error_name,
                attempt,
                self._retries,
            )
            if attempt < self._retries:
                self._sleep(self._retry_delay)

        logger.error(
            "%s::%s method call on %s kept failing with %s", interface, method, path, error_name
        )
        raise RetriesExhaustedError(
            error_name,
            interface=interface,
            method=method,
            path=path,
            attempts=self._retries,
        )

    def property(
        self,
        path: str | bytes,
        interface: str,
        name: str,
        decoder: Decoder[T] | type[T],
    ) -> T:
        """Read property ``name`` of ``interface`` on ``path``."""

        decode_value = _resolve_decoder(decoder)
        try:
            reply = self.call(path, PROPERTIES_INTERFACE, "Get", [("s", interface), ("s", name)])
        except RetriesExhaustedError:
            raise
        except MethodCallError as exc:
            logger.debug(
                "Get %s::%s property failed on %s: %s", interface, name, exc.path, exc.error_name
            )
            raise PropertyReadError(exc, interface=interface, name=name) from exc
        path = object_path(path)
        try:
            variant = extract(reply, lambda signature, value: (signature, value))
            if variant[0] != "v" or not isinstance(variant[1], tuple) or len(variant[1]) != 2:
                raise DecodeError(f"Expected a variant, got {variant[0]!r}")
            return decode_value(*variant[1])
        except DecodeError as exc:
            logger.error(
                "Get %s::%s property failed on %s: wrong property type: %s", interface, name, path, exc
            )
            raise PropertyDecodeError(
                f"Get {interface}::{name} property failed on {path}: {exc}",
                path=path,
                interface=interface,
                name=name,
            ) from exc


__all__ = [
    "BusClient",
    "DECODERS",
    "Decoder",
    "NO_REPLY_ERROR",
    "PROPERTIES_INTERFACE",
    "Variant",
    "decode",
    "extract",
    "extract_two",
    "object_path",
    "split_signature",
    "to_bool",
    "to_bytes",
    "to_dict",
    "to_int",
    "to_path",
    "to_str",
    "to_str_list",
]
