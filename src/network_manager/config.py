"""Configuration for the NetworkManager client."""
from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

logger = logging.getLogger(__name__)

NM_SERVICE_NAME = "org.freedesktop.NetworkManager"
DEFAULT_METHOD_TIMEOUT = 15
DEFAULT_RETRY_ATTEMPTS = 10
DEFAULT_RETRY_DELAY = 1.0
DEFAULT_RETRY_ERROR_NAMES = ("org.freedesktop.NetworkManager.UnknownConnection",)
SUPPORTED_BUSES = ("SYSTEM", "SESSION")


@dataclass(frozen=True, slots=True)
class ClientConfig:
    """Connection and retry settings for the bus client."""

    service_name: str = NM_SERVICE_NAME
    bus: str = "SYSTEM"
    method_timeout: int = DEFAULT_METHOD_TIMEOUT
    retry_attempts: int = DEFAULT_RETRY_ATTEMPTS
    retry_delay: float = DEFAULT_RETRY_DELAY
    retry_error_names: tuple[str, ...] = DEFAULT_RETRY_ERROR_NAMES

    def __post_init__(self) -> None:
        if not isinstance(self.service_name, str) or not self.service_name.strip():
            raise ValueError("Service name must be a non-empty string")
        bus = str(self.bus).upper()
        if bus not in SUPPORTED_BUSES:
            raise ValueError(f"Bus must be one of {', '.join(SUPPORTED_BUSES)}")
        try:
            timeout = int(self.method_timeout)
            attempts = int(self.retry_attempts)
            delay = float(self.retry_delay)
        except (TypeError, ValueError) as exc:
            raise ValueError("Timeout and retry values must be numeric") from exc
        if timeout <= 0:
            raise ValueError("Method timeout must be a positive number of seconds")
        if attempts < 1:
            raise ValueError("Retry attempts must be at least 1")
        if not math.isfinite(delay) or delay < 0:
            raise ValueError("Retry delay must be a non-negative finite value")
        if isinstance(self.retry_error_names, str):
            raise ValueError("Retry error names must be a sequence of strings")
        names = tuple(str(name) for name in self.retry_error_names)
        object.__setattr__(self, "service_name", self.service_name.strip())
        object.__setattr__(self, "bus", bus)
        object.__setattr__(self, "method_timeout", timeout)
        object.__setattr__(self, "retry_attempts", attempts)
        object.__setattr__(self, "retry_delay", delay)
        object.__setattr__(self, "retry_error_names", names)

    def to_dict(self) -> dict[str, Any]:
        return {
            "service_name": self.service_name,
            "bus": self.bus,
            "method_timeout": self.method_timeout,
            "retry_attempts": self.retry_attempts,
            "retry_delay": self.retry_delay,
            "retry_error_names": list(self.retry_error_names),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ClientConfig":
        if not isinstance(data, Mapping):
            raise ValueError("Client configuration must be a mapping")
        defaults = cls()
        names = data.get("retry_error_names", defaults.retry_error_names)
        if not isinstance(names, str):
            names = tuple(names)
        return cls(
            service_name=data.get("service_name", defaults.service_name),
            bus=data.get("bus", defaults.bus),
            method_timeout=data.get("method_timeout", defaults.method_timeout),
            retry_attempts=data.get("retry_attempts", defaults.retry_attempts),
            retry_delay=data.get("retry_delay", defaults.retry_delay),
            retry_error_names=names,
        )


DEFAULT_CLIENT_CONFIG = ClientConfig()


def load_client_config(path: Path | str) -> ClientConfig:
    """Load client settings from a JSON file, falling back to defaults."""

    config_path = Path(path)
    if not config_path.exists():
        return DEFAULT_CLIENT_CONFIG
    try:
        payload = json.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        logger.warning("Unable to load client configuration from %s: %s", config_path, exc)
        return DEFAULT_CLIENT_CONFIG
    try:
        return ClientConfig.from_dict(payload)
    except (TypeError, ValueError) as exc:
        logger.warning("Ignoring invalid client configuration in %s: %s", config_path, exc)
        return DEFAULT_CLIENT_CONFIG


__all__ = [
    "ClientConfig",
    "DEFAULT_CLIENT_CONFIG",
    "DEFAULT_METHOD_TIMEOUT",
    "DEFAULT_RETRY_ATTEMPTS",
    "DEFAULT_RETRY_DELAY",
    "DEFAULT_RETRY_ERROR_NAMES",
    "NM_SERVICE_NAME",
    "load_client_config",
]
