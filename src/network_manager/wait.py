"""Polling helper for remote state transitions."""

from __future__ import annotations

import logging
import time
from typing import Callable, TypeVar

logger = logging.getLogger(__name__)

S = TypeVar("S")

POLL_INTERVAL = 1.0


def wait_for_state(
    get_state: Callable[[], S],
    target: S,
    timeout: int,
    *,
    sleep: Callable[[float], None] = time.sleep,
    interval: float = POLL_INTERVAL,
) -> S:
    """Poll ``get_state`` until it reports ``target`` or ``timeout`` polls have passed.

    The timeout is soft: when it expires the last observed state is returned
    and the caller decides whether that is a failure. A timeout of zero reads
    the state once without sleeping.
    """

    if timeout < 0:
        raise ValueError("Timeout must not be negative")
    if timeout == 0:
        return get_state()

    elapsed = 0
    while True:
        sleep(interval)
        state = get_state()
        elapsed += 1
        if state == target:
            return state
        if elapsed >= timeout:
            logger.debug("Timed out after %d polls waiting for %s; last state %s", elapsed, target, state)
            return state


__all__ = ["POLL_INTERVAL", "wait_for_state"]
