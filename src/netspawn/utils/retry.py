"""Bounded fixed-interval polling."""

import logging
import time
from typing import Callable, Optional, TypeVar

from netspawn.errors import ConnectivityTimeout


logger = logging.getLogger(__name__)

T = TypeVar("T")


def poll(
    probe: Callable[[], Optional[T]],
    attempts: int,
    interval: float,
    description: str,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Call ``probe`` until it returns something truthy.

    Sleeps ``interval`` seconds between attempts, never after the last one.
    Raises ConnectivityTimeout once ``attempts`` probes came back empty.
    """
    if attempts < 1:
        raise ValueError("attempts must be at least 1")

    for attempt in range(1, attempts + 1):
        result = probe()
        if result:
            logger.debug(f"{description}: reached on attempt {attempt}/{attempts}")
            return result

        logger.debug(f"{description}: attempt {attempt}/{attempts} not ready")
        if attempt < attempts:
            sleep(interval)

    raise ConnectivityTimeout(description, attempts)
