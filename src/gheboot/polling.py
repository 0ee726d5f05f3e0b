"""Bounded fixed-delay polling."""

import logging
import time
from typing import Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def poll_until(
    check: Callable[[int], Optional[T]],
    attempts: int,
    delay: float,
    sleep: Callable[[float], None] = time.sleep,
) -> Optional[T]:
    """Call ``check(attempt)`` until it returns a truthy value.

    ``attempt`` is 1-based. Sleeps ``delay`` seconds between attempts but not
    after the last one.

    Returns:
        The first truthy result, or None once ``attempts`` are exhausted
    """
    for attempt in range(1, attempts + 1):
        result = check(attempt)
        if result:
            return result
        if attempt < attempts:
            logger.debug(f"Attempt {attempt}/{attempts} not ready, sleeping {delay}s")
            sleep(delay)
    return None
