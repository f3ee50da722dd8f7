"""
Retry helper.

Lock acquisition is the only operation that retries; it uses the plain
fixed-delay loop below.
"""

import logging
import time
from typing import Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar('T')


def simple_retry(
    func: Callable[[], T],
    max_attempts: int = 3,
    delay: float = 1.0,
    context: str = "operation",
    sleep: Optional[Callable[[float], None]] = None,
) -> T:
    """
    Call ``func`` up to ``max_attempts`` times, sleeping ``delay`` in between.

    Any exception counts as a failed attempt. There is no sleep after the
    last attempt; its exception is re-raised. ``sleep`` replaces time.sleep
    so tests can record the delays.
    """
    pause = sleep or time.sleep
    last_error: Optional[Exception] = None

    for attempt in range(1, max_attempts + 1):
        try:
            result = func()
        except Exception as e:
            last_error = e
            if attempt == max_attempts:
                logger.warning(f"All {max_attempts} attempts failed for {context}: {e}")
                break
            logger.debug(f"Attempt {attempt}/{max_attempts} failed for {context}: {e}")
            pause(delay)
            continue
        if attempt > 1:
            logger.info(f"{context} succeeded on attempt {attempt}")
        return result

    raise last_error or RuntimeError(f"No attempts made for {context}")
