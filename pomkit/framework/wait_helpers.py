# ================================================================================
# Wait Helpers Module
# ================================================================================
#
# Bounded polling used by every readiness check in the framework.
#
# Key Features:
#   - Immediate first evaluation, fixed poll interval afterwards
#   - Wall-clock deadline (never overshoots by more than one interval)
#   - Transient lookup failures count as "not yet"; the last one is chained
#     as the cause of the timeout
#   - Named waits raise their own WaitTimeoutError subclass
#   - Allure integration for step reporting
#
# Usage:
#   wait_until(lambda: job.done, timeout_ms=2000, poll_interval_ms=100)
#   element = poll_until(find_button, accept=lambda el: el is not None, timeout_ms=5000)
#
# ================================================================================

import time
from typing import Callable, Optional, Type, TypeVar

import allure
from loguru import logger

from pomkit.common.global_config import derive_poll_interval
from pomkit.exceptions import TransientLookupError, WaitTimeoutError


T = TypeVar("T")


def poll_until(
    supplier: Callable[[], T],
    accept: Callable[[T], bool],
    timeout_ms: int,
    poll_interval_ms: Optional[int] = None,
    description: str = "condition",
    error: Type[WaitTimeoutError] = WaitTimeoutError,
    message: Optional[str] = None,
) -> T:
    """
    Poll ``supplier`` until ``accept`` approves its result.

    Args:
        supplier: Produces a value; may raise TransientLookupError
        accept: Decides whether the value is good enough
        timeout_ms: Total budget in milliseconds
        poll_interval_ms: Delay between evaluations; None derives it from the timeout
        description: Human-readable description for logging
        error: WaitTimeoutError subclass raised on timeout
        message: Message for the timeout error; defaults to the generic one

    Returns:
        The first accepted value.

    Raises:
        error: If the budget runs out. The last transient failure, if any, is
            chained as ``__cause__``. Non-transient exceptions propagate at once.
    """
    interval_ms = poll_interval_ms if poll_interval_ms is not None else derive_poll_interval(timeout_ms)
    start_time = time.monotonic()
    attempt = 0
    last_error: Optional[TransientLookupError] = None

    while True:
        attempt += 1
        try:
            value = supplier()
            if accept(value):
                if attempt > 1:
                    elapsed_ms = (time.monotonic() - start_time) * 1000
                    logger.debug(f"Wait successful after {attempt} attempts ({elapsed_ms:.0f}ms): {description}")
                return value
        except TransientLookupError as e:
            last_error = e
            logger.debug(f"Attempt {attempt} for '{description}' not resolvable yet: {e}")

        elapsed_ms = (time.monotonic() - start_time) * 1000
        if elapsed_ms >= timeout_ms:
            logger.warning(
                f"Timeout after {elapsed_ms:.0f}ms ({attempt} attempts) waiting for: {description}"
            )
            raise error(timeout_ms, message) from last_error

        time.sleep(min(interval_ms, timeout_ms - elapsed_ms) / 1000)


@allure.step("Wait until: {description}")
def wait_until(
    condition: Callable[[], bool],
    timeout_ms: int,
    poll_interval_ms: Optional[int] = None,
    description: str = "condition",
    error: Type[WaitTimeoutError] = WaitTimeoutError,
    message: Optional[str] = None,
) -> None:
    """
    Block until ``condition()`` returns True.

    Example:
        wait_until(
            lambda: dialog.is_displayed(),
            timeout_ms=config.wait_timeout_ms,
            description="Dialog to open",
        )
    """
    poll_until(
        condition,
        bool,
        timeout_ms,
        poll_interval_ms,
        description=description,
        error=error,
        message=message,
    )


__all__ = [
    "poll_until",
    "wait_until",
]
