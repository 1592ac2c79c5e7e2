"""
Explicit waits: poll an async condition until it returns a truthy value.

    element = await session.wait(timeout_s=5).until(element_clickable(By.ID, "submit"))

Conditions live in `w3cdriver.conditions`; any `async def cond(session)` works.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any, TypeVar

from .constants import DEFAULT_POLL_INTERVAL_S, DEFAULT_WAIT_TIMEOUT_S
from .errors import NoSuchElement, StaleElementReference, WaitTimeoutError

if TYPE_CHECKING:
    from .session import WebDriverSession

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_IGNORED_EXCEPTIONS: tuple[type[BaseException], ...] = (NoSuchElement, StaleElementReference)


async def wait_until(
    condition: Callable[[], Awaitable[T]],
    *,
    timeout_s: float = DEFAULT_WAIT_TIMEOUT_S,
    poll_s: float = DEFAULT_POLL_INTERVAL_S,
    ignored_exceptions: tuple[type[BaseException], ...] = DEFAULT_IGNORED_EXCEPTIONS,
    message: str = "",
) -> T:
    """
    Await `condition()` every `poll_s` seconds until it returns a truthy value.

    The condition is always evaluated at least once. Exceptions listed in
    `ignored_exceptions` count as "not yet"; anything else propagates.

    Raises:
        WaitTimeoutError: no truthy value before the deadline; the last
            ignored exception is attached as `last_error` and chained
    """
    if timeout_s < 0:
        raise ValueError("timeout_s must be non-negative")
    if poll_s <= 0:
        raise ValueError("poll_s must be positive")

    deadline = time.monotonic() + timeout_s
    last_error: BaseException | None = None
    attempts = 0
    while True:
        attempts += 1
        try:
            value = await condition()
            if value:
                return value
        except ignored_exceptions as e:
            last_error = e

        remaining = deadline - time.monotonic()
        if remaining <= 0:
            break
        await asyncio.sleep(min(poll_s, remaining))

    logger.debug(f"wait_until gave up after {attempts} attempt(s) in {timeout_s}s")
    text = message or f"Condition not met within {timeout_s}s"
    raise WaitTimeoutError(text, timeout_s=timeout_s, last_error=last_error) from last_error


class WebDriverWait:
    """
    Explicit wait bound to a session.

    Args:
        session: Session passed to every condition
        timeout_s: Deadline (default: session config's wait_timeout_s)
        poll_s: Polling interval (default: session config's poll_interval_s)
        ignored_exceptions: Exceptions that mean "not yet"
    """

    def __init__(
        self,
        session: WebDriverSession,
        timeout_s: float | None = None,
        poll_s: float | None = None,
        ignored_exceptions: tuple[type[BaseException], ...] = DEFAULT_IGNORED_EXCEPTIONS,
    ) -> None:
        config = getattr(session, "config", None)
        self._session = session
        self.timeout_s = timeout_s if timeout_s is not None else getattr(
            config, "wait_timeout_s", DEFAULT_WAIT_TIMEOUT_S
        )
        self.poll_s = poll_s if poll_s is not None else getattr(
            config, "poll_interval_s", DEFAULT_POLL_INTERVAL_S
        )
        self.ignored_exceptions = ignored_exceptions

    async def until(
        self,
        condition: Callable[[WebDriverSession], Awaitable[T]],
        message: str = "",
    ) -> T:
        """Wait for `condition(session)` to return a truthy value and return it."""

        async def probe() -> T:
            return await condition(self._session)

        return await wait_until(
            probe,
            timeout_s=self.timeout_s,
            poll_s=self.poll_s,
            ignored_exceptions=self.ignored_exceptions,
            message=message,
        )

    async def until_not(
        self,
        condition: Callable[[WebDriverSession], Awaitable[Any]],
        message: str = "",
    ) -> bool:
        """Wait for `condition(session)` to return a falsy value; an ignored exception counts as falsy."""

        async def probe() -> bool:
            try:
                return not await condition(self._session)
            except self.ignored_exceptions:
                return True

        return await wait_until(
            probe,
            timeout_s=self.timeout_s,
            poll_s=self.poll_s,
            ignored_exceptions=(),
            message=message,
        )
