"""ResilientFetcher: Bounded retry with fixed-delay backoff around PriceOracle.

A failed attempt waits ``retry_delay`` seconds before the next one; there is
no exponential growth and no jitter. After ``max_retries`` failed attempts
the last error is wrapped in FetchExhausted.

Configuration and degenerate-pool errors (PoolNotFound, ComputationError)
are not retried since another attempt a few seconds later gives the same
answer. They propagate immediately.

.. code-block:: python

    >>> fetcher = ResilientFetcher(oracle, max_retries=3, retry_delay=2.0)
    >>> price = await fetcher.fetch(weth, usdc, 18, 6)
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Awaitable, Callable

from .PriceOracle import ComputationError
from .sources.base import MonitorError, PoolNotFound

if TYPE_CHECKING:
    from .PriceOracle import PriceOracle

logger = logging.getLogger(__name__)

DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_DELAY_SECONDS = 2.0

NON_RETRYABLE: tuple[type[Exception], ...] = (PoolNotFound, ComputationError)


class FetchExhausted(MonitorError):
    """Raised when every fetch attempt for a pair failed.

    :ivar attempts: Number of attempts made.
    :ivar last_error: Error raised by the final attempt.
    """

    def __init__(self, attempts: int, last_error: Exception):
        """Initialize the error.

        :param attempts: Number of attempts made.
        :param last_error: Error raised by the final attempt.
        """
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"Failed after {attempts} attempts: {last_error}")


class ResilientFetcher:
    """Wraps PriceOracle.get_price() with bounded retries.

    :ivar oracle: Price oracle to call.
    :ivar max_retries: Maximum number of attempts per fetch.
    :ivar retry_delay: Seconds to wait between attempts.
    """

    def __init__(
        self,
        oracle: PriceOracle,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_delay: float = DEFAULT_RETRY_DELAY_SECONDS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Initialize the fetcher.

        :param oracle: Price oracle to call.
        :param max_retries: Maximum attempts per fetch (default: 3).
        :param retry_delay: Seconds between attempts (default: 2.0).
        :param sleep: Awaitable delay function, replaceable in tests.
        :raises ValueError: If parameters are invalid.
        """
        if max_retries < 1:
            raise ValueError("max_retries must be at least 1")
        if retry_delay < 0:
            raise ValueError("retry_delay must not be negative")

        self.oracle = oracle
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self._sleep = sleep

    async def fetch(
        self,
        base_token: str,
        quote_token: str,
        base_decimals: int,
        quote_decimals: int,
    ) -> float:
        """Fetch a price, retrying transient failures.

        :param base_token: Base token address.
        :param quote_token: Quote token address.
        :param base_decimals: Base token decimal precision.
        :param quote_decimals: Quote token decimal precision.
        :returns: Price as quote units per one base unit.
        :raises PoolNotFound: If no pool exists for the pair (not retried).
        :raises ComputationError: If the reserves are degenerate (not retried).
        :raises FetchExhausted: If all attempts failed.
        """
        last_error: Exception | None = None
        for attempt in range(1, self.max_retries + 1):
            try:
                return await self.oracle.get_price(
                    base_token, quote_token, base_decimals, quote_decimals
                )
            except NON_RETRYABLE:
                raise
            except Exception as e:
                last_error = e
                if attempt == self.max_retries:
                    break
                logger.warning(
                    f"Retry {attempt}/{self.max_retries} for {base_token}/{quote_token}: {e}"
                )
                await self._sleep(self.retry_delay)

        assert last_error is not None
        raise FetchExhausted(self.max_retries, last_error) from last_error
