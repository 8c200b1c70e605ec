"""PairState: Per-pair mutable price state with bounded history.

Each monitored pair owns one PairState for the lifetime of the process. The
history and alert log are fixed-capacity deques, so eviction of the oldest
entry is O(1).

.. code-block:: python

    >>> state = PairState("ETH/USDC")
    >>> state.record(2000.0, 1700000000.0)
    PriceSample(price=2000.0, timestamp=1700000000.0, window_change=None)
    >>> state.record(2010.0, 1700000015.0).price
    2010.0
    >>> state.previous_price
    2000.0
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, replace

from .PriceAlert import percent_change
from .Statistics import PairStatistics, compute_statistics

HISTORY_SIZE = 100
ALERT_LOG_SIZE = 10

# Windowed change is attached once history holds more than this many samples.
WINDOW_MIN_SAMPLES = 10


@dataclass(frozen=True)
class PriceSample:
    """A single price observation.

    :ivar price: Quote units per one base unit.
    :ivar timestamp: Capture time in epoch seconds.
    :ivar window_change: Percent change versus the oldest retained sample, if computed.
    """

    price: float
    timestamp: float
    window_change: float | None = None


class PairState:
    """Price state for one monitored pair.

    ``previous_price`` of 0.0 means there is no prior observation yet.

    :ivar name: Pair name.
    :ivar current_price: Most recent price (0.0 before the first observation).
    :ivar previous_price: Price immediately before the current one.
    :ivar history: Most recent samples, oldest first.
    :ivar alerts: Most recent alert messages, oldest first.
    :ivar alert_count: Alerts emitted since startup.
    :ivar last_error: Message of the last failed fetch, cleared on success.
    :ivar consecutive_failures: Failed fetches since the last success.
    :ivar total_failures: Failed fetches since startup.
    :ivar total_successes: Successful fetches since startup.
    """

    def __init__(
        self,
        name: str,
        history_size: int = HISTORY_SIZE,
        alert_log_size: int = ALERT_LOG_SIZE,
    ) -> None:
        """Initialize an empty pair state.

        :param name: Pair name.
        :param history_size: Maximum retained samples (default: 100).
        :param alert_log_size: Maximum retained alert messages (default: 10).
        """
        self.name = name
        self.current_price: float = 0.0
        self.previous_price: float = 0.0
        self.history: deque[PriceSample] = deque(maxlen=history_size)
        self.alerts: deque[str] = deque(maxlen=alert_log_size)
        self.alert_count: int = 0
        self.last_error: str | None = None
        self.consecutive_failures: int = 0
        self.total_failures: int = 0
        self.total_successes: int = 0

    def record(self, price: float, timestamp: float) -> PriceSample:
        """Record one price observation.

        Not idempotent: every call is a new observation.

        :param price: Newly fetched price.
        :param timestamp: Capture time in epoch seconds.
        :returns: The stored sample, including its windowed change if computed.
        """
        if self.current_price != 0:
            self.previous_price = self.current_price
        self.current_price = price

        sample = PriceSample(price=price, timestamp=timestamp)
        self.history.append(sample)

        if len(self.history) > WINDOW_MIN_SAMPLES:
            oldest = self.history[0].price
            if oldest != 0:
                sample = replace(sample, window_change=(price - oldest) / oldest * 100)
                self.history[-1] = sample

        self.last_error = None
        self.consecutive_failures = 0
        self.total_successes += 1
        return sample

    def record_failure(self, error: str) -> None:
        """Note a failed fetch. Prices and history are left untouched.

        :param error: Error description.
        """
        self.last_error = error
        self.consecutive_failures += 1
        self.total_failures += 1

    def add_alert(self, message: str) -> None:
        """Append an alert message, evicting the oldest beyond capacity.

        :param message: Alert message.
        """
        self.alerts.append(message)
        self.alert_count += 1

    @property
    def price_change_percent(self) -> float:
        """Percent change from previous to current price (0.0 without a baseline)."""
        if self.previous_price == 0:
            return 0.0
        return percent_change(self.previous_price, self.current_price)

    @property
    def window_change(self) -> float | None:
        """Windowed change of the newest sample, if computed."""
        if not self.history:
            return None
        return self.history[-1].window_change

    def prices(self) -> list[float]:
        """Return retained prices, oldest first."""
        return [s.price for s in self.history]

    def statistics(self) -> PairStatistics | None:
        """Compute statistics over the retained history.

        :returns: PairStatistics, or None if no samples are retained.
        """
        return compute_statistics(self.prices(), self.current_price, self.alert_count)
