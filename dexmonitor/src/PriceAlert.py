"""PriceAlert: Threshold-crossing price move detection and price formatting.

An alert fires when the move from the previous to the current price is at
least ``threshold_percent`` in either direction (inclusive comparison).

.. code-block:: python

    >>> state = PairState("ETH/USDC")
    >>> _ = state.record(100.0, 0.0)
    >>> _ = state.record(103.0, 15.0)
    >>> alert = evaluate_alert(state, threshold_percent=2.0, timestamp=15.0)
    >>> alert.message
    'UP 3.00% - ETH/USDC: $103.000000'
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from .PairState import PairState

Direction = Literal["up", "down"]

DEFAULT_THRESHOLD_PERCENT = 2.0


def format_price(price: float) -> str:
    """Format a price with precision adapted to its magnitude.

    >= 1000 -> 2 decimals, >= 1 -> 6 decimals, >= 0.001 -> 8 decimals,
    smaller -> scientific notation with 3 fractional digits.

    :param price: Price to format.
    :returns: Formatted price string.
    """
    if price >= 1000:
        return f"{price:.2f}"
    if price >= 1:
        return f"{price:.6f}"
    if price >= 0.001:
        return f"{price:.8f}"
    return f"{price:.3e}"


def format_change(percent: float) -> str:
    """Format a percent change with a direction marker, e.g. "▲ 1.25%".

    :param percent: Percent change.
    :returns: Formatted change string.
    """
    if percent > 0:
        symbol = "▲"
    elif percent < 0:
        symbol = "▼"
    else:
        symbol = "▬"
    return f"{symbol} {percent:.2f}%"


@dataclass(frozen=True)
class PriceAlert:
    """A threshold-crossing price move.

    :ivar pair: Pair name.
    :ivar direction: "up" or "down".
    :ivar percent_change: Signed percent change versus the previous price.
    :ivar price: Current price.
    :ivar timestamp: Observation time in epoch seconds.
    """

    pair: str
    direction: Direction
    percent_change: float
    price: float
    timestamp: float

    @property
    def message(self) -> str:
        """Alert log line, e.g. "DOWN 2.50% - ETH/USDC: $1950.00"."""
        return (
            f"{self.direction.upper()} {abs(self.percent_change):.2f}% - "
            f"{self.pair}: ${format_price(self.price)}"
        )

    def __str__(self) -> str:
        return self.message


def percent_change(previous: float, current: float) -> float:
    """Percent change from previous to current.

    :param previous: Baseline price (must be nonzero).
    :param current: New price.
    :returns: Signed percent change.
    """
    return (current - previous) * 100 / previous


def evaluate_alert(
    state: PairState,
    threshold_percent: float = DEFAULT_THRESHOLD_PERCENT,
    timestamp: float = 0.0,
) -> PriceAlert | None:
    """Decide whether the latest observation of a pair is alert-worthy.

    Does not modify ``state``; the caller appends the alert to the log.

    :param state: Pair state after the latest update.
    :param threshold_percent: Minimum absolute move in percent.
    :param timestamp: Observation time for the alert.
    :returns: PriceAlert if the move reaches the threshold, else None.
    """
    if state.previous_price == 0:
        return None

    change = percent_change(state.previous_price, state.current_price)
    if abs(change) < threshold_percent:
        return None

    return PriceAlert(
        pair=state.name,
        direction="up" if change > 0 else "down",
        percent_change=change,
        price=state.current_price,
        timestamp=timestamp,
    )
