"""Statistics: Derived per-pair statistics over the retained price history.

Volatility here is a range-based dispersion measure, not a standard deviation:

    volatility = (max - min) / mean * 100

.. code-block:: python

    >>> stats = compute_statistics([100.0, 105.0, 95.0, 110.0], current=110.0, alert_count=0)
    >>> stats.average
    102.5
    >>> round(stats.volatility, 2)
    14.63
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Iterable


@dataclass(frozen=True)
class PairStatistics:
    """Statistics snapshot for one pair.

    :ivar current: Most recent price.
    :ivar min: Lowest retained price.
    :ivar max: Highest retained price.
    :ivar average: Arithmetic mean of retained prices.
    :ivar volatility: (max - min) / average as a percentage.
    :ivar data_points: Number of retained samples.
    :ivar alerts: Cumulative number of alerts emitted for the pair.
    """

    current: float
    min: float
    max: float
    average: float
    volatility: float
    data_points: int
    alerts: int

    def to_dict(self) -> dict[str, float | int]:
        """Return the statistics as a plain dict."""
        return asdict(self)


def compute_statistics(
    prices: Iterable[float],
    current: float,
    alert_count: int,
) -> PairStatistics | None:
    """Compute statistics over a price series.

    :param prices: Retained prices in observation order.
    :param current: Current price of the pair.
    :param alert_count: Cumulative alert count of the pair.
    :returns: PairStatistics, or None if there are no prices.
    """
    values = list(prices)
    if not values:
        return None

    low = min(values)
    high = max(values)
    average = sum(values) / len(values)
    volatility = (high - low) / average * 100 if average else 0.0

    return PairStatistics(
        current=current,
        min=low,
        max=high,
        average=average,
        volatility=volatility,
        data_points=len(values),
        alerts=alert_count,
    )
