"""Unit tests for Statistics."""

import pytest

from dexmonitor.src.Statistics import compute_statistics


class TestComputeStatistics:
    """Test statistics over a price series."""

    def test_basic_statistics(self) -> None:
        """Min, max, mean and range volatility should match the series."""
        stats = compute_statistics([100.0, 105.0, 95.0, 110.0], current=110.0, alert_count=2)

        assert stats is not None
        assert stats.current == 110.0
        assert stats.min == 95.0
        assert stats.max == 110.0
        assert stats.average == 102.5
        assert stats.volatility == pytest.approx(14.634, abs=1e-3)
        assert stats.data_points == 4
        assert stats.alerts == 2

    def test_empty_series(self) -> None:
        """No prices should give no statistics."""
        assert compute_statistics([], current=0.0, alert_count=0) is None

    def test_single_price(self) -> None:
        """A single price has zero volatility."""
        stats = compute_statistics([2000.0], current=2000.0, alert_count=0)
        assert stats.min == stats.max == stats.average == 2000.0
        assert stats.volatility == 0.0

    def test_zero_mean(self) -> None:
        """A zero mean should not divide by zero."""
        stats = compute_statistics([0.0, 0.0], current=0.0, alert_count=0)
        assert stats.volatility == 0.0

    def test_accepts_iterables(self) -> None:
        """Any iterable of prices should be accepted."""
        stats = compute_statistics(iter([1.0, 3.0]), current=3.0, alert_count=0)
        assert stats.average == 2.0
        assert stats.data_points == 2

    def test_to_dict(self) -> None:
        """to_dict should expose every field."""
        stats = compute_statistics([1.0, 3.0], current=3.0, alert_count=1)
        assert stats.to_dict() == {
            "current": 3.0,
            "min": 1.0,
            "max": 3.0,
            "average": 2.0,
            "volatility": 100.0,
            "data_points": 2,
            "alerts": 1,
        }
