"""Unit tests for PairState."""

import pytest

from dexmonitor.src.PairState import (
    ALERT_LOG_SIZE,
    HISTORY_SIZE,
    WINDOW_MIN_SAMPLES,
    PairState,
    PriceSample,
)


class TestPairStateInit:
    """Test PairState initialization."""

    def test_initial_state(self) -> None:
        """A new state should have no prices, samples or alerts."""
        state = PairState("ETH/USDC")
        assert state.name == "ETH/USDC"
        assert state.current_price == 0.0
        assert state.previous_price == 0.0
        assert len(state.history) == 0
        assert len(state.alerts) == 0
        assert state.alert_count == 0
        assert state.last_error is None
        assert state.statistics() is None

    def test_default_capacities(self) -> None:
        """History keeps 100 samples and the alert log 10 messages."""
        state = PairState("ETH/USDC")
        assert HISTORY_SIZE == 100
        assert ALERT_LOG_SIZE == 10
        assert state.history.maxlen == HISTORY_SIZE
        assert state.alerts.maxlen == ALERT_LOG_SIZE


class TestPairStateRecord:
    """Test recording price observations."""

    def test_first_record(self) -> None:
        """First observation should leave previous at the sentinel."""
        state = PairState("ETH/USDC")
        sample = state.record(2000.0, 1.0)

        assert sample == PriceSample(price=2000.0, timestamp=1.0)
        assert state.current_price == 2000.0
        assert state.previous_price == 0.0
        assert state.price_change_percent == 0.0

    def test_previous_price_shift(self) -> None:
        """Each observation should shift current into previous."""
        state = PairState("ETH/USDC")
        state.record(2000.0, 1.0)
        state.record(2010.0, 2.0)
        state.record(1990.0, 3.0)

        assert state.previous_price == 2010.0
        assert state.current_price == 1990.0

    def test_price_change_percent(self) -> None:
        """Change should be relative to the previous price."""
        state = PairState("ETH/USDC")
        state.record(100.0, 1.0)
        state.record(103.0, 2.0)
        assert state.price_change_percent == pytest.approx(3.0)

    def test_history_is_bounded(self) -> None:
        """Only the most recent 100 samples should be retained."""
        state = PairState("ETH/USDC")
        for i in range(1, 106):
            state.record(float(i), float(i))

        assert len(state.history) == 100
        assert state.history[0].price == 6.0
        assert state.history[-1].price == 105.0
        assert state.prices() == [float(i) for i in range(6, 106)]

    def test_same_price_recorded_twice(self) -> None:
        """Repeated identical prices are separate observations."""
        state = PairState("ETH/USDC")
        state.record(2000.0, 1.0)
        state.record(2000.0, 2.0)
        assert len(state.history) == 2
        assert state.price_change_percent == 0.0

    def test_record_clears_error(self) -> None:
        """A successful observation should reset failure tracking."""
        state = PairState("ETH/USDC")
        state.record_failure("timeout")
        state.record_failure("timeout")
        state.record(2000.0, 1.0)

        assert state.last_error is None
        assert state.consecutive_failures == 0
        assert state.total_failures == 2
        assert state.total_successes == 1


class TestWindowChange:
    """Test the windowed change attached to samples."""

    def test_not_computed_with_few_samples(self) -> None:
        """No window change until history exceeds the minimum."""
        state = PairState("ETH/USDC")
        for i in range(WINDOW_MIN_SAMPLES):
            sample = state.record(100.0 + i, float(i))
            assert sample.window_change is None
        assert state.window_change is None

    def test_computed_after_minimum(self) -> None:
        """The eleventh sample should carry the change versus the oldest."""
        state = PairState("ETH/USDC")
        for i in range(WINDOW_MIN_SAMPLES):
            state.record(100.0 + i, float(i))
        sample = state.record(110.0, 10.0)

        assert sample.window_change == pytest.approx(10.0)
        assert state.history[-1].window_change == pytest.approx(10.0)
        assert state.window_change == pytest.approx(10.0)

    def test_skipped_when_oldest_is_zero(self) -> None:
        """A zero oldest price should leave the window change unset."""
        state = PairState("X/Y")
        state.record(0.0, 0.0)
        for i in range(1, WINDOW_MIN_SAMPLES + 1):
            sample = state.record(1.0, float(i))
        assert sample.window_change is None


class TestPairStateFailuresAndAlerts:
    """Test failure recording and the alert log."""

    def test_record_failure_keeps_prices(self) -> None:
        """Failures should not touch prices or history."""
        state = PairState("ETH/USDC")
        state.record(2000.0, 1.0)
        state.record_failure("Failed after 3 attempts: boom")

        assert state.current_price == 2000.0
        assert len(state.history) == 1
        assert state.last_error == "Failed after 3 attempts: boom"
        assert state.consecutive_failures == 1

    def test_alert_log_is_bounded(self) -> None:
        """Only the most recent 10 alerts should be kept."""
        state = PairState("ETH/USDC")
        for i in range(15):
            state.add_alert(f"alert {i}")

        assert len(state.alerts) == 10
        assert state.alerts[0] == "alert 5"
        assert state.alerts[-1] == "alert 14"
        assert state.alert_count == 15

    def test_statistics_use_cumulative_alert_count(self) -> None:
        """Statistics should report every alert, not just retained ones."""
        state = PairState("ETH/USDC")
        state.record(100.0, 1.0)
        for i in range(12):
            state.add_alert(f"alert {i}")

        stats = state.statistics()
        assert stats.alerts == 12
        assert stats.data_points == 1
