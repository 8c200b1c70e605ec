"""Unit tests for ResilientFetcher."""

from unittest.mock import AsyncMock

import pytest

from dexmonitor.src.PriceOracle import ComputationError
from dexmonitor.src.ResilientFetcher import FetchExhausted, ResilientFetcher
from dexmonitor.src.sources.base import PoolNotFound, TransportError
from dexmonitor.src.TokenPair import USDC, WETH


def _oracle(*outcomes) -> AsyncMock:
    oracle = AsyncMock()
    oracle.get_price.side_effect = list(outcomes)
    return oracle


class TestResilientFetcherInit:
    """Test ResilientFetcher initialization."""

    def test_defaults(self) -> None:
        """Defaults should be 3 attempts with a 2 second delay."""
        fetcher = ResilientFetcher(AsyncMock())
        assert fetcher.max_retries == 3
        assert fetcher.retry_delay == 2.0

    def test_invalid_max_retries(self) -> None:
        """Fewer than one attempt should raise ValueError."""
        with pytest.raises(ValueError, match="max_retries"):
            ResilientFetcher(AsyncMock(), max_retries=0)

    def test_invalid_retry_delay(self) -> None:
        """Negative delay should raise ValueError."""
        with pytest.raises(ValueError, match="retry_delay"):
            ResilientFetcher(AsyncMock(), retry_delay=-1.0)


class TestResilientFetcherFetch:
    """Test retry behaviour."""

    @pytest.mark.asyncio
    async def test_first_attempt_succeeds(self) -> None:
        """A successful first attempt should not sleep."""
        sleep = AsyncMock()
        oracle = _oracle(2000.0)
        fetcher = ResilientFetcher(oracle, sleep=sleep)

        assert await fetcher.fetch(WETH, USDC, 18, 6) == 2000.0
        oracle.get_price.assert_awaited_once_with(WETH, USDC, 18, 6)
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_recovers_after_failure(self) -> None:
        """A transient failure followed by success should return the price."""
        sleep = AsyncMock()
        oracle = _oracle(TransportError("timeout"), 2001.0)
        fetcher = ResilientFetcher(oracle, sleep=sleep)

        assert await fetcher.fetch(WETH, USDC, 18, 6) == 2001.0
        assert oracle.get_price.await_count == 2
        sleep.assert_awaited_once_with(2.0)

    @pytest.mark.asyncio
    async def test_exhausted(self) -> None:
        """Three failures should raise FetchExhausted with the last error."""
        sleep = AsyncMock()
        last = TransportError("third")
        oracle = _oracle(TransportError("first"), TransportError("second"), last)
        fetcher = ResilientFetcher(oracle, sleep=sleep)

        with pytest.raises(FetchExhausted) as exc_info:
            await fetcher.fetch(WETH, USDC, 18, 6)

        assert exc_info.value.attempts == 3
        assert exc_info.value.last_error is last
        assert exc_info.value.__cause__ is last
        assert "Failed after 3 attempts: third" in str(exc_info.value)
        assert oracle.get_price.await_count == 3
        assert sleep.await_count == 2
        sleep.assert_awaited_with(2.0)

    @pytest.mark.asyncio
    async def test_unexpected_errors_are_retried(self) -> None:
        """Errors outside the monitor hierarchy are retried too."""
        oracle = _oracle(RuntimeError("decode"), 5.0)
        fetcher = ResilientFetcher(oracle, sleep=AsyncMock())
        assert await fetcher.fetch(WETH, USDC, 18, 6) == 5.0

    @pytest.mark.asyncio
    async def test_pool_not_found_not_retried(self) -> None:
        """PoolNotFound should propagate after a single attempt."""
        sleep = AsyncMock()
        oracle = _oracle(PoolNotFound(WETH, USDC))
        fetcher = ResilientFetcher(oracle, sleep=sleep)

        with pytest.raises(PoolNotFound):
            await fetcher.fetch(WETH, USDC, 18, 6)
        assert oracle.get_price.await_count == 1
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_computation_error_not_retried(self) -> None:
        """ComputationError should propagate after a single attempt."""
        oracle = _oracle(ComputationError("zero base reserve"))
        fetcher = ResilientFetcher(oracle, sleep=AsyncMock())

        with pytest.raises(ComputationError):
            await fetcher.fetch(WETH, USDC, 18, 6)
        assert oracle.get_price.await_count == 1

    @pytest.mark.asyncio
    async def test_custom_attempts_and_delay(self) -> None:
        """Custom limits should be honoured."""
        sleep = AsyncMock()
        oracle = _oracle(*[TransportError("x")] * 5)
        fetcher = ResilientFetcher(oracle, max_retries=5, retry_delay=0.5, sleep=sleep)

        with pytest.raises(FetchExhausted):
            await fetcher.fetch(WETH, USDC, 18, 6)
        assert oracle.get_price.await_count == 5
        assert sleep.await_count == 4
        sleep.assert_awaited_with(0.5)
