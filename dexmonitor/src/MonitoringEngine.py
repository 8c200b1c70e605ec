"""MonitoringEngine: Periodic price sampling, alerting and statistics.

Architecture:
    - One PairState per configured pair, owned by the engine
    - start() runs an immediate cycle, then arms a recurring timer task
    - Each cycle fetches all pairs concurrently through ResilientFetcher
    - Results are applied to pair states in configured order
    - A failing pair is logged and recorded on its own state only
    - Alerts and completed cycles are pushed to registered listeners
    - Statistics are derived on demand from the retained history

Cycles are serialized: a tick that arrives while a cycle is still running is
skipped. stop() is cooperative and lets an in-flight cycle finish.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Iterable

from .PairState import PairState
from .PriceAlert import DEFAULT_THRESHOLD_PERCENT, PriceAlert, evaluate_alert
from .PriceOracle import ComputationError
from .ResilientFetcher import FetchExhausted
from .sources.base import PoolNotFound

if TYPE_CHECKING:
    from .ResilientFetcher import ResilientFetcher
    from .Statistics import PairStatistics
    from .TokenPair import TokenPair

logger = logging.getLogger(__name__)

DEFAULT_CHECK_INTERVAL_MS = 15000


@dataclass
class CycleReport:
    """Outcome of one fetch cycle.

    :ivar timestamp: Cycle start time in epoch seconds (shared by all samples).
    :ivar updated: Names of pairs whose state advanced.
    :ivar errors: Pair name to error message for pairs that failed.
    :ivar alerts: Alerts emitted during the cycle.
    :ivar statistics: Aggregated statistics after the cycle.
    """

    timestamp: float
    updated: list[str] = field(default_factory=list)
    errors: dict[str, str] = field(default_factory=dict)
    alerts: list[PriceAlert] = field(default_factory=list)
    statistics: dict[str, PairStatistics] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        """True if every pair was fetched successfully."""
        return not self.errors


class MonitoringEngine:
    """Orchestrates periodic price sampling across all configured pairs.

    :ivar pairs: Monitored pairs in configured order.
    :ivar fetcher: Fetcher used for every pair.
    :ivar check_interval_ms: Milliseconds between cycles.
    :ivar alert_threshold_percent: Minimum move that raises an alert.
    :ivar states: Pair name to PairState.
    :ivar cycle_count: Completed cycles since construction.
    """

    def __init__(
        self,
        pairs: Iterable[TokenPair],
        fetcher: ResilientFetcher,
        check_interval_ms: int = DEFAULT_CHECK_INTERVAL_MS,
        alert_threshold_percent: float = DEFAULT_THRESHOLD_PERCENT,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the engine and create a PairState for every pair.

        :param pairs: Pairs to monitor; names must be unique.
        :param fetcher: Fetcher used for every pair.
        :param check_interval_ms: Milliseconds between cycles (default: 15000).
        :param alert_threshold_percent: Alert threshold in percent (default: 2.0).
        :param clock: Returns the current epoch time in seconds.
        :raises ValueError: If parameters are invalid.
        """
        self.pairs: list[TokenPair] = list(pairs)
        if not self.pairs:
            raise ValueError("At least one token pair must be specified")

        seen: set[str] = set()
        duplicates: set[str] = set()
        for pair in self.pairs:
            if pair.name in seen:
                duplicates.add(pair.name)
            seen.add(pair.name)
        if duplicates:
            raise ValueError(f"Duplicate pair names: {sorted(duplicates)}")
        if check_interval_ms <= 0:
            raise ValueError("check_interval_ms must be positive")
        if alert_threshold_percent < 0:
            raise ValueError("alert_threshold_percent must not be negative")

        self.fetcher = fetcher
        self.check_interval_ms = check_interval_ms
        self.alert_threshold_percent = alert_threshold_percent
        self._clock = clock

        self.states: dict[str, PairState] = {p.name: PairState(p.name) for p in self.pairs}
        self.cycle_count = 0

        self._running = False
        self._cycle_idle = asyncio.Event()
        self._cycle_idle.set()
        self._generation = 0
        self._timer_task: asyncio.Task | None = None
        self._timer_sleeping = False

        self._alert_listeners: list[Callable[[PriceAlert], None]] = []
        self._cycle_listeners: list[Callable[[CycleReport], None]] = []

    @property
    def is_running(self) -> bool:
        """True between start() and stop()."""
        return self._running

    @property
    def interval_seconds(self) -> float:
        """Cycle interval in seconds."""
        return self.check_interval_ms / 1000

    def add_alert_listener(self, listener: Callable[[PriceAlert], None]) -> None:
        """Register a callable invoked with every emitted PriceAlert.

        :param listener: Alert callback.
        """
        self._alert_listeners.append(listener)

    def add_cycle_listener(self, listener: Callable[[CycleReport], None]) -> None:
        """Register a callable invoked with the CycleReport of every completed cycle.

        :param listener: Cycle callback.
        """
        self._cycle_listeners.append(listener)

    async def start(self) -> None:
        """Run one immediate cycle, then keep cycling every interval until stopped.

        A cycle left over from before the last stop() is awaited first, so a
        restart always samples fresh prices.
        """
        if self._running:
            logger.warning("Price monitor is already running")
            return

        self._running = True
        self._generation += 1
        generation = self._generation

        logger.info(
            f"Starting price monitor: {len(self.pairs)} pairs, "
            f"interval={self.interval_seconds}s, threshold={self.alert_threshold_percent}%"
        )

        await self._drain()
        if not self._is_current(generation):
            return

        await self.run_cycle()

        if self._is_current(generation):
            self._timer_task = asyncio.create_task(
                self._timer_loop(generation), name="price-monitor-timer"
            )

    def stop(self) -> None:
        """Stop scheduling cycles. A cycle already underway is allowed to finish."""
        if not self._running:
            return
        logger.info("Stopping price monitor")
        self._running = False
        task = self._timer_task
        if task is not None and not task.done() and self._timer_sleeping:
            task.cancel()

    async def wait_stopped(self) -> None:
        """Wait for the timer task and any in-flight cycle to finish after stop()."""
        await self._drain()

    async def run_cycle(self) -> CycleReport | None:
        """Fetch every pair once, update states and evaluate alerts.

        :returns: CycleReport, or None if another cycle was already in progress.
        """
        if not self._cycle_idle.is_set():
            logger.debug("Previous cycle still in progress, skipping tick")
            return None

        self._cycle_idle.clear()
        try:
            return await self._check_all_prices()
        finally:
            self._cycle_idle.set()

    def get_statistics(self) -> dict[str, PairStatistics]:
        """Get statistics for every pair with at least one sample.

        :returns: Pair name to PairStatistics, in configured order.
        """
        statistics: dict[str, PairStatistics] = {}
        for name, state in self.states.items():
            stats = state.statistics()
            if stats is not None:
                statistics[name] = stats
        return statistics

    def _is_current(self, generation: int) -> bool:
        return self._running and generation == self._generation

    async def _drain(self) -> None:
        """Wait until the previous timer generation has exited and no cycle is running."""
        task = self._timer_task
        if task is not None:
            await asyncio.wait({task})
            if self._timer_task is task:
                self._timer_task = None
        await self._cycle_idle.wait()

    async def _timer_loop(self, generation: int) -> None:
        """Recurring tick for one start() generation."""
        try:
            while self._is_current(generation):
                self._timer_sleeping = True
                try:
                    await asyncio.sleep(self.interval_seconds)
                finally:
                    self._timer_sleeping = False
                if not self._is_current(generation):
                    break
                await self.run_cycle()
        except asyncio.CancelledError:
            logger.debug("Price monitor timer cancelled")
            return

    async def _check_all_prices(self) -> CycleReport:
        timestamp = self._clock()
        report = CycleReport(timestamp=timestamp)

        results = await asyncio.gather(
            *(
                self.fetcher.fetch(p.token_a, p.token_b, p.decimals_a, p.decimals_b)
                for p in self.pairs
            ),
            return_exceptions=True,
        )

        for pair, result in zip(self.pairs, results, strict=True):
            state = self.states[pair.name]
            if isinstance(result, BaseException):
                self._record_failure(pair, state, result, report)
            else:
                self._record_price(pair, state, result, timestamp, report)

        report.statistics = self.get_statistics()
        self.cycle_count += 1
        logger.debug(
            f"Cycle {self.cycle_count} done: updated={report.updated}, "
            f"errors={list(report.errors)}"
        )
        self._notify(self._cycle_listeners, report)
        return report

    def _record_price(
        self,
        pair: TokenPair,
        state: PairState,
        price: float,
        timestamp: float,
        report: CycleReport,
    ) -> None:
        sample = state.record(price, timestamp)
        report.updated.append(pair.name)
        logger.debug(f"{pair}: price={price} window_change={sample.window_change}")

        alert = evaluate_alert(state, self.alert_threshold_percent, timestamp)
        if alert is None:
            return
        state.add_alert(alert.message)
        report.alerts.append(alert)
        logger.info(f"ALERT: {alert.message}")
        self._notify(self._alert_listeners, alert)

    def _record_failure(
        self,
        pair: TokenPair,
        state: PairState,
        error: BaseException,
        report: CycleReport,
    ) -> None:
        if isinstance(error, PoolNotFound):
            logger.error(f"{pair}: {error}. Check the token addresses of this pair.")
        elif isinstance(error, FetchExhausted):
            logger.warning(f"{pair}: {error}")
        elif isinstance(error, ComputationError):
            logger.warning(f"{pair}: skipping sample: {error}")
        else:
            logger.error(f"Error fetching price for {pair}: {error!r}")

        message = str(error) or type(error).__name__
        state.record_failure(message)
        report.errors[pair.name] = message

    def _notify(self, listeners: list[Callable], event: object) -> None:
        for listener in listeners:
            try:
                listener(event)
            except Exception as e:
                logger.warning(f"Listener {listener!r} raised {e!r}")
