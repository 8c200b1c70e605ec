#!/usr/bin/env python3
"""DEX Price Monitor.

Samples Uniswap V2 style pool reserves on a fixed interval, derives spot
prices, raises alerts on large moves and reports rolling statistics.

Configure via CLI args or env vars (a .env file is loaded if present).
"""

import argparse
import asyncio
import functools
import logging
import os
import sys

from dotenv import load_dotenv

from .src.MonitoringEngine import CycleReport, MonitoringEngine
from .src.PriceAlert import PriceAlert, format_change, format_price
from .src.PriceOracle import PriceOracle
from .src.ResilientFetcher import ResilientFetcher
from .src.Statistics import PairStatistics
from .src.TokenPair import DEFAULT_PAIRS, TokenPair, parse_pairs
from .src.sources import ReserveSource, get_available_sources, get_source

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)

RECENT_ALERTS_PER_PAIR = 3


def log_cycle_report(engine: MonitoringEngine, report: CycleReport) -> None:
    """Log the live status of every pair after a cycle.

    :param engine: Engine whose pair states are shown.
    :param report: Report of the cycle that just completed.
    """
    logger.info("-" * 60)
    logger.info(f"Live status (cycle {engine.cycle_count})")
    for name, state in engine.states.items():
        if state.current_price == 0:
            if state.last_error:
                logger.info(f"  {name:<12} no price yet  [error: {state.last_error}]")
            continue
        marker = f"  [error: {state.last_error}]" if state.last_error else ""
        window = state.window_change
        window_str = f"  window {window:+.2f}%" if window is not None else ""
        logger.info(
            f"  {name:<12} ${format_price(state.current_price):<14} "
            f"{format_change(state.price_change_percent)}{window_str}{marker}"
        )

    logger.info("Recent alerts:")
    shown = 0
    for state in engine.states.values():
        for message in list(state.alerts)[-RECENT_ALERTS_PER_PAIR:]:
            logger.info(f"  {message}")
            shown += 1
    if not shown:
        logger.info("  No alerts yet")


def log_alert(alert: PriceAlert) -> None:
    """Log a price alert as soon as it is emitted.

    :param alert: Emitted alert.
    """
    logger.warning(f"Price alert: {alert}")


def log_final_statistics(statistics: dict[str, PairStatistics]) -> None:
    """Log the statistics block printed on shutdown.

    :param statistics: Pair name to statistics.
    """
    logger.info("=" * 60)
    logger.info("Final statistics")
    logger.info("=" * 60)
    if not statistics:
        logger.info("No prices collected")
        return
    for name, stats in statistics.items():
        logger.info(f"{name}:")
        logger.info(f"  Current:     ${format_price(stats.current)}")
        logger.info(f"  Min:         ${format_price(stats.min)}")
        logger.info(f"  Max:         ${format_price(stats.max)}")
        logger.info(f"  Average:     ${format_price(stats.average)}")
        logger.info(f"  Volatility:  {stats.volatility:.2f}%")
        logger.info(f"  Data points: {stats.data_points}")
        logger.info(f"  Alerts:      {stats.alerts}")


async def run_monitor(engine: MonitoringEngine, source: ReserveSource) -> None:
    """Run the engine until cancelled, then report and release the source.

    :param engine: Configured engine.
    :param source: Reserve source to close on exit.
    """
    try:
        await engine.start()
        await asyncio.Event().wait()
    finally:
        engine.stop()
        await engine.wait_stopped()
        log_final_statistics(engine.get_statistics())
        await source.close()


def main() -> None:
    """Main entry point for the DEX Price Monitor CLI."""
    load_dotenv()
    available_sources = get_available_sources()

    parser = argparse.ArgumentParser(
        description="DEX Price Monitor: Uniswap V2 reserve-based price alerts",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Available reserve sources:
  {', '.join(available_sources)}

Examples:
  # Default pairs (ETH/USDC, USDC/USDT) on Uniswap V2
  python -m dexmonitor.main --rpc-url https://eth-mainnet.example/v2/KEY

  # Custom pair, 5% threshold, 30s interval
  python -m dexmonitor.main --rpc-url $RPC_URL --threshold 5 --interval-ms 30000 \\
      --pairs "ETH/USDT:0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2:0xdAC17F958D2ee523a2206206994597C13D831ec7:18:6"

Environment variables (CLI args take precedence):
  RPC_URL, SOURCE, PAIRS, PRICE_CHECK_INTERVAL, PRICE_CHANGE_THRESHOLD, MAX_RETRIES
""",
    )

    parser.add_argument(
        "--rpc-url",
        dest="rpc_url",
        type=str,
        help="Ethereum JSON-RPC endpoint",
        default=os.environ.get("RPC_URL"),
    )

    parser.add_argument(
        "--source",
        type=str,
        help=f"Reserve source. Available: {', '.join(available_sources)}",
        default=os.environ.get("SOURCE") or "uniswap-v2",
    )

    parser.add_argument(
        "--pairs",
        type=str,
        help="Semicolon-separated pairs as NAME:TOKEN_A:TOKEN_B:DECIMALS_A:DECIMALS_B",
        default=os.environ.get("PAIRS"),
    )

    parser.add_argument(
        "--interval-ms",
        dest="interval_ms",
        type=int,
        help="Milliseconds between price checks (default: 15000)",
        default=int(os.environ.get("PRICE_CHECK_INTERVAL") or "15000"),
    )

    parser.add_argument(
        "--threshold",
        type=float,
        help="Percent move that triggers an alert (default: 2.0)",
        default=float(os.environ.get("PRICE_CHANGE_THRESHOLD") or "2.0"),
    )

    parser.add_argument(
        "--max-retries",
        dest="max_retries",
        type=int,
        help="Fetch attempts per pair and cycle (default: 3)",
        default=int(os.environ.get("MAX_RETRIES") or "3"),
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )

    args = parser.parse_args()

    # Configure logging level
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    # Validate arguments
    if not args.rpc_url:
        parser.error("RPC URL is required (--rpc-url or RPC_URL)")

    if args.interval_ms < 1:
        parser.error("--interval-ms must be at least 1")

    if args.threshold < 0:
        parser.error("--threshold must not be negative")

    if args.max_retries < 1:
        parser.error("--max-retries must be at least 1")

    if args.source not in available_sources:
        parser.error(
            f"Unknown source: {args.source}. Available: {', '.join(available_sources)}"
        )

    pairs: list[TokenPair] = DEFAULT_PAIRS
    if args.pairs:
        try:
            pairs = parse_pairs(args.pairs)
        except ValueError as e:
            parser.error(str(e))
        if not pairs:
            parser.error("At least one token pair must be specified")

    # Log configuration
    logger.info("=" * 60)
    logger.info("DEX Price Monitor")
    logger.info("=" * 60)
    logger.info(f"Source:            {args.source}")
    logger.info(f"Trading Pairs:     {', '.join(p.name for p in pairs)}")
    logger.info(f"Check Interval:    {args.interval_ms}ms")
    logger.info(f"Alert Threshold:   {args.threshold}%")
    logger.info(f"Max Retries:       {args.max_retries}")
    logger.info("=" * 60)

    try:
        source = get_source(args.source, rpc_url=args.rpc_url)
        fetcher = ResilientFetcher(PriceOracle(source), max_retries=args.max_retries)
        engine = MonitoringEngine(
            pairs,
            fetcher,
            check_interval_ms=args.interval_ms,
            alert_threshold_percent=args.threshold,
        )
        engine.add_alert_listener(log_alert)
        engine.add_cycle_listener(functools.partial(log_cycle_report, engine))
        asyncio.run(run_monitor(engine, source))
    except KeyboardInterrupt:
        logger.info("Shutting down...")
    except Exception as e:
        logger.error(f"Fatal error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
