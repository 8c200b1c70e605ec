"""
DEX Price Monitor - On-Chain Reserve Sampling Module

This module provides price monitoring for Uniswap V2 style liquidity pools:
- TokenPair: Monitored pair configuration
- PriceOracle: Spot price derivation from pool reserves
- ResilientFetcher: Bounded retries with fixed delay
- PairState: Per-pair price history and alert log
- PriceAlert: Threshold-crossing move detection
- Statistics: Min/max/mean/volatility over retained history
- MonitoringEngine: Main orchestrator for the sampling loop
- sources: Modular reserve source implementations
"""

from .MonitoringEngine import CycleReport, MonitoringEngine
from .PairState import PairState, PriceSample
from .PriceAlert import PriceAlert, evaluate_alert, format_change, format_price
from .PriceOracle import ComputationError, PriceOracle, ReserveSnapshot
from .ResilientFetcher import FetchExhausted, ResilientFetcher
from .Statistics import PairStatistics, compute_statistics
from .TokenPair import DEFAULT_PAIRS, TokenPair, parse_pairs

__all__ = [
    "ComputationError",
    "CycleReport",
    "DEFAULT_PAIRS",
    "FetchExhausted",
    "MonitoringEngine",
    "PairState",
    "PairStatistics",
    "PriceAlert",
    "PriceOracle",
    "PriceSample",
    "ReserveSnapshot",
    "ResilientFetcher",
    "TokenPair",
    "compute_statistics",
    "evaluate_alert",
    "format_change",
    "format_price",
    "parse_pairs",
]
