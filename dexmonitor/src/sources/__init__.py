"""
Reserve sources for AMM liquidity pools.

This module provides a unified interface for reading pool reserves from
Uniswap V2 style exchanges.

Usage:
    from dexmonitor.src.sources import get_source, get_available_sources

    # Get list of available sources
    available = get_available_sources()
    # ['sushiswap', 'uniswap-v2']

    # Create a source instance
    source = get_source("uniswap-v2", rpc_url="https://eth-mainnet.example/v2/KEY")
    pool = await source.resolve_pool(weth, usdc)
    reserves = await source.get_reserves(pool)
"""

# Import base classes and utilities
from .base import (
    SOURCE_REGISTRY,
    ZERO_ADDRESS,
    MonitorError,
    PoolNotFound,
    ReserveSource,
    TransportError,
    get_available_sources,
    get_source,
    register_source,
)

# Import all source implementations to trigger registration
from .uniswap_v2 import SushiSwapReserveSource, UniswapV2ReserveSource

__all__ = [
    # Base classes
    "ReserveSource",
    "MonitorError",
    "PoolNotFound",
    "TransportError",
    "ZERO_ADDRESS",
    # Registry functions
    "register_source",
    "get_source",
    "get_available_sources",
    "SOURCE_REGISTRY",
    # Source implementations
    "SushiSwapReserveSource",
    "UniswapV2ReserveSource",
]
