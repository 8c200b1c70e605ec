"""Uniswap V2 style reserve sources.

Reads pool reserves straight from the chain through the factory and pair
contracts. Any fork exposing the V2 factory/pair interface can be added by
subclassing with a different factory address.

Factory: getPair(tokenA, tokenB) -> pair
Pair:    token0(), token1(), getReserves() -> (reserve0, reserve1, blockTimestampLast)
"""

import asyncio
import logging
from typing import Any, ClassVar

from web3 import AsyncWeb3

from .base import (
    ZERO_ADDRESS,
    MonitorError,
    PoolNotFound,
    ReserveSource,
    TransportError,
    register_source,
)

logger = logging.getLogger(__name__)

PAIR_ABI = [
    {
        "name": "getReserves",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [
            {"name": "reserve0", "type": "uint112"},
            {"name": "reserve1", "type": "uint112"},
            {"name": "blockTimestampLast", "type": "uint32"},
        ],
    },
    {
        "name": "token0",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "address"}],
    },
    {
        "name": "token1",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "address"}],
    },
]

FACTORY_ABI = [
    {
        "name": "getPair",
        "type": "function",
        "stateMutability": "view",
        "inputs": [
            {"name": "tokenA", "type": "address"},
            {"name": "tokenB", "type": "address"},
        ],
        "outputs": [{"name": "pair", "type": "address"}],
    },
]


@register_source
class UniswapV2ReserveSource(ReserveSource):
    """Reserve source backed by the Uniswap V2 factory on Ethereum mainnet.

    :cvar FACTORY_ADDRESS: Factory contract used to resolve pair addresses.
    :ivar w3: AsyncWeb3 instance used for contract calls.
    """

    name = "uniswap-v2"
    FACTORY_ADDRESS: ClassVar[str] = "0x5C69bEe701ef814a2B6a3EDD4B1652CB9cc5aA6f"

    def __init__(self, rpc_url: str | None = None, w3: AsyncWeb3 | None = None):
        """Initialize the source.

        :param rpc_url: HTTP RPC endpoint (Alchemy, Infura, local node).
        :param w3: Optional pre-built AsyncWeb3 instance. Created from rpc_url if not provided.
        :raises ValueError: If neither rpc_url nor w3 is given.
        """
        super().__init__(rpc_url=rpc_url)
        if w3 is None:
            if not rpc_url:
                raise ValueError(f"{self.name} source requires an RPC URL")
            w3 = AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(rpc_url))
        self.w3 = w3
        self.factory = self.w3.eth.contract(
            address=AsyncWeb3.to_checksum_address(self.FACTORY_ADDRESS),
            abi=FACTORY_ABI,
        )

    async def resolve_pool(self, token_a: str, token_b: str) -> str:
        """Resolve the pair address via the factory.

        :param token_a: First token address.
        :param token_b: Second token address.
        :returns: Pair contract address.
        :raises PoolNotFound: If the factory returns the zero address.
        :raises TransportError: On RPC failure.
        """
        pair_address = await self._call(
            self.factory.functions.getPair(
                AsyncWeb3.to_checksum_address(token_a),
                AsyncWeb3.to_checksum_address(token_b),
            ),
            f"getPair({token_a}, {token_b})",
        )
        if pair_address == ZERO_ADDRESS:
            raise PoolNotFound(token_a, token_b)
        return pair_address

    async def get_pool_token_order(self, pool: str) -> tuple[str, str]:
        """Read token0 and token1 from the pair contract.

        :param pool: Pair contract address.
        :returns: Tuple of (token0, token1).
        :raises TransportError: On RPC failure.
        """
        pair = self._pair_contract(pool)
        token0, token1 = await asyncio.gather(
            self._call(pair.functions.token0(), f"{pool}.token0()"),
            self._call(pair.functions.token1(), f"{pool}.token1()"),
        )
        return token0, token1

    async def get_reserves(self, pool: str) -> tuple[int, int]:
        """Read reserves from the pair contract.

        :param pool: Pair contract address.
        :returns: Tuple of (reserve0, reserve1).
        :raises TransportError: On RPC failure.
        """
        pair = self._pair_contract(pool)
        reserves = await self._call(pair.functions.getReserves(), f"{pool}.getReserves()")
        return int(reserves[0]), int(reserves[1])

    async def close(self) -> None:
        """Disconnect the underlying HTTP provider."""
        await self.w3.provider.disconnect()

    def _pair_contract(self, pool: str) -> Any:
        return self.w3.eth.contract(
            address=AsyncWeb3.to_checksum_address(pool),
            abi=PAIR_ABI,
        )

    async def _call(self, fn: Any, label: str) -> Any:
        """Execute a contract view call, wrapping transport failures.

        :param fn: Bound contract function.
        :param label: Human-readable call description for errors.
        :returns: Decoded call result.
        :raises TransportError: On any non-monitor failure.
        """
        try:
            return await fn.call()
        except MonitorError:
            raise
        except Exception as e:
            logger.debug(f"[{self.name}] {label} failed: {e!r}")
            raise TransportError(f"[{self.name}] {label} failed: {e}") from e


@register_source
class SushiSwapReserveSource(UniswapV2ReserveSource):
    """Reserve source backed by the SushiSwap V2 factory on Ethereum mainnet."""

    name = "sushiswap"
    FACTORY_ADDRESS = "0xC0AEe478e3658e2610c5F7A4A2E1777cE9e4f2Ac"
