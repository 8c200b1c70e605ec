"""PriceOracle: Spot price derivation from AMM pool reserves.

Algorithm:
    1. Resolve the pool for (base, quote) via the reserve source
    2. Read the pool's internal token order and raw reserves
    3. Map reserves to (base, quote) regardless of pool storage order
    4. Scale each raw reserve by 10**decimals
    5. Price = scaled quote reserve / scaled base reserve

Pools sort their tokens by address, so the pool's token0 is not necessarily
the caller's base token. Skipping step 3 silently inverts the price.

.. code-block:: python

    >>> snapshot = ReserveSnapshot(
    ...     pool="0xpool",
    ...     base_reserve=1000 * 10**18,
    ...     quote_reserve=2_000_000 * 10**6,
    ...     base_decimals=18,
    ...     quote_decimals=6,
    ... )
    >>> compute_price(snapshot)
    2000.0
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .sources.base import MonitorError

if TYPE_CHECKING:
    from .sources import ReserveSource

logger = logging.getLogger(__name__)


class ComputationError(MonitorError):
    """Raised when reserves cannot produce a finite price (e.g., zero base reserve)."""

    pass


@dataclass(frozen=True)
class ReserveSnapshot:
    """Pool reserves mapped to the requested (base, quote) orientation.

    :ivar pool: Pool address the reserves were read from.
    :ivar base_reserve: Raw base token reserve (smallest units).
    :ivar quote_reserve: Raw quote token reserve (smallest units).
    :ivar base_decimals: Decimal precision of the base token.
    :ivar quote_decimals: Decimal precision of the quote token.
    """

    pool: str
    base_reserve: int
    quote_reserve: int
    base_decimals: int
    quote_decimals: int


def order_reserves(
    pool_tokens: tuple[str, str],
    reserves: tuple[int, int],
    base_token: str,
) -> tuple[int, int]:
    """Map pool-ordered reserves onto (base, quote).

    :param pool_tokens: Pool's (token_x, token_y) in storage order.
    :param reserves: Pool's (reserve_x, reserve_y) in storage order.
    :param base_token: Requested base token address.
    :returns: Tuple of (base_reserve, quote_reserve).
    """
    if pool_tokens[0].lower() == base_token.lower():
        return reserves[0], reserves[1]
    return reserves[1], reserves[0]


def scale_reserve(raw: int, decimals: int) -> float:
    """Convert a raw integer reserve to a human-readable amount.

    :param raw: Reserve in smallest token units.
    :param decimals: Token decimal precision.
    :returns: Reserve as a float in whole-token units.
    """
    return raw / (10 ** decimals)


def compute_price(snapshot: ReserveSnapshot) -> float:
    """Compute quote units per one base unit.

    :param snapshot: Reserves in (base, quote) orientation.
    :returns: Spot price.
    :raises ComputationError: If the base reserve is zero.
    """
    base_amount = scale_reserve(snapshot.base_reserve, snapshot.base_decimals)
    quote_amount = scale_reserve(snapshot.quote_reserve, snapshot.quote_decimals)
    if base_amount == 0:
        raise ComputationError(f"Pool {snapshot.pool} has zero base reserve")
    return quote_amount / base_amount


class PriceOracle:
    """Derives a directional spot price from a reserve source.

    :ivar source: Reserve source used for pool queries.
    """

    def __init__(self, source: ReserveSource) -> None:
        """Initialize the oracle.

        :param source: Reserve source to read pools from.
        """
        self.source = source

    async def get_snapshot(
        self,
        base_token: str,
        quote_token: str,
        base_decimals: int,
        quote_decimals: int,
    ) -> ReserveSnapshot:
        """Read the pool reserves for a pair in (base, quote) orientation.

        :param base_token: Base token address.
        :param quote_token: Quote token address.
        :param base_decimals: Base token decimal precision.
        :param quote_decimals: Quote token decimal precision.
        :returns: ReserveSnapshot for the pair's pool.
        :raises PoolNotFound: If no pool exists for the pair.
        :raises TransportError: On reserve source failure.
        """
        pool = await self.source.resolve_pool(base_token, quote_token)
        pool_tokens = await self.source.get_pool_token_order(pool)
        reserves = await self.source.get_reserves(pool)
        base_reserve, quote_reserve = order_reserves(pool_tokens, reserves, base_token)
        logger.debug(
            f"Pool {pool}: tokens={pool_tokens}, reserves={reserves}, "
            f"base={base_reserve}, quote={quote_reserve}"
        )
        return ReserveSnapshot(
            pool=pool,
            base_reserve=base_reserve,
            quote_reserve=quote_reserve,
            base_decimals=base_decimals,
            quote_decimals=quote_decimals,
        )

    async def get_price(
        self,
        base_token: str,
        quote_token: str,
        base_decimals: int,
        quote_decimals: int,
    ) -> float:
        """Get the spot price of base_token in quote_token units.

        :param base_token: Base token address.
        :param quote_token: Quote token address.
        :param base_decimals: Base token decimal precision.
        :param quote_decimals: Quote token decimal precision.
        :returns: Price as quote units per one base unit.
        :raises PoolNotFound: If no pool exists for the pair.
        :raises ComputationError: If the base reserve is zero.
        :raises TransportError: On reserve source failure.
        """
        snapshot = await self.get_snapshot(
            base_token, quote_token, base_decimals, quote_decimals
        )
        return compute_price(snapshot)
