"""TokenPair: Configuration of a monitored token pair.

A pair is priced as quote-token units per one base-token unit. Token A is
the base and token B is the quote; the decimals convert raw on-chain amounts
into human-readable ones.

.. code-block:: python

    >>> pair = TokenPair.from_string(
    ...     "ETH/USDC:0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2:"
    ...     "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48:18:6"
    ... )
    >>> pair.name
    'ETH/USDC'
    >>> pair.decimals_a
    18
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class TokenPair:
    """An immutable monitored token pair.

    :ivar name: Unique pair identifier (e.g., "ETH/USDC").
    :ivar token_a: Base token address.
    :ivar token_b: Quote token address.
    :ivar decimals_a: Decimal precision of the base token.
    :ivar decimals_b: Decimal precision of the quote token.
    """

    name: str
    token_a: str
    token_b: str
    decimals_a: int
    decimals_b: int

    def __post_init__(self) -> None:
        """Validate the pair definition.

        :raises ValueError: If the name is empty or decimals are not non-negative integers.
        """
        if not self.name:
            raise ValueError("Pair name must not be empty")
        for label, decimals in (("decimals_a", self.decimals_a), ("decimals_b", self.decimals_b)):
            if isinstance(decimals, bool) or not isinstance(decimals, int) or decimals < 0:
                raise ValueError(
                    f"{self.name}: {label} must be a non-negative integer, got {decimals!r}"
                )

    def __str__(self) -> str:
        """Return the pair name."""
        return self.name

    @classmethod
    def from_string(cls, pair_str: str) -> TokenPair:
        """Parse a pair string in format "NAME:TOKEN_A:TOKEN_B:DECIMALS_A:DECIMALS_B".

        :param pair_str: Pair definition string.
        :returns: New TokenPair instance.
        :raises ValueError: If pair string format is invalid.
        """
        parts = [p.strip() for p in pair_str.split(":")]
        if len(parts) != 5:
            raise ValueError(
                f"Invalid pair format '{pair_str}'. "
                "Expected 'NAME:TOKEN_A:TOKEN_B:DECIMALS_A:DECIMALS_B'"
            )
        name, token_a, token_b, decimals_a, decimals_b = parts
        try:
            return cls(name, token_a, token_b, int(decimals_a), int(decimals_b))
        except ValueError as e:
            raise ValueError(f"Invalid pair format '{pair_str}': {e}") from e


def parse_pairs(pairs_str: str) -> list[TokenPair]:
    """Parse a semicolon-separated list of pair definitions.

    :param pairs_str: Pair definitions separated by ";".
    :returns: List of TokenPair in the given order.
    :raises ValueError: If any definition is invalid.
    """
    return [TokenPair.from_string(p) for p in pairs_str.split(";") if p.strip()]


WETH = "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2"
USDC = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"
USDT = "0xdAC17F958D2ee523a2206206994597C13D831ec7"

DEFAULT_PAIRS: list[TokenPair] = [
    TokenPair("ETH/USDC", WETH, USDC, 18, 6),
    TokenPair("USDC/USDT", USDC, USDT, 6, 6),
]
