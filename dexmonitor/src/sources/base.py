"""Base reserve source interface and shared error types.

All reserve sources inherit from ReserveSource and implement the three
pool queries. A source answers "which pool holds these two tokens", "in what
order does the pool store them" and "how much of each does it hold".

.. code-block:: python

    @register_source
    class MySource(ReserveSource):
        name = "mydex"

        async def resolve_pool(self, token_a: str, token_b: str) -> str:
            ...

        async def get_pool_token_order(self, pool: str) -> tuple[str, str]:
            ...

        async def get_reserves(self, pool: str) -> tuple[int, int]:
            ...
"""

from abc import ABC, abstractmethod
from typing import ClassVar


ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


class MonitorError(Exception):
    """Base exception for price monitor errors."""

    pass


class TransportError(MonitorError):
    """Raised when a network or RPC call to the reserve source fails."""

    pass


class PoolNotFound(MonitorError):
    """Raised when no liquidity pool exists for a token pair.

    :ivar token_a: First requested token.
    :ivar token_b: Second requested token.
    """

    def __init__(self, token_a: str, token_b: str):
        """Initialize the error.

        :param token_a: First requested token.
        :param token_b: Second requested token.
        """
        self.token_a = token_a
        self.token_b = token_b
        super().__init__(f"No pair found for {token_a}/{token_b}")


class ReserveSource(ABC):
    """Abstract base class for AMM reserve sources.

    Subclasses must implement:
        - name: Class variable identifying the source (e.g., "uniswap-v2")
        - resolve_pool(), get_pool_token_order(), get_reserves()

    Every method may raise TransportError on network failure.

    :cvar name: Unique identifier for this source.
    :ivar rpc_url: RPC endpoint the source talks to.
    """

    name: ClassVar[str] = ""

    def __init__(self, rpc_url: str | None = None):
        """Initialize the source.

        :param rpc_url: RPC endpoint URL.
        """
        self.rpc_url = rpc_url

    @abstractmethod
    async def resolve_pool(self, token_a: str, token_b: str) -> str:
        """Resolve the pool address holding both tokens.

        :param token_a: First token address.
        :param token_b: Second token address.
        :returns: Pool address.
        :raises PoolNotFound: If the pool does not exist.
        """
        pass

    @abstractmethod
    async def get_pool_token_order(self, pool: str) -> tuple[str, str]:
        """Get the pool's internally ordered token addresses.

        :param pool: Pool address.
        :returns: Tuple of (token_x, token_y) in pool storage order.
        """
        pass

    @abstractmethod
    async def get_reserves(self, pool: str) -> tuple[int, int]:
        """Get the pool's raw reserves in pool storage order.

        :param pool: Pool address.
        :returns: Tuple of (reserve_x, reserve_y) in smallest token units.
        """
        pass

    async def close(self) -> None:
        """Release any connections held by the source."""
        pass


# Registry of available sources (populated by subclass imports)
SOURCE_REGISTRY: dict[str, type[ReserveSource]] = {}


def register_source(cls: type[ReserveSource]) -> type[ReserveSource]:
    """Decorator to register a reserve source class in the global registry.

    :param cls: Source class to register.
    :returns: The registered class (unchanged).
    :raises ValueError: If source has no name defined.
    """
    if not cls.name:
        raise ValueError(f"Source {cls.__name__} must define a 'name' class variable")
    SOURCE_REGISTRY[cls.name] = cls
    return cls


def get_source(name: str, rpc_url: str | None = None) -> ReserveSource:
    """Get a reserve source instance by name.

    :param name: Source name (e.g., "uniswap-v2", "sushiswap").
    :param rpc_url: RPC endpoint URL.
    :returns: Source instance.
    :raises ValueError: If source name is unknown.
    """
    if name not in SOURCE_REGISTRY:
        available = ", ".join(sorted(SOURCE_REGISTRY.keys()))
        raise ValueError(f"Unknown source '{name}'. Available: {available}")
    return SOURCE_REGISTRY[name](rpc_url=rpc_url)


def get_available_sources() -> list[str]:
    """Get list of available source names.

    :returns: Sorted list of registered source names.
    """
    return sorted(SOURCE_REGISTRY.keys())
