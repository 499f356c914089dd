"""Supported chains and their tradable tokens.

Chain ids are opaque namespaced strings (``starknet:sepolia``). Bare numeric
ids (``1``, ``137``) are the EVM chain ids and belong to the ``eip155``
family.

Both registries are built explicitly at startup and injected into the
services that need them; there is no module-level registry state.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Iterable, Optional

from griffin.config import Settings
from griffin.errors import AppError, ErrorCode

logger = logging.getLogger(__name__)

EVM_FAMILY = "eip155"
STARKNET_FAMILY = "starknet"


@dataclass(frozen=True)
class ChainInfo:
    """A supported blockchain."""

    chain_id: str
    name: str
    symbol: str
    rpc_url: str
    block_explorer: str
    is_testnet: bool = False


@dataclass(frozen=True)
class TokenInfo:
    """A token tradable on one chain."""

    address: str
    symbol: str
    name: str
    decimals: int
    chain_id: str
    logo_url: Optional[str] = None


TokenSource = Callable[[], Awaitable[list[TokenInfo]]]


def family_tag(chain_id: str) -> str:
    """Get the family namespace of a chain id.

    ``starknet:sepolia`` -> ``starknet``; bare numeric ids are EVM chain ids.
    """
    if ":" in chain_id:
        return chain_id.split(":", 1)[0].lower()
    if chain_id.isdigit():
        return EVM_FAMILY
    return chain_id.lower()


class ChainRegistry:
    """Catalog of supported chains, immutable after construction."""

    def __init__(self, chains: Iterable[ChainInfo]):
        self._chains: dict[str, ChainInfo] = {}
        for chain in chains:
            if chain.chain_id in self._chains:
                raise ValueError(f"Duplicate chain id: {chain.chain_id}")
            self._chains[chain.chain_id] = chain

    def get_supported_chains(self) -> list[ChainInfo]:
        """Get all supported chains in registration order."""
        return list(self._chains.values())

    def get_chain(self, chain_id: str) -> Optional[ChainInfo]:
        """Get a chain by id, or None."""
        return self._chains.get(chain_id)

    def is_chain_supported(self, chain_id: str) -> bool:
        return chain_id in self._chains


class TokenRegistry:
    """Catalog of tokens per chain.

    Token addresses are compared case-insensitively within a chain. The
    catalog is populated by :meth:`initialize`, which awaits every source
    before the registry reports itself ready.
    """

    def __init__(self, seed_tokens: Iterable[TokenInfo] = ()):
        self._tokens: dict[tuple[str, str], TokenInfo] = {}
        self._ready = False
        for token in seed_tokens:
            self.register(token)

    @property
    def ready(self) -> bool:
        """Whether initialization has completed."""
        return self._ready

    def register(self, token: TokenInfo) -> None:
        """Add a token; a later registration for the same address replaces it."""
        self._tokens[(token.chain_id, token.address.lower())] = token

    async def initialize(self, sources: Iterable[TokenSource] = ()) -> int:
        """Load tokens from every source, then mark the registry ready.

        A failing source is logged and skipped so one unreachable token list
        does not keep the service from starting.

        Returns:
            Number of tokens loaded from the sources
        """
        sources = list(sources)
        results = await asyncio.gather(*(source() for source in sources), return_exceptions=True)

        loaded = 0
        for source, result in zip(sources, results):
            if isinstance(result, BaseException):
                logger.warning(
                    f"Token source {getattr(source, '__name__', source)!r} failed: "
                    f"{type(result).__name__}: {result}"
                )
                continue
            for token in result:
                self.register(token)
                loaded += 1

        self._ready = True
        logger.info(f"Token registry ready: {len(self._tokens)} tokens ({loaded} from sources)")
        return loaded

    def get_supported_tokens(self, chain_id: Optional[str] = None) -> list[TokenInfo]:
        """Get tokens, optionally filtered to one chain.

        Raises:
            AppError: NO_TOKENS_FOUND if a chain filter matches no tokens
        """
        tokens = list(self._tokens.values())
        if chain_id is None:
            return tokens

        filtered = [t for t in tokens if t.chain_id == chain_id]
        if not filtered:
            raise AppError(
                "No tokens found for chain",
                404,
                ErrorCode.NO_TOKENS_FOUND,
                {"chainId": chain_id},
            )
        return filtered

    def is_token_supported(self, address: str, chain_id: str) -> bool:
        return (chain_id, address.lower()) in self._tokens

    def get_token_info(self, address: str, chain_id: str) -> Optional[TokenInfo]:
        return self._tokens.get((chain_id, address.lower()))

    def find_by_symbol(self, symbol: str, chain_id: str) -> Optional[TokenInfo]:
        """Get the first token on a chain with the given symbol."""
        symbol = symbol.upper()
        for token in self._tokens.values():
            if token.chain_id == chain_id and token.symbol.upper() == symbol:
                return token
        return None


# ======================
# Built-in catalog
# ======================

def default_chains(settings: Settings) -> list[ChainInfo]:
    """Chains supported by the service, with RPC URLs from settings."""
    starknet_id = settings.starknet_chain_id
    starknet_testnet = settings.starknet_network != "mainnet"
    explorer = "https://sepolia.voyager.online" if starknet_testnet else "https://voyager.online"
    return [
        ChainInfo(
            chain_id=starknet_id,
            name="Starknet",
            symbol="STRK",
            rpc_url=settings.get_rpc_url(starknet_id),
            block_explorer=explorer,
            is_testnet=starknet_testnet,
        ),
        ChainInfo(
            chain_id="1",
            name="Ethereum",
            symbol="ETH",
            rpc_url=settings.get_rpc_url("1"),
            block_explorer="https://etherscan.io",
        ),
        ChainInfo(
            chain_id="137",
            name="Polygon",
            symbol="POL",
            rpc_url=settings.get_rpc_url("137"),
            block_explorer="https://polygonscan.com",
        ),
        ChainInfo(
            chain_id="42161",
            name="Arbitrum One",
            symbol="ETH",
            rpc_url=settings.get_rpc_url("42161"),
            block_explorer="https://arbiscan.io",
        ),
        ChainInfo(
            chain_id="10",
            name="Optimism",
            symbol="ETH",
            rpc_url=settings.get_rpc_url("10"),
            block_explorer="https://optimistic.etherscan.io",
        ),
    ]


def default_tokens(settings: Settings) -> list[TokenInfo]:
    """Seed tokens that are always registered."""
    starknet_id = settings.starknet_chain_id
    return [
        # Starknet
        TokenInfo(
            address="0x053b40a647cedfca6ca84f542a0fe36736031905a9639a7f19a3c1e66bfd5080",
            symbol="USDC",
            name="USD Coin",
            decimals=6,
            chain_id=starknet_id,
        ),
        TokenInfo(
            address="0x04718f5a0fc34cc1af16a1cdee98ffb20c31f5cd61d6ab07201858f4287c938d",
            symbol="STRK",
            name="Starknet Token",
            decimals=18,
            chain_id=starknet_id,
        ),
        TokenInfo(
            address="0x049d36570d4e46f48e99674bd3fcc84644ddd6b96f7c741b1562b82f9e004dc7",
            symbol="ETH",
            name="Ether",
            decimals=18,
            chain_id=starknet_id,
        ),
        # Ethereum
        TokenInfo(
            address="0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48",
            symbol="USDC",
            name="USD Coin",
            decimals=6,
            chain_id="1",
        ),
        TokenInfo(
            address="0xdAC17F958D2ee523a2206206994597C13D831ec7",
            symbol="USDT",
            name="Tether USD",
            decimals=6,
            chain_id="1",
        ),
        TokenInfo(
            address="0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2",
            symbol="WETH",
            name="Wrapped Ether",
            decimals=18,
            chain_id="1",
        ),
        # Polygon
        TokenInfo(
            address="0x3c499c542cEF5E3811e1192ce70d8cC03d5c3359",
            symbol="USDC",
            name="USD Coin",
            decimals=6,
            chain_id="137",
        ),
        TokenInfo(
            address="0xc2132D05D31c914a87C6611C10748AEb04B58e8F",
            symbol="USDT",
            name="Tether USD",
            decimals=6,
            chain_id="137",
        ),
        TokenInfo(
            address="0x7ceB23fD6bC0adD59E62ac25578270cFf1b9f619",
            symbol="WETH",
            name="Wrapped Ether",
            decimals=18,
            chain_id="137",
        ),
    ]


def build_chain_registry(settings: Settings) -> ChainRegistry:
    return ChainRegistry(default_chains(settings))


def build_token_registry(settings: Settings) -> TokenRegistry:
    return TokenRegistry(default_tokens(settings))
