"""Route discovery and ranking.

Same-chain requests are served by the chain family's swap providers, each
quote becoming a single-step route. Cross-chain requests go through every
bridge provider that connects the two chains, preceded by a source-side swap
when the input token is not the asset being bridged.

Providers are queried in parallel. A provider that fails or times out
contributes no routes; it never aborts the discovery call.
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import TYPE_CHECKING, Callable, Optional

from griffin.chains import TokenRegistry
from griffin.routing.base import (
    GasEstimate,
    QuoteProvider,
    RawQuote,
    RouteInfo,
    RouteStep,
    TradeRequest,
)
from griffin.routing.pricing import CostNormalizer, UnpricedCurrencyError, format_cost

if TYPE_CHECKING:
    from griffin.families.base import ChainFamilyRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QuoteRequest:
    """A trade to find routes for."""

    from_chain: str
    to_chain: str
    from_token: str
    to_token: str
    amount: Decimal
    slippage_tolerance: Optional[float] = None

    @property
    def is_cross_chain(self) -> bool:
        return self.from_chain != self.to_chain


@dataclass(frozen=True)
class _PricedStep:
    quote: RawQuote
    step: RouteStep
    cost: Decimal


class RouteDiscoveryEngine:
    """Finds candidate routes for a trade and ranks them by total cost."""

    def __init__(
        self,
        families: "ChainFamilyRegistry",
        bridge_providers: list[QuoteProvider],
        tokens: TokenRegistry,
        normalizer: CostNormalizer,
        route_validity_seconds: int = 300,
        default_swap_slippage: float = 0.005,
        default_bridge_slippage: float = 0.01,
        provider_timeout: Optional[float] = 15.0,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        if route_validity_seconds <= 0:
            raise ValueError("route_validity_seconds must be positive")
        self.families = families
        self.bridge_providers = list(bridge_providers)
        self.tokens = tokens
        self.normalizer = normalizer
        self.route_validity = timedelta(seconds=route_validity_seconds)
        self.default_swap_slippage = default_swap_slippage
        self.default_bridge_slippage = default_bridge_slippage
        self.provider_timeout = provider_timeout
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    async def find_best_routes(self, request: QuoteRequest) -> list[RouteInfo]:
        """
        Discover routes for a trade.

        Returns:
            Routes sorted ascending by numeric total cost (ties keep provider
            order). An empty list means no viable route.
        """
        logger.info(
            f"Finding routes: {request.amount} {request.from_token}@{request.from_chain} -> "
            f"{request.to_token}@{request.to_chain}"
        )

        if request.is_cross_chain:
            routes = await self._find_bridge_routes(request)
        else:
            routes = await self._find_swap_routes(request)

        # list.sort is stable: equal costs keep discovery order
        routes.sort(key=lambda r: r.cost)

        if routes:
            best = routes[0]
            logger.info(
                f"Found {len(routes)} route(s). Best: "
                f"{' -> '.join(s.provider for s in best.steps)} "
                f"(cost {best.total_cost} {self.normalizer.reference_currency})"
            )
        else:
            logger.warning(
                f"No routes for {request.from_token}@{request.from_chain} -> "
                f"{request.to_token}@{request.to_chain}"
            )
        return routes

    # ======================
    # Same-chain
    # ======================

    async def _find_swap_routes(self, request: QuoteRequest) -> list[RouteInfo]:
        providers = self.families.swap_providers(request.from_chain)
        if not providers:
            logger.warning(f"No swap providers for chain {request.from_chain}")
            return []

        slippage = self._slippage(request, self.default_swap_slippage)
        trade = self._trade_request(
            request.from_chain,
            request.to_chain,
            request.from_token,
            request.to_token,
            request.amount,
            slippage,
        )
        quotes = await self._collect_quotes(providers, trade)

        routes = []
        for quote in quotes:
            priced = self._price(quote)
            if priced is None:
                continue
            routes.append(self._make_route([priced], slippage))
        return routes

    # ======================
    # Cross-chain
    # ======================

    async def _find_bridge_routes(self, request: QuoteRequest) -> list[RouteInfo]:
        bridges = [
            b for b in self.bridge_providers
            if b.supports_route(request.from_chain, request.to_chain)
        ]
        if not bridges:
            logger.warning(
                f"No bridge connects {request.from_chain} -> {request.to_chain}"
            )
            return []

        slippage = self._slippage(request, self.default_bridge_slippage)
        bridge_asset = self._bridge_asset(request)
        amount = request.amount
        leading: Optional[_PricedStep] = None

        if bridge_asset.lower() != request.from_token.lower():
            leading = await self._best_source_swap(request, bridge_asset, slippage)
            if leading is None:
                logger.warning(
                    f"No source-side swap {request.from_token} -> {bridge_asset} "
                    f"on {request.from_chain}; cannot bridge"
                )
                return []
            amount = leading.quote.estimated_output

        trade = self._trade_request(
            request.from_chain,
            request.to_chain,
            bridge_asset,
            request.to_token,
            amount,
            slippage,
        )
        quotes = await self._collect_quotes(bridges, trade)

        routes = []
        for quote in quotes:
            priced = self._price(quote)
            if priced is None:
                continue
            steps = [leading, priced] if leading else [priced]
            routes.append(self._make_route(steps, slippage))
        return routes

    async def _best_source_swap(
        self,
        request: QuoteRequest,
        bridge_asset: str,
        slippage: float,
    ) -> Optional[_PricedStep]:
        """Get the cheapest swap into the bridged asset on the source chain."""
        providers = self.families.swap_providers(request.from_chain)
        if not providers:
            return None

        trade = self._trade_request(
            request.from_chain,
            request.from_chain,
            request.from_token,
            bridge_asset,
            request.amount,
            slippage,
        )
        priced = [p for p in map(self._price, await self._collect_quotes(providers, trade)) if p]
        if not priced:
            return None
        return min(priced, key=lambda p: p.cost)

    def _bridge_asset(self, request: QuoteRequest) -> str:
        """Token carried across the bridge, as an address on the source chain.

        This is the source-chain token with the same symbol as the requested
        output token. When the output token is not in the catalog, or has no
        source-chain counterpart, the output token address is used as given.
        """
        to_info = self.tokens.get_token_info(request.to_token, request.to_chain)
        if to_info is not None:
            counterpart = self.tokens.find_by_symbol(to_info.symbol, request.from_chain)
            if counterpart is not None:
                return counterpart.address
        return request.to_token

    # ======================
    # Helpers
    # ======================

    async def _collect_quotes(
        self,
        providers: list[QuoteProvider],
        trade: TradeRequest,
    ) -> list[RawQuote]:
        """Query providers in parallel, preserving provider order."""
        results = await asyncio.gather(*(self._query(p, trade) for p in providers))
        return [quote for quotes in results for quote in quotes]

    async def _query(self, provider: QuoteProvider, trade: TradeRequest) -> list[RawQuote]:
        try:
            logger.debug(f"Requesting quotes from {provider.name}...")
            quotes = list(await asyncio.wait_for(provider.get_quotes(trade), timeout=self.provider_timeout))
        except asyncio.TimeoutError:
            logger.warning(f"{provider.name} quote timed out after {self.provider_timeout}s")
            return []
        except Exception as e:
            logger.warning(f"{provider.name} quote failed: {type(e).__name__}: {e}")
            return []

        logger.debug(f"{provider.name} returned {len(quotes)} quote(s)")
        return quotes

    def _price(self, quote: RawQuote) -> Optional[_PricedStep]:
        """Normalise a quote's fees; None if any fee cannot be priced."""
        try:
            fee_info, cost = self.normalizer.normalize(quote.fees)
        except UnpricedCurrencyError as e:
            logger.warning(f"Dropping {quote.provider} quote: {e}")
            return None
        except ArithmeticError as e:
            logger.warning(f"Dropping {quote.provider} quote: cannot price fees: {type(e).__name__}")
            return None

        step = RouteStep(
            type=quote.step_type,
            provider=quote.provider,
            from_chain=quote.from_chain,
            to_chain=quote.to_chain,
            from_token=quote.from_token,
            to_token=quote.to_token,
            amount=format(quote.amount.normalize(), "f"),
            estimated_output=format(quote.estimated_output.normalize(), "f"),
            fees=fee_info,
        )
        return _PricedStep(quote=quote, step=step, cost=cost)

    def _make_route(self, priced_steps: list[_PricedStep], slippage: float) -> RouteInfo:
        total = sum((p.cost for p in priced_steps), Decimal("0"))
        gas_total = sum((Decimal(p.step.fees.gas_fee) for p in priced_steps), Decimal("0"))
        gas_limits = [p.quote.gas_limit for p in priced_steps if p.quote.gas_limit is not None]
        gas_prices = [p.quote.gas_price for p in priced_steps if p.quote.gas_price is not None]

        created_at = self._clock()
        return RouteInfo(
            id=str(uuid.uuid4()),
            provider_quote_id=priced_steps[-1].quote.provider_quote_id,
            steps=tuple(p.step for p in priced_steps),
            total_cost=format_cost(total),
            estimated_time=sum(p.quote.estimated_time_seconds for p in priced_steps),
            slippage_tolerance=slippage,
            gas_estimate=GasEstimate(
                total_cost=format_cost(total),
                currency=self.normalizer.reference_currency,
                gas_limit=str(sum(gas_limits)) if gas_limits else None,
                gas_price=str(gas_prices[-1]) if gas_prices else None,
                service_cost=format_cost(total - gas_total),
            ),
            created_at=created_at,
            expires_at=created_at + self.route_validity,
        )

    def _trade_request(
        self,
        from_chain: str,
        to_chain: str,
        from_token: str,
        to_token: str,
        amount: Decimal,
        slippage: float,
    ) -> TradeRequest:
        from_info = self.tokens.get_token_info(from_token, from_chain)
        to_info = self.tokens.get_token_info(to_token, to_chain)
        return TradeRequest(
            from_chain=from_chain,
            to_chain=to_chain,
            from_token=from_token,
            to_token=to_token,
            amount=amount,
            from_decimals=from_info.decimals if from_info else 18,
            to_decimals=to_info.decimals if to_info else 18,
            from_symbol=from_info.symbol if from_info else None,
            to_symbol=to_info.symbol if to_info else None,
            slippage_tolerance=slippage,
        )

    @staticmethod
    def _slippage(request: QuoteRequest, default: float) -> float:
        if request.slippage_tolerance is None:
            return default
        return request.slippage_tolerance
