"""Route discovery: quote providers, cost normalisation and ranking.

Providers:
- AVNU: Starknet DEX aggregator
- 1inch: EVM DEX aggregator
- Simulated: dry-run swaps and the across, stargate and orbiter bridges
"""

from griffin.routing.base import (
    FeeComponent,
    FeeInfo,
    GasEstimate,
    QuoteProvider,
    RawQuote,
    RouteInfo,
    RouteStep,
    TradeRequest,
)
from griffin.routing.engine import QuoteRequest, RouteDiscoveryEngine
from griffin.routing.pricing import CostNormalizer, UnpricedCurrencyError

__all__ = [
    # Data model
    "FeeComponent",
    "FeeInfo",
    "GasEstimate",
    "RawQuote",
    "RouteInfo",
    "RouteStep",
    "TradeRequest",
    "QuoteRequest",
    # Providers and ranking
    "QuoteProvider",
    "RouteDiscoveryEngine",
    "CostNormalizer",
    "UnpricedCurrencyError",
]
