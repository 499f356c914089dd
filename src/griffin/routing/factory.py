"""Factory for quote providers, chain families and the discovery engine.

Creates real providers when not in dry-run mode, otherwise simulated ones.
"""

import logging
from typing import Optional

from griffin.chains import EVM_FAMILY, STARKNET_FAMILY, TokenRegistry, TokenSource
from griffin.config import Settings
from griffin.families.base import ChainFamily, ChainFamilyRegistry
from griffin.families.evm import EvmAddressValidator, EvmSignatureVerifier
from griffin.families.starknet import (
    StarknetAddressValidator,
    StarknetRpcSignatureVerifier,
    StructuralSignatureVerifier,
)
from griffin.routing.base import QuoteProvider
from griffin.routing.engine import RouteDiscoveryEngine
from griffin.routing.pricing import CostNormalizer

logger = logging.getLogger(__name__)


def create_swap_providers(settings: Settings) -> dict[str, list[QuoteProvider]]:
    """Create swap providers keyed by chain family."""
    if settings.dry_run:
        from griffin.routing.dry_run import create_simulated_swap_providers
        logger.info("Dry-run mode: using simulated swap providers")
        return create_simulated_swap_providers(settings.reference_prices)

    from griffin.routing.avnu import create_avnu_provider
    from griffin.routing.oneinch import OneInchQuoteProvider

    return {
        STARKNET_FAMILY: [
            create_avnu_provider(
                settings.avnu_api_url,
                settings.starknet_chain_id,
                timeout=settings.provider_timeout,
            ),
        ],
        EVM_FAMILY: [
            OneInchQuoteProvider(
                api_key=settings.oneinch_api_key or None,
                api_url=settings.oneinch_api_url,
                rpc_url_for=settings.get_rpc_url,
                timeout=settings.provider_timeout,
            ),
        ],
    }


def create_bridge_providers(settings: Settings) -> list[QuoteProvider]:
    """Create bridge providers.

    Bridges are simulated in every mode.
    """
    from griffin.routing.dry_run import create_simulated_bridges
    return create_simulated_bridges(settings.reference_prices)


def create_family_registry(
    settings: Settings,
    swap_providers: Optional[dict[str, list[QuoteProvider]]] = None,
) -> ChainFamilyRegistry:
    """Register the Starknet and EVM families with their capabilities."""
    if swap_providers is None:
        swap_providers = create_swap_providers(settings)

    if settings.dry_run:
        starknet_verifier = StructuralSignatureVerifier()
    else:
        starknet_verifier = StarknetRpcSignatureVerifier(
            settings.starknet_rpc_url, timeout=settings.provider_timeout
        )

    return ChainFamilyRegistry([
        ChainFamily(
            tag=STARKNET_FAMILY,
            address_validator=StarknetAddressValidator(),
            signature_verifier=starknet_verifier,
            swap_providers=swap_providers.get(STARKNET_FAMILY, []),
        ),
        ChainFamily(
            tag=EVM_FAMILY,
            address_validator=EvmAddressValidator(),
            signature_verifier=EvmSignatureVerifier(),
            swap_providers=swap_providers.get(EVM_FAMILY, []),
        ),
    ])


def create_normalizer(settings: Settings) -> CostNormalizer:
    return CostNormalizer(settings.reference_currency, settings.reference_prices)


def create_engine(
    settings: Settings,
    families: ChainFamilyRegistry,
    tokens: TokenRegistry,
    bridge_providers: Optional[list[QuoteProvider]] = None,
) -> RouteDiscoveryEngine:
    """Create the route discovery engine."""
    if bridge_providers is None:
        bridge_providers = create_bridge_providers(settings)

    return RouteDiscoveryEngine(
        families=families,
        bridge_providers=bridge_providers,
        tokens=tokens,
        normalizer=create_normalizer(settings),
        route_validity_seconds=settings.route_validity_seconds,
        default_swap_slippage=settings.default_swap_slippage,
        default_bridge_slippage=settings.default_bridge_slippage,
        provider_timeout=settings.provider_timeout,
    )


def create_token_sources(settings: Settings, families: ChainFamilyRegistry) -> list[TokenSource]:
    """Token list sources awaited at startup (none in dry-run mode)."""
    if settings.dry_run:
        return []

    sources: list[TokenSource] = []
    for family in families.families:
        for provider in family.swap_providers:
            fetch = getattr(provider, "fetch_tokens", None)
            if fetch is not None:
                sources.append(fetch)
    return sources


def quote_providers(families: ChainFamilyRegistry, engine: RouteDiscoveryEngine) -> list[QuoteProvider]:
    """All distinct quote providers, swap providers first."""
    providers: list[QuoteProvider] = []
    for family in families.families:
        providers.extend(family.swap_providers)
    providers.extend(engine.bridge_providers)
    return providers
