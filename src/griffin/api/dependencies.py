"""Service wiring and FastAPI dependencies.

Services are built once per application and kept on ``app.state``; route
handlers receive them through ``Depends``.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from fastapi import Request

from griffin.chains import ChainRegistry, TokenRegistry, TokenSource, build_chain_registry, build_token_registry
from griffin.config import Settings
from griffin.execution import DryRunExecutionAdapter, ExecutionAdapter
from griffin.families.base import ChainFamilyRegistry
from griffin.health import HealthProbe, build_health_probe
from griffin.intents import InMemoryIntentStore, IntentStateMachine, IntentStore, IntentValidator
from griffin.routing.engine import RouteDiscoveryEngine
from griffin.routing.factory import (
    create_engine,
    create_family_registry,
    create_token_sources,
    quote_providers,
)

logger = logging.getLogger(__name__)


@dataclass
class Services:
    """Everything the HTTP layer talks to."""

    settings: Settings
    chains: ChainRegistry
    tokens: TokenRegistry
    families: ChainFamilyRegistry
    engine: RouteDiscoveryEngine
    store: IntentStore
    intents: IntentStateMachine
    health: HealthProbe
    token_sources: list[TokenSource] = field(default_factory=list)


def build_services(settings: Settings, executor: Optional[ExecutionAdapter] = None) -> Services:
    """Build the service graph from settings."""
    chains = build_chain_registry(settings)
    tokens = build_token_registry(settings)
    families = create_family_registry(settings)
    engine = create_engine(settings, families, tokens)
    store = InMemoryIntentStore()

    if executor is None:
        if not settings.dry_run:
            logger.warning("No on-chain execution adapter configured; dispatch is simulated")
        executor = DryRunExecutionAdapter()

    intents = IntentStateMachine(
        store=store,
        validator=IntentValidator(chains, families),
        engine=engine,
        executor=executor,
        execution_slippage=settings.execution_slippage,
    )
    health = build_health_probe(
        store=store,
        tokens=tokens,
        chains=chains.get_supported_chains(),
        providers=quote_providers(families, engine),
        redis_url=settings.redis_url,
        timeout=settings.health_check_timeout,
    )

    return Services(
        settings=settings,
        chains=chains,
        tokens=tokens,
        families=families,
        engine=engine,
        store=store,
        intents=intents,
        health=health,
        token_sources=create_token_sources(settings, families),
    )


def get_services(request: Request) -> Services:
    return request.app.state.services
