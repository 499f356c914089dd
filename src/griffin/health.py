"""Dependency health probing.

Every check follows one contract: it returns None when the dependency is
healthy, a reason string when it is degraded, and raises when it is
unhealthy. Checks run concurrently, each bounded by a timeout, and the
aggregate status is the worst individual status.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Awaitable, Callable, Iterable, Literal, Optional

import httpx
import redis.asyncio as redis

from griffin import __version__
from griffin.chains import STARKNET_FAMILY, ChainInfo, TokenRegistry, family_tag
from griffin.intents.store import IntentStore
from griffin.routing.base import QuoteProvider

logger = logging.getLogger(__name__)

Status = Literal["healthy", "degraded", "unhealthy"]
Check = Callable[[], Awaitable[Optional[str]]]

_SEVERITY = {"healthy": 0, "degraded": 1, "unhealthy": 2}


@dataclass
class DependencyStatus:
    status: Status
    response_time: Optional[float] = None  # ms
    error: Optional[str] = None


@dataclass
class HealthReport:
    status: Status
    timestamp: datetime
    version: str
    dependencies: dict[str, DependencyStatus] = field(default_factory=dict)


def worst_of(statuses: Iterable[Status]) -> Status:
    """Aggregate statuses: any unhealthy wins, then any degraded."""
    worst: Status = "healthy"
    for status in statuses:
        if _SEVERITY[status] > _SEVERITY[worst]:
            worst = status
    return worst


class HealthProbe:
    """Runs named dependency checks and aggregates the results."""

    def __init__(self, checks: dict[str, Check], timeout: float = 5.0, version: str = __version__):
        self.checks = dict(checks)
        self.timeout = timeout
        self.version = version

    async def check(self) -> HealthReport:
        """Run every check concurrently. Never raises."""
        started = time.monotonic()
        names = list(self.checks)
        results = await asyncio.gather(*(self._run(name, self.checks[name]) for name in names))
        dependencies = dict(zip(names, results))

        status = worst_of(d.status for d in dependencies.values())
        duration = (time.monotonic() - started) * 1000
        logger.info(f"Health check completed: {status} ({duration:.0f}ms)")

        return HealthReport(
            status=status,
            timestamp=datetime.now(timezone.utc),
            version=self.version,
            dependencies=dependencies,
        )

    async def _run(self, name: str, check: Check) -> DependencyStatus:
        started = time.monotonic()
        try:
            reason = await asyncio.wait_for(check(), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Health check {name} timed out after {self.timeout}s")
            return DependencyStatus(
                status="unhealthy",
                response_time=self._elapsed(started),
                error=f"Timed out after {self.timeout}s",
            )
        except Exception as e:
            logger.warning(f"Health check {name} failed: {type(e).__name__}: {e}")
            return DependencyStatus(
                status="unhealthy",
                response_time=self._elapsed(started),
                error=str(e) or type(e).__name__,
            )

        if reason:
            return DependencyStatus(status="degraded", response_time=self._elapsed(started), error=reason)
        return DependencyStatus(status="healthy", response_time=self._elapsed(started))

    @staticmethod
    def _elapsed(started: float) -> float:
        return round((time.monotonic() - started) * 1000, 2)


# ======================
# Checks
# ======================

def storage_check(store: IntentStore) -> Check:
    async def check() -> Optional[str]:
        await store.ping()
        return None

    return check


def cache_check(redis_url: str) -> Check:
    """PING the configured Redis server."""

    async def check() -> Optional[str]:
        if not redis_url:
            return "Redis URL not configured"
        client = redis.from_url(redis_url)
        try:
            if not await client.ping():
                raise ConnectionError("Redis PING returned no PONG")
        finally:
            await client.aclose()
        return None

    return check


def token_catalog_check(tokens: TokenRegistry) -> Check:
    async def check() -> Optional[str]:
        if not tokens.ready:
            return "Token catalog not initialized"
        return None

    return check


def rpc_check(chain: ChainInfo, timeout: float = 5.0) -> Check:
    """Fetch the latest block number from a chain's RPC."""
    method = "starknet_blockNumber" if family_tag(chain.chain_id) == STARKNET_FAMILY else "eth_blockNumber"

    async def check() -> Optional[str]:
        if not chain.rpc_url:
            return f"{chain.name} RPC URL not configured"
        async with httpx.AsyncClient(timeout=timeout) as client:
            response = await client.post(
                chain.rpc_url,
                json={"jsonrpc": "2.0", "method": method, "params": [], "id": 1},
            )
            response.raise_for_status()
            data = response.json()
        if "error" in data:
            raise RuntimeError(f"RPC error: {data['error']}")
        return None

    return check


def provider_check(provider: QuoteProvider) -> Check:
    return provider.check_health


def build_health_probe(
    store: IntentStore,
    tokens: TokenRegistry,
    chains: Iterable[ChainInfo],
    providers: Iterable[QuoteProvider],
    redis_url: str = "",
    timeout: float = 5.0,
) -> HealthProbe:
    """Create a probe covering storage, cache, chain RPCs and quote APIs."""
    checks: dict[str, Check] = {
        "storage": storage_check(store),
        "cache": cache_check(redis_url),
        "tokens": token_catalog_check(tokens),
    }
    for chain in chains:
        checks[f"blockchain.{chain.chain_id}"] = rpc_check(chain, timeout=timeout)
    for provider in providers:
        checks.setdefault(f"external.{provider.name}", provider_check(provider))

    return HealthProbe(checks, timeout=timeout)
