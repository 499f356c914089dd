"""Route data model and the quote provider interface."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Literal, Optional

logger = logging.getLogger(__name__)

StepType = Literal["swap", "bridge"]
FeeKind = Literal["gas", "protocol", "bridge", "service"]


@dataclass(frozen=True)
class FeeComponent:
    """One fee charged by a provider, in the provider's own currency."""

    kind: FeeKind
    amount: Decimal
    currency: str


@dataclass(frozen=True)
class TradeRequest:
    """What a provider is asked to quote: one hop, amounts in token units."""

    from_chain: str
    to_chain: str
    from_token: str
    to_token: str
    amount: Decimal
    from_decimals: int = 18
    to_decimals: int = 18
    from_symbol: Optional[str] = None
    to_symbol: Optional[str] = None
    slippage_tolerance: float = 0.005


@dataclass
class RawQuote:
    """A provider's unnormalised offer for a single hop."""

    provider: str
    step_type: StepType
    from_chain: str
    to_chain: str
    from_token: str
    to_token: str
    amount: Decimal
    estimated_output: Decimal
    fees: list[FeeComponent] = field(default_factory=list)
    estimated_time_seconds: int = 60
    provider_quote_id: Optional[str] = None
    gas_limit: Optional[int] = None
    gas_price: Optional[int] = None
    details: dict = field(default_factory=dict)


@dataclass(frozen=True)
class FeeInfo:
    """Fees of one step, expressed in the reference currency."""

    gas_fee: str
    total: str
    currency: str
    protocol_fee: Optional[str] = None
    bridge_fee: Optional[str] = None
    service_cost: Optional[str] = None


@dataclass(frozen=True)
class GasEstimate:
    """Aggregated gas figures of a route; costs in the reference currency."""

    total_cost: str
    currency: str
    gas_limit: Optional[str] = None
    gas_price: Optional[str] = None
    service_cost: Optional[str] = None


@dataclass(frozen=True)
class RouteStep:
    """A single hop. A step's estimated output is the next step's amount."""

    type: StepType
    provider: str
    from_chain: str
    to_chain: str
    from_token: str
    to_token: str
    amount: str
    estimated_output: str
    fees: FeeInfo


@dataclass(frozen=True)
class RouteInfo:
    """A ranked candidate route with a validity window."""

    id: str
    steps: tuple[RouteStep, ...]
    total_cost: str
    estimated_time: int
    slippage_tolerance: float
    gas_estimate: GasEstimate
    created_at: datetime
    expires_at: datetime
    provider_quote_id: Optional[str] = None

    def __post_init__(self):
        if not self.steps:
            raise ValueError("A route needs at least one step")
        if self.expires_at <= self.created_at:
            raise ValueError("Route must expire after it was created")
        if not 0 <= self.slippage_tolerance <= 1:
            raise ValueError("Slippage tolerance must be between 0 and 1")

    @property
    def cost(self) -> Decimal:
        """Total cost as a number (for ranking)."""
        return Decimal(self.total_cost)

    @property
    def estimated_output(self) -> str:
        """Net deliverable amount before slippage: the last step's output."""
        return self.steps[-1].estimated_output

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """Check if the route can no longer be used."""
        now = now or datetime.now(timezone.utc)
        return now >= self.expires_at

    def seconds_until_expiry(self, now: Optional[datetime] = None) -> float:
        """Seconds until the route expires (negative if expired)."""
        now = now or datetime.now(timezone.utc)
        return (self.expires_at - now).total_seconds()


class QuoteProvider(ABC):
    """Abstract base class for swap and bridge quote providers."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name identifier."""
        pass

    @property
    @abstractmethod
    def step_type(self) -> StepType:
        """Whether this provider swaps on one chain or bridges across chains."""
        pass

    @abstractmethod
    def supports_chain(self, chain_id: str) -> bool:
        """Check if the provider operates on a chain."""
        pass

    def supports_route(self, from_chain: str, to_chain: str) -> bool:
        """Check if the provider can carry value between two chains."""
        if self.step_type == "swap":
            return from_chain == to_chain and self.supports_chain(from_chain)
        return (
            from_chain != to_chain
            and self.supports_chain(from_chain)
            and self.supports_chain(to_chain)
        )

    @abstractmethod
    async def get_quotes(self, request: TradeRequest) -> list[RawQuote]:
        """
        Get quotes for a single hop.

        Args:
            request: The hop to quote

        Returns:
            Zero or more raw quotes

        Raises:
            QuoteProviderError: if the provider cannot be queried
        """
        pass

    async def check_health(self) -> Optional[str]:
        """
        Probe the provider's API.

        Returns:
            None when healthy, or a reason string when degraded

        Raises:
            Exception: when the provider is unreachable
        """
        return None
