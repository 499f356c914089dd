"""Execution adapter interface.

An adapter receives the ordered steps of a selected route and submits the
transactions that carry them out. Confirmation tracking happens afterwards
through transaction updates on the intent.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional, Sequence

from griffin.routing.base import RouteStep, StepType


@dataclass
class TransactionHandle:
    """What an adapter reports for one dispatched step."""

    chain_id: str
    type: StepType
    hash: Optional[str] = None
    submitted: bool = False
    gas_price: Optional[str] = None
    details: dict = field(default_factory=dict)


class ExecutionError(Exception):
    """Raised when an adapter cannot dispatch a route."""

    pass


class ExecutionAdapter(ABC):
    """Abstract base class for route execution backends."""

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @abstractmethod
    async def execute(
        self,
        intent_id: str,
        steps: Sequence[RouteStep],
        slippage_tolerance: float,
    ) -> list[TransactionHandle]:
        """
        Dispatch a route.

        Args:
            intent_id: Intent the route belongs to
            steps: Route steps, in execution order
            slippage_tolerance: Maximum accepted slippage (0..1)

        Returns:
            One handle per dispatched transaction

        Raises:
            ExecutionError: if the route could not be dispatched
        """
        pass
