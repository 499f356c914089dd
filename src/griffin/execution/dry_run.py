"""Dry-run execution: simulates dispatch without touching any chain."""

import hashlib
import logging
import time
from decimal import Decimal
from typing import Sequence

from griffin.execution.base import ExecutionAdapter, TransactionHandle
from griffin.routing.base import RouteStep

logger = logging.getLogger(__name__)


class DryRunExecutionAdapter(ExecutionAdapter):
    """Pretends to submit each route step and returns simulated tx hashes."""

    @property
    def name(self) -> str:
        return "dry_run"

    async def execute(
        self,
        intent_id: str,
        steps: Sequence[RouteStep],
        slippage_tolerance: float,
    ) -> list[TransactionHandle]:
        handles = []
        for index, step in enumerate(steps):
            tx_data = f"{intent_id}{index}{step.provider}{step.from_token}{step.to_token}{step.amount}{time.time()}"
            tx_hash = hashlib.sha256(tx_data.encode()).hexdigest()
            handles.append(
                TransactionHandle(
                    chain_id=step.from_chain,
                    type=step.type,
                    hash=f"0x{tx_hash}",
                    submitted=True,
                    details={
                        "provider": step.provider,
                        "min_output": str(self._min_output(step, slippage_tolerance)),
                        "simulated": True,
                    },
                )
            )

        logger.info(f"[DRY RUN] Dispatched {len(handles)} transaction(s) for intent {intent_id}")
        return handles

    @staticmethod
    def _min_output(step: RouteStep, slippage_tolerance: float) -> Decimal:
        return Decimal(step.estimated_output) * (1 - Decimal(str(slippage_tolerance)))
