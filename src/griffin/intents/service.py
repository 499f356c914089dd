"""Intent lifecycle.

The state machine is the only writer of intents. Status changes go through
the store's per-intent lock, so of two concurrent ``execute`` and ``cancel``
calls exactly one wins and the other sees the resulting status.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Optional, Union

from griffin.errors import AppError, ErrorCode
from griffin.execution.base import ExecutionAdapter, TransactionHandle
from griffin.intents.models import (
    TRANSACTION_TRANSITIONS,
    Intent,
    IntentRequest,
    IntentStatus,
    TransactionInfo,
    TransactionStatus,
    TransactionType,
)
from griffin.intents.store import IntentStore
from griffin.intents.validation import IntentValidator
from griffin.routing.base import RouteInfo
from griffin.routing.engine import QuoteRequest, RouteDiscoveryEngine
from griffin.utils.units import to_decimal

logger = logging.getLogger(__name__)

# Attributes a transaction update may set besides its status
TRANSACTION_FIELDS = frozenset({
    "hash",
    "gas_used",
    "gas_price",
    "block_number",
    "confirmations",
    "failure_reason",
})


def intent_not_found(intent_id: str) -> AppError:
    return AppError("Intent not found", 404, ErrorCode.INTENT_NOT_FOUND, {"intentId": intent_id})


class IntentStateMachine:
    """Creates intents and drives them through their lifecycle."""

    def __init__(
        self,
        store: IntentStore,
        validator: IntentValidator,
        engine: RouteDiscoveryEngine,
        executor: ExecutionAdapter,
        execution_slippage: float = 0.05,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.store = store
        self.validator = validator
        self.engine = engine
        self.executor = executor
        self.execution_slippage = execution_slippage
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    async def create_intent(self, request: IntentRequest) -> Intent:
        """
        Validate and store a new intent in PENDING status.

        Raises:
            AppError: the first failing validation rule; nothing is stored
        """
        result = await self.validator.validate(request)
        if not result.ok:
            raise result.to_error()

        now = self._clock()
        intent = Intent(
            id=str(uuid.uuid4()),
            user_address=request.user_address,
            from_chain=request.from_chain,
            to_chain=request.to_chain,
            from_token=request.from_token,
            to_token=request.to_token,
            amount=request.amount,
            recipient=request.recipient,
            status=IntentStatus.PENDING,
            created_at=now,
            updated_at=now,
            metadata=dict(request.metadata),
        )
        await self.store.put(intent)

        logger.info(
            f"Intent created: {intent.id} user={intent.user_address} "
            f"{intent.from_chain} -> {intent.to_chain}"
        )
        return intent

    async def get_intent(self, intent_id: str) -> Optional[Intent]:
        return await self.store.get(intent_id)

    async def execute_intent(self, intent_id: str) -> Intent:
        """
        Move a PENDING intent to EXECUTING, select the cheapest route and
        dispatch it.

        Raises:
            AppError: INTENT_NOT_FOUND, INVALID_STATUS, NO_ROUTES_AVAILABLE,
                ROUTE_EXPIRED or EXECUTION_FAILED
        """
        swapped, intent = await self.store.compare_and_swap_status(
            intent_id, {IntentStatus.PENDING}, IntentStatus.EXECUTING, at=self._clock()
        )
        if intent is None:
            raise intent_not_found(intent_id)
        if not swapped:
            raise AppError(
                "Intent cannot be executed in current status",
                400,
                ErrorCode.INVALID_STATUS,
                {"intentId": intent_id, "status": intent.status.value},
            )

        logger.info(f"Intent execution started: {intent_id}")

        try:
            route = await self._select_route(intent)
        except AppError as e:
            await self._fail(intent_id, e.message, e.code)
            raise
        except Exception as e:
            await self._fail(intent_id, f"Route discovery failed: {e}", ErrorCode.INTERNAL_SERVER_ERROR)
            raise

        def apply_route(current: Intent) -> None:
            current.route = route
            current.updated_at = self._clock()

        await self.store.update(intent_id, apply_route)
        logger.info(
            f"Intent {intent_id} route selected: {route.id} "
            f"({' -> '.join(s.provider for s in route.steps)}, cost {route.total_cost})"
        )

        try:
            handles = await self.executor.execute(intent_id, route.steps, route.slippage_tolerance)
        except Exception as e:
            logger.exception(f"Execution failed for intent {intent_id}")
            await self._fail(intent_id, str(e), ErrorCode.EXECUTION_FAILED)
            raise AppError(
                "Failed to execute route",
                502,
                ErrorCode.EXECUTION_FAILED,
                {"intentId": intent_id, "reason": str(e)},
            ) from e

        transactions = [self._to_transaction(intent_id, h) for h in handles]

        def record_dispatch(current: Intent) -> None:
            current.transactions.extend(transactions)
            current.metadata["executionAdapter"] = self.executor.name
            current.updated_at = self._clock()

        updated = await self.store.update(intent_id, record_dispatch)
        logger.info(f"Intent {intent_id} dispatched {len(transactions)} transaction(s)")
        return updated

    async def cancel_intent(self, intent_id: str) -> Intent:
        """
        Cancel a PENDING or VERIFIED intent.

        Raises:
            AppError: INTENT_NOT_FOUND, CANNOT_CANCEL (executing) or
                INVALID_STATUS (already terminal)
        """
        swapped, intent = await self.store.compare_and_swap_status(
            intent_id,
            {IntentStatus.PENDING, IntentStatus.VERIFIED},
            IntentStatus.CANCELLED,
            at=self._clock(),
        )
        if intent is None:
            raise intent_not_found(intent_id)
        if not swapped:
            if intent.status == IntentStatus.EXECUTING:
                raise AppError(
                    "Cannot cancel executing intent",
                    400,
                    ErrorCode.CANNOT_CANCEL,
                    {"intentId": intent_id},
                )
            raise AppError(
                "Intent cannot be cancelled in current status",
                400,
                ErrorCode.INVALID_STATUS,
                {"intentId": intent_id, "status": intent.status.value},
            )

        logger.info(f"Intent cancelled: {intent_id}")
        return intent

    async def record_transaction_update(
        self,
        intent_id: str,
        tx_id: str,
        status: Union[TransactionStatus, str],
        **fields: Any,
    ) -> Intent:
        """
        Advance one of an executing intent's transactions.

        When every transaction is confirmed the intent completes; when any
        fails the intent fails.

        Raises:
            AppError: INTENT_NOT_FOUND, NOT_FOUND (unknown transaction) or
                INVALID_STATUS (intent not executing, or status regression)
            TypeError: on an unknown field name
        """
        unknown = set(fields) - TRANSACTION_FIELDS
        if unknown:
            raise TypeError(f"Unknown transaction fields: {', '.join(sorted(unknown))}")
        new_status = TransactionStatus(status)

        def mutate(intent: Intent) -> None:
            if intent.status != IntentStatus.EXECUTING:
                raise AppError(
                    "Transactions can only be updated while executing",
                    400,
                    ErrorCode.INVALID_STATUS,
                    {"intentId": intent_id, "status": intent.status.value},
                )
            tx = intent.get_transaction(tx_id)
            if tx is None:
                raise AppError(
                    "Transaction not found",
                    404,
                    ErrorCode.NOT_FOUND,
                    {"intentId": intent_id, "transactionId": tx_id},
                )
            if not TRANSACTION_TRANSITIONS[tx.status]:
                raise AppError(
                    f"Transaction is already {tx.status.value}",
                    400,
                    ErrorCode.INVALID_STATUS,
                    {"transactionId": tx_id, "status": tx.status.value},
                )
            if new_status != tx.status and new_status not in TRANSACTION_TRANSITIONS[tx.status]:
                raise AppError(
                    f"Transaction cannot move from {tx.status.value} to {new_status.value}",
                    400,
                    ErrorCode.INVALID_STATUS,
                    {"transactionId": tx_id, "status": tx.status.value},
                )

            now = self._clock()
            for name, value in fields.items():
                setattr(tx, name, value)
            if new_status != tx.status:
                tx.status = new_status
                if new_status in (TransactionStatus.SUBMITTED, TransactionStatus.CONFIRMED):
                    tx.submitted_at = tx.submitted_at or now
                if new_status == TransactionStatus.CONFIRMED:
                    tx.confirmed_at = now

            self._settle(intent, now)
            intent.updated_at = now

        updated = await self.store.update(intent_id, mutate)
        if updated is None:
            raise intent_not_found(intent_id)
        return updated

    # ======================
    # Helpers
    # ======================

    async def _select_route(self, intent: Intent) -> RouteInfo:
        """Get the cheapest unexpired route, re-discovering once if it expired."""
        request = QuoteRequest(
            from_chain=intent.from_chain,
            to_chain=intent.to_chain,
            from_token=intent.from_token,
            to_token=intent.to_token,
            amount=to_decimal(intent.amount),
            slippage_tolerance=self.execution_slippage,
        )

        route: Optional[RouteInfo] = None
        for _ in range(2):
            routes = await self.engine.find_best_routes(request)
            if not routes:
                raise AppError(
                    "No routes available for this trade",
                    404,
                    ErrorCode.NO_ROUTES_AVAILABLE,
                    {
                        "fromChain": intent.from_chain,
                        "toChain": intent.to_chain,
                        "fromToken": intent.from_token,
                        "toToken": intent.to_token,
                    },
                )
            route = routes[0]
            if not route.is_expired(self._clock()):
                return route
            logger.warning(f"Route {route.id} for intent {intent.id} expired; re-discovering")

        raise AppError(
            "Selected route has expired",
            409,
            ErrorCode.ROUTE_EXPIRED,
            {"routeId": route.id, "expiresAt": route.expires_at.isoformat()},
        )

    async def _fail(self, intent_id: str, reason: str, code: ErrorCode) -> None:
        def mutate(intent: Intent) -> None:
            if intent.status != IntentStatus.EXECUTING:
                return
            intent.status = IntentStatus.FAILED
            intent.updated_at = self._clock()
            intent.metadata["failureReason"] = reason
            intent.metadata["failureCode"] = code.value

        await self.store.update(intent_id, mutate)
        logger.warning(f"Intent {intent_id} failed: {code.value} {reason}")

    def _to_transaction(self, intent_id: str, handle: TransactionHandle) -> TransactionInfo:
        now = self._clock()
        return TransactionInfo(
            id=str(uuid.uuid4()),
            intent_id=intent_id,
            chain_id=handle.chain_id,
            type=TransactionType(handle.type),
            status=TransactionStatus.SUBMITTED if handle.submitted else TransactionStatus.PENDING,
            created_at=now,
            hash=handle.hash,
            gas_price=handle.gas_price,
            submitted_at=now if handle.submitted else None,
        )

    @staticmethod
    def _settle(intent: Intent, now: datetime) -> None:
        """Finish an intent whose transactions have all resolved."""
        failed = [tx for tx in intent.transactions if tx.status == TransactionStatus.FAILED]
        if failed:
            intent.status = IntentStatus.FAILED
            intent.metadata["failureReason"] = failed[0].failure_reason or f"Transaction {failed[0].id} failed"
            intent.metadata["failureCode"] = ErrorCode.EXECUTION_FAILED.value
        elif intent.transactions and all(
            tx.status == TransactionStatus.CONFIRMED for tx in intent.transactions
        ):
            intent.status = IntentStatus.COMPLETED
            intent.completed_at = now
