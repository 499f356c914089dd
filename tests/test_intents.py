"""Tests for intent validation, storage and the lifecycle state machine."""

import asyncio
import dataclasses
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from unittest.mock import AsyncMock, Mock

import pytest
from eth_account import Account

from griffin.api.dependencies import build_services
from griffin.errors import AppError, ErrorCode
from griffin.execution import DryRunExecutionAdapter, ExecutionAdapter, ExecutionError
from griffin.intents import InMemoryIntentStore, IntentStateMachine
from griffin.intents.models import (
    Intent,
    IntentRequest,
    IntentStatus,
    TransactionStatus,
    can_transition,
)
from griffin.routing.base import FeeInfo, GasEstimate, RouteInfo, RouteStep

from factories import (
    ETH_USDC,
    POLYGON_WETH,
    STARKNET,
    STARKNET_MESSAGE_HASH,
    STARKNET_RECIPIENT,
    STARKNET_SIGNATURE,
    STARKNET_STRK,
    STARKNET_USDC,
    STARKNET_USER,
    make_settings,
    sign_evm,
)


def starknet_request(**overrides) -> IntentRequest:
    request = IntentRequest(
        user_address=STARKNET_USER,
        from_chain=STARKNET,
        to_chain=STARKNET,
        from_token=STARKNET_USDC,
        to_token=STARKNET_STRK,
        amount="100",
        recipient=STARKNET_RECIPIENT,
        signature=STARKNET_SIGNATURE,
        message=STARKNET_MESSAGE_HASH,
    )
    return dataclasses.replace(request, **overrides)


def evm_request(message="Pay 100 USDC to Polygon", **overrides) -> IntentRequest:
    address, signature = sign_evm(message)
    request = IntentRequest(
        user_address=address,
        from_chain="1",
        to_chain="137",
        from_token=ETH_USDC,
        to_token=POLYGON_WETH,
        amount="100",
        recipient=address,
        signature=signature,
        message=message,
    )
    return dataclasses.replace(request, **overrides)


def make_route(created_at: datetime, lifetime: timedelta = timedelta(minutes=5)) -> RouteInfo:
    step = RouteStep(
        type="swap",
        provider="dex",
        from_chain=STARKNET,
        to_chain=STARKNET,
        from_token=STARKNET_USDC,
        to_token=STARKNET_STRK,
        amount="100",
        estimated_output="199",
        fees=FeeInfo(gas_fee="0.02", total="0.02", currency="USD"),
    )
    return RouteInfo(
        id=f"route-{created_at.timestamp()}",
        steps=(step,),
        total_cost="0.02",
        estimated_time=30,
        slippage_tolerance=0.05,
        gas_estimate=GasEstimate(total_cost="0.02", currency="USD"),
        created_at=created_at,
        expires_at=created_at + lifetime,
    )


class FailingExecutor(ExecutionAdapter):
    @property
    def name(self) -> str:
        return "failing"

    async def execute(self, intent_id, steps, slippage_tolerance):
        raise ExecutionError("nonce too low")


@pytest.fixture
def machine(services) -> IntentStateMachine:
    return services.intents


class TestStatusTables:
    def test_allowed_transitions(self):
        assert can_transition(IntentStatus.PENDING, IntentStatus.EXECUTING)
        assert can_transition(IntentStatus.PENDING, IntentStatus.CANCELLED)
        assert can_transition(IntentStatus.VERIFIED, IntentStatus.CANCELLED)
        assert can_transition(IntentStatus.EXECUTING, IntentStatus.COMPLETED)

    def test_forbidden_transitions(self):
        assert not can_transition(IntentStatus.VERIFIED, IntentStatus.EXECUTING)
        assert not can_transition(IntentStatus.EXECUTING, IntentStatus.CANCELLED)
        assert not can_transition(IntentStatus.CANCELLED, IntentStatus.PENDING)

    def test_terminal(self):
        assert IntentStatus.COMPLETED.is_terminal
        assert IntentStatus.CANCELLED.is_terminal
        assert not IntentStatus.EXECUTING.is_terminal


class TestInMemoryIntentStore:
    """Tests for InMemoryIntentStore."""

    def _intent(self, intent_id="intent-1") -> Intent:
        now = datetime.now(timezone.utc)
        return Intent(
            id=intent_id,
            user_address=STARKNET_USER,
            from_chain=STARKNET,
            to_chain=STARKNET,
            from_token=STARKNET_USDC,
            to_token=STARKNET_STRK,
            amount="1",
            recipient=STARKNET_RECIPIENT,
            status=IntentStatus.PENDING,
            created_at=now,
            updated_at=now,
        )

    @pytest.mark.asyncio
    async def test_put_and_get(self):
        store = InMemoryIntentStore()
        await store.put(self._intent())

        assert (await store.get("intent-1")).status == IntentStatus.PENDING
        assert await store.get("missing") is None
        assert len(store) == 1

    @pytest.mark.asyncio
    async def test_duplicate_id(self):
        store = InMemoryIntentStore()
        await store.put(self._intent())

        with pytest.raises(ValueError):
            await store.put(self._intent())

    @pytest.mark.asyncio
    async def test_snapshots_are_copies(self):
        store = InMemoryIntentStore()
        await store.put(self._intent())

        snapshot = await store.get("intent-1")
        snapshot.status = IntentStatus.COMPLETED
        snapshot.metadata["tampered"] = True

        stored = await store.get("intent-1")
        assert stored.status == IntentStatus.PENDING
        assert stored.metadata == {}

    @pytest.mark.asyncio
    async def test_failed_mutation_is_not_written(self):
        store = InMemoryIntentStore()
        await store.put(self._intent())

        def mutate(intent):
            intent.status = IntentStatus.FAILED
            raise RuntimeError("abort")

        with pytest.raises(RuntimeError):
            await store.update("intent-1", mutate)

        assert (await store.get("intent-1")).status == IntentStatus.PENDING

    @pytest.mark.asyncio
    async def test_compare_and_swap(self):
        store = InMemoryIntentStore()
        await store.put(self._intent())
        later = datetime.now(timezone.utc) + timedelta(seconds=5)

        swapped, intent = await store.compare_and_swap_status(
            "intent-1", {IntentStatus.PENDING}, IntentStatus.EXECUTING, at=later
        )
        assert swapped is True
        assert intent.status == IntentStatus.EXECUTING
        assert intent.updated_at == later

        swapped, intent = await store.compare_and_swap_status(
            "intent-1", {IntentStatus.PENDING}, IntentStatus.CANCELLED
        )
        assert swapped is False
        assert intent.status == IntentStatus.EXECUTING

    @pytest.mark.asyncio
    async def test_compare_and_swap_missing(self):
        store = InMemoryIntentStore()

        assert await store.compare_and_swap_status(
            "missing", {IntentStatus.PENDING}, IntentStatus.EXECUTING
        ) == (False, None)


class TestCreateIntent:
    """Validation rules run in order and stop at the first failure."""

    @pytest.mark.asyncio
    async def test_creates_pending_intent(self, machine, services):
        intent = await machine.create_intent(starknet_request(metadata={"orderId": "A-1"}))

        assert intent.status == IntentStatus.PENDING
        assert intent.created_at == intent.updated_at
        assert intent.route is None
        assert intent.transactions == []
        assert intent.metadata == {"orderId": "A-1"}
        assert (await services.store.get(intent.id)).status == IntentStatus.PENDING

    @pytest.mark.asyncio
    async def test_ids_are_unique(self, machine):
        first = await machine.create_intent(starknet_request())
        second = await machine.create_intent(starknet_request())

        assert first.id != second.id

    @pytest.mark.asyncio
    async def test_chain_checked_before_amount(self, machine):
        with pytest.raises(AppError) as exc_info:
            await machine.create_intent(starknet_request(from_chain="solana:mainnet", amount="abc"))

        assert exc_info.value.code == ErrorCode.UNSUPPORTED_CHAIN
        assert exc_info.value.status_code == 400
        assert exc_info.value.details == {"chainId": "solana:mainnet"}

    @pytest.mark.asyncio
    async def test_unsupported_destination(self, machine):
        with pytest.raises(AppError) as exc_info:
            await machine.create_intent(starknet_request(to_chain="56"))

        assert exc_info.value.code == ErrorCode.UNSUPPORTED_CHAIN
        assert exc_info.value.details == {"chainId": "56"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", ["0", "-5", "abc", "", "NaN", "Infinity"])
    async def test_invalid_amount(self, machine, amount):
        with pytest.raises(AppError) as exc_info:
            await machine.create_intent(starknet_request(amount=amount))

        assert exc_info.value.code == ErrorCode.INVALID_AMOUNT

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "field_name, overrides, chain_id",
        [
            ("userAddress", {"user_address": "0xzz"}, STARKNET),
            ("recipient", {"recipient": "0x" + "f" * 64}, STARKNET),
            ("fromToken", {"from_token": "usdc"}, STARKNET),
            ("toToken", {"to_token": "0x"}, STARKNET),
        ],
    )
    async def test_invalid_address(self, machine, field_name, overrides, chain_id):
        with pytest.raises(AppError) as exc_info:
            await machine.create_intent(starknet_request(**overrides))

        assert exc_info.value.code == ErrorCode.INVALID_ADDRESS
        assert exc_info.value.details == {"field": field_name, "chainId": chain_id}

    @pytest.mark.asyncio
    async def test_recipient_checked_on_destination_family(self, machine):
        # A Starknet address is not a valid Ethereum recipient
        with pytest.raises(AppError) as exc_info:
            await machine.create_intent(starknet_request(to_chain="1"))

        assert exc_info.value.code == ErrorCode.INVALID_ADDRESS
        assert exc_info.value.details == {"field": "recipient", "chainId": "1"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("signature", [None, "", []])
    async def test_missing_signature(self, machine, signature):
        with pytest.raises(AppError) as exc_info:
            await machine.create_intent(starknet_request(signature=signature))

        assert exc_info.value.code == ErrorCode.MISSING_SIGNATURE

    @pytest.mark.asyncio
    async def test_malformed_signature(self, machine, services):
        with pytest.raises(AppError) as exc_info:
            await machine.create_intent(starknet_request(signature=["not-a-felt"]))

        assert exc_info.value.code == ErrorCode.INVALID_SIGNATURE
        assert exc_info.value.status_code == 400
        assert len(services.store) == 0

    @pytest.mark.asyncio
    async def test_evm_signature(self, machine):
        intent = await machine.create_intent(evm_request())

        assert intent.status == IntentStatus.PENDING
        assert intent.from_chain == "1"

    @pytest.mark.asyncio
    async def test_evm_signature_by_someone_else(self, machine):
        impostor = Account.create().address

        with pytest.raises(AppError) as exc_info:
            await machine.create_intent(evm_request(user_address=impostor))

        assert exc_info.value.code == ErrorCode.INVALID_SIGNATURE

    @pytest.mark.asyncio
    async def test_nothing_stored_on_failure(self, machine, services):
        with pytest.raises(AppError):
            await machine.create_intent(starknet_request(amount="0"))

        assert len(services.store) == 0


class TestExecuteIntent:
    """Tests for execute_intent."""

    @pytest.mark.asyncio
    async def test_execute_same_chain(self, machine):
        intent = await machine.create_intent(starknet_request())

        executed = await machine.execute_intent(intent.id)

        assert executed.status == IntentStatus.EXECUTING
        assert executed.route is not None
        assert [s.type for s in executed.route.steps] == ["swap"]
        assert executed.route.slippage_tolerance == 0.05
        assert len(executed.transactions) == 1
        tx = executed.transactions[0]
        assert tx.status == TransactionStatus.SUBMITTED
        assert tx.hash.startswith("0x")
        assert tx.chain_id == STARKNET
        assert tx.submitted_at is not None
        assert executed.metadata["executionAdapter"] == "dry_run"
        assert executed.updated_at >= intent.updated_at

    @pytest.mark.asyncio
    async def test_execute_cross_chain(self, machine):
        intent = await machine.create_intent(evm_request())

        executed = await machine.execute_intent(intent.id)

        assert [s.type for s in executed.route.steps] == ["swap", "bridge"]
        assert [tx.type.value for tx in executed.transactions] == ["swap", "bridge"]

    @pytest.mark.asyncio
    async def test_execute_twice(self, machine):
        intent = await machine.create_intent(starknet_request())
        await machine.execute_intent(intent.id)

        with pytest.raises(AppError) as exc_info:
            await machine.execute_intent(intent.id)

        assert exc_info.value.code == ErrorCode.INVALID_STATUS
        assert exc_info.value.details["status"] == "executing"

    @pytest.mark.asyncio
    async def test_execute_cancelled(self, machine):
        intent = await machine.create_intent(starknet_request())
        await machine.cancel_intent(intent.id)

        with pytest.raises(AppError) as exc_info:
            await machine.execute_intent(intent.id)

        assert exc_info.value.code == ErrorCode.INVALID_STATUS
        assert (await machine.get_intent(intent.id)).status == IntentStatus.CANCELLED

    @pytest.mark.asyncio
    async def test_execute_verified_is_rejected(self, machine, services):
        intent = await machine.create_intent(starknet_request())

        def verify(current):
            current.status = IntentStatus.VERIFIED

        await services.store.update(intent.id, verify)

        with pytest.raises(AppError) as exc_info:
            await machine.execute_intent(intent.id)
        assert exc_info.value.code == ErrorCode.INVALID_STATUS

    @pytest.mark.asyncio
    async def test_execute_unknown(self, machine):
        with pytest.raises(AppError) as exc_info:
            await machine.execute_intent("00000000-0000-0000-0000-000000000000")

        assert exc_info.value.code == ErrorCode.INTENT_NOT_FOUND
        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_no_routes_fails_intent(self, machine):
        # Tokens outside the catalog have no simulated price
        message = "Swap on Arbitrum"
        address, signature = sign_evm(message)
        intent = await machine.create_intent(IntentRequest(
            user_address=address,
            from_chain="42161",
            to_chain="42161",
            from_token="0x" + "11" * 20,
            to_token="0x" + "22" * 20,
            amount="5",
            recipient=address,
            signature=signature,
            message=message,
        ))

        with pytest.raises(AppError) as exc_info:
            await machine.execute_intent(intent.id)

        assert exc_info.value.code == ErrorCode.NO_ROUTES_AVAILABLE
        failed = await machine.get_intent(intent.id)
        assert failed.status == IntentStatus.FAILED
        assert failed.metadata["failureCode"] == "NO_ROUTES_AVAILABLE"

    @pytest.mark.asyncio
    async def test_executor_failure(self):
        services = build_services(make_settings(), executor=FailingExecutor())
        intent = await services.intents.create_intent(starknet_request())

        with pytest.raises(AppError) as exc_info:
            await services.intents.execute_intent(intent.id)

        assert exc_info.value.code == ErrorCode.EXECUTION_FAILED
        assert exc_info.value.status_code == 502
        failed = await services.intents.get_intent(intent.id)
        assert failed.status == IntentStatus.FAILED
        assert failed.metadata["failureReason"] == "nonce too low"
        assert failed.route is not None
        assert failed.transactions == []


class TestRouteExpiry:
    """An expired route is re-discovered once before giving up."""

    def _machine(self, services, engine, now):
        return IntentStateMachine(
            store=services.store,
            validator=services.intents.validator,
            engine=engine,
            executor=DryRunExecutionAdapter(),
            clock=lambda: now,
        )

    @pytest.mark.asyncio
    async def test_rediscovers_once(self, services):
        now = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)
        stale = make_route(now - timedelta(minutes=10))
        fresh = make_route(now)
        engine = Mock(find_best_routes=AsyncMock(side_effect=[[stale], [fresh]]))
        machine = self._machine(services, engine, now)
        intent = await machine.create_intent(starknet_request())

        executed = await machine.execute_intent(intent.id)

        assert executed.route.id == fresh.id
        assert engine.find_best_routes.await_count == 2
        request = engine.find_best_routes.await_args.args[0]
        assert request.amount == Decimal("100")
        assert request.slippage_tolerance == 0.05

    @pytest.mark.asyncio
    async def test_gives_up_when_still_expired(self, services):
        now = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)
        stale = make_route(now - timedelta(minutes=10))
        engine = Mock(find_best_routes=AsyncMock(return_value=[stale]))
        machine = self._machine(services, engine, now)
        intent = await machine.create_intent(starknet_request())

        with pytest.raises(AppError) as exc_info:
            await machine.execute_intent(intent.id)

        assert exc_info.value.code == ErrorCode.ROUTE_EXPIRED
        assert exc_info.value.status_code == 409
        assert engine.find_best_routes.await_count == 2
        assert (await machine.get_intent(intent.id)).status == IntentStatus.FAILED

    @pytest.mark.asyncio
    async def test_discovery_crash_fails_intent(self, services):
        now = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)
        engine = Mock(find_best_routes=AsyncMock(side_effect=RuntimeError("engine down")))
        machine = self._machine(services, engine, now)
        intent = await machine.create_intent(starknet_request())

        with pytest.raises(RuntimeError):
            await machine.execute_intent(intent.id)

        failed = await machine.get_intent(intent.id)
        assert failed.status == IntentStatus.FAILED
        assert failed.metadata["failureCode"] == "INTERNAL_SERVER_ERROR"


class TestCancelIntent:
    """Tests for cancel_intent."""

    @pytest.mark.asyncio
    async def test_cancel_pending(self, machine):
        intent = await machine.create_intent(starknet_request())

        cancelled = await machine.cancel_intent(intent.id)

        assert cancelled.status == IntentStatus.CANCELLED
        assert (await machine.get_intent(intent.id)).status == IntentStatus.CANCELLED

    @pytest.mark.asyncio
    async def test_cancel_verified(self, machine, services):
        intent = await machine.create_intent(starknet_request())

        def verify(current):
            current.status = IntentStatus.VERIFIED

        await services.store.update(intent.id, verify)

        assert (await machine.cancel_intent(intent.id)).status == IntentStatus.CANCELLED

    @pytest.mark.asyncio
    async def test_cancel_executing(self, machine):
        intent = await machine.create_intent(starknet_request())
        await machine.execute_intent(intent.id)

        with pytest.raises(AppError) as exc_info:
            await machine.cancel_intent(intent.id)

        assert exc_info.value.code == ErrorCode.CANNOT_CANCEL
        assert exc_info.value.status_code == 400
        assert (await machine.get_intent(intent.id)).status == IntentStatus.EXECUTING

    @pytest.mark.asyncio
    async def test_cancel_twice(self, machine):
        intent = await machine.create_intent(starknet_request())
        await machine.cancel_intent(intent.id)

        with pytest.raises(AppError) as exc_info:
            await machine.cancel_intent(intent.id)

        assert exc_info.value.code == ErrorCode.INVALID_STATUS

    @pytest.mark.asyncio
    async def test_cancel_unknown(self, machine):
        with pytest.raises(AppError) as exc_info:
            await machine.cancel_intent("missing")

        assert exc_info.value.code == ErrorCode.INTENT_NOT_FOUND


class TestConcurrency:
    """Concurrent lifecycle calls on one intent: exactly one wins."""

    @pytest.mark.asyncio
    async def test_execute_cancel_race(self, machine):
        for _ in range(10):
            intent = await machine.create_intent(starknet_request())

            results = await asyncio.gather(
                machine.execute_intent(intent.id),
                machine.cancel_intent(intent.id),
                return_exceptions=True,
            )

            winners = [r for r in results if not isinstance(r, Exception)]
            losers = [r for r in results if isinstance(r, AppError)]
            assert len(winners) == 1
            assert len(losers) == 1

            final = await machine.get_intent(intent.id)
            if isinstance(results[0], Exception):
                assert final.status == IntentStatus.CANCELLED
                assert results[0].code == ErrorCode.INVALID_STATUS
            else:
                assert final.status == IntentStatus.EXECUTING
                assert results[1].code == ErrorCode.CANNOT_CANCEL

    @pytest.mark.asyncio
    async def test_concurrent_executes(self, machine):
        intent = await machine.create_intent(starknet_request())

        results = await asyncio.gather(
            *(machine.execute_intent(intent.id) for _ in range(5)),
            return_exceptions=True,
        )

        succeeded = [r for r in results if isinstance(r, Intent)]
        assert len(succeeded) == 1
        assert all(
            r.code == ErrorCode.INVALID_STATUS for r in results if isinstance(r, AppError)
        )
        final = await machine.get_intent(intent.id)
        assert len(final.transactions) == 1


class TestTransactionUpdates:
    """Transaction confirmations settle the intent."""

    @pytest.mark.asyncio
    async def test_confirmation_completes_intent(self, machine):
        intent = await machine.create_intent(starknet_request())
        executed = await machine.execute_intent(intent.id)
        tx = executed.transactions[0]

        updated = await machine.record_transaction_update(
            intent.id, tx.id, "confirmed", block_number=123456, confirmations=3
        )

        assert updated.status == IntentStatus.COMPLETED
        assert updated.completed_at is not None
        confirmed = updated.get_transaction(tx.id)
        assert confirmed.status == TransactionStatus.CONFIRMED
        assert confirmed.confirmed_at is not None
        assert confirmed.block_number == 123456
        assert confirmed.hash == tx.hash

    @pytest.mark.asyncio
    async def test_all_transactions_must_confirm(self, machine):
        intent = await machine.create_intent(evm_request())
        executed = await machine.execute_intent(intent.id)
        first, second = executed.transactions

        updated = await machine.record_transaction_update(intent.id, first.id, TransactionStatus.CONFIRMED)
        assert updated.status == IntentStatus.EXECUTING

        updated = await machine.record_transaction_update(intent.id, second.id, TransactionStatus.CONFIRMED)
        assert updated.status == IntentStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_failed_transaction_fails_intent(self, machine):
        intent = await machine.create_intent(starknet_request())
        executed = await machine.execute_intent(intent.id)

        updated = await machine.record_transaction_update(
            intent.id, executed.transactions[0].id, "failed", failure_reason="reverted"
        )

        assert updated.status == IntentStatus.FAILED
        assert updated.metadata["failureReason"] == "reverted"
        assert updated.metadata["failureCode"] == "EXECUTION_FAILED"
        assert updated.completed_at is None

    @pytest.mark.asyncio
    async def test_status_regression(self, machine):
        intent = await machine.create_intent(evm_request())
        executed = await machine.execute_intent(intent.id)
        first = executed.transactions[0]
        await machine.record_transaction_update(intent.id, first.id, "confirmed")

        with pytest.raises(AppError) as exc_info:
            await machine.record_transaction_update(intent.id, first.id, "submitted")

        assert exc_info.value.code == ErrorCode.INVALID_STATUS
        still = await machine.get_intent(intent.id)
        assert still.get_transaction(first.id).status == TransactionStatus.CONFIRMED

    @pytest.mark.asyncio
    async def test_confirmed_transaction_is_frozen(self, machine):
        intent = await machine.create_intent(evm_request())
        executed = await machine.execute_intent(intent.id)
        first, second = executed.transactions
        confirmed = await machine.record_transaction_update(
            intent.id, first.id, "confirmed", block_number=100
        )
        assert confirmed.status == IntentStatus.EXECUTING

        with pytest.raises(AppError) as exc_info:
            await machine.record_transaction_update(
                intent.id, first.id, "confirmed", hash="0xdead", block_number=1
            )

        assert exc_info.value.code == ErrorCode.INVALID_STATUS
        still = (await machine.get_intent(intent.id)).get_transaction(first.id)
        assert still.hash == first.hash
        assert still.block_number == 100
        assert (await machine.get_intent(intent.id)).get_transaction(second.id).status == second.status

    @pytest.mark.asyncio
    async def test_submitted_transaction_accepts_details(self, machine):
        intent = await machine.create_intent(evm_request())
        executed = await machine.execute_intent(intent.id)
        first = executed.transactions[0]

        updated = await machine.record_transaction_update(intent.id, first.id, "submitted", confirmations=1)

        assert updated.get_transaction(first.id).confirmations == 1
        assert updated.status == IntentStatus.EXECUTING

    @pytest.mark.asyncio
    async def test_unknown_transaction(self, machine):
        intent = await machine.create_intent(starknet_request())
        await machine.execute_intent(intent.id)

        with pytest.raises(AppError) as exc_info:
            await machine.record_transaction_update(intent.id, "nope", "confirmed")

        assert exc_info.value.code == ErrorCode.NOT_FOUND
        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_intent_not_executing(self, machine):
        intent = await machine.create_intent(starknet_request())

        with pytest.raises(AppError) as exc_info:
            await machine.record_transaction_update(intent.id, "tx", "confirmed")

        assert exc_info.value.code == ErrorCode.INVALID_STATUS

    @pytest.mark.asyncio
    async def test_unknown_intent(self, machine):
        with pytest.raises(AppError) as exc_info:
            await machine.record_transaction_update("missing", "tx", "confirmed")

        assert exc_info.value.code == ErrorCode.INTENT_NOT_FOUND

    @pytest.mark.asyncio
    async def test_unknown_field(self, machine):
        with pytest.raises(TypeError):
            await machine.record_transaction_update("missing", "tx", "confirmed", colour="red")
