"""Intent and transaction entities and their status transition tables."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from griffin.routing.base import RouteInfo


class IntentStatus(str, Enum):
    """Status of an intent."""

    PENDING = "pending"          # Created and authorised, waiting for execution
    VERIFIED = "verified"        # Authorisation confirmed out of band
    EXECUTING = "executing"      # Route selected and dispatched
    COMPLETED = "completed"      # Every transaction confirmed
    FAILED = "failed"            # Execution failed at any stage
    CANCELLED = "cancelled"      # Cancelled by the user

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


class TransactionStatus(str, Enum):
    """Status of a dispatched transaction."""

    PENDING = "pending"
    SUBMITTED = "submitted"
    CONFIRMED = "confirmed"
    FAILED = "failed"


class TransactionType(str, Enum):
    SWAP = "swap"
    BRIDGE = "bridge"
    APPROVAL = "approval"


TERMINAL_STATUSES = frozenset({
    IntentStatus.COMPLETED,
    IntentStatus.FAILED,
    IntentStatus.CANCELLED,
})

INTENT_TRANSITIONS: dict[IntentStatus, frozenset[IntentStatus]] = {
    IntentStatus.PENDING: frozenset({IntentStatus.VERIFIED, IntentStatus.EXECUTING, IntentStatus.CANCELLED}),
    IntentStatus.VERIFIED: frozenset({IntentStatus.CANCELLED}),
    IntentStatus.EXECUTING: frozenset({IntentStatus.COMPLETED, IntentStatus.FAILED}),
    IntentStatus.COMPLETED: frozenset(),
    IntentStatus.FAILED: frozenset(),
    IntentStatus.CANCELLED: frozenset(),
}

# Transactions only move forward
TRANSACTION_TRANSITIONS: dict[TransactionStatus, frozenset[TransactionStatus]] = {
    TransactionStatus.PENDING: frozenset({
        TransactionStatus.SUBMITTED,
        TransactionStatus.CONFIRMED,
        TransactionStatus.FAILED,
    }),
    TransactionStatus.SUBMITTED: frozenset({TransactionStatus.CONFIRMED, TransactionStatus.FAILED}),
    TransactionStatus.CONFIRMED: frozenset(),
    TransactionStatus.FAILED: frozenset(),
}


def can_transition(current: IntentStatus, target: IntentStatus) -> bool:
    """Check if the intent transition table allows current -> target."""
    return target in INTENT_TRANSITIONS[current]


@dataclass(frozen=True)
class IntentRequest:
    """A signed request to create an intent."""

    user_address: str
    from_chain: str
    to_chain: str
    from_token: str
    to_token: str
    amount: str
    recipient: str
    signature: Any = None
    message: Any = None
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class TransactionInfo:
    """A transaction submitted on behalf of an intent."""

    id: str
    intent_id: str
    chain_id: str
    type: TransactionType
    status: TransactionStatus
    created_at: datetime
    hash: Optional[str] = None
    gas_used: Optional[str] = None
    gas_price: Optional[str] = None
    block_number: Optional[int] = None
    confirmations: int = 0
    submitted_at: Optional[datetime] = None
    confirmed_at: Optional[datetime] = None
    failure_reason: Optional[str] = None


@dataclass
class Intent:
    """A user's request to move value, owned by the intent store."""

    id: str
    user_address: str
    from_chain: str
    to_chain: str
    from_token: str
    to_token: str
    amount: str
    recipient: str
    status: IntentStatus
    created_at: datetime
    updated_at: datetime
    route: Optional[RouteInfo] = None
    transactions: list[TransactionInfo] = field(default_factory=list)
    completed_at: Optional[datetime] = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def get_transaction(self, tx_id: str) -> Optional[TransactionInfo]:
        for tx in self.transactions:
            if tx.id == tx_id:
                return tx
        return None
