"""Intent entities, storage, validation and lifecycle."""

from griffin.intents.models import (
    Intent,
    IntentRequest,
    IntentStatus,
    TransactionInfo,
    TransactionStatus,
    TransactionType,
)
from griffin.intents.service import IntentStateMachine
from griffin.intents.store import InMemoryIntentStore, IntentStore
from griffin.intents.validation import IntentValidator, ValidationResult

__all__ = [
    "InMemoryIntentStore",
    "Intent",
    "IntentRequest",
    "IntentStateMachine",
    "IntentStatus",
    "IntentStore",
    "IntentValidator",
    "TransactionInfo",
    "TransactionStatus",
    "TransactionType",
    "ValidationResult",
]
