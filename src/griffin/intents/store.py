"""Intent storage.

The store is the single owner of intent entities. Every mutation goes
through :meth:`IntentStore.update`, which serialises writers per intent id,
so a status check and the transition it guards happen atomically.
"""

import copy
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Callable, Collection, Optional

from griffin.intents.models import Intent, IntentStatus
from griffin.utils.locks import KeyedLock

logger = logging.getLogger(__name__)

Mutator = Callable[[Intent], None]


class IntentStore(ABC):
    """Abstract store of intents keyed by id."""

    @abstractmethod
    async def get(self, intent_id: str) -> Optional[Intent]:
        """Get a snapshot of an intent, or None if absent."""
        pass

    @abstractmethod
    async def put(self, intent: Intent) -> None:
        """Insert a new intent.

        Raises:
            ValueError: if an intent with the same id already exists
        """
        pass

    @abstractmethod
    async def update(self, intent_id: str, mutate: Mutator) -> Optional[Intent]:
        """Apply ``mutate`` to an intent under its lock.

        The mutator works on a copy; if it raises, nothing is written and the
        exception propagates.

        Returns:
            Snapshot of the updated intent, or None if absent
        """
        pass

    @abstractmethod
    async def ping(self) -> None:
        """Raise if the store is unusable."""
        pass

    async def compare_and_swap_status(
        self,
        intent_id: str,
        expected: Collection[IntentStatus],
        new_status: IntentStatus,
        at: Optional[datetime] = None,
    ) -> tuple[bool, Optional[Intent]]:
        """Set ``new_status`` only if the current status is in ``expected``.

        ``at``, when given, becomes the intent's ``updated_at``.

        Returns:
            (swapped, snapshot after the call). The snapshot is None if the
            intent does not exist.
        """
        swapped = False

        def mutate(intent: Intent) -> None:
            nonlocal swapped
            if intent.status in expected:
                intent.status = new_status
                if at is not None:
                    intent.updated_at = at
                swapped = True

        snapshot = await self.update(intent_id, mutate)
        return swapped, snapshot


class InMemoryIntentStore(IntentStore):
    """Process-local store; intents live as long as the process."""

    def __init__(self, lock_timeout: Optional[float] = 30.0):
        self._intents: dict[str, Intent] = {}
        self._locks = KeyedLock(timeout=lock_timeout)

    async def get(self, intent_id: str) -> Optional[Intent]:
        intent = self._intents.get(intent_id)
        return copy.deepcopy(intent) if intent else None

    async def put(self, intent: Intent) -> None:
        async with self._locks.hold(intent.id, "put"):
            if intent.id in self._intents:
                raise ValueError(f"Intent {intent.id} already exists")
            self._intents[intent.id] = copy.deepcopy(intent)
        logger.debug(f"Stored intent {intent.id}")

    async def update(self, intent_id: str, mutate: Mutator) -> Optional[Intent]:
        async with self._locks.hold(intent_id, "update"):
            current = self._intents.get(intent_id)
            if current is None:
                return None
            working = copy.deepcopy(current)
            mutate(working)
            self._intents[intent_id] = working
            return copy.deepcopy(working)

    async def ping(self) -> None:
        return None

    def __len__(self) -> int:
        return len(self._intents)
