"""Chain-family capability registry.

A chain family groups chains that share an address format and a signing
scheme. Each family is registered once at startup with its address
validator, signature verifier and swap quote providers; business logic asks
the registry instead of matching chain-id prefixes itself.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional

from griffin.chains import EVM_FAMILY, STARKNET_FAMILY, family_tag
from griffin.routing.base import QuoteProvider

logger = logging.getLogger(__name__)

__all__ = [
    "EVM_FAMILY",
    "STARKNET_FAMILY",
    "AddressValidator",
    "ChainFamily",
    "ChainFamilyRegistry",
    "SignatureVerifier",
    "family_tag",
]


class AddressValidator(ABC):
    """Validates account and token addresses for one chain family."""

    @abstractmethod
    def is_valid(self, chain_id: str, address: str) -> bool:
        pass


class SignatureVerifier(ABC):
    """Verifies a signed authorization message for one chain family."""

    @abstractmethod
    async def verify(
        self,
        chain_id: str,
        signature: Any,
        message: Any,
        signer_address: str,
    ) -> bool:
        """
        Check that ``signer_address`` signed ``message``.

        Returns:
            True if the signature is valid, False otherwise
        """
        pass


@dataclass
class ChainFamily:
    """Capabilities of one chain family."""

    tag: str
    address_validator: AddressValidator
    signature_verifier: SignatureVerifier
    swap_providers: list[QuoteProvider] = field(default_factory=list)


class ChainFamilyRegistry:
    """Maps a family tag to its capabilities."""

    def __init__(self, families: Optional[list[ChainFamily]] = None):
        self._families: dict[str, ChainFamily] = {}
        for family in families or []:
            self.register(family)

    def register(self, family: ChainFamily) -> None:
        self._families[family.tag] = family
        logger.debug(
            f"Registered chain family {family.tag} with "
            f"{len(family.swap_providers)} swap provider(s)"
        )

    def resolve(self, chain_id: str) -> Optional[ChainFamily]:
        """Get the family for a chain id, or None if unknown."""
        return self._families.get(family_tag(chain_id))

    @property
    def families(self) -> list[ChainFamily]:
        return list(self._families.values())

    def is_valid_address(self, chain_id: str, address: str) -> bool:
        family = self.resolve(chain_id)
        if family is None:
            return False
        return family.address_validator.is_valid(chain_id, address)

    async def verify_signature(
        self,
        chain_id: str,
        signature: Any,
        message: Any,
        signer_address: str,
    ) -> bool:
        family = self.resolve(chain_id)
        if family is None:
            return False
        return await family.signature_verifier.verify(chain_id, signature, message, signer_address)

    def swap_providers(self, chain_id: str) -> list[QuoteProvider]:
        """Get the swap providers for a chain (empty if the family is unknown)."""
        family = self.resolve(chain_id)
        if family is None:
            return []
        return [p for p in family.swap_providers if p.supports_chain(chain_id)]
