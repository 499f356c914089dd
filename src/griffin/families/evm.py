"""EVM address validation and EIP-191 signature verification."""

import logging
import re
from typing import Any

from eth_account import Account
from eth_account.messages import encode_defunct

from griffin.families.base import AddressValidator, SignatureVerifier

logger = logging.getLogger(__name__)

_EVM_ADDRESS = re.compile(r"^0x[0-9a-fA-F]{40}$")


class EvmAddressValidator(AddressValidator):
    """Accepts 0x-prefixed 20-byte hex addresses (checksum not enforced)."""

    def is_valid(self, chain_id: str, address: str) -> bool:
        return isinstance(address, str) and bool(_EVM_ADDRESS.match(address))


class EvmSignatureVerifier(SignatureVerifier):
    """Recovers the signer of a personal_sign (EIP-191) message."""

    async def verify(
        self,
        chain_id: str,
        signature: Any,
        message: Any,
        signer_address: str,
    ) -> bool:
        if not isinstance(signature, str) or not isinstance(message, str):
            return False

        try:
            recovered = Account.recover_message(encode_defunct(text=message), signature=signature)
        except Exception as e:
            # eth_account raises several unrelated types for malformed input
            logger.info(f"Could not recover EVM signer: {type(e).__name__}: {e}")
            return False

        return recovered.lower() == signer_address.lower()
