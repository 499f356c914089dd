"""Starknet address validation and signature verification.

Signatures are checked by the signer's own account contract through
``is_valid_signature(hash, signature)``; the service never handles keys.
"""

import logging
import re
from typing import Any

import httpx

from griffin.families.base import AddressValidator, SignatureVerifier

logger = logging.getLogger(__name__)

# Felts are field elements below the Stark prime; addresses are below 2**251
ADDRESS_BOUND = 2**251
_HEX_FELT = re.compile(r"^0x[0-9a-fA-F]{1,64}$")

# starknet_keccak("is_valid_signature")
IS_VALID_SIGNATURE_SELECTOR = "0x28420862938116cb3bbdbedee07451ccc54d4e9412dbef71142ad1980a30941"
# Cairo short string "VALID"; legacy accounts return 1
VALID_MAGIC = 0x56414C4944


def parse_signature(signature: Any) -> list[str]:
    """Normalise a signature into a list of 0x-prefixed hex felts.

    Accepts a list of hex strings or ints, or a comma-separated string.

    Raises:
        ValueError: if the signature is empty or not made of felts
    """
    if isinstance(signature, str):
        parts = [p.strip() for p in signature.split(",") if p.strip()]
    elif isinstance(signature, (list, tuple)):
        parts = list(signature)
    else:
        raise ValueError(f"Unsupported signature type: {type(signature).__name__}")

    if not parts:
        raise ValueError("Signature is empty")

    felts = []
    for part in parts:
        if isinstance(part, int) and not isinstance(part, bool):
            if part < 0:
                raise ValueError("Signature element is negative")
            felts.append(hex(part))
        elif isinstance(part, str) and _HEX_FELT.match(part):
            felts.append(part.lower())
        else:
            raise ValueError(f"Invalid signature element: {part!r}")
    return felts


def parse_message_hash(message: Any) -> str:
    """Extract the hex message hash from a message.

    The message is either the hash itself or an object carrying
    ``messageHash``.

    Raises:
        ValueError: if no hex hash can be found
    """
    if isinstance(message, dict):
        message = message.get("messageHash") or message.get("message_hash")
    if isinstance(message, str) and _HEX_FELT.match(message):
        return message.lower()
    raise ValueError("Message must be a hex message hash")


class StarknetAddressValidator(AddressValidator):
    """Accepts 0x-prefixed hex addresses in [0, 2**251)."""

    def is_valid(self, chain_id: str, address: str) -> bool:
        if not isinstance(address, str) or not _HEX_FELT.match(address):
            return False
        return int(address, 16) < ADDRESS_BOUND


class StarknetRpcSignatureVerifier(SignatureVerifier):
    """Verifies signatures by calling the account contract over JSON-RPC."""

    def __init__(self, rpc_url: str, timeout: float = 15.0):
        self.rpc_url = rpc_url
        self.timeout = timeout

    async def verify(
        self,
        chain_id: str,
        signature: Any,
        message: Any,
        signer_address: str,
    ) -> bool:
        try:
            felts = parse_signature(signature)
            message_hash = parse_message_hash(message)
        except ValueError as e:
            logger.info(f"Rejected malformed Starknet signature: {e}")
            return False

        if not self.rpc_url:
            raise RuntimeError("Starknet RPC URL not configured")

        payload = {
            "jsonrpc": "2.0",
            "method": "starknet_call",
            "params": {
                "request": {
                    "contract_address": signer_address,
                    "entry_point_selector": IS_VALID_SIGNATURE_SELECTOR,
                    "calldata": [message_hash, hex(len(felts)), *felts],
                },
                "block_id": "latest",
            },
            "id": 1,
        }

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(self.rpc_url, json=payload)
            response.raise_for_status()
            data = response.json()

        if "error" in data:
            # Account contracts revert on an invalid signature
            logger.info(f"Signature rejected by account {signer_address}: {data['error']}")
            return False

        result = data.get("result") or []
        if not result:
            return False
        return int(result[0], 16) in (VALID_MAGIC, 1)


class StructuralSignatureVerifier(SignatureVerifier):
    """Dry-run verifier: accepts any well-formed signature and message hash."""

    async def verify(
        self,
        chain_id: str,
        signature: Any,
        message: Any,
        signer_address: str,
    ) -> bool:
        try:
            parse_signature(signature)
            parse_message_hash(message)
        except ValueError as e:
            logger.info(f"Rejected malformed Starknet signature: {e}")
            return False
        return True
