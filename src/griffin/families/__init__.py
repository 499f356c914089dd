"""Per-chain-family capabilities: address formats and signature schemes."""

from griffin.families.base import (
    EVM_FAMILY,
    STARKNET_FAMILY,
    AddressValidator,
    ChainFamily,
    ChainFamilyRegistry,
    SignatureVerifier,
    family_tag,
)

__all__ = [
    "EVM_FAMILY",
    "STARKNET_FAMILY",
    "AddressValidator",
    "ChainFamily",
    "ChainFamilyRegistry",
    "SignatureVerifier",
    "family_tag",
]
