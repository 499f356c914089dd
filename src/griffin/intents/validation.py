"""Ordered validation rules for intent creation.

Each rule returns a :class:`ValidationResult` instead of raising; the
validator stops at the first failure. Rules run in a fixed order: chains,
amount, addresses, then the signature (the only rule that may do I/O).
"""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from griffin.chains import ChainRegistry
from griffin.errors import AppError, ErrorCode
from griffin.families.base import ChainFamilyRegistry
from griffin.intents.models import IntentRequest
from griffin.utils.units import to_decimal

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of one validation rule."""

    ok: bool
    code: Optional[ErrorCode] = None
    message: str = ""
    details: Optional[dict[str, Any]] = None

    @classmethod
    def success(cls) -> "ValidationResult":
        return cls(ok=True)

    @classmethod
    def failure(
        cls,
        code: ErrorCode,
        message: str,
        details: Optional[dict[str, Any]] = None,
    ) -> "ValidationResult":
        return cls(ok=False, code=code, message=message, details=details)

    def to_error(self, status_code: int = 400) -> AppError:
        """Convert a failure into the error raised at the service boundary."""
        if self.ok or self.code is None:
            raise ValueError("Cannot convert a successful result to an error")
        return AppError(self.message, status_code, self.code, self.details)


Rule = Callable[[IntentRequest], Awaitable[ValidationResult]]

OK = ValidationResult.success()


class IntentValidator:
    """Runs the intent creation rules in order."""

    def __init__(self, chains: ChainRegistry, families: ChainFamilyRegistry):
        self.chains = chains
        self.families = families
        self.rules: list[Rule] = [
            self.check_source_chain,
            self.check_destination_chain,
            self.check_amount,
            self.check_sender,
            self.check_recipient,
            self.check_input_token,
            self.check_output_token,
            self.check_signature,
        ]

    async def validate(self, request: IntentRequest) -> ValidationResult:
        """Get the first failing rule's result, or success."""
        for rule in self.rules:
            result = await rule(request)
            if not result.ok:
                logger.info(f"Intent rejected by {rule.__name__}: {result.code.value} {result.message}")
                return result
        return OK

    # ======================
    # Rules
    # ======================

    async def check_source_chain(self, request: IntentRequest) -> ValidationResult:
        if not self.chains.is_chain_supported(request.from_chain):
            return ValidationResult.failure(
                ErrorCode.UNSUPPORTED_CHAIN,
                "Unsupported source chain",
                {"chainId": request.from_chain},
            )
        return OK

    async def check_destination_chain(self, request: IntentRequest) -> ValidationResult:
        if not self.chains.is_chain_supported(request.to_chain):
            return ValidationResult.failure(
                ErrorCode.UNSUPPORTED_CHAIN,
                "Unsupported destination chain",
                {"chainId": request.to_chain},
            )
        return OK

    async def check_amount(self, request: IntentRequest) -> ValidationResult:
        try:
            amount = to_decimal(request.amount)
        except ValueError:
            amount = None
        if amount is None or amount <= 0:
            return ValidationResult.failure(
                ErrorCode.INVALID_AMOUNT,
                "Amount must be a finite number greater than zero",
                {"amount": str(request.amount)},
            )
        return OK

    async def check_sender(self, request: IntentRequest) -> ValidationResult:
        return self._check_address("userAddress", request.user_address, request.from_chain)

    async def check_recipient(self, request: IntentRequest) -> ValidationResult:
        return self._check_address("recipient", request.recipient, request.to_chain)

    async def check_input_token(self, request: IntentRequest) -> ValidationResult:
        return self._check_address("fromToken", request.from_token, request.from_chain)

    async def check_output_token(self, request: IntentRequest) -> ValidationResult:
        return self._check_address("toToken", request.to_token, request.to_chain)

    async def check_signature(self, request: IntentRequest) -> ValidationResult:
        if not request.signature:
            return ValidationResult.failure(ErrorCode.MISSING_SIGNATURE, "No signature provided")

        valid = await self.families.verify_signature(
            request.from_chain,
            request.signature,
            request.message,
            request.user_address,
        )
        if not valid:
            return ValidationResult.failure(
                ErrorCode.INVALID_SIGNATURE,
                "Invalid signature",
                {"userAddress": request.user_address},
            )
        return OK

    def _check_address(self, field_name: str, address: str, chain_id: str) -> ValidationResult:
        if not self.families.is_valid_address(chain_id, address):
            return ValidationResult.failure(
                ErrorCode.INVALID_ADDRESS,
                f"{field_name} is not a valid address on chain {chain_id}",
                {"field": field_name, "chainId": chain_id},
            )
        return OK
