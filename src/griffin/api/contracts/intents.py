"""Intent request/response contracts."""

from datetime import datetime
from typing import Any, Optional, Union

from pydantic import Field, field_validator

from griffin.api.contracts.common import CamelModel, amount_to_str, chain_id_to_str
from griffin.api.contracts.routes import RouteModel
from griffin.intents.models import Intent, IntentRequest, TransactionInfo


class CreateIntentRequest(CamelModel):
    """Signed request to create a payment intent."""

    user_address: str = Field(..., min_length=1, description="Sender account address")
    from_chain: str = Field(..., min_length=1)
    to_chain: str = Field(..., min_length=1)
    from_token: str = Field(..., min_length=1)
    to_token: str = Field(..., min_length=1)
    amount: str = Field(..., description="Amount in token units (decimal string)")
    recipient: str = Field(..., min_length=1, description="Recipient address on the destination chain")
    signature: Optional[Union[str, list[Union[str, int]]]] = Field(
        None, description="EVM hex signature, or Starknet signature felts"
    )
    message: Optional[Union[str, dict[str, Any]]] = Field(
        None, description="Signed message (EVM text, or Starknet message hash)"
    )
    metadata: dict[str, Any] = Field(default_factory=dict)

    @field_validator("from_chain", "to_chain", mode="before")
    @classmethod
    def coerce_chain_id(cls, value: Any) -> Any:
        return chain_id_to_str(value)

    @field_validator("amount", mode="before")
    @classmethod
    def coerce_amount(cls, value: Any) -> Any:
        return amount_to_str(value)

    def to_domain(self) -> IntentRequest:
        return IntentRequest(
            user_address=self.user_address,
            from_chain=self.from_chain,
            to_chain=self.to_chain,
            from_token=self.from_token,
            to_token=self.to_token,
            amount=self.amount,
            recipient=self.recipient,
            signature=self.signature,
            message=self.message,
            metadata=self.metadata,
        )


class TransactionModel(CamelModel):
    id: str
    intent_id: str
    chain_id: str
    hash: Optional[str] = None
    status: str
    type: str
    gas_used: Optional[str] = None
    gas_price: Optional[str] = None
    block_number: Optional[int] = None
    confirmations: int = 0
    created_at: datetime
    submitted_at: Optional[datetime] = None
    confirmed_at: Optional[datetime] = None
    failure_reason: Optional[str] = None

    @classmethod
    def from_transaction(cls, tx: TransactionInfo) -> "TransactionModel":
        return cls(
            id=tx.id,
            intent_id=tx.intent_id,
            chain_id=tx.chain_id,
            hash=tx.hash,
            status=tx.status.value,
            type=tx.type.value,
            gas_used=tx.gas_used,
            gas_price=tx.gas_price,
            block_number=tx.block_number,
            confirmations=tx.confirmations,
            created_at=tx.created_at,
            submitted_at=tx.submitted_at,
            confirmed_at=tx.confirmed_at,
            failure_reason=tx.failure_reason,
        )


class IntentResponse(CamelModel):
    """Intent view returned by the intent endpoints."""

    intent_id: str
    status: str
    created_at: datetime
    estimated_completion: Optional[datetime] = None
    route: Optional[RouteModel] = None
    transactions: list[TransactionModel] = Field(default_factory=list)

    @classmethod
    def from_intent(cls, intent: Intent, include_completion: bool = False) -> "IntentResponse":
        return cls(
            intent_id=intent.id,
            status=intent.status.value,
            created_at=intent.created_at,
            estimated_completion=intent.completed_at if include_completion else None,
            route=RouteModel.from_route(intent.route) if intent.route else None,
            transactions=[TransactionModel.from_transaction(tx) for tx in intent.transactions],
        )
