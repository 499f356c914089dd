"""Quote request/response contracts."""

from datetime import datetime
from typing import Any, Optional

from pydantic import Field, field_validator

from griffin.api.contracts.common import CamelModel, amount_to_str, chain_id_to_str
from griffin.api.contracts.routes import RouteModel


class QuoteRequestBody(CamelModel):
    """Request for routes for a hypothetical trade."""

    from_chain: str = Field(..., min_length=1, description="Source chain id")
    to_chain: str = Field(..., min_length=1, description="Destination chain id")
    from_token: str = Field(..., min_length=1, description="Input token address")
    to_token: str = Field(..., min_length=1, description="Output token address")
    amount: str = Field(..., description="Input amount in token units (decimal string)")
    slippage_tolerance: Optional[float] = Field(
        None, ge=0, le=1, description="Max slippage (0.01 = 1%)"
    )

    @field_validator("from_chain", "to_chain", mode="before")
    @classmethod
    def coerce_chain_id(cls, value: Any) -> Any:
        return chain_id_to_str(value)

    @field_validator("amount", mode="before")
    @classmethod
    def coerce_amount(cls, value: Any) -> Any:
        return amount_to_str(value)


class QuoteResponse(CamelModel):
    """Routes sorted by ascending total cost."""

    routes: list[RouteModel]
    best_route: RouteModel
    timestamp: datetime
    expires_at: datetime
