"""Route contracts shared by quote and intent responses.

Monetary fields are decimal strings in the reference currency.
"""

from datetime import datetime
from typing import Literal, Optional

from griffin.api.contracts.common import CamelModel
from griffin.routing.base import FeeInfo, GasEstimate, RouteInfo, RouteStep


class FeeInfoModel(CamelModel):
    gas_fee: str
    protocol_fee: Optional[str] = None
    bridge_fee: Optional[str] = None
    service_cost: Optional[str] = None
    total: str
    currency: str

    @classmethod
    def from_fees(cls, fees: FeeInfo) -> "FeeInfoModel":
        return cls(
            gas_fee=fees.gas_fee,
            protocol_fee=fees.protocol_fee,
            bridge_fee=fees.bridge_fee,
            service_cost=fees.service_cost,
            total=fees.total,
            currency=fees.currency,
        )


class GasEstimateModel(CamelModel):
    total_cost: str
    currency: str
    gas_limit: Optional[str] = None
    gas_price: Optional[str] = None
    service_cost: Optional[str] = None

    @classmethod
    def from_estimate(cls, estimate: GasEstimate) -> "GasEstimateModel":
        return cls(
            total_cost=estimate.total_cost,
            currency=estimate.currency,
            gas_limit=estimate.gas_limit,
            gas_price=estimate.gas_price,
            service_cost=estimate.service_cost,
        )


class RouteStepModel(CamelModel):
    type: Literal["swap", "bridge"]
    provider: str
    from_chain: str
    to_chain: str
    from_token: str
    to_token: str
    amount: str
    estimated_output: str
    fees: FeeInfoModel

    @classmethod
    def from_step(cls, step: RouteStep) -> "RouteStepModel":
        return cls(
            type=step.type,
            provider=step.provider,
            from_chain=step.from_chain,
            to_chain=step.to_chain,
            from_token=step.from_token,
            to_token=step.to_token,
            amount=step.amount,
            estimated_output=step.estimated_output,
            fees=FeeInfoModel.from_fees(step.fees),
        )


class RouteModel(CamelModel):
    id: str
    provider_quote_id: Optional[str] = None
    steps: list[RouteStepModel]
    total_cost: str
    estimated_output: str
    estimated_time: int
    slippage_tolerance: float
    gas_estimate: GasEstimateModel
    created_at: datetime
    expires_at: datetime

    @classmethod
    def from_route(cls, route: RouteInfo) -> "RouteModel":
        return cls(
            id=route.id,
            provider_quote_id=route.provider_quote_id,
            steps=[RouteStepModel.from_step(s) for s in route.steps],
            total_cost=route.total_cost,
            estimated_output=route.estimated_output,
            estimated_time=route.estimated_time,
            slippage_tolerance=route.slippage_tolerance,
            gas_estimate=GasEstimateModel.from_estimate(route.gas_estimate),
            created_at=route.created_at,
            expires_at=route.expires_at,
        )
