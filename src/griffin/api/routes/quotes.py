"""Route quote endpoint."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from griffin.api.contracts import QuoteRequestBody, QuoteResponse, RouteModel
from griffin.api.dependencies import Services, get_services
from griffin.errors import AppError, ErrorCode
from griffin.routing.engine import QuoteRequest
from griffin.utils.units import to_decimal

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/quotes", tags=["Quotes"])


@router.post("", response_model=QuoteResponse)
async def get_quotes(
    body: QuoteRequestBody,
    services: Services = Depends(get_services),
):
    """Discover routes for a trade without creating an intent."""
    try:
        amount = to_decimal(body.amount)
    except ValueError:
        amount = None
    if amount is None or amount <= 0:
        raise AppError(
            "Amount must be a finite number greater than zero",
            400,
            ErrorCode.INVALID_AMOUNT,
            {"amount": body.amount},
        )

    routes = await services.engine.find_best_routes(
        QuoteRequest(
            from_chain=body.from_chain,
            to_chain=body.to_chain,
            from_token=body.from_token,
            to_token=body.to_token,
            amount=amount,
            slippage_tolerance=body.slippage_tolerance,
        )
    )

    if not routes:
        raise AppError(
            "No viable routes found",
            404,
            ErrorCode.NO_ROUTES_AVAILABLE,
            {
                "fromChain": body.from_chain,
                "toChain": body.to_chain,
                "fromToken": body.from_token,
                "toToken": body.to_token,
            },
        )

    models = [RouteModel.from_route(r) for r in routes]
    return QuoteResponse(
        routes=models,
        best_route=models[0],
        timestamp=datetime.now(timezone.utc),
        expires_at=min(r.expires_at for r in routes),
    )
