"""Intent lifecycle endpoints."""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status

from griffin.api.contracts import CreateIntentRequest, IntentResponse
from griffin.api.dependencies import Services, get_services
from griffin.intents.service import intent_not_found

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/intents", tags=["Intents"])


@router.post("", response_model=IntentResponse, status_code=status.HTTP_201_CREATED)
async def create_intent(
    body: CreateIntentRequest,
    services: Services = Depends(get_services),
):
    """Create a new payment intent."""
    intent = await services.intents.create_intent(body.to_domain())
    return IntentResponse.from_intent(intent)


@router.get("/{intent_id}", response_model=IntentResponse)
async def get_intent(
    intent_id: UUID,
    services: Services = Depends(get_services),
):
    """Get intent status."""
    intent = await services.intents.get_intent(str(intent_id))
    if intent is None:
        raise intent_not_found(str(intent_id))
    return IntentResponse.from_intent(intent, include_completion=True)


@router.put("/{intent_id}/execute", response_model=IntentResponse)
async def execute_intent(
    intent_id: UUID,
    services: Services = Depends(get_services),
):
    """Select the cheapest route for an intent and dispatch it."""
    intent = await services.intents.execute_intent(str(intent_id))
    return IntentResponse.from_intent(intent)


@router.delete("/{intent_id}", status_code=status.HTTP_204_NO_CONTENT)
async def cancel_intent(
    intent_id: UUID,
    services: Services = Depends(get_services),
):
    """Cancel a pending intent."""
    await services.intents.cancel_intent(str(intent_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
