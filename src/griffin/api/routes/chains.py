"""Chain and token catalog endpoints."""

from fastapi import APIRouter, Depends

from griffin.api.contracts import ChainListResponse, ChainModel, TokenListResponse, TokenModel
from griffin.api.dependencies import Services, get_services
from griffin.errors import AppError, ErrorCode

router = APIRouter(prefix="/chains", tags=["Chains"])


@router.get("", response_model=ChainListResponse)
async def list_chains(services: Services = Depends(get_services)):
    """Get supported chains."""
    return ChainListResponse(
        chains=[ChainModel.from_chain(c) for c in services.chains.get_supported_chains()]
    )


@router.get("/{chain_id}", response_model=ChainModel)
async def get_chain(chain_id: str, services: Services = Depends(get_services)):
    chain = services.chains.get_chain(chain_id)
    if chain is None:
        raise AppError("Unsupported chain", 404, ErrorCode.UNSUPPORTED_CHAIN, {"chainId": chain_id})
    return ChainModel.from_chain(chain)


@router.get("/{chain_id}/tokens", response_model=TokenListResponse)
async def list_tokens(chain_id: str, services: Services = Depends(get_services)):
    """Get supported tokens for a chain."""
    tokens = services.tokens.get_supported_tokens(chain_id)
    return TokenListResponse(tokens=[TokenModel.from_token(t) for t in tokens])
