"""Chain and token catalog contracts."""

from typing import Optional

from pydantic import Field

from griffin.api.contracts.common import CamelModel
from griffin.chains import ChainInfo, TokenInfo


class ChainModel(CamelModel):
    """A supported blockchain."""

    chain_id: str = Field(..., description="Namespaced chain id (starknet:sepolia) or EVM id")
    name: str = Field(..., description="Chain display name")
    symbol: str = Field(..., description="Native asset symbol")
    rpc_url: str = Field(default="", description="RPC URL (empty if not configured)")
    block_explorer: str = Field(..., description="Block explorer base URL")
    is_testnet: bool = False

    @classmethod
    def from_chain(cls, chain: ChainInfo) -> "ChainModel":
        return cls(
            chain_id=chain.chain_id,
            name=chain.name,
            symbol=chain.symbol,
            rpc_url=chain.rpc_url,
            block_explorer=chain.block_explorer,
            is_testnet=chain.is_testnet,
        )


class ChainListResponse(CamelModel):
    chains: list[ChainModel] = Field(default_factory=list)


class TokenModel(CamelModel):
    """A token tradable on one chain."""

    address: str
    symbol: str
    name: str
    decimals: int
    chain_id: str
    logo_url: Optional[str] = None

    @classmethod
    def from_token(cls, token: TokenInfo) -> "TokenModel":
        return cls(
            address=token.address,
            symbol=token.symbol,
            name=token.name,
            decimals=token.decimals,
            chain_id=token.chain_id,
            logo_url=token.logo_url,
        )


class TokenListResponse(CamelModel):
    tokens: list[TokenModel] = Field(default_factory=list)
