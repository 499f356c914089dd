"""1inch DEX aggregator integration.

Quotes same-chain swaps on EVM chains.
API docs: https://portal.1inch.dev/documentation/apis/swap/introduction
"""

import logging
from decimal import Decimal
from typing import Callable, Optional

import httpx

from griffin.errors import QuoteProviderError
from griffin.routing.base import FeeComponent, QuoteProvider, RawQuote, StepType, TradeRequest
from griffin.utils.units import from_base_units, parse_int, to_base_units

logger = logging.getLogger(__name__)

ONEINCH_API_V6 = "https://api.1inch.dev/swap/v6.0"

# Chains 1inch serves, with the native gas token of each
NATIVE_TOKENS = {
    "1": "ETH",
    "137": "POL",
    "42161": "ETH",
    "10": "ETH",
}

DEFAULT_GAS_LIMIT = 200_000
FALLBACK_GAS_PRICE = 30 * 10**9  # 30 gwei


class OneInchQuoteProvider(QuoteProvider):
    """1inch aggregation protocol provider for EVM chains."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        api_url: str = ONEINCH_API_V6,
        rpc_url_for: Optional[Callable[[str], str]] = None,
        timeout: float = 15.0,
    ):
        """Initialize 1inch provider.

        Args:
            api_key: 1inch API key (required by the hosted API)
            api_url: Swap API base URL, without the chain id
            rpc_url_for: Resolves a chain id to an RPC URL for gas prices
            timeout: Request timeout in seconds
        """
        self.api_key = api_key
        self.api_url = api_url.rstrip("/")
        self._rpc_url_for = rpc_url_for or (lambda chain_id: "")
        self.timeout = timeout

    @property
    def name(self) -> str:
        return "1inch"

    @property
    def step_type(self) -> StepType:
        return "swap"

    def supports_chain(self, chain_id: str) -> bool:
        return self._evm_id(chain_id) in NATIVE_TOKENS

    @staticmethod
    def _evm_id(chain_id: str) -> str:
        return chain_id.removeprefix("eip155:")

    def _get_headers(self) -> dict:
        """Get API headers with authorization."""
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def get_quotes(self, request: TradeRequest) -> list[RawQuote]:
        chain = self._evm_id(request.from_chain)
        amount_wei = to_base_units(request.amount, request.from_decimals)
        if amount_wei <= 0:
            return []

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(
                    f"{self.api_url}/{chain}/quote",
                    headers=self._get_headers(),
                    params={
                        "src": request.from_token,
                        "dst": request.to_token,
                        "amount": str(amount_wei),
                        "includeGas": "true",
                    },
                )
        except httpx.HTTPError as e:
            raise QuoteProviderError(self.name, f"request failed: {e}") from e

        if response.status_code != 200:
            logger.warning(f"1inch API error: {response.status_code} - {response.text}")
            raise QuoteProviderError(self.name, f"HTTP {response.status_code}")

        data = response.json()
        to_amount = from_base_units(int(data.get("dstAmount", data.get("toAmount", "0"))), request.to_decimals)
        if to_amount <= 0:
            return []

        gas = int(data.get("gas") or DEFAULT_GAS_LIMIT)
        gas_price = await self._get_gas_price(chain)
        gas_cost = Decimal(gas * gas_price) / Decimal(10**18)

        return [
            RawQuote(
                provider=self.name,
                step_type="swap",
                from_chain=request.from_chain,
                to_chain=request.to_chain,
                from_token=request.from_token,
                to_token=request.to_token,
                amount=request.amount,
                estimated_output=to_amount,
                fees=[FeeComponent("gas", gas_cost, NATIVE_TOKENS[chain])],
                estimated_time_seconds=30,  # ~2 blocks on Ethereum
                gas_limit=gas,
                gas_price=gas_price,
                details={"protocols": data.get("protocols", [])},
            )
        ]

    async def _get_gas_price(self, chain: str) -> int:
        """Get current gas price in wei."""
        rpc_url = self._rpc_url_for(chain)
        if rpc_url:
            try:
                async with httpx.AsyncClient(timeout=10.0) as client:
                    response = await client.post(
                        rpc_url,
                        json={
                            "jsonrpc": "2.0",
                            "method": "eth_gasPrice",
                            "params": [],
                            "id": 1,
                        },
                    )
                if response.status_code == 200:
                    return parse_int(response.json().get("result", "0x0")) or FALLBACK_GAS_PRICE
            except (httpx.HTTPError, ValueError) as e:
                logger.debug(f"eth_gasPrice failed on chain {chain}: {e}")

        return FALLBACK_GAS_PRICE

    async def check_health(self) -> Optional[str]:
        if not self.api_key:
            return "1inch API key not configured"
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.get(
                f"{self.api_url}/1/healthcheck", headers=self._get_headers()
            )
        if response.status_code != 200:
            return f"1inch API returned HTTP {response.status_code}"
        return None
