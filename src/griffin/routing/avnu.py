"""AVNU DEX aggregator integration for Starknet.

API docs: https://doc.avnu.fi/avnu-spot-trading/apis
"""

import logging
from decimal import Decimal
from typing import Optional

import httpx

from griffin.chains import STARKNET_FAMILY, TokenInfo, family_tag
from griffin.errors import QuoteProviderError
from griffin.routing.base import FeeComponent, QuoteProvider, RawQuote, StepType, TradeRequest
from griffin.utils.units import from_base_units, parse_int, to_base_units

logger = logging.getLogger(__name__)

AVNU_MAINNET_API = "https://starknet.api.avnu.fi"
AVNU_SEPOLIA_API = "https://sepolia.api.avnu.fi"


class AvnuQuoteProvider(QuoteProvider):
    """AVNU swap aggregator.

    Quotes a same-chain Starknet swap. AVNU reports its fees in USD, so raw
    quotes carry USD fee components.
    """

    def __init__(
        self,
        api_url: str = AVNU_SEPOLIA_API,
        chain_id: str = "starknet:sepolia",
        timeout: float = 15.0,
        max_quotes: int = 3,
    ):
        self.api_url = api_url.rstrip("/")
        self.chain_id = chain_id
        self.timeout = timeout
        self.max_quotes = max_quotes

    @property
    def name(self) -> str:
        return "avnu"

    @property
    def step_type(self) -> StepType:
        return "swap"

    def supports_chain(self, chain_id: str) -> bool:
        return chain_id == self.chain_id

    async def get_quotes(self, request: TradeRequest) -> list[RawQuote]:
        if not self.supports_chain(request.from_chain):
            return []

        sell_amount = to_base_units(request.amount, request.from_decimals)
        if sell_amount <= 0:
            return []

        params = {
            "sellTokenAddress": request.from_token,
            "buyTokenAddress": request.to_token,
            "sellAmount": hex(sell_amount),
            "size": self.max_quotes,
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(f"{self.api_url}/swap/v2/quotes", params=params)
        except httpx.HTTPError as e:
            raise QuoteProviderError(self.name, f"request failed: {e}") from e

        if response.status_code != 200:
            logger.warning(f"AVNU API error: {response.status_code} - {response.text}")
            raise QuoteProviderError(self.name, f"HTTP {response.status_code}")

        quotes = []
        for item in response.json():
            quote = self._parse_quote(item, request)
            if quote is not None:
                quotes.append(quote)
        return quotes

    def _parse_quote(self, item: dict, request: TradeRequest) -> Optional[RawQuote]:
        try:
            buy_amount = from_base_units(parse_int(item["buyAmount"]), request.to_decimals)
        except (KeyError, ValueError) as e:
            logger.debug(f"Skipping malformed AVNU quote: {e}")
            return None

        fees = [
            FeeComponent("gas", Decimal(str(item.get("gasFeesInUsd", 0))), "USD"),
            FeeComponent("protocol", Decimal(str(item.get("avnuFeesInUsd", 0))), "USD"),
        ]
        integrator_fee = item.get("integratorFeesInUsd")
        if integrator_fee:
            fees.append(FeeComponent("service", Decimal(str(integrator_fee)), "USD"))

        gas_fees = item.get("gasFees")
        return RawQuote(
            provider=self.name,
            step_type="swap",
            from_chain=request.from_chain,
            to_chain=request.to_chain,
            from_token=request.from_token,
            to_token=request.to_token,
            amount=request.amount,
            estimated_output=buy_amount,
            fees=fees,
            estimated_time_seconds=30,
            provider_quote_id=item.get("quoteId"),
            gas_price=parse_int(gas_fees) if gas_fees else None,
            details={
                "routes": [r.get("name") for r in item.get("routes", [])],
                "buy_amount_in_usd": item.get("buyAmountInUsd"),
            },
        )

    async def check_health(self) -> Optional[str]:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.get(f"{self.api_url}/v1/starknet/tokens", params={"size": 1})
        if response.status_code != 200:
            return f"AVNU API returned HTTP {response.status_code}"
        return None

    async def fetch_tokens(self) -> list[TokenInfo]:
        """Fetch AVNU's verified token list for the configured network."""
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.get(
                f"{self.api_url}/v1/starknet/tokens",
                params=[("tags", "Verified"), ("tags", "AVNU"), ("size", 100)],
            )
            response.raise_for_status()
            data = response.json()

        items = data.get("content", []) if isinstance(data, dict) else data
        tokens = []
        for item in items:
            try:
                tokens.append(
                    TokenInfo(
                        address=item["address"],
                        symbol=item["symbol"],
                        name=item.get("name", item["symbol"]),
                        decimals=int(item["decimals"]),
                        chain_id=self.chain_id,
                        logo_url=item.get("logoUri"),
                    )
                )
            except (KeyError, TypeError, ValueError):
                logger.debug(f"Skipping malformed AVNU token entry: {item!r}")

        logger.info(f"Fetched {len(tokens)} tokens from AVNU")
        return tokens


def create_avnu_provider(api_url: str, chain_id: str, timeout: float = 15.0) -> AvnuQuoteProvider:
    """Create an AVNU provider instance."""
    if family_tag(chain_id) != STARKNET_FAMILY:
        raise ValueError(f"AVNU only serves Starknet, got {chain_id}")
    return AvnuQuoteProvider(api_url=api_url, chain_id=chain_id, timeout=timeout)
