"""Simulated swap and bridge providers for dry-run mode.

Quotes are derived from reference prices with fixed fee schedules, so
discovery works end to end without any external API.
"""

import uuid
from decimal import Decimal
from typing import Iterable, Mapping, Optional

from griffin.chains import EVM_FAMILY, STARKNET_FAMILY, family_tag
from griffin.routing.base import FeeComponent, QuoteProvider, RawQuote, StepType, TradeRequest
from griffin.utils.units import quantize_to

OUTPUT_QUANTUM = Decimal("0.00000001")

# Chains each simulated bridge connects (EVM ids plus Starknet networks)
EVM_BRIDGE_CHAINS = frozenset({"1", "137", "42161", "10"})
STARKNET_CHAINS = frozenset({"starknet:mainnet", "starknet:sepolia"})


def native_gas_currency(chain_id: str) -> str:
    """Currency gas is paid in on a chain."""
    if family_tag(chain_id) == STARKNET_FAMILY:
        return "STRK"
    if chain_id in ("137", "eip155:137"):
        return "POL"
    return "ETH"


class SimulatedSwapProvider(QuoteProvider):
    """Simulated same-chain DEX aggregator.

    Converts at reference prices, charges a protocol fee on the input value
    (in USD) and a flat gas fee in the chain's native token.
    """

    def __init__(
        self,
        name: str,
        family: str,
        prices: Mapping[str, Decimal],
        protocol_fee_rate: Decimal = Decimal("0.0015"),
        gas_fee: Decimal = Decimal("0.0004"),
        gas_limit: int = 180_000,
        estimated_time_seconds: int = 30,
    ):
        self._name = name
        self.family = family
        self._prices = {k.upper(): Decimal(v) for k, v in prices.items()}
        self.protocol_fee_rate = protocol_fee_rate
        self.gas_fee = gas_fee
        self.gas_limit = gas_limit
        self.estimated_time_seconds = estimated_time_seconds

    @property
    def name(self) -> str:
        return self._name

    @property
    def step_type(self) -> StepType:
        return "swap"

    def supports_chain(self, chain_id: str) -> bool:
        return family_tag(chain_id) == self.family

    def get_price(self, symbol: Optional[str]) -> Optional[Decimal]:
        """Get simulated price for a token symbol."""
        return self._prices.get(symbol.upper()) if symbol else None

    async def get_quotes(self, request: TradeRequest) -> list[RawQuote]:
        from_price = self.get_price(request.from_symbol)
        to_price = self.get_price(request.to_symbol)
        if from_price is None or to_price is None or request.amount <= 0:
            return []

        usd_value = request.amount * from_price
        protocol_fee_usd = usd_value * self.protocol_fee_rate
        output = quantize_to((usd_value - protocol_fee_usd) / to_price, OUTPUT_QUANTUM)
        if output <= 0:
            return []

        gas_currency = native_gas_currency(request.from_chain)
        return [
            RawQuote(
                provider=self.name,
                step_type="swap",
                from_chain=request.from_chain,
                to_chain=request.to_chain,
                from_token=request.from_token,
                to_token=request.to_token,
                amount=request.amount,
                estimated_output=output,
                fees=[
                    FeeComponent("gas", self.gas_fee, gas_currency),
                    FeeComponent("protocol", protocol_fee_usd, "USD"),
                ],
                estimated_time_seconds=self.estimated_time_seconds,
                provider_quote_id=f"sim-{uuid.uuid4().hex[:16]}",
                gas_limit=self.gas_limit,
                details={"simulated": True, "usd_value": str(usd_value)},
            )
        ]


class SimulatedBridgeProvider(QuoteProvider):
    """Simulated bridge carrying one asset between two chains.

    Charges a bridge fee as a share of the bridged amount (in the bridged
    token), a flat source-chain gas fee and an optional flat USD relayer fee.
    """

    def __init__(
        self,
        name: str,
        chains: Iterable[str],
        prices: Mapping[str, Decimal],
        bridge_fee_rate: Decimal,
        gas_fee: Decimal,
        relayer_fee_usd: Decimal = Decimal("0"),
        estimated_time_seconds: int = 300,
        gas_limit: int = 300_000,
    ):
        self._name = name
        self.chains = frozenset(chains)
        self._prices = {k.upper(): Decimal(v) for k, v in prices.items()}
        self.bridge_fee_rate = bridge_fee_rate
        self.gas_fee = gas_fee
        self.relayer_fee_usd = relayer_fee_usd
        self.estimated_time_seconds = estimated_time_seconds
        self.gas_limit = gas_limit

    @property
    def name(self) -> str:
        return self._name

    @property
    def step_type(self) -> StepType:
        return "bridge"

    def supports_chain(self, chain_id: str) -> bool:
        return chain_id in self.chains

    async def get_quotes(self, request: TradeRequest) -> list[RawQuote]:
        symbol = (request.to_symbol or request.from_symbol or "").upper()
        if symbol not in self._prices or request.amount <= 0:
            return []

        bridge_fee = request.amount * self.bridge_fee_rate
        output = quantize_to(request.amount - bridge_fee, OUTPUT_QUANTUM)
        if output <= 0:
            return []

        fees = [
            FeeComponent("gas", self.gas_fee, native_gas_currency(request.from_chain)),
            FeeComponent("bridge", bridge_fee, symbol),
        ]
        if self.relayer_fee_usd:
            fees.append(FeeComponent("protocol", self.relayer_fee_usd, "USD"))

        return [
            RawQuote(
                provider=self.name,
                step_type="bridge",
                from_chain=request.from_chain,
                to_chain=request.to_chain,
                from_token=request.from_token,
                to_token=request.to_token,
                amount=request.amount,
                estimated_output=output,
                fees=fees,
                estimated_time_seconds=self.estimated_time_seconds,
                provider_quote_id=f"sim-{uuid.uuid4().hex[:16]}",
                gas_limit=self.gas_limit,
                details={"simulated": True},
            )
        ]


def create_simulated_swap_providers(prices: Mapping[str, Decimal]) -> dict[str, list[QuoteProvider]]:
    """Simulated swap providers keyed by chain family."""
    return {
        STARKNET_FAMILY: [
            SimulatedSwapProvider(
                "avnu",
                STARKNET_FAMILY,
                prices,
                protocol_fee_rate=Decimal("0.0015"),
                gas_fee=Decimal("0.05"),
                gas_limit=0,
                estimated_time_seconds=30,
            ),
        ],
        EVM_FAMILY: [
            SimulatedSwapProvider(
                "1inch",
                EVM_FAMILY,
                prices,
                protocol_fee_rate=Decimal("0.001"),
                gas_fee=Decimal("0.003"),
                gas_limit=180_000,
                estimated_time_seconds=30,
            ),
        ],
    }


def create_simulated_bridges(prices: Mapping[str, Decimal]) -> list[QuoteProvider]:
    """Simulated bridges in the order they are queried."""
    return [
        SimulatedBridgeProvider(
            "across",
            EVM_BRIDGE_CHAINS,
            prices,
            bridge_fee_rate=Decimal("0.0006"),
            gas_fee=Decimal("0.0009"),
            relayer_fee_usd=Decimal("0.50"),
            estimated_time_seconds=120,
        ),
        SimulatedBridgeProvider(
            "stargate",
            EVM_BRIDGE_CHAINS,
            prices,
            bridge_fee_rate=Decimal("0.0006"),
            gas_fee=Decimal("0.0015"),
            estimated_time_seconds=300,
        ),
        SimulatedBridgeProvider(
            "orbiter",
            EVM_BRIDGE_CHAINS | STARKNET_CHAINS,
            prices,
            bridge_fee_rate=Decimal("0.001"),
            gas_fee=Decimal("0.0005"),
            relayer_fee_usd=Decimal("1.00"),
            estimated_time_seconds=300,
        ),
    ]
