"""Normalisation of heterogeneous provider fees into one reference unit.

Providers report fees in whatever currency they charge (gas in ETH or STRK,
bridge fees in the bridged token, aggregator fees in USD). Costs are only
comparable across providers once every component is converted to the same
unit, so a component whose currency has no known price makes the whole
candidate unrankable.
"""

from decimal import Decimal
from typing import Mapping, Optional

from griffin.routing.base import FeeComponent, FeeInfo
from griffin.utils.units import quantize_to

COST_QUANTUM = Decimal("0.00000001")


def format_cost(value: Decimal) -> str:
    """Render a cost as a plain decimal string (no exponent)."""
    return format(quantize_to(value, COST_QUANTUM).normalize(), "f")


class UnpricedCurrencyError(ValueError):
    """Raised when a fee currency cannot be converted to the reference unit."""

    def __init__(self, currency: str, reference: str):
        self.currency = currency
        super().__init__(f"No {reference} price for fee currency {currency!r}")


class CostNormalizer:
    """Converts fee components into the reference currency."""

    def __init__(self, reference_currency: str, prices: Mapping[str, Decimal]):
        self.reference_currency = reference_currency.upper()
        self._prices = {symbol.upper(): Decimal(price) for symbol, price in prices.items()}
        self._prices.setdefault(self.reference_currency, Decimal("1"))

    def price_of(self, currency: Optional[str]) -> Optional[Decimal]:
        """Get the reference price of one unit of ``currency``."""
        if not currency:
            return None
        return self._prices.get(currency.upper())

    def convert(self, amount: Decimal, currency: str) -> Decimal:
        """
        Convert an amount into the reference currency.

        Raises:
            UnpricedCurrencyError: if the currency has no known price
        """
        price = self.price_of(currency)
        if price is None:
            raise UnpricedCurrencyError(currency, self.reference_currency)
        return amount * price

    def normalize(self, fees: list[FeeComponent]) -> tuple[FeeInfo, Decimal]:
        """
        Convert a step's fees into a FeeInfo in the reference currency.

        Returns:
            (FeeInfo, total cost as Decimal)

        Raises:
            UnpricedCurrencyError: if any component cannot be converted
        """
        totals: dict[str, Decimal] = {}
        for fee in fees:
            converted = self.convert(fee.amount, fee.currency)
            totals[fee.kind] = totals.get(fee.kind, Decimal("0")) + converted

        total = sum(totals.values(), Decimal("0"))

        fee_info = FeeInfo(
            gas_fee=format_cost(totals.get("gas", Decimal("0"))),
            protocol_fee=self._fmt_optional(totals.get("protocol")),
            bridge_fee=self._fmt_optional(totals.get("bridge")),
            service_cost=self._fmt_optional(totals.get("service")),
            total=format_cost(total),
            currency=self.reference_currency,
        )
        return fee_info, total

    @staticmethod
    def _fmt_optional(value: Optional[Decimal]) -> Optional[str]:
        return None if value is None else format_cost(value)
