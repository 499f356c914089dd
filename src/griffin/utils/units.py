"""Conversions between human token amounts and integer base units."""

from decimal import ROUND_DOWN, Decimal, InvalidOperation, localcontext
from typing import Union

Number = Union[str, int, float, Decimal]


def to_decimal(value: Number) -> Decimal:
    """Parse a number into a Decimal.

    Raises:
        ValueError: if the value is not a finite number
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid amount: {value!r}")
    try:
        if isinstance(value, Decimal):
            amount = value
        elif isinstance(value, int):
            amount = Decimal(value)
        else:
            amount = Decimal(str(value).strip())
    except InvalidOperation as exc:
        raise ValueError(f"Invalid amount: {value!r}") from exc
    if not amount.is_finite():
        raise ValueError(f"Amount must be finite: {value!r}")
    return amount


def quantize_to(value: Decimal, quantum: Decimal) -> Decimal:
    """Quantize without overflowing the context precision on large values."""
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, value.adjusted() - quantum.adjusted() + 2)
        return value.quantize(quantum)


def to_base_units(amount: Number, decimals: int) -> int:
    """Scale a token amount to integer base units, rounding down."""
    amt = to_decimal(amount)
    if amt < 0:
        raise ValueError("Amount must be non-negative")
    scale = Decimal(10) ** int(decimals)
    return int((amt * scale).to_integral_value(rounding=ROUND_DOWN))


def from_base_units(raw: int, decimals: int) -> Decimal:
    """Scale integer base units back to a token amount."""
    return Decimal(raw) / (Decimal(10) ** int(decimals))


def parse_int(value: Union[str, int]) -> int:
    """Parse an integer given as int, decimal string or 0x-hex string."""
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    text = str(value).strip()
    return int(text, 16) if text.lower().startswith("0x") else int(text)
