"""Decimal helpers for chain amounts: parsing, denomination conversion, rounding."""
from __future__ import annotations

from decimal import ROUND_CEILING, ROUND_HALF_UP, Context, Decimal, InvalidOperation
from typing import Any

from .config import CoinLookupConfig

ZERO = Decimal(0)

# Wide enough for 128-bit balances carrying 18 fractional digits.
_CONTEXT = Context(prec=80)


def parse_chain_int(value: Any) -> Decimal:
    """Parse a raw chain amount into a Decimal.

    Accepts ints, decimal strings and ``0x``-prefixed hex strings (Substrate
    storage encodes balances that way). ``None`` and ``""`` mean zero.
    """
    if value is None or value == "":
        return ZERO
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise ValueError(f"Not a chain amount: {value!r}")
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        return Decimal(str(value))
    text = str(value).strip()
    if text.lower().startswith("0x"):
        return Decimal(int(text, 16))
    try:
        return Decimal(text)
    except InvalidOperation as e:
        raise ValueError(f"Not a chain amount: {value!r}") from e


def to_view_denom(coin_lookup: CoinLookupConfig, raw: Any) -> Decimal:
    """Convert a chain-denominated amount to its view denomination (exact)."""
    return _CONTEXT.multiply(
        parse_chain_int(raw), coin_lookup.chain_to_view_conversion_factor
    )


def divide(numerator: Any, denominator: Any) -> Decimal:
    """Exact-enough division; a zero denominator yields zero."""
    den = parse_chain_int(denominator)
    if den == 0:
        return ZERO
    return _CONTEXT.divide(parse_chain_int(numerator), den)


def _quantum(precision: int) -> Decimal:
    return Decimal(1).scaleb(-precision)


def fix_decimals_and_round_up(value: Any, precision: int) -> Decimal:
    """Round towards positive infinity to ``precision`` fractional digits."""
    return parse_chain_int(value).quantize(
        _quantum(precision), rounding=ROUND_CEILING, context=_CONTEXT
    )


def fix_decimals(value: Any, precision: int) -> Decimal:
    """Round half-up to ``precision`` fractional digits."""
    return parse_chain_int(value).quantize(
        _quantum(precision), rounding=ROUND_HALF_UP, context=_CONTEXT
    )


def format_fraction(value: Any, precision: int) -> str:
    """Fixed-point string with exactly ``precision`` fractional digits."""
    return f"{fix_decimals(value, precision):.{precision}f}"
