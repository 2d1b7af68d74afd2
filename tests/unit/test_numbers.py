"""Unit tests for chain amount parsing, conversion and rounding."""
from __future__ import annotations

from decimal import Decimal

import pytest

from chain_aggregator.config import CoinLookupConfig
from chain_aggregator.numbers import (
    divide,
    fix_decimals,
    fix_decimals_and_round_up,
    format_fraction,
    parse_chain_int,
    to_view_denom,
)

UATOM = CoinLookupConfig("uatom", "ATOM", Decimal("0.000001"))


class TestParseChainInt:
    def test_decimal_string(self) -> None:
        assert parse_chain_int("123456789012345678901234567890") == Decimal(
            "123456789012345678901234567890"
        )

    def test_hex_string(self) -> None:
        assert parse_chain_int("0x0000000000000000000000e8d4a51000") == Decimal(
            1_000_000_000_000
        )

    def test_empty_and_none_are_zero(self) -> None:
        assert parse_chain_int(None) == 0
        assert parse_chain_int("") == 0

    def test_garbage_raises(self) -> None:
        with pytest.raises(ValueError):
            parse_chain_int("twelve")

    def test_bool_rejected(self) -> None:
        with pytest.raises(ValueError):
            parse_chain_int(True)


class TestToViewDenom:
    def test_exact_conversion(self) -> None:
        assert to_view_denom(UATOM, "1500000") == Decimal("1.5")

    def test_large_balance_keeps_every_digit(self) -> None:
        raw = "340282366920938463463374607431768211455"
        expected = Decimal(raw).scaleb(-6)
        assert to_view_denom(UATOM, raw) == expected


class TestRounding:
    @pytest.mark.parametrize(
        "raw,precision",
        [
            ("1.0000001", 6),
            ("0.1234565", 6),
            ("999.999", 2),
            ("0.000000001", 6),
            ("-1.5555", 2),
            ("42", 0),
        ],
    )
    def test_round_up_never_decreases(self, raw: str, precision: int) -> None:
        value = Decimal(raw)
        rounded = fix_decimals_and_round_up(value, precision)
        scaled = rounded.scaleb(precision)
        assert scaled == scaled.to_integral_value()
        assert rounded >= value

    def test_round_up_ceiling(self) -> None:
        assert fix_decimals_and_round_up("0.1234561", 6) == Decimal("0.123457")

    def test_fix_decimals_half_up(self) -> None:
        assert fix_decimals("0.1234565", 6) == Decimal("0.123457")
        assert fix_decimals("0.1234564", 6) == Decimal("0.123456")

    def test_format_fraction_pads(self) -> None:
        assert format_fraction(Decimal("0.3"), 4) == "0.3000"


class TestDivide:
    def test_zero_denominator(self) -> None:
        assert divide(5, 0) == 0

    def test_regular_division(self) -> None:
        assert divide(300, 1000) == Decimal("0.3")
