"""
Tests for exact smallest-unit to display-unit conversion.

Test plan:
- "0" maps to "0" at both scales
- whole amounts drop the fraction entirely (no "1.0")
- sub-unit amounts keep leading fractional zeros
- trailing fractional zeros are stripped
- amounts larger than float precision survive digit for digit
- reconstructing the smallest-unit integer recovers the input
- non-digit input is rejected
"""

import pytest

from near_cli_wallet.amounts import (
    TGAS_DECIMALS,
    YOCTO_DECIMALS,
    format_units,
    gas_to_tgas,
    yocto_to_near,
)


def _reconstruct(display: str, decimals: int) -> str:
    int_part, _, frac_part = display.partition(".")
    digits = int_part + frac_part.ljust(decimals, "0")
    return digits.lstrip("0") or "0"


class TestYoctoToNear:
    def test_zero(self) -> None:
        assert yocto_to_near("0") == "0"

    def test_one_near_has_no_fraction(self) -> None:
        assert yocto_to_near("1" + "0" * 24) == "1"

    def test_one_yocto(self) -> None:
        assert yocto_to_near("1") == "0." + "0" * 23 + "1"

    def test_fraction_trailing_zeros_stripped(self) -> None:
        assert yocto_to_near("1500000000000000000000000") == "1.5"

    def test_quarter_near(self) -> None:
        assert yocto_to_near("250000000000000000000000") == "0.25"

    def test_large_amount_is_exact(self) -> None:
        amount = "123456789012345678901234567890123"
        assert yocto_to_near(amount) == "123456789.012345678901234567890123"


class TestGasToTgas:
    def test_zero(self) -> None:
        assert gas_to_tgas("0") == "0"

    def test_thirty_tgas(self) -> None:
        assert gas_to_tgas("30000000000000") == "30"

    def test_fractional_tgas(self) -> None:
        assert gas_to_tgas("2500000000000") == "2.5"

    def test_small_gas(self) -> None:
        assert gas_to_tgas("1000") == "0.000000001"


class TestFormatUnits:
    @pytest.mark.parametrize(
        "amount",
        ["0", "1", "10", "999999999999", "1000000000000", "300000000000000000000000001"],
    )
    @pytest.mark.parametrize("decimals", [YOCTO_DECIMALS, TGAS_DECIMALS])
    def test_reconstruction_recovers_input(self, amount: str, decimals: int) -> None:
        assert _reconstruct(format_units(amount, decimals), decimals) == amount

    @pytest.mark.parametrize("bad", ["", "-1", "1.5", "1e24", " 1", "abc", "١٢"])
    def test_rejects_non_digit_strings(self, bad: str) -> None:
        with pytest.raises(ValueError, match="non-negative integer string"):
            format_units(bad, YOCTO_DECIMALS)
