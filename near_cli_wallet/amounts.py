"""
Exact conversion of smallest-unit amounts into decimal display strings.

Amounts travel as integer strings in yoctoNEAR (10^-24 NEAR) and gas units
(10^-12 Tgas). The CLI wants human units, so the conversion shifts the
decimal point on the digit string itself. No floats are involved, so no
amount is ever perturbed by rounding.
"""

from __future__ import annotations

YOCTO_DECIMALS = 24
TGAS_DECIMALS = 12


def format_units(amount: str, decimals: int) -> str:
    """Shift the decimal point of ``amount`` left by ``decimals`` digits.

    Trailing fractional zeros are dropped, and the point with them when
    nothing remains ("1000" at 3 decimals is "1", not "1.0").

    Raises:
        ValueError: If ``amount`` is not a non-empty string of ASCII digits.
    """
    if not amount or not amount.isascii() or not amount.isdigit():
        raise ValueError(f"amount must be a non-negative integer string, got: {amount!r}")
    if amount == "0":
        return "0"

    padded = amount.rjust(decimals + 1, "0")
    int_part = padded[:-decimals] or "0"
    frac_part = padded[-decimals:].rstrip("0")
    return f"{int_part}.{frac_part}" if frac_part else int_part


def yocto_to_near(amount: str) -> str:
    """yoctoNEAR integer string to NEAR."""
    return format_units(amount, YOCTO_DECIMALS)


def gas_to_tgas(amount: str) -> str:
    """Gas integer string to Tgas."""
    return format_units(amount, TGAS_DECIMALS)
