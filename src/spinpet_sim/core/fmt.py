"""
Formatting helpers (non-core arithmetic).

Core arithmetic uses plain integers. Decimal here is only for reporting
(percentages, leverage) and display (logs, tests, the demo script).
"""

from decimal import Decimal, getcontext, ROUND_DOWN

from .exc import AmountDomainError
from .constants import PRICE_DECIMALS, SOL_DECIMALS, TOKEN_DECIMALS
from .amounts import Price, SolAmount, TokenAmount, _WIDE

# Debug printing control (formatting layer)
DEBUG_FMT = False

def _dbg(msg: str) -> None:
    if DEBUG_FMT:
        print(msg)


# ---------------------------------------------------------------------------
# Global Decimal precision (formatting only)
# ---------------------------------------------------------------------------

#: Default global precision for Decimal-based formatting. Curve arithmetic
#: never touches Decimal, so this only affects display.
DEFAULT_DECIMAL_PRECISION: int = 28
getcontext().prec = DEFAULT_DECIMAL_PRECISION


def fmt_dec(x: Decimal, places: int = 18) -> str:
    """Format a Decimal in scientific notation with fixed fractional digits.

      Decimal('1')      -> '1.000000E+0'      (places=6)
      Decimal('0.0025') -> '2.500000E-3'      (places=6)
    """
    return format(x, f".{places}E")


# ---------------------------------------------------------------------------
# Exact floored ratios
# ---------------------------------------------------------------------------

def floor_ratio(num: int, den: int, places: int) -> Decimal:
    """floor(num / den) with `places` fractional digits, computed on integers.

    The result is exact: Decimal only receives the already-floored integer.
    """
    if num < 0 or den <= 0 or places < 0:
        raise AmountDomainError(f"floor_ratio expects num>=0, den>0, places>=0 (num={num}, den={den})")
    q = num * (10 ** places) // den
    return Decimal(q).scaleb(-places, context=_WIDE)


def percentage(num: int, den: int, places: int = 2) -> Decimal:
    """num / den * 100, floored to `places` decimals."""
    return floor_ratio(num * 100, den, places)


def quantize_down(x: Decimal, places: int) -> Decimal:
    """Truncate a Decimal to `places` fractional digits."""
    if x < 0:
        raise AmountDomainError("negative input not allowed for quantize_down")
    return x.quantize(Decimal(1).scaleb(-places), rounding=ROUND_DOWN)


# ---------------------------------------------------------------------------
# Display conversions
# ---------------------------------------------------------------------------

def price_to_decimal(p) -> Decimal:
    """Price (or its raw int) -> SOL per whole token, for display only."""
    raw = p.value if isinstance(p, Price) else int(p)
    if raw < 0:
        raise AmountDomainError("price_to_decimal(): price must be >= 0")
    return Decimal(raw).scaleb(-PRICE_DECIMALS, context=_WIDE)


def sol_to_decimal(a) -> Decimal:
    """Lamports -> SOL, for display only."""
    raw = a.value if isinstance(a, SolAmount) else int(a)
    if raw < 0:
        raise AmountDomainError("sol_to_decimal(): amount must be >= 0")
    return Decimal(raw).scaleb(-SOL_DECIMALS, context=_WIDE)


def token_to_decimal(a) -> Decimal:
    """Raw token units -> whole tokens, for display only."""
    raw = a.value if isinstance(a, TokenAmount) else int(a)
    if raw < 0:
        raise AmountDomainError("token_to_decimal(): amount must be >= 0")
    _dbg(f"token_to_decimal: raw={raw}")
    return Decimal(raw).scaleb(-TOKEN_DECIMALS, context=_WIDE)


__all__ = [
    "DEFAULT_DECIMAL_PRECISION",
    "fmt_dec",
    "floor_ratio",
    "percentage",
    "quantize_down",
    "price_to_decimal",
    "sol_to_decimal",
    "token_to_decimal",
]
