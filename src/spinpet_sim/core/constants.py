"""
spinpet_sim Core Constants (integer domain)
===========================================

Only protocol-aligned integer constants live here. Decimal quanta used for
display are kept next to them but never enter curve arithmetic.
"""

# NOTE: Prices are u128 fixed-point, amounts are u64 raw units. The sentinels
# MIN_PRICE / MAX_PRICE are the prices at which one virtual reserve hits the
# u64 ceiling, so every amount the curve reports fits an Amount.

from decimal import Decimal

# ---------------------------------------------------------------------------
# Fixed-point scales
# ---------------------------------------------------------------------------

#: Fractional decimal digits of a Price (human price = SOL per whole token).
PRICE_DECIMALS: int = 26
PRICE_SCALE: int = 10 ** PRICE_DECIMALS

#: Raw token units carry 6 fractional digits, SOL (lamports) 9.
TOKEN_DECIMALS: int = 6
SOL_DECIMALS: int = 9
TOKEN_UNIT: int = 10 ** TOKEN_DECIMALS
LAMPORTS_PER_SOL: int = 10 ** SOL_DECIMALS

# ---------------------------------------------------------------------------
# Integer widths
# ---------------------------------------------------------------------------

U64_MAX: int = (1 << 64) - 1
U128_MAX: int = (1 << 128) - 1

# ---------------------------------------------------------------------------
# Protocol curve (virtual reserves, constant product)
# ---------------------------------------------------------------------------

#: Initial virtual SOL reserve: 30 SOL in lamports.
INITIAL_SOL_RESERVE: int = 30 * LAMPORTS_PER_SOL
#: Initial virtual token reserve: 1,073,000,000 tokens in raw units.
INITIAL_TOKEN_RESERVE: int = 1_073_000_000 * TOKEN_UNIT
#: Curve invariant k = x * y.
CURVE_K: int = INITIAL_SOL_RESERVE * INITIAL_TOKEN_RESERVE

#: Price domain sentinels (inclusive).
MIN_PRICE: int = 10 ** 10
MAX_PRICE: int = 10 ** 36

# ---------------------------------------------------------------------------
# Search knobs (defaults; see config.SimulatorConfig)
# ---------------------------------------------------------------------------

#: Stop-loss step: 5 / 1000 = 0.5% of the candidate price per iteration.
PRICE_ADJUSTMENT_PERMILLE: int = 5
PERMILLE: int = 1000
STOP_LOSS_MAX_ITERATIONS: int = 1000

OPTIMIZER_MAX_ITERATIONS: int = 15
#: 0.01 token in raw units.
OPTIMIZER_PRECISION: int = 10_000
#: 1 token in raw units.
OPTIMIZER_FLOOR: int = TOKEN_UNIT

# ---------------------------------------------------------------------------
# Decimal quanta for display/IO quantisation (formatting helpers)
# ---------------------------------------------------------------------------

SOL_QUANTUM: Decimal = Decimal("1e-9")
TOKEN_QUANTUM: Decimal = Decimal("1e-6")
PRICE_QUANTUM: Decimal = Decimal("1e-26")
PERCENT_QUANTUM: Decimal = Decimal("0.01")


# ---------------------------------------------------------------------------
# Metadata
# ---------------------------------------------------------------------------

__all__ = [
    "PRICE_DECIMALS",
    "PRICE_SCALE",
    "TOKEN_DECIMALS",
    "SOL_DECIMALS",
    "TOKEN_UNIT",
    "LAMPORTS_PER_SOL",
    "U64_MAX",
    "U128_MAX",
    "INITIAL_SOL_RESERVE",
    "INITIAL_TOKEN_RESERVE",
    "CURVE_K",
    "MIN_PRICE",
    "MAX_PRICE",
    "PRICE_ADJUSTMENT_PERMILLE",
    "PERMILLE",
    "STOP_LOSS_MAX_ITERATIONS",
    "OPTIMIZER_MAX_ITERATIONS",
    "OPTIMIZER_PRECISION",
    "OPTIMIZER_FLOOR",
    "SOL_QUANTUM",
    "TOKEN_QUANTUM",
    "PRICE_QUANTUM",
    "PERCENT_QUANTUM",
]
