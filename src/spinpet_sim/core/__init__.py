"""
spinpet_sim Core
================

Unified exports for the integer-domain primitives shared by the curve,
segment model, simulator and solvers. Prices are u128 fixed-point integers,
amounts u64 raw units. Decimal helpers are provided *only* for reporting.
"""

# Integer-domain constants
from .constants import (
    PRICE_DECIMALS,
    PRICE_SCALE,
    TOKEN_DECIMALS,
    SOL_DECIMALS,
    TOKEN_UNIT,
    LAMPORTS_PER_SOL,
    U64_MAX,
    U128_MAX,
    INITIAL_SOL_RESERVE,
    INITIAL_TOKEN_RESERVE,
    CURVE_K,
    MIN_PRICE,
    MAX_PRICE,
    PERMILLE,
)

# Configuration
from .config import SimulatorConfig, SIM_CFG

# Amount primitives
from .amounts import (
    Price,
    SolAmount,
    TokenAmount,
    sol_from_decimal,
    token_from_decimal,
    price_from_decimal,
)

# Decimal formatting helpers (non-core arithmetic)
from .fmt import (
    DEFAULT_DECIMAL_PRECISION,
    fmt_dec,
    floor_ratio,
    percentage,
    price_to_decimal,
    sol_to_decimal,
    token_to_decimal,
)

# Result records
from .datatypes import (
    BookSide,
    PositionSide,
    SearchStatus,
    GapQuote,
    SimulationResult,
    OptimizationResult,
    OverlapResult,
    StopLossResult,
    StopLossOutcome,
    PositionPnl,
)

# Core exceptions
from .exc import (
    AmountDomainError,
    AmountOverflowError,
    OrderFormatError,
    InvariantViolation,
    InsufficientLiquidityError,
    SearchExhaustedError,
    DomainBoundaryError,
)

__all__ = [
    # constants
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
    "PERMILLE",
    # config
    "SimulatorConfig",
    "SIM_CFG",
    # amounts
    "Price",
    "SolAmount",
    "TokenAmount",
    "sol_from_decimal",
    "token_from_decimal",
    "price_from_decimal",
    # fmt
    "DEFAULT_DECIMAL_PRECISION",
    "fmt_dec",
    "floor_ratio",
    "percentage",
    "price_to_decimal",
    "sol_to_decimal",
    "token_to_decimal",
    # datatypes
    "BookSide",
    "PositionSide",
    "SearchStatus",
    "GapQuote",
    "SimulationResult",
    "OptimizationResult",
    "OverlapResult",
    "StopLossResult",
    "StopLossOutcome",
    "PositionPnl",
    # exceptions
    "AmountDomainError",
    "AmountOverflowError",
    "OrderFormatError",
    "InvariantViolation",
    "InsufficientLiquidityError",
    "SearchExhaustedError",
    "DomainBoundaryError",
]
