# Top-level API for spinpet_sim (integer-domain).
"""
Top-level API for spinpet_sim (integer-domain).

Off-chain trade and liquidity simulator for a leveraged bonding-curve token:
  - BondingCurve: constant-product pool math over virtual reserves
  - LiquiditySegmentModel: locked ranges of open positions and the gaps between them
  - TradeSimulator: buys/sells walked through the gaps
  - AmountOptimizer: largest amount a budget buys or the book absorbs
  - StopLossSolver: stop-loss price whose close range clears existing locks

Prices are u128 fixed-point integers (PRICE_DECIMALS), amounts u64 raw units.
Every operation is pure and deterministic; nothing here does I/O.
"""

from __future__ import annotations

from .curve import BondingCurve, CurveParams, DEFAULT_CURVE
from .segments import (
    LockedSegment,
    Gap,
    LiquiditySegmentModel,
    segments_from_api_orders,
    check_price_range_overlap,
)
from .simulator import (
    TradeSimulator,
    simulate_buy,
    simulate_token_buy,
    simulate_sell,
    simulate_token_sell,
)
from .optimizer import (
    AmountOptimizer,
    binary_search_max_amount,
    optimize_buy_token_amount,
    optimize_sell_token_amount,
)
from .stop_loss import (
    StopLossSolver,
    solve_long_stop_loss,
    solve_short_stop_loss,
    solve_long_sol_stop_loss,
    stop_loss_price_from_leverage,
)
from .profit import Position, long_position_pnl, short_position_pnl

# Core data types and integer-domain primitives
from .core import (
    Price,
    SolAmount,
    TokenAmount,
    SimulatorConfig,
    SIM_CFG,
    SearchStatus,
    SimulationResult,
    OptimizationResult,
    OverlapResult,
    StopLossResult,
    StopLossOutcome,
    PositionPnl,
)

__all__ = [
    # curve
    "BondingCurve",
    "CurveParams",
    "DEFAULT_CURVE",
    # segments
    "LockedSegment",
    "Gap",
    "LiquiditySegmentModel",
    "segments_from_api_orders",
    "check_price_range_overlap",
    # simulation
    "TradeSimulator",
    "simulate_buy",
    "simulate_token_buy",
    "simulate_sell",
    "simulate_token_sell",
    # optimisation
    "AmountOptimizer",
    "binary_search_max_amount",
    "optimize_buy_token_amount",
    "optimize_sell_token_amount",
    # stop loss
    "StopLossSolver",
    "solve_long_stop_loss",
    "solve_short_stop_loss",
    "solve_long_sol_stop_loss",
    "stop_loss_price_from_leverage",
    # profit
    "Position",
    "long_position_pnl",
    "short_position_pnl",
    # core data types
    "Price",
    "SolAmount",
    "TokenAmount",
    "SimulatorConfig",
    "SIM_CFG",
    "SearchStatus",
    "SimulationResult",
    "OptimizationResult",
    "OverlapResult",
    "StopLossResult",
    "StopLossOutcome",
    "PositionPnl",
]
