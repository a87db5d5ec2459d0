"""
Core result records used by the simulator, optimiser and stop-loss solver.

These records are immutable and carry plain integers in raw on-chain units
(prices with PRICE_DECIMALS, SOL in lamports, tokens in raw units). Decimal
appears only in the reporting fields (percentages, leverage).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Literal, Optional, Tuple

from .exc import DomainBoundaryError, InsufficientLiquidityError, SearchExhaustedError

#: Which locked-order list a sequence belongs to. `up_orders` (short
#: positions) sit above the current price, `down_orders` (long positions)
#: below it.
BookSide = Literal["up", "down"]
#: Position direction as used by the stop-loss solver and P&L helpers.
PositionSide = Literal["long", "short"]
TradeType = Literal["buy", "sell"]
InputType = Literal["sol", "token"]


class SearchStatus(Enum):
    CONVERGED = "converged"
    EXHAUSTED = "exhausted"
    DOMAIN_ERROR = "domain_error"


# ---------------------------------------------------------------------------
# Simulation
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class GapQuote:
    """What the walk took from one gap.

    `capacity_*` is the whole gap priced by the curve; `taken_*` the part the
    trade consumed (equal to capacity for every gap before the last one).
    Invalid gaps report zeros.
    """

    start_price: int
    end_price: int
    valid: bool
    capacity_sol: int = 0
    capacity_token: int = 0
    taken_sol: int = 0
    taken_token: int = 0
    exit_price: Optional[int] = None


@dataclass(frozen=True)
class SimulationResult:
    """Outcome of one simulated trade against a locked-order book.

    Fields:
    - trade_type / input_type / input_amount: what the caller asked for.
    - ideal_*: the trade applied to the bare curve at the current price.
    - actual_*: what the walk around the locked ranges delivered.
    - theoretical_sol_amount: the bare-curve SOL for the actual token amount.
    - suggested_*: the amount to put into the transaction.
    - completion_percentage: actual / ideal * 100, floored, capped at 100.
    - slippage_percentage: |theoretical - actual| / theoretical * 100.
    - liquidity_*_total: depth of all valid gaps walked.
    - max_allowed_price: end of the first gap (first locked range edge).
    - price_span / end_price: how far the walk moved the price.
    - gaps: per-gap trace.
    """

    trade_type: TradeType
    input_type: InputType
    input_amount: int
    current_price: int
    ideal_sol_amount: int
    ideal_token_amount: int
    actual_sol_amount: int
    actual_token_amount: int
    theoretical_sol_amount: int
    suggested_sol_amount: int
    suggested_token_amount: int
    completion_percentage: Decimal
    slippage_percentage: Decimal
    liquidity_sol_total: int
    liquidity_token_total: int
    max_allowed_price: int
    end_price: int
    price_span: int
    gaps: Tuple[GapQuote, ...] = field(default_factory=tuple)

    @property
    def is_complete(self) -> bool:
        return self.completion_percentage >= Decimal(100)

    def require_complete(self) -> "SimulationResult":
        """Return self, or raise InsufficientLiquidityError on a partial fill."""
        # The walk always runs in token space, so the token pair is the yardstick.
        if not self.is_complete:
            raise InsufficientLiquidityError(
                self.ideal_token_amount, self.actual_token_amount, self.completion_percentage
            )
        return self


# ---------------------------------------------------------------------------
# Optimisation
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class OptimizationResult:
    """Largest feasible amount found by the binary search.

    `amount` is the last feasible midpoint, or the search floor when none was
    found (`feasible_found=False`); `cost` is the evaluator's cost for it
    (None when never evaluated feasibly).
    """

    amount: int
    cost: Optional[int]
    iterations: int
    status: SearchStatus
    feasible_found: bool


# ---------------------------------------------------------------------------
# Stop loss
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class OverlapResult:
    no_overlap: bool
    overlap_reason: str = ""
    overlapping_order_ids: Tuple[object, ...] = ()
    prev_order_id: Optional[object] = None
    next_order_id: Optional[object] = None
    insert_index: int = 0


@dataclass(frozen=True)
class StopLossResult:
    """Executable stop-loss splice point.

    `trade_amount` is the SOL a long receives when closing (sell) or the SOL a
    short pays when closing (buy). `close_end_price` is the other endpoint of
    the close range starting at `executable_stop_loss_price`.
    """

    side: PositionSide
    executable_stop_loss_price: int
    close_end_price: int
    token_amount: int
    trade_amount: int
    stop_loss_percentage: Decimal
    leverage: Decimal
    current_price: int
    desired_price: int
    iterations: int
    prev_order_id: Optional[object] = None
    next_order_id: Optional[object] = None
    insert_index: int = 0


@dataclass(frozen=True)
class StopLossOutcome:
    status: SearchStatus
    result: Optional[StopLossResult]
    iterations: int
    last_price: int
    reason: str = ""

    @property
    def ok(self) -> bool:
        return self.status is SearchStatus.CONVERGED

    def unwrap(self) -> StopLossResult:
        """Return the result, or raise the exception matching the failure status."""
        if self.status is SearchStatus.CONVERGED and self.result is not None:
            return self.result
        if self.status is SearchStatus.DOMAIN_ERROR:
            raise DomainBoundaryError(self.last_price, self.reason)
        raise SearchExhaustedError(self.iterations, self.last_price, self.reason)


# ---------------------------------------------------------------------------
# Position P&L
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PositionPnl:
    """Profit snapshot of an open position. SOL values are signed lamports."""

    side: PositionSide
    close_sol_amount: int
    gross_profit: int
    net_profit: int
    realized_sol: int
    profit_percentage: Decimal
    stop_loss_percentage: Decimal


__all__ = [
    "BookSide",
    "PositionSide",
    "TradeType",
    "InputType",
    "SearchStatus",
    "GapQuote",
    "SimulationResult",
    "OptimizationResult",
    "OverlapResult",
    "StopLossResult",
    "StopLossOutcome",
    "PositionPnl",
]
