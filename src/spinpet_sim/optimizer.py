"""
Largest tradeable amount under a budget (integer binary search).

`binary_search_max_amount` is the generic search: it knows nothing about the
curve and only asks an evaluator for the cost of a candidate. The wrappers
plug the simulator in as the evaluator:

- optimize_buy_token_amount: most tokens a SOL budget buys through the gaps.
- optimize_sell_token_amount: most tokens of a holding the book can absorb.

A candidate is feasible when the simulation fills completely, its cost fits
the budget, and (optionally) its slippage stays under `max_slippage`.
"""
from __future__ import annotations

from decimal import Decimal
from typing import Any, Callable, Iterable, Optional

from .core import (
    SolAmount,
    TokenAmount,
    SimulatorConfig,
    SIM_CFG,
    SearchStatus,
    SimulationResult,
    OptimizationResult,
    AmountDomainError,
    InvariantViolation,
    InsufficientLiquidityError,
)
from .curve import BondingCurve, DEFAULT_CURVE
from .segments import segments_from_api_orders
from .simulator import resolve_current_price, simulate_token_buy, simulate_token_sell

# Debug printing control
DEBUG_OPT = False

def _dbg(msg: str) -> None:
    if DEBUG_OPT:
        print(f"[OPT] {msg}")


#: Errors a midpoint evaluation may raise; each one marks the midpoint infeasible.
EVALUATION_ERRORS = (AmountDomainError, InvariantViolation, InsufficientLiquidityError)


def binary_search_max_amount(
    evaluate: Callable[[int], Optional[int]],
    budget: int,
    high: int,
    *,
    low: int = 0,
    precision: int = SIM_CFG.optimizer_precision,
    max_iterations: int = SIM_CFG.optimizer_max_iterations,
) -> OptimizationResult:
    """Find the largest `amount` in [low, high] with `evaluate(amount) <= budget`.

    Strategy:
      1) Evaluate the midpoint; a feasible cost records it and searches the upper half.
      2) An infeasible midpoint (None, over budget, or an evaluation error) searches the lower half.
      3) Stop once `high - low < precision` (CONVERGED) or after `max_iterations` (EXHAUSTED).

    Feasibility is assumed monotone (a larger amount never costs less).
    """
    if precision <= 0 or max_iterations <= 0:
        raise AmountDomainError("precision and max_iterations must be > 0")
    if low < 0 or budget < 0:
        raise AmountDomainError("low and budget must be >= 0")
    lo, hi = low, high
    best, best_cost, found = low, None, False
    iterations = 0
    status = SearchStatus.CONVERGED
    while lo <= hi and hi - lo >= precision:
        if iterations >= max_iterations:
            status = SearchStatus.EXHAUSTED
            break
        mid = (lo + hi) // 2
        iterations += 1
        try:
            cost = evaluate(mid)
        except EVALUATION_ERRORS as e:
            _dbg(f"mid={mid} raised {type(e).__name__}: {e}")
            cost = None
        if cost is not None and cost <= budget:
            best, best_cost, found = mid, cost, True
            lo = mid + 1
        else:
            hi = mid - 1
        _dbg(f"iter={iterations} mid={mid} cost={cost} -> [{lo}, {hi}]")
    return OptimizationResult(
        amount=best,
        cost=best_cost,
        iterations=iterations,
        status=status,
        feasible_found=found,
    )


def _acceptable(r: SimulationResult, max_slippage: Optional[Decimal]) -> bool:
    if not r.is_complete:
        return False
    return max_slippage is None or r.slippage_percentage <= Decimal(max_slippage)


def optimize_buy_token_amount(
    current_price,
    sol_budget,
    up_orders: Optional[Iterable[Any]] = None,
    *,
    max_slippage: Optional[Decimal] = None,
    high: Optional[int] = None,
    curve: BondingCurve = DEFAULT_CURVE,
    config: SimulatorConfig = SIM_CFG,
) -> OptimizationResult:
    """Largest token amount whose full-fill cost (`suggested_sol_amount`) fits `sol_budget`.

    The default upper bound is the ideal token amount of the budget at the
    current price: locked ranges only ever make tokens more expensive. A
    budget deeper than the curve falls back to every token the curve holds
    above the current price.
    """
    price = resolve_current_price(current_price, curve)
    budget = SolAmount.parse(sol_budget).value
    segments = segments_from_api_orders(up_orders)
    if high is None:
        high = 0
        if budget > 0:
            ideal = curve.buy_from_price_with_sol_input(price, budget)
            if ideal is None:
                ideal = curve.buy_from_price_to_price(price, curve.max_price)
            high = 0 if ideal is None else ideal[1]

    def evaluate(token_amount: int) -> Optional[int]:
        r = simulate_token_buy(price, token_amount, segments, curve=curve, config=config)
        return r.suggested_sol_amount if _acceptable(r, max_slippage) else None

    return binary_search_max_amount(
        evaluate,
        budget,
        high,
        low=config.optimizer_floor,
        precision=config.optimizer_precision,
        max_iterations=config.optimizer_max_iterations,
    )


def optimize_sell_token_amount(
    current_price,
    token_budget,
    down_orders: Optional[Iterable[Any]] = None,
    *,
    max_slippage: Optional[Decimal] = None,
    curve: BondingCurve = DEFAULT_CURVE,
    config: SimulatorConfig = SIM_CFG,
) -> OptimizationResult:
    """Largest token amount `<= token_budget` that the down side fills completely."""
    price = resolve_current_price(current_price, curve)
    budget = TokenAmount.parse(token_budget).value
    segments = segments_from_api_orders(down_orders)

    def evaluate(token_amount: int) -> Optional[int]:
        r = simulate_token_sell(price, token_amount, segments, curve=curve, config=config)
        return r.suggested_token_amount if _acceptable(r, max_slippage) else None

    return binary_search_max_amount(
        evaluate,
        budget,
        budget,
        low=config.optimizer_floor,
        precision=config.optimizer_precision,
        max_iterations=config.optimizer_max_iterations,
    )


class AmountOptimizer:
    """optimize_* operations bound to one curve and config."""

    def __init__(self, curve: BondingCurve = DEFAULT_CURVE, config: SimulatorConfig = SIM_CFG):
        self.curve = curve
        self.config = config

    def optimize_buy_token_amount(self, current_price, sol_budget, up_orders=None, *, max_slippage=None, high=None):
        return optimize_buy_token_amount(
            current_price, sol_budget, up_orders,
            max_slippage=max_slippage, high=high, curve=self.curve, config=self.config,
        )

    def optimize_sell_token_amount(self, current_price, token_budget, down_orders=None, *, max_slippage=None):
        return optimize_sell_token_amount(
            current_price, token_budget, down_orders,
            max_slippage=max_slippage, curve=self.curve, config=self.config,
        )


__all__ = [
    "EVALUATION_ERRORS",
    "AmountOptimizer",
    "binary_search_max_amount",
    "optimize_buy_token_amount",
    "optimize_sell_token_amount",
]
