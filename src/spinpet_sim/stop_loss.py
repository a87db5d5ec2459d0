"""
Stop-loss splice point search.

A leveraged position locks the price range its forced close would traverse:
a long closes by selling its tokens downward from the stop price, a short by
buying them back upward. That range must not cut into a range another
position already locked on the same side. Starting from the desired stop
price, the solver prices the close range, checks it against the side's
locked segments, and on overlap moves the candidate `price_adjustment_permille`
further away from the current price (down for longs, up for shorts).

Outcomes are typed: CONVERGED carries a StopLossResult; EXHAUSTED (iteration
cap) and DOMAIN_ERROR (price left the curve domain or the curve could not
price the close) carry the last candidate. `StopLossOutcome.unwrap()` turns
failures into exceptions for callers that prefer them.
"""
from __future__ import annotations

from decimal import Decimal
from fractions import Fraction
from typing import Any, Iterable, Optional, Tuple

from .core import (
    Price,
    SolAmount,
    TokenAmount,
    PERMILLE,
    SimulatorConfig,
    SIM_CFG,
    PositionSide,
    SearchStatus,
    StopLossResult,
    StopLossOutcome,
    AmountDomainError,
    floor_ratio,
    percentage,
)
from .curve import BondingCurve, DEFAULT_CURVE
from .segments import LiquiditySegmentModel, segments_from_api_orders
from .simulator import resolve_current_price

# Debug printing control
DEBUG_STOP = False

def _dbg(msg: str) -> None:
    if DEBUG_STOP:
        print(f"[STOP] {msg}")


OrderList = Optional[Iterable[Any]]


def stop_loss_metrics(current_price: int, stop_price: int, config: SimulatorConfig = SIM_CFG) -> Tuple[Decimal, Decimal]:
    """(percentage distance from current, implied leverage), both floored.

    Equal prices give 0% and leverage 1.
    """
    diff = abs(current_price - stop_price)
    if diff == 0:
        return Decimal(0), Decimal(1)
    return (
        percentage(diff, current_price, config.percentage_places),
        floor_ratio(current_price, diff, config.leverage_places),
    )


def _solve(
    side: PositionSide,
    current_price,
    token_amount,
    stop_loss_price,
    orders: OrderList,
    curve: BondingCurve,
    config: SimulatorConfig,
) -> StopLossOutcome:
    cur = resolve_current_price(current_price, curve)
    tokens = TokenAmount.parse(token_amount).value
    if tokens <= 0:
        raise AmountDomainError("token_amount must be > 0")
    desired = Price.parse(stop_loss_price).value
    if side == "long" and desired >= cur:
        raise AmountDomainError(f"long stop-loss {desired} must be below current price {cur}")
    if side == "short" and desired <= cur:
        raise AmountDomainError(f"short stop-loss {desired} must be above current price {cur}")

    book_side = "down" if side == "long" else "up"
    model = LiquiditySegmentModel(book_side, cur, segments_from_api_orders(orders), curve=curve)

    candidate = desired
    for iteration in range(1, config.stop_loss_max_iterations + 1):
        if side == "long":
            closed = curve.sell_from_price_with_token_input(candidate, tokens)
        else:
            closed = curve.buy_from_price_with_token_output(candidate, tokens)
        if closed is None:
            return StopLossOutcome(
                SearchStatus.DOMAIN_ERROR, None, iteration, candidate,
                f"curve cannot close {tokens} tokens from {candidate}",
            )
        close_end, trade_amount = closed
        overlap = model.check_overlap(candidate, close_end)
        _dbg(f"{side} iter={iteration} candidate={candidate} end={close_end} no_overlap={overlap.no_overlap}")
        if overlap.no_overlap:
            pct, leverage = stop_loss_metrics(cur, candidate, config)
            result = StopLossResult(
                side=side,
                executable_stop_loss_price=candidate,
                close_end_price=close_end,
                token_amount=tokens,
                trade_amount=trade_amount,
                stop_loss_percentage=pct,
                leverage=leverage,
                current_price=cur,
                desired_price=desired,
                iterations=iteration,
                prev_order_id=overlap.prev_order_id,
                next_order_id=overlap.next_order_id,
                insert_index=overlap.insert_index,
            )
            return StopLossOutcome(SearchStatus.CONVERGED, result, iteration, candidate)

        step = Price(candidate).mul_div_down(config.price_adjustment_permille, PERMILLE).value
        if side == "long":
            candidate -= step
            if step == 0 or candidate <= 0 or candidate < curve.min_price:
                return StopLossOutcome(
                    SearchStatus.DOMAIN_ERROR, None, iteration, candidate,
                    f"stop-loss fell below the price domain ({overlap.overlap_reason})",
                )
        else:
            candidate += step
            if step == 0 or candidate >= curve.max_price:
                return StopLossOutcome(
                    SearchStatus.DOMAIN_ERROR, None, iteration, candidate,
                    f"stop-loss rose above the price domain ({overlap.overlap_reason})",
                )

    return StopLossOutcome(
        SearchStatus.EXHAUSTED, None, config.stop_loss_max_iterations, candidate,
        f"still overlapping after {config.stop_loss_max_iterations} adjustments",
    )


def solve_long_stop_loss(
    current_price,
    token_amount,
    stop_loss_price,
    down_orders: OrderList = None,
    *,
    curve: BondingCurve = DEFAULT_CURVE,
    config: SimulatorConfig = SIM_CFG,
) -> StopLossOutcome:
    """Long: close by selling `token_amount` downward from the stop price."""
    return _solve("long", current_price, token_amount, stop_loss_price, down_orders, curve, config)


def solve_short_stop_loss(
    current_price,
    token_amount,
    stop_loss_price,
    up_orders: OrderList = None,
    *,
    curve: BondingCurve = DEFAULT_CURVE,
    config: SimulatorConfig = SIM_CFG,
) -> StopLossOutcome:
    """Short: close by buying back `token_amount` upward from the stop price."""
    return _solve("short", current_price, token_amount, stop_loss_price, up_orders, curve, config)


def solve_long_sol_stop_loss(
    current_price,
    sol_amount,
    stop_loss_price,
    down_orders: OrderList = None,
    *,
    curve: BondingCurve = DEFAULT_CURVE,
    config: SimulatorConfig = SIM_CFG,
) -> StopLossOutcome:
    """Long sized in SOL: the position holds what `sol_amount` buys at the current price."""
    cur = resolve_current_price(current_price, curve)
    sol = SolAmount.parse(sol_amount).value
    bought = curve.buy_from_price_with_sol_input(cur, sol)
    if bought is None or bought[1] <= 0:
        raise AmountDomainError(f"sol_amount {sol} buys no tokens at price {cur}")
    return solve_long_stop_loss(cur, bought[1], stop_loss_price, down_orders, curve=curve, config=config)


def stop_loss_price_from_leverage(current_price, leverage, side: PositionSide) -> int:
    """Stop price implied by a leverage: current * (1 -/+ 1/leverage), floored.

    `leverage` may be an int, a Fraction, a Decimal or a decimal string; the
    math is exact rational.
    """
    cur = Price.parse(current_price).value
    lev = Fraction(str(leverage)) if not isinstance(leverage, Fraction) else leverage
    if lev <= 0:
        raise AmountDomainError("leverage must be > 0")
    if side == "long":
        if lev <= 1:
            raise AmountDomainError("long leverage must be > 1")
        factor = 1 - 1 / lev
    elif side == "short":
        factor = 1 + 1 / lev
    else:
        raise AmountDomainError(f"side must be 'long' or 'short', got {side!r}")
    return cur * factor.numerator // factor.denominator


class StopLossSolver:
    """Stop-loss operations bound to one curve and config."""

    def __init__(self, curve: BondingCurve = DEFAULT_CURVE, config: SimulatorConfig = SIM_CFG):
        self.curve = curve
        self.config = config

    def solve_long_stop_loss(self, current_price, token_amount, stop_loss_price, down_orders=None):
        return solve_long_stop_loss(current_price, token_amount, stop_loss_price, down_orders,
                                    curve=self.curve, config=self.config)

    def solve_short_stop_loss(self, current_price, token_amount, stop_loss_price, up_orders=None):
        return solve_short_stop_loss(current_price, token_amount, stop_loss_price, up_orders,
                                     curve=self.curve, config=self.config)

    def solve_long_sol_stop_loss(self, current_price, sol_amount, stop_loss_price, down_orders=None):
        return solve_long_sol_stop_loss(current_price, sol_amount, stop_loss_price, down_orders,
                                        curve=self.curve, config=self.config)


__all__ = [
    "StopLossSolver",
    "stop_loss_metrics",
    "solve_long_stop_loss",
    "solve_short_stop_loss",
    "solve_long_sol_stop_loss",
    "stop_loss_price_from_leverage",
]
