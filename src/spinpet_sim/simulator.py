"""
Trade simulation against the bonding curve with locked ranges skipped.

A trade walks the free gaps of one side of the book in order (ascending for
buys over `up_orders`, descending for sells over `down_orders`). Each gap is
priced whole with the price-to-price curve operation; the gap in which the
target is reached is priced partially with the amount-based operation. The
walk always runs in token space: the target is the ideal token amount of the
trade at zero friction.

Insufficient liquidity is a normal result (completion below 100%), never an
exception; `SimulationResult.require_complete()` converts it on request.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Iterable, List, Optional

from .core import (
    Price,
    SolAmount,
    TokenAmount,
    SimulatorConfig,
    SIM_CFG,
    GapQuote,
    SimulationResult,
    AmountDomainError,
    InvariantViolation,
    percentage,
)
from .curve import BondingCurve, DEFAULT_CURVE
from .segments import LiquiditySegmentModel

# Debug printing control
DEBUG_SIM = False

def _dbg(msg: str) -> None:
    if DEBUG_SIM:
        print(f"[SIM] {msg}")


OrderList = Optional[Iterable[Any]]


def resolve_current_price(current_price, curve: BondingCurve = DEFAULT_CURVE) -> int:
    """Parse the current price; None or 0 (fresh mint) falls back to the initial price."""
    if current_price is None:
        return curve.get_initial_price()
    p = Price.parse(current_price).value
    return p if p > 0 else curve.get_initial_price()


def _positive(raw, cls, what: str) -> int:
    v = cls.parse(raw).value
    if v <= 0:
        raise AmountDomainError(f"{what} must be > 0")
    return v


@dataclass
class _Walk:
    # running totals stay within u64; overflow raises AmountOverflowError
    sol: SolAmount = field(default_factory=SolAmount.zero)
    token: TokenAmount = field(default_factory=TokenAmount.zero)
    depth_sol: SolAmount = field(default_factory=SolAmount.zero)
    depth_token: TokenAmount = field(default_factory=TokenAmount.zero)
    end_price: int = 0
    quotes: List[GapQuote] = field(default_factory=list)


def _walk(model: LiquiditySegmentModel, target_tokens: int) -> _Walk:
    """Consume gaps in order until `target_tokens` is reached; price every valid gap."""
    curve = model.curve
    buying = model.side == "up"
    w = _Walk(end_price=model.current_price)
    remaining = target_tokens
    for gap in model.gaps():
        if not gap.valid or gap.is_empty:
            w.quotes.append(GapQuote(gap.start_price, gap.end_price, gap.valid))
            continue
        if buying:
            pair = curve.buy_from_price_to_price(gap.start_price, gap.end_price)
            cap = pair  # (sol_in, token_out)
        else:
            pair = curve.sell_from_price_to_price(gap.start_price, gap.end_price)
            cap = None if pair is None else (pair[1], pair[0])  # (sol_out, token_in)
        if cap is None:
            _dbg(f"gap #{gap.index} [{gap.start_price}, {gap.end_price}] not priceable")
            w.quotes.append(GapQuote(gap.start_price, gap.end_price, True))
            continue
        cap_sol, cap_token = cap
        w.depth_sol += SolAmount(cap_sol)
        w.depth_token += TokenAmount(cap_token)
        taken_sol = taken_token = 0
        exit_price = None
        if remaining > 0 and cap_token > 0:
            if cap_token <= remaining:
                taken_sol, taken_token, exit_price = cap_sol, cap_token, gap.end_price
            else:
                if buying:
                    part = curve.buy_from_price_with_token_output(gap.start_price, remaining)
                else:
                    part = curve.sell_from_price_with_token_input(gap.start_price, remaining)
                if part is None:
                    raise InvariantViolation(
                        f"partial fill of {remaining} failed inside gap #{gap.index} with capacity {cap_token}"
                    )
                exit_price, taken_sol = part
                taken_token = remaining
            remaining -= taken_token
            w.sol += SolAmount(taken_sol)
            w.token += TokenAmount(taken_token)
            w.end_price = exit_price
            _dbg(f"gap #{gap.index}: took token={taken_token} sol={taken_sol} exit={exit_price} remaining={remaining}")
        w.quotes.append(
            GapQuote(
                gap.start_price,
                gap.end_price,
                True,
                capacity_sol=cap_sol,
                capacity_token=cap_token,
                taken_sol=taken_sol,
                taken_token=taken_token,
                exit_price=exit_price,
            )
        )
    return w


def _completion(actual: int, ideal: int, places: int) -> Decimal:
    if ideal <= 0:
        return Decimal(100)
    return min(percentage(actual, ideal, places), Decimal(100))


def _slippage(theoretical: int, actual: int, places: int) -> Decimal:
    if theoretical <= 0:
        return Decimal(0)
    return percentage(abs(theoretical - actual), theoretical, places)


def _theoretical_sol(curve: BondingCurve, price: int, tokens: int, buying: bool) -> int:
    """Bare-curve SOL for `tokens` at `price` (cost for buys, proceeds for sells)."""
    if tokens <= 0:
        return 0
    if buying:
        r = curve.buy_from_price_with_token_output(price, tokens)
    else:
        r = curve.sell_from_price_with_token_input(price, tokens)
    return 0 if r is None else r[1]


def _build(
    *,
    trade_type: str,
    input_type: str,
    input_amount: int,
    price: int,
    ideal_sol: Optional[int],
    ideal_token: int,
    model: LiquiditySegmentModel,
    config: SimulatorConfig,
    sol_target: Optional[int] = None,
) -> SimulationResult:
    """Walk the gaps and assemble the result.

    `ideal_sol=None` means the bare curve cannot price the full request (it is
    deeper than the curve's remaining range); the walked SOL is reported as
    the ideal. `sol_target` measures completion in SOL instead of tokens, for
    SOL-in buys whose ideal token amount is unknown.
    """
    buying = trade_type == "buy"
    w = _walk(model, ideal_token)
    sol, token = w.sol.value, w.token.value
    if ideal_sol is None:
        ideal_sol = sol
    theoretical = _theoretical_sol(model.curve, price, token, buying)
    places = config.percentage_places
    if sol_target is None:
        completion = _completion(token, ideal_token, places)
    else:
        completion = _completion(sol, sol_target, places)
    result = SimulationResult(
        trade_type=trade_type,
        input_type=input_type,
        input_amount=input_amount,
        current_price=price,
        ideal_sol_amount=ideal_sol,
        ideal_token_amount=ideal_token,
        actual_sol_amount=sol,
        actual_token_amount=token,
        theoretical_sol_amount=theoretical,
        suggested_sol_amount=sol,
        suggested_token_amount=token,
        completion_percentage=completion,
        slippage_percentage=_slippage(theoretical, sol, places),
        liquidity_sol_total=w.depth_sol.value,
        liquidity_token_total=w.depth_token.value,
        max_allowed_price=model.max_allowed_price,
        end_price=w.end_price,
        price_span=abs(w.end_price - price),
        gaps=tuple(w.quotes),
    )
    _dbg(
        f"{trade_type}/{input_type} in={input_amount} ideal=({ideal_sol}, {ideal_token}) "
        f"actual=({sol}, {token}) completion={result.completion_percentage} slippage={result.slippage_percentage}"
    )
    return result


def _curve_depth_tokens(curve: BondingCurve, price: int) -> int:
    """Tokens the bare curve holds between `price` and the top of the domain."""
    pair = curve.buy_from_price_to_price(price, curve.max_price)
    return 0 if pair is None else pair[1]


# ---------------------------------------------------------------------------
# Public operations
# ---------------------------------------------------------------------------

def simulate_buy(
    current_price,
    sol_amount,
    up_orders: OrderList = None,
    *,
    curve: BondingCurve = DEFAULT_CURVE,
    config: SimulatorConfig = SIM_CFG,
) -> SimulationResult:
    """Buy with `sol_amount` lamports in, walking around the up-side locks.

    A budget larger than the curve can absorb walks every gap and reports
    completion as the share of `sol_amount` spent.
    """
    price = resolve_current_price(current_price, curve)
    sol_in = _positive(sol_amount, SolAmount, "sol_amount")
    model = LiquiditySegmentModel.from_api("up", price, up_orders, curve=curve)
    ideal = curve.buy_from_price_with_sol_input(price, sol_in)
    if ideal is None:
        _dbg(f"buy of {sol_in} lamports exceeds the curve from {price}")
        return _build(
            trade_type="buy", input_type="sol", input_amount=sol_in, price=price,
            ideal_sol=sol_in, ideal_token=_curve_depth_tokens(curve, price), model=model,
            config=config, sol_target=sol_in,
        )
    return _build(
        trade_type="buy", input_type="sol", input_amount=sol_in, price=price,
        ideal_sol=sol_in, ideal_token=ideal[1], model=model, config=config,
    )


def simulate_token_buy(
    current_price,
    token_amount,
    up_orders: OrderList = None,
    *,
    curve: BondingCurve = DEFAULT_CURVE,
    config: SimulatorConfig = SIM_CFG,
) -> SimulationResult:
    """Buy exactly `token_amount` raw tokens out; `suggested_sol_amount` is the SOL to send."""
    price = resolve_current_price(current_price, curve)
    token_out = _positive(token_amount, TokenAmount, "token_amount")
    ideal = curve.buy_from_price_with_token_output(price, token_out)
    model = LiquiditySegmentModel.from_api("up", price, up_orders, curve=curve)
    return _build(
        trade_type="buy", input_type="token", input_amount=token_out, price=price,
        ideal_sol=None if ideal is None else ideal[1], ideal_token=token_out, model=model, config=config,
    )


def simulate_sell(
    current_price,
    token_amount,
    down_orders: OrderList = None,
    *,
    curve: BondingCurve = DEFAULT_CURVE,
    config: SimulatorConfig = SIM_CFG,
) -> SimulationResult:
    """Sell `token_amount` raw tokens in, walking down around the down-side locks."""
    price = resolve_current_price(current_price, curve)
    token_in = _positive(token_amount, TokenAmount, "token_amount")
    ideal = curve.sell_from_price_with_token_input(price, token_in)
    model = LiquiditySegmentModel.from_api("down", price, down_orders, curve=curve)
    return _build(
        trade_type="sell", input_type="token", input_amount=token_in, price=price,
        ideal_sol=None if ideal is None else ideal[1], ideal_token=token_in, model=model, config=config,
    )


def simulate_token_sell(
    current_price,
    token_amount,
    down_orders: OrderList = None,
    *,
    curve: BondingCurve = DEFAULT_CURVE,
    config: SimulatorConfig = SIM_CFG,
) -> SimulationResult:
    """Sell-panel oracle: `suggested_token_amount` is the part of `token_amount`
    the book can absorb, `suggested_sol_amount` the SOL it returns."""
    return simulate_sell(current_price, token_amount, down_orders, curve=curve, config=config)


class TradeSimulator:
    """Bundle of the simulate_* operations bound to one curve and config."""

    def __init__(self, curve: BondingCurve = DEFAULT_CURVE, config: SimulatorConfig = SIM_CFG):
        self.curve = curve
        self.config = config

    def simulate_buy(self, current_price, sol_amount, up_orders: OrderList = None) -> SimulationResult:
        return simulate_buy(current_price, sol_amount, up_orders, curve=self.curve, config=self.config)

    def simulate_token_buy(self, current_price, token_amount, up_orders: OrderList = None) -> SimulationResult:
        return simulate_token_buy(current_price, token_amount, up_orders, curve=self.curve, config=self.config)

    def simulate_sell(self, current_price, token_amount, down_orders: OrderList = None) -> SimulationResult:
        return simulate_sell(current_price, token_amount, down_orders, curve=self.curve, config=self.config)

    def simulate_token_sell(self, current_price, token_amount, down_orders: OrderList = None) -> SimulationResult:
        return simulate_token_sell(current_price, token_amount, down_orders, curve=self.curve, config=self.config)


__all__ = [
    "TradeSimulator",
    "resolve_current_price",
    "simulate_buy",
    "simulate_token_buy",
    "simulate_sell",
    "simulate_token_sell",
]
