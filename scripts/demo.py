"""Comprehensive demo: trade simulation, amount optimisation and stop-loss placement.

Scenarios covered:
S1a) Buy with SOL on an empty book (bare curve)
S1b) Buy across two short locks (gap walk, slippage)
S2a) Sell tokens through a long lock below the market
S2b) Sell near the price floor (incomplete fill)

Search:
S3a) Largest token buy a SOL budget affords, with and without a slippage cap
S3b) Largest sell the down book absorbs
S4a) Long stop-loss stepped below an existing lock
S4b) Short stop-loss stepped above an existing lock
S4c) Stop-loss that runs out of iterations
S5a) Open-position P&L (long and short)

`--snapshot FILE` replaces the built-in book with a JSON file of the form
{"current_price": "...", "up_orders": [...], "down_orders": [...]} using the
indexer's order records.
"""
from __future__ import annotations

from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional
import argparse
import json
import sys

from spinpet_sim import (
    SimulationResult,
    StopLossOutcome,
    SimulatorConfig,
    Position,
    simulate_buy,
    simulate_sell,
    optimize_buy_token_amount,
    optimize_sell_token_amount,
    solve_long_stop_loss,
    solve_short_stop_loss,
    long_position_pnl,
    short_position_pnl,
)
from spinpet_sim.core import PRICE_SCALE, TOKEN_UNIT, LAMPORTS_PER_SOL, MIN_PRICE
from spinpet_sim.core.fmt import fmt_dec, price_to_decimal, sol_to_decimal, token_to_decimal
from spinpet_sim.profit import format_profit_percentage

# ---------- pretty printers ----------

def _p(price: int) -> str:
    return fmt_dec(price_to_decimal(price), places=6)


def _sol(lamports: int) -> str:
    sign = "-" if lamports < 0 else ""
    return sign + fmt_dec(sol_to_decimal(abs(lamports)), places=9)


def _tok(raw: int) -> str:
    return fmt_dec(token_to_decimal(raw), places=6)


def brief_book(orders: List[Dict[str, Any]], side: str) -> str:
    if not orders:
        return f"{side}: (empty)"
    parts = [
        f"{side}[{i+1}]: {_p(int(o['lock_lp_start_price']))} -> {_p(int(o['lock_lp_end_price']))} "
        f"tokens={_tok(int(o['lock_lp_token_amount']))}"
        for i, o in enumerate(orders)
    ]
    return "; ".join(parts)


def print_simulation(title: str, r: SimulationResult, *, show_gaps: bool = True) -> None:
    print(f"\n=== {title} ===")
    print(f"- {r.trade_type} by {r.input_type}, input={r.input_amount} at price {_p(r.current_price)}")
    if show_gaps:
        print("Gaps (walk order):")
        for g in r.gaps:
            if not g.valid:
                print(f"  • {_p(g.start_price)} -> {_p(g.end_price)}  (skipped: lock straddles current price)")
                continue
            print(
                f"  • {_p(g.start_price)} -> {_p(g.end_price)}  cap={_tok(g.capacity_token)} tok / {_sol(g.capacity_sol)} SOL"
                f"  took={_tok(g.taken_token)} tok / {_sol(g.taken_sol)} SOL"
            )
    print("\nTotals")
    print(f"- ideal:  {_tok(r.ideal_token_amount)} tok, {_sol(r.ideal_sol_amount)} SOL")
    print(f"- actual: {_tok(r.actual_token_amount)} tok, {_sol(r.actual_sol_amount)} SOL (theoretical {_sol(r.theoretical_sol_amount)})")
    print(f"- completion={r.completion_percentage}%  slippage={r.slippage_percentage}%  end={_p(r.end_price)}")
    print(f"- depth: {_tok(r.liquidity_token_total)} tok / {_sol(r.liquidity_sol_total)} SOL")


def print_stop_loss(title: str, out: StopLossOutcome) -> None:
    print(f"\n=== {title} ===")
    if not out.ok:
        print(f"- {out.status.value}: {out.reason} (iterations={out.iterations}, last={_p(out.last_price)})")
        return
    r = out.result
    print(f"- desired={_p(r.desired_price)} executable={_p(r.executable_stop_loss_price)} close_end={_p(r.close_end_price)}")
    print(f"- iterations={r.iterations} distance={r.stop_loss_percentage}% leverage={r.leverage}x")
    print(f"- splice: index={r.insert_index} prev={r.prev_order_id} next={r.next_order_id}")


# ---------- built-in market ----------

def px(human) -> int:
    return int(Decimal(str(human)) * PRICE_SCALE)


def order(start: int, end: int, tokens: int, pda: str) -> Dict[str, Any]:
    return {
        "lock_lp_start_price": str(start),
        "lock_lp_end_price": str(end),
        "lock_lp_sol_amount": 0,
        "lock_lp_token_amount": tokens,
        "order_pda": pda,
    }


def default_market() -> Dict[str, Any]:
    return {
        "current_price": px(100),
        "up_orders": [
            order(px(105), px(110), 1_000 * TOKEN_UNIT, "U1"),
            order(px(120), px(130), 1_000 * TOKEN_UNIT, "U2"),
        ],
        "down_orders": [order(px(95), px(90), 1_000 * TOKEN_UNIT, "D1")],
    }


def load_snapshot(path: str) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as fh:
        data = json.load(fh)
    return {
        "current_price": int(data.get("current_price") or 0),
        "up_orders": data.get("up_orders") or [],
        "down_orders": data.get("down_orders") or [],
    }


#
# -------- scenario registry helpers --------
class Scenario:
    def __init__(self, sid: str, fn: Callable[[], None]):
        self.sid = sid
        self.fn = fn

scenarios: List[Scenario] = []

def add(sid: str, fn: Callable[[], None]) -> None:
    scenarios.append(Scenario(sid, fn))


def banner(title: str, m: Optional[Dict[str, Any]] = None) -> None:
    print("\n" + "=" * 80)
    print(f"Scenario: {title}")
    if m is not None:
        print("Market")
        print(f"- price: {_p(m['current_price'])} SOL/token")
        print("- " + brief_book(m["up_orders"], "UP"))
        print("- " + brief_book(m["down_orders"], "DOWN"))


# ---------- run scenarios ----------
if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Bonding-curve trade / stop-loss simulator demo")
    parser.add_argument("--only", type=str, default=None, help="Comma-separated scenario ids to run (e.g., S1b,S4a)")
    parser.add_argument("--skip", type=str, default=None, help="Comma-separated scenario ids to skip")
    parser.add_argument("--snapshot", type=str, default=None, help="JSON market snapshot to use instead of the built-in book")
    parser.add_argument("--no-gaps", action="store_true", help="Hide per-gap lines; show totals only")
    args = parser.parse_args(sys.argv[1:])

    show_gaps = not args.no_gaps
    market = load_snapshot(args.snapshot) if args.snapshot else default_market()
    cur = market["current_price"]
    up, down = market["up_orders"], market["down_orders"]

    # --------------- Register scenarios ---------------
    def s1a():
        banner("S1a) Buy 1 SOL on an empty book")
        print_simulation("Buy", simulate_buy(cur, LAMPORTS_PER_SOL, []), show_gaps=show_gaps)
    add("S1a", s1a)

    def s1b():
        banner("S1b) Buy 20000 SOL across the up book", market)
        print_simulation("Buy", simulate_buy(cur, 20_000 * LAMPORTS_PER_SOL, up), show_gaps=show_gaps)
    add("S1b", s1b)

    def s2a():
        banner("S2a) Sell 1000 tokens through the down book", market)
        print_simulation("Sell", simulate_sell(cur, 1_000 * TOKEN_UNIT, down), show_gaps=show_gaps)
    add("S2a", s2a)

    def s2b():
        floor_cur = 4 * MIN_PRICE
        floor_book = [order(3 * MIN_PRICE, MIN_PRICE * 6 // 5, 10 ** 9, "F1")]
        banner("S2b) Sell near the price floor (incomplete fill)")
        r = simulate_sell(floor_cur, 37 * 10 ** 17, floor_book)
        print_simulation("Sell", r, show_gaps=show_gaps)
        print(f"- complete? {r.is_complete}")
    add("S2b", s2b)

    def s3a():
        banner("S3a) Largest buy for 500 SOL", market)
        budget = 500 * LAMPORTS_PER_SOL
        for cap in (None, Decimal("1"), Decimal("0.1")):
            r = optimize_buy_token_amount(cur, budget, up, max_slippage=cap)
            cost = _sol(r.cost) if r.cost is not None else "--"
            print(f"- max_slippage={cap}: tokens={_tok(r.amount)} cost={cost} SOL iterations={r.iterations} status={r.status.value}")
    add("S3a", s3a)

    def s3b():
        banner("S3b) Largest sell of up to 5000 tokens", market)
        r = optimize_sell_token_amount(cur, 5_000 * TOKEN_UNIT, down, max_slippage=Decimal("5"))
        print(f"- tokens={_tok(r.amount)} iterations={r.iterations} status={r.status.value} feasible={r.feasible_found}")
    add("S3b", s3b)

    def s4a():
        banner("S4a) Long 500 tokens, stop at 96", market)
        print_stop_loss("Long stop-loss", solve_long_stop_loss(cur, 500 * TOKEN_UNIT, px(96), down))
    add("S4a", s4a)

    def s4b():
        banner("S4b) Short 500 tokens, stop at 104", market)
        print_stop_loss("Short stop-loss", solve_short_stop_loss(cur, 500 * TOKEN_UNIT, px(104), up))
    add("S4b", s4b)

    def s4c():
        banner("S4c) Long stop-loss with a 2-iteration cap", market)
        cfg = SimulatorConfig(stop_loss_max_iterations=2)
        print_stop_loss("Long stop-loss", solve_long_stop_loss(cur, 500 * TOKEN_UNIT, px(96), down, config=cfg))
    add("S4c", s4c)

    def s5a():
        banner("S5a) Open-position P&L")
        pos = Position(lock_lp_start_price=px(90), lock_lp_token_amount=100 * TOKEN_UNIT, margin_sol_amount=2_000 * LAMPORTS_PER_SOL)
        for label, fn in (("long", long_position_pnl), ("short", short_position_pnl)):
            pnl = fn(cur, pos)
            if pnl is None:
                print(f"- {label}: --")
                continue
            print(
                f"- {label}: close={_sol(pnl.close_sol_amount)} SOL net={_sol(pnl.net_profit)} SOL "
                f"profit={format_profit_percentage(pnl.profit_percentage)} distance={pnl.stop_loss_percentage}%"
            )
    add("S5a", s5a)

    # --------------- Filter & run ---------------
    only_set = None
    skip_set = None
    if args.only:
        only_set = set([s.strip() for s in args.only.split(',') if s.strip()])
    if args.skip:
        skip_set = set([s.strip() for s in args.skip.split(',') if s.strip()])

    for sc in scenarios:
        if only_set is not None and sc.sid not in only_set:
            continue
        if skip_set is not None and sc.sid in skip_set:
            continue
        sc.fn()
