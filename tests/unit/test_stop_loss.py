import pytest
from decimal import Decimal

from spinpet_sim import curve as C
from spinpet_sim.stop_loss import (
    StopLossSolver,
    stop_loss_metrics,
    solve_long_stop_loss,
    solve_short_stop_loss,
    solve_long_sol_stop_loss,
    stop_loss_price_from_leverage,
)
from spinpet_sim.segments import check_price_range_overlap, segments_from_api_orders
from spinpet_sim.core import (
    SimulatorConfig,
    SearchStatus,
    AmountDomainError,
    SearchExhaustedError,
    DomainBoundaryError,
    TOKEN_UNIT,
    percentage,
)
from spinpet_sim.core.fmt import fmt_dec, price_to_decimal
from tests.conftest import P100, px, order

LOG_PLACES = 6


def _pd(p: int) -> str:
    return fmt_dec(price_to_decimal(p), places=LOG_PLACES)


# -----------------------------
# Long: 100 SOL/token market, lock 95 -> 90 below
# -----------------------------

def test_long_large_position_steps_below_lock(down_book_example):
    out = solve_long_stop_loss(P100, 500 * TOKEN_UNIT, px(96), down_book_example)
    res = out.unwrap()
    print(
        f"[long-500] status={out.status} iterations={res.iterations} stop={_pd(res.executable_stop_loss_price)} "
        f"end={_pd(res.close_end_price)} pct={res.stop_loss_percentage} leverage={res.leverage}"
    )
    assert out.status is SearchStatus.CONVERGED and out.ok
    assert res.iterations > 1
    assert res.executable_stop_loss_price <= px(90)
    assert res.close_end_price < res.executable_stop_loss_price
    assert res.desired_price == px(96)
    assert res.trade_amount > 0
    segs = segments_from_api_orders(down_book_example)
    assert check_price_range_overlap("down", segs, res.executable_stop_loss_price, res.close_end_price).no_overlap
    assert (res.insert_index, res.prev_order_id, res.next_order_id) == (1, "A", None)
    assert res.stop_loss_percentage == percentage(P100 - res.executable_stop_loss_price, P100)


def test_long_small_position_converges_first_try(down_book_example):
    out = solve_long_stop_loss(P100, TOKEN_UNIT, px(96), down_book_example)
    res = out.unwrap()
    print(f"[long-1] iterations={res.iterations} end={_pd(res.close_end_price)}")
    assert res.iterations == 1
    assert res.executable_stop_loss_price == px(96)
    assert res.close_end_price >= px(95)
    assert (res.insert_index, res.prev_order_id, res.next_order_id) == (0, None, "A")
    assert res.stop_loss_percentage == Decimal(4)
    assert res.leverage == Decimal(25)


def test_long_is_deterministic(down_book_example):
    a = solve_long_stop_loss(P100, 500 * TOKEN_UNIT, px(96), down_book_example)
    b = solve_long_stop_loss(P100, 500 * TOKEN_UNIT, px(96), down_book_example)
    assert a == b


def test_long_without_locks(initial_price):
    out = solve_long_stop_loss(initial_price, 10 ** 12, initial_price // 2, [])
    assert out.ok and out.iterations == 1
    _, sol_out = C.sell_from_price_with_token_input(initial_price // 2, 10 ** 12)
    assert out.result.trade_amount == sol_out


# -----------------------------
# Short: lock 105 -> 110 above
# -----------------------------

def test_short_steps_above_lock():
    book = [order(px(105), px(110), pda="U")]
    out = solve_short_stop_loss(P100, 500 * TOKEN_UNIT, px(104), book)
    res = out.unwrap()
    print(f"[short-500] iterations={res.iterations} stop={_pd(res.executable_stop_loss_price)} end={_pd(res.close_end_price)}")
    assert res.iterations > 1
    assert res.executable_stop_loss_price >= px(110)
    assert res.close_end_price > res.executable_stop_loss_price
    assert (res.insert_index, res.prev_order_id, res.next_order_id) == (1, "U", None)
    diff = res.executable_stop_loss_price - P100
    assert res.leverage == Decimal(10000 * P100 // diff) / 10000


# -----------------------------
# Failure outcomes
# -----------------------------

def test_iteration_cap_gives_exhausted(down_book_example):
    cfg = SimulatorConfig(stop_loss_max_iterations=2)
    out = solve_long_stop_loss(P100, 500 * TOKEN_UNIT, px(96), down_book_example, config=cfg)
    print(f"[exhausted] {out}")
    assert out.status is SearchStatus.EXHAUSTED
    assert out.iterations == 2 and out.result is None
    assert out.last_price < px(96)
    with pytest.raises(SearchExhaustedError) as exc:
        out.unwrap()
    assert exc.value.iterations == 2


def test_curve_failure_gives_domain_error():
    cur = 10 ** 11
    tokens = 12_500_000_000_000_000_000
    out = solve_long_stop_loss(cur, tokens, cur - 10 ** 9, [])
    print(f"[domain] {out}")
    assert out.status is SearchStatus.DOMAIN_ERROR
    assert out.iterations == 1 and out.last_price == cur - 10 ** 9
    with pytest.raises(DomainBoundaryError):
        out.unwrap()


@pytest.mark.parametrize(
    "call,name",
    [
        (lambda: solve_long_stop_loss(P100, TOKEN_UNIT, P100), "long stop at current"),
        (lambda: solve_long_stop_loss(P100, TOKEN_UNIT, px(101)), "long stop above current"),
        (lambda: solve_short_stop_loss(P100, TOKEN_UNIT, px(99)), "short stop below current"),
        (lambda: solve_long_stop_loss(P100, 0, px(90)), "zero tokens"),
    ],
)
def test_bad_stop_inputs(call, name):
    print(f"[bad-stop] {name}")
    with pytest.raises(AmountDomainError):
        call()


# -----------------------------
# Helpers
# -----------------------------

def test_metrics_equal_prices():
    assert stop_loss_metrics(P100, P100) == (Decimal(0), Decimal(1))


def test_sol_sized_long(down_book_example):
    sol = 10 ** 9
    tokens = C.buy_from_price_with_sol_input(P100, sol)[1]
    out = solve_long_sol_stop_loss(P100, sol, px(96), down_book_example)
    assert out.ok and out.result.token_amount == tokens
    assert out.result == solve_long_stop_loss(P100, tokens, px(96), down_book_example).result


@pytest.mark.parametrize(
    "lev,side,expected",
    [
        (2, "long", px(50)),
        ("2.5", "long", px(60)),
        (Decimal("4"), "short", px(125)),
        (2, "short", px(150)),
    ],
)
def test_price_from_leverage(lev, side, expected):
    assert stop_loss_price_from_leverage(P100, lev, side) == expected


@pytest.mark.parametrize("lev,side", [(1, "long"), (0, "short"), (2, "sideways")])
def test_price_from_leverage_rejects(lev, side):
    with pytest.raises(AmountDomainError):
        stop_loss_price_from_leverage(P100, lev, side)


def test_solver_class_delegates(down_book_example):
    solver = StopLossSolver()
    assert solver.solve_long_stop_loss(P100, TOKEN_UNIT, px(96), down_book_example) == solve_long_stop_loss(
        P100, TOKEN_UNIT, px(96), down_book_example
    )
