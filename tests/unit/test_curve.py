import pytest

from spinpet_sim import curve as C
from spinpet_sim.curve import BondingCurve, CurveParams, DEFAULT_CURVE
from spinpet_sim.core import (
    Price,
    SolAmount,
    AmountDomainError,
    INITIAL_SOL_RESERVE,
    INITIAL_TOKEN_RESERVE,
    MIN_PRICE,
    MAX_PRICE,
    U64_MAX,
)
from spinpet_sim.core.fmt import fmt_dec, price_to_decimal

LOG_PLACES = 6


def _pd(p: int) -> str:
    return fmt_dec(price_to_decimal(p), places=LOG_PLACES)


P0 = C.get_initial_price()
P100 = 100 * 10 ** 26


# -----------------------------
# Reserve mapping & domain
# -----------------------------

def test_initial_price_matches_protocol_reserves():
    print(f"[initial] P0={P0} (~{_pd(P0)} SOL/token)")
    assert P0 == INITIAL_SOL_RESERVE * 10 ** 23 // INITIAL_TOKEN_RESERVE
    assert MIN_PRICE < P0 < MAX_PRICE
    # the reserves re-derived from P0 stay within a lamport of the protocol reserve
    assert abs(C.sol_reserve_at(P0) - INITIAL_SOL_RESERVE) <= 1


def test_domain_bounds_fit_u64():
    print("[domain] both reserves fit u64 at the price sentinels")
    assert C.sol_reserve_at(MAX_PRICE) <= U64_MAX
    assert C.token_reserve_for(C.sol_reserve_at(MIN_PRICE)) <= U64_MAX


@pytest.mark.parametrize(
    "call,name",
    [
        (lambda: C.buy_from_price_with_sol_input(MIN_PRICE - 1, 10), "price below domain"),
        (lambda: C.buy_from_price_with_sol_input(MAX_PRICE + 1, 10), "price above domain"),
        (lambda: C.buy_from_price_with_sol_input(0, 10), "zero price"),
        (lambda: C.buy_from_price_with_sol_input(P0, 0), "zero amount"),
        (lambda: C.buy_from_price_with_sol_input(P0, -1), "negative amount"),
        (lambda: C.buy_from_price_with_sol_input(P0, U64_MAX + 1), "amount above u64"),
        (lambda: C.sell_from_price_with_token_input(P0, 0), "zero token input"),
        (lambda: C.buy_from_price_to_price(P0, P0), "buy range not ascending"),
        (lambda: C.buy_from_price_to_price(P0 * 2, P0), "buy range descending"),
        (lambda: C.sell_from_price_to_price(P0, P0 * 2), "sell range ascending"),
        (lambda: C.buy_from_price_with_sol_input(MAX_PRICE // 2, U64_MAX // 2), "result above domain"),
    ],
)
def test_impossible_trades_return_none(call, name):
    print(f"[none] {name}")
    assert call() is None


def test_draining_requests_return_none():
    x0 = C.sol_reserve_at(P0)
    y0 = C.token_reserve_for(x0)
    print(f"[drain] x0={x0} y0={y0}")
    assert C.buy_from_price_with_token_output(P0, y0) is None
    assert C.sell_from_price_with_sol_output(P0, x0) is None
    assert C.buy_from_price_with_token_output(P0, y0 // 2) is not None


def test_non_integer_inputs_raise():
    with pytest.raises(AmountDomainError):
        C.buy_from_price_with_sol_input(float(P0), 10)
    with pytest.raises(AmountDomainError):
        C.sell_from_price_with_token_input(P0, "10")


def test_typed_inputs_accepted():
    assert C.buy_from_price_with_sol_input(Price(P0), SolAmount(10 ** 9)) == C.buy_from_price_with_sol_input(P0, 10 ** 9)


# -----------------------------
# Contracts
# -----------------------------

@pytest.mark.parametrize(
    "price,sol_in",
    [
        (P0, 10 ** 9),
        (P0, 123_456_789_012),
        (P100, 10 ** 12),
        (10 ** 20, 12_345),
        (10 ** 30, 5 * 10 ** 15),
    ],
)
def test_buy_round_trip(price, sol_in):
    new_price, token_out = C.buy_from_price_with_sol_input(price, sol_in)
    assert token_out > 0
    back = C.buy_from_price_with_token_output(price, token_out)
    assert back is not None
    _, sol_back = back
    tolerance = new_price // 10 ** 23 + 2
    print(f"[round-trip] P={_pd(price)} sol_in={sol_in} token_out={token_out} sol_back={sol_back} tol={tolerance}")
    assert 0 <= sol_in - sol_back <= tolerance


def test_buy_monotonic_in_sol():
    prev_tokens, prev_price = 0, P0
    for sol_in in (1, 10, 10 ** 3, 10 ** 6, 10 ** 9, 10 ** 11, 10 ** 13):
        new_price, token_out = C.buy_from_price_with_sol_input(P0, sol_in)
        print(f"[monotonic] sol_in={sol_in} token_out={token_out} price={_pd(new_price)}")
        assert token_out >= prev_tokens
        assert new_price >= prev_price
        prev_tokens, prev_price = token_out, new_price


@pytest.mark.parametrize("start,end", [(P0, P0 * 2), (P100, P100 + P100 // 1000), (10 ** 15, 10 ** 16)])
def test_price_to_price_agrees_with_sol_input(start, end):
    sol_in, token_out = C.buy_from_price_to_price(start, end)
    new_price, token_out2 = C.buy_from_price_with_sol_input(start, sol_in)
    print(f"[to-price] {_pd(start)} -> {_pd(end)}: sol_in={sol_in} token_out={token_out} re-derived={_pd(new_price)}")
    assert token_out2 == token_out
    assert abs(new_price - end) * 10 ** 6 <= end


def test_partial_fill_never_exceeds_full_gap():
    a, b = P0, P0 * 3 // 2
    full_sol, full_tokens = C.buy_from_price_to_price(a, b)
    for t in (1, full_tokens // 3, full_tokens - 1, full_tokens):
        _, sol_in = C.buy_from_price_with_token_output(a, t)
        print(f"[partial] t={t} sol_in={sol_in} full_sol={full_sol}")
        assert sol_in <= full_sol


def test_sell_gap_and_partial_agree():
    a, b = P100, P100 * 9 // 10
    token_in, sol_out = C.sell_from_price_to_price(a, b)
    new_price, sol_out2 = C.sell_from_price_with_token_input(a, token_in)
    print(f"[sell] token_in={token_in} sol_out={sol_out} partial={sol_out2} end={_pd(new_price)}")
    assert token_in > 0 and sol_out > 0
    assert sol_out2 >= sol_out
    assert abs(new_price - b) * 10 ** 6 <= b


def test_sell_round_trip():
    t = 10 ** 9
    _, sol_out = C.sell_from_price_with_token_input(P100, t)
    assert sol_out > 0
    _, t_back = C.sell_from_price_with_sol_output(P100, sol_out)
    print(f"[sell-round-trip] t={t} sol_out={sol_out} t_back={t_back}")
    assert t_back <= t


def test_sell_lowers_buy_raises_price():
    up, _ = C.buy_from_price_with_sol_input(P100, 10 ** 12)
    down, _ = C.sell_from_price_with_token_input(P100, 10 ** 9)
    assert down < P100 < up


# -----------------------------
# Parameters
# -----------------------------

def test_module_functions_bound_to_default_curve():
    assert C.buy_from_price_with_sol_input(P0, 777) == DEFAULT_CURVE.buy_from_price_with_sol_input(P0, 777)
    assert DEFAULT_CURVE.get_initial_price() == P0


def test_custom_price_scale():
    c28 = BondingCurve(CurveParams(price_decimals=28, min_price=10 ** 12, max_price=10 ** 38))
    p28 = c28.get_initial_price()
    print(f"[scale-28] initial={p28}")
    assert p28 // 100 == P0
    # the same trade gives the same tokens when the price is expressed on the wider scale
    _, t26 = DEFAULT_CURVE.buy_from_price_with_sol_input(P100, 10 ** 12)
    _, t28 = c28.buy_from_price_with_sol_input(P100 * 100, 10 ** 12)
    assert t26 == t28


def test_bad_params_rejected():
    with pytest.raises(AmountDomainError):
        CurveParams(initial_sol_reserve=0)
    with pytest.raises(AmountDomainError):
        CurveParams(min_price=10, max_price=10)


@pytest.mark.parametrize("sol_in", [1, 10 ** 9, 123_456_789_012])
def test_round_trip_exact_where_tokens_are_cheap(sol_in):
    # at the launch price one raw token costs far less than a lamport
    _, token_out = C.buy_from_price_with_sol_input(P0, sol_in)
    _, sol_back = C.buy_from_price_with_token_output(P0, token_out)
    print(f"[round-trip-P0] sol_in={sol_in} token_out={token_out} sol_back={sol_back}")
    assert 0 <= sol_in - sol_back <= 1


def test_price_to_price_needs_u64_reserves():
    wide = BondingCurve(CurveParams(max_price=10 ** 38))
    assert wide.buy_from_price_to_price(P100, 10 ** 38) is None
    assert wide.sell_from_price_to_price(10 ** 38, P100) is None
    assert wide.buy_from_price_to_price(P100, MAX_PRICE) == DEFAULT_CURVE.buy_from_price_to_price(P100, MAX_PRICE)
