"""
Bonding curve (constant product over virtual reserves): **pool math only**.

The curve is `x * y = k` with `x` the virtual SOL reserve (lamports) and `y`
the virtual token reserve (raw units). A price P (PRICE_DECIMALS fixed point,
SOL per whole token) maps to reserves through

    x(P) = isqrt(k * P // R)        y(x) = ceil(k / x)        P(x, y) = x * R // y

with `R = 10**(PRICE_DECIMALS + TOKEN_DECIMALS - SOL_DECIMALS)`. The pool keeps
the rounding dust: a buyer never receives more, and a seller never receives
more SOL, than the exact rational curve would give.

Every operation returns `None` when the trade is impossible (price outside
the domain, non-positive or oversized amount, drained reserve, result price
outside the domain). Callers treat `None` as "this range contributes nothing".
"""
from __future__ import annotations

from dataclasses import dataclass
from math import isqrt
from typing import Optional, Tuple

from .core import (
    INITIAL_SOL_RESERVE,
    INITIAL_TOKEN_RESERVE,
    PRICE_DECIMALS,
    SOL_DECIMALS,
    TOKEN_DECIMALS,
    MIN_PRICE,
    MAX_PRICE,
    U64_MAX,
    Price,
    SolAmount,
    TokenAmount,
    AmountDomainError,
)

# --- Debug utilities (toggleable) ---
DEBUG_CURVE = False

def _dbg(msg: str) -> None:
    if DEBUG_CURVE:
        print(f"[CURVE] {msg}")


Pair = Optional[Tuple[int, int]]


def _raw(x, what: str) -> int:
    """Unwrap Price/Amount instances; accept plain ints; reject the rest."""
    if isinstance(x, (Price, SolAmount, TokenAmount)):
        return x.value
    if isinstance(x, bool) or not isinstance(x, int):
        raise AmountDomainError(f"{what}: expected int, got {type(x).__name__}")
    return x


def _ceil_div(a: int, b: int) -> int:
    return -(-a // b)


@dataclass(frozen=True)
class CurveParams:
    """Protocol parameters of one bonding curve.

    `min_price` / `max_price` bound the price domain; the defaults are the
    prices at which one virtual reserve reaches the u64 ceiling. Pinning a
    different `price_decimals` requires matching bounds.
    """
    initial_sol_reserve: int = INITIAL_SOL_RESERVE
    initial_token_reserve: int = INITIAL_TOKEN_RESERVE
    price_decimals: int = PRICE_DECIMALS
    sol_decimals: int = SOL_DECIMALS
    token_decimals: int = TOKEN_DECIMALS
    min_price: int = MIN_PRICE
    max_price: int = MAX_PRICE

    def __post_init__(self):
        if self.initial_sol_reserve <= 0 or self.initial_token_reserve <= 0:
            raise AmountDomainError("initial reserves must be > 0")
        if not (0 < self.min_price < self.max_price):
            raise AmountDomainError("price bounds must satisfy 0 < min_price < max_price")
        if self.price_decimals + self.token_decimals - self.sol_decimals < 0:
            raise AmountDomainError("price_decimals too small for the reserve scale")

    @property
    def k(self) -> int:
        return self.initial_sol_reserve * self.initial_token_reserve

    @property
    def reserve_scale(self) -> int:
        return 10 ** (self.price_decimals + self.token_decimals - self.sol_decimals)


class BondingCurve:
    """Integer-exact curve operations for one `CurveParams`.

    Naming follows the trade direction: `buy_*` moves the price up (SOL in,
    tokens out), `sell_*` moves it down (tokens in, SOL out).
    """

    def __init__(self, params: Optional[CurveParams] = None):
        self.params = params or CurveParams()
        self._k = self.params.k
        self._r = self.params.reserve_scale
        self.min_price = self.params.min_price
        self.max_price = self.params.max_price

    # --- Reserve mapping ---
    def in_domain(self, price: int) -> bool:
        return self.min_price <= price <= self.max_price

    def sol_reserve_at(self, price) -> int:
        """Virtual SOL reserve at `price` (floored square root)."""
        p = _raw(price, "sol_reserve_at")
        if p <= 0:
            raise AmountDomainError("sol_reserve_at: price must be > 0")
        return isqrt(self._k * p // self._r)

    def token_reserve_for(self, sol_reserve: int) -> int:
        """Virtual token reserve matching `sol_reserve` (ceiling, pool keeps dust)."""
        if sol_reserve <= 0:
            raise AmountDomainError("token_reserve_for: reserve must be > 0")
        return _ceil_div(self._k, sol_reserve)

    def price_from_reserves(self, sol_reserve: int, token_reserve: int) -> int:
        if sol_reserve < 0 or token_reserve <= 0:
            raise AmountDomainError("price_from_reserves: reserves must be positive")
        return sol_reserve * self._r // token_reserve

    def get_initial_price(self) -> int:
        return self.price_from_reserves(self.params.initial_sol_reserve, self.params.initial_token_reserve)

    def _reserves(self, price: int) -> Optional[Tuple[int, int]]:
        if not self.in_domain(price):
            _dbg(f"price {price} outside [{self.min_price}, {self.max_price}]")
            return None
        x = self.sol_reserve_at(price)
        if x <= 0 or x > U64_MAX:
            return None
        y = self.token_reserve_for(x)
        if y > U64_MAX:
            return None
        return x, y

    @staticmethod
    def _amount_ok(amount: int) -> bool:
        return 0 < amount <= U64_MAX

    # --- Buys (price moves up) ---
    def buy_from_price_with_sol_input(self, price, sol_in) -> Pair:
        """SOL in -> (new_price, token_out)."""
        p, s = _raw(price, "price"), _raw(sol_in, "sol_in")
        if not self._amount_ok(s):
            return None
        res = self._reserves(p)
        if res is None:
            return None
        x0, y0 = res
        x1 = x0 + s
        if x1 > U64_MAX:
            return None
        y1 = self.token_reserve_for(x1)
        new_price = self.price_from_reserves(x1, y1)
        if new_price > self.max_price:
            return None
        _dbg(f"buy sol_in={s} x {x0}->{x1} y {y0}->{y1} price {p}->{new_price}")
        return new_price, y0 - y1

    def buy_from_price_with_token_output(self, price, token_out) -> Pair:
        """Tokens out -> (new_price, sol_in)."""
        p, t = _raw(price, "price"), _raw(token_out, "token_out")
        if not self._amount_ok(t):
            return None
        res = self._reserves(p)
        if res is None:
            return None
        x0, y0 = res
        y1 = y0 - t
        if y1 <= 0:
            # would drain the token reserve
            return None
        # x0 carries the floored-sqrt slack; the SOL reserve never shrinks on a buy
        x1 = max(_ceil_div(self._k, y1), x0)
        sol_in = x1 - x0
        if x1 > U64_MAX:
            return None
        new_price = self.price_from_reserves(x1, y1)
        if new_price > self.max_price:
            return None
        return new_price, sol_in

    def buy_from_price_to_price(self, start_price, end_price) -> Pair:
        """Walk up from `start_price` to `end_price` -> (sol_in, token_out)."""
        a, b = _raw(start_price, "start_price"), _raw(end_price, "end_price")
        if a >= b:
            return None
        ra, rb = self._reserves(a), self._reserves(b)
        if ra is None or rb is None:
            return None
        (xa, ya), (xb, yb) = ra, rb
        # reserves are monotone in price; a reversed pair raises InvariantViolation
        sol_in = SolAmount(xb) - SolAmount(xa)
        token_out = TokenAmount(ya) - TokenAmount(yb)
        return sol_in.value, token_out.value

    # --- Sells (price moves down) ---
    def sell_from_price_with_token_input(self, price, token_in) -> Pair:
        """Tokens in -> (new_price, sol_out)."""
        p, t = _raw(price, "price"), _raw(token_in, "token_in")
        if not self._amount_ok(t):
            return None
        res = self._reserves(p)
        if res is None:
            return None
        x0, y0 = res
        y1 = y0 + t
        if y1 > U64_MAX:
            return None
        x1 = _ceil_div(self._k, y1)
        new_price = self.price_from_reserves(x1, y1)
        if new_price < self.min_price:
            return None
        _dbg(f"sell token_in={t} x {x0}->{x1} y {y0}->{y1} price {p}->{new_price}")
        return new_price, x0 - x1

    def sell_from_price_with_sol_output(self, price, sol_out) -> Pair:
        """SOL out -> (new_price, token_in)."""
        p, s = _raw(price, "price"), _raw(sol_out, "sol_out")
        if not self._amount_ok(s):
            return None
        res = self._reserves(p)
        if res is None:
            return None
        x0, y0 = res
        x1 = x0 - s
        if x1 <= 0:
            # would drain the SOL reserve
            return None
        y1 = self.token_reserve_for(x1)
        if y1 > U64_MAX:
            return None
        new_price = self.price_from_reserves(x1, y1)
        if new_price < self.min_price:
            return None
        return new_price, y1 - y0

    def sell_from_price_to_price(self, start_price, end_price) -> Pair:
        """Walk down from `start_price` to `end_price` -> (token_in, sol_out)."""
        a, b = _raw(start_price, "start_price"), _raw(end_price, "end_price")
        if a <= b:
            return None
        ra, rb = self._reserves(a), self._reserves(b)
        if ra is None or rb is None:
            return None
        (xa, ya), (xb, yb) = ra, rb
        token_in = TokenAmount(yb) - TokenAmount(ya)
        sol_out = SolAmount(xa) - SolAmount(xb)
        return token_in.value, sol_out.value


DEFAULT_CURVE = BondingCurve()

# Module-level shortcuts bound to the protocol curve
sol_reserve_at = DEFAULT_CURVE.sol_reserve_at
token_reserve_for = DEFAULT_CURVE.token_reserve_for
price_from_reserves = DEFAULT_CURVE.price_from_reserves
get_initial_price = DEFAULT_CURVE.get_initial_price
buy_from_price_with_sol_input = DEFAULT_CURVE.buy_from_price_with_sol_input
buy_from_price_with_token_output = DEFAULT_CURVE.buy_from_price_with_token_output
buy_from_price_to_price = DEFAULT_CURVE.buy_from_price_to_price
sell_from_price_with_token_input = DEFAULT_CURVE.sell_from_price_with_token_input
sell_from_price_with_sol_output = DEFAULT_CURVE.sell_from_price_with_sol_output
sell_from_price_to_price = DEFAULT_CURVE.sell_from_price_to_price

__all__ = [
    "CurveParams",
    "BondingCurve",
    "DEFAULT_CURVE",
    "sol_reserve_at",
    "token_reserve_for",
    "price_from_reserves",
    "get_initial_price",
    "buy_from_price_with_sol_input",
    "buy_from_price_with_token_output",
    "buy_from_price_to_price",
    "sell_from_price_with_token_input",
    "sell_from_price_with_sol_output",
    "sell_from_price_to_price",
]
