"""
Amount primitives: Price (u128 fixed-point) and SolAmount / TokenAmount (u64 raw units).

- All values are non-negative integers; Decimal only for display.
- Construction checks the width of the on-chain type; arithmetic is checked
  (overflow -> AmountOverflowError, underflow -> InvariantViolation).
- Operands of different types never mix: a Price is not an amount and SOL is
  not a token.

Payloads from the indexer send prices as digit strings and amounts as JSON
integers; `parse()` accepts both and nothing else.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Context, Decimal
from typing import ClassVar, Union

from .constants import (
    PRICE_DECIMALS,
    SOL_DECIMALS,
    TOKEN_DECIMALS,
    U64_MAX,
    U128_MAX,
)
from .exc import AmountDomainError, AmountOverflowError, InvariantViolation

RawInt = Union[int, str]

# Wide enough for any u128 value; display conversions must not round.
_WIDE = Context(prec=80)


# ----------------------------
# Integer rounding helpers (centralised)
# ----------------------------

def _ceil_div(a: int, b: int) -> int:
    if a < 0 or b <= 0:
        raise AmountDomainError("_ceil_div expects a>=0 and b>0")
    return 0 if a == 0 else -(-a // b)


def _floor_div(a: int, b: int) -> int:
    if a < 0 or b <= 0:
        raise AmountDomainError("_floor_div expects a>=0 and b>0")
    return a // b


def _coerce_int(raw: RawInt, what: str) -> int:
    """Convert an int or base-10 digit string into int; reject everything else."""
    if isinstance(raw, bool):
        raise AmountDomainError(f"{what}: bool is not an integer amount")
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str):
        s = raw.strip()
        if not s.isdigit():
            raise AmountDomainError(f"{what}: expected a base-10 digit string, got {raw!r}")
        return int(s)
    raise AmountDomainError(f"{what}: unsupported type {type(raw).__name__}")


# ----------------------------
# Fixed-point base
# ----------------------------

@dataclass(frozen=True, order=True)
class _FixedPoint:
    """Unsigned integer with a fixed width and decimal scale."""

    value: int

    BITS: ClassVar[int] = 64
    DECIMALS: ClassVar[int] = 0
    MAX: ClassVar[int] = U64_MAX

    def __post_init__(self):
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise AmountDomainError(f"{type(self).__name__} requires an int, got {type(self.value).__name__}")
        if self.value < 0:
            raise AmountDomainError(f"{type(self).__name__} must be >= 0")
        if self.value > self.MAX:
            raise AmountOverflowError(f"{type(self).__name__} exceeds u{self.BITS}: {self.value}")

    @classmethod
    def parse(cls, raw: RawInt):
        """Validate a raw payload value once at the boundary."""
        if isinstance(raw, cls):
            return raw
        return cls(_coerce_int(raw, cls.__name__))

    @classmethod
    def zero(cls):
        return cls(0)

    def is_zero(self) -> bool:
        return self.value == 0

    def to_decimal(self) -> Decimal:
        return Decimal(self.value).scaleb(-self.DECIMALS, context=_WIDE)

    def __int__(self) -> int:
        return self.value

    def _check_operand(self, other) -> None:
        if type(other) is not type(self):
            raise AmountDomainError(
                f"{type(self).__name__} arithmetic requires {type(self).__name__} operands, got {type(other).__name__}"
            )

    # Basic arithmetic in integer domain
    def __add__(self, other):
        self._check_operand(other)
        total = self.value + other.value
        if total > self.MAX:
            raise AmountOverflowError(f"{type(self).__name__} addition overflow: {self.value} + {other.value}")
        return type(self)(total)

    def __sub__(self, other):
        self._check_operand(other)
        if self.value < other.value:
            raise InvariantViolation(f"{type(self).__name__} subtraction underflow: {self.value} - {other.value}")
        return type(self)(self.value - other.value)

    def mul_div_down(self, num: int, den: int):
        """floor(value * num / den), checked against the type width."""
        if num < 0:
            raise AmountDomainError(f"negative scalar not allowed: num={num}")
        if den <= 0:
            raise AmountDomainError(f"denominator must be > 0: den={den}")
        return type(self)(_floor_div(self.value * num, den))


# ----------------------------
# Concrete types
# ----------------------------

class Price(_FixedPoint):
    """u128 price with PRICE_DECIMALS fractional digits (SOL per whole token)."""

    BITS = 128
    DECIMALS = PRICE_DECIMALS
    MAX = U128_MAX


class SolAmount(_FixedPoint):
    """u64 SOL amount in lamports."""

    BITS = 64
    DECIMALS = SOL_DECIMALS
    MAX = U64_MAX


class TokenAmount(_FixedPoint):
    """u64 token amount in raw units (6 decimals)."""

    BITS = 64
    DECIMALS = TOKEN_DECIMALS
    MAX = U64_MAX


def sol_from_decimal(x: Union[Decimal, str]) -> SolAmount:
    """Human SOL -> lamports, truncating below one lamport."""
    d = Decimal(str(x))
    if d < 0:
        raise AmountDomainError("sol_from_decimal: negative input not allowed")
    return SolAmount(int(d.scaleb(SOL_DECIMALS, context=_WIDE)))


def token_from_decimal(x: Union[Decimal, str]) -> TokenAmount:
    """Human tokens -> raw units, truncating below one raw unit."""
    d = Decimal(str(x))
    if d < 0:
        raise AmountDomainError("token_from_decimal: negative input not allowed")
    return TokenAmount(int(d.scaleb(TOKEN_DECIMALS, context=_WIDE)))


def price_from_decimal(x: Union[Decimal, str]) -> Price:
    """Human price (SOL per token) -> fixed-point Price, truncating."""
    d = Decimal(str(x))
    if d < 0:
        raise AmountDomainError("price_from_decimal: negative input not allowed")
    return Price(int(d.scaleb(PRICE_DECIMALS, context=_WIDE)))


__all__ = [
    "Price",
    "SolAmount",
    "TokenAmount",
    "sol_from_decimal",
    "token_from_decimal",
    "price_from_decimal",
]
