"""Locked orders → gaps: the free price ranges a trade may walk through.

Open leveraged positions reserve ("lock") a price range of the curve. For one
side of the book the locked ranges form an ordered sequence moving away from
the current price; the spaces between them are the gaps a trade can consume.

Helpers (public):
- segments_from_api_orders(orders): indexer/chain records to LockedSegment
- LiquiditySegmentModel(side, current_price, segments): validated sequence + gaps
- check_price_range_overlap(side, segments, price_a, price_b): splice check

Sides: `up` holds short positions above the price (gaps ascend to MAX_PRICE),
`down` holds long positions below it (gaps descend to MIN_PRICE).
"""

# NOTE:
#   Records are validated once, here. Everything downstream works on
#   LockedSegment / Gap and plain integers; the model never repairs input.

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple

from .core import (
    Price,
    SolAmount,
    TokenAmount,
    BookSide,
    OverlapResult,
    AmountDomainError,
    OrderFormatError,
    InvariantViolation,
)
from .curve import BondingCurve, DEFAULT_CURVE

# Debug printing control
DEBUG_SEGMENTS = False

def _dbg(msg: str) -> None:
    if DEBUG_SEGMENTS:
        print(f"[SEGMENTS] {msg}")


_SIDES = ("up", "down")


def _check_side(side: str) -> None:
    if side not in _SIDES:
        raise AmountDomainError(f"side must be 'up' or 'down', got {side!r}")


@dataclass(frozen=True)
class LockedSegment:
    """One open position's reserved price range.

    Either orientation is accepted as long as a book uses one consistently;
    `low`/`high` give the range. `order_id` is an opaque handle (order PDA)
    that is only reported back.
    """
    start_price: Price
    end_price: Price
    sol_amount: SolAmount
    token_amount: TokenAmount
    order_id: Any = None

    def __post_init__(self):
        object.__setattr__(self, "start_price", Price.parse(self.start_price))
        object.__setattr__(self, "end_price", Price.parse(self.end_price))
        object.__setattr__(self, "sol_amount", SolAmount.parse(self.sol_amount))
        object.__setattr__(self, "token_amount", TokenAmount.parse(self.token_amount))

    @property
    def low(self) -> int:
        return min(self.start_price.value, self.end_price.value)

    @property
    def high(self) -> int:
        return max(self.start_price.value, self.end_price.value)

    def overlaps(self, lo: int, hi: int) -> bool:
        """Strict overlap with [lo, hi]; touching endpoints do not count."""
        return lo < self.high and self.low < hi


@dataclass(frozen=True)
class Gap:
    """A free range between locked segments, oriented in the walking direction.

    `valid=False` means `start` lies past `end` for the side (for instance the
    first locked range already straddles the current price); such a gap
    contributes nothing.
    """
    index: int
    start_price: int
    end_price: int
    valid: bool = True

    @property
    def is_empty(self) -> bool:
        return self.start_price == self.end_price


# ---------------------------------------------------------------------------
# Boundary conversion
# ---------------------------------------------------------------------------

# Snake-case keys come from the indexer; camelCase from the client converter.
_FIELD_KEYS = {
    "start_price": ("lock_lp_start_price", "lockLpStartPrice"),
    "end_price": ("lock_lp_end_price", "lockLpEndPrice"),
    "sol_amount": ("lock_lp_sol_amount", "lockLpSolAmount"),
    "token_amount": ("lock_lp_token_amount", "lockLpTokenAmount"),
}
_ID_KEYS = ("order_pda", "orderPda", "order_id", "orderId")


def _pick(record: Mapping[str, Any], keys: Tuple[str, ...], position: int) -> Any:
    for key in keys:
        if key in record and record[key] is not None:
            return record[key]
    raise OrderFormatError(f"order #{position}: missing field {keys[0]!r}")


def segments_from_api_orders(orders: Iterable[Any]) -> List[LockedSegment]:
    """Convert order records into LockedSegments, validating each field once.

    Accepts mappings (snake or camel keys) and LockedSegment instances.
    """
    if orders is None:
        return []
    out: List[LockedSegment] = []
    for i, rec in enumerate(orders):
        if isinstance(rec, LockedSegment):
            out.append(rec)
            continue
        if not isinstance(rec, Mapping):
            raise OrderFormatError(f"order #{i}: expected a mapping, got {type(rec).__name__}")
        fields = {name: _pick(rec, keys, i) for name, keys in _FIELD_KEYS.items()}
        order_id = next((rec[k] for k in _ID_KEYS if rec.get(k) is not None), None)
        try:
            out.append(LockedSegment(order_id=order_id, **fields))
        except AmountDomainError as e:
            raise OrderFormatError(f"order #{i}: {e}") from e
    _dbg(f"converted {len(out)} orders")
    return out


# ---------------------------------------------------------------------------
# Segment model
# ---------------------------------------------------------------------------

class LiquiditySegmentModel:
    """Ordered locked segments for one side plus the implied gaps."""

    def __init__(
        self,
        side: BookSide,
        current_price: int,
        segments: Sequence[LockedSegment] = (),
        *,
        curve: BondingCurve = DEFAULT_CURVE,
    ):
        _check_side(side)
        self.side = side
        self.current_price = int(current_price)
        self.segments: Tuple[LockedSegment, ...] = tuple(segments)
        self.curve = curve
        self._validate()

    @classmethod
    def from_api(cls, side: BookSide, current_price: int, orders: Optional[Iterable[Any]], **kw) -> "LiquiditySegmentModel":
        return cls(side, current_price, segments_from_api_orders(orders), **kw)

    def _validate(self) -> None:
        segs = self.segments
        ascending = {s.start_price < s.end_price for s in segs if s.start_price != s.end_price}
        if len(ascending) > 1:
            raise InvariantViolation(f"{self.side} segments mix start/end orientations")
        for i in range(1, len(segs)):
            prev, cur = segs[i - 1], segs[i]
            if self.side == "up" and prev.high > cur.low:
                raise InvariantViolation(
                    f"up segments out of order or overlapping at #{i}: prev.high={prev.high} > low={cur.low}"
                )
            if self.side == "down" and prev.low < cur.high:
                raise InvariantViolation(
                    f"down segments out of order or overlapping at #{i}: prev.low={prev.low} < high={cur.high}"
                )

    # Near end = the edge facing the current price; far end = the other one.
    def _near(self, seg: LockedSegment) -> int:
        return seg.low if self.side == "up" else seg.high

    def _far(self, seg: LockedSegment) -> int:
        return seg.high if self.side == "up" else seg.low

    def _sentinel(self) -> int:
        return self.curve.max_price if self.side == "up" else self.curve.min_price

    def _ordered(self, start: int, end: int) -> bool:
        return start <= end if self.side == "up" else start >= end

    def gaps(self) -> List[Gap]:
        """Gaps in walking order: before, between and after the locked segments."""
        bounds: List[Tuple[int, int]] = []
        start = self.current_price
        for seg in self.segments:
            bounds.append((start, self._near(seg)))
            start = self._far(seg)
        bounds.append((start, self._sentinel()))
        out = [Gap(i, s, e, self._ordered(s, e)) for i, (s, e) in enumerate(bounds)]
        _dbg(f"{self.side}: {len(out)} gaps, invalid={[g.index for g in out if not g.valid]}")
        return out

    @property
    def max_allowed_price(self) -> int:
        """End of the first gap: how far the price may move before hitting a lock."""
        if self.segments:
            return self._near(self.segments[0])
        return self._sentinel()

    @property
    def locked_sol_total(self) -> int:
        return sum(s.sol_amount.value for s in self.segments)

    @property
    def locked_token_total(self) -> int:
        return sum(s.token_amount.value for s in self.segments)

    def check_overlap(self, price_a: int, price_b: int) -> OverlapResult:
        return check_price_range_overlap(self.side, self.segments, price_a, price_b)


def check_price_range_overlap(
    side: BookSide,
    segments: Sequence[LockedSegment],
    price_a: int,
    price_b: int,
) -> OverlapResult:
    """Check whether [price_a, price_b] (either order) cuts into a locked segment.

    `insert_index` counts the segments lying between the current price and
    the range, i.e. where a new segment for this range would be spliced in;
    `prev_order_id` / `next_order_id` are its neighbours.
    """
    _check_side(side)
    lo, hi = min(int(price_a), int(price_b)), max(int(price_a), int(price_b))
    hits = [s for s in segments if s.overlaps(lo, hi)]
    if side == "up":
        insert_index = sum(1 for s in segments if s.high <= lo)
    else:
        insert_index = sum(1 for s in segments if s.low >= hi)
    prev_id = segments[insert_index - 1].order_id if insert_index > 0 else None
    next_id = segments[insert_index].order_id if insert_index < len(segments) else None
    if hits:
        first = hits[0]
        reason = (
            f"range [{lo}, {hi}] overlaps order {first.order_id!r} [{first.low}, {first.high}]"
            + (f" and {len(hits) - 1} more" if len(hits) > 1 else "")
        )
        return OverlapResult(
            no_overlap=False,
            overlap_reason=reason,
            overlapping_order_ids=tuple(s.order_id for s in hits),
            prev_order_id=prev_id,
            next_order_id=next_id,
            insert_index=insert_index,
        )
    return OverlapResult(
        no_overlap=True,
        prev_order_id=prev_id,
        next_order_id=next_id,
        insert_index=insert_index,
    )


__all__ = [
    "LockedSegment",
    "Gap",
    "LiquiditySegmentModel",
    "segments_from_api_orders",
    "check_price_range_overlap",
]
