from __future__ import annotations

from typing import Any, Dict, List

import pytest

# Import project primitives
from spinpet_sim.core import PRICE_SCALE, TOKEN_UNIT
from spinpet_sim.curve import get_initial_price


# -----------------------------
# Test helpers (pure functions)
# -----------------------------

#: 100 SOL per whole token.
P100 = 100 * PRICE_SCALE


def px(human: int) -> int:
    """Whole-SOL-per-token price -> fixed-point integer."""
    return human * PRICE_SCALE


def order(start: int, end: int, *, tokens: int = 1_000 * TOKEN_UNIT, sol: int = 0, pda: str = "") -> Dict[str, Any]:
    """Indexer-shaped order record (prices as digit strings, amounts as ints)."""
    return {
        "lock_lp_start_price": str(start),
        "lock_lp_end_price": str(end),
        "lock_lp_sol_amount": sol,
        "lock_lp_token_amount": tokens,
        "order_pda": pda,
    }


# -----------------------------
# Pytest fixtures
# -----------------------------

@pytest.fixture()
def initial_price() -> int:
    return get_initial_price()


@pytest.fixture()
def down_book_example() -> List[Dict[str, Any]]:
    """One long position locking 95 -> 90 SOL/token below a 100 SOL/token market."""
    return [order(px(95), px(90), pda="A")]


@pytest.fixture()
def up_book_example() -> List[Dict[str, Any]]:
    """Two short positions locking 105-110 and 120-130 above a 100 SOL/token market."""
    return [
        order(px(105), px(110), pda="U1"),
        order(px(120), px(130), pda="U2"),
    ]
