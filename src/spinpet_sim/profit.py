"""
Open-position P&L from curve math.

Long: the position's locked tokens are worth what selling them at the
current price returns. Short: the position owes the tokens back; its gain is
what buying them back at the lock start price costs minus what it costs now.

SOL values are signed lamports. Percentages are truncated toward zero to
`percentage_places`; the stop-loss distance is rounded to one decimal.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Context, Decimal, ROUND_HALF_UP
from typing import Any, Mapping, Optional

from .core import (
    Price,
    SolAmount,
    TokenAmount,
    SimulatorConfig,
    SIM_CFG,
    PositionPnl,
    OrderFormatError,
    AmountDomainError,
    percentage,
)
from .curve import BondingCurve, DEFAULT_CURVE
from .simulator import resolve_current_price

_CTX = Context(prec=80, rounding=ROUND_HALF_UP)
_ONE_DECIMAL = Decimal("0.1")


@dataclass(frozen=True)
class Position:
    """The fields of an open order that the P&L needs (raw on-chain units)."""
    lock_lp_start_price: int
    lock_lp_token_amount: int
    margin_sol_amount: int
    borrow_amount: int = 0
    realized_sol_amount: int = 0
    margin_init_sol_amount: Optional[int] = None

    @classmethod
    def from_api(cls, record: Mapping[str, Any]) -> "Position":
        """Build from an indexer order record, validating each field once."""
        try:
            return cls(
                lock_lp_start_price=Price.parse(record["lock_lp_start_price"]).value,
                lock_lp_token_amount=TokenAmount.parse(record["lock_lp_token_amount"]).value,
                margin_sol_amount=SolAmount.parse(record["margin_sol_amount"]).value,
                borrow_amount=SolAmount.parse(record.get("borrow_amount") or 0).value,
                realized_sol_amount=SolAmount.parse(record.get("realized_sol_amount") or 0).value,
                margin_init_sol_amount=(
                    SolAmount.parse(record["margin_init_sol_amount"]).value
                    if record.get("margin_init_sol_amount") is not None else None
                ),
            )
        except KeyError as e:
            raise OrderFormatError(f"position record missing field {e.args[0]!r}") from e
        except AmountDomainError as e:
            raise OrderFormatError(f"position record: {e}") from e


def _signed_percentage(num: int, den: int, places: int) -> Decimal:
    pct = percentage(abs(num), den, places)
    return -pct if num < 0 else pct


def _distance_pct(num: int, den: int) -> Decimal:
    return _CTX.divide(Decimal(num * 100), Decimal(den)).quantize(_ONE_DECIMAL, context=_CTX)


def long_position_pnl(
    current_price,
    position: Position,
    *,
    curve: BondingCurve = DEFAULT_CURVE,
    config: SimulatorConfig = SIM_CFG,
) -> Optional[PositionPnl]:
    """P&L of a long; None when the position is empty or the curve cannot price the close."""
    cur = resolve_current_price(current_price, curve)
    margin = position.margin_sol_amount
    start = position.lock_lp_start_price
    if margin <= 0 or position.lock_lp_token_amount <= 0 or start <= 0:
        return None
    sold = curve.sell_from_price_with_token_input(cur, position.lock_lp_token_amount)
    if sold is None:
        return None
    close_sol = sold[1]
    gross = close_sol + margin - position.borrow_amount
    net = gross - margin + position.realized_sol_amount
    return PositionPnl(
        side="long",
        close_sol_amount=close_sol,
        gross_profit=gross,
        net_profit=net,
        realized_sol=position.realized_sol_amount,
        profit_percentage=_signed_percentage(net, margin, config.percentage_places),
        stop_loss_percentage=_distance_pct(cur - start, start),
    )


def short_position_pnl(
    current_price,
    position: Position,
    *,
    curve: BondingCurve = DEFAULT_CURVE,
    config: SimulatorConfig = SIM_CFG,
) -> Optional[PositionPnl]:
    """P&L of a short; None when the position is empty or the curve cannot price a buy-back."""
    cur = resolve_current_price(current_price, curve)
    tokens = position.lock_lp_token_amount
    start = position.lock_lp_start_price
    margin_init = position.margin_init_sol_amount
    if margin_init is None:
        margin_init = position.margin_sol_amount
    if position.margin_sol_amount <= 0 or margin_init <= 0 or tokens <= 0 or start <= 0:
        return None
    now = curve.buy_from_price_with_token_output(cur, tokens)
    at_lock = curve.buy_from_price_with_token_output(start, tokens)
    if now is None or at_lock is None:
        return None
    gross = at_lock[1] - now[1]
    net = gross - margin_init
    realized = position.realized_sol_amount
    return PositionPnl(
        side="short",
        close_sol_amount=now[1],
        gross_profit=gross,
        net_profit=net,
        realized_sol=realized,
        profit_percentage=_signed_percentage(realized + net, margin_init, config.percentage_places),
        stop_loss_percentage=_distance_pct(start - cur, start),
    )


def format_profit_percentage(pct: Optional[Decimal]) -> str:
    """'+12.3%' / '-4.0%'; '--' for missing or implausible (>10000%) values."""
    if pct is None or abs(pct) > 10000:
        return "--"
    text = f"{pct.quantize(_ONE_DECIMAL, context=_CTX)}%"
    return f"+{text}" if pct > 0 else text


__all__ = [
    "Position",
    "long_position_pnl",
    "short_position_pnl",
    "format_profit_percentage",
]
