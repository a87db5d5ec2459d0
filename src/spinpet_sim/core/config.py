"""
Simulator configuration.

Integer constants live in `constants.py`; this module collects the knobs a
caller may reasonably want to change per call (search steps and caps,
reporting precision).
"""

from dataclasses import dataclass

from .constants import (
    PRICE_ADJUSTMENT_PERMILLE,
    STOP_LOSS_MAX_ITERATIONS,
    OPTIMIZER_MAX_ITERATIONS,
    OPTIMIZER_PRECISION,
    OPTIMIZER_FLOOR,
)
from .exc import AmountDomainError


@dataclass(frozen=True)
class SimulatorConfig:
    """Centralised knobs used by the simulator, optimiser and stop-loss solver.

    Every public operation takes `config=`; the module default `SIM_CFG`
    matches the protocol client.

    - `price_adjustment_permille` -> stop-loss step per retry, in 1/1000 of
      the candidate price (5 = 0.5%).
    - `stop_loss_max_iterations` -> hard cap on stop-loss retries.
    - `optimizer_max_iterations` -> hard cap on binary-search rounds.
    - `optimizer_precision` -> stop once `high - low` drops below this (raw token units).
    - `optimizer_floor` -> lower bound of the token search interval (raw units).
    - `percentage_places` / `leverage_places` -> floored reporting precision.

    Recommended ranges:
    - `price_adjustment_permille`: 1 … 50 (smaller => tighter stop, more retries)
    - `optimizer_max_iterations`: 10 … 64 (64 rounds cover the whole u64 range)
    """
    price_adjustment_permille: int = PRICE_ADJUSTMENT_PERMILLE
    stop_loss_max_iterations: int = STOP_LOSS_MAX_ITERATIONS
    optimizer_max_iterations: int = OPTIMIZER_MAX_ITERATIONS
    optimizer_precision: int = OPTIMIZER_PRECISION
    optimizer_floor: int = OPTIMIZER_FLOOR
    percentage_places: int = 2
    leverage_places: int = 4

    def __post_init__(self):
        if self.price_adjustment_permille <= 0:
            raise AmountDomainError("price_adjustment_permille must be > 0")
        if self.stop_loss_max_iterations <= 0 or self.optimizer_max_iterations <= 0:
            raise AmountDomainError("iteration caps must be > 0")
        if self.optimizer_precision <= 0:
            raise AmountDomainError("optimizer_precision must be > 0")
        if self.optimizer_floor < 0:
            raise AmountDomainError("optimizer_floor must be >= 0")


# Module-level default configuration
SIM_CFG = SimulatorConfig()

__all__ = ["SimulatorConfig", "SIM_CFG"]
