import pytest
from dataclasses import FrozenInstanceError

from spinpet_sim.core import SimulatorConfig, SIM_CFG, AmountDomainError
from spinpet_sim.core.constants import (
    PRICE_ADJUSTMENT_PERMILLE,
    STOP_LOSS_MAX_ITERATIONS,
    OPTIMIZER_MAX_ITERATIONS,
    OPTIMIZER_PRECISION,
    OPTIMIZER_FLOOR,
    TOKEN_UNIT,
)


def test_defaults_match_protocol_client():
    print(f"[config] {SIM_CFG}")
    assert SIM_CFG.price_adjustment_permille == PRICE_ADJUSTMENT_PERMILLE == 5
    assert SIM_CFG.stop_loss_max_iterations == STOP_LOSS_MAX_ITERATIONS == 1000
    assert SIM_CFG.optimizer_max_iterations == OPTIMIZER_MAX_ITERATIONS == 15
    assert SIM_CFG.optimizer_precision == OPTIMIZER_PRECISION == TOKEN_UNIT // 100
    assert SIM_CFG.optimizer_floor == OPTIMIZER_FLOOR == TOKEN_UNIT
    assert (SIM_CFG.percentage_places, SIM_CFG.leverage_places) == (2, 4)


def test_config_is_frozen():
    with pytest.raises(FrozenInstanceError):
        SIM_CFG.optimizer_max_iterations = 3


@pytest.mark.parametrize(
    "kw",
    [
        {"price_adjustment_permille": 0},
        {"stop_loss_max_iterations": 0},
        {"optimizer_max_iterations": -1},
        {"optimizer_precision": 0},
        {"optimizer_floor": -1},
    ],
)
def test_bad_config_rejected(kw):
    with pytest.raises(AmountDomainError):
        SimulatorConfig(**kw)
