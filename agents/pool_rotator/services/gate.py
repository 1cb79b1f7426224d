"""
Hysteresis Gate — only switch pools when the gain clears a fixed margin.
"""
from agents.pool_rotator.config import HYSTERESIS_MARGIN
from agents.pool_rotator.models.domain import ControllerState, CycleResult

# Absorbs float rounding so a gain of exactly the margin (0.1 -> 0.15) passes
APY_EPSILON = 1e-9


class HysteresisGate:
    def __init__(self, margin: float = HYSTERESIS_MARGIN):
        if margin < 0:
            raise ValueError("hysteresis margin must be >= 0")
        self.margin = margin

    def should_reallocate(self, result: CycleResult, state: ControllerState) -> bool:
        # Inclusive, and keyed on APY alone: re-entering the active pool counts
        gain = result.best_apy - state.current_apy
        # Never below the current APY, even with a zero margin
        return gain >= 0 and gain >= self.margin - APY_EPSILON
