"""
Selection Engine — folds one cycle's probe results into the best pool.
"""
from typing import Optional
from agents.pool_rotator.models.domain import (
    CycleResult, PoolObservation, ProbeFailure, ProbeResult,
)


class IncompleteCycleError(RuntimeError):
    pass


class SelectionEngine:
    """Per-cycle accumulator. Create a new one for every cycle.

    Results must be added in completion order: an observation whose APY is
    equal to or greater than the running best replaces it, so ties go to the
    probe that finished last.
    """

    def __init__(self, expected: int, min_observations: int = 1):
        self.expected = expected
        self.min_observations = min_observations
        self.observations: list[PoolObservation] = []
        self.failures: list[ProbeFailure] = []
        self._best: Optional[PoolObservation] = None

    @property
    def received(self) -> int:
        return len(self.observations) + len(self.failures)

    @property
    def complete(self) -> bool:
        return self.received == self.expected

    def add(self, result: ProbeResult):
        if self.complete:
            raise ValueError(f"cycle already has all {self.expected} results")
        if isinstance(result, ProbeFailure):
            self.failures.append(result)
            return
        self.observations.append(result)
        if self._best is None or result.apy >= self._best.apy:
            self._best = result

    def result(self) -> Optional[CycleResult]:
        """Best pool of the cycle, or None when too few probes succeeded."""
        if not self.complete:
            raise IncompleteCycleError(f"{self.received}/{self.expected} results collected")
        if len(self.observations) < self.min_observations or self._best is None:
            return None
        return CycleResult(best_pool=self._best.descriptor.address, best_apy=self._best.apy)
