"""
Cycle runner — one probe -> select -> decide -> reallocate pass.

Probes are started one stagger step apart in registry order, each bounded by
its own timeout, and the whole fan-out is bounded by a cycle deadline. A
probe that errors or times out becomes a ProbeFailure, so every cycle ends
with exactly one result per registered pool.

Only one cycle runs at a time. A trigger that arrives while a cycle is in
flight is skipped.
"""
import asyncio
from datetime import datetime, timezone
from typing import Optional, Sequence
import structlog
from agents.pool_rotator.config import (
    CYCLE_DEADLINE, MIN_OBSERVATIONS, PROBE_STAGGER, PROBE_TIMEOUT,
)
from agents.pool_rotator.models.domain import (
    ControllerState, CycleOutcome, PoolDescriptor, PoolObservation, ProbeFailure,
)
from agents.pool_rotator.services.executor import ReallocationError, ReallocationExecutor
from agents.pool_rotator.services.gate import HysteresisGate
from agents.pool_rotator.services.probe import YieldProbe
from agents.pool_rotator.services.selector import SelectionEngine

logger = structlog.get_logger()


class CycleRunner:
    def __init__(
        self,
        pools: Sequence[PoolDescriptor],
        probe: YieldProbe,
        executor: ReallocationExecutor,
        gate: HysteresisGate,
        state: ControllerState,
        stagger: float = PROBE_STAGGER,
        probe_timeout: float = PROBE_TIMEOUT,
        cycle_deadline: float = CYCLE_DEADLINE,
        min_observations: int = MIN_OBSERVATIONS,
    ):
        self.pools = tuple(pools)
        self.probe = probe
        self.executor = executor
        self.gate = gate
        self.state = state
        self.stagger = stagger
        self.probe_timeout = probe_timeout
        self.cycle_deadline = cycle_deadline
        self.min_observations = min_observations
        last_start = stagger * max(len(self.pools) - 1, 0)
        if self.pools and last_start >= cycle_deadline:
            raise ValueError(
                f"cycle deadline {cycle_deadline}s ends before the last probe starts at {last_start}s"
            )
        self.last_outcome: Optional[CycleOutcome] = None
        self._cycles = 0
        self._lock = asyncio.Lock()

    @property
    def in_flight(self) -> bool:
        return self._lock.locked()

    async def run_cycle(self) -> Optional[CycleOutcome]:
        """Run one cycle. Returns None if another cycle was already running."""
        if self._lock.locked():
            logger.warning("cycle_skipped", reason="previous cycle still running")
            return None

        async with self._lock:
            self._cycles += 1
            outcome = CycleOutcome(cycle_id=self._cycles, started_at=datetime.now(timezone.utc))
            with structlog.contextvars.bound_contextvars(cycle=outcome.cycle_id):
                logger.info("cycle_started", pools=len(self.pools))
                try:
                    engine = await self._collect()
                    outcome.observations = len(engine.observations)
                    outcome.failures = len(engine.failures)
                    await self._decide(engine, outcome)
                except Exception as e:
                    outcome.error = str(e)
                    raise
                finally:
                    outcome.finished_at = datetime.now(timezone.utc)
                    self.last_outcome = outcome
                    logger.info(
                        "cycle_finished",
                        reallocated=outcome.reallocated,
                        current_pool=self.state.current_pool,
                        current_apy=self.state.current_apy,
                        current_time=datetime.now().strftime("%H:%M:%S"),
                    )
            return outcome

    async def _collect(self) -> SelectionEngine:
        engine = SelectionEngine(expected=len(self.pools), min_observations=self.min_observations)
        if not self.pools:
            return engine

        tasks = {
            asyncio.create_task(self._probe(i, pool, engine)): pool
            for i, pool in enumerate(self.pools)
        }
        _, pending = await asyncio.wait(tasks, timeout=self.cycle_deadline)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
            for task in pending:
                pool = tasks[task]
                logger.warning("probe_cancelled", pool=pool.address, deadline=self.cycle_deadline)
                engine.add(ProbeFailure(descriptor=pool, error="cycle deadline exceeded"))
        return engine

    async def _probe(self, index: int, pool: PoolDescriptor, engine: SelectionEngine):
        # Spread calls out so the shared RPC endpoint is not hit all at once
        await asyncio.sleep(index * self.stagger)
        try:
            apy = await asyncio.wait_for(
                self.probe(pool.address, pool.reward_asset), timeout=self.probe_timeout
            )
            result = PoolObservation(descriptor=pool, apy=apy)
        except asyncio.TimeoutError:
            logger.warning("probe_timed_out", pool=pool.address, timeout=self.probe_timeout)
            result = ProbeFailure(descriptor=pool, error="timeout")
        except Exception as e:
            logger.error("probe_failed", pool=pool.address, error=str(e))
            result = ProbeFailure(descriptor=pool, error=str(e))
        else:
            logger.info("pool_apy_observed", pool=pool.address, name=pool.name, apy=apy)
        # Added in completion order, which decides ties
        engine.add(result)

    async def _decide(self, engine: SelectionEngine, outcome: CycleOutcome):
        result = engine.result()
        if result is None:
            logger.warning(
                "cycle_aborted",
                observations=len(engine.observations),
                required=self.min_observations,
            )
            return
        outcome.result = result
        logger.info("cycle_best_pool", pool=result.best_pool, apy=result.best_apy)

        if not self.gate.should_reallocate(result, self.state):
            logger.info(
                "reallocation_skipped",
                best_apy=result.best_apy,
                current_apy=self.state.current_apy,
                margin=self.gate.margin,
            )
            return

        try:
            tx_hash = await self.executor.reinvest(result.best_pool)
        except ReallocationError as e:
            logger.error("reallocation_failed", pool=result.best_pool, error=str(e))
            outcome.error = str(e)
            return

        previous = self.state.current_pool
        self.state.commit(result)
        outcome.reallocated = True
        outcome.tx_hash = tx_hash
        logger.info(
            "reallocated",
            from_pool=previous,
            to_pool=result.best_pool,
            apy=result.best_apy,
            tx_hash=tx_hash,
        )
