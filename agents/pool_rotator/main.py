"""
Pool Rotator Agent — FastAPI application (port 8010)

Measures the APY of a fixed set of BSC syrup pools every hour, picks the best
one and, when it beats the active pool by the hysteresis margin, calls
reinvest() on the strategy contract to move the position there.

Interfaces: HTTP API (status + manual trigger)
"""
import asyncio
from contextlib import asynccontextmanager
from fastapi import FastAPI
from shared.config import settings
from shared.contracts import StrategistContract
from shared.utils.logging import setup_logging
from shared.utils.scheduler import add_interval_job, start_scheduler, stop_scheduler
from shared.wallet import load_configured_account
from agents.pool_rotator.config import AGENT_NAME, CYCLE_INTERVAL, INITIAL_APY
from agents.pool_rotator.models.domain import ControllerState
from agents.pool_rotator.routes.api import router
from agents.pool_rotator.services.cycle import CycleRunner
from agents.pool_rotator.services.executor import ReallocationExecutor
from agents.pool_rotator.services.gate import HysteresisGate
from agents.pool_rotator.services.probe import OnChainYieldProbe
from agents.pool_rotator.services.registry import build_registry, build_symbol_map
import structlog

logger = structlog.get_logger()


def build_runner(account) -> CycleRunner:
    executor = ReallocationExecutor(
        account=account,
        symbols=build_symbol_map(),
        strategist=StrategistContract(),
    )
    return CycleRunner(
        pools=build_registry(),
        probe=OnChainYieldProbe(),
        executor=executor,
        gate=HysteresisGate(),
        state=ControllerState(initial_apy=INITIAL_APY),
    )


async def _cycle_job(runner: CycleRunner):
    try:
        await runner.run_cycle()
    except Exception as e:
        logger.error("cycle_job_failed", error=str(e))


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    logger.info("pool_rotator_starting", dry_run=settings.DRY_RUN, interval=CYCLE_INTERVAL)

    # WalletError here aborts startup before anything is scheduled
    account = None
    if not settings.DRY_RUN:
        account = await asyncio.to_thread(load_configured_account)

    runner = build_runner(account)
    app.state.runner = runner
    app.state.account = account

    start_scheduler()

    async def _job():
        await _cycle_job(runner)

    # First cycle fires immediately, then every hour
    add_interval_job(_job, seconds=CYCLE_INTERVAL, job_id=f"{AGENT_NAME}_cycle")

    yield

    stop_scheduler()
    logger.info("pool_rotator_stopped")


app = FastAPI(
    title="Pool Rotator",
    description="Hourly APY comparison across BSC syrup pools with hysteresis-gated "
                "reallocation through a strategy contract.",
    version="1.0.0",
    lifespan=lifespan,
)

app.include_router(router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8010)
