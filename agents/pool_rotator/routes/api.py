"""
Pool Rotator REST API routes.
"""
from fastapi import APIRouter, Depends, HTTPException, Request
from shared.auth import verify_api_key
from shared.utils.scheduler import scheduler
from agents.pool_rotator.models.domain import CycleOutcome
from agents.pool_rotator.models.schemas import (
    HealthResponse, OutcomeResponse, PoolResponse, StateResponse,
)

router = APIRouter(prefix="/api/v1/rotator", tags=["pool_rotator"])


def _outcome_response(outcome: CycleOutcome | None) -> OutcomeResponse | None:
    if outcome is None:
        return None
    return OutcomeResponse(
        cycle_id=outcome.cycle_id,
        started_at=outcome.started_at,
        finished_at=outcome.finished_at,
        observations=outcome.observations,
        failures=outcome.failures,
        best_pool=outcome.result.best_pool if outcome.result else None,
        best_apy=outcome.result.best_apy if outcome.result else None,
        reallocated=outcome.reallocated,
        tx_hash=outcome.tx_hash,
        error=outcome.error,
    )


@router.get("/health", response_model=HealthResponse)
async def health(request: Request):
    runner = getattr(request.app.state, "runner", None)
    account = getattr(request.app.state, "account", None)
    resp = HealthResponse(scheduler_running=scheduler.running)
    if runner is None:
        resp.status = "starting"
        return resp
    resp.pools_tracked = len(runner.pools)
    resp.account = account.address if account else None
    return resp


@router.get("/state", response_model=StateResponse)
async def state(request: Request):
    runner = getattr(request.app.state, "runner", None)
    if runner is None:
        raise HTTPException(status_code=503, detail="Rotator is still starting")
    symbols = runner.executor.symbols
    return StateResponse(
        current_pool=runner.state.current_pool,
        current_apy=runner.state.current_apy,
        hysteresis_margin=runner.gate.margin,
        cycle_in_flight=runner.in_flight,
        last_cycle=_outcome_response(runner.last_outcome),
        pools=[
            PoolResponse(
                name=p.name,
                address=p.address,
                reward_asset=p.reward_asset,
                symbol=symbols.get(p.address),
            )
            for p in runner.pools
        ],
    )


@router.post("/cycle", response_model=OutcomeResponse, dependencies=[Depends(verify_api_key)])
async def trigger_cycle(request: Request):
    """Run a cycle now (admin). Rejected while a cycle is in flight."""
    runner = getattr(request.app.state, "runner", None)
    if runner is None:
        raise HTTPException(status_code=503, detail="Rotator is still starting")
    outcome = await runner.run_cycle()
    if outcome is None:
        raise HTTPException(status_code=409, detail="A cycle is already running")
    return _outcome_response(outcome)
