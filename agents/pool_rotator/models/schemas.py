from pydantic import BaseModel
from datetime import datetime
from typing import Optional


class PoolResponse(BaseModel):
    name: str
    address: str
    reward_asset: str
    symbol: Optional[str] = None


class OutcomeResponse(BaseModel):
    cycle_id: int
    started_at: datetime
    finished_at: Optional[datetime] = None
    observations: int = 0
    failures: int = 0
    best_pool: Optional[str] = None
    best_apy: Optional[float] = None
    reallocated: bool = False
    tx_hash: Optional[str] = None
    error: Optional[str] = None


class StateResponse(BaseModel):
    current_pool: Optional[str] = None
    current_apy: float = 0.0
    hysteresis_margin: float = 0.0
    cycle_in_flight: bool = False
    last_cycle: Optional[OutcomeResponse] = None
    pools: list[PoolResponse] = []


class HealthResponse(BaseModel):
    status: str = "ok"
    agent: str = "pool_rotator"
    version: str = "1.0.0"
    account: Optional[str] = None
    pools_tracked: int = 0
    scheduler_running: bool = False
