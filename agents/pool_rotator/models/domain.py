"""
Domain values for the pool rotator decision loop.

PoolDescriptor is fixed for the process lifetime. PoolObservation and
ProbeFailure live for one cycle. ControllerState lives for the process and is
only changed through ControllerState.commit.
"""
from datetime import datetime
from typing import Optional, Union
from pydantic import BaseModel, Field
from web3 import Web3


class PoolDescriptor(BaseModel):
    address: str
    reward_asset: str
    name: str = ""

    model_config = {"frozen": True}

    @classmethod
    def from_config(cls, entry: dict) -> "PoolDescriptor":
        return cls(
            address=Web3.to_checksum_address(entry["address"]),
            reward_asset=Web3.to_checksum_address(entry["reward"]),
            name=entry.get("name", ""),
        )


class PoolObservation(BaseModel):
    descriptor: PoolDescriptor
    apy: float = Field(ge=0)

    model_config = {"frozen": True}


class ProbeFailure(BaseModel):
    descriptor: PoolDescriptor
    error: str

    model_config = {"frozen": True}


ProbeResult = Union[PoolObservation, ProbeFailure]


class CycleResult(BaseModel):
    best_pool: str
    best_apy: float

    model_config = {"frozen": True}


class CycleOutcome(BaseModel):
    cycle_id: int
    started_at: datetime
    finished_at: Optional[datetime] = None
    observations: int = 0
    failures: int = 0
    result: Optional[CycleResult] = None
    reallocated: bool = False
    tx_hash: Optional[str] = None
    error: Optional[str] = None


class ControllerState:
    """Currently active pool and its APY at the time we moved into it."""

    def __init__(self, initial_apy: float = 0.0):
        self.current_pool: Optional[str] = None
        self.current_apy: float = initial_apy

    def commit(self, result: CycleResult):
        if result.best_apy < self.current_apy:
            raise ValueError(
                f"refusing to lower current APY from {self.current_apy} to {result.best_apy}"
            )
        self.current_pool = result.best_pool
        self.current_apy = result.best_apy

    def snapshot(self) -> dict:
        return {"current_pool": self.current_pool, "current_apy": self.current_apy}
