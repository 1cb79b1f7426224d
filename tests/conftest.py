"""
Shared fixtures for the pool rotator tests.

The fake probe and executor stand in for the chain so cycles run in
milliseconds.
"""
import asyncio
import pytest

from agents.pool_rotator.models.domain import ControllerState, PoolDescriptor
from agents.pool_rotator.services.cycle import CycleRunner
from agents.pool_rotator.services.executor import ReallocationError
from agents.pool_rotator.services.gate import HysteresisGate

POOL_A = "0x1111111111111111111111111111111111111111"
POOL_B = "0x2222222222222222222222222222222222222222"
POOL_C = "0x3333333333333333333333333333333333333333"
REWARD = "0x4444444444444444444444444444444444444444"

HANG = object()


class FakeProbe:
    """Returns scripted APYs per pool.

    A value may be a float, an exception instance to raise, or HANG to never
    return. ``delays`` adds latency per pool so completion order can be
    controlled independently of the stagger.
    """

    def __init__(self, apys: dict = None, delays: dict = None):
        self.apys = dict(apys or {})
        self.delays = dict(delays or {})
        self.calls = []
        self.release = asyncio.Event()

    async def __call__(self, pool_address: str, reward_asset: str) -> float:
        self.calls.append((pool_address, asyncio.get_running_loop().time()))
        await asyncio.sleep(self.delays.get(pool_address, 0))
        value = self.apys[pool_address]
        if value is HANG:
            await self.release.wait()
            return 0.0
        if isinstance(value, Exception):
            raise value
        return value


class FakeExecutor:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls = []
        self.symbols = {POOL_A: "AAA", POOL_B: "BBB", POOL_C: "CCC"}

    async def reinvest(self, pool_address: str):
        self.calls.append(pool_address)
        if self.fail:
            raise ReallocationError("execution reverted")
        return f"0x{len(self.calls):064x}"


@pytest.fixture
def pools():
    return [
        PoolDescriptor(address=POOL_A, reward_asset=REWARD, name="pool_a"),
        PoolDescriptor(address=POOL_B, reward_asset=REWARD, name="pool_b"),
    ]


@pytest.fixture
def probe():
    return FakeProbe()


@pytest.fixture
def executor():
    return FakeExecutor()


@pytest.fixture
def make_runner(pools, probe, executor):
    def _make(**overrides):
        kwargs = dict(
            pools=pools,
            probe=probe,
            executor=executor,
            gate=HysteresisGate(margin=0.05),
            state=ControllerState(initial_apy=0.0),
            stagger=0,
            probe_timeout=1.0,
            cycle_deadline=5.0,
            min_observations=1,
        )
        kwargs.update(overrides)
        return CycleRunner(**kwargs)
    return _make
