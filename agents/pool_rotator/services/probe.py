"""
Yield Probe — reads a syrup pool's current APY from BSC.

The decision loop only needs an async callable
``probe(pool_address, reward_asset) -> float``; OnChainYieldProbe is the
production implementation. APY is returned in percent.
"""
import asyncio
from typing import Awaitable, Callable
from tenacity import retry, stop_after_attempt, wait_exponential
from web3 import Web3
from shared.contracts import SmartChefContract, get_erc20_contract
from shared.price_feed import get_price_by_address
from shared.web3_client import w3 as default_w3
from agents.pool_rotator.config import BLOCKS_PER_YEAR
import structlog

logger = structlog.get_logger()

YieldProbe = Callable[[str, str], Awaitable[float]]


class ProbeError(RuntimeError):
    """APY could not be determined for a pool."""


def compute_apy(
    reward_per_block: int,
    reward_decimals: int,
    reward_price: float,
    staked_amount: int,
    staked_decimals: int,
    staked_price: float,
    blocks_per_year: int = BLOCKS_PER_YEAR,
) -> float:
    """Yearly reward value over staked value, in percent."""
    staked_usd = staked_amount / (10 ** staked_decimals) * staked_price
    if staked_usd <= 0:
        raise ProbeError("pool has no staked value")
    yearly_reward_usd = reward_per_block / (10 ** reward_decimals) * blocks_per_year * reward_price
    return yearly_reward_usd / staked_usd * 100


class OnChainYieldProbe:
    def __init__(self, w3: Web3 = None, price_lookup=get_price_by_address, blocks_per_year: int = BLOCKS_PER_YEAR):
        self.w3 = w3 or default_w3
        self.price_lookup = price_lookup
        self.blocks_per_year = blocks_per_year

    async def __call__(self, pool_address: str, reward_asset: str) -> float:
        # web3 here is blocking; run it off the loop so a probe timeout frees the cycle
        snapshot = await asyncio.to_thread(self._read_pool, pool_address, reward_asset)

        if snapshot["block_number"] > snapshot["bonus_end_block"]:
            logger.debug("pool_rewards_ended", pool=pool_address)
            return 0.0

        reward_price = await self.price_lookup(reward_asset)
        staked_price = await self.price_lookup(snapshot["staked_token"])
        if not reward_price or not staked_price:
            raise ProbeError(f"no price for pool tokens of {pool_address}")

        return compute_apy(
            reward_per_block=snapshot["reward_per_block"],
            reward_decimals=snapshot["reward_decimals"],
            reward_price=reward_price,
            staked_amount=snapshot["staked_amount"],
            staked_decimals=snapshot["staked_decimals"],
            staked_price=staked_price,
            blocks_per_year=self.blocks_per_year,
        )

    @retry(stop=stop_after_attempt(3), wait=wait_exponential(multiplier=1, min=1, max=8), reraise=True)
    def _read_pool(self, pool_address: str, reward_asset: str) -> dict:
        pool = SmartChefContract(pool_address, self.w3)
        staked_token = pool.staked_token()
        staked = get_erc20_contract(staked_token, self.w3)
        reward = get_erc20_contract(reward_asset, self.w3)
        return {
            "staked_token": staked_token,
            "staked_amount": staked.functions.balanceOf(pool.address).call(),
            "staked_decimals": staked.functions.decimals().call(),
            "reward_per_block": pool.reward_per_block(),
            "reward_decimals": reward.functions.decimals().call(),
            "bonus_end_block": pool.bonus_end_block(),
            "block_number": self.w3.eth.block_number,
        }
