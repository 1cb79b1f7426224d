import pytest

from agents.pool_rotator.services.probe import OnChainYieldProbe, ProbeError, compute_apy

from conftest import POOL_A, REWARD

STAKED = "0x6666666666666666666666666666666666666666"


def test_compute_apy():
    # 1 token/block at $2 for 100 blocks over 1000 tokens staked at $1 -> 20%
    apy = compute_apy(
        reward_per_block=10 ** 18,
        reward_decimals=18,
        reward_price=2.0,
        staked_amount=1000 * 10 ** 18,
        staked_decimals=18,
        staked_price=1.0,
        blocks_per_year=100,
    )
    assert apy == pytest.approx(20.0)


def test_compute_apy_mixed_decimals():
    apy = compute_apy(
        reward_per_block=5 * 10 ** 6,
        reward_decimals=6,
        reward_price=1.0,
        staked_amount=500 * 10 ** 8,
        staked_decimals=8,
        staked_price=10.0,
        blocks_per_year=1000,
    )
    assert apy == pytest.approx(100.0)


def test_compute_apy_empty_pool():
    with pytest.raises(ProbeError):
        compute_apy(10 ** 18, 18, 1.0, 0, 18, 1.0, blocks_per_year=100)


def make_probe(snapshot, prices):
    async def price_lookup(address):
        return prices.get(address)

    probe = OnChainYieldProbe(w3=object(), price_lookup=price_lookup, blocks_per_year=100)
    probe._read_pool = lambda pool_address, reward_asset: snapshot
    return probe


@pytest.fixture
def snapshot():
    return {
        "staked_token": STAKED,
        "staked_amount": 1000 * 10 ** 18,
        "staked_decimals": 18,
        "reward_per_block": 10 ** 18,
        "reward_decimals": 18,
        "bonus_end_block": 2_000,
        "block_number": 1_000,
    }


@pytest.mark.asyncio
async def test_probe_reads_pool_and_prices(snapshot):
    probe = make_probe(snapshot, {REWARD: 2.0, STAKED: 1.0})
    assert await probe(POOL_A, REWARD) == pytest.approx(20.0)


@pytest.mark.asyncio
async def test_probe_rewards_ended(snapshot):
    snapshot["block_number"] = 2_001
    probe = make_probe(snapshot, {})
    assert await probe(POOL_A, REWARD) == 0.0


@pytest.mark.asyncio
async def test_probe_missing_price(snapshot):
    probe = make_probe(snapshot, {REWARD: 2.0})
    with pytest.raises(ProbeError, match="no price"):
        await probe(POOL_A, REWARD)


def test_erc20_abi_covers_reads_used():
    from shared.contracts import ERC20_ABI
    assert {entry["name"] for entry in ERC20_ABI} == {"balanceOf", "decimals"}
