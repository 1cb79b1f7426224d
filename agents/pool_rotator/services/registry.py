"""
Pool Registry — static ordered pool table and the pool -> reinvest symbol map.
"""
from web3 import Web3
from agents.pool_rotator.config import POOLS
from agents.pool_rotator.models.domain import PoolDescriptor


def build_registry(entries: list[dict] = None) -> tuple[PoolDescriptor, ...]:
    """Ordered pool descriptors. Order is the probe stagger order."""
    pools = tuple(PoolDescriptor.from_config(e) for e in (entries if entries is not None else POOLS))
    seen = set()
    for pool in pools:
        if pool.address in seen:
            raise ValueError(f"duplicate pool in registry: {pool.address}")
        seen.add(pool.address)
    return pools


def build_symbol_map(entries: list[dict] = None) -> dict[str, str]:
    """Checksummed pool address -> symbol passed to reinvest()."""
    return {
        Web3.to_checksum_address(e["address"]): e["symbol"]
        for e in (entries if entries is not None else POOLS)
    }
