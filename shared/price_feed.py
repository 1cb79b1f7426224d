"""
Shared price feed — CoinGecko simple price API for BSC tokens.

Caches prices for 60 seconds. Used by the yield probe to value staked and
reward tokens.
"""
import time
import httpx
from tenacity import retry, stop_after_attempt, wait_exponential
from shared.config import settings
import structlog

logger = structlog.get_logger()

# Token address (lowercase) -> CoinGecko ID
TOKEN_ADDRESS_IDS = {
    "0xbb4cdb9cbd36b01bd1cbaebf2de08d9173bc095c": "wbnb",                # WBNB
    "0x0e09fabb73bd3ade0a17ecc321fd13a19e81ce82": "pancakeswap-token",   # CAKE
    "0x4b0f1812e5df2a09796481ff14017e6005508003": "trust-wallet-token",  # TWT
    "0xe9e7cea3dedca5984780bafc599bd69add087d56": "binance-usd",         # BUSD
    "0x55d398326f99059ff775485246999027b3197955": "tether",              # USDT
}

# Price cache: {coingecko_id: (price_usd, timestamp)}
_price_cache: dict[str, tuple[float, float]] = {}
CACHE_TTL = 60  # seconds


async def get_price_by_address(token_address: str) -> float | None:
    """Get USD price by token contract address."""
    cg_id = TOKEN_ADDRESS_IDS.get(token_address.lower())
    if not cg_id:
        return await _fetch_price_by_contract(token_address)
    return await _fetch_price(cg_id)


@retry(stop=stop_after_attempt(3), wait=wait_exponential(multiplier=1, min=1, max=8), reraise=True)
async def _get_json(path: str, params: dict) -> dict:
    async with httpx.AsyncClient(timeout=10) as client:
        resp = await client.get(f"{settings.COINGECKO_API_URL}{path}", params=params)
        resp.raise_for_status()
        return resp.json()


async def _fetch_price(coingecko_id: str) -> float | None:
    """Fetch a single token price from CoinGecko with caching."""
    now = time.time()
    if coingecko_id in _price_cache:
        cached_price, cached_at = _price_cache[coingecko_id]
        if (now - cached_at) < CACHE_TTL:
            return cached_price

    try:
        data = await _get_json("/simple/price", {"ids": coingecko_id, "vs_currencies": "usd"})
        if coingecko_id in data and "usd" in data[coingecko_id]:
            price = float(data[coingecko_id]["usd"])
            _price_cache[coingecko_id] = (price, now)
            return price
    except Exception as e:
        logger.error("price_fetch_failed", coingecko_id=coingecko_id, error=str(e))

    # Return stale cache if available
    if coingecko_id in _price_cache:
        return _price_cache[coingecko_id][0]
    return None


async def _fetch_price_by_contract(token_address: str) -> float | None:
    """Fetch price by contract address from CoinGecko's BSC platform."""
    addr_lower = token_address.lower()
    try:
        data = await _get_json(
            "/simple/token_price/binance-smart-chain",
            {"contract_addresses": addr_lower, "vs_currencies": "usd"},
        )
        if addr_lower in data and "usd" in data[addr_lower]:
            return float(data[addr_lower]["usd"])
    except Exception as e:
        logger.error("contract_price_fetch_failed", address=token_address, error=str(e))
    return None


def clear_cache():
    _price_cache.clear()
