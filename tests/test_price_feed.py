import pytest

from shared import price_feed

CAKE = "0x0E09FaBB73Bd3Ade0a17ECC321fD13a19e81cE82"
TWT = "0x4B0F1812e5Df2A09796481Ff14017e6005508003"


@pytest.fixture(autouse=True)
def fresh_cache():
    price_feed.clear_cache()
    yield
    price_feed.clear_cache()


def fake_api(responses, calls):
    async def _get_json(path, params):
        calls.append((path, params))
        result = responses.pop(0)
        if isinstance(result, Exception):
            raise result
        return result
    return _get_json


@pytest.mark.asyncio
async def test_known_address_uses_coingecko_id(monkeypatch):
    calls = []
    monkeypatch.setattr(price_feed, "_get_json", fake_api([{"pancakeswap-token": {"usd": 2.5}}], calls))
    assert await price_feed.get_price_by_address(CAKE) == 2.5
    assert calls == [("/simple/price", {"ids": "pancakeswap-token", "vs_currencies": "usd"})]


@pytest.mark.asyncio
async def test_price_is_cached(monkeypatch):
    calls = []
    monkeypatch.setattr(price_feed, "_get_json", fake_api([{"trust-wallet-token": {"usd": 1.1}}], calls))
    assert await price_feed.get_price_by_address(TWT.lower()) == 1.1
    assert await price_feed.get_price_by_address(TWT) == 1.1
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_stale_cache_on_error(monkeypatch):
    calls = []
    monkeypatch.setattr(
        price_feed, "_get_json",
        fake_api([{"pancakeswap-token": {"usd": 2.0}}, RuntimeError("429")], calls),
    )
    monkeypatch.setattr(price_feed, "CACHE_TTL", 0)
    assert await price_feed._fetch_price("pancakeswap-token") == 2.0
    assert await price_feed._fetch_price("pancakeswap-token") == 2.0
    assert len(calls) == 2


@pytest.mark.asyncio
async def test_unknown_address_falls_back_to_contract_lookup(monkeypatch):
    calls = []
    token = "0x7777777777777777777777777777777777777777"
    monkeypatch.setattr(price_feed, "_get_json", fake_api([{token: {"usd": 0.3}}], calls))
    assert await price_feed.get_price_by_address(token) == 0.3
    assert calls[0][0] == "/simple/token_price/binance-smart-chain"


@pytest.mark.asyncio
async def test_unavailable_price(monkeypatch):
    calls = []
    monkeypatch.setattr(price_feed, "_get_json", fake_api([RuntimeError("503")], calls))
    assert await price_feed._fetch_price("pancakeswap-token") is None
    assert len(calls) == 1
