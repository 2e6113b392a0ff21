import httpx
import pytest

from tokenintel.constants.pumpfun import WSOL
from tokenintel.pumpfun.market import SolPriceFeed, token_market
from tokenintel.utils.errors import AggregateFailure
from tokenintel.utils.fallback import FallbackExecutor

GECKO_URL = "https://gecko.test/price"
JUPITER_URL = "https://jup.test/price"


def _feed(handler, max_cycles=3):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return SolPriceFeed(client, FallbackExecutor(max_cycles), coingecko_url=GECKO_URL, jupiter_url=JUPITER_URL)


@pytest.mark.asyncio
async def test_coingecko_price():
    feed = _feed(lambda request: httpx.Response(200, json={"solana": {"usd": 150.5}}))
    assert await feed.get_sol_price() == 150.5


@pytest.mark.asyncio
async def test_falls_back_to_jupiter():
    hosts = []

    def handler(request):
        hosts.append(request.url.host)
        if request.url.host == "gecko.test":
            return httpx.Response(429, json={"status": "rate limited"})
        return httpx.Response(200, json={"data": {WSOL: {"price": "149.25"}}})

    price = await _feed(handler).get_sol_price()

    assert price == 149.25
    assert hosts == ["gecko.test", "jup.test"]


@pytest.mark.asyncio
async def test_zero_price_counts_as_failure():
    def handler(request):
        if request.url.host == "gecko.test":
            return httpx.Response(200, json={"solana": {"usd": 0}})
        return httpx.Response(200, json={"data": {WSOL: {"price": 140}}})

    assert await _feed(handler).get_sol_price() == 140


@pytest.mark.asyncio
async def test_both_feeds_down():
    calls = []

    def handler(request):
        calls.append(request.url.host)
        return httpx.Response(503)

    with pytest.raises(AggregateFailure):
        await _feed(handler, max_cycles=2).get_sol_price()
    assert len(calls) == 4


def test_token_market():
    market = token_market(0.00000003, 150)

    assert market["tokenPriceSOL"] == "0.000000030000"
    assert market["priceInUSD"] == "0.000004500000"
    assert market["tokenMarketCap"] == pytest.approx(4500)
    assert market["solPrice"] == 150
