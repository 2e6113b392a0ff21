"""
SOL/USD price feeds and token market figures
"""

import logging
from typing import Any, Dict, Optional

import httpx

from .. import config
from ..constants.pumpfun import PUMPFUN_TOTAL_SUPPLY, WSOL
from ..utils.errors import UpstreamError
from ..utils.fallback import FallbackExecutor, NamedStrategy
from ..utils.metrics import track_upstream

logger = logging.getLogger(__name__)


class SolPriceFeed:
    """SOL/USD from CoinGecko, falling back to Jupiter"""

    def __init__(
        self,
        client: httpx.AsyncClient,
        executor: Optional[FallbackExecutor] = None,
        coingecko_url: str = config.COINGECKO_PRICE_URL,
        jupiter_url: str = config.JUPITER_PRICE_URL,
    ):
        self.client = client
        self.executor = executor or FallbackExecutor(config.FALLBACK_MAX_CYCLES)
        self.coingecko_url = coingecko_url
        self.jupiter_url = jupiter_url

    async def _get_json(self, url: str, source: str) -> Any:
        try:
            response = await self.client.get(url)
            response.raise_for_status()
            return response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise UpstreamError(f"Error fetching SOL price ({source}): {str(e)}") from e

    @track_upstream('coingecko')
    async def from_coingecko(self) -> float:
        data = await self._get_json(self.coingecko_url, 'GECKO')
        try:
            price = float(data["solana"]["usd"])
        except (KeyError, TypeError, ValueError) as e:
            raise UpstreamError(f"Unexpected CoinGecko payload: {data!r}") from e
        if price <= 0:
            raise UpstreamError("CoinGecko returned no SOL price")
        return price

    @track_upstream('jupiter')
    async def from_jupiter(self) -> float:
        data = await self._get_json(self.jupiter_url, 'JUP')
        try:
            price = float(data["data"][WSOL]["price"])
        except (KeyError, TypeError, ValueError) as e:
            raise UpstreamError(f"Unexpected Jupiter payload: {data!r}") from e
        if price <= 0:
            raise UpstreamError("Jupiter returned no SOL price")
        return price

    async def get_sol_price(self) -> float:
        """
        Raises:
            AggregateFailure: if neither feed answered
        """
        outcome = await self.executor.run([
            NamedStrategy('GECKO', self.from_coingecko),
            NamedStrategy('JUP', self.from_jupiter),
        ])
        return outcome.unwrap()


def token_market(token_price_sol: float, sol_price_usd: float) -> Dict[str, Any]:
    """USD price and fully-diluted market cap for a one-billion-supply token."""
    price_usd = token_price_sol * sol_price_usd
    return {
        "tokenPriceSOL": f"{token_price_sol:.12f}",
        "priceInUSD": f"{price_usd:.12f}",
        "tokenMarketCap": PUMPFUN_TOTAL_SUPPLY * price_usd,
        "solPrice": sol_price_usd,
    }
