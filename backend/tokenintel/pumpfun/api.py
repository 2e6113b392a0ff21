"""
Client for the Pump.fun frontend REST API
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

import httpx

from .. import config
from ..models import Trade
from ..utils.errors import FormatError, NotFoundError, UpstreamError, ValidationError
from ..utils.metrics import track_upstream

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "accept": "*/*",
    "Referer": "https://pump.fun/",
    "User-Agent": "TokenIntel/1.0",
}


class PumpFunAPI:
    """Thin async wrapper over the Pump.fun frontend API"""

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        base_url: str = config.PUMP_API_BASE_URL,
        timeout: float = config.HTTP_TIMEOUT,
    ):
        self.base_url = base_url.rstrip('/')
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=timeout, headers=DEFAULT_HEADERS)

    async def close(self):
        if self._owns_client:
            await self.client.aclose()

    @track_upstream('pumpfun')
    async def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = await self.client.get(url, params=params)
        except httpx.HTTPError as e:
            raise UpstreamError(f"Pump.fun request to {path} failed: {str(e)}") from e

        if response.status_code == 404:
            raise NotFoundError(f"Pump.fun resource not found: {path}")
        if response.status_code >= 400:
            raise UpstreamError(
                f"Pump.fun request to {path} failed with status {response.status_code}"
            )
        return response.json()

    async def get_token_details(self, mint: str) -> Dict[str, Any]:
        """Coin record from ``/coins/{mint}``."""
        data = await self._get(f"/coins/{mint}")
        if not data:
            raise NotFoundError(f"Failed to fetch data from Pump.fun for mint {mint}")
        return data

    async def get_user_created_coins(self, address: str, limit: int = 10) -> List[Dict[str, Any]]:
        data = await self._get(
            f"/coins/user-created-coins/{address}",
            params={"offset": 0, "limit": limit, "includeNsfw": "false"},
        )
        # The endpoint has answered both as a bare list and as {"coins": [...]}
        if isinstance(data, dict):
            return data.get("coins") or []
        return data or []

    async def get_similar_coins(self, mint: str, limit: int = 15) -> List[Dict[str, Any]]:
        data = await self._get("/coins/similar", params={"mint": mint, "limit": limit})
        return data or []

    async def get_trades(
        self,
        mint: str,
        page_size: int = config.PUMP_TRADES_PAGE_SIZE,
        minimum_size: int = config.PUMP_TRADES_MINIMUM_SIZE,
        delay: float = config.PUMP_TRADES_PAGE_DELAY,
    ) -> List[Trade]:
        """
        Page through ``/trades/all/{mint}`` newest first until a short or
        empty page, sleeping ``delay`` seconds between pages.
        """
        if not mint:
            raise ValidationError("Mint address is required")

        trades: List[Trade] = []
        offset = 0
        while True:
            page = await self._get(
                f"/trades/all/{mint}",
                params={"limit": page_size, "offset": offset, "minimumSize": minimum_size},
            )
            if not page:
                break
            if not isinstance(page, list):
                raise UpstreamError(f"Unexpected Pump.fun trades page for {mint}: {type(page).__name__}")

            for item in page:
                try:
                    trades.append(Trade.from_api(item))
                except FormatError as e:
                    logger.warning(f"Skipping trade record for {mint}: {str(e)}")
            offset += page_size

            if len(page) < page_size:
                break
            if delay > 0:
                await asyncio.sleep(delay)

        logger.info(f"Fetched {len(trades)} Pump.fun trades for {mint}")
        return trades
