"""
Solana RPC connection provider with ordered endpoint fallback
"""

import logging
import time
from typing import List, Optional, Sequence

from solana.rpc.async_api import AsyncClient

from .errors import NoProviderAvailable
from .metrics import rpc_connect_attempts

logger = logging.getLogger(__name__)

DEFAULT_RPC_ENDPOINTS = [
    "https://api.mainnet-beta.solana.com",
]


def sanitize_url(url: str) -> str:
    """
    Sanitize URL by removing API keys and other sensitive information.

    Args:
        url (str): The URL to sanitize

    Returns:
        str: Sanitized URL
    """
    if '?' in url and ('api-key=' in url.lower() or 'apikey=' in url.lower()):
        base_url, params = url.split('?', 1)
        sanitized_params = []

        for param in params.split('&'):
            if 'api-key=' in param.lower() or 'apikey=' in param.lower():
                key, _ = param.split('=', 1)
                sanitized_params.append(f"{key}=REDACTED")
            else:
                sanitized_params.append(param)

        return f"{base_url}?{'&'.join(sanitized_params)}"

    return url


class ConnectionProvider:
    """Hands out the first RPC endpoint that answers a liveness probe"""

    def __init__(self, endpoints: Optional[Sequence[str]] = None, timeout: float = 10.0, commitment: str = "confirmed"):
        self.endpoints: List[str] = list(endpoints) if endpoints else list(DEFAULT_RPC_ENDPOINTS)
        self.timeout = timeout
        self.commitment = commitment

    def _create_client(self, url: str) -> AsyncClient:
        return AsyncClient(url, commitment=self.commitment, timeout=self.timeout)

    @staticmethod
    async def close_client(client: AsyncClient, url: str = "") -> None:
        """Close a client, logging instead of raising on failure."""
        try:
            await client.close()
        except Exception as e:
            logger.error(f"Error closing client {sanitize_url(url)}: {str(e)}")

    async def connect(self) -> AsyncClient:
        """
        Probe each endpoint in order with ``get_block_height`` and return the
        first live client. Single pass, no retry.

        Raises:
            NoProviderAvailable: when every endpoint fails its probe
        """
        for url in self.endpoints:
            client = self._create_client(url)
            try:
                start_time = time.time()
                response = await client.get_block_height()
                latency = time.time() - start_time
            except Exception as e:
                rpc_connect_attempts.labels(outcome='failure').inc()
                logger.warning(f"Failed to connect to RPC endpoint {sanitize_url(url)}: {str(e)}")
                await self.close_client(client, url)
                continue

            rpc_connect_attempts.labels(outcome='success').inc()
            logger.info(
                f"Connected to Solana via {sanitize_url(url)} "
                f"(block height: {response.value}, latency: {latency:.3f}s)"
            )
            return client

        raise NoProviderAvailable("Failed to connect to any Solana RPC provider")
