"""
Service dependencies module.
Provides shared and per-request instances of upstream clients.
"""
from typing import AsyncIterator, Optional

import httpx
from fastapi import Depends, Request
from solana.rpc.async_api import AsyncClient

from .. import config
from ..ai.structured import OpenAIStructuredGenerator, StructuredGenerator
from ..database.sqlite import ChatStore
from ..pumpfun.api import DEFAULT_HEADERS, PumpFunAPI
from ..pumpfun.market import SolPriceFeed
from ..social.signals import SocialSignalAggregator
from ..social.twitter import TwitterClient
from ..utils.connection_provider import ConnectionProvider
from ..utils.fallback import FallbackExecutor

# Global instances
_generator: Optional[StructuredGenerator] = None
_chat_store: Optional[ChatStore] = None


def create_http_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=config.HTTP_TIMEOUT, headers=DEFAULT_HEADERS)


def get_http_client(request: Request) -> httpx.AsyncClient:
    """Shared HTTP client opened in the application lifespan."""
    return request.app.state.http_client


def get_connection_provider() -> ConnectionProvider:
    return ConnectionProvider(config.SOLANA_RPC_URLS, timeout=config.HTTP_TIMEOUT)


async def get_connection(
    provider: ConnectionProvider = Depends(get_connection_provider),
) -> AsyncIterator[AsyncClient]:
    """A live RPC client for the duration of one request."""
    connection = await provider.connect()
    try:
        yield connection
    finally:
        await ConnectionProvider.close_client(connection)


def get_executor() -> FallbackExecutor:
    return FallbackExecutor(config.FALLBACK_MAX_CYCLES)


def get_pump_api(http_client: httpx.AsyncClient = Depends(get_http_client)) -> PumpFunAPI:
    return PumpFunAPI(client=http_client)


def get_price_feed(
    http_client: httpx.AsyncClient = Depends(get_http_client),
    executor: FallbackExecutor = Depends(get_executor),
) -> SolPriceFeed:
    return SolPriceFeed(http_client, executor)


def get_twitter_client(http_client: httpx.AsyncClient = Depends(get_http_client)) -> TwitterClient:
    return TwitterClient(
        client=http_client,
        ignored_accounts=config.IGNORED_TWITTER_ACCOUNTS,
    )


def get_generator() -> StructuredGenerator:
    """
    Get or create the shared structured generator.
    Created lazily so the app starts without an OpenAI key.
    """
    global _generator
    if _generator is None:
        _generator = OpenAIStructuredGenerator()
    return _generator


def get_social_aggregator(
    twitter: TwitterClient = Depends(get_twitter_client),
    generator: StructuredGenerator = Depends(get_generator),
) -> SocialSignalAggregator:
    return SocialSignalAggregator(twitter, generator)


def get_chat_store() -> ChatStore:
    global _chat_store
    if _chat_store is None:
        _chat_store = ChatStore(config.CHAT_DB_FILE)
    return _chat_store
