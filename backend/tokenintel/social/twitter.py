"""
Client for the twitterapi.io search API
"""

import asyncio
import logging
import re
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional

import httpx
from tenacity import (
    AsyncRetrying,
    RetryError,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from .. import config
from ..utils.errors import UpstreamError, ValidationError
from ..utils.metrics import upstream_duration

logger = logging.getLogger(__name__)

TWEET_URL_PATTERN = re.compile(r'(?:twitter\.com|x\.com)/\w+/status/(\d+)')
FETCH_TWEETS_URL = 'https://api.twitterapi.io/twitter/tweets'


def extract_tweet_id(url: str) -> Optional[str]:
    """Tweet id from a twitter.com or x.com status URL."""
    match = TWEET_URL_PATTERN.search(url or '')
    return match.group(1) if match else None


class TwitterClient:
    """Paged tweet search with per-page retries"""

    def __init__(
        self,
        api_key: str = config.TWITTER_API_KEY,
        client: Optional[httpx.AsyncClient] = None,
        search_url: str = config.TWITTER_SEARCH_URL,
        fetch_url: str = FETCH_TWEETS_URL,
        delay: float = config.TWITTER_REQUEST_DELAY,
        max_retries: int = config.TWITTER_MAX_RETRIES,
        limit: int = config.TWITTER_TWEET_LIMIT,
        ignored_accounts: Iterable[str] = (),
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.api_key = api_key
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=config.HTTP_TIMEOUT)
        self.search_url = search_url
        self.fetch_url = fetch_url
        self.delay = delay
        self.max_retries = max_retries
        self.limit = limit
        self.ignored_accounts = {account.lower() for account in ignored_accounts}
        self.sleep = sleep

    async def close(self):
        if self._owns_client:
            await self.client.aclose()

    async def _request_once(self, url: str, params: Dict[str, Any]) -> Dict[str, Any]:
        with upstream_duration.labels(upstream='twitter').time():
            response = await self.client.get(url, params=params, headers={'X-API-Key': self.api_key})
        response.raise_for_status()
        return response.json()

    async def _request(self, url: str, params: Dict[str, Any]) -> Dict[str, Any]:
        """
        One API call, retried ``max_retries`` times with a backoff of
        ``delay * 2**(n-1)`` seconds.

        Raises:
            UpstreamError: once every retry failed
        """
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_retries + 1),
            wait=wait_exponential(multiplier=self.delay, exp_base=2),
            retry=retry_if_exception_type((httpx.HTTPError, ValueError)),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            sleep=self.sleep,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    return await self._request_once(url, params)
        except RetryError as e:
            last_error = e.last_attempt.exception()
            raise UpstreamError(
                f"Failed after {self.max_retries} retries: {str(last_error)}"
            ) from last_error

    def _is_ignored(self, tweet: Dict[str, Any]) -> bool:
        author = tweet.get('author') or {}
        return (
            str(author.get('id', '')).lower() in self.ignored_accounts
            or str(author.get('userName') or author.get('username') or '').lower() in self.ignored_accounts
        )

    async def _search(self, query: str, limit: int, query_type: str) -> List[Dict[str, Any]]:
        if not query:
            raise ValidationError("Query is required")

        tweets: List[Dict[str, Any]] = []
        cursor: Optional[str] = None
        has_next_page = True

        while has_next_page and len(tweets) < limit:
            await self.sleep(self.delay)

            params = {'queryType': query_type, 'query': query}
            if cursor:
                params['cursor'] = cursor
            result = await self._request(self.search_url, params)

            page = result.get('tweets') if result else None
            if not page:
                break

            tweets.extend(page)
            has_next_page = bool(result.get('has_next_page'))
            cursor = result.get('next_cursor')

        logger.debug(f"Fetched {len(tweets)} {query_type} tweets for {query!r}")
        return [tweet for tweet in tweets[:limit] if not self._is_ignored(tweet)]

    async def get_tweets_by_query(self, query: str, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        return await self._search(query, limit or self.limit, 'Latest')

    async def get_top_tweets(self, query: str, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        return await self._search(query, limit or self.limit, 'Top')

    async def get_latest_tweet(self, query: str) -> Optional[Dict[str, Any]]:
        result = await self._request(self.search_url, {'queryType': 'Latest', 'query': query})
        tweets = result.get('tweets') if result else None
        return tweets[0] if tweets else None

    async def get_tweet_by_id(self, tweet_id: str) -> Optional[Dict[str, Any]]:
        result = await self._request(self.fetch_url, {'tweet_ids': tweet_id})
        tweets = result.get('tweets') if result else None
        return tweets[0] if tweets else None
