"""
Social signal aggregation for a token: recent tweets, sentiment and volume
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from ..ai.structured import StructuredGenerator
from .sentiment import analyze_sentiment, empty_sentiment
from .twitter import TwitterClient
from .volume import calculate_tweet_volume

logger = logging.getLogger(__name__)

SOCIAL_TWEET_LIMIT = 200


class SocialSignalAggregator:
    def __init__(self, twitter: TwitterClient, generator: StructuredGenerator, tweet_limit: int = SOCIAL_TWEET_LIMIT):
        self.twitter = twitter
        self.generator = generator
        self.tweet_limit = tweet_limit

    async def analyze(self, mint: str, now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Search recent tweets mentioning ``mint`` and return their volume
        rollup with per-tweet sentiment scores.
        """
        tweets = await self.twitter.get_tweets_by_query(mint, self.tweet_limit)
        logger.info(f"Analyzing {len(tweets)} tweets for {mint}")

        if tweets:
            sentiment = await analyze_sentiment(tweets, self.generator)
        else:
            sentiment = empty_sentiment()
        return {
            "volume": calculate_tweet_volume(tweets, now),
            "sentiments": {
                "summary": sentiment["summary"],
                "tweets": [[tweet["tweetId"], tweet["score"]] for tweet in sentiment["tweets"]],
            },
        }
