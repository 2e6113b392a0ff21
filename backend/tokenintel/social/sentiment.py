"""
Batched tweet sentiment scoring
"""

import json
import logging
from typing import Any, Dict, List, Optional, Sequence

from pydantic import BaseModel, Field

from ..ai.structured import StructuredGenerator
from ..utils.errors import ValidationError

logger = logging.getLogger(__name__)


class TweetSentiment(BaseModel):
    score: float = Field(
        ge=-10,
        le=10,
        description="Sentiment score from -10 (most negative) to 10 (most positive), with 0 being neutral",
    )


class SentimentBatch(BaseModel):
    sentiments: List[TweetSentiment]


def build_prompt(tweets: Sequence[Dict[str, Any]]) -> str:
    texts = [tweet.get('text', '') for tweet in tweets]
    return (
        "Analyze the sentiment of each tweet about Solana-based meme coins in the following array.\n"
        "Return one entry in `sentiments` per tweet, in the same order, each with a score from "
        "-10 (extremely negative) to 10 (extremely positive), 0 being neutral.\n\n"
        f"Tweets: {json.dumps(texts)}"
    )


def label_for(positive: int, negative: int) -> str:
    if positive > negative:
        return "Positive"
    if negative > positive:
        return "Negative"
    return "Neutral"


def empty_sentiment() -> Dict[str, Any]:
    """Sentiment result for a token nobody has tweeted about."""
    return {
        "summary": {
            "total": 0,
            "counts": {"positive": 0, "negative": 0, "neutral": 0},
            "label": "Neutral",
        },
        "tweets": [],
    }


async def analyze_sentiment(tweets: Sequence[Dict[str, Any]], generator: StructuredGenerator) -> Dict[str, Any]:
    """
    Score every tweet with one model call. Scores are matched to tweets by
    position; a tweet without a score is reported as ``None`` and counted
    as neutral.

    Raises:
        ValidationError: on an empty tweet list
    """
    if not tweets:
        raise ValidationError("Input must be a non-empty array of tweets")

    batch = await generator.generate(build_prompt(tweets), SentimentBatch)
    if len(batch.sentiments) != len(tweets):
        logger.warning(f"Got {len(batch.sentiments)} scores for {len(tweets)} tweets")

    counts = {"positive": 0, "negative": 0, "neutral": 0}
    scored = []
    for index, tweet in enumerate(tweets):
        score: Optional[float] = batch.sentiments[index].score if index < len(batch.sentiments) else None
        if score is not None and score > 0:
            counts["positive"] += 1
        elif score is not None and score < 0:
            counts["negative"] += 1
        else:
            counts["neutral"] += 1
        scored.append({
            "tweetId": tweet.get("id"),
            "created": tweet.get("createdAt"),
            "url": tweet.get("url"),
            "score": score,
        })

    return {
        "summary": {
            "total": len(tweets),
            "counts": counts,
            "label": label_for(counts["positive"], counts["negative"]),
        },
        "tweets": scored,
    }
