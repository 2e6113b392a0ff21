from .twitter import TwitterClient, extract_tweet_id
from .volume import calculate_tweet_volume
from .sentiment import analyze_sentiment
from .signals import SocialSignalAggregator

__all__ = [
    'TwitterClient',
    'extract_tweet_id',
    'calculate_tweet_volume',
    'analyze_sentiment',
    'SocialSignalAggregator',
]
