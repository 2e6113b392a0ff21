"""
Tweet volume rollups over 1h / 6h / 24h windows
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple

# (key, window length in minutes, minutes per interval, interval count)
WINDOWS: Tuple[Tuple[str, int, int, int], ...] = (
    ('lastHour', 60, 10, 6),
    ('last6Hours', 360, 60, 6),
    ('last24Hours', 1440, 180, 8),
)

ENGAGEMENT_FIELDS = {
    'likes': 'likeCount',
    'retweets': 'retweetCount',
    'replies': 'replyCount',
    'quotes': 'quoteCount',
    'views': 'viewCount',
}

TWITTER_DATE_FORMAT = '%a %b %d %H:%M:%S %z %Y'


def parse_created_at(value: Any) -> datetime:
    """Parse ``createdAt`` in Twitter's format ("Tue Dec 10 07:00:30 +0000 2024") or ISO-8601."""
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    try:
        return datetime.strptime(value, TWITTER_DATE_FORMAT)
    except (TypeError, ValueError):
        parsed = datetime.fromisoformat(str(value).replace('Z', '+00:00'))
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def change_percentage(current: int, previous: int) -> float:
    if previous == 0:
        return 100 if current > 0 else 0
    return (current - previous) / previous * 100


def engagement_metrics(tweets: Sequence[Dict[str, Any]]) -> Dict[str, Dict[str, float]]:
    total = {
        name: sum(tweet.get(source) or 0 for tweet in tweets)
        for name, source in ENGAGEMENT_FIELDS.items()
    }
    count = len(tweets)
    average = {name: (value / count if count else 0) for name, value in total.items()}
    return {'total': total, 'average': average}


def generate_intervals(
    stamped: Sequence[Tuple[datetime, Dict[str, Any]]],
    now: datetime,
    minutes_per_interval: int,
    count: int,
) -> List[Dict[str, Any]]:
    """Buckets named by their UTC end time ("HH:MM"), oldest first."""
    step = timedelta(minutes=minutes_per_interval)
    intervals = []
    for i in range(count):
        end = now - i * step
        start = end - step
        intervals.insert(0, {
            'name': end.astimezone(timezone.utc).strftime('%H:%M'),
            'count': sum(1 for created, _ in stamped if start <= created <= end),
        })
    return intervals


def calculate_tweet_volume(
    tweets: Sequence[Dict[str, Any]],
    now: Optional[datetime] = None,
) -> Dict[str, Dict[str, Any]]:
    """
    Tweet counts, change against the preceding equal window, interval
    breakdown and engagement totals for the last hour, 6 hours and 24 hours.
    """
    now = now or datetime.now(timezone.utc)
    stamped = sorted(
        ((parse_created_at(tweet.get('createdAt')), tweet) for tweet in tweets),
        key=lambda item: item[0],
        reverse=True,
    )

    volume = {}
    for key, window_minutes, interval_minutes, interval_count in WINDOWS:
        window = timedelta(minutes=window_minutes)
        current = [(created, tweet) for created, tweet in stamped if now - created <= window]
        previous = sum(1 for created, _ in stamped if window < now - created <= 2 * window)

        if not stamped:
            volume[key] = {'count': 0, 'change': 0, 'intervals': [], 'engagement': engagement_metrics([])}
            continue

        volume[key] = {
            'count': len(current),
            'change': change_percentage(len(current), previous),
            'intervals': generate_intervals(current, now, interval_minutes, interval_count),
            'engagement': engagement_metrics([tweet for _, tweet in current]),
        }
    return volume
