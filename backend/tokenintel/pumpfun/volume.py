"""
Windowed trade volume and volatility for Pump.fun trades
"""

import math
import time
from datetime import datetime, timezone
from typing import Dict, Optional, Sequence

from ..constants.pumpfun import LAMPORTS_PER_SOL
from ..models import Trade, VolumePeriod, VolumeResult

WINDOW_COUNT = 4
DEFAULT_BUCKETS = (15, 30, 60)


def _iso(timestamp: int) -> str:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).isoformat().replace('+00:00', 'Z')


def calculate_volume(trades: Sequence[Trade], minutes: int, now: Optional[int] = None) -> VolumeResult:
    """
    Split the last ``4 * minutes`` into four equal windows ending at ``now``
    and sum buy/sell SOL volume in each.

    Window ``i`` covers ``(now - (i+1)*period, now - i*period]``; window 0 is
    the most recent and its total is the reported ``volume``. Volatility is the
    population standard deviation of the four window totals.
    """
    now = int(time.time()) if now is None else now
    period_seconds = minutes * 60
    oldest_relevant = now - period_seconds * WINDOW_COUNT

    relevant = [t for t in trades if oldest_relevant <= t.timestamp <= now]
    if not relevant:
        return VolumeResult()

    periods = []
    for i in range(WINDOW_COUNT):
        period_end = now - i * period_seconds
        period_start = period_end - period_seconds

        buy_volume = 0.0
        sell_volume = 0.0
        users = set()
        for trade in relevant:
            if not (period_start < trade.timestamp <= period_end):
                continue
            sol = trade.sol_amount / LAMPORTS_PER_SOL
            if trade.is_buy:
                buy_volume += sol
            else:
                sell_volume += sol
            users.add(trade.user)

        periods.append(VolumePeriod(
            start_time=_iso(period_start),
            end_time=_iso(period_end),
            volume=buy_volume + sell_volume,
            buy_volume=buy_volume,
            sell_volume=sell_volume,
            user_count=len(users),
        ))

    mean = sum(p.volume for p in periods) / len(periods)
    variance = sum((p.volume - mean) ** 2 for p in periods) / len(periods)

    return VolumeResult(
        volume=periods[0].volume,
        volatility=math.sqrt(variance),
        periods=periods,
    )


def analyze_trade_volume(
    trades: Sequence[Trade],
    bucket_minutes: Sequence[int] = DEFAULT_BUCKETS,
    now: Optional[int] = None,
) -> Dict[int, VolumeResult]:
    now = int(time.time()) if now is None else now
    return {minutes: calculate_volume(trades, minutes, now) for minutes in bucket_minutes}


def volume_report(results: Dict[int, VolumeResult]) -> Dict[str, dict]:
    """Wire shape keyed the way clients expect (``fifteenMinVol`` ...)."""
    names = {15: "fifteenMinVol", 30: "thirtyMinVol", 60: "sixtyMinVol"}
    return {names.get(minutes, f"{minutes}MinVol"): result.to_dict() for minutes, result in results.items()}
