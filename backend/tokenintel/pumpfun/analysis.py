"""
Creator history analysis over Pump.fun coin records
"""

from typing import Any, Dict, Iterable

RUG_MARKET_CAP = 4000
PROGRESS_MARKET_CAP = (10000, 50000)


def _brief(token: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "name": token.get("name"),
        "symbol": token.get("symbol"),
        "image": token.get("image_uri"),
        "mint": token.get("mint"),
        "created_timestamp": token.get("created_timestamp"),
    }


def analyze_tokens(tokens: Iterable[Dict[str, Any]], include: bool = False) -> Dict[str, Any]:
    """
    Count a creator's launches that graduated (``complete``), rugged
    (USD market cap under 4000) or are mid-way (10k to 50k).

    A graduated token can also count as a rug when its market cap has since
    collapsed; rug and progress are mutually exclusive.
    """
    tokens = list(tokens)
    result: Dict[str, Any] = {
        "count": len(tokens),
        "success_count": 0,
        "rug_count": 0,
        "progress_count": 0,
    }
    if include:
        result["success_tokens"] = []
        result["rug_tokens"] = []
        result["progress_tokens"] = []

    low, high = PROGRESS_MARKET_CAP
    for token in tokens:
        usd_market_cap = token.get("usd_market_cap") or 0

        if token.get("complete"):
            result["success_count"] += 1
            if include:
                result["success_tokens"].append(_brief(token))

        if usd_market_cap < RUG_MARKET_CAP:
            result["rug_count"] += 1
            if include:
                result["rug_tokens"].append(_brief(token))
        elif low <= usd_market_cap <= high:
            result["progress_count"] += 1
            if include:
                result["progress_tokens"].append(_brief(token))

    return result


def similar_coin_brief(coin: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "mint": coin.get("mint"),
        "name": coin.get("name"),
        "symbol": coin.get("symbol"),
        "desc": coin.get("description"),
        "image": coin.get("image_uri"),
        "twitter": coin.get("twitter"),
        "telegram": coin.get("telegram"),
        "website": coin.get("website"),
        "marketcap": coin.get("usd_market_cap"),
        "complete": coin.get("complete"),
        "king_of_hill": coin.get("king_of_the_hill_timestamp"),
        "created": coin.get("created_timestamp"),
    }
