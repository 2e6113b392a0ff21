"""
The eight-step token research plan
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx
from solana.rpc.async_api import AsyncClient
from solders.pubkey import Pubkey

from ..pumpfun.analysis import analyze_tokens
from ..pumpfun.api import PumpFunAPI
from ..pumpfun.bonding_curve import get_bonding_curve_info
from ..pumpfun.holders import HolderAggregator, summarize_holders
from ..pumpfun.market import SolPriceFeed, token_market
from ..pumpfun.metadata import resolve_token_metadata
from ..pumpfun.volume import analyze_trade_volume, volume_report
from ..social.signals import SocialSignalAggregator
from ..utils.errors import NotFoundError
from ..utils.fallback import FallbackExecutor
from .workflow import PlannedStep, ResearchPlan

logger = logging.getLogger(__name__)

CREATOR_HISTORY_LIMIT = 50


@dataclass
class ResearchServices:
    """Collaborators a research run needs."""
    connection: AsyncClient
    pump_api: PumpFunAPI
    price_feed: SolPriceFeed
    social: SocialSignalAggregator
    executor: FallbackExecutor
    http_client: Optional[httpx.AsyncClient] = None


def build_token_research_plan(mint: str, services: ResearchServices) -> ResearchPlan:
    mint_pubkey = Pubkey.from_string(mint)

    async def token_info(results: Dict[str, Any]) -> Dict[str, Any]:
        metadata = await resolve_token_metadata(
            mint_pubkey,
            services.connection,
            services.pump_api,
            services.executor,
            services.http_client,
        )
        return metadata.to_dict()

    async def social_verify(results: Dict[str, Any]) -> Dict[str, Any]:
        external = results["token-info"].get("externalMetadata") or {}
        links = {
            "twitter": external.get("twitter") or None,
            "telegram": external.get("telegram") or None,
            "website": external.get("website") or None,
        }
        return {**links, "verified": any(links.values())}

    async def market(results: Dict[str, Any]) -> Dict[str, Any]:
        curve = await get_bonding_curve_info(services.connection, mint_pubkey)
        sol_price = await services.price_feed.get_sol_price()
        figures = token_market(curve["tokenPrice"], sol_price)
        return {
            "marketCap": figures["tokenMarketCap"],
            "price": figures["priceInUSD"],
            "priceSOL": figures["tokenPriceSOL"],
            "solPrice": sol_price,
            "bondingCurveProgress": curve["progress"]["progress"],
            "complete": curve["curveState"]["complete"],
        }

    async def volume(results: Dict[str, Any]) -> Dict[str, Any]:
        trades = await services.pump_api.get_trades(mint)
        return {
            "tradeCount": len(trades),
            "latestTrade": trades[0].to_dict() if trades else None,
            "volume": volume_report(analyze_trade_volume(trades)),
        }

    async def holders(results: Dict[str, Any]) -> Dict[str, Any]:
        distribution = await HolderAggregator(services.connection).get_holders(mint_pubkey)
        return summarize_holders(distribution)

    async def creator(results: Dict[str, Any]) -> Dict[str, Any]:
        address = results["token-info"].get("creator")
        if not address:
            raise NotFoundError(f"No creator known for {mint}")
        coins = await services.pump_api.get_user_created_coins(address, limit=CREATOR_HISTORY_LIMIT)
        return {"address": address, **analyze_tokens(coins)}

    async def sentiment(results: Dict[str, Any]) -> Dict[str, Any]:
        signals = await services.social.analyze(mint)
        summary = signals["sentiments"]["summary"]
        return {
            "overall": summary["label"],
            "counts": summary["counts"],
            "tweetCount": summary["total"],
            "lastHourTweets": signals["volume"]["lastHour"]["count"],
        }

    def summarize(results: Dict[str, Any]) -> Dict[str, Any]:
        info = results.get("token-info") or {}
        return {
            "mintAddress": mint,
            "name": info.get("name"),
            "symbol": info.get("symbol"),
            "marketCap": (results.get("market") or {}).get("marketCap"),
            "sentiment": (results.get("sentiment") or {}).get("overall"),
            "riskLevel": "Medium",
            "recommendedAction": "DYOR",
        }

    return ResearchPlan(
        mint=mint,
        summarize=summarize,
        steps=[
            PlannedStep("token-info", "Token Information",
                        "Fetching basic token information and metadata", token_info),
            PlannedStep("social-verify", "Social Verification",
                        "Verifying social presence and community engagement", social_verify),
            PlannedStep("market", "Market Analysis",
                        "Analyzing market cap and price performance", market),
            PlannedStep("volume", "Volume Analysis",
                        "Analyzing trading volume and liquidity", volume),
            PlannedStep("holders", "Holder Analysis",
                        "Analyzing token distribution and holder demographics", holders),
            PlannedStep("similar", "Similar Tokens",
                        "Finding and comparing similar tokens",
                        skip_message="Skipped - no similar tokens found"),
            PlannedStep("creator", "Creator Analysis",
                        "Analyzing the token creator and team", creator),
            PlannedStep("sentiment", "Sentiment Analysis",
                        "Analyzing social sentiment and community feedback", sentiment),
        ],
    )
