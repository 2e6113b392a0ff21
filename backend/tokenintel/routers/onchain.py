"""
On-chain Router - token metadata, price, holders, volume and bonding curve endpoints
"""
import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, Field
from solana.rpc.async_api import AsyncClient
from solders.pubkey import Pubkey

from ..constants.pumpfun import PUMPFUN_UPDATE_AUTHORITY
from ..dependencies.services import (
    get_connection,
    get_executor,
    get_http_client,
    get_price_feed,
    get_pump_api,
)
from ..pumpfun.analysis import analyze_tokens, similar_coin_brief
from ..pumpfun.api import PumpFunAPI
from ..pumpfun.bonding_curve import fetch_curve_state, get_bonding_curve_address, get_bonding_curve_info
from ..pumpfun.holders import HolderAggregator, classify_addresses
from ..pumpfun.market import SolPriceFeed, token_market
from ..pumpfun.metadata import MetaplexStrategy, normalize_metadata, resolve_token_metadata
from ..pumpfun.volume import analyze_trade_volume, volume_report
from ..utils.address import get_address_info, validate_mint_address
from ..utils.errors import ValidationError
from ..utils.fallback import FallbackExecutor

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["On-chain"],
    responses={404: {"description": "Not found"}},
)

CREATOR_HISTORY_LIMIT = 50
SIMILAR_COINS_LIMIT = 10
MAX_CLASSIFY_ADDRESSES = 50


class ClassifyRequest(BaseModel):
    addresses: List[str] = Field(..., min_length=1, max_length=MAX_CLASSIFY_ADDRESSES)


def valid_mint(ca: str) -> Pubkey:
    return validate_mint_address(ca)


@router.get("/token/{ca}/static")
async def get_static_token_metadata(
    mint: Pubkey = Depends(valid_mint),
    connection: AsyncClient = Depends(get_connection),
    pump_api: PumpFunAPI = Depends(get_pump_api),
    executor: FallbackExecutor = Depends(get_executor),
    http_client=Depends(get_http_client),
) -> Dict[str, Any]:
    """
    Token metadata, the creator's launch history and similar coins.
    """
    token = await resolve_token_metadata(mint, connection, pump_api, executor, http_client)

    creator_tokens = await pump_api.get_user_created_coins(token.creator, limit=CREATOR_HISTORY_LIMIT) \
        if token.creator else []
    similar = await pump_api.get_similar_coins(str(mint), SIMILAR_COINS_LIMIT)

    return {
        "staticToken": token.to_dict(),
        "creatorAnalysis": analyze_tokens(creator_tokens),
        "similarCoins": [similar_coin_brief(coin) for coin in similar],
    }


@router.get("/token/{ca}/price")
async def get_token_price(
    response: Response,
    mint: Pubkey = Depends(valid_mint),
    connection: AsyncClient = Depends(get_connection),
    price_feed: SolPriceFeed = Depends(get_price_feed),
) -> Dict[str, Any]:
    """
    Token price in SOL and USD with its fully-diluted market cap.
    """
    curve = await get_bonding_curve_info(connection, mint)
    sol_price = await price_feed.get_sol_price()

    response.headers["Cache-Control"] = "no-cache, no-store, must-revalidate"
    response.headers["Pragma"] = "no-cache"
    response.headers["Expires"] = "0"
    return token_market(curve["tokenPrice"], sol_price)


@router.get("/token/{ca}/holders")
async def get_token_holders(
    mint: Pubkey = Depends(valid_mint),
    connection: AsyncClient = Depends(get_connection),
) -> Dict[str, Any]:
    distribution = await HolderAggregator(connection).get_holders(mint)
    return {"success": True, "result": distribution.to_dict()}


@router.get("/token/{ca}/volume")
async def get_token_volume(
    mint: Pubkey = Depends(valid_mint),
    connection: AsyncClient = Depends(get_connection),
    pump_api: PumpFunAPI = Depends(get_pump_api),
) -> Dict[str, Any]:
    """
    Latest trade and 15/30/60 minute volume for a Pump.fun token still on
    its bonding curve.
    """
    token = normalize_metadata(await MetaplexStrategy(connection).fetch(mint))
    if token.update_authority != PUMPFUN_UPDATE_AUTHORITY:
        raise ValidationError("Volume is currently only available for Pump.fun tokens")

    state = await fetch_curve_state(connection, get_bonding_curve_address(mint))
    if state.complete:
        raise ValidationError("Bonding curve completed")

    trades = await pump_api.get_trades(str(mint))
    return {
        "success": True,
        "result": {
            "latestTrade": trades[0].to_dict() if trades else None,
            "volumeRes": volume_report(analyze_trade_volume(trades)),
        },
    }


@router.get("/token/{ca}/curve")
async def get_bonding_curve_state(
    mint: Pubkey = Depends(valid_mint),
    connection: AsyncClient = Depends(get_connection),
) -> Dict[str, Any]:
    return {"success": True, "result": await get_bonding_curve_info(connection, mint)}


@router.post("/addresses/classify")
async def classify(
    request: ClassifyRequest,
    connection: AsyncClient = Depends(get_connection),
) -> Dict[str, Any]:
    """
    Classify a batch of addresses concurrently. A failed lookup is reported
    as ``invalid`` without failing the batch.
    """
    results = await classify_addresses(
        request.addresses,
        lambda address: get_address_info(address, connection),
    )
    return {"success": True, "result": results}
