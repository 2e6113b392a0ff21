"""
Social Router - tweet volume and sentiment for a token
"""
import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends
from solders.pubkey import Pubkey

from ..dependencies.services import get_social_aggregator
from ..social.signals import SocialSignalAggregator
from .onchain import valid_mint

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Social"])


@router.get("/token/{ca}")
async def get_twitter_analysis(
    mint: Pubkey = Depends(valid_mint),
    aggregator: SocialSignalAggregator = Depends(get_social_aggregator),
) -> Dict[str, Any]:
    """
    Recent tweets mentioning the token: volume windows and sentiment.
    """
    return await aggregator.analyze(str(mint))
