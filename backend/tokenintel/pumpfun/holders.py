"""
Token holder distribution from SPL token accounts
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Iterable, List

from solana.rpc.async_api import AsyncClient
from solana.rpc.models import MemcmpOpts
from solders.pubkey import Pubkey

from ..constants.pumpfun import TOKEN_ACCOUNT_SIZE, TOKEN_PROGRAM_ID
from ..models import HolderDistribution, HolderRecord
from ..utils.errors import SupplyUnavailable
from ..utils.spl import decode_token_account

logger = logging.getLogger(__name__)

TOKEN_PROGRAM = Pubkey.from_string(TOKEN_PROGRAM_ID)


class HolderAggregator:
    """Builds a holder distribution for a mint from one bulk account scan"""

    def __init__(self, connection: AsyncClient):
        self.connection = connection

    async def get_supply(self, mint: Pubkey):
        response = await self.connection.get_token_supply(mint)
        supply = response.value
        if supply is None or not supply.ui_amount:
            raise SupplyUnavailable(f"Invalid token supply for {mint}")
        return supply

    async def get_holders(self, mint: Pubkey) -> HolderDistribution:
        """
        Fetch every token account of ``mint`` and rank owners by balance.

        Raises:
            SupplyUnavailable: if the mint reports no supply
        """
        supply = await self.get_supply(mint)
        total_supply = supply.ui_amount
        scale = 10 ** supply.decimals

        response = await self.connection.get_program_accounts(
            TOKEN_PROGRAM,
            encoding="base64",
            filters=[TOKEN_ACCOUNT_SIZE, MemcmpOpts(offset=0, bytes=str(mint))],
        )
        accounts = response.value
        logger.info(f"Found {len(accounts)} accounts for mint {mint}")

        holders: List[HolderRecord] = []
        for keyed_account in accounts:
            try:
                token_account = decode_token_account(bytes(keyed_account.account.data))
            except Exception as e:
                logger.warning(f"Skipping account {keyed_account.pubkey}: {str(e)}")
                continue

            if token_account.amount == 0:
                logger.debug(f"Skipping empty account {keyed_account.pubkey}")
                continue

            amount = token_account.amount / scale
            owner = Pubkey.from_string(token_account.owner)
            holders.append(HolderRecord(
                wallet=token_account.owner,
                amount=amount,
                percentage=amount / total_supply * 100,
                is_wallet=owner.is_on_curve(),
            ))

        holders.sort(key=lambda holder: holder.amount, reverse=True)
        return HolderDistribution(mint=str(mint), data=holders)


def summarize_holders(distribution: HolderDistribution, top: int = 10) -> Dict[str, Any]:
    """Concentration summary used by the research workflow."""
    top_holders = distribution.data[:top]
    return {
        "count": distribution.count,
        "topHolders": [holder.to_dict() for holder in top_holders],
        "topPercentage": sum(holder.percentage for holder in top_holders),
        "programOwnedPercentage": sum(
            holder.percentage for holder in distribution.data if not holder.is_wallet
        ),
    }


async def classify_addresses(
    addresses: Iterable[str],
    lookup: Callable[[str], Awaitable[Dict[str, Any]]],
) -> List[Dict[str, Any]]:
    """
    Run address lookups concurrently. Every lookup settles; a failure
    becomes an ``invalid`` entry without cancelling the others.
    """
    addresses = list(addresses)
    results = await asyncio.gather(*(lookup(address) for address in addresses), return_exceptions=True)

    classified = []
    for address, result in zip(addresses, results):
        if isinstance(result, BaseException):
            logger.warning(f"Address lookup failed for {address}: {str(result)}")
            classified.append({
                "type": "invalid",
                "address": address,
                "isValid": False,
                "error": str(result),
            })
        else:
            classified.append(result)
    return classified
