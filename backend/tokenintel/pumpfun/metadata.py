"""
Token metadata resolution over on-chain Metaplex data and the Pump.fun API.

Each upstream returns its own payload type; ``normalize_metadata`` maps
every payload variant onto ``TokenMetadata``.
"""

import logging
import struct
from dataclasses import dataclass, field
from functools import singledispatch
from typing import Any, Dict, List, Optional, Tuple

import httpx
from solana.rpc.async_api import AsyncClient
from solders.pubkey import Pubkey

from ..constants.pumpfun import METADATA_PROGRAM_ID, PUMPFUN_UPDATE_AUTHORITY, TOKEN_DECIMALS
from ..models import TokenMetadata
from ..utils.errors import FormatError, NotFoundError
from ..utils.fallback import FallbackExecutor, NamedStrategy
from ..utils.spl import MintAccount, decode_mint_account
from .api import PumpFunAPI

logger = logging.getLogger(__name__)

METADATA_PROGRAM = Pubkey.from_string(METADATA_PROGRAM_ID)

_U32 = struct.Struct('<I')
_U16 = struct.Struct('<H')


@dataclass
class MetaplexMetadata:
    update_authority: str
    mint: str
    name: str
    symbol: str
    uri: str
    seller_fee_basis_points: int
    creators: List[Dict[str, Any]] = field(default_factory=list)


@dataclass
class MetaplexPayload:
    """On-chain metadata account plus the SPL mint it describes."""
    metadata: MetaplexMetadata
    mint: MintAccount
    external_metadata: Optional[Dict[str, Any]] = None


@dataclass
class PumpFunPayload:
    """Raw ``/coins/{mint}`` record from Pump.fun."""
    details: Dict[str, Any]


def check_pumpfun_details(details: Any) -> Dict[str, Any]:
    """
    Make sure a Pump.fun coin record carries the fields metadata needs.

    Raises:
        FormatError: if the record is not an object or a required field is
            missing or of the wrong type
    """
    if not isinstance(details, dict):
        raise FormatError(f"Pump.fun coin record is not an object: {type(details).__name__}")
    for key in ("mint", "name", "symbol"):
        if not isinstance(details.get(key), str):
            raise FormatError(f"Pump.fun coin record has no valid '{key}'")
    supply = details.get("total_supply")
    if isinstance(supply, bool) or not isinstance(supply, (int, str)) or not str(supply).isdigit():
        raise FormatError("Pump.fun coin record has no valid 'total_supply'")
    return details


def get_metadata_address(mint: Pubkey) -> Pubkey:
    address, _ = Pubkey.find_program_address(
        [b"metadata", bytes(METADATA_PROGRAM), bytes(mint)], METADATA_PROGRAM
    )
    return address


def _read_string(data: bytes, offset: int) -> Tuple[str, int]:
    (length,) = _U32.unpack_from(data, offset)
    offset += 4
    raw = data[offset:offset + length]
    if len(raw) != length:
        raise FormatError("Metadata string runs past end of account")
    return raw.decode('utf-8', errors='replace').rstrip('\x00').strip(), offset + length


def decode_metaplex_metadata(data: bytes) -> MetaplexMetadata:
    """
    Decode the leading fields of a Metaplex token metadata account
    (key, update authority, mint, name, symbol, uri, fee, creators).
    """
    try:
        offset = 1  # account key
        update_authority = str(Pubkey.from_bytes(data[offset:offset + 32]))
        offset += 32
        mint = str(Pubkey.from_bytes(data[offset:offset + 32]))
        offset += 32
        name, offset = _read_string(data, offset)
        symbol, offset = _read_string(data, offset)
        uri, offset = _read_string(data, offset)
        (seller_fee_basis_points,) = _U16.unpack_from(data, offset)
        offset += 2

        creators = []
        if data[offset] == 1:
            offset += 1
            (count,) = _U32.unpack_from(data, offset)
            offset += 4
            for _ in range(count):
                creators.append({
                    "address": str(Pubkey.from_bytes(data[offset:offset + 32])),
                    "verified": data[offset + 32] != 0,
                    "share": data[offset + 33],
                })
                offset += 34
    except (struct.error, IndexError, ValueError) as e:
        raise FormatError(f"Invalid Metaplex metadata account: {str(e)}") from e

    return MetaplexMetadata(
        update_authority=update_authority,
        mint=mint,
        name=name,
        symbol=symbol,
        uri=uri,
        seller_fee_basis_points=seller_fee_basis_points,
        creators=creators,
    )


@singledispatch
def normalize_metadata(payload) -> TokenMetadata:
    raise TypeError(f"Unsupported metadata payload: {type(payload).__name__}")


@normalize_metadata.register
def _(payload: TokenMetadata) -> TokenMetadata:
    return payload


@normalize_metadata.register
def _(payload: MetaplexPayload) -> TokenMetadata:
    metadata = payload.metadata
    return TokenMetadata(
        mint=metadata.mint,
        name=metadata.name,
        symbol=metadata.symbol,
        decimals=payload.mint.decimals,
        supply=str(payload.mint.supply),
        mint_authority=payload.mint.mint_authority,
        freeze_authority=payload.mint.freeze_authority,
        update_authority=metadata.update_authority,
        creator=metadata.creators[0]["address"] if metadata.creators else None,
        metadata_uri=metadata.uri,
        is_pumpfun=metadata.update_authority == PUMPFUN_UPDATE_AUTHORITY,
        external_metadata=payload.external_metadata,
    )


@normalize_metadata.register
def _(payload: PumpFunPayload) -> TokenMetadata:
    details = check_pumpfun_details(payload.details)
    return TokenMetadata(
        mint=details["mint"],
        name=details["name"],
        symbol=details["symbol"],
        decimals=TOKEN_DECIMALS,
        supply=str(details["total_supply"]),
        mint_authority=None,
        freeze_authority=None,
        update_authority=PUMPFUN_UPDATE_AUTHORITY,
        creator=details.get("creator"),
        metadata_uri=details.get("metadata_uri") or "",
        is_pumpfun=True,
        external_metadata={
            "name": details["name"],
            "symbol": details["symbol"],
            "description": details.get("description"),
            "image": details.get("image_uri"),
            "showName": details.get("show_name"),
            "createdOn": "https://pump.fun",
            "twitter": details.get("twitter") or "",
            "telegram": details.get("telegram") or "",
            "website": details.get("website") or "",
        },
    )


class MetaplexStrategy:
    """Reads the Metaplex metadata PDA and the SPL mint from RPC"""
    name = "MetaplexStrategy"

    def __init__(self, connection: AsyncClient, http_client: Optional[httpx.AsyncClient] = None):
        self.connection = connection
        self.http_client = http_client

    async def _fetch_external(self, uri: str) -> Optional[Dict[str, Any]]:
        if not uri or self.http_client is None:
            return None
        try:
            response = await self.http_client.get(uri)
            response.raise_for_status()
            return response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Failed to fetch external metadata from {uri}: {str(e)}")
            return None

    async def fetch(self, mint: Pubkey) -> MetaplexPayload:
        metadata_response = await self.connection.get_account_info(get_metadata_address(mint))
        if metadata_response.value is None:
            raise NotFoundError(f"No Metaplex metadata for {mint}")
        mint_response = await self.connection.get_account_info(mint)
        if mint_response.value is None:
            raise NotFoundError(f"Mint account {mint} not found")

        metadata = decode_metaplex_metadata(bytes(metadata_response.value.data))
        mint_account = decode_mint_account(bytes(mint_response.value.data))
        return MetaplexPayload(
            metadata=metadata,
            mint=mint_account,
            external_metadata=await self._fetch_external(metadata.uri),
        )


class PumpFunStrategy:
    """Reads the coin record from the Pump.fun API"""
    name = "PumpFunStrategy"

    def __init__(self, pump_api: PumpFunAPI):
        self.pump_api = pump_api

    async def fetch(self, mint: Pubkey) -> PumpFunPayload:
        details = await self.pump_api.get_token_details(str(mint))
        # A malformed record fails here so the executor can retry it
        return PumpFunPayload(details=check_pumpfun_details(details))


async def resolve_token_metadata(
    mint: Pubkey,
    connection: AsyncClient,
    pump_api: PumpFunAPI,
    executor: Optional[FallbackExecutor] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> TokenMetadata:
    """
    Metadata from Metaplex, falling back to Pump.fun. A record without a
    creator is completed with a direct Pump.fun lookup.

    Raises:
        AggregateFailure: if every strategy failed on every cycle
    """
    executor = executor or FallbackExecutor(3)
    metaplex = MetaplexStrategy(connection, http_client)
    pumpfun = PumpFunStrategy(pump_api)

    outcome = await executor.run([
        NamedStrategy(metaplex.name, lambda: metaplex.fetch(mint)),
        NamedStrategy(pumpfun.name, lambda: pumpfun.fetch(mint)),
    ])
    token = normalize_metadata(outcome.unwrap())
    logger.info(f"Resolved metadata for {mint} via {outcome.strategy_used}")

    if token.creator is None:
        details = await pump_api.get_token_details(str(mint))
        if isinstance(details, dict):
            token.creator = details.get("creator")

    return token
