import struct

import httpx
import pytest
from unittest.mock import AsyncMock, MagicMock

from solders.keypair import Keypair
from solders.pubkey import Pubkey

from tokenintel.constants.pumpfun import PUMPFUN_UPDATE_AUTHORITY, TOKEN_PROGRAM_ID
from tokenintel.models import TokenMetadata
from tokenintel.pumpfun.metadata import (
    MetaplexPayload,
    MetaplexStrategy,
    PumpFunPayload,
    check_pumpfun_details,
    decode_metaplex_metadata,
    get_metadata_address,
    normalize_metadata,
    resolve_token_metadata,
)
from tokenintel.utils.errors import AggregateFailure, FormatError, NotFoundError
from tokenintel.utils.spl import MintAccount

PUMP_AUTHORITY = Pubkey.from_string(PUMPFUN_UPDATE_AUTHORITY)


def _borsh_string(value: str, padded_to: int = 0) -> bytes:
    raw = value.encode('utf-8').ljust(padded_to, b'\x00')
    return struct.pack('<I', len(raw)) + raw


def metadata_bytes(mint: Pubkey, update_authority: Pubkey = PUMP_AUTHORITY, creators=(), uri="https://ipfs.test/meta.json"):
    data = bytes([4]) + bytes(update_authority) + bytes(mint)
    data += _borsh_string("Test Coin", 32) + _borsh_string("TEST", 10) + _borsh_string(uri, 200)
    data += struct.pack('<H', 0)
    if creators:
        data += bytes([1]) + struct.pack('<I', len(creators))
        for creator in creators:
            data += bytes(creator) + bytes([1, 100])
    else:
        data += bytes([0])
    return data + bytes(64)


def mint_bytes(supply=10 ** 15) -> bytes:
    return struct.pack('<I', 0) + bytes(32) + struct.pack('<QBB', supply, 6, 1) + struct.pack('<I', 0) + bytes(32)


def pump_details(mint: str, creator: str = "Creator1111111111111111111111111111111111"):
    return {
        "mint": mint,
        "name": "Pump Coin",
        "symbol": "PUMP",
        "description": "to the moon",
        "image_uri": "https://img.test/p.png",
        "metadata_uri": "https://ipfs.test/p.json",
        "twitter": "https://x.com/pump",
        "telegram": None,
        "website": "",
        "show_name": True,
        "total_supply": 1_000_000_000_000_000,
        "creator": creator,
    }


def _connection(accounts, make_response):
    async def get_account_info(address):
        return make_response(accounts.get(address))

    connection = MagicMock()
    connection.get_account_info = AsyncMock(side_effect=get_account_info)
    return connection


def test_decode_metaplex_metadata(mint):
    creator = Keypair().pubkey()

    metadata = decode_metaplex_metadata(metadata_bytes(mint, creators=[creator]))

    assert metadata.mint == str(mint)
    assert metadata.update_authority == PUMPFUN_UPDATE_AUTHORITY
    assert metadata.name == "Test Coin"
    assert metadata.symbol == "TEST"
    assert metadata.uri == "https://ipfs.test/meta.json"
    assert metadata.creators == [{"address": str(creator), "verified": True, "share": 100}]


def test_decode_truncated_metadata(mint):
    with pytest.raises(FormatError):
        decode_metaplex_metadata(metadata_bytes(mint)[:80])


def test_normalize_metaplex_payload(mint):
    creator = Keypair().pubkey()
    payload = MetaplexPayload(
        metadata=decode_metaplex_metadata(metadata_bytes(mint, creators=[creator])),
        mint=MintAccount(mint_authority=None, supply=123, decimals=6, is_initialized=True, freeze_authority=None),
    )

    token = normalize_metadata(payload)

    assert token.mint == str(mint)
    assert token.supply == "123"
    assert token.decimals == 6
    assert token.creator == str(creator)
    assert token.is_pumpfun is True


def test_normalize_metaplex_foreign_authority(mint, wallet):
    payload = MetaplexPayload(
        metadata=decode_metaplex_metadata(metadata_bytes(mint, update_authority=wallet)),
        mint=MintAccount(mint_authority=str(wallet), supply=1, decimals=9, is_initialized=True, freeze_authority=None),
    )

    token = normalize_metadata(payload)

    assert token.is_pumpfun is False
    assert token.creator is None
    assert token.mint_authority == str(wallet)


def test_normalize_pumpfun_payload(mint):
    token = normalize_metadata(PumpFunPayload(pump_details(str(mint))))

    assert token.decimals == 6
    assert token.supply == "1000000000000000"
    assert token.update_authority == PUMPFUN_UPDATE_AUTHORITY
    assert token.is_pumpfun is True
    assert token.metadata_uri == "https://ipfs.test/p.json"
    assert token.external_metadata["twitter"] == "https://x.com/pump"
    assert token.external_metadata["telegram"] == ""
    assert token.external_metadata["image"] == "https://img.test/p.png"


def test_normalize_is_idempotent(mint):
    token = normalize_metadata(PumpFunPayload(pump_details(str(mint))))
    assert normalize_metadata(token) is token
    assert normalize_metadata(normalize_metadata(token)).to_dict() == token.to_dict()


def test_normalize_unknown_payload():
    with pytest.raises(TypeError):
        normalize_metadata({"mint": "raw dict"})


@pytest.mark.asyncio
async def test_metaplex_strategy_fetches_external_metadata(mint, make_account, make_response):
    creator = Keypair().pubkey()
    connection = _connection({
        get_metadata_address(mint): make_account(metadata_bytes(mint, creators=[creator])),
        mint: make_account(mint_bytes(), owner=TOKEN_PROGRAM_ID),
    }, make_response)
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(
        lambda request: httpx.Response(200, json={"twitter": "https://x.com/test"})
    ))

    payload = await MetaplexStrategy(connection, http_client).fetch(mint)

    assert payload.external_metadata == {"twitter": "https://x.com/test"}
    assert payload.mint.supply == 10 ** 15


@pytest.mark.asyncio
async def test_metaplex_strategy_tolerates_external_failure(mint, make_account, make_response):
    connection = _connection({
        get_metadata_address(mint): make_account(metadata_bytes(mint)),
        mint: make_account(mint_bytes(), owner=TOKEN_PROGRAM_ID),
    }, make_response)
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(500)))

    payload = await MetaplexStrategy(connection, http_client).fetch(mint)

    assert payload.external_metadata is None


@pytest.mark.asyncio
async def test_metaplex_strategy_missing_metadata(mint, make_response):
    with pytest.raises(NotFoundError):
        await MetaplexStrategy(_connection({}, make_response)).fetch(mint)


@pytest.mark.asyncio
async def test_resolve_falls_back_to_pumpfun(mint, make_response):
    pump_api = MagicMock()
    pump_api.get_token_details = AsyncMock(return_value=pump_details(str(mint)))

    token = await resolve_token_metadata(mint, _connection({}, make_response), pump_api)

    assert isinstance(token, TokenMetadata)
    assert token.name == "Pump Coin"
    assert token.creator == "Creator1111111111111111111111111111111111"
    pump_api.get_token_details.assert_awaited_once_with(str(mint))


@pytest.mark.asyncio
async def test_resolve_fills_missing_creator(mint, make_account, make_response):
    connection = _connection({
        get_metadata_address(mint): make_account(metadata_bytes(mint)),
        mint: make_account(mint_bytes(), owner=TOKEN_PROGRAM_ID),
    }, make_response)
    pump_api = MagicMock()
    pump_api.get_token_details = AsyncMock(return_value=pump_details(str(mint), creator="Dev"))

    token = await resolve_token_metadata(mint, connection, pump_api)

    assert token.name == "Test Coin"
    assert token.creator == "Dev"


@pytest.mark.asyncio
async def test_resolve_all_sources_down(mint, make_response):
    pump_api = MagicMock()
    pump_api.get_token_details = AsyncMock(side_effect=NotFoundError("no coin"))

    with pytest.raises(AggregateFailure):
        await resolve_token_metadata(mint, _connection({}, make_response), pump_api)
    assert pump_api.get_token_details.await_count == 3


@pytest.mark.parametrize("missing", ["mint", "name", "symbol", "total_supply"])
def test_normalize_pumpfun_payload_missing_field(mint, missing):
    details = pump_details(str(mint))
    del details[missing]

    with pytest.raises(FormatError, match=missing):
        normalize_metadata(PumpFunPayload(details))


def test_check_pumpfun_details_rejects_non_objects():
    with pytest.raises(FormatError):
        check_pumpfun_details(["not", "a", "record"])


@pytest.mark.asyncio
async def test_resolve_retries_malformed_pumpfun_record(mint, make_response):
    broken = {"mint": str(mint), "name": "Pump Coin", "symbol": "PUMP"}
    pump_api = MagicMock()
    pump_api.get_token_details = AsyncMock(side_effect=[broken, pump_details(str(mint))])

    token = await resolve_token_metadata(mint, _connection({}, make_response), pump_api)

    assert token.supply == "1000000000000000"
    assert pump_api.get_token_details.await_count == 2


@pytest.mark.asyncio
async def test_resolve_malformed_pumpfun_record_is_structured_failure(mint, make_response):
    pump_api = MagicMock()
    pump_api.get_token_details = AsyncMock(return_value={"mint": str(mint), "name": "Pump Coin", "symbol": "PUMP"})

    with pytest.raises(AggregateFailure) as excinfo:
        await resolve_token_metadata(mint, _connection({}, make_response), pump_api)

    assert isinstance(excinfo.value.last_error, FormatError)
