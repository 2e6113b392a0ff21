from types import SimpleNamespace

import pytest
from unittest.mock import AsyncMock, MagicMock

from solana.rpc.models import MemcmpOpts
from solders.keypair import Keypair

from tokenintel.pumpfun.holders import HolderAggregator, classify_addresses, summarize_holders
from tokenintel.utils.errors import SupplyUnavailable, UpstreamError


def _keyed(data: bytes):
    return SimpleNamespace(pubkey=Keypair().pubkey(), account=SimpleNamespace(data=data))


def _connection(make_response, supply, accounts):
    connection = MagicMock()
    connection.get_token_supply = AsyncMock(return_value=make_response(supply))
    connection.get_program_accounts = AsyncMock(return_value=make_response(accounts))
    return connection


@pytest.mark.asyncio
async def test_get_holders(mint, wallet, program_derived, make_token_account, make_response):
    small_wallet = Keypair().pubkey()
    accounts = [
        _keyed(make_token_account(mint, program_derived, 300 * 10 ** 6)),
        _keyed(make_token_account(mint, small_wallet, 100 * 10 ** 6)),
        _keyed(make_token_account(mint, Keypair().pubkey(), 0)),
        _keyed(b"\x00" * 10),
        _keyed(make_token_account(mint, wallet, 600 * 10 ** 6)),
    ]
    connection = _connection(make_response, SimpleNamespace(ui_amount=1000.0, decimals=6), accounts)

    distribution = await HolderAggregator(connection).get_holders(mint)

    assert distribution.mint == str(mint)
    assert distribution.count == 3
    assert [holder.wallet for holder in distribution.data] == [str(wallet), str(program_derived), str(small_wallet)]
    assert [holder.amount for holder in distribution.data] == [600, 300, 100]
    assert [holder.percentage for holder in distribution.data] == pytest.approx([60, 30, 10])
    assert [holder.is_wallet for holder in distribution.data] == [True, False, True]

    args, kwargs = connection.get_program_accounts.call_args
    assert kwargs["encoding"] == "base64"
    assert kwargs["filters"][0] == 165
    assert kwargs["filters"][1] == MemcmpOpts(offset=0, bytes=str(mint))


@pytest.mark.asyncio
@pytest.mark.parametrize("supply", [None, SimpleNamespace(ui_amount=0, decimals=6)])
async def test_get_holders_without_supply(mint, make_response, supply):
    connection = _connection(make_response, supply, [])

    with pytest.raises(SupplyUnavailable):
        await HolderAggregator(connection).get_holders(mint)
    connection.get_program_accounts.assert_not_awaited()


@pytest.mark.asyncio
async def test_account_listing_failure_propagates(mint, make_response):
    connection = _connection(make_response, SimpleNamespace(ui_amount=1.0, decimals=6), [])
    connection.get_program_accounts = AsyncMock(side_effect=ConnectionError("rpc down"))

    with pytest.raises(ConnectionError):
        await HolderAggregator(connection).get_holders(mint)


@pytest.mark.asyncio
async def test_summarize_holders(mint, wallet, program_derived, make_token_account, make_response):
    accounts = [
        _keyed(make_token_account(mint, wallet, 700 * 10 ** 6)),
        _keyed(make_token_account(mint, program_derived, 200 * 10 ** 6)),
    ]
    connection = _connection(make_response, SimpleNamespace(ui_amount=1000.0, decimals=6), accounts)
    distribution = await HolderAggregator(connection).get_holders(mint)

    summary = summarize_holders(distribution, top=1)

    assert summary["count"] == 2
    assert len(summary["topHolders"]) == 1
    assert summary["topPercentage"] == pytest.approx(70)
    assert summary["programOwnedPercentage"] == pytest.approx(20)


@pytest.mark.asyncio
async def test_classify_addresses_settles_all():
    async def lookup(address):
        if address == "bad":
            raise UpstreamError("lookup failed")
        return {"type": "wallet", "address": address, "isValid": True}

    results = await classify_addresses(["a", "bad", "c"], lookup)

    assert [result["type"] for result in results] == ["wallet", "invalid", "wallet"]
    assert results[1] == {"type": "invalid", "address": "bad", "isValid": False, "error": "lookup failed"}
