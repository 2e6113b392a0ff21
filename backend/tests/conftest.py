"""
Pytest configuration file for the tokenintel tests.
"""

import struct
from types import SimpleNamespace
from typing import Optional

import pytest
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from tokenintel.constants.pumpfun import EXPECTED_DISCRIMINATOR, TOKEN_PROGRAM_ID


def curve_bytes(
    virtual_token: int = 1000,
    virtual_sol: int = 500,
    real_token: int = 300,
    real_sol: int = 200,
    total_supply: int = 10000,
    complete: bool = True,
) -> bytes:
    return EXPECTED_DISCRIMINATOR + struct.pack(
        '<QQQQQB', virtual_token, virtual_sol, real_token, real_sol, total_supply, int(complete)
    )


def token_account_bytes(mint: Pubkey, owner: Pubkey, amount: int) -> bytes:
    data = bytes(mint) + bytes(owner) + struct.pack('<Q', amount)
    return data + bytes(165 - len(data))


def account(data: bytes, owner: str = TOKEN_PROGRAM_ID, executable: bool = False):
    """Shape of ``GetAccountInfoResp.value`` as the RPC client returns it."""
    return SimpleNamespace(data=data, owner=Pubkey.from_string(owner), executable=executable)


def rpc_response(value):
    return SimpleNamespace(value=value)


@pytest.fixture
def make_curve():
    return curve_bytes


@pytest.fixture
def make_token_account():
    return token_account_bytes


@pytest.fixture
def make_account():
    return account


@pytest.fixture
def make_response():
    return rpc_response


@pytest.fixture
def wallet() -> Pubkey:
    """A fresh on-curve address."""
    return Keypair().pubkey()


@pytest.fixture
def mint() -> Pubkey:
    return Keypair().pubkey()


@pytest.fixture
def program_derived() -> Pubkey:
    """An off-curve address."""
    address, _ = Pubkey.find_program_address([b"holder"], Pubkey.from_string(TOKEN_PROGRAM_ID))
    return address


def tweet(
    tweet_id: str,
    created_at: str,
    text: str = "",
    author: Optional[dict] = None,
    **counts,
) -> dict:
    return {
        "id": tweet_id,
        "createdAt": created_at,
        "text": text,
        "url": f"https://x.com/someone/status/{tweet_id}",
        "author": author or {"id": "1", "userName": "someone"},
        **counts,
    }


@pytest.fixture
def make_tweet():
    return tweet
