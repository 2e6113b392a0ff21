"""
Raw SPL token program account layouts.
"""

import struct
from dataclasses import dataclass
from typing import Optional

from solders.pubkey import Pubkey

from ..constants.pumpfun import MINT_ACCOUNT_SIZE, TOKEN_ACCOUNT_SIZE
from .errors import FormatError

_U64 = struct.Struct('<Q')
_U32 = struct.Struct('<I')


@dataclass
class MintAccount:
    mint_authority: Optional[str]
    supply: int
    decimals: int
    is_initialized: bool
    freeze_authority: Optional[str]


@dataclass
class TokenAccount:
    mint: str
    owner: str
    amount: int


def _coption_pubkey(data: bytes, offset: int) -> Optional[str]:
    # COption<Pubkey>: u32 tag followed by 32 bytes
    (tag,) = _U32.unpack_from(data, offset)
    if tag == 0:
        return None
    return str(Pubkey.from_bytes(data[offset + 4:offset + 36]))


def decode_mint_account(data: bytes) -> MintAccount:
    if len(data) < MINT_ACCOUNT_SIZE:
        raise FormatError(f"Mint account too short: {len(data)} bytes")
    return MintAccount(
        mint_authority=_coption_pubkey(data, 0),
        supply=_U64.unpack_from(data, 36)[0],
        decimals=data[44],
        is_initialized=data[45] != 0,
        freeze_authority=_coption_pubkey(data, 46),
    )


def decode_token_account(data: bytes) -> TokenAccount:
    if len(data) < TOKEN_ACCOUNT_SIZE:
        raise FormatError(f"Token account too short: {len(data)} bytes")
    return TokenAccount(
        mint=str(Pubkey.from_bytes(data[0:32])),
        owner=str(Pubkey.from_bytes(data[32:64])),
        amount=_U64.unpack_from(data, 64)[0],
    )
