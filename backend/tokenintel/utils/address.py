"""
Solana address validation and inspection
"""

import logging
import re
from typing import Any, Dict, Optional

import base58
from solana.rpc.async_api import AsyncClient
from solders.pubkey import Pubkey

from ..constants.pumpfun import (
    MINT_ACCOUNT_SIZE,
    PROGRAM_NAMES,
    SYSTEM_PROGRAM_ID,
    TOKEN_2022_PROGRAM_ID,
    TOKEN_ACCOUNT_SIZE,
    TOKEN_PROGRAM_ID,
)
from .errors import FormatError, ValidationError
from .spl import decode_mint_account, decode_token_account

logger = logging.getLogger(__name__)

BASE58_ADDRESS_PATTERN = re.compile(r'^[1-9A-HJ-NP-Za-km-z]{32,44}$')


def verify_address(address: str) -> Dict[str, Any]:
    """
    Check that a string is a well-formed base58 public key.

    Returns:
        Dict with ``isValid`` and, when invalid, ``error``
    """
    if not address or not BASE58_ADDRESS_PATTERN.match(address):
        return {"isValid": False, "error": "Invalid address format"}

    try:
        decoded = base58.b58decode(address)
    except ValueError:
        return {"isValid": False, "error": "Invalid base58 encoding"}

    if len(decoded) != 32:
        return {"isValid": False, "error": "Invalid public key construction"}
    return {"isValid": True}


def validate_mint_address(address: str) -> Pubkey:
    """
    Parse a token mint address from request input.

    Raises:
        ValidationError: if the address is missing, malformed or off the curve
    """
    if not address:
        raise ValidationError("Token CA is required")
    verification = verify_address(address)
    if not verification["isValid"]:
        raise ValidationError("Invalid Solana address")
    pubkey = Pubkey.from_string(address)
    if not pubkey.is_on_curve():
        raise ValidationError("Invalid Solana address")
    return pubkey


def get_program_name(program_id: str) -> str:
    return PROGRAM_NAMES.get(program_id, 'unknown')


def _invalid(address: str, error: str) -> Dict[str, Any]:
    return {"type": "invalid", "address": address, "isValid": False, "error": error}


async def get_address_info(address: str, connection: AsyncClient) -> Dict[str, Any]:
    """
    Inspect an address on-chain and classify it as program, wallet,
    tokenMint, tokenAccount or unknown.

    Lookup failures are reported as an ``invalid`` entry rather than raised.
    """
    verification = verify_address(address)
    if not verification["isValid"]:
        return _invalid(address, verification["error"])

    try:
        response = await connection.get_account_info(Pubkey.from_string(address))
    except Exception as e:
        logger.warning(f"Error retrieving account info for {address}: {str(e)}")
        return _invalid(address, f"Error retrieving account info: {str(e)}")

    account = response.value
    if account is None:
        return _invalid(address, "Account not found on-chain")

    owner = str(account.owner)
    data = bytes(account.data)

    if account.executable:
        return {
            "type": "program",
            "address": address,
            "isValid": True,
            "details": {
                "program": get_program_name(address),
                "owner": get_program_name(owner),
            },
        }

    if owner == SYSTEM_PROGRAM_ID:
        return {
            "type": "wallet",
            "address": address,
            "isValid": True,
            "details": {"owner": "System Program"},
        }

    details: Optional[Dict[str, Any]] = None
    if owner in (TOKEN_PROGRAM_ID, TOKEN_2022_PROGRAM_ID):
        try:
            if len(data) == MINT_ACCOUNT_SIZE:
                mint = decode_mint_account(data)
                return {
                    "type": "tokenMint",
                    "address": address,
                    "isValid": True,
                    "details": {
                        "decimals": mint.decimals,
                        "supply": str(mint.supply),
                        "mintAuthority": mint.mint_authority,
                        "freezeAuthority": mint.freeze_authority,
                    },
                }
            if len(data) >= TOKEN_ACCOUNT_SIZE:
                token_account = decode_token_account(data)
                return {
                    "type": "tokenAccount",
                    "address": address,
                    "isValid": True,
                    "details": {
                        "token": token_account.mint,
                        "owner": token_account.owner,
                        "amount": str(token_account.amount),
                    },
                }
        except FormatError as e:
            logger.warning(f"Could not decode token program account {address}: {str(e)}")
            details = {"owner": owner, "error": str(e)}

    return {
        "type": "unknown",
        "address": address,
        "isValid": True,
        "details": details or {"owner": owner},
    }
