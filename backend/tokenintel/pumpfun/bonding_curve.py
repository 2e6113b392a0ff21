"""
Pump.fun bonding curve account decoding and pricing
"""

import logging
import struct
from typing import Any, Dict, Tuple

from solana.rpc.async_api import AsyncClient
from solders.pubkey import Pubkey

from ..constants.pumpfun import (
    ASSOCIATED_TOKEN_PROGRAM_ID,
    BONDING_CURVE_LAYOUT_SIZE,
    EXPECTED_DISCRIMINATOR,
    LAMPORTS_PER_SOL,
    PUMP_PROGRAM_ID,
    RESERVED_TOKENS,
    TOKEN_DECIMALS,
    TOKEN_PROGRAM_ID,
)
from ..models import CurveProgress, CurveState
from ..utils.errors import EmptyReservesError, FormatError, NotFoundError

logger = logging.getLogger(__name__)

# five little-endian u64 followed by a bool byte
_CURVE_FIELDS = struct.Struct('<QQQQQB')

PUMP_PROGRAM = Pubkey.from_string(PUMP_PROGRAM_ID)
TOKEN_PROGRAM = Pubkey.from_string(TOKEN_PROGRAM_ID)
ASSOCIATED_TOKEN_PROGRAM = Pubkey.from_string(ASSOCIATED_TOKEN_PROGRAM_ID)


def decode_curve_state(data: bytes) -> CurveState:
    """
    Decode the raw bytes of a bonding curve account.

    Raises:
        FormatError: if the buffer is shorter than the layout or the
            discriminator does not match
    """
    if len(data) < BONDING_CURVE_LAYOUT_SIZE:
        raise FormatError(
            f"Bonding curve account too short: {len(data)} bytes, expected {BONDING_CURVE_LAYOUT_SIZE}"
        )
    if bytes(data[:8]) != EXPECTED_DISCRIMINATOR:
        raise FormatError("Invalid bonding curve discriminator")

    (
        virtual_token_reserves,
        virtual_sol_reserves,
        real_token_reserves,
        real_sol_reserves,
        token_total_supply,
        complete,
    ) = _CURVE_FIELDS.unpack_from(data, 8)

    return CurveState(
        virtual_token_reserves=virtual_token_reserves,
        virtual_sol_reserves=virtual_sol_reserves,
        real_token_reserves=real_token_reserves,
        real_sol_reserves=real_sol_reserves,
        token_total_supply=token_total_supply,
        complete=complete != 0,
    )


def calculate_token_price(state: CurveState) -> float:
    """Price of one token in SOL from the virtual reserves."""
    if state.virtual_token_reserves == 0:
        raise EmptyReservesError("Virtual token reserves are empty")
    sol = state.virtual_sol_reserves / LAMPORTS_PER_SOL
    tokens = state.virtual_token_reserves / 10 ** TOKEN_DECIMALS
    return sol / tokens


def calculate_bonding_curve_progress(state: CurveState) -> CurveProgress:
    """
    Percentage of the sellable supply that has left the curve, in integer
    arithmetic: ``100 - real_token * 100 // (total_supply - reserved)``.
    """
    initial_real_token_reserves = state.token_total_supply - RESERVED_TOKENS
    if initial_real_token_reserves <= 0:
        raise EmptyReservesError(
            f"Total supply {state.token_total_supply} does not exceed reserved tokens"
        )

    progress = 100 - (state.real_token_reserves * 100) // initial_real_token_reserves

    return CurveProgress(
        progress=progress,
        real_token_reserves=str(state.real_token_reserves),
        initial_real_token_reserves=str(initial_real_token_reserves),
        reserved_tokens=str(RESERVED_TOKENS),
    )


def get_bonding_curve_address(mint: Pubkey) -> Pubkey:
    address, _ = Pubkey.find_program_address([b"bonding-curve", bytes(mint)], PUMP_PROGRAM)
    return address


def get_associated_bonding_curve(bonding_curve: Pubkey, mint: Pubkey) -> Pubkey:
    address, _ = Pubkey.find_program_address(
        [bytes(bonding_curve), bytes(TOKEN_PROGRAM), bytes(mint)],
        ASSOCIATED_TOKEN_PROGRAM,
    )
    return address


async def fetch_curve_state(connection: AsyncClient, curve_address: Pubkey) -> CurveState:
    response = await connection.get_account_info(curve_address)
    account = response.value
    if account is None or not account.data:
        raise NotFoundError(f"No curve state found for {curve_address}")
    return decode_curve_state(bytes(account.data))


def addresses_for(mint: Pubkey) -> Tuple[Pubkey, Pubkey]:
    bonding_curve = get_bonding_curve_address(mint)
    return bonding_curve, get_associated_bonding_curve(bonding_curve, mint)


async def get_bonding_curve_info(connection: AsyncClient, mint: Pubkey) -> Dict[str, Any]:
    """Addresses, price, decoded state and progress for a Pump.fun mint."""
    bonding_curve, associated = addresses_for(mint)

    state = await fetch_curve_state(connection, bonding_curve)
    price = calculate_token_price(state)
    progress = calculate_bonding_curve_progress(state)

    logger.debug(f"Curve {bonding_curve} for {mint}: progress {progress.progress}%, complete={state.complete}")

    return {
        "mintAddress": str(mint),
        "bondingCurveAddress": str(bonding_curve),
        "associatedTokenAccount": str(associated),
        "tokenPrice": price,
        "curveState": state.to_dict(),
        "progress": progress.to_dict(),
    }
