import pytest
from unittest.mock import AsyncMock, MagicMock

from tokenintel.constants.pumpfun import RESERVED_TOKENS
from tokenintel.models import CurveState
from tokenintel.pumpfun.bonding_curve import (
    addresses_for,
    calculate_bonding_curve_progress,
    calculate_token_price,
    decode_curve_state,
    fetch_curve_state,
    get_bonding_curve_address,
    get_bonding_curve_info,
)
from tokenintel.utils.errors import EmptyReservesError, FormatError, NotFoundError

PUMP_SUPPLY = 1_000_000_000 * 10 ** 6
INITIAL_REAL = PUMP_SUPPLY - RESERVED_TOKENS


def _state(**overrides) -> CurveState:
    fields = dict(
        virtual_token_reserves=1_073_000_000 * 10 ** 6,
        virtual_sol_reserves=30 * 10 ** 9,
        real_token_reserves=INITIAL_REAL,
        real_sol_reserves=0,
        token_total_supply=PUMP_SUPPLY,
        complete=False,
    )
    fields.update(overrides)
    return CurveState(**fields)


def test_decode_curve_state(make_curve):
    state = decode_curve_state(make_curve())

    assert state == CurveState(
        virtual_token_reserves=1000,
        virtual_sol_reserves=500,
        real_token_reserves=300,
        real_sol_reserves=200,
        token_total_supply=10000,
        complete=True,
    )


def test_decode_complete_is_any_nonzero_byte(make_curve):
    data = bytearray(make_curve(complete=False))
    assert decode_curve_state(bytes(data)).complete is False
    data[48] = 7
    assert decode_curve_state(bytes(data)).complete is True


def test_decode_ignores_trailing_bytes(make_curve):
    state = decode_curve_state(make_curve() + b"\x00" * 32)
    assert state.token_total_supply == 10000


@pytest.mark.parametrize("length", [0, 8, 48])
def test_decode_short_buffer(make_curve, length):
    with pytest.raises(FormatError):
        decode_curve_state(make_curve()[:length])


def test_decode_bad_discriminator(make_curve):
    data = b"\x00" * 8 + make_curve()[8:]
    with pytest.raises(FormatError, match="discriminator"):
        decode_curve_state(data)


def test_token_price_in_sol():
    # 30 SOL against 1.073B tokens
    price = calculate_token_price(_state())
    assert price == pytest.approx(30 / 1_073_000_000)


def test_token_price_empty_reserves():
    with pytest.raises(EmptyReservesError):
        calculate_token_price(_state(virtual_token_reserves=0))


def test_empty_reserves_is_a_zero_division():
    with pytest.raises(ZeroDivisionError):
        calculate_token_price(_state(virtual_token_reserves=0))


@pytest.mark.parametrize(
    "real_token, expected",
    [
        (INITIAL_REAL, 0),
        (INITIAL_REAL // 2, 50),
        (0, 100),
    ],
)
def test_bonding_curve_progress(real_token, expected):
    progress = calculate_bonding_curve_progress(_state(real_token_reserves=real_token))

    assert progress.progress == expected
    assert progress.initial_real_token_reserves == str(INITIAL_REAL)
    assert progress.reserved_tokens == str(RESERVED_TOKENS)


def test_progress_decreases_as_real_reserves_grow():
    values = [
        calculate_bonding_curve_progress(_state(real_token_reserves=real)).progress
        for real in range(0, INITIAL_REAL + 1, INITIAL_REAL // 20)
    ]
    assert values == sorted(values, reverse=True)


def test_progress_with_supply_below_reserve(make_curve):
    state = decode_curve_state(make_curve())
    with pytest.raises(EmptyReservesError):
        calculate_bonding_curve_progress(state)


def test_addresses_are_deterministic(mint):
    curve, associated = addresses_for(mint)
    assert curve == get_bonding_curve_address(mint)
    assert addresses_for(mint) == (curve, associated)
    assert not curve.is_on_curve()


@pytest.mark.asyncio
async def test_fetch_curve_state_missing_account(mint, make_response):
    connection = MagicMock()
    connection.get_account_info = AsyncMock(return_value=make_response(None))

    with pytest.raises(NotFoundError):
        await fetch_curve_state(connection, get_bonding_curve_address(mint))


@pytest.mark.asyncio
async def test_get_bonding_curve_info(mint, make_curve, make_account, make_response):
    data = make_curve(
        virtual_token=1_073_000_000 * 10 ** 6,
        virtual_sol=30 * 10 ** 9,
        real_token=INITIAL_REAL // 2,
        real_sol=10 * 10 ** 9,
        total_supply=PUMP_SUPPLY,
        complete=False,
    )
    connection = MagicMock()
    connection.get_account_info = AsyncMock(return_value=make_response(make_account(data)))

    info = await get_bonding_curve_info(connection, mint)

    curve, associated = addresses_for(mint)
    connection.get_account_info.assert_awaited_once_with(curve)
    assert info["mintAddress"] == str(mint)
    assert info["bondingCurveAddress"] == str(curve)
    assert info["associatedTokenAccount"] == str(associated)
    assert info["tokenPrice"] == pytest.approx(30 / 1_073_000_000)
    assert info["curveState"]["realSolReserves"] == str(10 * 10 ** 9)
    assert info["curveState"]["complete"] is False
    assert info["progress"]["progress"] == 50
