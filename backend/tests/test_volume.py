import pytest

from tokenintel.models import Trade
from tokenintel.pumpfun.volume import analyze_trade_volume, calculate_volume, volume_report

NOW = 1_700_000_000
SOL = 10 ** 9


def _trade(timestamp, sol, is_buy=True, user="buyer"):
    return Trade(
        signature=f"sig-{timestamp}-{user}",
        mint="mint",
        sol_amount=int(sol * SOL),
        token_amount=1,
        is_buy=is_buy,
        user=user,
        timestamp=timestamp,
    )


def test_one_trade_per_window():
    # one 50 SOL buy in the middle of each 15 minute window
    trades = [_trade(NOW - i * 900 - 450, 50) for i in range(4)]

    result = calculate_volume(trades, 15, now=NOW)

    assert len(result.periods) == 4
    for period in result.periods:
        assert period.volume == 50
        assert period.buy_volume == 50
        assert period.sell_volume == 0
        assert period.user_count <= 1
    assert result.volume == 50
    assert result.volatility == 0


def test_no_trades():
    result = calculate_volume([], 15, now=NOW)

    assert result.volume == 0
    assert result.volatility == 0
    assert result.periods == []


def test_only_stale_trades():
    result = calculate_volume([_trade(NOW - 4 * 900 - 1, 10)], 15, now=NOW)
    assert result.periods == []


def test_window_bounds_and_volatility():
    trades = [
        _trade(NOW, 10, user="a"),              # end of window 0 is inclusive
        _trade(NOW - 900, 20, is_buy=False),   # boundary belongs to window 1
        _trade(NOW - 900, 5, user="b"),
        _trade(NOW - 3 * 900, 30),            # end of window 3
        _trade(NOW + 60, 99),                  # future trade ignored
    ]

    result = calculate_volume(trades, 15, now=NOW)
    volumes = [period.volume for period in result.periods]

    assert volumes == [10, 25, 0, 30]
    assert result.periods[1].sell_volume == 20
    assert result.periods[1].buy_volume == 5
    assert result.periods[1].user_count == 2
    # population standard deviation of [10, 25, 0, 30]
    assert result.volatility == pytest.approx(11.924240017711822)


def test_window_totals_sum_to_relevant_volume():
    trades = [_trade(NOW - offset, offset / 100) for offset in range(0, 3600, 137)]

    result = calculate_volume(trades, 15, now=NOW)

    relevant = sum(t.sol_amount for t in trades if NOW - 3600 < t.timestamp <= NOW) / SOL
    assert sum(period.volume for period in result.periods) == pytest.approx(relevant)


def test_periods_are_iso_timestamps():
    result = calculate_volume([_trade(NOW - 10, 1)], 15, now=NOW)

    assert result.periods[0].end_time == "2023-11-14T22:13:20Z"
    assert result.periods[0].start_time == "2023-11-14T21:58:20Z"


def test_volume_report_keys():
    trades = [_trade(NOW - 10, 1)]

    report = volume_report(analyze_trade_volume(trades, now=NOW))

    assert set(report) == {"fifteenMinVol", "thirtyMinVol", "sixtyMinVol"}
    assert report["sixtyMinVol"]["volume"] == 1
    assert len(report["thirtyMinVol"]["periods"]) == 4
