import pytest

import game_time


def test_game_day_counts_whole_days_and_scales():
    assert game_time.compute_game_day(8_000, 0, ms_per_day=4_000) == 2
    assert game_time.compute_game_day(7_999, 0, ms_per_day=4_000) == 1
    assert game_time.compute_game_day(8_000, 0, ms_per_day=4_000, time_scale=3) == 6


def test_game_day_never_negative():
    assert game_time.compute_game_day(0, 10_000, ms_per_day=4_000) == 0


def test_game_day_rejects_non_positive_day_length():
    with pytest.raises(ValueError):
        game_time.compute_game_day(1, 0, ms_per_day=0)


def test_reanchor_rounds_up():
    assert game_time.ms_to_reanchor(2, ms_per_day=4_000, time_scale=3) == 2_667
    assert game_time.ms_to_reanchor(0, ms_per_day=4_000) == 0


def test_in_game_date_and_age():
    assert game_time.to_in_game_date(0) == "2026-01-01"
    assert game_time.to_in_game_date(31) == "2026-02-01"
    assert game_time.compute_age(18, 364) == 18
    assert game_time.compute_age(18, 365) == 19


def test_live_day_holds_while_paused_and_never_goes_back():
    assert game_time.derive_live_game_day(
        snapshot_day=5, paused=True, reference_ms=0, now_ms_value=100_000, ms_per_day=4_000
    ) == 5
    assert game_time.derive_live_game_day(
        snapshot_day=5, paused=False, reference_ms=0, now_ms_value=4_000, ms_per_day=4_000
    ) == 5
    assert game_time.derive_live_game_day(
        snapshot_day=5, paused=False, reference_ms=0, now_ms_value=40_000, ms_per_day=4_000
    ) == 10


def test_iso_from_ms_is_utc():
    assert game_time.iso_from_ms(0) == "1970-01-01T00:00:00Z"
