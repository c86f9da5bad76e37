from career.config import build_default_config
from career.rules import apply_stat_deltas, can_promote, evaluate_promotion, promotion_requirements, try_promotion


def test_stat_deltas_clamp(make_state):
    state = apply_stat_deltas(make_state(), money_cents=-500, morale=50, health=-200, promotion_points=-3)
    assert state.money_cents == 0
    assert state.morale == 100
    assert state.health == 0
    assert state.promotion_points == 0


def test_requirements_come_from_country_table(make_state, cfg):
    assert promotion_requirements(make_state(), cfg) == (30, 8)
    assert promotion_requirements(make_state(country="ID", branch="ID_TNI_AD"), cfg) == (36, 10)


def test_promotion_carries_surplus_points(make_state, cfg):
    state, promoted = try_promotion(make_state(days_in_rank=30, promotion_points=11), cfg)
    assert promoted is True
    assert state.rank_index == 1
    assert state.days_in_rank == 0
    assert state.promotion_points == 3
    assert state.morale == 72


def test_promotion_without_carry_over(make_state):
    cfg = build_default_config(carry_over_points=False)
    state, promoted = try_promotion(make_state(days_in_rank=30, promotion_points=11), cfg)
    assert promoted is True
    assert state.promotion_points == 0


def test_promotion_blocked_by_days_points_or_readiness(make_state, cfg):
    assert not can_promote(make_state(days_in_rank=29, promotion_points=20), cfg)
    assert not can_promote(make_state(days_in_rank=40, promotion_points=7), cfg)
    assert not can_promote(make_state(days_in_rank=40, promotion_points=20, morale=54), cfg)
    assert not can_promote(make_state(days_in_rank=40, promotion_points=20, health=54), cfg)
    assert can_promote(make_state(days_in_rank=30, promotion_points=8, morale=55, health=55), cfg)


def test_no_promotion_past_top_tier(make_state, cfg):
    top = cfg.max_rank_index("US")
    state, promoted = try_promotion(make_state(rank_index=top, days_in_rank=99999, promotion_points=99999), cfg)
    assert promoted is False
    assert state.rank_index == top


def test_evaluation_grades(make_state, cfg):
    assert evaluate_promotion(make_state(days_in_rank=30, promotion_points=16), cfg).recommendation == "STRONG_RECOMMEND"
    assert evaluate_promotion(make_state(days_in_rank=30, promotion_points=9), cfg).recommendation == "RECOMMEND"

    hold = evaluate_promotion(make_state(days_in_rank=23, promotion_points=6), cfg)
    assert hold.recommendation == "HOLD"
    assert "7 more day(s) in rank" in hold.rejection_letter
    assert "2 more merit point(s)" in hold.rejection_letter

    far = evaluate_promotion(make_state(days_in_rank=2, promotion_points=0, morale=10), cfg)
    assert far.recommendation == "NOT_RECOMMENDED"
    assert far.readiness_ok is False
    assert "readiness" in far.rejection_letter


def test_evaluation_at_top_tier(make_state, cfg):
    ev = evaluate_promotion(make_state(rank_index=cfg.max_rank_index("US")), cfg)
    assert ev.at_max_rank is True
    assert ev.recommendation == "NOT_RECOMMENDED"
