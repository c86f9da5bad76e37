import pytest

from career.actions import (
    days_until_next_mission,
    resolve_career_review,
    resolve_deployment,
    resolve_training,
    resolve_travel,
)
from career.errors import PreconditionError, ValidationError
from career.pause import force_pause

from conftest import ScriptedRandom


def test_training_applies_profile(make_state, cfg):
    state, details = resolve_training(make_state(money_cents=5_000), "medium", cfg=cfg, rng=ScriptedRandom([0.99]))
    assert details["intensity"] == "MEDIUM"
    assert details["injury"] is False
    assert state.money_cents == 4_000
    assert state.health == 82
    assert state.morale == 71
    assert state.promotion_points == 4
    assert state.current_day == 0


def test_training_injury_costs_health_and_morale(make_state, cfg):
    state, details = resolve_training(make_state(money_cents=5_000), "HIGH", cfg=cfg, rng=ScriptedRandom([0.0]))
    assert details["injury"] is True
    assert 4 <= details["injury_health_loss"] <= 9
    assert 2 <= details["injury_morale_loss"] <= 5
    assert state.health == 83 - details["injury_health_loss"]
    assert state.morale == 69 - details["injury_morale_loss"]


def test_training_needs_funds_and_valid_intensity(make_state, cfg):
    with pytest.raises(PreconditionError) as exc:
        resolve_training(make_state(), "LOW", cfg=cfg, rng=ScriptedRandom())
    assert exc.value.code == "INSUFFICIENT_FUNDS"
    with pytest.raises(ValidationError):
        resolve_training(make_state(money_cents=5_000), "EXTREME", cfg=cfg, rng=ScriptedRandom())


def test_training_blocked_during_ceremony(make_state, cfg):
    state = force_pause(make_state(money_cents=5_000), "CEREMONY", now_ms=0)
    with pytest.raises(PreconditionError) as exc:
        resolve_training(state, "LOW", cfg=cfg, rng=ScriptedRandom())
    assert exc.value.code == "CEREMONY_PENDING"


def test_mission_cooldown(make_state, cfg):
    assert days_until_next_mission(make_state(), cfg) == 0
    state = make_state(current_day=5, last_mission_day=0)
    assert days_until_next_mission(state, cfg) == 5
    with pytest.raises(PreconditionError) as exc:
        resolve_deployment(state, "PATROL", cfg=cfg, rng=ScriptedRandom())
    assert exc.value.code == "MISSION_COOLDOWN"
    assert exc.value.details == {"days_until_next_mission": 5}


def test_successful_deployment(make_state, cfg, roster):
    # injury roll misses, success roll hits
    state, details = resolve_deployment(
        make_state(), "patrol", cfg=cfg, rng=ScriptedRandom([0.99, 0.0]), roster=roster
    )
    assert details["succeeded"] is True
    assert details["injured"] is False
    assert 3_500 <= details["reward_cents"] <= 12_000
    assert 2 <= details["promotion_points"] <= 10
    assert details["advanced_days"] == 2
    assert state.current_day == 2
    assert state.last_mission_day == 2
    assert len(details["participants"]) == 4
    assert details["casualty_npc_id"] is None
    assert len(state.mission_participants) == 4
    assert state.money_cents == details["reward_cents"] + 2 * 4_200


def test_failed_injured_deployment_can_lose_a_squad_member(make_state, cfg, roster):
    state, details = resolve_deployment(
        make_state(), "SUPPORT", 3, cfg=cfg, rng=ScriptedRandom([0.0, 0.99, 0.0]), roster=roster
    )
    assert details["succeeded"] is False
    assert details["injured"] is True
    assert 200 <= details["reward_cents"] <= 700
    assert details["casualty_npc_id"] in details["participants"]
    assert state.current_day == 3


def test_deployment_without_roster_has_no_casualty(make_state, cfg):
    _, details = resolve_deployment(make_state(), "PATROL", cfg=cfg, rng=ScriptedRandom([0.0, 0.99, 0.0]))
    assert details["participants"] == []
    assert details["casualty_npc_id"] is None


@pytest.mark.parametrize("duration", [0, 15, True, "2"])
def test_deployment_duration_validation(make_state, cfg, duration):
    with pytest.raises(ValidationError):
        resolve_deployment(make_state(), "PATROL", duration, cfg=cfg, rng=ScriptedRandom())


def test_career_review_refusal_and_promotion(make_state, cfg):
    refused, details = resolve_career_review(make_state(days_in_rank=3), cfg=cfg)
    assert details["promoted"] is False
    assert details["rejection_letter"]
    assert refused.morale == 69

    promoted, details = resolve_career_review(make_state(days_in_rank=30, promotion_points=8), cfg=cfg)
    assert details["promoted"] is True
    assert details["rejection_letter"] is None
    assert details["rank_code"] == "Private"
    assert promoted.rank_index == 1


def test_travel(make_state, cfg):
    state, details = resolve_travel(make_state(money_cents=2_000), "tactical_town", cfg=cfg)
    assert details["from_place"] == "BASE_HQ"
    assert state.last_travel_place == "TACTICAL_TOWN"
    assert state.money_cents == 800 + 2 * 4_200
    assert state.morale == 74
    assert state.health == 82
    assert state.current_day == 2


def test_travel_rejects_current_place_and_missing_funds(make_state, cfg):
    with pytest.raises(PreconditionError) as exc:
        resolve_travel(make_state(), "BASE_HQ", cfg=cfg)
    assert exc.value.code == "ALREADY_AT_PLACE"
    with pytest.raises(PreconditionError) as exc:
        resolve_travel(make_state(), "BORDER_OUTPOST", cfg=cfg)
    assert exc.value.code == "INSUFFICIENT_FUNDS"
