from career.actions import resolve_deployment
from career.missions import (
    ENEMY_STRENGTH_RANGE,
    EQUIPMENT_QUALITY_RANGE,
    OBJECTIVES,
    TERRAINS,
    difficulty_rating,
    generate_mission,
    with_participant_stats,
)

from conftest import ScriptedRandom


def test_difficulty_rating_bounds():
    assert difficulty_rating(0, 100) == 1
    assert difficulty_rating(100, 0) == 10
    assert difficulty_rating(80, 40) == 7
    assert difficulty_rating(20, 90) == 2


def test_mission_brief_is_deterministic_per_day(make_state):
    state = make_state(current_day=6)
    brief = generate_mission(state, "PATROL")
    assert generate_mission(state, "PATROL") == brief
    assert brief.mission_id.startswith("MSN-D6-")
    assert brief.issued_day == 6
    assert brief.terrain in TERRAINS
    assert brief.objective in OBJECTIVES["PATROL"]
    assert ENEMY_STRENGTH_RANGE[0] <= brief.enemy_strength <= ENEMY_STRENGTH_RANGE[1]
    assert EQUIPMENT_QUALITY_RANGE[0] <= brief.equipment_quality <= EQUIPMENT_QUALITY_RANGE[1]
    assert brief.difficulty_rating == difficulty_rating(brief.enemy_strength, brief.equipment_quality)
    assert brief.participant_stats == ()

    support = generate_mission(state, "SUPPORT")
    assert support.objective in OBJECTIVES["SUPPORT"]


def test_participant_stats_cover_player_and_squad(make_state, roster):
    state = make_state()
    brief = with_participant_stats(generate_mission(state, "PATROL"), state, roster[:3])
    names = [p.name for p in brief.participant_stats]
    assert names == [state.player_name] + [n.name for n in roster[:3]]
    assert [p.role for p in brief.participant_stats] == ["PLAYER", "NPC", "NPC", "NPC"]
    for p in brief.participant_stats:
        for value in (p.tactical, p.support, p.leadership, p.resilience):
            assert 0 <= value <= 100
        assert p.total == p.tactical + p.support + p.leadership + p.resilience


def test_deployment_reports_and_keeps_the_briefing(make_state, cfg, roster):
    state, details = resolve_deployment(make_state(), "PATROL", cfg=cfg, rng=ScriptedRandom([0.99, 0.0]), roster=roster)
    mission = state.last_mission
    assert mission is not None
    assert details["mission_id"] == mission.mission_id
    assert details["terrain"] == mission.terrain
    assert details["objective"] == mission.objective
    assert details["difficulty_rating"] == mission.difficulty_rating
    assert len(details["participant_stats"]) == 1 + len(details["participants"])
    assert details["participant_stats"][0]["role"] == "PLAYER"
