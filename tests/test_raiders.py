from dataclasses import replace

import pytest

from career.errors import PreconditionError
from career.pause import force_pause
from career.raiders import (
    CASUALTY_HISTORY_LIMIT,
    FIRST_ATTACK_DAY,
    cadence_days,
    next_attack_day,
    raider_outlook,
    resolve_raider_defense,
    threat_level,
    threat_score,
)
from career.types import RaiderCasualty

from conftest import ScriptedRandom


def _squad(roster, n=5, **stats):
    return [replace(npc, **stats) for npc in roster[:n]]


def test_threat_score_bounds(make_state, roster):
    calm = make_state(morale=100, health=100, command_authority=100)
    assert threat_score(calm, _squad(roster, fatigue=0, loyalty=100)) == 0

    broken = make_state(morale=0, health=0, command_authority=0)
    assert threat_score(broken, _squad(roster, fatigue=100, loyalty=0)) == 100
    assert threat_score(broken, []) == 84


@pytest.mark.parametrize("score, level, cadence", [(0, "LOW", 11), (49, "LOW", 11), (50, "MEDIUM", 9), (75, "HIGH", 7)])
def test_threat_levels_set_the_cadence(score, level, cadence):
    assert threat_level(score) == level
    assert cadence_days(score) == cadence


def test_first_attack_then_cadence(make_state):
    assert next_attack_day(make_state(), 90) == FIRST_ATTACK_DAY
    assert next_attack_day(make_state(raider_last_attack_day=10), 90) == 17
    assert next_attack_day(make_state(raider_last_attack_day=10), 10) == 21


def test_attack_before_the_window_is_refused(make_state, roster):
    state = make_state(current_day=2)
    with pytest.raises(PreconditionError) as exc:
        resolve_raider_defense(state, roster=roster, rng=ScriptedRandom())
    assert exc.value.code == "RAIDERS_NOT_READY"
    assert exc.value.details == {"next_attack_day": 3, "days_until_next": 1}


def test_attack_needs_defenders(make_state, roster):
    fallen = [replace(n, status="KIA") for n in roster]
    with pytest.raises(PreconditionError) as exc:
        resolve_raider_defense(make_state(current_day=5), roster=fallen, rng=ScriptedRandom())
    assert exc.value.code == "NO_DEFENDERS"


def test_attack_is_blocked_by_a_system_pause(make_state, roster):
    state = force_pause(make_state(current_day=5), "CEREMONY", now_ms=0)
    with pytest.raises(PreconditionError) as exc:
        resolve_raider_defense(state, roster=roster, rng=ScriptedRandom())
    assert exc.value.code == "CEREMONY_PENDING"


def test_most_exposed_npc_falls_and_the_player_pays(make_state, roster):
    squad = _squad(roster, fatigue=10, loyalty=80)
    squad[3] = replace(squad[3], fatigue=90)
    state = make_state(current_day=3, morale=70, health=80, command_authority=10)

    new_state, fallen, details = resolve_raider_defense(state, roster=squad, rng=ScriptedRandom([0.0]))

    assert [npc.npc_id for npc, _ in fallen] == [squad[3].npc_id]
    npc, ticket = fallen[0]
    assert npc.status == "KIA"
    assert npc.death_day == 3
    assert ticket.replaced_npc_id == squad[3].npc_id
    assert ticket.generation_next == squad[3].generation + 1

    assert new_state.morale == 66
    assert new_state.health == 78
    assert new_state.command_authority == 7
    assert new_state.raider_last_attack_day == 3
    assert [c.npc_name for c in new_state.raider_casualties] == [squad[3].name]

    assert details["type"] == "RAIDER_DEFENSE"
    assert details["severity"] == threat_level(details["threat_score"])
    assert details["casualties"][0]["npc_id"] == squad[3].npc_id
    assert details["casualties"][0]["replacement_due_day"] == ticket.due_day
    assert details["next_attack_day"] == 3 + cadence_days(threat_score(new_state, squad[:3] + squad[4:]))


def test_equal_exposure_falls_in_slot_order(make_state, roster):
    squad = _squad(roster, fatigue=20, loyalty=60, competence=50)
    _, fallen, _ = resolve_raider_defense(make_state(current_day=3), roster=squad, rng=ScriptedRandom([0.99]))
    assert [npc.npc_id for npc, _ in fallen] == [squad[0].npc_id, squad[1].npc_id]


def test_casualties_never_exceed_the_roster(make_state, roster):
    state = make_state(current_day=3, morale=0, health=0, command_authority=0)
    squad = _squad(roster, n=2, fatigue=100, loyalty=0)
    new_state, fallen, details = resolve_raider_defense(state, roster=squad, rng=ScriptedRandom([0.99]))
    assert len(fallen) == 2
    assert details["severity"] == "HIGH"
    assert new_state.morale == 0


def test_casualty_history_is_capped(make_state, roster):
    history = tuple(
        RaiderCasualty(slot=i, npc_name=f"old-{i}", division="", unit="", role="", day=1) for i in range(CASUALTY_HISTORY_LIMIT)
    )
    state = make_state(current_day=40, raider_last_attack_day=1, raider_casualties=history)
    new_state, fallen, _ = resolve_raider_defense(state, roster=roster, rng=ScriptedRandom([0.0]))
    assert len(new_state.raider_casualties) == CASUALTY_HISTORY_LIMIT
    assert new_state.raider_casualties[-1].npc_name == fallen[-1][0].name
    assert new_state.raider_casualties[0].npc_name == f"old-{len(fallen)}"


def test_outlook(make_state, roster):
    state = make_state(current_day=1)
    out = raider_outlook(state, roster, pending_replacements=2)
    assert out["last_attack_day"] is None
    assert out["next_attack_day"] == FIRST_ATTACK_DAY
    assert out["days_until_next"] == 2
    assert out["pending_replacement_count"] == 2
    assert out["threat_level"] == threat_level(out["threat_score"])
    assert out["recent_casualties"] == []
