from dataclasses import replace

import pytest

from career.errors import PreconditionError
from npcs.catalog import NpcCatalog
from npcs.lifecycle import adjust_npc, fill_due_recruits, mark_kia, npc_id_for, pick_mission_squad, roster_identities, seed_roster
from npcs.registry import (
    NpcIdentity,
    NpcIdentityCollisionError,
    assert_unique_names,
    build_npc_registry,
    bump_position,
    get_npc_identity,
    replacement_identity,
)


def test_registry_is_deterministic_and_unique():
    registry = build_npc_registry("US_ARMY")
    assert registry == build_npc_registry("US_ARMY")
    assert len(registry) == 30
    assert len({ident.name for ident in registry}) == 30
    assert [ident.slot for ident in registry] == list(range(30))


def test_repeated_raw_names_get_slot_suffix():
    raw = get_npc_identity("US_ARMY", 15)
    assert raw.name == get_npc_identity("US_ARMY", 0).name
    registry = build_npc_registry("US_ARMY")
    assert registry[0].name == f"{raw.name} [S0]"
    assert registry[15].name == f"{raw.name} [S15]"


def test_small_catalog_still_unique():
    catalog = NpcCatalog(first_names=("Ann",), last_names=("Lee",), max_active=4)
    names = [ident.name for ident in build_npc_registry("US_NAVY", catalog=catalog)]
    assert names == ["Ann Lee [S0]", "Ann Lee [S1]", "Ann Lee [S2]", "Ann Lee [S3]"]


def test_empty_catalog_rejected():
    with pytest.raises(ValueError):
        NpcCatalog(first_names=())


def test_collision_is_a_defect():
    ident = NpcIdentity(slot=0, name="Same", division="d", subdivision="s", unit="u", position="p")
    with pytest.raises(NpcIdentityCollisionError):
        assert_unique_names([ident, replace(ident, slot=1)])


def test_replacement_identity_is_a_new_person():
    original = build_npc_registry("US_ARMY")[3]
    assert replacement_identity("US_ARMY", 3, 0) == original
    recruit = replacement_identity("US_ARMY", 3, 1)
    assert recruit.slot == 3
    assert recruit.name.endswith("[S3G1]")


def test_seed_roster_ids_and_stats():
    roster = seed_roster("US_ARMY")
    assert roster[0].npc_id == "npc-1"
    assert all(n.status == "ACTIVE" and n.generation == 0 for n in roster)
    assert all(40 <= n.competence < 70 and 50 <= n.loyalty < 75 for n in roster)
    assert npc_id_for(4, 2) == "npc-5-g2"


def test_adjust_npc_clamps():
    npc = seed_roster("US_ARMY")[0]
    out = adjust_npc(npc, relation=500, fatigue=-10, competence=200)
    assert out.relation_to_player == 100
    assert out.fatigue == 0
    assert out.competence == 100
    assert adjust_npc(npc, relation=-500).relation_to_player == -100


def test_kia_queues_replacement():
    npc = seed_roster("US_ARMY")[7]
    fallen, ticket = mark_kia(npc, day=10)
    assert fallen.status == "KIA"
    assert fallen.death_day == 10
    assert not fallen.alive
    assert ticket.slot == 7
    assert ticket.generation_next == 1
    assert ticket.due_day == 10 + 2 + 7 % 5
    assert ticket.replaced_npc_id == "npc-8"
    with pytest.raises(PreconditionError):
        mark_kia(fallen, day=11)


def test_recruits_fill_only_when_due():
    roster = seed_roster("US_ARMY")
    fallen, ticket = mark_kia(roster[7], day=10)
    live = [n for n in roster if n.npc_id != fallen.npc_id]

    assert fill_due_recruits("US_ARMY", [ticket], current_day=ticket.due_day - 1, existing=live) == []

    filled = fill_due_recruits("US_ARMY", [ticket], current_day=ticket.due_day, existing=live)
    assert len(filled) == 1
    _, recruit = filled[0]
    assert recruit.npc_id == "npc-8-g1"
    assert recruit.slot == 7
    assert recruit.joined_day == ticket.due_day
    assert recruit.name not in {n.name for n in live}


def test_squad_is_deterministic_and_alive():
    roster = seed_roster("US_ARMY")
    roster[0] = replace(roster[0], status="KIA", death_day=1)
    squad = pick_mission_squad(roster, profile_id="p1", day=4, mission_type="PATROL")
    assert squad == pick_mission_squad(roster, profile_id="p1", day=4, mission_type="PATROL")
    assert len(squad) == 4
    assert len({n.npc_id for n in squad}) == 4
    assert all(n.alive for n in squad)
    assert pick_mission_squad([], profile_id="p1", day=4, mission_type="PATROL") == []


def test_roster_identities_skip_fallen():
    roster = seed_roster("US_ARMY")
    roster[2] = replace(roster[2], status="KIA", death_day=1)
    idents = roster_identities(roster)
    assert len(idents) == 29
    assert 2 not in {i.slot for i in idents}


def test_bump_position():
    assert bump_position("Intel Officer") == "Senior Intel Officer"
    assert bump_position("Senior Intel Officer") == "Lead Intel Officer"
    assert bump_position("Lead Intel Officer") == "Lead Intel Officer"


def test_background_activity_is_bounded_and_stable(roster):
    from npcs.activity import ACTIVITY_LIMIT, OPERATIONS, RECOMMENDATIONS, npc_background_activity

    roster = [replace(roster[0], status="KIA")] + roster[1:]
    items = npc_background_activity(roster, game_day=7)
    assert len(items) == ACTIVITY_LIMIT
    assert items[0]["npc_id"] == roster[1].npc_id
    assert npc_background_activity(roster, game_day=7) == items
    for i, item in enumerate(items):
        assert item["operation"] in OPERATIONS
        assert item["result"] == f"{item['operation']} completed ({item['impact']})"
        assert 25 <= item["readiness"] <= 100
        assert 20 <= item["morale"] <= 100
        assert item["promotion_recommendation"] in RECOMMENDATIONS
        assert item["last_tick_day"] == 7 - i % 3
        if item["notification_letter"] is not None:
            assert item["promotion_recommendation"] == "NOT_RECOMMENDED"

    assert npc_background_activity(roster[:3], game_day=0, limit=5)[0]["last_tick_day"] == 1
    assert npc_background_activity(roster, game_day=7, limit=0) == []
