from dataclasses import replace

import pytest

from career.errors import ConflictError, PreconditionError
from career.pause import force_pause
from career.types import AwardHistory, MissionBrief, MissionParticipantStats, PendingDecision
from ceremony import MEDALS, RIBBONS, CeremonyConfig
from ceremony.engine import (
    CeremonyInvariantError,
    build_ceremony_report,
    ceremony_day,
    complete_ceremony,
    enforce_ceremony_pause,
    is_ceremony_due,
    mission_leaders,
    pick_unique_award,
    score_npc,
    score_player,
)
from npcs.lifecycle import seed_roster


def _mission_state(make_state, **overrides):
    fields = dict(current_day=12, last_mission_day=10)
    fields.update(overrides)
    return make_state(**fields)


def test_schedule():
    assert [ceremony_day(d) for d in (0, 11, 12, 23, 24, 25)] == [12, 12, 12, 12, 24, 24]


def test_due_only_on_or_after_an_uncompleted_ceremony_day(make_state):
    assert not is_ceremony_due(make_state(current_day=11))
    assert is_ceremony_due(make_state(current_day=12))
    assert is_ceremony_due(make_state(current_day=15))
    assert not is_ceremony_due(make_state(current_day=15, ceremony_completed_day=12))
    assert is_ceremony_due(make_state(current_day=24, ceremony_completed_day=12))


def test_ceremony_pause_is_forced_once(make_state, tokens):
    state, forced = enforce_ceremony_pause(make_state(current_day=12), now_ms=0, token_factory=tokens)
    assert forced is True
    assert state.pause_reason == "CEREMONY"
    again, forced = enforce_ceremony_pause(state, now_ms=0, token_factory=tokens)
    assert forced is False
    assert again is state


def test_pending_decision_goes_first(make_state):
    decision = PendingDecision(event_id=1, title="t", description="", chance_percent=10, condition_label="")
    state = force_pause(make_state(current_day=12), "DECISION", now_ms=0, decision=decision)
    out, forced = enforce_ceremony_pause(state, now_ms=0)
    assert forced is False
    assert out.pause_reason == "DECISION"


def test_scores(make_state):
    assert score_npc(12, 0, 70, 80) == 45 + 4 + 84 % 35 + 12
    assert score_player(make_state()) == 40 + 50
    assert score_player(make_state(rank_index=2, current_day=12)) == 40 + 10 + 50 + 3


def test_unique_award_skips_owned():
    assert pick_unique_award(AwardHistory(), 12) == (MEDALS[2], RIBBONS[2])
    owned = AwardHistory(medals=(MEDALS[2],), ribbons=(RIBBONS[2], RIBBONS[3]))
    assert pick_unique_award(owned, 12) == (MEDALS[3], RIBBONS[4])
    assert pick_unique_award(AwardHistory(medals=MEDALS, ribbons=()), 0) is None


def test_medal_board_locked_without_recent_mission(make_state):
    report = build_ceremony_report(make_state(current_day=12))
    assert report.ceremony_day == 12
    assert report.medal_quota == 0
    assert report.recipients == ()
    assert report.attendance == 31
    assert "locked" in report.logs[2]


def test_player_awarded_when_no_npc_took_part(make_state):
    report = build_ceremony_report(_mission_state(make_state))
    assert 1 <= report.medal_quota <= 8
    assert [r.name for r in report.recipients] == ["Alex Carter"]
    recipient = report.recipients[0]
    assert recipient.order == 1
    assert (recipient.medal_name, recipient.ribbon_name) == (MEDALS[2], RIBBONS[2])


def test_owned_medal_is_not_granted_again(make_state):
    state = _mission_state(make_state, player_medals=(MEDALS[2],))
    recipient = build_ceremony_report(state).recipients[0]
    assert recipient.medal_name == MEDALS[3]


def test_participants_compete_for_quota(make_state):
    roster = seed_roster("US_ARMY")
    names = tuple(n.name for n in roster[:6])
    report = build_ceremony_report(_mission_state(make_state, mission_participants=names), roster=roster)
    recipients = [r.name for r in report.recipients]
    assert len(recipients) <= report.medal_quota
    assert len(set(recipients)) == len(recipients)
    assert set(recipients) <= set(names) | {"Alex Carter"}
    assert report.chief_of_staff.name not in recipients
    assert [r.order for r in report.recipients] == list(range(1, len(recipients) + 1))


def test_fallen_personnel_do_not_attend(make_state):
    roster = seed_roster("US_ARMY")
    roster[4] = replace(roster[4], status="KIA", death_day=5)
    report = build_ceremony_report(_mission_state(make_state), roster=roster)
    assert report.attendance == 30


def test_quota_respects_config(make_state):
    cfg = CeremonyConfig(quota_min=2, quota_max=2)
    report = build_ceremony_report(_mission_state(make_state), cfg=cfg)
    assert report.medal_quota == 2


def test_completion_records_awards_and_releases_pause(make_state):
    state, _ = enforce_ceremony_pause(_mission_state(make_state), now_ms=1_000)
    report = build_ceremony_report(state)
    done = complete_ceremony(state, report, now_ms=5_000)
    assert done.pause is None
    assert done.server_reference_time_ms == state.server_reference_time_ms + 4_000
    assert done.ceremony_completed_day == 12
    assert done.player_medals == (MEDALS[2],)
    assert done.player_ribbons == (RIBBONS[2],)
    assert len(done.ceremony_recent_awards) == 1
    assert done.ceremony_recent_awards[0]["npc_name"] == "Alex Carter"
    assert done.money_cents == state.money_cents + 6_000
    assert done.morale == 78
    assert done.health == 82
    assert not is_ceremony_due(done)


def test_completion_preconditions(make_state):
    with pytest.raises(ConflictError) as exc:
        complete_ceremony(make_state(current_day=5), build_ceremony_report(make_state(current_day=5)), now_ms=0)
    assert exc.value.code == "CEREMONY_NOT_PENDING"

    decision = PendingDecision(event_id=1, title="t", description="", chance_percent=10, condition_label="")
    state = force_pause(make_state(current_day=12), "DECISION", now_ms=0, decision=decision)
    with pytest.raises(PreconditionError) as exc:
        complete_ceremony(state, build_ceremony_report(state), now_ms=0)
    assert exc.value.code == "DECISION_PENDING"


def test_report_serializes(make_state):
    payload = build_ceremony_report(_mission_state(make_state)).to_dict()
    assert payload["ceremony_day"] == 12
    assert payload["recipients"][0]["npc_name"] == "Alex Carter"
    assert payload["chief_of_staff"]["name"]
    assert len(payload["logs"]) == 7
    assert payload["logs"][5] == "Mission leaders: none recorded."


def _stats(name, tactical, support, leadership, resilience, role="NPC"):
    return MissionParticipantStats(
        name=name, role=role, tactical=tactical, support=support, leadership=leadership, resilience=resilience
    )


def _brief(*stats):
    return MissionBrief(
        mission_id="MSN-D8-0001",
        mission_type="PATROL",
        issued_day=8,
        terrain="FOREST",
        objective="Border sweep",
        enemy_strength=40,
        difficulty_rating=4,
        equipment_quality=70,
        participant_stats=tuple(stats),
    )


def test_mission_leaders_break_ties_by_participant_order():
    first, second = _stats("A", 90, 10, 10, 10), _stats("B", 90, 20, 10, 10)
    leaders = mission_leaders([first, second])
    assert [(f, w.name) for f, _, w in leaders] == [
        ("tactical", "A"),
        ("support", "B"),
        ("leadership", "A"),
        ("resilience", "A"),
    ]
    assert all(w is None for _, _, w in mission_leaders([]))


def test_mission_leaders_are_awarded_first(make_state):
    roster = seed_roster("US_ARMY")
    chief = build_ceremony_report(_mission_state(make_state), roster=roster).chief_of_staff.name
    a, b = [n.name for n in roster if n.name != chief][:2]
    state = _mission_state(
        make_state,
        mission_participants=(a, b, chief),
        last_mission=_brief(
            _stats("Alex Carter", 10, 99, 10, 10, role="PLAYER"),
            _stats(a, 99, 10, 10, 10),
            _stats(b, 10, 10, 99, 10),
            _stats(chief, 10, 10, 10, 99),
        ),
    )
    report = build_ceremony_report(state, cfg=CeremonyConfig(quota_min=4, quota_max=4), roster=roster)

    assert [r.name for r in report.recipients] == [a, "Alex Carter", b]
    assert report.recipients[0].reason == "Top mission contributor in tactical execution (99) with total score 129."
    assert "leadership command (99)" in report.recipients[2].reason
    assert report.logs[5] == f"Mission leaders: tactical={a}, support=Alex Carter, leadership={b}, resilience={chief}."


def test_mission_leaders_respect_the_quota(make_state):
    roster = seed_roster("US_ARMY")
    chief = build_ceremony_report(_mission_state(make_state), roster=roster).chief_of_staff.name
    a, b = [n.name for n in roster if n.name != chief][:2]
    state = _mission_state(
        make_state,
        last_mission=_brief(_stats(a, 99, 10, 10, 10), _stats(b, 10, 99, 10, 10)),
    )
    report = build_ceremony_report(state, cfg=CeremonyConfig(quota_min=1, quota_max=1), roster=roster)
    assert [r.name for r in report.recipients] == [a]


def test_leaders_need_an_active_mission_window(make_state):
    roster = seed_roster("US_ARMY")
    state = make_state(current_day=12, last_mission=_brief(_stats(roster[3].name, 99, 99, 99, 99)))
    assert build_ceremony_report(state, roster=roster).recipients == ()


def test_negative_chief_score_is_an_invariant_error(make_state):
    with pytest.raises(CeremonyInvariantError):
        build_ceremony_report(_mission_state(make_state), cfg=CeremonyConfig(npc_base=-200))


@pytest.mark.parametrize("field", ["chief_score_div", "high_performer_div", "personality_mod", "service_div"])
def test_config_rejects_non_positive_divisors(field):
    with pytest.raises(ValueError):
        CeremonyConfig(**{field: 0})
