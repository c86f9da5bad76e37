import threading
import time
from dataclasses import replace

import pytest

from career import service
from career_repo import CareerRepo
from career.academy import academy_answer_key
from career.errors import ConflictError, NotFoundError, PreconditionError, ValidationError
from career.recruitment import recruitment_answer_key

from conftest import ScriptedRandom

DAY = 4_000


@pytest.fixture
def profile(db_path, cfg):
    service.create_profile("p1", "Alex Carter", "US", "US_ARMY", db_path=db_path, now_ms=0, cfg=cfg)
    return "p1"


@pytest.fixture
def call(db_path, cfg, tokens):
    """Invoke a service function against the temp DB at a fixed clock."""

    def _call(fn, *args, now=0, rng=None, **kwargs):
        return fn(
            *args,
            db_path=db_path,
            now_ms=now,
            cfg=cfg,
            rng=rng or ScriptedRandom([0.99] * 20),
            token_factory=tokens,
            **kwargs,
        )

    return _call


def _queue_decision(call, profile):
    return call(service.get_snapshot, profile, now=3 * DAY, rng=ScriptedRandom([0.0, 0.0]))["snapshot"]


def test_create_profile(db_path, cfg):
    out = service.create_profile("p1", " Alex Carter ", "us", "us_army", 21, db_path=db_path, now_ms=0, cfg=cfg)
    snap = out["snapshot"]
    assert snap["player_name"] == "Alex Carter"
    assert snap["country"] == "US"
    assert snap["game_day"] == 0
    assert snap["age"] == 21
    assert snap["rank_code"] == "Recruit"
    assert snap["paused"] is False
    assert snap["pending_decision"] is None
    assert snap["next_promotion"] == {"min_days": 30, "min_points": 8}
    assert snap["version"] == 0

    listing = service.list_npcs("p1", db_path=db_path, now_ms=0, cfg=cfg)
    assert len(listing["items"]) == 30
    assert listing["recruitment_queue"] == []


def test_create_profile_rejects_duplicates(db_path, cfg, profile):
    with pytest.raises(ConflictError) as exc:
        service.create_profile(profile, "Other", "US", "US_NAVY", db_path=db_path, now_ms=0, cfg=cfg)
    assert exc.value.code == "PROFILE_EXISTS"


@pytest.mark.parametrize(
    "args",
    [
        ("", "Alex", "US", "US_ARMY", 18),
        ("p2", "", "US", "US_ARMY", 18),
        ("p2", "x" * 65, "US", "US_ARMY", 18),
        ("p2", "Alex", "FR", "US_ARMY", 18),
        ("p2", "Alex", "ID", "US_ARMY", 18),
        ("p2", "Alex", "US", "US_ARMY", 16),
        ("p2", "Alex", "US", "US_ARMY", 41),
        ("p2", "Alex", "US", "US_ARMY", True),
    ],
)
def test_create_profile_validation(db_path, cfg, args):
    with pytest.raises(ValidationError):
        service.create_profile(*args, db_path=db_path, now_ms=0, cfg=cfg)


def test_unknown_profile(call):
    with pytest.raises(NotFoundError) as exc:
        call(service.get_snapshot, "ghost")
    assert exc.value.code == "PROFILE_NOT_FOUND"


def test_snapshot_syncs_the_clock(call, profile):
    snap = call(service.get_snapshot, profile, now=2 * DAY)["snapshot"]
    assert snap["game_day"] == 2
    assert snap["money_cents"] == 2 * 4_200
    assert snap["in_game_date"] == "2026-01-03"
    assert snap["version"] == 1

    again = call(service.get_snapshot, profile, now=2 * DAY)["snapshot"]
    assert again["version"] == 1


def test_pause_freezes_and_resume_shifts_clock(call, profile):
    out = call(service.pause_game, profile, "MODAL", now=DAY)
    token = out["pause_token"]
    assert out["snapshot"]["paused"] is True
    assert out["snapshot"]["pause_token"] == token

    assert call(service.get_snapshot, profile, now=5 * DAY)["snapshot"]["game_day"] == 1

    resumed = call(service.resume_game, profile, token, now=5 * DAY)["snapshot"]
    assert resumed["paused"] is False
    assert resumed["server_reference_time_ms"] == 4 * DAY
    assert call(service.get_snapshot, profile, now=6 * DAY)["snapshot"]["game_day"] == 2

    with pytest.raises(ConflictError) as exc:
        call(service.resume_game, profile, token, now=6 * DAY)
    assert exc.value.code == "NOT_PAUSED"


def test_decision_blocks_actions_until_chosen(call, profile, db_path):
    snap = _queue_decision(call, profile)
    pending = snap["pending_decision"]
    assert snap["pause_reason"] == "DECISION"
    assert pending["title"] == "Discipline Inspection"

    with pytest.raises(PreconditionError) as exc:
        call(service.run_training, profile, "LOW", now=3 * DAY)
    assert exc.value.code == "DECISION_PENDING"
    with pytest.raises(ConflictError):
        call(service.pause_game, profile, "MODAL", now=3 * DAY)

    out = call(service.choose_decision, profile, pending["event_id"], "B", now=3 * DAY)
    assert out["details"]["applied"]["money_delta"] == 300
    assert out["snapshot"]["paused"] is False
    assert out["snapshot"]["pending_decision"] is None
    assert out["snapshot"]["money_cents"] == 3 * 4_200 + 300

    logs = service.list_decision_logs(profile, db_path=db_path)
    assert [item["selected_option"] for item in logs["items"]] == ["B"]
    assert logs["items"][0]["id"] == out["details"]["decision_log_id"]
    assert logs["next_cursor"] is None

    with pytest.raises(ConflictError) as exc:
        call(service.choose_decision, profile, pending["event_id"], "B", now=3 * DAY)
    assert exc.value.code == "DECISION_MISMATCH"


def test_ceremony_pauses_the_game_until_completed(call, profile):
    snap = call(service.get_snapshot, profile, now=12 * DAY)["snapshot"]
    assert snap["pause_reason"] == "CEREMONY"
    assert snap["ceremony_due"] is True
    assert snap["pending_decision"] is None

    with pytest.raises(PreconditionError) as exc:
        call(service.run_training, profile, "LOW", now=12 * DAY)
    assert exc.value.code == "CEREMONY_PENDING"

    view = call(service.get_ceremony, profile, now=12 * DAY)
    assert view["ceremony_due"] is True
    assert view["report"]["medal_quota"] == 0
    assert view["report"]["attendance"] == 31

    done = call(service.complete_ceremony, profile, now=12 * DAY)
    assert done["snapshot"]["paused"] is False
    assert done["snapshot"]["ceremony_completed_day"] == 12
    assert done["snapshot"]["money_cents"] == 12 * 4_200 + 6_000

    with pytest.raises(ConflictError) as exc:
        call(service.complete_ceremony, profile, now=12 * DAY)
    assert exc.value.code == "CEREMONY_NOT_PENDING"


def test_deployment_casualty_is_replaced_later(call, profile):
    # injured, failed, casualty roll hits; then the day-3 event roll misses
    out = call(service.run_deployment, profile, "PATROL", now=DAY, rng=ScriptedRandom([0.0, 0.99, 0.0, 0.99]))
    details = out["details"]
    fallen_id = details["casualty_npc_id"]
    assert fallen_id in details["participants"]
    assert details["casualty_name"]
    assert out["snapshot"]["game_day"] == 3
    assert out["snapshot"]["last_mission_day"] == 3
    assert out["snapshot"]["next_mission_in_days"] == 10
    assert out["snapshot"]["pause_reason"] is None

    listing = call(service.list_npcs, profile, now=DAY)
    fallen = next(n for n in listing["items"] if n["npc_id"] == fallen_id)
    assert fallen["status"] == "KIA"
    assert fallen["death_day"] == 3
    assert [t["replaced_npc_id"] for t in listing["recruitment_queue"]] == [fallen_id]
    assert details["replacement_due_day"] == listing["recruitment_queue"][0]["due_day"]
    assert len(call(service.list_npcs, profile, now=DAY, include_fallen=False)["items"]) == 29

    # the mission jump is absorbed by the clock; day 10 is reached at 10 * DAY
    later = call(service.list_npcs, profile, now=10 * DAY)
    assert later["recruitment_queue"] == []
    recruit = next(n for n in later["items"] if n["npc_id"] == f"{fallen_id}-g1")
    assert recruit["status"] == "ACTIVE"
    assert recruit["joined_day"] == details["replacement_due_day"]
    assert len([n for n in later["items"] if n["status"] == "ACTIVE"]) == 30


def test_failed_action_rolls_back_the_whole_request(call, profile):
    with pytest.raises(PreconditionError) as exc:
        call(service.run_academy, profile, 2, [1, 1, 1, 1, 1], now=2 * DAY)
    assert exc.value.code == "ACADEMY_TIER_LOCKED"
    snap = call(service.get_snapshot, profile, now=0)["snapshot"]
    assert snap["game_day"] == 0
    assert snap["version"] == 0


def test_social_interaction_persists_npc(call, profile):
    out = call(service.run_social_interaction, profile, "npc-1", "BOND")
    assert out["npc"]["relation_to_player"] == 6
    assert out["snapshot"]["morale"] == 73
    listing = call(service.list_npcs, profile)
    assert next(n for n in listing["items"] if n["npc_id"] == "npc-1")["relation_to_player"] == 6

    with pytest.raises(PreconditionError) as exc:
        call(service.run_command, profile, "PLAN_MISSION")
    assert exc.value.code == "RANK_TOO_LOW"


def test_academy_then_recruitment(call, profile):
    out = call(service.run_academy, profile, 1, list(academy_answer_key(1)), now=DAY)
    assert out["details"]["passed"] is True
    snap = out["snapshot"]
    assert snap["academy_tier"] == 1
    assert snap["game_day"] == 4
    assert [c["division_freedom"] for c in snap["certificate_inventory"]] == ["STANDARD"]

    out = call(
        service.run_recruitment,
        profile,
        "medical-support-division",
        list(recruitment_answer_key("Medical Command HQ")),
        now=DAY,
    )
    assert out["details"]["passed"] is True
    assert out["snapshot"]["player_division"] == "Medical Command HQ"


def test_career_review_and_travel(call, profile):
    review = call(service.run_career_review, profile)
    assert review["details"]["promoted"] is False
    assert review["details"]["recommendation"] == "NOT_RECOMMENDED"

    trip = call(service.run_travel, profile, "LOGISTICS_HUB", now=DAY)
    assert trip["snapshot"]["last_travel_place"] == "LOGISTICS_HUB"
    assert trip["snapshot"]["game_day"] == 2


def test_time_scale(call, profile):
    snap = call(service.set_time_scale, profile, 3, now=2 * DAY)["snapshot"]
    assert snap["game_time_scale"] == 3
    assert snap["game_day"] == 2
    assert call(service.get_snapshot, profile, now=3 * DAY)["snapshot"]["game_day"] == 5

    with pytest.raises(ValidationError):
        call(service.set_time_scale, profile, 2, now=3 * DAY)


def test_restart_world_clears_progress(call, profile, db_path):
    pending = _queue_decision(call, profile)["pending_decision"]
    call(service.choose_decision, profile, pending["event_id"], "A", now=3 * DAY)
    call(service.run_social_interaction, profile, "npc-2", "MENTOR", now=3 * DAY)

    snap = call(service.restart_world, profile, now=3 * DAY)["snapshot"]
    assert snap["game_day"] == 0
    assert snap["money_cents"] == 0
    assert snap["paused"] is False
    assert service.list_decision_logs(profile, db_path=db_path)["items"] == []
    listing = call(service.list_npcs, profile, now=3 * DAY)
    assert len(listing["items"]) == 30
    assert all(n["relation_to_player"] == 0 for n in listing["items"])


@pytest.mark.parametrize("kwargs", [{"limit": 0}, {"limit": 51}, {"cursor": 0}, {"limit": "5"}])
def test_decision_log_paging_validation(db_path, profile, kwargs):
    with pytest.raises(ValidationError):
        service.list_decision_logs(profile, db_path=db_path, **kwargs)


def test_decision_logs_for_unknown_profile(db_path):
    with pytest.raises(NotFoundError):
        service.list_decision_logs("ghost", db_path=db_path)


def test_other_profiles_are_not_blocked_by_a_held_write_lock(call, profile, db_path, cfg):
    service.create_profile("p2", "Jordan Lee", "US", "US_ARMY", db_path=db_path, now_ms=0, cfg=cfg)
    holding, release = threading.Event(), threading.Event()

    def _hold_write_lock():
        with CareerRepo(db_path) as repo:
            with repo.transaction() as cur:
                cur.execute("UPDATE game_states SET updated_at = updated_at WHERE profile_id='p1';")
                holding.set()
                release.wait(5)

    worker = threading.Thread(target=_hold_write_lock)
    worker.start()
    try:
        assert holding.wait(5)
        started = time.monotonic()
        snap = call(service.get_snapshot, "p2")["snapshot"]
        listing = call(service.list_npcs, "p2")
        logs = service.list_decision_logs("p2", db_path=db_path)
        waited = time.monotonic() - started
    finally:
        release.set()
        worker.join(5)
    assert snap["player_name"] == "Jordan Lee"
    assert len(listing["items"]) == 30
    assert logs["items"] == []
    assert waited < 0.5


def test_two_profiles_progress_concurrently(call, profile, db_path, cfg):
    service.create_profile("p2", "Jordan Lee", "US", "US_ARMY", db_path=db_path, now_ms=0, cfg=cfg)
    results, errors = {}, []

    def _play(profile_id):
        try:
            for day in (1, 2, 4, 5):
                results[profile_id] = call(service.get_snapshot, profile_id, now=day * DAY)["snapshot"]
        except Exception as exc:  # surfaced by the assertion below
            errors.append(exc)

    workers = [threading.Thread(target=_play, args=(pid,)) for pid in ("p1", "p2")]
    for w in workers:
        w.start()
    for w in workers:
        w.join(10)

    assert errors == []
    assert results["p1"]["game_day"] == results["p2"]["game_day"] == 5
    assert results["p1"]["version"] == results["p2"]["version"] == 4


def test_lost_update_is_reported_as_conflict(profile, db_path, cfg, tokens):
    with pytest.raises(ConflictError) as exc:
        with service._profile_session(
            "p1",
            db_path=db_path,
            now_ms=0,
            cfg=cfg,
            rng=ScriptedRandom([0.99] * 5),
            token_factory=tokens,
            queue_events=False,
        ) as s:
            s.state = replace(s.state, morale=10)
            with CareerRepo(db_path) as other:
                with other.transaction() as cur:
                    cur.execute("UPDATE game_states SET version = version + 1 WHERE profile_id='p1';")
    assert exc.value.code == "STATE_CHANGED"

    with CareerRepo(db_path) as repo:
        row = repo._conn.execute("SELECT morale, version FROM game_states WHERE profile_id='p1';").fetchone()
    assert row["version"] == 1
    assert row["morale"] != 10


def test_request_without_changes_writes_nothing(call, profile, db_path):
    call(service.get_snapshot, profile)
    with CareerRepo(db_path) as repo:
        row = repo._conn.execute("SELECT version FROM game_states WHERE profile_id='p1';").fetchone()
    assert row["version"] == 0


def test_raider_defense_kills_and_queues_replacements(call, profile):
    with pytest.raises(PreconditionError) as exc:
        call(service.run_raider_defense, profile, now=2 * DAY)
    assert exc.value.code == "RAIDERS_NOT_READY"

    out = call(service.run_raider_defense, profile, now=3 * DAY)
    details = out["details"]
    fallen_ids = [c["npc_id"] for c in details["casualties"]]
    assert fallen_ids
    assert out["snapshot"]["raider_last_attack_day"] == 3
    assert out["snapshot"]["morale"] < 70

    listing = call(service.list_npcs, profile, now=3 * DAY)
    assert {n["npc_id"] for n in listing["items"] if n["status"] == "KIA"} == set(fallen_ids)
    assert sorted(t["replaced_npc_id"] for t in listing["recruitment_queue"]) == sorted(fallen_ids)

    outlook = call(service.get_raider_outlook, profile, now=3 * DAY)
    assert outlook["last_attack_day"] == 3
    assert outlook["pending_replacement_count"] == len(fallen_ids)
    assert [c["npc_name"] for c in outlook["recent_casualties"]] == [c["npc_name"] for c in details["casualties"]]

    with pytest.raises(PreconditionError) as exc:
        call(service.run_raider_defense, profile, now=3 * DAY)
    assert exc.value.code == "RAIDERS_NOT_READY"


def test_npc_activity_skips_the_fallen(call, profile):
    first = call(service.get_npc_background_activity, profile, now=DAY)
    assert first["game_day"] == 1
    assert len(first["items"]) == 18
    assert call(service.get_npc_background_activity, profile, now=DAY)["items"] == first["items"]

    out = call(service.run_deployment, profile, "PATROL", now=DAY, rng=ScriptedRandom([0.0, 0.99, 0.0, 0.99]))
    fallen_id = out["details"]["casualty_npc_id"]
    later = call(service.get_npc_background_activity, profile, now=DAY)
    assert fallen_id not in [item["npc_id"] for item in later["items"]]


def test_deployment_briefing_is_persisted(call, profile):
    out = call(service.run_deployment, profile, "SUPPORT", now=DAY, rng=ScriptedRandom([0.99, 0.0, 0.99]))
    mission = out["snapshot"]["last_mission"]
    assert mission["mission_id"] == out["details"]["mission_id"]
    assert mission["terrain"] == out["details"]["terrain"]
    again = call(service.get_snapshot, profile, now=DAY)["snapshot"]
    assert again["last_mission"] == mission
