from __future__ import annotations

import sqlite3
from typing import Dict, Iterable, List, Optional

from .types import NpcRuntime, RecruitmentTicket


_NPC_COLUMNS = (
    "npc_id",
    "slot",
    "generation",
    "name",
    "division",
    "subdivision",
    "unit",
    "position",
    "status",
    "competence",
    "loyalty",
    "fatigue",
    "relation_to_player",
    "promotion_points",
    "joined_day",
    "death_day",
)


def _npc_from_row(r: sqlite3.Row) -> NpcRuntime:
    return NpcRuntime(
        npc_id=str(r["npc_id"]),
        slot=int(r["slot"]),
        generation=int(r["generation"]),
        name=str(r["name"]),
        division=str(r["division"]),
        subdivision=str(r["subdivision"] or ""),
        unit=str(r["unit"]),
        position=str(r["position"]),
        status=str(r["status"]),
        competence=int(r["competence"]),
        loyalty=int(r["loyalty"]),
        fatigue=int(r["fatigue"]),
        relation_to_player=int(r["relation_to_player"]),
        promotion_points=int(r["promotion_points"]),
        joined_day=int(r["joined_day"]),
        death_day=int(r["death_day"]) if r["death_day"] is not None else None,
    )


def load_roster(cur: sqlite3.Cursor, profile_id: str, *, include_fallen: bool = True) -> List[NpcRuntime]:
    """All NPCs of a profile ordered by (slot, generation)."""
    sql = f"SELECT {', '.join(_NPC_COLUMNS)} FROM npc_runtime WHERE profile_id=?"
    if not include_fallen:
        sql += " AND status != 'KIA'"
    rows = cur.execute(sql + " ORDER BY slot ASC, generation ASC;", (str(profile_id),)).fetchall()
    return [_npc_from_row(r) for r in rows]


def roster_by_id(roster: Iterable[NpcRuntime]) -> Dict[str, NpcRuntime]:
    return {n.npc_id: n for n in roster}


def upsert_npcs(cur: sqlite3.Cursor, profile_id: str, npcs: Iterable[NpcRuntime], *, now: str) -> None:
    """Insert or update NPC rows. `created_at` is only written on insert."""
    rows = [
        (
            str(profile_id),
            n.npc_id,
            int(n.slot),
            int(n.generation),
            n.name,
            n.division,
            n.subdivision,
            n.unit,
            n.position,
            n.status,
            int(n.competence),
            int(n.loyalty),
            int(n.fatigue),
            int(n.relation_to_player),
            int(n.promotion_points),
            int(n.joined_day),
            n.death_day,
            str(now),
            str(now),
        )
        for n in npcs
    ]
    if not rows:
        return
    cur.executemany(
        """
        INSERT INTO npc_runtime(
            profile_id, npc_id, slot, generation, name, division, subdivision, unit, position,
            status, competence, loyalty, fatigue, relation_to_player, promotion_points,
            joined_day, death_day, created_at, updated_at
        )
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        ON CONFLICT(profile_id, npc_id) DO UPDATE SET
            name=excluded.name,
            division=excluded.division,
            subdivision=excluded.subdivision,
            unit=excluded.unit,
            position=excluded.position,
            status=excluded.status,
            competence=excluded.competence,
            loyalty=excluded.loyalty,
            fatigue=excluded.fatigue,
            relation_to_player=excluded.relation_to_player,
            promotion_points=excluded.promotion_points,
            death_day=excluded.death_day,
            updated_at=excluded.updated_at;
        """,
        rows,
    )


def upsert_npc(cur: sqlite3.Cursor, profile_id: str, npc: NpcRuntime, *, now: str) -> None:
    upsert_npcs(cur, profile_id, [npc], now=now)


def delete_roster(cur: sqlite3.Cursor, profile_id: str) -> None:
    cur.execute("DELETE FROM npc_runtime WHERE profile_id=?;", (str(profile_id),))
    cur.execute("DELETE FROM recruitment_queue WHERE profile_id=?;", (str(profile_id),))


# ---------------------------------------------------------------------------
# Recruitment queue
# ---------------------------------------------------------------------------


def enqueue_ticket(cur: sqlite3.Cursor, profile_id: str, ticket: RecruitmentTicket, *, now: str) -> int:
    cur.execute(
        """
        INSERT INTO recruitment_queue(
            profile_id, slot, generation_next, enqueued_day, due_day, replaced_npc_id, status, created_at
        )
        VALUES (?, ?, ?, ?, ?, ?, 'QUEUED', ?);
        """,
        (
            str(profile_id),
            int(ticket.slot),
            int(ticket.generation_next),
            int(ticket.enqueued_day),
            int(ticket.due_day),
            ticket.replaced_npc_id,
            str(now),
        ),
    )
    return int(cur.lastrowid)


def list_pending_tickets(
    cur: sqlite3.Cursor, profile_id: str, *, due_by: Optional[int] = None
) -> List[RecruitmentTicket]:
    sql = (
        "SELECT id, slot, generation_next, enqueued_day, due_day, replaced_npc_id "
        "FROM recruitment_queue WHERE profile_id=? AND status='QUEUED'"
    )
    params: list = [str(profile_id)]
    if due_by is not None:
        sql += " AND due_day <= ?"
        params.append(int(due_by))
    rows = cur.execute(sql + " ORDER BY due_day ASC, slot ASC;", params).fetchall()
    return [
        RecruitmentTicket(
            ticket_id=int(r["id"]),
            slot=int(r["slot"]),
            generation_next=int(r["generation_next"]),
            enqueued_day=int(r["enqueued_day"]),
            due_day=int(r["due_day"]),
            replaced_npc_id=str(r["replaced_npc_id"]),
        )
        for r in rows
    ]


def mark_ticket_filled(cur: sqlite3.Cursor, ticket_id: int, *, filled_npc_id: str, now: str) -> None:
    cur.execute(
        "UPDATE recruitment_queue SET status='FILLED', filled_npc_id=?, filled_at=? WHERE id=?;",
        (str(filled_npc_id), str(now), int(ticket_id)),
    )
