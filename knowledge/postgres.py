"""
knowledge/postgres.py — baza wiedzy w PostgreSQL (tabele clause i invariant).

Schemat: db/schema.sql. Klauzule i niezmienniki czytane są leniwie, per nazwa
predykatu, i cache'owane w obiekcie (baza jest tylko do odczytu z punktu
widzenia silnika).

Publiczne API:
  PgDatabase(conn, program=None)
  atom_from_dict(d)  → Predicate
"""

from __future__ import annotations

import json
from typing import Any, Optional

import psycopg2.extensions

from judgment.trace import get_logger

from .database import KnowledgeBase
from .terms import Env, Invariant, Predicate, ProgramClause

log = get_logger("knowledge.postgres")


def atom_from_dict(d: dict) -> Predicate:
    return Predicate(
        pred=str(d.get("pred", "")),
        args=tuple(str(a) for a in d.get("args", [])),
    )


def _json(raw: Any) -> Any:
    # psycopg2 dekoduje jsonb sam; kolumny tekstowe trzeba zdekodować
    if isinstance(raw, str):
        return json.loads(raw)
    return raw


class PgDatabase(KnowledgeBase):
    """
    Baza wiedzy czytana z PostgreSQL.

    Args:
        conn:    otwarte połączenie psycopg2
        program: opcjonalny filtr po kolumnie program
    """

    def __init__(
        self,
        conn:    psycopg2.extensions.connection,
        program: Optional[str] = None,
    ) -> None:
        self._conn       = conn
        self._program    = program
        self._clauses:    dict[str, list[ProgramClause]] = {}
        self._invariants: dict[str, list[Invariant]]     = {}

    def _where(self, column: str, value: str) -> tuple[str, list]:
        wheres = [f"{column} = %s"]
        params: list = [value]
        if self._program:
            wheres.append("program = %s")
            params.append(self._program)
        return "WHERE " + " AND ".join(wheres), params

    # ------------------------------------------------------------------

    def force_ambiguous(self, env: Env, goal: Predicate) -> bool:
        return not goal.is_ground()

    def program_clauses(self, predicate: Predicate) -> list[ProgramClause]:
        cached = self._clauses.get(predicate.pred)
        if cached is not None:
            return list(cached)

        where, params = self._where("head_pred", predicate.pred)
        sql = f"SELECT clause_id, head_pred, head_args, body FROM clause {where} ORDER BY id"
        with self._conn.cursor() as cur:
            cur.execute(sql, params)
            rows = cur.fetchall()

        clauses: list[ProgramClause] = []
        for clause_id, head_pred, head_args_raw, body_raw in rows:
            clauses.append(ProgramClause(
                head=Predicate(head_pred, tuple(str(a) for a in _json(head_args_raw) or [])),
                body=tuple(atom_from_dict(d) for d in _json(body_raw) or []),
                name=clause_id or "",
            ))

        log.debug("wczytano %d klauzul dla %s", len(clauses), predicate.pred)
        self._clauses[predicate.pred] = clauses
        return list(clauses)

    def invariants_for(self, goal: Predicate) -> list[Invariant]:
        cached = self._invariants.get(goal.pred)
        if cached is not None:
            return list(cached)

        where, params = self._where("premise_pred", goal.pred)
        sql = f"SELECT invariant_id, premise, conclusion FROM invariant {where} ORDER BY id"
        with self._conn.cursor() as cur:
            cur.execute(sql, params)
            rows = cur.fetchall()

        invariants = [
            Invariant(
                premise=atom_from_dict(_json(premise_raw)),
                conclusion=atom_from_dict(_json(conclusion_raw)),
                name=inv_id or "",
            )
            for inv_id, premise_raw, conclusion_raw in rows
        ]
        log.debug("wczytano %d niezmienników dla %s", len(invariants), goal.pred)
        self._invariants[goal.pred] = invariants
        return list(invariants)

    def __repr__(self) -> str:
        return f"PgDatabase(program={self._program!r})"
