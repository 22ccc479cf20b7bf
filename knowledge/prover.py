"""
knowledge/prover.py — dowodzenie celów z bazy wiedzy osądami silnika.

prove_goal(db, env, goal)    → Outcome[{Verdict}]
prove_all(db, env, goals)    → Outcome[{Verdict}]   (koniunkcja celów)
prove(kb, goal, env=None)    → Outcome
answer(outcome)              → "yes" | "ambiguous" | "no"

Reguły prove_goal:
  trivial     force_ambiguous(env, goal) → {AMBIGUOUS}, bez sięgania po klauzule
  hypothesis  goal jest hipotezą środowiska
  invariant   hipoteza ⇒ goal przez niezmiennik z invariants_for(hipoteza)
  clause      głowa klauzuli pasuje do goal ! ciało klauzuli dowodliwe

Cykle między klauzulami rozwiązuje punkt stały: cykl bez przypadku bazowego
nie jest udowodniony (najmniejszy punkt stały).
"""

from __future__ import annotations

from enum import StrEnum
from typing import Optional

from judgment import (
    COMMIT,
    ForEach,
    If,
    IfLet,
    Judgment,
    Literal,
    Narrow,
    Outcome,
    Some,
)

from .database import Db, KnowledgeBase
from .terms import Env, Predicate, instantiate, instantiate_all, match_head


class Verdict(StrEnum):
    YES       = "yes"
    AMBIGUOUS = "ambiguous"


def combine(a: Verdict, b: Verdict) -> Verdict:
    """Koniunkcja werdyktów: YES tylko gdy oba YES."""
    if a == Verdict.YES and b == Verdict.YES:
        return Verdict.YES
    return Verdict.AMBIGUOUS


# ---------------------------------------------------------------------------
# prove_goal
# ---------------------------------------------------------------------------

prove_goal = Judgment(
    "prove_goal",
    params=[("db", Db), ("env", Env), ("goal", Predicate)],
    output=Verdict,
    debug=("goal",),
    assertions=[(lambda b: bool(b.goal.pred), "cel musi mieć nazwę predykatu")],
    trivial=[
        (lambda b: b.db.force_ambiguous(b.env, b.goal), lambda b: Verdict.AMBIGUOUS),
    ],
)

prove_goal.add_rule(
    "hypothesis",
    ["_", "env", "goal"],
    [
        If(lambda b: b.goal in b.env.hypotheses, text="goal in env.hypotheses"),
        COMMIT,
    ],
    lambda b: Verdict.YES,
)

prove_goal.add_rule(
    "invariant",
    ["db", "env", "goal"],
    [
        ForEach("hypothesis", lambda b: sorted(b.env.hypotheses)),
        ForEach("invariant", lambda b: b.db.invariants_for(b.hypothesis)),
        IfLet(Some("subst"), lambda b: match_head(b.invariant.premise, b.hypothesis)),
        If(lambda b: instantiate(b.invariant.conclusion, b.subst) == b.goal),
        COMMIT,
    ],
    lambda b: Verdict.YES,
)

prove_goal.add_rule(
    "clause",
    ["db", "env", "goal"],
    [
        ForEach("clause", lambda b: b.db.program_clauses(b.goal), text="db.program_clauses(goal)"),
        IfLet(Some("subst"), lambda b: match_head(b.clause.head, b.goal), text="match_head(clause.head, goal)"),
        COMMIT,
        ForEach(
            "verdict",
            lambda b: prove_all(b.db, b.env, instantiate_all(b.clause.body, b.subst)),
            text="prove_all(db, env, clause.body)",
        ),
    ],
    lambda b: b.verdict,
)


# ---------------------------------------------------------------------------
# prove_all
# ---------------------------------------------------------------------------

prove_all = Judgment(
    "prove_all",
    params=[("db", Db), ("env", Env), ("goals", tuple)],
    output=Verdict,
    debug=("goals",),
)

prove_all.add_rule("empty", ["_", "_", Literal(())], [], lambda b: Verdict.YES)

prove_all.add_rule(
    "cons",
    ["db", "env", Narrow("goals", tuple, where=bool)],
    [
        ForEach("first", lambda b: prove_goal(b.db, b.env, b.goals[0]), text="prove_goal(db, env, goals[0])"),
        ForEach("rest", lambda b: prove_all(b.db, b.env, b.goals[1:]), text="prove_all(db, env, goals[1:])"),
    ],
    lambda b: combine(b.first, b.rest),
)


# ---------------------------------------------------------------------------
# API wysokiego poziomu
# ---------------------------------------------------------------------------

def prove(kb: KnowledgeBase, goal: Predicate, env: Optional[Env] = None) -> Outcome:
    """Dowodzi goal w bazie kb (uchwyt Db tworzony gdy potrzeba)."""
    db = kb if isinstance(kb, Db) else Db(kb)
    return prove_goal(db, env if env is not None else Env(), goal)


def answer(outcome: Outcome) -> str:
    """Streszczenie wyniku: "yes" gdy jakaś derywacja się udała, "ambiguous", albo "no"."""
    if outcome.is_failed:
        return "no"
    if Verdict.YES in outcome:
        return Verdict.YES.value
    return Verdict.AMBIGUOUS.value
