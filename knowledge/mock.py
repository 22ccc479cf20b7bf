"""
knowledge/mock.py — baza wiedzy w pamięci (testy, pliki JSON z programem).

program_clauses zwraca wszystkie klauzule o tej samej nazwie predykatu
(nadzbiór — arność i stałe sprawdza wołający). force_ambiguous jest prawdą
dla celów nieuziemionych oraz celów wpisanych do `ambiguous`.
"""

from __future__ import annotations

from collections.abc import Iterable

from .database import KnowledgeBase
from .terms import Env, Invariant, Predicate, ProgramClause


class MockDatabase(KnowledgeBase):

    def __init__(
        self,
        clauses:    Iterable[ProgramClause] = (),
        invariants: Iterable[Invariant] = (),
        ambiguous:  Iterable[Predicate] = (),
    ) -> None:
        self._clauses:    dict[str, list[ProgramClause]] = {}
        self._invariants: dict[str, list[Invariant]]     = {}
        self._ambiguous:  frozenset[Predicate]           = frozenset(ambiguous)
        for c in clauses:
            self.add_clause(c)
        for i in invariants:
            self.add_invariant(i)

    def add_clause(self, clause: ProgramClause) -> None:
        self._clauses.setdefault(clause.head.pred, []).append(clause)

    def add_invariant(self, invariant: Invariant) -> None:
        self._invariants.setdefault(invariant.premise.pred, []).append(invariant)

    @property
    def clauses(self) -> list[ProgramClause]:
        return [c for cs in self._clauses.values() for c in cs]

    # ------------------------------------------------------------------

    def force_ambiguous(self, env: Env, goal: Predicate) -> bool:
        return not goal.is_ground() or goal in self._ambiguous

    def program_clauses(self, predicate: Predicate) -> list[ProgramClause]:
        return list(self._clauses.get(predicate.pred, []))

    def invariants_for(self, goal: Predicate) -> list[Invariant]:
        return list(self._invariants.get(goal.pred, []))

    def __repr__(self) -> str:
        return (
            f"MockDatabase(clauses={sum(len(v) for v in self._clauses.values())}, "
            f"invariants={sum(len(v) for v in self._invariants.values())})"
        )
