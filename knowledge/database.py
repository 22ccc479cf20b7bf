"""
knowledge/database.py — kontrakt bazy wiedzy i uchwyt Db.

KnowledgeBase — źródło klauzul, niezmienników i polityki niejednoznaczności
    konsumowane przez warunki reguł (silnik tylko czyta).
Db — współdzielony uchwyt: równy wyłącznie uchwytom na TEN SAM obiekt
    implementacji z tą samą konfiguracją solvera; może być elementem
    krotki wejścia osądu (hash, ==, <).
"""

from __future__ import annotations

import abc
import functools
from enum import StrEnum

from .terms import Env, Invariant, Predicate, ProgramClause


class KnowledgeBase(abc.ABC):
    """Kontrakt bazy wiedzy."""

    @abc.abstractmethod
    def force_ambiguous(self, env: Env, goal: Predicate) -> bool:
        """
        True gdy solver NIE powinien próbować dowodzić goal, tylko zwrócić
        "niejednoznaczne". goal może zawierać nierozwiązane zmienne.
        """

    @abc.abstractmethod
    def program_clauses(self, predicate: Predicate) -> list[ProgramClause]:
        """
        Nadzbiór klauzul, których można użyć do udowodnienia predicate.
        Wołający musi sam sprawdzić stosowalność (dopasowanie głowy).
        """

    @abc.abstractmethod
    def invariants_for(self, goal: Predicate) -> list[Invariant]:
        """Aksjomaty strukturalne związane z kształtem goal."""


class SolverConfiguration(StrEnum):
    """Strategia dowodzenia. Obecnie jedna wartość."""
    COSLD = "cosld"


@functools.total_ordering
class Db(KnowledgeBase):
    """
    Uchwyt do bazy wiedzy.

    Kopie uchwytu dzielą ten sam obiekt implementacji; porównanie po
    (id(implementacja), konfiguracja).
    """

    __slots__ = ("_kb", "_solver_config")

    def __init__(
        self,
        kb:            KnowledgeBase,
        solver_config: SolverConfiguration = SolverConfiguration.COSLD,
    ) -> None:
        if isinstance(kb, Db):
            kb = kb._kb
        self._kb            = kb
        self._solver_config = solver_config

    @property
    def solver_config(self) -> SolverConfiguration:
        return self._solver_config

    @property
    def kb(self) -> KnowledgeBase:
        return self._kb

    def _fields(self) -> tuple[int, str]:
        return (id(self._kb), self._solver_config.value)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Db):
            return NotImplemented
        return self._fields() == other._fields()

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Db):
            return NotImplemented
        return self._fields() < other._fields()

    def __hash__(self) -> int:
        return hash(self._fields())

    def __copy__(self) -> Db:
        return Db(self._kb, self._solver_config)

    def __deepcopy__(self, memo: dict) -> Db:
        return self.__copy__()

    def __repr__(self) -> str:
        return f"Db(solver_config={self._solver_config.value!r})"

    # ------------------------------------------------------------------
    # Delegacja
    # ------------------------------------------------------------------

    def force_ambiguous(self, env: Env, goal: Predicate) -> bool:
        return self._kb.force_ambiguous(env, goal)

    def program_clauses(self, predicate: Predicate) -> list[ProgramClause]:
        return self._kb.program_clauses(predicate)

    def invariants_for(self, goal: Predicate) -> list[Invariant]:
        return self._kb.invariants_for(goal)
