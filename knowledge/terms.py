"""
knowledge/terms.py — termy bazy wiedzy: predykaty, klauzule, niezmienniki, środowisko.

Zmienne zaczynają się od '?', stałe nie. Dopasowanie jest jednostronne:
zmienne mogą wystąpić tylko we wzorcu (głowa klauzuli / przesłanka
niezmiennika), cel jest traktowany dosłownie.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Optional

Substitution = dict[str, str]


def is_var(arg: str) -> bool:
    return arg.startswith("?")


# ---------------------------------------------------------------------------
# Predicate
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True, order=True)
class Predicate:
    """Predykat atomowy: pred(arg1, arg2, ...)."""
    pred: str
    args: tuple[str, ...] = ()

    def __str__(self) -> str:
        return f"{self.pred}({', '.join(self.args)})" if self.args else self.pred

    @property
    def shape(self) -> tuple[str, int]:
        """Kształt predykatu: (nazwa, arność)."""
        return (self.pred, len(self.args))

    def is_ground(self) -> bool:
        """Zwraca True gdy wszystkie argumenty są stałymi (bez prefiksu '?')."""
        return not any(is_var(a) for a in self.args)


# ---------------------------------------------------------------------------
# ProgramClause / Invariant
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class ProgramClause:
    """Klauzula Horna: head :- body. Pusta lista body = fakt."""
    head: Predicate
    body: tuple[Predicate, ...] = ()
    name: str = ""

    def __str__(self) -> str:
        label = f"[{self.name}] " if self.name else ""
        if not self.body:
            return f"{label}{self.head}."
        return f"{label}{self.head} :- {', '.join(str(a) for a in self.body)}."

    @property
    def is_fact(self) -> bool:
        return len(self.body) == 0


@dataclass(frozen=True, slots=True)
class Invariant:
    """
    Aksjomat strukturalny: premise ⇒ conclusion (zmienne wspólne).

    Np. is_copy(?T) ⇒ is_clone(?T): z hipotezy is_copy(u32) wynika is_clone(u32).
    """
    premise:    Predicate
    conclusion: Predicate
    name:       str = ""

    def __str__(self) -> str:
        label = f"[{self.name}] " if self.name else ""
        return f"{label}{self.premise} => {self.conclusion}"


# ---------------------------------------------------------------------------
# Env
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Env:
    """Środowisko dowodu: zbiór hipotez przyjętych za prawdziwe."""
    hypotheses: frozenset[Predicate] = field(default_factory=frozenset)

    @classmethod
    def of(cls, hypotheses: Iterable[Predicate]) -> Env:
        return cls(hypotheses=frozenset(hypotheses))

    def with_hypotheses(self, more: Iterable[Predicate]) -> Env:
        return Env(hypotheses=self.hypotheses | frozenset(more))


# ---------------------------------------------------------------------------
# Dopasowanie (substitutions)
# ---------------------------------------------------------------------------

def match_head(pattern: Predicate, goal: Predicate) -> Optional[Substitution]:
    """
    Dopasowuje wzorzec (ze zmiennymi) do celu. Zwraca podstawienie lub None.

    Zmienne celu traktowane są jak stałe — to nie jest pełna unifikacja.
    Wartości podstawienia pochodzą z celu, więc nie są ponownie rozwijane.
    """
    if pattern.shape != goal.shape:
        return None
    s: Substitution = {}
    for p, g in zip(pattern.args, goal.args):
        if is_var(p):
            bound = s.setdefault(p, g)
            if bound != g:
                return None  # ta sama zmienna, różne wartości
        elif p != g:
            return None  # clash stałych
    return s


def instantiate(atom: Predicate, subst: Substitution) -> Predicate:
    """Podstawia zmienne (jeden krok); niezwiązane zmienne zostają (cel nieuziemiony)."""
    return Predicate(atom.pred, tuple(subst.get(a, a) if is_var(a) else a for a in atom.args))


def instantiate_all(atoms: Iterable[Predicate], subst: Substitution) -> tuple[Predicate, ...]:
    return tuple(instantiate(a, subst) for a in atoms)
