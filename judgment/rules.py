"""
judgment/rules.py — tabele reguł: wzorce, warunki, reguła.

Reguła (odpowiednik zapisu logicznego):

    (warunek 1)
    (warunek 2) !          ← COMMIT: punkt zatwierdzenia dopasowania
    (warunek 3)
    -----------------------
    (konkluzja)

Wzorce (dopasowanie argumentów osądu i IfLet):
  "x" / Bind("x")               wiązanie tożsamościowe
  "_" / Wildcard()              dowolna wartość, bez wiązania
  Narrow("x", Typ, where=...)   zawężenie do wariantu (coercion.downcast)
  Literal(v)                    równość z v
  Some("x")                     dowolna wartość różna od None
  Tuple(p1, p2, ...)            dekompozycja krotki

Warunki:
  If(test)                      test(b) musi być prawdą
  IfLet(pattern, expr)          wzorzec musi pasować do expr(b)
  Let("x", expr)                wiązanie bez ścieżki porażki
  ForEach("x", source)          rozgałęzienie na każdy element źródła
  Assert(test)                  fałsz = błąd fatalny (PreconditionFailed)
  COMMIT                        znacznik punktu zatwierdzenia
"""

from __future__ import annotations

import copy
import linecache
import os
import sys
from collections.abc import Callable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from .coercion import downcast
from .types import SourceLocation

_PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__))


# ---------------------------------------------------------------------------
# Lokalizacja definicji warunku
# ---------------------------------------------------------------------------

def _caller_location() -> SourceLocation:
    """Pierwsza ramka stosu poza pakietem judgment i kodem generowanym (<string>)."""
    frame = sys._getframe(1)
    while frame is not None:
        filename = frame.f_code.co_filename
        if not filename.startswith("<") and os.path.dirname(os.path.abspath(filename)) != _PACKAGE_DIR:
            column = 0
            positions = list(frame.f_code.co_positions())
            idx = frame.f_lasti // 2
            if 0 <= idx < len(positions) and positions[idx][2] is not None:
                column = positions[idx][2] + 1
            return SourceLocation(file=filename, line=frame.f_lineno, column=column)
        frame = frame.f_back
    return SourceLocation()


def _source_text(location: SourceLocation) -> str:
    return linecache.getline(location.file, location.line).strip() or "<?>"


# ---------------------------------------------------------------------------
# Bindings
# ---------------------------------------------------------------------------

class Bindings(Mapping[str, Any]):
    """
    Niemutowalne wiązania nazw w trakcie ewaluacji reguły.

    Dostęp: b.n albo b["n"]. Rozszerzenie: b.extend(x=...) → nowe Bindings.
    """

    __slots__ = ("_values",)

    def __init__(self, values: Mapping[str, Any] | None = None) -> None:
        object.__setattr__(self, "_values", dict(values or {}))

    def __getitem__(self, name: str) -> Any:
        return self._values[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __getattr__(self, name: str) -> Any:
        try:
            return self._values[name]
        except KeyError:
            raise AttributeError(f"Brak wiązania '{name}'") from None

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("Bindings są niemutowalne — użyj extend()")

    def extend(self, values: Mapping[str, Any] | None = None, **more: Any) -> Bindings:
        merged = dict(self._values)
        merged.update(values or {})
        merged.update(more)
        merged.pop("_", None)
        return Bindings(merged)

    def __repr__(self) -> str:
        return f"Bindings({self._values!r})"


# ---------------------------------------------------------------------------
# Wzorce
# ---------------------------------------------------------------------------

class Pattern:
    """Wzorzec strukturalny: match(value) → dict wiązań albo None."""

    def match(self, value: Any) -> dict[str, Any] | None:
        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class Bind(Pattern):
    name: str

    def match(self, value: Any) -> dict[str, Any] | None:
        return {self.name: value}

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True, slots=True)
class Wildcard(Pattern):

    def match(self, value: Any) -> dict[str, Any] | None:
        return {}

    def __str__(self) -> str:
        return "_"


@dataclass(frozen=True, slots=True)
class Narrow(Pattern):
    """Zawężenie do wariantu; where — dodatkowy warunek na zawężonej wartości."""
    name:    str
    variant: type
    where:   Callable[[Any], bool] | None = None

    def match(self, value: Any) -> dict[str, Any] | None:
        narrowed = downcast(value, self.variant)
        if narrowed is None:
            return None
        if self.where is not None and not self.where(narrowed):
            return None
        return {} if self.name == "_" else {self.name: narrowed}

    def __str__(self) -> str:
        return f"{self.name}: {self.variant.__name__}"


@dataclass(frozen=True, slots=True)
class Literal(Pattern):
    value: Any

    def match(self, value: Any) -> dict[str, Any] | None:
        return {} if value == self.value else None

    def __str__(self) -> str:
        return repr(self.value)


@dataclass(frozen=True, slots=True)
class Some(Pattern):
    name: str

    def match(self, value: Any) -> dict[str, Any] | None:
        if value is None:
            return None
        return {} if self.name == "_" else {self.name: value}

    def __str__(self) -> str:
        return f"Some({self.name})"


class Tuple(Pattern):
    __slots__ = ("items",)

    def __init__(self, *items: Pattern | str) -> None:
        self.items = tuple(as_pattern(p) for p in items)

    def match(self, value: Any) -> dict[str, Any] | None:
        if not isinstance(value, tuple) or len(value) != len(self.items):
            return None
        bound: dict[str, Any] = {}
        for pat, component in zip(self.items, value):
            m = pat.match(component)
            if m is None:
                return None
            bound.update(m)
        return bound

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Tuple) and self.items == other.items

    def __hash__(self) -> int:
        return hash(self.items)

    def __str__(self) -> str:
        return "(" + ", ".join(str(p) for p in self.items) + ")"


def as_pattern(p: Pattern | str) -> Pattern:
    """'x' → Bind('x'), '_' → Wildcard(); wzorce bez zmian."""
    if isinstance(p, Pattern):
        return p
    if p == "_":
        return Wildcard()
    return Bind(p)


# ---------------------------------------------------------------------------
# Warunki
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Condition:
    """Baza warunków: pamięta miejsce definicji (plik/linia/kolumna)."""
    location: SourceLocation = field(default_factory=_caller_location, kw_only=True, compare=False)


@dataclass(frozen=True)
class If(Condition):
    test: Callable[[Bindings], bool]
    text: str | None = None

    def describe(self) -> str:
        return self.text or _source_text(self.location)


@dataclass(frozen=True)
class IfLet(Condition):
    pattern: Pattern | str
    expr:    Callable[[Bindings], Any]
    text:    str | None = None

    def describe(self) -> str:
        return self.text or _source_text(self.location)

    def match(self, value: Any) -> dict[str, Any] | None:
        # dopasowanie na kopii, wzorzec nie może zmienić źródła
        return as_pattern(self.pattern).match(copy.copy(value))


@dataclass(frozen=True)
class Let(Condition):
    name: str
    expr: Callable[[Bindings], Any]


@dataclass(frozen=True)
class ForEach(Condition):
    name:   str
    source: Callable[[Bindings], Any]
    text:   str | None = None

    def describe(self) -> str:
        return self.text or _source_text(self.location)


@dataclass(frozen=True)
class Assert(Condition):
    test: Callable[[Bindings], bool]
    text: str | None = None

    def describe(self) -> str:
        return self.text or _source_text(self.location)


class _CommitPoint:
    """Znacznik punktu zatwierdzenia dopasowania ('!')."""

    _instance: _CommitPoint | None = None

    def __new__(cls) -> _CommitPoint:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "COMMIT"


COMMIT = _CommitPoint()


# ---------------------------------------------------------------------------
# Reguła
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Rule:
    """
    Reguła osądu.

    - name:         nazwa (w diagnostyce)
    - patterns:     wzorce argumentów, po jednym na parametr osądu
    - conditions:   warunki w kolejności; nie zawierają znacznika COMMIT
    - conclusion:   funkcja wiązań → wartość wyjścia
    - commit_index: liczba warunków przed COMMIT (0 = raportuj wszystkie porażki)
    """
    name:         str
    patterns:     tuple[Pattern, ...]
    conditions:   tuple[Condition, ...]
    conclusion:   Callable[[Bindings], Any]
    commit_index: int = 0

    @classmethod
    def build(
        cls,
        name:       str,
        patterns:   Sequence[Pattern | str],
        conditions: Sequence[Condition | _CommitPoint],
        conclusion: Callable[[Bindings], Any],
    ) -> Rule:
        """Buduje regułę z listy warunków, w której może wystąpić jeden COMMIT."""
        conds:  list[Condition] = []
        commit: int | None      = None
        for c in conditions:
            if c is COMMIT:
                if commit is not None:
                    raise ValueError(f"Reguła '{name}': więcej niż jeden punkt COMMIT")
                commit = len(conds)
            elif isinstance(c, Condition):
                conds.append(c)
            else:
                raise TypeError(f"Reguła '{name}': nieznany warunek {c!r}")
        return cls(
            name=name,
            patterns=tuple(as_pattern(p) for p in patterns),
            conditions=tuple(conds),
            conclusion=conclusion,
            commit_index=commit or 0,
        )

    def match_input(self, input: tuple[Any, ...]) -> Bindings | None:
        """Dopasowuje wzorce do krotki wejścia; None = reguła nie ma zastosowania."""
        bound: dict[str, Any] = {}
        for pat, value in zip(self.patterns, input):
            m = pat.match(value)
            if m is None:
                return None
            bound.update(m)
        return Bindings(bound)

    def __str__(self) -> str:
        return f"{self.name}({', '.join(str(p) for p in self.patterns)})"
