"""
judgment/types.py — wynik osądu (Outcome) i struktury diagnostyczne.

Outcome          — udowodniony niepusty zbiór wyjść albo porażka (FailedJudgment)
FailedJudgment   — wejście osądu + zbiór FailedRule z ostatniej rundy
FailedRule       — reguła, krok, lokalizacja w źródle, przyczyna
RuleFailureCause — IfFalse | IfLetDidNotMatch | IterationSourceError
try_into_iter    — konwersja źródła warunku ForEach na sekwencję
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any, TypeAlias

from .errors import EmptyProvenSetError, JudgmentFailedError

# Krotka argumentów osądu (po upcast): klucz memoizacji i element zbioru
JudgmentInput: TypeAlias = tuple[Any, ...]


# ---------------------------------------------------------------------------
# Lokalizacja w źródle
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True, order=True)
class SourceLocation:
    """Miejsce zdefiniowania warunku: plik, linia, kolumna (1-based)."""
    file:   str = "<unknown>"
    line:   int = 0
    column: int = 0

    def __str__(self) -> str:
        return f"{self.file}:{self.line}:{self.column}"


# ---------------------------------------------------------------------------
# Przyczyny porażki reguły
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class IfFalse:
    """Warunek logiczny dał fałsz."""
    expr: str

    def __str__(self) -> str:
        return f"warunek dał fałsz: `{self.expr}`"


@dataclass(frozen=True, slots=True)
class IfLetDidNotMatch:
    """Wzorzec strukturalny nie pasuje do wyliczonej wartości."""
    pattern: str
    value:   str

    def __str__(self) -> str:
        return f"wzorzec `{self.pattern}` nie pasuje do wartości `{self.value}`"


@dataclass(frozen=True, slots=True)
class IterationSourceError:
    """
    Źródła iteracji nie da się zamienić na sekwencję.

    - expr:     tekst wyrażenia źródła
    - reason:   krótki opis (brak wartości, wynik-błąd, nie-iterowalne, ...)
    - judgment: zagnieżdżona porażka, gdy źródłem był nieudowodniony osąd
    """
    expr:     str
    reason:   str
    judgment: FailedJudgment | None = None

    def __str__(self) -> str:
        if self.judgment is not None:
            return f"nie udało się udowodnić `{self.expr}`"
        return f"nie można iterować po `{self.expr}`: {self.reason}"


RuleFailureCause: TypeAlias = IfFalse | IfLetDidNotMatch | IterationSourceError


# ---------------------------------------------------------------------------
# FailedRule / FailedJudgment
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class FailedRule:
    """Reguła, która zaczęła się dopasowywać, ale nie doszła do konkluzji."""
    rule:     str
    step:     int
    location: SourceLocation
    cause:    RuleFailureCause

    def sort_key(self) -> tuple[str, int, str]:
        return (self.rule, self.step, str(self.cause))

    def __str__(self) -> str:
        return (
            f'reguła "{self.rule}" nie powiodła się w kroku #{self.step} '
            f"({self.location}), ponieważ {self.cause}"
        )


@dataclass(frozen=True, slots=True)
class FailedJudgment:
    """
    Diagnostyka nieudowodnionego osądu.

    - judgment:     nazwa osądu
    - input:        krotka argumentów
    - debug:        tekst wybranych pól wejścia (np. "n=3")
    - failed_rules: porażki reguł z ostatniej rundy punktu stałego
    """
    judgment:     str
    input:        JudgmentInput
    debug:        str = ""
    failed_rules: frozenset[FailedRule] = field(default_factory=frozenset)

    def header(self) -> str:
        return f"{self.judgment} {{ {self.debug} }}" if self.debug else self.judgment

    def sorted_rules(self) -> list[FailedRule]:
        return sorted(self.failed_rules, key=FailedRule.sort_key)

    def render(self, indent: int = 0) -> list[str]:
        """Renderuje drzewo porażek (z zagnieżdżonymi osądami) jako linie tekstu."""
        pad = "  " * indent
        if not self.failed_rules:
            return [f"{pad}osąd `{self.header()}` nie powiódł się: żadna reguła nie ma zastosowania"]

        lines = [f"{pad}osąd `{self.header()}` nie powiódł się w regułach:"]
        for fr in self.sorted_rules():
            lines.append(f"{pad}  {fr}")
            nested = getattr(fr.cause, "judgment", None)
            if nested is not None:
                lines.extend(nested.render(indent + 2))
        return lines

    def __str__(self) -> str:
        return "\n".join(self.render())


# ---------------------------------------------------------------------------
# Outcome
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Outcome:
    """
    Wynik osądu: Proven(items) z niepustym zbiorem albo Failed(failure).

    Konstruować przez Outcome.proven(...) / Outcome.failed(...).
    """
    items:   frozenset[Any] | None = None
    failure: FailedJudgment | None = None

    def __post_init__(self) -> None:
        if (self.items is None) == (self.failure is None):
            raise ValueError("Outcome musi mieć dokładnie jedno z: items, failure")
        if self.items is not None and not self.items:
            raise EmptyProvenSetError("Outcome.proven wymaga niepustego zbioru wyjść")

    @classmethod
    def proven(cls, items: Iterable[Any]) -> Outcome:
        return cls(items=frozenset(items))

    @classmethod
    def failed(
        cls,
        input:        JudgmentInput,
        failed_rules: Iterable[FailedRule] = (),
        *,
        judgment: str = "",
        debug:    str = "",
    ) -> Outcome:
        return cls(failure=FailedJudgment(
            judgment=judgment,
            input=tuple(input),
            debug=debug,
            failed_rules=frozenset(failed_rules),
        ))

    # ------------------------------------------------------------------

    @property
    def is_proven(self) -> bool:
        return self.items is not None

    @property
    def is_failed(self) -> bool:
        return self.failure is not None

    def check_proven(self) -> frozenset[Any]:
        """Zwraca zbiór wyjść albo rzuca JudgmentFailedError z diagnostyką."""
        if self.failure is not None:
            raise JudgmentFailedError(self.failure)
        return self.items  # type: ignore[return-value]

    def __contains__(self, value: object) -> bool:
        return self.items is not None and value in self.items

    def __try_into_iter__(self, expr: str) -> Iterable[Any] | IterationSourceError:
        if self.failure is not None:
            return IterationSourceError(expr=expr, reason="osąd nieudowodniony", judgment=self.failure)
        return self.items  # type: ignore[return-value]

    def __str__(self) -> str:
        if self.failure is not None:
            return str(self.failure)
        return "{" + ", ".join(sorted(repr(i) for i in self.items)) + "}"  # type: ignore[union-attr]


# ---------------------------------------------------------------------------
# Konwersja źródła iteracji
# ---------------------------------------------------------------------------

def try_into_iter(value: Any, expr: str) -> Iterable[Any] | IterationSourceError:
    """
    Zamienia źródło warunku ForEach na sekwencję kandydatów.

    Zwraca IterationSourceError gdy:
      - value jest None (brak wartości opcjonalnej),
      - value jest wyjątkiem (wynik-błąd),
      - value jest nieudowodnionym Outcome (z zagnieżdżoną porażką),
      - value nie jest iterowalne.
    Obiekty mogą zdefiniować własne __try_into_iter__(expr).
    """
    hook = getattr(value, "__try_into_iter__", None)
    if hook is not None:
        return hook(expr)
    if value is None:
        return IterationSourceError(expr=expr, reason="brak wartości (None)")
    if isinstance(value, BaseException):
        return IterationSourceError(expr=expr, reason=f"wynik-błąd: {value!r}")
    if not isinstance(value, Iterable):
        return IterationSourceError(expr=expr, reason=f"{type(value).__name__} nie jest iterowalne")
    return value
