"""
judgment/fixed_point.py — stos wywołań i najmniejszy punkt stały (iteracja Kleene'ego).

Każdy rodzaj osądu ma własny FixedPointStack. Wywołanie fixed_point():
  1. wejście już na stosie (wywołanie cykliczne) → zwraca bieżące przybliżenie
     (początkowo puste) zamiast rekurencji;
  2. w przeciwnym razie push(wejście, domyślne) i iteracja next_value aż
     wynik rundy == zapisane przybliżenie;
  3. pop i zwrot wartości.

Zakończenie iteracji dla nieskończenie rosnących dziedzin jest obowiązkiem
autora reguł — silnik nie ogranicza liczby rund.
"""

from __future__ import annotations

from collections.abc import Callable, Hashable
from contextlib import AbstractContextManager
from dataclasses import dataclass
from typing import Any

from .trace import get_logger

log = get_logger("fixed_point")


# ---------------------------------------------------------------------------
# Stos
# ---------------------------------------------------------------------------

@dataclass(slots=True)
class StackEntry:
    """
    Wpis stosu: wejście + bieżące przybliżenie wyniku.

    has_dependents — czy jakieś wywołanie cykliczne odczytało przybliżenie
    w trakcie bieżącej rundy.
    """
    input:          Hashable
    value:          Any
    has_dependents: bool = False


class FixedPointStack:
    """Stos wejść aktualnie ewaluowanych dla jednego rodzaju osądu."""

    def __init__(self) -> None:
        self._entries: list[StackEntry]         = []
        self._index:   dict[Hashable, StackEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, input: Hashable) -> bool:
        return input in self._index

    def search(self, input: Hashable) -> Any | None:
        """
        Zwraca przybliżenie dla wejścia na stosie (i oznacza zależność) albo None.

        Przybliżenie samo może być None; obecność sprawdza `input in stack`.
        """
        entry = self._index.get(input)
        if entry is None:
            return None
        entry.has_dependents = True
        return entry.value

    def push(self, input: Hashable, value: Any) -> None:
        if input in self._index:
            raise ValueError(f"Wejście już jest na stosie: {input!r}")
        entry = StackEntry(input=input, value=value)
        self._entries.append(entry)
        self._index[input] = entry

    def update(self, input: Hashable, value: Any) -> bool:
        """
        Zapisuje nowe przybliżenie. Zwraca True gdy trzeba iterować dalej:
        wartość się zmieniła i ktoś od niej zależał.
        """
        entry = self._index[input]
        changed = entry.value != value
        had_dependents = entry.has_dependents
        entry.value = value
        entry.has_dependents = False
        return changed and had_dependents

    def pop(self, input: Hashable) -> Any:
        entry = self._entries.pop()
        if entry.input != input:
            raise ValueError(f"Niespójny stos: oczekiwano {input!r}, zdjęto {entry.input!r}")
        del self._index[input]
        return entry.value


# ---------------------------------------------------------------------------
# Punkt stały
# ---------------------------------------------------------------------------

def fixed_point(
    stack:      FixedPointStack,
    input:      Hashable,
    *,
    default:    Callable[[Hashable], Any],
    next_value: Callable[[Hashable], Any],
    span:       Callable[[Hashable], AbstractContextManager[Any]],
) -> Any:
    """
    Najmniejszy punkt stały next_value dla input, z przerywaniem cykli.

    Args:
        stack:      stos rodzaju osądu (izolowany per rodzaj)
        input:      wejście (hashowalne, porównywalne)
        default:    wartość początkowa przybliżenia (zbiór pusty)
        next_value: jedna runda ewaluacji reguł
        span:       fabryka spanu diagnostycznego dla wejścia

    Returns:
        Ustalona wartość (ostatnie przybliżenie).
    """
    with span(input):
        if input in stack:
            approx = stack.search(input)
            log.debug("wywołanie cykliczne — zwracam przybliżenie %r", approx)
            return approx

        stack.push(input, default(input))
        try:
            rounds = 0
            while True:
                rounds += 1
                value = next_value(input)
                log.debug("runda %d: %r", rounds, value)
                if not stack.update(input, value):
                    break
        finally:
            result = stack.pop(input)

        log.debug("punkt stały po %d rundach", rounds)
        return result
