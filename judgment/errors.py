"""
judgment/errors.py — wyjątki silnika osądów.

Dwie klasy błędów:
  - fatalne (błąd programisty): PreconditionFailed, EmptyProvenSetError —
    przerywają ewaluację, nie są częścią Outcome;
  - logiczna niewyprowadzalność: reprezentowana przez Outcome.failed(...),
    NIE rzucana. JudgmentFailedError służy tylko wołającemu, który chce
    zamienić porażkę na wyjątek (Outcome.check_proven()).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .types import FailedJudgment


class JudgmentError(Exception):
    """Bazowa klasa wyjątków pakietu judgment."""


class PreconditionFailed(JudgmentError, AssertionError):
    """Fałszywa asercja (warunek wstępny) osądu lub warunku Assert w regule."""

    def __init__(self, judgment: str, text: str) -> None:
        super().__init__(f"Naruszony warunek wstępny osądu '{judgment}': {text}")
        self.judgment = judgment
        self.text     = text


class EmptyProvenSetError(JudgmentError, ValueError):
    """Próba zbudowania Outcome.proven z pustym zbiorem."""


class JudgmentFailedError(JudgmentError):
    """Osąd nie został udowodniony; niesie pełną diagnostykę."""

    def __init__(self, failure: FailedJudgment) -> None:
        super().__init__(str(failure))
        self.failure = failure
