"""
judgment — rdzeń silnika osądów: punkt stały, reguły, diagnostyka porażek.

Publiczne API:
  Judgment(name, params=..., output=..., rules=...)   osąd (wywoływalny → Outcome)
  Rule.build(name, patterns, conditions, conclusion)  reguła z tabeli warunków
  If, IfLet, Let, ForEach, Assert, COMMIT             warunki reguł
  Bind, Wildcard, Narrow, Literal, Some, Tuple        wzorce
  Outcome, FailedJudgment, FailedRule                 wynik i diagnostyka
  IfFalse, IfLetDidNotMatch, IterationSourceError     przyczyny porażki reguły
  FixedPointStack, fixed_point                        punkt stały z przerywaniem cykli
  downcast, upcast                                    koercja wartości
  configure_logging, span, TRACE                      zdarzenia diagnostyczne
"""

from .coercion    import downcast, upcast
from .engine      import Judgment, Param
from .errors      import (
    EmptyProvenSetError,
    JudgmentError,
    JudgmentFailedError,
    PreconditionFailed,
)
from .fixed_point import FixedPointStack, fixed_point
from .rules       import (
    COMMIT,
    Assert,
    Bind,
    Bindings,
    ForEach,
    If,
    IfLet,
    Let,
    Literal,
    Narrow,
    Pattern,
    Rule,
    Some,
    Tuple,
    Wildcard,
)
from .trace       import TRACE, SpanFilter, configure_logging, current_span, get_logger, span
from .types       import (
    FailedJudgment,
    FailedRule,
    IfFalse,
    IfLetDidNotMatch,
    IterationSourceError,
    Outcome,
    SourceLocation,
    try_into_iter,
)

__all__ = [
    # engine
    "Judgment",
    "Param",
    # rules
    "Rule",
    "If",
    "IfLet",
    "Let",
    "ForEach",
    "Assert",
    "COMMIT",
    "Bindings",
    "Pattern",
    "Bind",
    "Wildcard",
    "Narrow",
    "Literal",
    "Some",
    "Tuple",
    # types
    "Outcome",
    "FailedJudgment",
    "FailedRule",
    "IfFalse",
    "IfLetDidNotMatch",
    "IterationSourceError",
    "SourceLocation",
    "try_into_iter",
    # fixed point
    "FixedPointStack",
    "fixed_point",
    # coercion
    "downcast",
    "upcast",
    # errors
    "JudgmentError",
    "PreconditionFailed",
    "EmptyProvenSetError",
    "JudgmentFailedError",
    # trace
    "TRACE",
    "configure_logging",
    "get_logger",
    "current_span",
    "SpanFilter",
    "span",
]
