"""
judgment/engine.py — osąd (Judgment) i interpreter łańcucha warunków reguł.

Przebieg wywołania osądu:
  1. upcast argumentów do typów parametrów
  2. asercje (fałsz → PreconditionFailed, błąd fatalny)
  3. ścieżki trywialne (prawda → Outcome.proven({wynik}) bez reguł)
  4. fixed_point(...) — w każdej rundzie wszystkie reguły od zera
  5. niepusty zbiór → Outcome.proven, pusty → Outcome.failed z porażkami
     reguł z OSTATNIEJ rundy

Użycie::

    is_even = Judgment("is_even", params=[("n", int)], output=int, debug=("n",))
    is_even.add_rule("zero", ["n"], [If(lambda b: b.n == 0)], lambda b: b.n)
    is_even.add_rule(
        "step",
        [Narrow("n", int, where=lambda n: n >= 0)],
        [ForEach("_", lambda b: is_even(b.n - 2))],
        lambda b: b.n,
    )
    is_even(4)   # → Outcome(items=frozenset({4}))
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Any

from .coercion import upcast
from .errors import PreconditionFailed
from .fixed_point import FixedPointStack, fixed_point
from .rules import (
    Assert,
    Bindings,
    Condition,
    ForEach,
    If,
    IfLet,
    Let,
    Pattern,
    Rule,
    _CommitPoint,
)
from .trace import TRACE, get_logger, span
from .types import (
    FailedRule,
    IfFalse,
    IfLetDidNotMatch,
    IterationSourceError,
    JudgmentInput,
    Outcome,
    RuleFailureCause,
    try_into_iter,
)

log = get_logger("engine")


# ---------------------------------------------------------------------------
# Parametry
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Param:
    """Parametr osądu: nazwa + typ (None = dowolny)."""
    name: str
    type: type | None = None


def _as_param(p: Param | tuple[str, type | None] | str) -> Param:
    if isinstance(p, Param):
        return p
    if isinstance(p, str):
        return Param(p)
    name, typ = p
    return Param(name, typ)


# ---------------------------------------------------------------------------
# Judgment
# ---------------------------------------------------------------------------

class Judgment:
    """
    Nazwana relacja nad typowanym wejściem, dowodzona regułami.

    Każdy osąd ma własny, izolowany stos punktu stałego trzymany w ContextVar
    (lokalny dla wątku/zadania), tworzony przy wejściu z zewnątrz i usuwany
    przy powrocie do wołającego najwyższego poziomu.
    """

    def __init__(
        self,
        name:       str,
        *,
        params:     Sequence[Param | tuple[str, type | None] | str],
        output:     type | None = None,
        debug:      Sequence[str] | None = None,
        assertions: Sequence[Callable[[Bindings], bool] | tuple[Callable[[Bindings], bool], str]] = (),
        trivial:    Sequence[tuple[Callable[[Bindings], bool], Callable[[Bindings], Any]]] = (),
        rules:      Sequence[Rule] = (),
    ) -> None:
        self.name   = name
        self.params = tuple(_as_param(p) for p in params)
        self.output = output
        self.debug  = tuple(debug) if debug is not None else tuple(p.name for p in self.params)

        names = {p.name for p in self.params}
        unknown = [d for d in self.debug if d not in names]
        if unknown:
            raise ValueError(f"Osąd '{name}': nieznane pola debug {unknown}")

        self._assertions: list[tuple[Callable[[Bindings], bool], str]] = []
        for a in assertions:
            if isinstance(a, tuple):
                self._assertions.append(a)
            else:
                self._assertions.append((a, getattr(a, "__name__", repr(a))))
        self._trivial: list[tuple[Callable[[Bindings], bool], Callable[[Bindings], Any]]] = list(trivial)
        self._rules:   list[Rule] = []
        for r in rules:
            self._register(r)

        self._stack: ContextVar[FixedPointStack | None] = ContextVar(f"judgment_stack_{name}", default=None)

    # ------------------------------------------------------------------
    # Deklaracja
    # ------------------------------------------------------------------

    @property
    def rules(self) -> tuple[Rule, ...]:
        return tuple(self._rules)

    def _register(self, rule: Rule) -> Rule:
        if len(rule.patterns) != len(self.params):
            raise ValueError(
                f"Osąd '{self.name}', reguła '{rule.name}': "
                f"{len(rule.patterns)} wzorców, a parametrów {len(self.params)}"
            )
        self._rules.append(rule)
        return rule

    def add_rule(
        self,
        name:       str,
        patterns:   Sequence[Pattern | str],
        conditions: Sequence[Condition | _CommitPoint],
        conclusion: Callable[[Bindings], Any],
    ) -> Rule:
        """Dodaje regułę (kolejność dodawania = kolejność stosowania)."""
        return self._register(Rule.build(name, patterns, conditions, conclusion))

    def rule(
        self,
        name:       str,
        patterns:   Sequence[Pattern | str],
        *conditions: Condition | _CommitPoint,
    ) -> Callable[[Callable[[Bindings], Any]], Callable[[Bindings], Any]]:
        """Dekorator: udekorowana funkcja jest konkluzją reguły."""
        def decorator(conclusion: Callable[[Bindings], Any]) -> Callable[[Bindings], Any]:
            self.add_rule(name, patterns, conditions, conclusion)
            return conclusion
        return decorator

    def add_trivial(self, condition: Callable[[Bindings], bool], result: Callable[[Bindings], Any]) -> None:
        self._trivial.append((condition, result))

    def add_assertion(self, test: Callable[[Bindings], bool], text: str | None = None) -> None:
        self._assertions.append((test, text or getattr(test, "__name__", repr(test))))

    # ------------------------------------------------------------------
    # Wywołanie
    # ------------------------------------------------------------------

    def _bind_args(self, args: tuple[Any, ...], kwargs: dict[str, Any]) -> JudgmentInput:
        if len(args) > len(self.params):
            raise TypeError(f"{self.name}() przyjmuje {len(self.params)} argumentów, podano {len(args)}")
        values: list[Any] = list(args)
        for p in self.params[len(args):]:
            if p.name not in kwargs:
                raise TypeError(f"{self.name}() brak argumentu '{p.name}'")
            values.append(kwargs.pop(p.name))
        if kwargs:
            raise TypeError(f"{self.name}() nieznane argumenty: {sorted(kwargs)}")
        return tuple(upcast(v, p.type) for v, p in zip(values, self.params))

    def _bindings(self, input: JudgmentInput) -> Bindings:
        return Bindings({p.name: v for p, v in zip(self.params, input)})

    def debug_fields(self, input: JudgmentInput) -> dict[str, Any]:
        by_name = {p.name: v for p, v in zip(self.params, input)}
        return {d: by_name[d] for d in self.debug}

    def debug_text(self, input: JudgmentInput) -> str:
        return ", ".join(f"{k}={v!r}" for k, v in self.debug_fields(input).items())

    def __call__(self, *args: Any, **kwargs: Any) -> Outcome:
        input = self._bind_args(args, kwargs)
        env   = self._bindings(input)

        for test, text in self._assertions:
            if not test(env):
                raise PreconditionFailed(self.name, text)

        for condition, result in self._trivial:
            if condition(env):
                value = upcast(result(env), self.output)
                log.debug("%s: ścieżka trywialna → %r", self.name, value)
                return Outcome.proven([value])

        failed_rules: set[FailedRule] = set()

        def next_value(inp: JudgmentInput) -> frozenset[Any]:
            output: set[Any] = set()
            failed_rules.clear()
            for rule in self._rules:
                self._apply_rule(rule, inp, output, failed_rules)
            return frozenset(output)

        stack = self._stack.get()
        token = None
        if stack is None:
            stack = FixedPointStack()
            token = self._stack.set(stack)
        try:
            output = fixed_point(
                stack,
                input,
                default=lambda _: frozenset(),
                next_value=next_value,
                span=lambda inp: span(self.name, **self.debug_fields(inp)),
            )
        finally:
            if token is not None:
                self._stack.reset(token)

        if output:
            return Outcome.proven(output)
        return Outcome.failed(
            input,
            failed_rules,
            judgment=self.name,
            debug=self.debug_text(input),
        )

    # ------------------------------------------------------------------
    # Interpreter reguł
    # ------------------------------------------------------------------

    def _apply_rule(
        self,
        rule:   Rule,
        input:  JudgmentInput,
        output: set[Any],
        failed: set[FailedRule],
    ) -> None:
        bindings = rule.match_input(input)
        if bindings is None:
            # wzorce argumentów nie pasują: reguła nie "wystartowała"
            return
        with span("matched rule", rule=rule.name, judgment=self.name):
            self._run(rule, 0, bindings, output, failed)

    def _run(
        self,
        rule:   Rule,
        step:   int,
        b:      Bindings,
        output: set[Any],
        failed: set[FailedRule],
    ) -> None:
        if step == len(rule.conditions):
            result = upcast(rule.conclusion(b), self.output)
            log.debug("wyprowadzono %r z reguły %r w osądzie %r", result, rule.name, self.name)
            output.add(result)
            return

        cond = rule.conditions[step]

        if isinstance(cond, If):
            if cond.test(b):
                self._run(rule, step + 1, b, output, failed)
            else:
                self._record_failure(rule, step, cond, IfFalse(expr=cond.describe()), failed)

        elif isinstance(cond, IfLet):
            value = cond.expr(b)
            m = cond.match(value)
            if m is not None:
                self._run(rule, step + 1, b.extend(m), output, failed)
            else:
                cause = IfLetDidNotMatch(pattern=str(cond.pattern), value=repr(value))
                self._record_failure(rule, step, cond, cause, failed)

        elif isinstance(cond, Let):
            self._run(rule, step + 1, b.extend({cond.name: cond.expr(b)}), output, failed)

        elif isinstance(cond, ForEach):
            items = try_into_iter(cond.source(b), cond.describe())
            if isinstance(items, IterationSourceError):
                self._record_failure(rule, step, cond, items, failed)
                return
            for item in items:
                self._run(rule, step + 1, b.extend({cond.name: item}), output, failed)

        elif isinstance(cond, Assert):
            if not cond.test(b):
                raise PreconditionFailed(self.name, f"{rule.name}: {cond.describe()}")
            self._run(rule, step + 1, b, output, failed)

        else:
            raise TypeError(f"Nieobsługiwany warunek {cond!r} w regule '{rule.name}'")

    def _record_failure(
        self,
        rule:   Rule,
        step:   int,
        cond:   Condition,
        cause:  RuleFailureCause,
        failed: set[FailedRule],
    ) -> None:
        if step >= rule.commit_index:
            log.debug(
                "reguła %s nie powiodła się w kroku %d, ponieważ %s (%s)",
                rule.name, step, cause, cond.location,
            )
            failed.add(FailedRule(rule=rule.name, step=step, location=cond.location, cause=cause))
        else:
            log.log(
                TRACE,
                "reguła %s nie powiodła się w kroku %d przed punktem COMMIT, ponieważ %s (%s)",
                rule.name, step, cause, cond.location,
            )

    def __repr__(self) -> str:
        params = ", ".join(p.name for p in self.params)
        return f"<Judgment {self.name}({params}) rules={len(self._rules)}>"
