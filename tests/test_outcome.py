"""
Testy wyniku osądu (Outcome) i struktur diagnostycznych.

Sprawdzają, że:
1. Outcome.proven nigdy nie ma pustego zbioru
2. Porażka niesie wejście i porażki reguł, renderowane jako drzewo
3. try_into_iter zamienia źródła na sekwencje albo na IterationSourceError
"""

import pytest

from judgment import (
    EmptyProvenSetError,
    FailedJudgment,
    FailedRule,
    IfFalse,
    IfLetDidNotMatch,
    IterationSourceError,
    JudgmentFailedError,
    Outcome,
    SourceLocation,
    try_into_iter,
)


def _rule(name: str, step: int = 0, cause=None) -> FailedRule:
    return FailedRule(
        rule=name,
        step=step,
        location=SourceLocation("rules.py", 10, 5),
        cause=cause or IfFalse("n > 0"),
    )


# =============================================================================
# OUTCOME
# =============================================================================

class TestOutcome:

    def test_proven_requires_non_empty_set(self):
        """Pusty zbiór wyjść to błąd programisty."""
        with pytest.raises(EmptyProvenSetError):
            Outcome.proven([])

    def test_proven_deduplicates(self):
        outcome = Outcome.proven([1, 1, 2])
        assert outcome.is_proven
        assert outcome.items == frozenset({1, 2})
        assert 1 in outcome
        assert 3 not in outcome

    def test_failed_carries_input_and_rules(self):
        outcome = Outcome.failed((3,), [_rule("zero")], judgment="is_even", debug="n=3")
        assert outcome.is_failed
        assert not outcome.is_proven
        assert outcome.failure.input == (3,)
        assert {fr.rule for fr in outcome.failure.failed_rules} == {"zero"}
        assert 3 not in outcome

    def test_exactly_one_variant(self):
        with pytest.raises(ValueError):
            Outcome()
        with pytest.raises(ValueError):
            Outcome(items=frozenset({1}), failure=FailedJudgment("j", (1,)))

    def test_check_proven_raises_with_diagnostics(self):
        outcome = Outcome.failed((3,), [_rule("zero")], judgment="is_even", debug="n=3")
        with pytest.raises(JudgmentFailedError) as exc:
            outcome.check_proven()
        assert exc.value.failure is outcome.failure

    def test_check_proven_returns_items(self):
        assert Outcome.proven(["a"]).check_proven() == frozenset({"a"})

    def test_structural_equality(self):
        """Wyniki porównywane strukturalnie — podstawa determinizmu."""
        a = Outcome.failed((1,), [_rule("r")], judgment="j")
        b = Outcome.failed((1,), [_rule("r")], judgment="j")
        assert a == b
        assert Outcome.proven({1, 2}) == Outcome.proven([2, 1])


# =============================================================================
# RENDEROWANIE PORAŻEK
# =============================================================================

class TestFailedJudgmentRender:

    def test_render_lists_rules_sorted(self):
        failure = FailedJudgment(
            judgment="is_even",
            input=(3,),
            debug="n=3",
            failed_rules=frozenset({_rule("zero"), _rule("step", 0, IfLetDidNotMatch("Some(x)", "None"))}),
        )
        text = str(failure)
        assert text.splitlines()[0] == "osąd `is_even { n=3 }` nie powiódł się w regułach:"
        assert text.index('"step"') < text.index('"zero"')
        assert "rules.py:10:5" in text

    def test_render_nested_failure(self):
        inner = FailedJudgment("is_even", (1,), "n=1", frozenset({_rule("zero")}))
        outer = FailedJudgment(
            "is_even", (3,), "n=3",
            frozenset({_rule("step", 0, IterationSourceError("is_even(n - 2)", "osąd nieudowodniony", inner))}),
        )
        lines = outer.render()
        assert any("n=1" in line for line in lines)
        assert "nie udało się udowodnić `is_even(n - 2)`" in str(outer)

    def test_render_without_rules(self):
        failure = FailedJudgment("is_even", (-1,), "n=-1")
        assert "żadna reguła nie ma zastosowania" in str(failure)


# =============================================================================
# TRY_INTO_ITER
# =============================================================================

class TestTryIntoIter:

    def test_plain_collection(self):
        assert list(try_into_iter([1, 2], "xs")) == [1, 2]

    def test_none_is_source_error(self):
        err = try_into_iter(None, "lookup(x)")
        assert isinstance(err, IterationSourceError)
        assert err.expr == "lookup(x)"
        assert "None" in err.reason

    def test_exception_is_source_error(self):
        err = try_into_iter(KeyError("x"), "find(x)")
        assert isinstance(err, IterationSourceError)
        assert "KeyError" in err.reason

    def test_non_iterable_is_source_error(self):
        err = try_into_iter(42, "n")
        assert isinstance(err, IterationSourceError)
        assert "int" in err.reason

    def test_proven_outcome_iterates_items(self):
        assert set(try_into_iter(Outcome.proven([1, 2]), "j(x)")) == {1, 2}

    def test_failed_outcome_nests_failure(self):
        outcome = Outcome.failed((1,), [_rule("zero")], judgment="is_even")
        err = try_into_iter(outcome, "is_even(1)")
        assert isinstance(err, IterationSourceError)
        assert err.judgment == outcome.failure
