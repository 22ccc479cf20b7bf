"""
Testy dowodzenia celów z bazy wiedzy (prove_goal / prove_all).

Sprawdzają, że:
1. Fakty i klauzule dowodzą celów uziemionych, brak klauzuli → porażka z diagnostyką
2. Cykl klauzul bez przypadku bazowego nie jest udowodniony, z przypadkiem — jest
3. force_ambiguous skraca dowód bez sięgania po klauzule i niezmienniki
4. Hipotezy środowiska i niezmienniki dowodzą celów
"""

import pytest

from knowledge import (
    Db,
    Env,
    Invariant,
    KnowledgeBase,
    MockDatabase,
    Predicate,
    ProgramClause,
    Verdict,
    answer,
    combine,
    prove,
    prove_all,
)
from judgment import IterationSourceError, Outcome, PreconditionFailed


def P(pred: str, *args: str) -> Predicate:
    return Predicate(pred, tuple(args))


def clause(head: Predicate, *body: Predicate, name: str = "") -> ProgramClause:
    return ProgramClause(head, tuple(body), name)


TRAITS = MockDatabase([
    clause(P("is_clone", "?T"), P("is_copy", "?T"), name="clone_from_copy"),
    clause(P("is_copy", "u32"), name="copy_u32"),
])


# =============================================================================
# KLAUZULE
# =============================================================================

class TestClauses:

    def test_fact_through_clause(self):
        outcome = prove(TRAITS, P("is_clone", "u32"))
        assert outcome == Outcome.proven({Verdict.YES})
        assert answer(outcome) == "yes"

    def test_missing_fact_fails_after_commit(self):
        outcome = prove(TRAITS, P("is_clone", "bool"))
        assert answer(outcome) == "no"

        failure = outcome.failure
        assert failure.judgment == "prove_goal"
        assert failure.input[2] == P("is_clone", "bool")
        (fr,) = failure.failed_rules
        assert fr.rule == "clause"
        assert fr.step == 2
        assert isinstance(fr.cause, IterationSourceError)
        assert fr.cause.judgment.judgment == "prove_all"

    def test_head_mismatch_not_reported(self):
        """Klauzula is_copy(u32) nie pasuje do is_copy(bool) — przed COMMIT, bez diagnostyki."""
        outcome = prove(TRAITS, P("is_copy", "bool"))
        assert outcome.is_failed
        assert outcome.failure.failed_rules == frozenset()

    def test_conjunction(self):
        kb = MockDatabase([
            clause(P("both"), P("a"), P("b")),
            clause(P("a")),
            clause(P("b")),
        ])
        assert answer(prove(kb, P("both"))) == "yes"
        assert prove_all(Db(kb), Env(), (P("a"), P("b"))) == Outcome.proven({Verdict.YES})
        assert prove_all(Db(kb), Env(), ()) == Outcome.proven({Verdict.YES})

    def test_empty_predicate_name_is_fatal(self):
        with pytest.raises(PreconditionFailed):
            prove(TRAITS, P(""))


# =============================================================================
# CYKLE
# =============================================================================

class TestCycles:

    def test_cycle_without_base_case_fails(self):
        kb = MockDatabase([clause(P("a"), P("b")), clause(P("b"), P("a"))])
        assert answer(prove(kb, P("a"))) == "no"

    def test_cycle_with_base_case_succeeds(self):
        kb = MockDatabase([
            clause(P("a"), P("b")),
            clause(P("b"), P("a")),
            clause(P("b"), P("base")),
            clause(P("base")),
        ])
        assert answer(prove(kb, P("a"))) == "yes"
        assert answer(prove(kb, P("b"))) == "yes"

    def test_same_db_handle_reused(self):
        kb = MockDatabase([clause(P("a"), P("a")), clause(P("a"))])
        db = Db(kb)
        assert prove(db, P("a")) == prove(Db(kb), P("a"))


# =============================================================================
# NIEJEDNOZNACZNOŚĆ
# =============================================================================

class _GuardedDatabase(KnowledgeBase):
    """Baza, która zgłasza błąd testu, gdy dla celu niejednoznacznego pyta się o klauzule."""

    def __init__(self, inner: MockDatabase, ambiguous: set[Predicate]):
        self._inner     = inner
        self._ambiguous = ambiguous

    def force_ambiguous(self, env, goal):
        return goal in self._ambiguous

    def program_clauses(self, predicate):
        if predicate in self._ambiguous:
            pytest.fail(f"program_clauses wywołane dla {predicate}")
        return self._inner.program_clauses(predicate)

    def invariants_for(self, goal):
        if goal in self._ambiguous:
            pytest.fail(f"invariants_for wywołane dla {goal}")
        return self._inner.invariants_for(goal)


class TestAmbiguity:

    def test_forced_ambiguity_short_circuits(self):
        goal = P("sized", "dyn_t")
        kb = _GuardedDatabase(MockDatabase([clause(goal)]), {goal})
        outcome = prove(kb, goal, Env.of([goal]))
        assert outcome == Outcome.proven({Verdict.AMBIGUOUS})
        assert answer(outcome) == "ambiguous"

    def test_ambiguous_subgoal_propagates(self):
        amb = P("sized", "dyn_t")
        kb = _GuardedDatabase(MockDatabase([clause(P("well_formed"), amb, P("ok")), clause(P("ok"))]), {amb})
        assert prove(kb, P("well_formed")) == Outcome.proven({Verdict.AMBIGUOUS})

    def test_non_ground_goal_is_ambiguous(self):
        assert answer(prove(TRAITS, P("is_clone", "?T"))) == "ambiguous"

    def test_combine(self):
        assert combine(Verdict.YES, Verdict.YES) is Verdict.YES
        assert combine(Verdict.YES, Verdict.AMBIGUOUS) is Verdict.AMBIGUOUS
        assert combine(Verdict.AMBIGUOUS, Verdict.YES) is Verdict.AMBIGUOUS


# =============================================================================
# HIPOTEZY I NIEZMIENNIKI
# =============================================================================

class TestEnvironment:

    def test_hypothesis(self):
        env = Env.of([P("is_copy", "my_t")])
        assert answer(prove(TRAITS, P("is_copy", "my_t"), env)) == "yes"
        assert answer(prove(TRAITS, P("is_clone", "my_t"), env)) == "yes"
        assert answer(prove(TRAITS, P("is_copy", "my_t"))) == "no"

    def test_invariant_from_hypothesis(self):
        kb = MockDatabase(invariants=[Invariant(P("is_copy", "?T"), P("is_clone", "?T"), "copy_implies_clone")])
        env = Env.of([P("is_copy", "my_t")])
        assert answer(prove(kb, P("is_clone", "my_t"), env)) == "yes"
        assert answer(prove(kb, P("is_clone", "other"), env)) == "no"

    def test_non_ground_hypothesis_keeps_its_variables(self):
        kb = MockDatabase(invariants=[Invariant(P("q", "?X", "?Y"), P("r", "?X"))])
        env = Env.of([P("q", "?Y", "a")])
        assert answer(prove(kb, P("r", "a"), env)) == "no"

    def test_failed_invariant_match_not_reported(self):
        kb = MockDatabase(invariants=[Invariant(P("is_copy", "?T"), P("is_clone", "?T"))])
        outcome = prove(kb, P("is_clone", "other"), Env.of([P("is_copy", "my_t")]))
        assert outcome.failure.failed_rules == frozenset()
