"""
knowledge — baza wiedzy dla silnika osądów.

Publiczne API:
  KnowledgeBase                         kontrakt: force_ambiguous, program_clauses, invariants_for
  Db, SolverConfiguration               współdzielony uchwyt porównywany tożsamościowo
  MockDatabase                          baza w pamięci
  PgDatabase                            baza w PostgreSQL (psycopg2)
  Predicate, ProgramClause, Invariant, Env
  match_head, instantiate               dopasowanie jednostronne
  Program, load_program_json, parse_goal
  prove_goal, prove_all, prove, answer, Verdict
"""

from .database import Db, KnowledgeBase, SolverConfiguration
from .loader   import Program, load_program_json, parse_goal, program_from_dict
from .mock     import MockDatabase
from .postgres import PgDatabase
from .prover   import Verdict, answer, combine, prove, prove_all, prove_goal
from .terms    import (
    Env,
    Invariant,
    Predicate,
    ProgramClause,
    instantiate,
    instantiate_all,
    match_head,
)

__all__ = [
    "KnowledgeBase",
    "Db",
    "SolverConfiguration",
    "MockDatabase",
    "PgDatabase",
    "Predicate",
    "ProgramClause",
    "Invariant",
    "Env",
    "match_head",
    "instantiate",
    "instantiate_all",
    "Program",
    "load_program_json",
    "program_from_dict",
    "parse_goal",
    "Verdict",
    "combine",
    "prove",
    "prove_all",
    "prove_goal",
    "answer",
]
