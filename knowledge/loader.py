"""
knowledge/loader.py — wczytywanie programu (klauzule, niezmienniki) z JSON i parsowanie celów.

Publiczne API:
  load_program_json(path)  -> Program
  program_from_dict(raw)   -> Program
  parse_goal(goal_str)     -> Predicate
"""

from __future__ import annotations

import json
import pathlib
import re
from dataclasses import dataclass, field

from .mock import MockDatabase
from .postgres import atom_from_dict
from .terms import Env, Invariant, Predicate, ProgramClause


@dataclass(slots=True)
class Program:
    """Program wczytany z pliku: klauzule, niezmienniki, hipotezy i cele."""
    name:       str
    clauses:    list[ProgramClause] = field(default_factory=list)
    invariants: list[Invariant]     = field(default_factory=list)
    hypotheses: list[Predicate]     = field(default_factory=list)
    ambiguous:  list[Predicate]     = field(default_factory=list)
    goals:      list[Predicate]     = field(default_factory=list)

    def database(self) -> MockDatabase:
        return MockDatabase(self.clauses, self.invariants, self.ambiguous)

    def env(self) -> Env:
        return Env.of(self.hypotheses)


# ---------------------------------------------------------------------------
# JSON
# ---------------------------------------------------------------------------

def _atom(raw: dict | str, where: str) -> Predicate:
    if isinstance(raw, str):
        return parse_goal(raw)
    if not isinstance(raw, dict) or "pred" not in raw:
        raise ValueError(f"{where}: oczekiwano obiektu z kluczem 'pred' albo tekstu celu")
    return atom_from_dict(raw)


def program_from_dict(raw: dict) -> Program:
    """
    Buduje Program ze słownika.

    Oczekiwany format::

        {
            "program": "traits",
            "clauses": [
                {"id": "c1", "head": "is_clone(?T)", "body": ["is_copy(?T)"]},
                {"id": "c2", "head": {"pred": "is_copy", "args": ["u32"]}}
            ],
            "invariants": [
                {"id": "i1", "premise": "is_copy(?T)", "conclusion": "is_clone(?T)"}
            ],
            "hypotheses": ["is_copy(my_t)"],
            "ambiguous":  [],
            "goals":      ["is_clone(u32)"]
        }

    Atomy można podać jako obiekt {"pred", "args"} albo tekst "pred(a, b)".

    Raises:
        ValueError przy nieprawidłowej strukturze.
    """
    if not isinstance(raw, dict):
        raise ValueError("Program musi być obiektem JSON")

    program = Program(name=str(raw.get("program", "default")))

    for i, c in enumerate(raw.get("clauses", [])):
        if not isinstance(c, dict) or "head" not in c:
            raise ValueError(f"Klauzula #{i}: brak klucza 'head'")
        program.clauses.append(ProgramClause(
            head=_atom(c["head"], f"Klauzula #{i}.head"),
            body=tuple(_atom(a, f"Klauzula #{i}.body") for a in c.get("body", [])),
            name=str(c.get("id", f"c{i}")),
        ))

    for i, inv in enumerate(raw.get("invariants", [])):
        if not isinstance(inv, dict) or "premise" not in inv or "conclusion" not in inv:
            raise ValueError(f"Niezmiennik #{i}: wymagane klucze 'premise' i 'conclusion'")
        program.invariants.append(Invariant(
            premise=_atom(inv["premise"], f"Niezmiennik #{i}.premise"),
            conclusion=_atom(inv["conclusion"], f"Niezmiennik #{i}.conclusion"),
            name=str(inv.get("id", f"i{i}")),
        ))

    program.hypotheses = [_atom(h, f"Hipoteza #{i}") for i, h in enumerate(raw.get("hypotheses", []))]
    program.ambiguous  = [_atom(a, f"Niejednoznaczny #{i}") for i, a in enumerate(raw.get("ambiguous", []))]
    program.goals      = [_atom(g, f"Cel #{i}") for i, g in enumerate(raw.get("goals", []))]
    return program


def load_program_json(path: pathlib.Path) -> Program:
    """Wczytuje program z pliku JSON (format: program_from_dict)."""
    raw = json.loads(path.read_text(encoding="utf-8"))
    return program_from_dict(raw)


# ---------------------------------------------------------------------------
# Parsowanie celu (goal)
# ---------------------------------------------------------------------------

_GOAL_RE = re.compile(r"^([a-z_][a-z0-9_]*)(?:\s*\(([^)]*)\))?\s*$", re.IGNORECASE)


def parse_goal(goal_str: str) -> Predicate:
    """
    Parsuje string celu na Predicate.

    Przykłady::

        "is_clone(u32)"      → Predicate("is_clone", ("u32",))
        "implements(?T, x)"  → Predicate("implements", ("?T", "x"))
        "well_formed"        → Predicate("well_formed", ())

    Raises:
        ValueError jeśli format jest nieprawidłowy.
    """
    m = _GOAL_RE.match(goal_str.strip())
    if not m:
        raise ValueError(f"Nieprawidłowy format celu: '{goal_str}'")

    pred     = m.group(1)
    raw_args = m.group(2)

    if raw_args is None or raw_args.strip() == "":
        args: tuple[str, ...] = ()
    else:
        args = tuple(a.strip().strip("\"'") for a in raw_args.split(","))

    return Predicate(pred, args)
