"""Komenda: jdg load-program — ładuje klauzule i niezmienniki z pliku JSON do bazy danych."""

from __future__ import annotations

import argparse
import json
import pathlib

from rich.console import Console

from jdg._db import get_connection
from knowledge import Predicate, Program, load_program_json

console = Console()

_UPSERT_CLAUSE = """
    INSERT INTO clause (program, clause_id, head_pred, head_args, body)
    VALUES (%s, %s, %s, %s::jsonb, %s::jsonb)
    ON CONFLICT (program, clause_id) DO UPDATE SET
        head_pred = EXCLUDED.head_pred,
        head_args = EXCLUDED.head_args,
        body      = EXCLUDED.body
"""

_UPSERT_INVARIANT = """
    INSERT INTO invariant (program, invariant_id, premise_pred, premise, conclusion)
    VALUES (%s, %s, %s, %s::jsonb, %s::jsonb)
    ON CONFLICT (program, invariant_id) DO UPDATE SET
        premise_pred = EXCLUDED.premise_pred,
        premise      = EXCLUDED.premise,
        conclusion   = EXCLUDED.conclusion
"""


def _atom_json(atom: Predicate) -> dict:
    return {"pred": atom.pred, "args": list(atom.args)}


def write_program(conn, program: Program) -> tuple[int, int]:
    """Upsert klauzul i niezmienników programu. Zwraca (klauzule, niezmienniki)."""
    with conn.cursor() as cur:
        for c in program.clauses:
            cur.execute(_UPSERT_CLAUSE, (
                program.name,
                c.name,
                c.head.pred,
                json.dumps(list(c.head.args)),
                json.dumps([_atom_json(a) for a in c.body]),
            ))
        for inv in program.invariants:
            cur.execute(_UPSERT_INVARIANT, (
                program.name,
                inv.name,
                inv.premise.pred,
                json.dumps(_atom_json(inv.premise)),
                json.dumps(_atom_json(inv.conclusion)),
            ))
    conn.commit()
    return len(program.clauses), len(program.invariants)


def run(args: argparse.Namespace) -> None:
    path = pathlib.Path(args.file)
    if not path.exists():
        console.print(f"[red]Brak pliku programu:[/red] {path}")
        raise SystemExit(1)

    try:
        program = load_program_json(path)
    except (ValueError, OSError) as e:
        console.print(f"[red]Błąd wczytywania programu:[/red] {e}")
        raise SystemExit(1)

    if args.name:
        program.name = args.name

    try:
        conn = get_connection()
    except Exception as e:
        console.print(f"[red]Błąd połączenia z bazą:[/red] {e}")
        raise SystemExit(1)

    try:
        n_clauses, n_invariants = write_program(conn, program)
    except Exception as e:
        conn.rollback()
        console.print(f"[red]Błąd zapisu do bazy:[/red] {e}")
        raise SystemExit(1)
    finally:
        conn.close()

    console.print(
        f"[green]Załadowano[/green] program [cyan]{program.name}[/cyan]: "
        f"{n_clauses} klauzul, {n_invariants} niezmienników"
    )


def add_parser(subparsers: argparse._SubParsersAction) -> None:  # type: ignore[type-arg]
    p = subparsers.add_parser(
        "load-program",
        help="Ładuje klauzule i niezmienniki z pliku JSON do bazy danych.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description="""
Wczytuje program JSON (format jak w 'jdg prove --program') i zapisuje klauzule
oraz niezmienniki do tabel clause / invariant (upsert po identyfikatorze).

Przykłady:
  jdg load-program traits.json
  jdg load-program traits.json --name traits-v2
        """,
    )
    p.add_argument("file", metavar="PLIK", help="Plik JSON z programem.")
    p.add_argument("--name", metavar="NAZWA", help="Nadpisz nazwę programu z pliku.")
    p.set_defaults(func=run)
