"""Komenda: jdg apply-schema — aplikuje db/schema.sql do bazy danych."""

from __future__ import annotations

import argparse
import pathlib

from rich.console import Console

from jdg._db import get_connection

console = Console()

ROOT        = pathlib.Path(__file__).resolve().parent.parent.parent
SCHEMA_PATH = ROOT / "db" / "schema.sql"


def split_statements(sql: str) -> list[str]:
    """Dzieli SQL na instrukcje zakończone średnikiem; pomija komentarze '--' i puste wyniki."""
    stmts: list[str] = []
    buf:   list[str] = []
    for line in sql.splitlines():
        if line.strip().startswith("--"):
            continue
        buf.append(line)
        if line.rstrip().endswith(";"):
            stmt = "\n".join(buf).strip()
            if stmt:
                stmts.append(stmt)
            buf = []
    remaining = "\n".join(buf).strip()
    if remaining:
        stmts.append(remaining)
    return stmts


def run(args: argparse.Namespace) -> None:
    schema_path = pathlib.Path(args.schema) if args.schema else SCHEMA_PATH
    if not schema_path.exists():
        console.print(f"[red]Brak pliku schematu:[/red] {schema_path}")
        raise SystemExit(1)

    stmts = split_statements(schema_path.read_text(encoding="utf-8"))

    try:
        conn = get_connection()
    except Exception as e:
        console.print(f"[red]Błąd połączenia z bazą:[/red] {e}")
        raise SystemExit(1)

    # Schemat jest idempotentny (IF NOT EXISTS), każda instrukcja we własnej transakcji
    conn.autocommit = True
    try:
        with conn.cursor() as cur:
            for stmt in stmts:
                cur.execute(stmt)
    except Exception as e:
        console.print(f"[red]Błąd wykonania schematu:[/red] {e}")
        raise SystemExit(1)
    finally:
        conn.close()

    console.print(f"[green]Schemat zastosowany:[/green] {schema_path} ({len(stmts)} instrukcji)")


def add_parser(subparsers: argparse._SubParsersAction) -> None:  # type: ignore[type-arg]
    p = subparsers.add_parser(
        "apply-schema",
        help="Aplikuje db/schema.sql do bazy danych (idempotentne).",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description="""
Tworzy tabele bazy wiedzy (clause, invariant) w skonfigurowanej bazie PostgreSQL.
Wszystkie instrukcje używają IF NOT EXISTS — bezpieczne do wielokrotnego uruchomienia.

Przykład:
  jdg apply-schema
        """,
    )
    p.add_argument(
        "--schema",
        metavar="PLIK",
        help="Alternatywny plik schematu SQL.",
    )
    p.set_defaults(func=run)
