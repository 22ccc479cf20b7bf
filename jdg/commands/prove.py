"""Komenda: jdg prove — dowodzi celów z programu JSON albo z bazy PostgreSQL."""

from __future__ import annotations

import argparse
import pathlib
from typing import Any

from rich.console import Console
from rich.table   import Table
from rich.tree    import Tree
from rich         import box

from jdg.config import Settings
from judgment import FailedJudgment, Outcome
from knowledge import Db, Env, KnowledgeBase, Predicate, answer, parse_goal, prove

console = Console(width=200)

ANSWER_STYLE: dict[str, str] = {
    "yes":       "green",
    "ambiguous": "yellow",
    "no":        "red",
}


# ---------------------------------------------------------------------------
# Wyświetlanie wyników
# ---------------------------------------------------------------------------

def _failure_tree(failure: FailedJudgment, tree: Tree | None = None) -> Tree:
    """Buduje drzewo rich z porażek reguł (z zagnieżdżonymi osądami)."""
    label = f"[bold]{failure.header()}[/bold]"
    node  = tree.add(label) if tree is not None else Tree(label)
    if not failure.failed_rules:
        node.add("[dim]żadna reguła nie ma zastosowania[/dim]")
        return node
    for fr in failure.sorted_rules():
        child = node.add(
            f'reguła [cyan]"{fr.rule}"[/cyan] krok #{fr.step} '
            f"[dim]({fr.location})[/dim]: {fr.cause}"
        )
        nested = getattr(fr.cause, "judgment", None)
        if nested is not None:
            _failure_tree(nested, child)
    return node


def _show_outcome(goal: Predicate, outcome: Outcome, explain: bool) -> None:
    ans   = answer(outcome)
    style = ANSWER_STYLE[ans]
    console.print(f"\nCel: [bold cyan]{goal}[/bold cyan]  →  [{style}]{ans.upper()}[/{style}]")
    if outcome.failure is not None and explain:
        console.print(_failure_tree(outcome.failure))


def _show_summary(rows: list[tuple[Predicate, str]]) -> None:
    table = Table(box=box.SIMPLE_HEAD, header_style="bold white", show_header=True)
    table.add_column("CEL", style="cyan", no_wrap=True)
    table.add_column("WYNIK", no_wrap=True)
    for goal, ans in rows:
        style = ANSWER_STYLE[ans]
        table.add_row(str(goal), f"[{style}]{ans}[/{style}]")
    console.print(table)


# ---------------------------------------------------------------------------
# Główna logika
# ---------------------------------------------------------------------------

def _load_kb(args: argparse.Namespace) -> tuple[KnowledgeBase, Env, list[Predicate], Any]:
    """Zwraca (baza, środowisko, cele z pliku, połączenie do zamknięcia albo None)."""
    if args.program:
        from knowledge import load_program_json

        path = pathlib.Path(args.program)
        if not path.exists():
            console.print(f"[red]Brak pliku programu:[/red] {path}")
            raise SystemExit(1)
        try:
            program = load_program_json(path)
        except (ValueError, OSError) as e:
            console.print(f"[red]Błąd wczytywania programu:[/red] {e}")
            raise SystemExit(1)
        console.print(
            f"Program: [bold]{path.name}[/bold]  "
            f"[cyan]{program.name}[/cyan]  "
            f"{len(program.clauses)} klauzul, {len(program.invariants)} niezmienników, "
            f"{len(program.hypotheses)} hipotez"
        )
        return program.database(), program.env(), program.goals, None

    from jdg._db import get_connection
    from knowledge import PgDatabase

    settings = Settings.from_env()
    try:
        conn = get_connection(settings)
    except Exception as e:
        console.print(f"[red]Błąd połączenia z bazą:[/red] {e}")
        raise SystemExit(1)
    program = args.db_program or settings.program
    console.print(f"Baza wiedzy: [bold]PostgreSQL[/bold] {settings.pg_host}:{settings.pg_port}"
                  + (f"  program=[cyan]{program}[/cyan]" if program else ""))
    return PgDatabase(conn, program=program), Env(), [], conn


def run(args: argparse.Namespace) -> None:
    kb, env, file_goals, conn = _load_kb(args)
    try:
        _prove_goals(args, kb, env, file_goals)
    finally:
        if conn is not None:
            conn.close()


def _prove_goals(args: argparse.Namespace, kb: KnowledgeBase, env: Env, file_goals: list[Predicate]) -> None:
    goals: list[Predicate] = list(file_goals)
    for goal_str in args.goal or []:
        try:
            goals.append(parse_goal(goal_str))
        except ValueError as e:
            console.print(f"[red]Błąd parsowania celu:[/red] {e}")
            raise SystemExit(1)

    if not goals:
        console.print("[yellow]Brak celów — podaj --goal albo 'goals' w pliku programu.[/yellow]")
        return

    db = Db(kb)
    rows: list[tuple[Predicate, str]] = []
    for goal in goals:
        outcome = prove(db, goal, env)
        _show_outcome(goal, outcome, explain=not args.quiet)
        rows.append((goal, answer(outcome)))

    if len(rows) > 1:
        console.print()
        _show_summary(rows)

    if args.strict and any(ans != "yes" for _, ans in rows):
        raise SystemExit(2)


# ---------------------------------------------------------------------------
# Rejestracja parsera
# ---------------------------------------------------------------------------

def add_parser(subparsers: argparse._SubParsersAction) -> None:  # type: ignore[type-arg]
    p = subparsers.add_parser(
        "prove",
        help="Dowodzi celów z programu JSON albo z bazy PostgreSQL.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description="""
Wczytuje klauzule i niezmienniki (z pliku JSON albo z bazy) i dowodzi celów.
Wynik dla każdego celu: YES, AMBIGUOUS albo NO (z drzewem porażek reguł).

Format pliku programu JSON:
  {
    "program": "traits",
    "clauses": [
      {"id": "c1", "head": "is_clone(?T)", "body": ["is_copy(?T)"]},
      {"id": "c2", "head": "is_copy(u32)"}
    ],
    "invariants": [{"id": "i1", "premise": "is_copy(?T)", "conclusion": "is_clone(?T)"}],
    "hypotheses": ["is_copy(my_t)"],
    "goals": ["is_clone(u32)"]
  }

Przykłady:
  jdg prove --program traits.json
  jdg prove --program traits.json --goal "is_clone(u32)"
  jdg prove --db --goal "is_clone(u32)" --db-program traits
  jdg -v prove --program traits.json --strict
        """,
    )
    src = p.add_mutually_exclusive_group(required=True)
    src.add_argument(
        "--program", "-p",
        metavar="PLIK",
        help="Plik JSON z programem (klauzule, niezmienniki, hipotezy, cele).",
    )
    src.add_argument(
        "--db",
        action="store_true",
        help="Czytaj klauzule i niezmienniki z bazy PostgreSQL.",
    )
    p.add_argument(
        "--db-program",
        metavar="NAZWA",
        dest="db_program",
        help="Filtr kolumny program w bazie (domyślnie: JDG_PROGRAM).",
    )
    p.add_argument(
        "--goal", "-g",
        metavar="CEL",
        action="append",
        help="Cel, np. 'is_clone(u32)'. Można podać wielokrotnie.",
    )
    p.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Nie pokazuj drzewa porażek dla celów nieudowodnionych.",
    )
    p.add_argument(
        "--strict",
        action="store_true",
        help="Kod wyjścia 2, gdy któryś cel nie jest udowodniony (NO lub AMBIGUOUS).",
    )
    p.set_defaults(func=run)
