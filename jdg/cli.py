"""
jdg — narzędzie CLI silnika osądów.

Użycie:
  jdg [-v|-vv] <komenda> [opcje]

Komendy:
  prove          Dowodzi celów z programu JSON albo z bazy PostgreSQL.
  load-program   Ładuje klauzule i niezmienniki z pliku JSON do bazy danych.
  apply-schema   Aplikuje db/schema.sql do bazy danych (idempotentne).
"""

from __future__ import annotations

import argparse
import sys
from typing import Optional, Sequence

# Windows: terminal może używać cp1252, wymuszamy UTF-8, żeby polskie znaki
# w tekstach pomocy argparse były wypisywane poprawnie.
for _stream in (sys.stdout, sys.stderr):
    if hasattr(_stream, "reconfigure") and (getattr(_stream, "encoding", "") or "").lower() not in ("utf-8", "utf8"):
        _stream.reconfigure(encoding="utf-8", errors="replace")

from jdg import __version__
from jdg.commands import apply_schema as cmd_apply_schema
from jdg.commands import load_program as cmd_load_program
from jdg.commands import prove as cmd_prove
from jdg.config import Settings
from judgment import TRACE, configure_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jdg",
        description="Silnik osądów — narzędzie CLI.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--version", action="version", version=f"jdg {__version__}"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Logi diagnostyczne silnika: -v = DEBUG, -vv = TRACE (także odrzucone porażki reguł).",
    )

    subparsers = parser.add_subparsers(
        title="komendy",
        metavar="<komenda>",
        dest="command",
    )
    subparsers.required = True

    cmd_prove.add_parser(subparsers)
    cmd_load_program.add_parser(subparsers)
    cmd_apply_schema.add_parser(subparsers)

    return parser


def _log_level(verbose: int) -> int | str:
    if verbose >= 2:
        return TRACE
    if verbose == 1:
        return "DEBUG"
    return Settings.from_env().log_level


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(_log_level(args.verbose))
    args.func(args)


if __name__ == "__main__":
    main()
