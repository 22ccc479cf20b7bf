"""
jdg/config.py — konfiguracja z zmiennych środowiskowych (opcjonalnie plik .env).

Zmienne środowiskowe (domyślne = docker-compose):
  PGHOST         localhost
  PGPORT         5433
  PGDATABASE     judgment
  PGUSER         judgment
  PGPASSWORD     judgment
  JDG_LOG_LEVEL  WARNING
  JDG_PROGRAM    (brak) — filtr kolumny program w bazie wiedzy
"""

from __future__ import annotations

import os
import pathlib
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

ROOT     = pathlib.Path(__file__).resolve().parent.parent
ENV_FILE = ROOT / ".env"


@dataclass(frozen=True, slots=True)
class Settings:
    pg_host:     str
    pg_port:     int
    pg_database: str
    pg_user:     str
    pg_password: str
    log_level:   str           = "WARNING"
    program:     Optional[str] = None

    @classmethod
    def from_env(cls, env_file: Optional[pathlib.Path] = ENV_FILE) -> Settings:
        """Czyta ustawienia ze środowiska; plik .env (gdy istnieje) nie nadpisuje zmiennych już ustawionych."""
        if env_file is not None and env_file.exists():
            load_dotenv(env_file, override=False)
        return cls(
            pg_host     = os.getenv("PGHOST",     "localhost"),
            pg_port     = int(os.getenv("PGPORT", "5433")),
            pg_database = os.getenv("PGDATABASE", "judgment"),
            pg_user     = os.getenv("PGUSER",     "judgment"),
            pg_password = os.getenv("PGPASSWORD", "judgment"),
            log_level   = os.getenv("JDG_LOG_LEVEL", "WARNING"),
            program     = os.getenv("JDG_PROGRAM") or None,
        )
