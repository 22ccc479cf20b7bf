"""Połączenie z bazą PostgreSQL — konfiguracja przez jdg.config.Settings."""

from __future__ import annotations

from typing import Optional

import psycopg2
import psycopg2.extensions

from jdg.config import Settings


def get_connection(settings: Optional[Settings] = None) -> psycopg2.extensions.connection:
    s = settings or Settings.from_env()
    return psycopg2.connect(
        host     = s.pg_host,
        port     = s.pg_port,
        dbname   = s.pg_database,
        user     = s.pg_user,
        password = s.pg_password,
    )
