"""
Testy narzędzia CLI jdg (bez bazy danych).

Sprawdzają, że:
1. jdg prove --program wypisuje wynik dla celów z pliku i z --goal
2. --strict kończy się kodem 2, brak pliku — kodem 1
3. Schemat SQL dzieli się na instrukcje, a load-program zapisuje upserty
4. Settings czyta plik .env bez nadpisywania zmiennych środowiska
"""

import json

import pytest

from jdg.cli import build_parser, main
from jdg.commands.apply_schema import SCHEMA_PATH, split_statements
from jdg.commands.load_program import write_program
from jdg.config import Settings
from knowledge import program_from_dict

PROGRAM = {
    "program": "traits",
    "clauses": [
        {"id": "clone_from_copy", "head": "is_clone(?T)", "body": ["is_copy(?T)"]},
        {"id": "copy_u32", "head": "is_copy(u32)"},
    ],
    "invariants": [{"id": "copy_implies_clone", "premise": "is_copy(?T)", "conclusion": "is_clone(?T)"}],
    "hypotheses": ["is_copy(my_t)"],
    "goals": ["is_clone(u32)"],
}


@pytest.fixture
def program_file(tmp_path):
    path = tmp_path / "traits.json"
    path.write_text(json.dumps(PROGRAM), encoding="utf-8")
    return path


# =============================================================================
# jdg prove
# =============================================================================

class TestProveCommand:

    def test_goals_from_file_and_flag(self, program_file, capsys):
        main(["prove", "--program", str(program_file), "--goal", "is_clone(bool)"])
        out = capsys.readouterr().out
        assert "is_clone(u32)" in out
        assert "YES" in out
        assert "NO" in out
        assert "clause" in out

    def test_quiet_hides_failure_tree(self, program_file, capsys):
        main(["prove", "-p", str(program_file), "-g", "is_clone(bool)", "--quiet"])
        out = capsys.readouterr().out
        assert "krok #" not in out

    def test_strict_exit_code(self, program_file):
        with pytest.raises(SystemExit) as exc:
            main(["prove", "-p", str(program_file), "-g", "is_clone(bool)", "--strict"])
        assert exc.value.code == 2

    def test_strict_passes_when_all_proven(self, program_file):
        main(["prove", "-p", str(program_file), "-g", "is_clone(my_t)", "--strict"])

    def test_missing_program_file(self, tmp_path):
        with pytest.raises(SystemExit) as exc:
            main(["prove", "--program", str(tmp_path / "missing.json")])
        assert exc.value.code == 1

    def test_invalid_goal(self, program_file):
        with pytest.raises(SystemExit) as exc:
            main(["prove", "-p", str(program_file), "-g", "is_clone(u32"])
        assert exc.value.code == 1

    def test_db_connection_closed(self, monkeypatch, capsys):
        conn = _FakeConnection()
        monkeypatch.setattr("jdg._db.get_connection", lambda settings=None: conn)
        main(["prove", "--db", "--goal", "is_clone(u32)"])
        assert conn.closed
        assert "NO" in capsys.readouterr().out

    def test_db_connection_closed_on_strict_exit(self, monkeypatch):
        conn = _FakeConnection()
        monkeypatch.setattr("jdg._db.get_connection", lambda settings=None: conn)
        with pytest.raises(SystemExit):
            main(["prove", "--db", "--goal", "is_clone(u32)", "--strict"])
        assert conn.closed

    def test_source_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["prove", "--goal", "x"])


# =============================================================================
# SCHEMAT I ŁADOWANIE PROGRAMU
# =============================================================================

class _FakeCursor:

    def __init__(self, executed):
        self.executed = executed

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def execute(self, sql, params=None):
        self.executed.append((sql, params))

    def fetchall(self):
        return []


class _FakeConnection:

    def __init__(self):
        self.executed: list = []
        self.commits = 0
        self.closed  = False

    def cursor(self):
        return _FakeCursor(self.executed)

    def commit(self):
        self.commits += 1

    def close(self):
        self.closed = True


class TestSchemaAndLoad:

    def test_schema_statements(self):
        stmts = split_statements(SCHEMA_PATH.read_text(encoding="utf-8"))
        assert len(stmts) == 4
        assert all(s.startswith("CREATE") for s in stmts)

    def test_split_skips_comments(self):
        assert split_statements("-- komentarz\nSELECT 1;\nSELECT 2") == ["SELECT 1;", "SELECT 2"]

    def test_write_program_upserts(self):
        conn = _FakeConnection()
        assert write_program(conn, program_from_dict(PROGRAM)) == (2, 1)
        assert conn.commits == 1

        clause_sql, clause_params = conn.executed[0]
        assert "INSERT INTO clause" in clause_sql
        assert clause_params[:3] == ("traits", "clone_from_copy", "is_clone")
        assert json.loads(clause_params[3]) == ["?T"]
        assert json.loads(clause_params[4]) == [{"pred": "is_copy", "args": ["?T"]}]

        inv_sql, inv_params = conn.executed[2]
        assert "INSERT INTO invariant" in inv_sql
        assert inv_params[2] == "is_copy"


# =============================================================================
# KONFIGURACJA
# =============================================================================

class TestSettings:

    def test_env_file_does_not_override_environment(self, tmp_path, monkeypatch):
        env_file = tmp_path / ".env"
        env_file.write_text("PGHOST=from-file\nJDG_PROGRAM=traits\n", encoding="utf-8")
        monkeypatch.setenv("PGHOST", "from-env")
        monkeypatch.setenv("JDG_PROGRAM", "placeholder")
        monkeypatch.delenv("JDG_PROGRAM")

        settings = Settings.from_env(env_file)
        assert settings.pg_host == "from-env"
        assert settings.program == "traits"

    def test_defaults_without_env_file(self, tmp_path, monkeypatch):
        for name in ("PGPORT", "JDG_LOG_LEVEL"):
            monkeypatch.setenv(name, "placeholder")
            monkeypatch.delenv(name)
        settings = Settings.from_env(tmp_path / "missing.env")
        assert settings.pg_port == 5433
        assert settings.log_level == "WARNING"
