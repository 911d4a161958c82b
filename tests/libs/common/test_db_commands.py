"""Tests for the database management CLI."""

import sqlite3

import pytest
from typer.testing import CliRunner

from common.commands.db_commands import app

runner = CliRunner()

EXPECTED_TABLES = {
    "courses",
    "cohorts",
    "cohort_members",
    "profiles",
    "paywalls",
    "payments",
    "scheduled_charges",
    "pending_enrollments",
    "email_log",
}


def _tables(path) -> set[str]:
    with sqlite3.connect(path) as conn:
        return {row[0] for row in conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")}


class TestDbCommands:
    def test_init_creates_every_table(self, tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
        db_path = tmp_path / "enrollment.db"
        monkeypatch.setenv("DATABASE_URL", f"sqlite:///{db_path}")

        result = runner.invoke(app, ["init"])

        assert result.exit_code == 0
        assert EXPECTED_TABLES <= _tables(db_path)

    def test_init_is_repeatable(self, tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'enrollment.db'}")

        assert runner.invoke(app, ["init"]).exit_code == 0
        assert runner.invoke(app, ["init"]).exit_code == 0

    def test_drop_removes_tables(self, tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
        db_path = tmp_path / "enrollment.db"
        monkeypatch.setenv("DATABASE_URL", f"sqlite:///{db_path}")
        assert runner.invoke(app, ["init"]).exit_code == 0

        result = runner.invoke(app, ["drop", "--yes"])

        assert result.exit_code == 0
        assert not EXPECTED_TABLES & _tables(db_path)

    def test_drop_asks_for_confirmation(self, tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
        db_path = tmp_path / "enrollment.db"
        monkeypatch.setenv("DATABASE_URL", f"sqlite:///{db_path}")
        assert runner.invoke(app, ["init"]).exit_code == 0

        result = runner.invoke(app, ["drop"], input="n\n")

        assert result.exit_code != 0
        assert EXPECTED_TABLES <= _tables(db_path)

    def test_missing_database_url_fails(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("DATABASE_URL", raising=False)

        result = runner.invoke(app, ["init"])

        assert result.exit_code == 1
