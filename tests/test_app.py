"""
Tests for the command-line interface.
"""

import json

import pytest

from personenricher import __version__, app


@pytest.fixture
def cli_env(monkeypatch, tmp_path, enricher_factory):
    """Point the CLI at a temp database and replace the HTTP enricher."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'cli.db'}")
    monkeypatch.setenv("LOG_TO_FILE", "false")
    enrichers = []

    def make_enricher(settings=None, logger=None):
        enricher = enricher_factory()
        enricher.close = lambda: None
        enrichers.append(enricher)
        return enricher

    monkeypatch.setattr(app, "Enricher", make_enricher)
    return enrichers


def last_json_line(output: str) -> dict:
    return json.loads(output.strip().splitlines()[-1])


class TestCli:
    def test_version(self, capsys):
        app.main(["--version"])

        assert capsys.readouterr().out.strip() == __version__

    def test_init_db(self, cli_env, tmp_path, capsys):
        app.main(["init-db"])

        assert (tmp_path / "cli.db").exists()
        assert "Database ready" in capsys.readouterr().out

    def test_create_then_list(self, cli_env, capsys):
        app.main(["create", "--name", "Ada", "--surname", "Lovelace"])
        created = last_json_line(capsys.readouterr().out)

        assert created["id"] > 0
        assert created["nationality"] == "GB"

        app.main(["list", "--surname", "Lovelace"])
        out = capsys.readouterr().out
        assert "Showing 1 of 1 persons" in out
        assert "Lovelace Ada" in out

    def test_update_get_delete(self, cli_env, capsys):
        app.main(["create", "--name", "Ada", "--surname", "Lovelace"])
        person_id = last_json_line(capsys.readouterr().out)["id"]

        app.main(["update", "--id", str(person_id), "--name", "Augusta", "--surname", "King"])
        assert last_json_line(capsys.readouterr().out)["name"] == "Augusta"

        app.main(["get", "--id", str(person_id)])
        assert last_json_line(capsys.readouterr().out)["surname"] == "King"

        app.main(["delete", "--id", str(person_id)])
        assert last_json_line(capsys.readouterr().out)["id"] == person_id

        with pytest.raises(SystemExit, match="not found"):
            app.main(["get", "--id", str(person_id)])

    def test_create_invalid(self, cli_env):
        with pytest.raises(SystemExit, match="surname"):
            app.main(["create", "--name", "Ada", "--surname", ""])

    def test_enrich_only(self, cli_env, capsys):
        app.main(["enrich", "--name", "Ada"])

        assert last_json_line(capsys.readouterr().out) == {
            "name": "Ada",
            "age": 36,
            "gender": "female",
            "nationality": "GB",
        }

    def test_list_empty(self, cli_env, capsys):
        app.main(["list"])

        assert "No persons found" in capsys.readouterr().out

    def test_negative_offset_rejected(self, cli_env):
        with pytest.raises(SystemExit):
            app.main(["list", "--offset", "-1"])
