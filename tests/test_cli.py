"""Tests for the papyrusdb command line."""

import argparse
import re

import pytest

from papyrusdb.cli.__main__ import build_parser, main
from papyrusdb.cli.commands.init import (
    cmd_init,
    prompt_settings,
    render_env,
    validate_port,
    write_env,
)


def _answers(*replies):
    """input() stand-in returning canned replies, then EOF."""
    queue = list(replies)

    def _input(prompt):
        if not queue:
            raise EOFError
        return queue.pop(0)

    return _input


class TestPromptSettings:
    """The interactive setup questionnaire."""

    def test_all_defaults(self):
        answers = prompt_settings(_answers())
        assert answers["db_type"] == "json"
        assert answers["db_dir"] == "papyrusdb"
        assert answers["db_file"] == "papyrus-data.json"
        assert re.fullmatch(r"[0-9a-f]{64}", answers["server_key"])
        assert answers["cors"] is True
        assert answers["port"] == 3000
        assert answers["host"] == "0.0.0.0"

    def test_custom_answers(self):
        answers = prompt_settings(
            _answers("/srv/papyrus", "notes.json", "my-key", "n", "8080", "127.0.0.1")
        )
        assert answers["db_dir"] == "/srv/papyrus"
        assert answers["db_file"] == "notes.json"
        assert answers["server_key"] == "my-key"
        assert answers["cors"] is False
        assert answers["port"] == 8080
        assert answers["host"] == "127.0.0.1"

    def test_invalid_port_asked_again(self, capsys):
        answers = prompt_settings(_answers("", "", "", "", "99999", "abc", "4000"))
        assert answers["port"] == 4000
        assert "Invalid port" in capsys.readouterr().out

    @pytest.mark.parametrize("value,expected", [
        ("1", 1),
        ("65535", 65535),
        ("0", None),
        ("65536", None),
        ("x", None),
    ])
    def test_validate_port(self, value, expected):
        assert validate_port(value) == expected


class TestEnvFile:
    """Writing the settings file."""

    ANSWERS = {
        "db_type": "json",
        "db_dir": "papyrusdb",
        "db_file": "papyrus-data.json",
        "server_key": "abc123",
        "cors": True,
        "port": 3000,
        "host": "0.0.0.0",
    }

    def test_render(self):
        content = render_env(self.ANSWERS)
        assert "PAPYRUS_SERVER_KEY=abc123\n" in content
        assert "PAPYRUS_CORS=true\n" in content
        assert "PAPYRUS_PORT=3000\n" in content

    def test_write_refuses_overwrite(self, tmp_path):
        path = tmp_path / ".env"
        path.write_text("existing")
        with pytest.raises(FileExistsError):
            write_env(path, self.ANSWERS)
        assert path.read_text() == "existing"

    def test_write_force(self, tmp_path):
        path = tmp_path / ".env"
        path.write_text("existing")
        write_env(path, self.ANSWERS, force=True)
        assert "PAPYRUS_SERVER_KEY=abc123" in path.read_text()
        assert path.stat().st_mode & 0o777 == 0o600

    def test_cmd_init_writes_file(self, tmp_path):
        path = tmp_path / ".env"
        args = argparse.Namespace(env_file=str(path), force=False)
        assert cmd_init(args, input_fn=_answers()) == 0
        assert "PAPYRUS_DB_TYPE=json" in path.read_text()

    def test_cmd_init_existing_file(self, tmp_path):
        path = tmp_path / ".env"
        path.write_text("existing")
        args = argparse.Namespace(env_file=str(path), force=False)
        assert cmd_init(args, input_fn=_answers()) == 1


class TestMain:
    """Argument parsing and dispatch."""

    def test_genkey(self, capsys):
        assert main(["genkey"]) == 0
        assert re.fullmatch(r"[0-9a-f]{64}\n", capsys.readouterr().out)

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 1
        assert "usage" in capsys.readouterr().out

    def test_serve_flags(self):
        args = build_parser().parse_args(["serve", "--port", "8080", "--host", "127.0.0.1"])
        assert args.port == 8080
        assert args.host == "127.0.0.1"
        assert args.reload is False

    def test_migrate_command(self, tmp_path, monkeypatch, capsys):
        from papyrusdb.config import get_settings
        from papyrusdb.store import JsonFileStore

        data = tmp_path / "papyrus-data.json"
        store = JsonFileStore(data)
        store.set("categories/Work", {"name": "Work"})
        store.save_now()

        monkeypatch.setenv("PAPYRUS_DB_DIR", str(tmp_path))
        monkeypatch.setattr("papyrusdb.cli.__main__.configure_logging", lambda level: None)
        get_settings.cache_clear()
        try:
            assert main(["migrate"]) == 0
        finally:
            get_settings.cache_clear()

        assert JsonFileStore(data).get("categories/Work")["id"].startswith("cat_")
        assert "1 record(s) updated" in capsys.readouterr().out
