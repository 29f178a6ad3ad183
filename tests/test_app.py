"""Tests for Flask application factory."""

import json
import os

import pytest

from heyfocus.app import _load_dotenv, create_app
from heyfocus.services import CommandDispatcher, DataStore, StatsService, TaskStateMachine
from heyfocus.services.config_service import reset_config_service
from heyfocus.services.data_store import logs_key


@pytest.fixture
def config_file(tmp_path, monkeypatch):
    """Config pointing the store at a temporary directory."""
    monkeypatch.delenv("HEYFOCUS_BUILD", raising=False)
    config_path = tmp_path / "config.yaml"
    config_path.write_text(f"data_dir: {tmp_path / 'data'}\nport: 5151\n")
    return config_path


class TestCreateApp:
    """Tests for create_app factory."""

    def test_create_app_returns_flask_app(self, config_file, clock):
        app = create_app(str(config_file), clock=clock)
        assert app.name == "heyfocus.app"

    def test_app_has_extensions(self, config_file, clock):
        app = create_app(str(config_file), clock=clock)

        assert app.extensions["config"].port == 5151
        assert "config_service" in app.extensions
        assert "event_bus" in app.extensions
        assert isinstance(app.extensions["data_store"], DataStore)
        assert isinstance(app.extensions["state_machine"], TaskStateMachine)
        assert isinstance(app.extensions["dispatcher"], CommandDispatcher)
        assert isinstance(app.extensions["stats_service"], StatsService)

    def test_dispatcher_shares_state_machine(self, config_file, clock):
        app = create_app(str(config_file), clock=clock)
        assert app.extensions["dispatcher"].state_machine is app.extensions["state_machine"]
        assert app.extensions["dispatcher"].event_bus is app.extensions["event_bus"]

    def test_release_store_file(self, config_file, tmp_path, clock):
        app = create_app(str(config_file), clock=clock)
        app.extensions["state_machine"].add_task("a")
        assert (tmp_path / "data" / "heyfocus_data.json").exists()

    def test_debug_store_file(self, config_file, tmp_path, clock, monkeypatch):
        monkeypatch.setenv("HEYFOCUS_BUILD", "debug")
        app = create_app(str(config_file), clock=clock)
        app.extensions["state_machine"].add_task("a")

        assert (tmp_path / "data" / "heyfocus_data_dev.json").exists()
        assert not (tmp_path / "data" / "heyfocus_data.json").exists()

    def test_state_survives_restart(self, config_file, clock):
        app = create_app(str(config_file), clock=clock)
        app.test_client().post("/api/tasks", json={"text": "persist me"})

        reset_config_service()
        restarted = create_app(str(config_file), clock=clock)
        body = restarted.test_client().get("/api/data").get_json()
        assert body["tasks"][0]["text"] == "persist me"


class TestLogRetention:
    """Old per-day logs are swept at startup when retention is configured."""

    def _seed(self, store_file):
        store_file.parent.mkdir(parents=True)
        store_file.write_text(
            json.dumps(
                {
                    "data": {"tasks": [], "next_id": 0, "snapshots": []},
                    logs_key("2026-01-01"): [],
                    logs_key("2026-03-01"): [],
                    logs_key("2026-03-02"): [],
                }
            )
        )

    def test_sweep_on_startup(self, tmp_path, clock):
        store_file = tmp_path / "data" / "heyfocus_data.json"
        self._seed(store_file)
        config_path = tmp_path / "config.yaml"
        config_path.write_text(f"data_dir: {tmp_path / 'data'}\nlog_retention_days: 7\n")

        app = create_app(str(config_path), clock=clock)

        assert app.extensions["data_store"].log_days() == ["2026-03-01", "2026-03-02"]
        assert logs_key("2026-01-01") not in json.loads(store_file.read_text())

    def test_no_sweep_by_default(self, config_file, tmp_path, clock):
        self._seed(tmp_path / "data" / "heyfocus_data.json")
        app = create_app(str(config_file), clock=clock)
        assert len(app.extensions["data_store"].log_days()) == 3


class TestLoadDotenv:
    """Tests for _load_dotenv helper."""

    def test_load_dotenv_parses_file(self, tmp_path, monkeypatch):
        (tmp_path / ".env").write_text(
            """
# Comment line
HEYFOCUS_TEST_VAR=test_value
HEYFOCUS_QUOTED="quoted value"
"""
        )
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("HEYFOCUS_TEST_VAR", raising=False)
        monkeypatch.delenv("HEYFOCUS_QUOTED", raising=False)

        _load_dotenv()

        assert os.environ.get("HEYFOCUS_TEST_VAR") == "test_value"
        assert os.environ.get("HEYFOCUS_QUOTED") == "quoted value"

    def test_load_dotenv_does_not_override(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HEYFOCUS_EXISTING", "original")
        (tmp_path / ".env").write_text("HEYFOCUS_EXISTING=new_value\n")
        monkeypatch.chdir(tmp_path)

        _load_dotenv()

        assert os.environ["HEYFOCUS_EXISTING"] == "original"

    def test_load_dotenv_handles_missing_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        _load_dotenv()
