"""HeyFocus application factory.

Builds the Flask app and wires the services it serves:

- ConfigService: config.yaml plus the HEYFOCUS_BUILD override
- JsonFileStore / DataStore: Persistence of tasks and per-day logs
- TaskStateMachine: Single owner of the task state
- CommandDispatcher: Named command entry point used by the routes
- EventBus: SSE broadcasting of state changes
- StatsService: Activity statistics

Usage:
    from heyfocus.app import create_app
    app = create_app()
    app.run(port=5151)
"""

import logging
import os
from pathlib import Path

from flask import Flask

from heyfocus.models import AppConfig
from heyfocus.routes import register_blueprints
from heyfocus.services import (
    Clock,
    CommandDispatcher,
    DataStore,
    JsonFileStore,
    StatsService,
    TaskStateMachine,
    get_config_service,
    get_event_bus,
)

logger = logging.getLogger(__name__)


def _load_dotenv(env_file: Path = Path(".env")) -> None:
    """Export KEY=value pairs from `env_file` without overriding the environment."""
    if not env_file.is_file():
        return
    for raw in env_file.read_text().splitlines():
        entry = raw.strip()
        if not entry or entry.startswith("#") or "=" not in entry:
            continue
        key, _, value = entry.partition("=")
        key = key.strip()
        if key:
            os.environ.setdefault(key, value.strip().strip("\"'"))


def create_app(config_path: str = "config.yaml", clock: Clock | None = None) -> Flask:
    """Build the HeyFocus Flask app.

    Args:
        config_path: Location of config.yaml.
        clock: Clock override (tests pass a frozen clock).

    Returns:
        Flask app with every service registered in `app.extensions`.
    """
    _load_dotenv()

    config_service = get_config_service(config_path)
    config = config_service.get_config()

    app = Flask(__name__)

    app.extensions["config"] = config
    app.extensions["config_service"] = config_service

    _init_services(app, config, clock or Clock())

    register_blueprints(app)

    return app


def _init_services(app: Flask, config: AppConfig, clock: Clock) -> None:
    """Create the store, state machine, dispatcher and stats service.

    Args:
        app: Flask application.
        config: Validated AppConfig.
        clock: Clock shared by every service.
    """
    store_path = Path(config.data_dir) / config.store_file
    data_store = DataStore(JsonFileStore(store_path), clock=clock)
    app.extensions["data_store"] = data_store

    if config.log_retention_days:
        data_store.sweep_logs(config.log_retention_days)

    state_machine = TaskStateMachine(data_store, clock=clock)
    app.extensions["state_machine"] = state_machine

    event_bus = get_event_bus()
    app.extensions["event_bus"] = event_bus

    app.extensions["dispatcher"] = CommandDispatcher(state_machine, event_bus)
    app.extensions["stats_service"] = StatsService(clock=clock)

    logger.info(f"Services initialized (build={config.build}, store={store_path})")


def main():
    """Console entry point: configure logging and serve the API."""
    _load_dotenv()
    config = get_config_service().get_config()
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    app = create_app()

    logger.info(f"Starting HeyFocus on {config.host}:{config.port}")
    app.run(host=config.host, port=config.port, debug=config.build == "debug", threaded=True)


if __name__ == "__main__":
    main()
