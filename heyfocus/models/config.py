"""Application configuration models with Pydantic validation."""

from typing import Literal

from pydantic import BaseModel, Field

DEBUG_STORE_FILE = "heyfocus_data_dev.json"
RELEASE_STORE_FILE = "heyfocus_data.json"


class AppConfig(BaseModel):
    """Root application configuration.

    Loaded from config.yaml and validated with Pydantic.
    """

    build: Literal["debug", "release"] = Field(
        default="release",
        description="Build flavour; selects the store file",
    )
    data_dir: str = Field(
        default="data",
        description="Directory holding the store file",
    )
    log_retention_days: int | None = Field(
        default=None,
        ge=1,
        le=3650,
        description="Days of per-day activity logs to keep (None keeps all)",
    )
    host: str = Field(
        default="127.0.0.1",
        description="Host for the Flask server",
    )
    port: int = Field(
        default=5151,
        ge=1024,
        le=65535,
        description="Port for the Flask server",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging level for the application",
    )

    @property
    def store_file(self) -> str:
        """Store file name for the configured build."""
        return DEBUG_STORE_FILE if self.build == "debug" else RELEASE_STORE_FILE
