"""Application settings loaded from environment variables."""

from __future__ import annotations

from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Health Overview server configuration."""

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    # Server
    # Loopback by default; health data should not be served to the LAN by accident.
    hov_host: str = "127.0.0.1"
    hov_port: int = 8001
    hov_log_level: str = "info"
    # Binding to a non-loopback host is refused unless this is set (there is no auth layer).
    hov_allow_insecure_bind: bool = False

    # Health store
    health_store_backend: Literal["simulated", "apple_health_export"] = "simulated"
    # YAML fixture seeding the simulated store; empty = start with no data
    health_fixture_path: str = ""
    apple_health_export_path: str = ""

    # Daily activity goals
    step_goal: int = 10_000
    floor_goal: int = 10


def get_settings() -> Settings:
    """Create and return a Settings instance."""
    return Settings()
