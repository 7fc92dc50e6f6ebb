"""Application configuration derived from environment (FRUIT_* variables)."""
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Server settings with defaults for the Aurora Five cabinet."""

    model_config = SettingsConfigDict(env_prefix="FRUIT_")

    # Server
    debug: bool = False
    log_level: str = "INFO"

    # Protocol
    protocol_version: str = "1.0"

    # Machine selection (see fruitmachine.logic.presets)
    machine_preset: str = "aurora_five"

    # Economy overrides; None keeps the preset's own values
    spin_cost: int | None = None
    initial_credits: int | None = None

    # In-memory player sessions kept by the HTTP surface
    max_sessions: int = 1000


settings = Settings()
