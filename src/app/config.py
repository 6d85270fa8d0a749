"""Configuration management using Pydantic settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "EVACROUTE"
    debug: bool = False
    log_level: str = "INFO"

    # Server: bound on all interfaces, PORT overrides the port
    host: str = "0.0.0.0"
    port: int = 3000

    # Floor geometry used for the authority's own routes (JSON layout file).
    # Empty means no geometry: snapshots still flow, /api/routes is empty.
    floor_layout: str = ""


settings = Settings()
