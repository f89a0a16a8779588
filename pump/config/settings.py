"""Configuration management using Pydantic Settings.

Settings are read from the environment (and an optional ``.env`` file) once at
startup by ``load_settings()`` and handed to the rest of the application
explicitly. There is no module-level settings instance.

The configuration is organized into logical groups:
- DatabaseConfig: backend selection and connection parameters (PUMP_DB_*)
- LastFMConfig: remote API credential and request shape (LASTFM_*)
- ImporterConfig: paging and parsing policy for an import run (PUMP_*)
- LoggingConfig: console and file logging levels
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

DatabaseBackendName = Literal["postgres", "sqlite"]
TimestampPolicy = Literal["lenient", "strict"]


class ConfigurationError(Exception):
    """Raised when required configuration is missing or inconsistent."""


class DatabaseConfig(BaseSettings):
    """Database backend selection and connection settings."""

    model_config = SettingsConfigDict(
        env_prefix="PUMP_DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    backend: DatabaseBackendName = "postgres"

    # Networked engine
    host: str = "localhost"
    port: int = 5432
    user: str = ""
    password: SecretStr = SecretStr("")
    name: str = "pump"

    # Embedded engine
    path: Path = Path("data/pump.db")

    echo: bool = False


class LastFMConfig(BaseSettings):
    """Last.fm recent tracks endpoint settings."""

    model_config = SettingsConfigDict(
        env_prefix="LASTFM_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    api_key: SecretStr = SecretStr("")
    username: str = ""
    api_url: str = "http://ws.audioscrobbler.com/2.0/"
    page_size: int = Field(default=10, ge=1, le=200)
    timeout: float = Field(default=30.0, gt=0)


class ImporterConfig(BaseSettings):
    """Policy parameters for a single import run."""

    model_config = SettingsConfigDict(
        env_prefix="PUMP_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    max_pages: int = Field(default=50, ge=1)
    stop_early: bool = True
    timestamp_policy: TimestampPolicy = "lenient"


class LoggingConfig(BaseSettings):
    """Logging configuration for console and file output."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    console_log_level: str = "INFO"
    file_log_level: str = "DEBUG"
    log_file: Path = Path("logs/pump.log")


class Settings(BaseModel):
    """Application settings assembled from the individual groups."""

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    lastfm: LastFMConfig = Field(default_factory=LastFMConfig)
    importer: ImporterConfig = Field(default_factory=ImporterConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    def require_lastfm_credentials(self) -> None:
        """Fail fast when an import cannot authenticate against Last.fm."""
        missing = []
        if not self.lastfm.api_key.get_secret_value():
            missing.append("LASTFM_API_KEY")
        if not self.lastfm.username:
            missing.append("LASTFM_USERNAME")
        if missing:
            raise ConfigurationError(
                f"Missing required environment variables: {', '.join(missing)}"
            )


def load_settings(env_file: str | Path | None = ".env") -> Settings:
    """Read every configuration group from the environment.

    Args:
        env_file: Optional dotenv file consulted after the process environment.
            Pass None to ignore dotenv files entirely.

    Returns:
        Fully populated Settings instance
    """
    return Settings(
        database=DatabaseConfig(_env_file=env_file),
        lastfm=LastFMConfig(_env_file=env_file),
        importer=ImporterConfig(_env_file=env_file),
        logging=LoggingConfig(_env_file=env_file),
    )
