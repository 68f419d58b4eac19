"""
Application configuration using Pydantic settings.

Configuration is loaded from environment variables (and a `.env` file)
with sensible defaults. Using Pydantic's BaseSettings means we get:
- Type validation at startup (fail fast if config is wrong)
- Documentation of what's required vs optional
- Easy testing with different configurations

Mock mode enables local development without a MongoDB server.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables.
    For lists (like cors_origins), use comma-separated values in env.
    """

    # API Configuration
    api_title: str = "Exercise Tracker API"
    api_version: str = "v1"

    # MongoDB Configuration
    mongo_uri: str = Field(
        default="mongodb://localhost:27017",
        description="MongoDB connection string"
    )
    mongo_database: str = Field(
        default="exercise_tracker",
        description="Database holding the users and exercises collections"
    )
    mongo_server_selection_timeout_ms: int = Field(
        default=5000,
        description="How long the driver waits to find a server before failing an operation"
    )
    mongo_mock_mode: bool = Field(
        default=False,
        description="Use an in-memory document store instead of MongoDB."
    )

    # Server
    host: str = Field(default="0.0.0.0", description="Bind address")
    port: int = Field(default=5000, description="Listening port")

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    # CORS
    cors_origins: str = Field(
        default="*",
        description="Comma-separated list of allowed CORS origins."
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse comma-separated CORS origins into a list."""
        if self.cors_origins.strip() == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    def validate_required_fields(self) -> list[str]:
        """
        Return the names of required settings that are missing.

        The connection string is only required outside mock mode.
        """
        missing = []
        if not self.mongo_mock_mode and not self.mongo_uri:
            missing.append("MONGO_URI")
        return missing


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Settings are loaded once per process. For tests, call
    get_settings.cache_clear() to reset.
    """
    return Settings()
