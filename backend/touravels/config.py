"""
TourAvels Backend — Application Configuration
==============================================

What:  Centralized configuration management using Pydantic Settings.
Why:   Type-safe environment variable loading (DB_USER, DB_PASS, PORT, ...).
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a singleton `settings` object.
Who:   Imported by main.py, database.py and the CLI entry point.
When:  Loaded once at module import time; presence-checked during startup.
"""

from typing import List
from urllib.parse import quote_plus

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


DEFAULT_CORS_ORIGINS = (
    "http://localhost:5173,"
    "https://touravels.vercel.app,"
    "https://touravels.netlify.app"
)


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Only the database credentials are required; everything else has a
    working default for the hosted Atlas cluster.
    """

    # ── Database ──────────────────────────────────────────────────────────
    # What: Atlas credentials, combined into a mongodb+srv:// URI
    db_user: str = Field(default="", description="MongoDB username")
    db_pass: str = Field(default="", description="MongoDB password")
    db_cluster_host: str = Field(default="cluster0.0coytx6.mongodb.net")

    # What: Full connection string; when set, user/pass/host are ignored
    # Why: Local development and tests point at a plain mongodb:// server
    mongodb_uri: str = Field(default="", description="Full MongoDB URI override")

    db_name: str = Field(default="touristsSpotDB")
    spots_collection: str = Field(default="touristsSpot")
    plans_collection: str = Field(default="tourPlans")

    # What: How many times startup tries to reach the cluster before giving up
    # Trade-off: More attempts ride out a cold Atlas cluster but delay a failed deploy
    db_connect_attempts: int = Field(default=3, ge=1, le=10)
    db_connect_min_wait: int = Field(default=1, ge=0, le=30)
    db_connect_max_wait: int = Field(default=8, ge=1, le=120)
    db_server_selection_timeout_ms: int = Field(default=10_000, ge=500, le=120_000)

    # What: Startup failure policy
    # True:  connection failure aborts startup (platform marks the deploy failed)
    # False: log and keep serving; every request returns 500 until /health reconnects
    db_abort_on_connect_failure: bool = Field(default=True)

    # ── CORS ──────────────────────────────────────────────────────────────
    # Format: Comma-separated URLs (parsed by cors_origins_list below)
    cors_origins: str = Field(default=DEFAULT_CORS_ORIGINS)

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # ── Server ────────────────────────────────────────────────────────────
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=5000, ge=1, le=65535)

    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,  # DB_USER and db_user both work
        "extra": "ignore",
    }

    @property
    def database_uri(self) -> str:
        """
        What:  The connection string handed to the driver.
        How:   MONGODB_URI wins; otherwise an Atlas SRV URI is assembled from
               the credentials (URL-escaped, since passwords may contain '@' or ':').
        """
        if self.mongodb_uri:
            return self.mongodb_uri
        return (
            f"mongodb+srv://{quote_plus(self.db_user)}:{quote_plus(self.db_pass)}"
            f"@{self.db_cluster_host}/?retryWrites=true&w=majority&appName=Cluster0"
        )

    def validate_required(self) -> None:
        """
        What:  Presence check for the credentials.
        When:  Called during app startup (lifespan), before the first connect.
        Raises: ValueError listing every missing variable.
        """
        if self.mongodb_uri:
            return
        errors = []
        if not self.db_user:
            errors.append("DB_USER is not set")
        if not self.db_pass:
            errors.append("DB_PASS is not set")
        if errors:
            raise ValueError(
                "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            )


# Singleton instance — imported throughout the application
settings = Settings()
