"""Application configuration loaded from the environment."""

from __future__ import annotations

from dataclasses import dataclass, replace
import os
from typing import Any, Optional

from dotenv import load_dotenv

load_dotenv()

DEFAULT_PROMPT = "How many rows are in the conversation?"


@dataclass(frozen=True)
class DatabaseConnection:
    """Configuration for the PostgreSQL connection."""
    host: str = "localhost"
    database: str = "memory_agent"
    user: str = "llama"
    password: str = "llama"
    driver: str = "PostgreSQL Unicode"
    timeout: int = 30

    @property
    def connection_string(self) -> str:
        """Generate pyodbc connection string."""
        return (
            f"DRIVER={{{self.driver}}};"
            f"SERVER={self.host};"
            f"DATABASE={self.database};"
            f"UID={self.user};"
            f"PWD={self.password};"
        )


@dataclass(frozen=True)
class Settings:
    """Application settings."""
    # Database
    connection: DatabaseConnection

    # OpenAI-compatible endpoint
    openai_api_key: str
    openai_base_url: str
    openai_model: str
    openai_temperature: float

    # Run settings
    request_timeout: Optional[float]
    extra_metadata_path: str
    llm_max_attempts: int
    llm_backoff_seconds: float

    def with_overrides(self, **overrides: Any) -> "Settings":
        """Return a copy with the given fields replaced (None values ignored)."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **changes) if changes else self


def _optional_float(value: str) -> Optional[float]:
    value = value.strip()
    return float(value) if value else None


def get_settings(**overrides: Any) -> Settings:
    """Load settings from environment variables.

    Keyword arguments override individual fields; ``user``, ``password``,
    ``dbname`` and ``host`` are applied to the database connection.
    """
    connection = DatabaseConnection(
        host=os.getenv("DB_HOST", "localhost"),
        database=os.getenv("DB_NAME", "memory_agent"),
        user=os.getenv("DB_USER", "llama"),
        password=os.getenv("DB_PASSWORD", "llama"),
        driver=os.getenv("DB_DRIVER", "PostgreSQL Unicode"),
        timeout=int(os.getenv("DB_TIMEOUT", "30")),
    )

    db_overrides = {
        "host": overrides.pop("host", None),
        "database": overrides.pop("dbname", None),
        "user": overrides.pop("user", None),
        "password": overrides.pop("password", None),
    }
    db_overrides = {key: value for key, value in db_overrides.items() if value is not None}
    if db_overrides:
        connection = replace(connection, **db_overrides)

    settings = Settings(
        connection=connection,
        # An empty key is not rejected here; the endpoint reports it as an auth failure
        openai_api_key=os.getenv("OPENAI_API_KEY", ""),
        openai_base_url=os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1").rstrip("/"),
        openai_model=os.getenv("OPENAI_MODEL", "gpt-4o"),
        openai_temperature=float(os.getenv("OPENAI_TEMPERATURE", "0.7")),
        request_timeout=_optional_float(os.getenv("REQUEST_TIMEOUT", "")),
        extra_metadata_path=os.getenv("EXTRA_METADATA_PATH", "metadata.json"),
        llm_max_attempts=int(os.getenv("LLM_MAX_ATTEMPTS", "1")),
        llm_backoff_seconds=float(os.getenv("LLM_BACKOFF_SECONDS", "0.5")),
    )
    return settings.with_overrides(**overrides)
