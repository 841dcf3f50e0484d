"""Runtime settings for doctable."""

from __future__ import annotations

import os

from pydantic import BaseModel, Field

DEFAULT_DATABASE_URL = "sqlite:///./doctable.db"
DEFAULT_ID_FIELD = "_id"

_TRUE_VALUES = {"1", "true", "yes", "on"}


class Settings(BaseModel):
    """Connection and collection defaults.

    Resolved from DOCTABLE_* environment variables by from_env().
    """

    database_url: str = Field(default=DEFAULT_DATABASE_URL, description="SQLAlchemy URL")
    echo: bool = Field(default=False, description="Echo SQL statements")
    id_field: str = Field(default=DEFAULT_ID_FIELD, description="Default identifier field")

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> Settings:
        """Build settings from environment variables.

        Args:
            environ: Mapping to read from (defaults to os.environ)
        """
        env = os.environ if environ is None else environ
        return cls(
            database_url=env.get("DOCTABLE_URL") or DEFAULT_DATABASE_URL,
            echo=env.get("DOCTABLE_ECHO", "").strip().lower() in _TRUE_VALUES,
            id_field=env.get("DOCTABLE_ID_FIELD") or DEFAULT_ID_FIELD,
        )


def get_database_url(url: str | None) -> str:
    """Resolve database URL from an explicit argument, DOCTABLE_URL, or default.

    Priority:
    1. Explicit URL argument
    2. DOCTABLE_URL environment variable
    3. Default: sqlite:///./doctable.db
    """
    if url:
        return url
    return Settings.from_env().database_url
