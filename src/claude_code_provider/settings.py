"""Provider settings using Pydantic BaseSettings."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Provider settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="CLAUDE_CODE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Home directory used to build the per-user install path
    home: str | None = Field(default=None, validation_alias="HOME")

    # Executable Configuration
    command: str = Field(default="claude", min_length=1)
    local_install_path: str = ".claude/local/claude"

    # Invocation Limits
    timeout_ms: int = Field(default=300_000, gt=0)
    long_prompt_chars: int = Field(default=100_000, gt=0)

    # Diagnostics
    snippet_chars: int = Field(default=500, gt=0)


# Global settings instance
settings = Settings()
