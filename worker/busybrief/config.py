from __future__ import annotations

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings


DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_MAX_RETRIES = 3
DEFAULT_TIMEOUT_MS = 30000


class Settings(BaseSettings):
    """Application settings.

    Values may be provided via environment variables or a `.env` file. No
    prefix is used so the conventional OPENAI_* names work unchanged.
    """

    # HTTP
    cors_allow_origins: str = Field("*", description="Comma-separated origins")
    auth_secret: Optional[str] = Field(None, description="Bearer token; unset means open")
    environment: str = Field("development", description="development|production")

    # Upstream
    openai_api_key: Optional[str] = None
    openai_model: str = DEFAULT_MODEL
    openai_base_url: Optional[str] = None
    max_retries: int = DEFAULT_MAX_RETRIES
    timeout_ms: int = DEFAULT_TIMEOUT_MS

    # Pipeline
    brief_contract: str = Field("terse", description="terse|alignment")

    log_level: Optional[str] = None

    class Config:
        env_file = ".env"
        env_prefix = ""
        case_sensitive = False
        extra = "ignore"

    @property
    def api_key(self) -> Optional[str]:
        key = (self.openai_api_key or "").strip()
        return key or None

    @property
    def attempts(self) -> int:
        return self.max_retries if self.max_retries > 0 else DEFAULT_MAX_RETRIES

    @property
    def timeout_s(self) -> float:
        ms = self.timeout_ms if self.timeout_ms > 0 else DEFAULT_TIMEOUT_MS
        return ms / 1000.0


def load_settings() -> Settings:
    return Settings()  # type: ignore[call-arg]
