"""Application Configuration - environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - Missing secrets stay None; handlers answer with a configuration error
    - get_settings() is cached (lru_cache) - single instance per process
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Paradigm (document search / analysis family)
    paradigm_api_key: str | None = None
    paradigm_base_url: str = "https://paradigm.lighton.ai/api/v2"
    paradigm_default_model: str = "alfred-4.2"

    # Document analysis runs asynchronously upstream
    analysis_poll_interval_seconds: float = 2.0
    analysis_poll_max_attempts: int = 30

    # OpenAI (workflow generation)
    openai_api_key: str | None = None
    openai_base_url: str = "https://api.openai.com/v1"
    openai_model: str = "gpt-4"
    openai_test_model: str = "gpt-3.5-turbo"

    # Anthropic (connectivity check only)
    anthropic_api_key: str | None = None
    anthropic_test_model: str = "claude-3-5-sonnet-20241022"

    http_timeout_seconds: float = 120.0

    # Public endpoint written into generated tool configs
    execute_workflow_url: str = (
        "https://scaffold-ai-test1.vercel.app/api/execute-workflow"
    )

    # API
    cors_origins: list[str] = ["http://localhost:3000"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
