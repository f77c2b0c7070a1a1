"""
Application configuration from environment variables.
Loads .env from the backend directory so API keys are found regardless of cwd.
"""
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_SUPPORTED_PROVIDERS = frozenset({"openrouter", "claude", "mock"})

# .env next to backend/ (parent of app/); loaded explicitly so keys are set even when run from repo root
_BACKEND_DIR = Path(__file__).resolve().parent.parent
_ENV_FILE = _BACKEND_DIR / ".env"

if _ENV_FILE.exists():
    from dotenv import load_dotenv
    load_dotenv(_ENV_FILE, override=False)
else:
    # Fallback: try backend/.env relative to cwd (e.g. when running from repo root)
    import os
    _cwd_env = Path(os.getcwd()) / "backend" / ".env"
    if _cwd_env.exists():
        from dotenv import load_dotenv
        load_dotenv(_cwd_env, override=False)


class Settings(BaseSettings):
    """Load and validate config from env."""

    model_config = SettingsConfigDict(
        env_file=_ENV_FILE if _ENV_FILE.exists() else None,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database: sqlite for local dev and tests, postgresql for production
    database_url: str = "sqlite:///./refresher_dev.db"

    # Environment: set ENV=production in production; used to enforce SECRET_KEY.
    env: str = ""

    # JWT issued by the external auth layer; sub = owner UUID.
    secret_key: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    jwt_expire_hours: int = 24

    # AI provider: openrouter (OpenAI-compatible), claude, or mock (deterministic, no network).
    llm_provider: str = "openrouter"
    openrouter_api_key: str = ""
    openrouter_model: str = "openai/gpt-3.5-turbo"
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    claude_api_key: str = ""
    claude_model: str = "claude-3-5-haiku-latest"

    # Per-call timeout; a timed-out call is retried once after ai_retry_wait_seconds.
    ai_generation_timeout_seconds: float = 30.0
    ai_retry_wait_seconds: float = 1.0

    # Generation quota per owner (fixed window, counted in the database so all workers agree).
    ai_rate_limit_per_hour: int = 5
    ai_rate_limit_window_seconds: int = 3600

    # Accepted provider batch size
    generation_min_topics: int = 3
    generation_max_topics: int = 10

    # Field bounds. Description bound depends on deployment profile (1000 or 5000).
    topic_description_max_length: int = 1000
    generation_hint_max_length: int = 500
    # Max completed titles sent to the provider to steer it away from duplicates
    completed_titles_context_limit: int = 50

    # CORS: comma-separated origins
    cors_origins: str = "http://localhost:3000"

    debug: bool = False

    @field_validator("llm_provider", mode="before")
    @classmethod
    def _normalize_provider(cls, v: str) -> str:
        s = (v or "openrouter").strip().lower() if isinstance(v, str) else "openrouter"
        if s not in _SUPPORTED_PROVIDERS:
            raise ValueError(f"LLM_PROVIDER must be one of: {', '.join(sorted(_SUPPORTED_PROVIDERS))}")
        return s

    @property
    def active_llm_model(self) -> str:
        """Model name for display and logs."""
        if self.llm_provider == "claude":
            return self.claude_model
        if self.llm_provider == "mock":
            return "mock"
        return self.openrouter_model


settings = Settings()
