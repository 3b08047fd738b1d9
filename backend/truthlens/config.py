from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # OpenAI
    # Default empty string allows tests to run without .env; the collaborators
    # fall back to their degraded results if the key is missing at runtime
    openai_api_key: str = ""

    # Models used by the two AI collaborators
    hallucination_model: str = "gpt-4o-mini"
    explainability_model: str = "gpt-4o-mini"

    # Hallucination context
    # Number of leading dataset rows sent as grounding context
    context_sample_rows: int = 15

    # Hard cap on the serialized context sample (characters)
    context_max_chars: int = 3000

    # Frontend origins allowed by CORS
    cors_origins: list[str] = ["http://localhost:5173"]

    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env")


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance."""
    return Settings()
