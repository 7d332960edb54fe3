"""Application configuration using Pydantic Settings."""

from typing import Dict, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # OpenRouter
    OPENROUTER_API_KEY: Optional[str] = None
    OPENROUTER_BASE_URL: str = "https://openrouter.ai/api/v1"
    SITE_URL: str = "https://github.com/knife-brand-finder"
    SITE_NAME: str = "Knife Brand Website Finder"

    # Model keys -> OpenRouter model ids (":online" enables web search)
    MODELS: Dict[str, str] = {
        "gpt-4o": "openai/gpt-4o:online",
        "gpt-4o-mini": "openai/gpt-4o-mini:online",
        "anthropic/claude-sonnet-4": "anthropic/claude-sonnet-4:online",
        "gemini-2.5-pro": "google/gemini-2.5-pro-preview:online",
        "gemini-2.0-flash-001": "google/gemini-2.0-flash-001",
        "qwen-2.5-72b": "qwen/qwen-2.5-72b-instruct:online",
        "llama-3.1-70b": "meta-llama/llama-3.1-70b-instruct:online",
        "perplexity/sonar-deep-research": "perplexity/sonar-deep-research",
    }
    DEFAULT_MODEL: str = "gpt-4o-mini"

    # Batch
    INITIAL_BRAND_COUNT: int = 10
    BRANDS_FILE: str = "brandNames.json"
    OUTPUT_DIR: str = "./results"
    REQUEST_TIMEOUT: float = 90.0
    REQUEST_DELAY: float = 1.0  # Seconds between requests

    # Completion parameters
    TEMPERATURE: float = 0.1
    MAX_TOKENS: int = 1000

    # Credits are reported in micro-dollars
    CREDIT_TO_USD: float = 0.000001

    # Exit policy
    FAIL_ON_ALL_FAILED: bool = True
    WARN_FAILURE_RATIO: float = 0.5

    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")


# Global settings instance
settings = Settings()
