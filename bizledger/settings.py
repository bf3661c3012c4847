"""Application configuration from environment variables."""

from functools import lru_cache
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # Application
    app_name: str = "Bizledger"
    environment: str = "development"  # 'development' or 'production'
    cors_origins: list[str] = ["*"]

    # Database
    data_dir: Path = Path("data")
    database_path: Path = Path("data/bizledger.db")

    # Completion provider (Mistral chat completions)
    mistral_api_key: str = ""
    mistral_model: str = "mistral-small-latest"
    mistral_base_url: str = "https://api.mistral.ai/v1"
    provider_timeout_seconds: float = 30.0
    provider_temperature: float = 0.7
    provider_max_tokens: int = 1500

    # Analysis
    currency_symbol: str = "₽"
    small_expense_threshold: float = 1000.0  # Expenses below this count as "small"
    frequent_small_expense_warning: int = 10  # Warn above this many small expenses
    top_categories_limit: int = 10

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    @field_validator("provider_timeout_seconds")
    @classmethod
    def _clamp_timeout(cls, value: float) -> float:
        return min(max(value, 5.0), 30.0)

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def provider_configured(self) -> bool:
        return bool(self.mistral_api_key)


@lru_cache
def get_settings() -> Settings:
    """Settings loaded once per process."""
    return Settings()
