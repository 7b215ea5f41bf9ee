from functools import lru_cache
from typing import Annotated, Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

NOMINATIM_SEARCH_URL = "https://nominatim.openstreetmap.org/search"
OPEN_METEO_FORECAST_URL = "https://api.open-meteo.com/v1/forecast"
DEFAULT_USER_AGENT = "WeatherAgent/1.0"

LLM_PROVIDERS = ("gemini", "openai")


class Settings(BaseSettings):
    """Runtime configuration, read from the environment and .env."""

    llm_provider: Literal["gemini", "openai"] = "gemini"
    gemini_api_key: str | None = None
    gemini_model: str = "gemini-2.5-flash"
    openai_api_key: str | None = None
    openai_model: str = "gpt-4o-mini"
    llm_temperature: float = 0.0
    llm_max_retries: int = 0

    geocoding_url: str = NOMINATIM_SEARCH_URL
    weather_url: str = OPEN_METEO_FORECAST_URL
    geocoder_user_agent: str = DEFAULT_USER_AGENT
    http_timeout: float | None = 10.0

    cors_origins: Annotated[tuple[str, ...], NoDecode] = ("http://localhost:3000",)
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
        frozen=True,
    )

    @field_validator("llm_provider", mode="before")
    @classmethod
    def normalize_provider(cls, value):
        if isinstance(value, str):
            value = value.strip().lower()
            if value not in LLM_PROVIDERS:
                raise ValueError(
                    f"LLM_PROVIDER must be one of {', '.join(LLM_PROVIDERS)}, got {value!r}"
                )
        return value

    @field_validator("http_timeout")
    @classmethod
    def zero_disables_timeout(cls, value: float | None) -> float | None:
        if value is not None and value <= 0:
            return None
        return value

    @field_validator("cors_origins", mode="before")
    @classmethod
    def split_origins(cls, value):
        # CORS_ORIGINS is comma-separated
        if isinstance(value, str):
            return tuple(origin.strip() for origin in value.split(",") if origin.strip())
        return value

    @property
    def api_key(self) -> str | None:
        """Credential for the selected provider, or None if unset."""
        if self.llm_provider == "openai":
            return self.openai_api_key or None
        return self.gemini_api_key or None

    @property
    def missing_credential_message(self) -> str:
        if self.llm_provider == "openai":
            return "OpenAI API key is not configured inside .env"
        return "Gemini API key is not configured inside .env"


@lru_cache
def get_settings() -> Settings:
    return Settings()
