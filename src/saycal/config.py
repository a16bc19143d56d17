"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    openai_api_key: str
    openai_base_url: str = "https://api.openai.com/v1"
    openai_model: str = "gpt-4.1-mini"
    openai_temperature: float = 0.1
    openai_max_output_tokens: int = 1500
    openai_web_search: bool = True
    openai_store: bool = False
    transcription_model: str = "whisper-1"
    default_audio_format: str = "webm"
    request_timeout_seconds: float = 60.0
    supabase_url: str
    supabase_service_key: str
    default_goal_calories: int = 2000
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
