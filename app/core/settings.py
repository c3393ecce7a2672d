from __future__ import annotations

from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "gpccmp-careplan-api"

    # LLM integration (OpenAI)
    # IMPORTANT (healthcare safety): keep configuration explicit and avoid implicit logging.
    openai_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("OPENAI_API_KEY", "openai_api_key"),
        description="OpenAI API key (required for /api/careplan, checked per request).",
    )
    openai_model: str = Field(
        default="gpt-4o-mini",
        validation_alias=AliasChoices("OPENAI_MODEL", "openai_model"),
        description="OpenAI model identifier used for care plan generation.",
    )
    openai_base_url: str = Field(
        default="https://api.openai.com/v1",
        validation_alias=AliasChoices("OPENAI_BASE_URL", "openai_base_url"),
        description="Base URL for OpenAI API (override for proxies/emulators).",
    )
    openai_timeout_seconds: float = Field(
        default=60.0,
        ge=1.0,
        validation_alias=AliasChoices("OPENAI_TIMEOUT_SECONDS", "openai_timeout_seconds"),
        description="Timeout for OpenAI API requests (seconds).",
    )
    openai_log_upstream_error_messages: bool = Field(
        default=False,
        validation_alias=AliasChoices(
            "OPENAI_LOG_UPSTREAM_ERROR_MESSAGES",
            "openai_log_upstream_error_messages",
        ),
        description=(
            "If true, log the upstream `error.message` of non-2xx responses at DEBUG. "
            "Off by default: the message can echo a masked key or request details."
        ),
    )

    # Generation parameters for the care plan prompt.
    care_plan_temperature: float = Field(
        default=0.3,
        ge=0.0,
        le=2.0,
        validation_alias=AliasChoices("CARE_PLAN_TEMPERATURE", "care_plan_temperature"),
        description="Sampling temperature for care plan generation.",
    )
    care_plan_max_tokens: int = Field(
        default=4000,
        ge=1,
        validation_alias=AliasChoices("CARE_PLAN_MAX_TOKENS", "care_plan_max_tokens"),
        description="Maximum number of output tokens for a generated care plan.",
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
