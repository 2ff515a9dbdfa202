"""Application configuration using Pydantic settings."""
from __future__ import annotations

from functools import lru_cache
from typing import Any, Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class GenerationTuning(BaseModel):
    max_output_tokens: int = Field(default=16_384, ge=256)
    retry_max_output_tokens: int = Field(default=16_384, ge=256)
    integration_max_output_tokens: int = Field(default=4_096, ge=256)
    critic_max_output_tokens: int = Field(default=4_096, ge=256)
    platform_timeout_s: float | None = Field(default=None, gt=0)
    max_concurrency: int | None = Field(default=None, ge=1)
    response_preview_chars: int = 500


class ObservabilitySettings(BaseModel):
    otel_service_name: str = "specgen"
    otel_exporter_otlp_endpoint: str | None = None
    log_level: str = "INFO"


class AnthropicSettings(BaseModel):
    base_url: str = Field(
        default="https://api.anthropic.com",
        description="Base URL for the Anthropic Messages API",
    )
    api_key: str = Field(default="", description="API key for Anthropic access")
    model: str = "claude-sonnet-4-20250514"
    api_version: str = "2023-06-01"
    timeout_s: float = 120.0


class SpecgenSettings(BaseSettings):
    generation: GenerationTuning = GenerationTuning()
    observability: ObservabilitySettings = ObservabilitySettings()
    anthropic: AnthropicSettings = AnthropicSettings()
    environment: Literal["dev", "qa", "prod"] | str = "dev"

    model_config = SettingsConfigDict(env_nested_delimiter="__", env_prefix="SPECGEN_", case_sensitive=False)


@lru_cache(maxsize=1)
def get_settings(**kwargs: Any) -> SpecgenSettings:
    """Return cached settings instance."""
    return SpecgenSettings(**kwargs)


__all__ = ["SpecgenSettings", "get_settings"]
