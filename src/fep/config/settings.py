"""Application settings loaded from environment."""

from typing import Literal, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


EnrichmentMode = Literal["ai", "rules", "hybrid"]


class EnrichmentConfig(BaseModel):
    """Explicit enrichment policy handed to the orchestrator."""

    mode: EnrichmentMode = "hybrid"
    ai_enabled: bool = True
    max_attempts: int = 5
    prompt_version: str = "v001"


class Settings(BaseSettings):
    """Strongly typed settings for the pipeline."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Database
    database_url: Optional[str] = Field(default=None, alias="DATABASE_URL")
    pghost: Optional[str] = Field(default=None, alias="PGHOST")
    pgport: int = Field(default=5432, alias="PGPORT")
    pguser: Optional[str] = Field(default=None, alias="PGUSER")
    pgpassword: Optional[str] = Field(default=None, alias="PGPASSWORD")
    pgdatabase: Optional[str] = Field(default=None, alias="PGDATABASE")

    # Enrichment
    enrichment_mode: EnrichmentMode = Field(default="hybrid", alias="ENRICHMENT_MODE")
    enrichment_ai_enabled: bool = Field(default=True, alias="ENRICHMENT_AI_ENABLED")
    enrichment_ai_provider: Literal["gemini", "openai"] = Field(
        default="gemini", alias="ENRICHMENT_AI_PROVIDER"
    )
    enrichment_max_attempts: int = Field(default=5, alias="ENRICHMENT_MAX_ATTEMPTS")
    enrichment_prompt_version: str = Field(default="v001", alias="ENRICHMENT_PROMPT_VERSION")
    enrichment_dispatch_interval_seconds: float = Field(
        default=3.0, alias="ENRICHMENT_DISPATCH_INTERVAL_SECONDS"
    )
    enrichment_workers: int = Field(default=2, alias="ENRICHMENT_WORKERS")
    enrichment_dispatch_limit: int = Field(default=15, alias="ENRICHMENT_DISPATCH_LIMIT")

    # Gemini
    google_api_key: Optional[str] = Field(default=None, alias="GOOGLE_API_KEY")
    gemini_model_id: str = Field(default="gemini-2.5-flash", alias="GEMINI_MODEL_ID")
    gemini_api_base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        alias="GEMINI_API_BASE_URL",
    )
    gemini_temperature: float = Field(default=0.2, alias="GEMINI_TEMPERATURE")
    gemini_timeout_seconds: int = Field(default=45, alias="GEMINI_TIMEOUT_SECONDS")

    # OpenAI
    openai_api_key: Optional[str] = Field(default=None, alias="OPENAI_API_KEY")
    openai_model_id: str = Field(default="gpt-4o-mini", alias="OPENAI_MODEL_ID")
    openai_api_url: str = Field(
        default="https://api.openai.com/v1/chat/completions", alias="OPENAI_API_URL"
    )
    openai_temperature: float = Field(default=0.2, alias="OPENAI_TEMPERATURE")
    openai_timeout_seconds: int = Field(default=45, alias="OPENAI_TIMEOUT_SECONDS")

    # Catalog
    catalog_timezone: str = Field(default="Europe/Prague", alias="CATALOG_TIMEZONE")
    source_default_days: dict[str, int] = Field(
        default_factory=lambda: {
            "visitostrava": 14,
            "ostravainfo": 30,
            "allevents": 60,
            "kulturajih": 30,
            "kudyznudy": 30,
        },
        alias="SOURCE_DEFAULT_DAYS",
    )
    fallback_days: int = Field(default=30, alias="SOURCE_FALLBACK_DAYS")
    deactivate_grace_hours: int = Field(default=0, alias="DEACTIVATE_GRACE_HOURS")

    # Runtime
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    run_env: str = Field(default="local", alias="RUN_ENV")

    def get_database_url(self) -> str:
        """Return a usable database URL or raise."""
        if self.database_url:
            return self.database_url

        if all([self.pghost, self.pguser, self.pgpassword, self.pgdatabase]):
            return (
                "postgresql://"
                f"{self.pguser}:{self.pgpassword}@{self.pghost}:{self.pgport}/"
                f"{self.pgdatabase}"
            )

        raise ValueError("DATABASE_URL or PG* env vars must be set")

    def days_for_source(self, source: str) -> int:
        """Return the scrape window in days for a source."""
        days = self.source_default_days.get(source, self.fallback_days)
        return days if days > 0 else self.fallback_days

    def enrichment_config(self) -> EnrichmentConfig:
        """Build the explicit enrichment policy from environment settings."""
        return EnrichmentConfig(
            mode=self.enrichment_mode,
            ai_enabled=self.enrichment_ai_enabled,
            max_attempts=self.enrichment_max_attempts,
            prompt_version=self.enrichment_prompt_version,
        )
