"""
Application configuration via environment variables.

Uses Pydantic BaseSettings to load and validate all config from env vars
or a .env.local file. Every setting has a sensible default for local
development so the service can start and extract fields with no CRM
credentials at all.
"""

from __future__ import annotations

from enum import Enum
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Deployment environment selector."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class Settings(BaseSettings):
    """
    Central configuration for the Call Field Extraction Service.

    Values are loaded from environment variables first, falling back
    to a `.env.local` file in the project root. Secrets should NEVER
    be committed; use `.env.example` as the template.
    """

    model_config = SettingsConfigDict(
        env_file=".env.local",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── Environment ──────────────────────────────────────────────
    environment: Environment = Environment.DEVELOPMENT

    # ── CRM (LeadConnector-style contacts API) ───────────────────
    crm_base_url: str = Field(
        default="https://services.leadconnectorhq.com",
        description="Base URL of the CRM REST API",
    )
    crm_api_version: str = Field(default="2021-07-28", description="Value sent in the Version header")
    crm_api_token: str = Field(default="", description="Private integration token for the CRM")
    crm_timeout_seconds: float = Field(default=15.0, gt=0, le=120, description="Per-request CRM timeout")

    # ── Webhook ──────────────────────────────────────────────────
    webhook_secret: str = Field(
        default="",
        description="Shared secret expected in the x-vapi-secret header (empty disables the check)",
    )

    # ── Transcript parsing ───────────────────────────────────────
    assistant_names: list[str] = Field(
        default_factory=lambda: ["Olivia", "Assistant", "AI Assistant", "AI", "Bot"],
        description="Speaker labels that identify the interviewer",
    )
    extra_speaker_labels: list[str] = Field(
        default_factory=list,
        description="Additional respondent labels recognised in flat transcripts",
    )

    # ── Logging ──────────────────────────────────────────────────
    log_level: str = Field(default="INFO", description="Root log level")

    # ── Derived helpers ──────────────────────────────────────────

    @property
    def is_production(self) -> bool:
        return self.environment == Environment.PRODUCTION

    @property
    def is_development(self) -> bool:
        return self.environment == Environment.DEVELOPMENT

    @property
    def crm_configured(self) -> bool:
        return bool(self.crm_api_token)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Return cached Settings instance.

    Using lru_cache ensures we read env vars exactly once, and every
    module that calls ``get_settings()`` gets the same object.
    """
    return Settings()
