"""Configuration management for the Usesend transport."""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_API_URL = "https://app.usesend.com"
EMAILS_PATH = "/api/v1/emails"


class Settings(BaseSettings):
    """Transport configuration; explicit arguments win over the environment."""

    api_key: str = Field(..., alias="USESEND_API_KEY", min_length=1)
    api_url: str = Field(DEFAULT_API_URL, alias="USESEND_API_URL")
    request_timeout: float = Field(30.0, alias="USESEND_TIMEOUT", gt=0)
    fetch_timeout: float = Field(30.0, alias="USESEND_FETCH_TIMEOUT", gt=0)
    max_workers: int = Field(4, alias="USESEND_MAX_WORKERS", ge=1)
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
        frozen=True,
    )

    @field_validator("api_url", mode="before")
    @classmethod
    def _normalize_api_url(cls, value):
        if value is None:
            return DEFAULT_API_URL
        if isinstance(value, str):
            stripped = value.strip().rstrip("/")
            return stripped or DEFAULT_API_URL
        return value

    @field_validator("api_key", mode="before")
    @classmethod
    def _strip_api_key(cls, value):
        if isinstance(value, str):
            return value.strip()
        return value

    @property
    def emails_url(self) -> str:
        return f"{self.api_url}{EMAILS_PATH}"

    @classmethod
    def from_options(cls, **options) -> "Settings":
        """Build settings from field-named options, skipping the ``None`` ones."""
        values = {}
        for key, value in options.items():
            if value is None:
                continue
            field = cls.model_fields.get(key)
            if field is None:
                raise TypeError(f"Unknown transport option: {key}")
            values[field.alias or key] = value
        return cls(**values)
