"""Application configuration via Pydantic Settings.

All configuration is loaded from environment variables following 12-factor principles.
"""

import re

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_url: str = Field(
        description="PostgreSQL async connection string",
    )
    database_schema: str | None = Field(
        default=None,
        description="PostgreSQL schema for isolated environments (e.g., pr_42)",
    )

    @field_validator("database_schema")
    @classmethod
    def validate_database_schema(cls, v: str | None) -> str | None:
        if v is None:
            return None
        if not re.match(r"^[a-z_][a-z0-9_]{0,62}$", v):
            msg = "Invalid database_schema: must match ^[a-z_][a-z0-9_]{0,62}$"
            raise ValueError(msg)
        return v

    # JWT (tokens are issued by the identity provider; we only verify them)
    jwt_secret_key: str = Field(min_length=32, description="Secret key for verifying JWTs (minimum 32 characters)")
    jwt_algorithm: str = Field(default="HS256", description="JWT signing algorithm")
    jwt_access_token_expire_minutes: int = Field(
        default=30,
        description="Access token expiration in minutes (used by the CLI token helper)",
        gt=0,
    )

    # Admin
    admin_secret: str | None = Field(
        default=None,
        description="Shared secret for admin endpoints (X-Admin-Secret header); endpoints are open when unset",
    )

    # Geocoding
    geocoder_timeout: float = Field(
        default=10.0,
        description="Census geocoder request timeout in seconds",
        gt=0,
    )

    # Representative directory providers
    congress_gov_api_key: str | None = Field(
        default=None,
        description="Congress.gov API key for federal legislator data",
    )
    open_states_api_key: str | None = Field(
        default=None,
        description="Open States API key for state legislator data",
    )
    google_civic_api_key: str | None = Field(
        default=None,
        description="Google Civic Information API key for the aggregator sync",
    )
    upstream_timeout: float = Field(
        default=10.0,
        description="Directory provider request timeout in seconds",
        gt=0,
    )
    upstream_max_retries: int = Field(
        default=2,
        description="Retries on timeout, connection error, or HTTP 502/503/504",
        ge=0,
    )
    upstream_retry_delay: float = Field(
        default=0.5,
        description="Fixed delay in seconds between directory provider retries",
        ge=0,
    )

    # Outreach email (Postmark)
    postmark_server_token: str | None = Field(
        default=None,
        description="Postmark server API token",
    )
    email_from: str | None = Field(
        default=None,
        description="Sender address for outreach email",
    )
    email_from_name: str = Field(
        default="Cyber Kingdom of Christ",
        description="Sender display name for outreach email",
    )
    postmark_stream: str = Field(
        default="outreach",
        description="Postmark message stream",
    )
    postmark_template_alias: str = Field(
        default="",
        description="Postmark template alias; plain HTML mode is used when empty",
    )
    outreach_default_subject: str = Field(
        default="Message from a Cyber Kingdom of Christ user",
        description="Subject used when an outreach request has none",
    )
    outreach_batch_limit: int = Field(
        default=100,
        description="Maximum queued rows processed per deliver_queued call",
        gt=0,
    )
    site_url: str = Field(
        default="",
        description="Public site URL included in outreach email",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    log_dir: str | None = Field(
        default=None,
        description="Directory for log files (enables file logging with 24h rotation when set)",
    )

    # CORS
    cors_origins: str = Field(
        default="*",
        description="Comma-separated list of allowed CORS origins (default permissive)",
    )

    # API
    api_v1_prefix: str = Field(
        default="/api/v1",
        description="API version prefix",
    )

    @property
    def cors_origin_list(self) -> list[str]:
        """Parse CORS origins string into a list."""
        if not self.cors_origins.strip():
            return []
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def email_template_enabled(self) -> bool:
        """Whether outreach email is sent through a Postmark template."""
        return bool(self.postmark_template_alias.strip())


def get_settings() -> Settings:
    """Create and return application settings."""
    return Settings()  # type: ignore[call-arg]
