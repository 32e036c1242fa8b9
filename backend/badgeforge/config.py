"""Configuration settings for BadgeForge."""

from datetime import UTC, datetime

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "BadgeForge"
    log_level: str = "INFO"
    environment: str = "development"  # "production" forces Secure cookies

    # Database
    database_url: str = "sqlite+aiosqlite:////data/badgeforge.db"

    # CORS settings
    cors_origins: str = '["http://localhost:3000"]'

    # X (Twitter) OAuth2 client
    x_client_id: str = ""
    x_client_secret: str = ""  # Empty = public client (client_id sent in body)
    x_redirect_uri: str = ""
    x_authorize_url: str = "https://twitter.com/i/oauth2/authorize"
    x_token_url: str = "https://api.twitter.com/2/oauth2/token"
    x_userinfo_url: str = "https://api.twitter.com/2/users/me"
    x_scopes: str = "users.read tweet.read"
    oauth_http_timeout: float = 10.0  # Seconds per upstream request

    # Sessions
    jwt_secret: str = ""
    session_days: int = 7

    # Founding ("OG") badge window
    launch_date: datetime | None = None
    og_window_hours: int = 24

    # Browser redirect targets
    home_url: str = "/index.html"
    landing_url: str = "/status.html"
    error_page_url: str = "/yellow.html"

    # Rate limits (slowapi syntax)
    rate_limit_login: str = "30/minute"
    rate_limit_claim: str = "60/minute"

    @field_validator("launch_date")
    @classmethod
    def assume_utc(cls, v: datetime | None) -> datetime | None:
        """Treat a naive launch date as UTC."""
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=UTC)
        return v

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def oauth_configured(self) -> bool:
        """Client id, callback URL and signing secret are all present."""
        return bool(
            self.x_client_id.strip() and self.x_redirect_uri.strip() and self.jwt_secret.strip()
        )


settings = Settings()


def get_settings() -> Settings:
    """Dependency returning the process-wide settings."""
    return settings
