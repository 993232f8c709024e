"""
Configuration settings for the Honourus API.
All sensitive values are loaded from environment variables.
"""

from pydantic_settings import BaseSettings
from pydantic import Field
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = "Honourus API"
    debug: bool = Field(default=False)
    environment: str = Field(default="production")

    # Server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)
    api_prefix: str = Field(default="/make-server-71b2722d")
    functions_prefix: str = Field(default="/functions/v1")

    # Database (PostgreSQL)
    database_url: str = Field(default="")
    database_echo: bool = Field(default=False)
    db_pool_size: int = Field(default=5)
    db_max_overflow: int = Field(default=10)
    db_pool_timeout: int = Field(default=30)
    db_pool_recycle: int = Field(default=1800)

    # Supabase auth
    supabase_url: str = Field(default="")
    supabase_anon_key: str = Field(default="")
    supabase_service_role_key: str = Field(default="")
    auth_timeout_seconds: float = Field(default=10.0)

    # Task tracker OAuth apps
    jira_client_id: str = Field(default="")
    jira_client_secret: str = Field(default="")
    clickup_client_id: str = Field(default="")
    clickup_client_secret: str = Field(default="")
    oauth_state_ttl_minutes: int = Field(default=15)
    oauth_http_timeout_seconds: float = Field(default=30.0)

    # Token encryption (Fernet key)
    encryption_key: Optional[str] = Field(default=None)

    # Credits
    award_credits_without_proof: bool = Field(default=False)

    # Rate limiting
    rate_limit_enabled: bool = Field(default=True)
    auth_rate_limit: str = Field(default="10/minute")
    redis_url: Optional[str] = Field(default=None)

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


# Global settings instance
settings = Settings()
