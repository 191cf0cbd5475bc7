"""
Configuration module for environment variables.
"""
from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # GitHub
    github_token: str = Field(
        default="",
        description="Personal Access Token used until one is stored via the API"
    )
    github_api_base: str = Field(default="https://api.github.com")
    github_user_agent: str = Field(default="GitHubIssueManager")
    http_timeout: float = Field(
        default=30.0,
        description="Timeout in seconds for outbound GitHub requests"
    )

    # Local persistence
    data_dir: str = Field(
        default="./Data",
        description="Directory holding auth.json, watched-repositories.json and saved-filters.json"
    )

    # JWT
    jwt_secret_key: str = Field(default="CHANGE_THIS_SECRET_KEY_FOR_PRODUCTION_USE")
    jwt_algorithm: str = Field(default="HS256")
    jwt_issuer: str = Field(default="GitHubIssueManager")
    jwt_audience: str = Field(default="GitHubIssueManager.Api")
    jwt_expire_hours: int = Field(default=24)

    # MCP
    mcp_require_auth: bool = Field(default=True)

    # Server
    server_host: str = Field(default="0.0.0.0")
    server_port: int = Field(default=8000)
    cors_origins: List[str] = Field(default=["*"])

    # Application Settings
    app_env: str = Field(default="development")
    debug: bool = Field(default=True)
    log_level: str = Field(default="INFO")
    log_file: str = Field(default="")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    Uses lru_cache to ensure settings are loaded only once.
    """
    return Settings()


# Convenience function for direct access
settings = get_settings()
