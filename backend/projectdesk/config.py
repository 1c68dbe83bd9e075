"""
ProjectDesk Configuration

Environment-based configuration with fail-fast validation.
Secrets (the auth JWT secret) are required and must not be hardcoded.
"""
from typing import List
from pydantic_settings import BaseSettings
from pydantic import field_validator


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str = "sqlite+aiosqlite:///./projectdesk.db"

    # Debug mode (verbose low-level logging)
    debug: bool = False

    # Follow-through mode (structured step-by-step execution tracing)
    follow_through: bool = False

    # Auth - tokens are issued by Supabase and verified locally
    supabase_jwt_secret: str = ""
    supabase_jwt_audience: str = "authenticated"

    # Mirror (secondary service). Empty URL disables mirroring.
    mirror_api_url: str = ""
    mirror_timeout: float = 30.0
    mirror_outbox_enabled: bool = True
    mirror_replay_attempts: int = 3
    mirror_backoff_min: float = 1.0
    mirror_backoff_max: float = 10.0
    outbox_max_attempts: int = 8
    outbox_backoff_seconds: int = 30

    # Template project whose configurator blocks other projects inherit
    master_project_title: str = "master"

    # File storage
    media_root: str = "./media"
    media_url: str = "/media"

    cors_origins: List[str] = ["*"]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @field_validator("supabase_jwt_secret", mode="before")
    @classmethod
    def validate_not_placeholder(cls, v: str) -> str:
        """Ensure secrets are not placeholder values."""
        if v and "your-" in v.lower():
            return ""
        return v

    @field_validator("mirror_api_url", mode="before")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return (v or "").rstrip("/")

    def validate_auth_config(self) -> None:
        """Validate that the token verification secret is set."""
        if not self.supabase_jwt_secret:
            raise ValueError(
                "SUPABASE_JWT_SECRET environment variable is required. "
                "Please set it in your .env file or environment."
            )

    @property
    def mirror_enabled(self) -> bool:
        return bool(self.mirror_api_url)

    def is_master_title(self, title: str) -> bool:
        """Whether a project title designates the master template project."""
        return (title or "").strip().lower() == self.master_project_title.lower()


# Global settings instance
settings = Settings()
