"""
Application configuration using Pydantic settings
"""

from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from harties.core.exceptions import ConfigurationError

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


class Settings(BaseSettings):
    """Application settings from environment variables"""

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Application
    app_name: str = "Harties Local"
    version: str = "1.0.0"
    environment: str = "development"
    debug: bool = False

    # Supabase (same variable names as the Next.js site)
    supabase_url: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("NEXT_PUBLIC_SUPABASE_URL", "SUPABASE_URL")
    )
    supabase_service_role_key: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("SUPABASE_SERVICE_ROLE_KEY")
    )
    supabase_anon_key: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("NEXT_PUBLIC_SUPABASE_ANON_KEY", "SUPABASE_ANON_KEY")
    )

    # Scraping
    http_timeout: float = 30.0
    user_agent: str = (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    )
    default_author_email: str = "mark.grey@example.com"
    default_article_url: str = (
        "https://www.news24.com/southafrica/debunking/"
        "durban-beach-clip-wrongly-shared-as-russian-tsunami-disaster-20250802-0307"
    )
    seed_config_dir: Path = PROJECT_ROOT / "configs" / "seed"

    # Web access control
    auth_cookie_name: str = "sb-access-token"
    protected_paths: List[str] = ["/admin", "/profile", "/dashboard"]
    admin_paths: List[str] = ["/admin"]
    admin_roles: List[str] = ["admin", "editor"]
    rate_limit: str = "10/minute"

    # Logging
    log_level: str = "INFO"

    def require_supabase(self) -> None:
        """Fail fast when the service credentials are not configured"""
        missing = []
        if not self.supabase_url:
            missing.append("NEXT_PUBLIC_SUPABASE_URL")
        if not self.supabase_service_role_key:
            missing.append("SUPABASE_SERVICE_ROLE_KEY")
        if missing:
            raise ConfigurationError(f"Missing required environment variables: {', '.join(missing)}")


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
