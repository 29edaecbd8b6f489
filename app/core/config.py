from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database settings
    database_url: str = "sqlite:///./deletion_requests.db"

    # Per-app secrets: JSON mapping of app_id -> {secret, name, slug}
    apps_config_path: str = "apps.json"

    # Legacy single-app fallback, ignored once apps_config_path defines apps
    fb_app_id: Optional[str] = None
    fb_app_secret: Optional[str] = None

    # Public URL settings
    route_prefix: str = "/fb_deletion"
    public_base_url: Optional[str] = None  # e.g. https://example.org, overrides the Host header
    default_host: str = "example.com"

    # CORS settings
    allowed_origins: list[str] = ["*"]

    # Rate limiting
    rate_limit: str = "60/minute"
    rate_limit_enabled: bool = True

    # Application settings
    app_name: str = "Data Deletion Callback"
    log_level: str = "INFO"
    debug: bool = False

    class Config:
        env_file = ".env"


settings = Settings()
