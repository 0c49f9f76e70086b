"""Application configuration."""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables."""

    directory_provider: Literal["mock", "supabase"] = "supabase"
    record_store: Literal["memory", "supabase"] = "supabase"
    auth_provider: Literal["mock", "supabase"] = "supabase"

    supabase_url: str | None = None
    supabase_service_role_key: str | None = None
    supabase_jwt_secret: str | None = None
    vendors_table: str = "vendors"

    claim_token_secret: str | None = None
    claim_token_issuer: str = "JulineMart"
    claim_token_ttl_hours: int = 12

    site_url: str = "https://sku-test.netlify.app"
    vendor_entry_path: str = "/vendor/index.html"

    require_admin_session: bool = False
    cors_origins: list[str] = ["*"]
    http_timeout_seconds: float = 30.0

    model_config = SettingsConfigDict(env_prefix="JULINEMART_", extra="ignore")

    @property
    def vendor_redirect_url(self) -> str:
        return f"{self.site_url.rstrip('/')}{self.vendor_entry_path}"

    @property
    def signing_secret(self) -> str | None:
        """Claim token secret, falling back to the service-role key."""
        return self.claim_token_secret or self.supabase_service_role_key


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
