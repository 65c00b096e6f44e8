from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List

from athletyq_auth.core.errors import ConfigurationError


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""  # publishable (anon) key
    supabase_service_role_key: Optional[str] = None  # Required for inserts into profiles (bypasses RLS)

    # Signup / confirmation
    password_min_length: int = 6
    email_redirect_to: Optional[str] = None  # link target embedded in the confirmation email
    confirm_default_redirect: str = "/"
    allowed_redirect_hosts: str = ""  # comma separated; empty means same host only
    public_base_url: str = "http://localhost:3000"
    login_path: str = "/login"
    confirm_redirect_delay_seconds: float = 3.0

    # App
    app_name: str = "athletyq-auth"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000,http://127.0.0.1:5173"
    rate_limit_enabled: bool = True
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"
    signup_rate_limit: str = "10/minute"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    def get_allowed_redirect_hosts(self) -> List[str]:
        return [h.strip().lower() for h in self.allowed_redirect_hosts.split(",") if h.strip()]

    def missing_supabase_settings(self) -> List[str]:
        """Names of the provider credentials that are not set."""
        missing = []
        if not self.supabase_url:
            missing.append("SUPABASE_URL")
        if not self.supabase_key:
            missing.append("SUPABASE_KEY")
        if not self.supabase_service_role_key:
            missing.append("SUPABASE_SERVICE_ROLE_KEY")
        return missing

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",  # No prefix needed
        extra="ignore"
    )


def require_supabase_config(settings: Settings) -> Settings:
    """Fail fast when the provider cannot be reached with the given settings."""
    missing = settings.missing_supabase_settings()
    if missing:
        raise ConfigurationError(
            "Supabase configuration missing",
            details={"missing": missing},
        )
    return settings


settings = Settings()
