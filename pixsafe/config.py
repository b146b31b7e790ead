from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional


class Settings(BaseSettings):
    # ==========================================================================
    # ENVIRONMENT
    # ==========================================================================
    environment: str = "dev"  # "dev", "prod"
    debug: bool = True

    # ==========================================================================
    # REMOTE REPORT STORE (Supabase / PostgREST)
    # ==========================================================================
    supabase_url: str = ""  # Empty = remote store disabled, local only
    supabase_key: str = ""
    supabase_table: str = "denuncias"
    remote_timeout: float = 5.0  # Seconds per remote call

    # ==========================================================================
    # LOCAL FALLBACK STORE
    # ==========================================================================
    database_url: str = "sqlite:///./pixsafe.db"

    # ==========================================================================
    # OVERRIDE FIXTURES
    # ==========================================================================
    seed_fixtures: bool = True  # Load the built-in demo fixtures
    overrides_file: Optional[str] = None  # JSON file with extra fixtures

    # ==========================================================================
    # API SECURITY
    # ==========================================================================
    api_token: str = ""  # Required in production, optional in dev
    api_token_header: str = "X-API-Key"

    # ==========================================================================
    # RATE LIMITING
    # ==========================================================================
    rate_limit_requests: int = 60  # Max requests per window
    rate_limit_window: int = 60  # Window in seconds (60 = per minute)

    # ==========================================================================
    # CORS
    # ==========================================================================
    cors_origins: str = "*"  # Comma-separated origins, or "*" for all

    # ==========================================================================
    # SCORING WEIGHTS
    # ==========================================================================
    report_weight: int = 10  # Points per organic report
    police_filing_weight: int = 25  # Extra points per report with a police filing

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="PIXSAFE_",
        extra="ignore",
    )

    # ==========================================================================
    # COMPUTED PROPERTIES
    # ==========================================================================

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "prod"

    @property
    def remote_enabled(self) -> bool:
        return bool(self.supabase_url)

    @property
    def cors_origins_list(self) -> List[str]:
        if self.cors_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",")]


settings = Settings()
