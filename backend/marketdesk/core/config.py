"""
Centralized application configuration
"""
from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings loaded from the environment or .env"""

    # API Settings
    API_TITLE: str = "MarketDesk API"
    API_VERSION: str = "1.0.0"
    API_DESCRIPTION: str = "Back-office API for the MarketDesk marketplace"
    LOG_LEVEL: str = "INFO"

    # Database (hosted Supabase Postgres)
    DATABASE_URL: str
    SUPABASE_URL: str
    SUPABASE_SERVICE_ROLE_KEY: str

    # Supabase Auth signs access tokens with this secret (HS256)
    SUPABASE_JWT_SECRET: str = ""

    # CORS - Can be string (comma-separated) or JSON array
    # Example: "http://localhost:3000,https://admin.example.com" or '["http://localhost:3000"]'
    ALLOWED_ORIGINS: Optional[str] = "http://localhost:3000"

    # Business rules
    DEFAULT_COMMISSION_RATE: float = 0.10

    # Machine clients send X-API-Key values starting with this prefix
    API_KEY_PREFIX: str = "mkd_"

    # Rate limits: requests per caller per window
    RATE_LIMIT_WINDOW_SECONDS: int = 60
    RATE_LIMIT_AUTHENTICATED: int = 600
    RATE_LIMIT_API_KEY: int = 100
    RATE_LIMIT_ANONYMOUS: int = 60
    # Dashboards aggregate whole tables in memory; counted in their own bucket
    RATE_LIMIT_REPORTS: int = 30

    def get_allowed_origins(self) -> List[str]:
        """Parse ALLOWED_ORIGINS string into list"""
        if not self.ALLOWED_ORIGINS:
            return ["http://localhost:3000"]

        # Try JSON parse first (for array format)
        import json
        try:
            origins = json.loads(self.ALLOWED_ORIGINS)
            if isinstance(origins, list):
                return origins
        except (json.JSONDecodeError, ValueError):
            pass

        # Fall back to comma-separated string
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",")]

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


settings = Settings()
