"""
Application settings loaded from environment variables.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "Auth Service"
    environment: str = "development"   # development | test | production

    # ── Security Secrets ──────────────────────────────────────────────────
    jwt_secret: str = ""                 # HMAC secret for auth tokens
    jwt_expiry_seconds: int = 86400      # 24 hours
    bcrypt_rounds: int = 12              # bcrypt work factor

    # ── Database ─────────────────────────────────────────────────────────
    database_url: str = "sqlite+aiosqlite:///./auth.db"

    # ── Server ───────────────────────────────────────────────────────────
    api_prefix: str = "/api"
    port: int = 8000
    host: str = "0.0.0.0"
    debug: bool = False
    cors_origins: list = ["*"]

    model_config = {
        "env_file": ".env",
        "case_sensitive": False,
    }

    @property
    def is_development(self) -> bool:
        """True for environments where insecure fallbacks are tolerated."""
        return self.environment.lower() in ("development", "dev", "local", "test")


config = Settings()
